from types import SimpleNamespace

from aiogram.exceptions import TelegramNetworkError
from aiogram.methods import GetFile

from config.messages import COMMAND_MESSAGES, ERROR_MESSAGES
from handlers.voice import voice_handler
from nlu.models import RecordKind
from services import Transcriber, TranscriptionError


class FakeMessage:
    def __init__(self):
        self.from_user = SimpleNamespace(id=7)
        self.chat = SimpleNamespace(id=7)
        self.voice = SimpleNamespace(file_id="voice-1", duration=3)
        self.answers = []

    async def answer(self, text, **kwargs):
        self.answers.append(text)


class FakeBot:
    def __init__(self, error=None):
        self.error = error

    async def download(self, file, destination):
        if self.error:
            raise self.error
        destination.write(b"ogg")


class FakeTranscriber(Transcriber):
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.received = None

    async def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        self.received = audio
        if self.error:
            raise self.error
        return self.text


async def test_transcript_goes_through_dialogue(dialogue, storage):
    message = FakeMessage()
    transcriber = FakeTranscriber(text="Расход 12000 вон кафе сегодня")

    await voice_handler(message, bot=FakeBot(), dialogue=dialogue, transcriber=transcriber)

    assert transcriber.received == b"ogg"
    assert storage.records[RecordKind.EXPENSE][0]["title"] == "Кафе"
    assert "Кафе" in message.answers[0]


async def test_without_transcriber(dialogue):
    message = FakeMessage()

    await voice_handler(message, bot=FakeBot(), dialogue=dialogue, transcriber=None)

    assert message.answers == [COMMAND_MESSAGES['voice_unavailable']]


async def test_transcription_error(dialogue):
    message = FakeMessage()
    transcriber = FakeTranscriber(error=TranscriptionError("empty"))

    await voice_handler(message, bot=FakeBot(), dialogue=dialogue, transcriber=transcriber)

    assert message.answers == [ERROR_MESSAGES['transcription_failed']]


async def test_download_error_is_answered(dialogue, storage):
    message = FakeMessage()
    bot = FakeBot(error=TelegramNetworkError(method=GetFile(file_id="voice-1"), message="timeout"))
    transcriber = FakeTranscriber(text="Расход 12000 вон кафе сегодня")

    await voice_handler(message, bot=bot, dialogue=dialogue, transcriber=transcriber)

    assert message.answers == [ERROR_MESSAGES['unexpected']]
    assert transcriber.received is None
    assert storage.records[RecordKind.EXPENSE] == []
