import io

from aiogram import Bot, Dispatcher, F
from aiogram.types import Message
from config.messages import COMMAND_MESSAGES
from nlu.dialogue import DialogueManager
from services.transcription import Transcriber, TranscriptionError
from utils.logger import setup_logger
from utils.error_handler import ErrorHandler
from utils.metrics import track_operation
from .messages import answer_with_dialogue

logger = setup_logger(name="voice_logger", level="INFO")


def register_voice_handlers(dp: Dispatcher):

    dp.message.register(voice_handler, F.voice)


@track_operation("voice_message")
async def voice_handler(
    message: Message,
    bot: Bot,
    dialogue: DialogueManager,
    transcriber: Transcriber | None = None,
    **kwargs
):
    """Голосовое сообщение: расшифровка и тот же путь, что у текста"""
    if transcriber is None:
        await message.answer(COMMAND_MESSAGES['voice_unavailable'])
        return

    try:
        buffer = io.BytesIO()
        await bot.download(message.voice, destination=buffer)
        text = await transcriber.transcribe(buffer.getvalue())
    except TranscriptionError as e:
        await ErrorHandler.handle_transcription_error(message, e)
        return
    except Exception as e:
        await ErrorHandler.handle_unexpected_error(message, e, "voice_download")
        return

    logger.info(f"User {message.from_user.id}: voice transcribed ({message.voice.duration}s)")

    try:
        await answer_with_dialogue(message, dialogue, text)
    except Exception as e:
        await ErrorHandler.handle_unexpected_error(message, e, "voice_message")
