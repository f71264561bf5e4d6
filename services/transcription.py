"""
Transcription - расшифровка голосовых сообщений.

Ядро получает только готовый текст, об аудио оно ничего не знает.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from utils.logger import setup_logger

logger = setup_logger(name="transcription", level=logging.INFO)


class TranscriptionError(Exception):
    """Не удалось получить текст из аудио."""


class Transcriber(ABC):
    """Абстрактный сервис распознавания речи."""

    @abstractmethod
    async def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        """Расшифровать аудио в текст."""
        pass

    async def close(self):
        pass


class WhisperTranscriber(Transcriber):
    """
    Распознавание речи через OpenAI Whisper.

    Язык не фиксируется: сообщения бывают на русском, английском и корейском.
    """

    DEFAULT_MODEL = "whisper-1"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.timeout = timeout
        self._client: Optional[AsyncOpenAI] = None

    async def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=2,
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.close()
            self._client = None

    async def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        """
        Расшифровать голосовое сообщение.

        Raises:
            TranscriptionError: пустое аудио, ошибка API или пустая расшифровка
        """
        if not audio:
            raise TranscriptionError("Пустое аудио")

        client = await self._get_client()
        try:
            result = await client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio),
            )
        except OpenAIError as e:
            logger.error(f"Ошибка Whisper: {type(e).__name__}")
            raise TranscriptionError("Сервис распознавания недоступен") from e

        text = (getattr(result, "text", "") or "").strip()
        if not text:
            raise TranscriptionError("Пустая расшифровка")

        logger.info(f"Расшифровано голосовое сообщение ({len(audio)} байт)")
        return text
