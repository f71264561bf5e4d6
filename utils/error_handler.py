"""
Централизованная обработка ошибок для бота

Текст сообщений пользователя в журнал не пишется: только id и тип ошибки.
"""

from typing import Optional, Dict, Any
from aiogram.types import Message
from utils.logger import setup_logger
from config.messages import ERROR_MESSAGES, EMOJI

logger = setup_logger(name="error_handler", level="ERROR")

class ErrorHandler:
    """Класс для централизованной обработки ошибок"""

    @staticmethod
    async def handle_transcription_error(message: Message, error: Exception):
        """Обработка ошибок распознавания голоса"""
        logger.error(f"Transcription error for user {message.from_user.id}: {type(error).__name__}: {error}")
        await message.answer(ERROR_MESSAGES['transcription_failed'])

    @staticmethod
    async def handle_validation_error(message: Message, error_message: str):
        """Обработка ошибок валидации"""
        await message.answer(f"{EMOJI['warning']} {error_message}")

    @staticmethod
    async def handle_unexpected_error(message: Message, error: Exception, context: str):
        """Неожиданная ошибка обработчика: лог и общий ответ"""
        ErrorHandler.log_unexpected_error(context, error, {"user_id": message.from_user.id})
        await message.answer(ERROR_MESSAGES['unexpected'])

    @staticmethod
    def log_unexpected_error(context: str, error: Exception, user_data: Optional[Dict[str, Any]] = None):
        """Логирование неожиданных ошибок"""
        log_message = f"Unexpected error in {context}: {type(error).__name__}"
        if user_data:
            log_message += f" | User data: {user_data}"
        logger.error(log_message, exc_info=True)
