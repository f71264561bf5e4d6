from dataclasses import dataclass
from typing import Optional

from config.constants import DEFAULT_PENDING_TTL_MINUTES


@dataclass
class Config:
    """Конфигурация приложения из переменных окружения"""
    # Секреты
    BOT_TOKEN: str
    OPENAI_API_KEY: Optional[str]
    WEBAPP_URL: Optional[str]

    # Распознавание голоса
    TRANSCRIPTION_MODEL: str = "whisper-1"

    # Настройки логирования
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/bot.log"

    # Лимиты запросов
    MAX_REQUESTS_PER_HOUR: int = 200
    MAX_REQUESTS_PER_MINUTE: int = 20

    # База данных
    DB_PATH: str = "db/finance.db"

    # Незавершённые диалоги
    PENDING_TTL_MINUTES: int = DEFAULT_PENDING_TTL_MINUTES


def load_config() -> Config:
    """
    Загрузка конфигурации из переменных окружения

    Returns:
        Config: Объект конфигурации

    Raises:
        ValueError: Если не найдена обязательная переменная
    """
    import os
    from dotenv import load_dotenv

    load_dotenv()

    bot_token = os.getenv("BOT_TOKEN")
    if not bot_token:
        raise ValueError("BOT_TOKEN is required but not found in environment variables")

    return Config(
        BOT_TOKEN=bot_token,
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY") or None,
        WEBAPP_URL=os.getenv("WEBAPP_URL") or None,
        TRANSCRIPTION_MODEL=os.getenv("TRANSCRIPTION_MODEL", "whisper-1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        LOG_FILE=os.getenv("LOG_FILE", "logs/bot.log"),
        MAX_REQUESTS_PER_HOUR=int(os.getenv("MAX_REQUESTS_PER_HOUR", "200")),
        MAX_REQUESTS_PER_MINUTE=int(os.getenv("MAX_REQUESTS_PER_MINUTE", "20")),
        DB_PATH=os.getenv("DB_PATH", "db/finance.db"),
        PENDING_TTL_MINUTES=int(
            os.getenv("PENDING_TTL_MINUTES", str(DEFAULT_PENDING_TTL_MINUTES))
        ),
    )
