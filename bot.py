from aiogram import Bot, Dispatcher
from config.config import Config, load_config
from typing import Optional, Tuple
from aiogram.enums.parse_mode import ParseMode
from aiogram.client.default import DefaultBotProperties
from database import SQLiteFinanceStorage
from middlewares import RateLimitMiddleware
from handlers import register_handlers
from nlu.context_manager import InMemoryPendingStore
from nlu.dialogue import DialogueManager
from services.transcription import WhisperTranscriber


def create_bot(config: Optional[Config] = None) -> Tuple[Bot, Dispatcher]:
    """
    Сборка бота: хранилище, состояние диалогов, распознавание речи, обработчики.

    Зависимости кладутся в workflow data диспетчера и попадают
    в обработчики по имени аргумента.
    """
    config = config or load_config()

    bot = Bot(token=config.BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()
    dp.message.middleware(RateLimitMiddleware(config))

    storage = SQLiteFinanceStorage(config.DB_PATH)
    pending = InMemoryPendingStore(ttl_minutes=config.PENDING_TTL_MINUTES)
    transcriber = (
        WhisperTranscriber(config.OPENAI_API_KEY, model=config.TRANSCRIPTION_MODEL)
        if config.OPENAI_API_KEY else None
    )

    dp["config"] = config
    dp["storage"] = storage
    dp["pending"] = pending
    dp["dialogue"] = DialogueManager(storage, pending)
    dp["transcriber"] = transcriber

    register_handlers(dp)

    return bot, dp
