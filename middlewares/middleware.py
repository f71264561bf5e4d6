from aiogram.types import Message, TelegramObject
from typing import Callable, Awaitable, Dict, Any, List, Optional
from aiogram.dispatcher.middlewares.base import BaseMiddleware
from collections import defaultdict
from datetime import datetime, timedelta
from config.config import Config
from config.messages import ERROR_MESSAGES
from utils.logger import setup_logger

logger = setup_logger(name="middleware", level="INFO")

class RateLimitMiddleware(BaseMiddleware):
    """
    Ограничение частоты запросов пользователя (окна в час и в минуту).

    В журнал пишется только тип события, не его содержимое.
    """

    def __init__(self, config: Config, clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self.clock = clock
        self.user_requests: Dict[int, List[datetime]] = defaultdict(list)

    async def __call__(self, handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]], event: TelegramObject, data: Dict[str, Any]) -> Any:

        user_id = self._get_user_id(event)

        if not user_id:
            return await handler(event, data)

        if not self.check_rate_limit(user_id):
            logger.warning(f"Пользователь {user_id} превысил лимит запросов")
            await self._send_rate_limit_message(event)
            return None
        self._log_request(event, user_id)

        return await handler(event, data)

    def _get_user_id(self, event: TelegramObject) -> Optional[int]:
        if hasattr(event, 'from_user') and event.from_user:
            return event.from_user.id
        return None

    def _log_request(self, event: TelegramObject, user_id: int):
        if isinstance(event, Message):
            content = event.content_type
            logger.info(f"User {user_id} sent a message ({content})")
        else:
            logger.info(f"User {user_id} triggered an event: {event.__class__.__name__}")

    def check_rate_limit(self, user_id: int) -> bool:
        """True, если запрос укладывается в лимиты (и учтён)"""
        now = self.clock()

        user_requests = self.user_requests[user_id]
        user_requests[:] = [req_time for req_time in user_requests
                           if now - req_time < timedelta(hours=1)]

        if len(user_requests) >= self.config.MAX_REQUESTS_PER_HOUR:
            return False

        minute_requests = [req_time for req_time in user_requests
                           if now - req_time < timedelta(minutes=1)]

        if len(minute_requests) >= self.config.MAX_REQUESTS_PER_MINUTE:
            return False

        user_requests.append(now)
        return True

    async def _send_rate_limit_message(self, event: TelegramObject):
        if isinstance(event, Message):
            await event.answer(ERROR_MESSAGES['rate_limited'])
