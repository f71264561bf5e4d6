"""
Context Manager - хранилище незавершённых диалогов.

Одна PendingConversation на чат, с TTL по времени последнего хода.
Истечение проверяется лениво при чтении; фоновая очистка только
освобождает память и на наблюдаемое поведение не влияет.

Хранилище в памяти процесса годится для одного экземпляра бота.
Несколько экземпляров должны разделять общее хранилище (реализацию
PendingStore поверх внешнего кэша), иначе ход диалога потеряется.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from config.constants import DEFAULT_PENDING_TTL_MINUTES
from nlu.models import PendingConversation
from utils.logger import setup_logger

logger = setup_logger(name="context_manager", level=logging.INFO)

Clock = Callable[[], datetime]


class PendingStore(ABC):
    """Хранилище состояния диалога, ключ - идентификатор чата."""

    @abstractmethod
    async def get(self, chat_id: int) -> Optional[PendingConversation]:
        """Текущий незавершённый диалог или None (idle или истёк TTL)."""

    @abstractmethod
    async def set(self, conversation: PendingConversation) -> None:
        """Сохранить состояние диалога."""

    @abstractmethod
    async def delete(self, chat_id: int) -> None:
        """Завершить диалог (возврат в idle)."""

    @abstractmethod
    def lock(self, chat_id: int) -> asyncio.Lock:
        """Блокировка, сериализующая ходы одного чата."""


class InMemoryPendingStore(PendingStore):
    """
    Хранилище незавершённых диалогов в памяти процесса.

    Блокировки заводятся на каждый чат отдельно, разные чаты
    друг друга не ждут.
    """

    def __init__(
        self,
        ttl_minutes: int = DEFAULT_PENDING_TTL_MINUTES,
        cleanup_interval_minutes: int = 5,
        clock: Optional[Clock] = None,
    ):
        self.ttl = timedelta(minutes=ttl_minutes)
        self.cleanup_interval = timedelta(minutes=cleanup_interval_minutes)
        self._clock = clock or datetime.now

        self._items: Dict[int, PendingConversation] = {}
        self._locks: Dict[int, asyncio.Lock] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._items)

    async def get(self, chat_id: int) -> Optional[PendingConversation]:
        conversation = self._items.get(chat_id)
        if conversation is None:
            return None
        if conversation.is_expired(self.ttl, now=self._clock()):
            del self._items[chat_id]
            logger.debug(f"Pending conversation expired for chat {chat_id}")
            return None
        return conversation

    async def set(self, conversation: PendingConversation) -> None:
        self._items[conversation.chat_id] = conversation

    async def delete(self, chat_id: int) -> None:
        self._items.pop(chat_id, None)

    def lock(self, chat_id: int) -> asyncio.Lock:
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock

    def start_cleanup(self):
        """Запустить фоновую очистку устаревших диалогов."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def close(self):
        """Остановить фоновую очистку."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
        logger.info("PendingStore закрыт")

    async def _cleanup_loop(self):
        """Фоновая задача для периодической очистки."""
        while True:
            try:
                await asyncio.sleep(self.cleanup_interval.total_seconds())
                self.cleanup_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Ошибка в cleanup loop: {e}")

    def cleanup_expired(self) -> int:
        """Удалить истёкшие диалоги и неиспользуемые блокировки."""
        now = self._clock()
        expired = [
            chat_id for chat_id, conversation in self._items.items()
            if conversation.is_expired(self.ttl, now=now)
        ]
        for chat_id in expired:
            del self._items[chat_id]

        for chat_id in list(self._locks):
            if chat_id not in self._items and not self._locks[chat_id].locked():
                del self._locks[chat_id]

        if expired:
            logger.debug(f"Очищено {len(expired)} устаревших диалогов")
        return len(expired)
