"""
Интерфейс хранилища финансовых записей.

NLU-ядро обращается к хранилищу только через эти четыре операции.
Любой сбой бэкенда реализация оборачивает в StorageError.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from nlu.models import RecordKind, RemovalCandidate

Record = Dict[str, Any]


class StorageError(Exception):
    """Сбой хранилища при чтении или записи."""


class FinanceStorage(ABC):
    """Хранилище подписок, расходов и доходов, разделённых по чатам."""

    @abstractmethod
    async def lookup_candidates(
        self, chat_id: int, kind: RecordKind, query: str
    ) -> List[RemovalCandidate]:
        """
        Записи, чьё название содержит запрос или содержится в нём
        (без учёта регистра).
        """

    @abstractmethod
    async def commit_record(self, chat_id: int, kind: RecordKind, fields: Record) -> str:
        """Создать запись, вернуть её идентификатор."""

    @abstractmethod
    async def delete_record(self, chat_id: int, kind: RecordKind, record_id: str) -> None:
        """Удалить запись."""

    @abstractmethod
    async def list_records(self, chat_id: int, kind: RecordKind) -> List[Record]:
        """Все записи чата данного типа."""

    async def close(self) -> None:
        """Освободить ресурсы (если есть)."""


def matches_query(name: str, query: str) -> bool:
    """Совпадение по вхождению подстроки в любую сторону, без учёта регистра."""
    name = (name or "").casefold().strip()
    query = (query or "").casefold().strip()
    if not name or not query:
        return False
    return query in name or name in query
