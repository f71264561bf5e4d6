"""Context models for multi-turn clarification dialogues."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from .intents import RecordKind


class PendingKind(Enum):
    """
    Состояние незавершённого диалога.

    Отсутствие PendingConversation для чата означает состояние idle.
    """
    AWAITING_ADD_NAME = "awaiting_add_name"
    AWAITING_ADD_COST = "awaiting_add_cost"
    AWAITING_ADD_DATE = "awaiting_add_date"
    AWAITING_TYPE_CHOICE = "awaiting_type_choice"
    AWAITING_REMOVAL_CHOICE = "awaiting_removal_choice"


@dataclass(frozen=True)
class RemovalCandidate:
    """Запись-кандидат на удаление."""
    id: str
    display_name: str


@dataclass(frozen=True)
class PendingConversation:
    """
    Незавершённый диалог одного чата.

    Attributes:
        chat_id: Идентификатор чата
        kind: Текущее состояние
        payload: Частично собранная запись (имя, стоимость, валюта, исходный текст)
        record_kind: Тип записи (для выбора удаляемой записи)
        candidates: Пронумерованный список кандидатов на удаление
        created_at: Время создания
        updated_at: Время последнего хода (от него отсчитывается TTL)
    """
    chat_id: int
    kind: PendingKind
    payload: Dict[str, Any] = field(default_factory=dict)
    record_kind: Optional[RecordKind] = None
    candidates: List[RemovalCandidate] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    @property
    def last_activity(self) -> datetime:
        return self.updated_at or self.created_at

    def is_expired(self, ttl: timedelta, now: Optional[datetime] = None) -> bool:
        """Проверить, истёк ли срок жизни диалога."""
        now = now or datetime.now()
        return now - self.last_activity > ttl

    def advance(
        self,
        kind: PendingKind,
        now: Optional[datetime] = None,
        **payload: Any,
    ) -> "PendingConversation":
        """Перейти в новое состояние, дополнив payload."""
        merged = dict(self.payload)
        merged.update(payload)
        return replace(self, kind=kind, payload=merged, updated_at=now or datetime.now())
