"""Intent models for NLU."""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class Language(Enum):
    """Язык сообщения, определяемый по письменности."""
    RU = "ru"
    EN = "en"
    KO = "ko"


class RecordKind(Enum):
    """Тип финансовой записи."""
    SUBSCRIPTION = "subscription"
    EXPENSE = "expense"
    INCOME = "income"


class Intent(Enum):
    """
    Перечисление возможных намерений пользователя.

    Attributes:
        REMOVE: Удаление без указания типа (исторически - подписка по имени)
        ADD: Добавление без указания типа (исторически - подписка)
        ADD_AMBIGUOUS: Похоже на сумму, но тип записи непонятен
    """
    START = "start"
    HELP = "help"
    CANCEL = "cancel"
    SUBSCRIPTION_LIST = "subscription_list"
    EXPENSE_LIST = "expense_list"
    INCOME_LIST = "income_list"
    SUBSCRIPTION_REMOVE = "subscription_remove"
    EXPENSE_REMOVE = "expense_remove"
    INCOME_REMOVE = "income_remove"
    REMOVE = "remove"
    EXPENSE_ADD = "expense_add"
    INCOME_ADD = "income_add"
    SUBSCRIPTION_ADD = "subscription_add"
    ADD = "add"
    GREET = "greet"
    ADD_AMBIGUOUS = "add_ambiguous"
    UNKNOWN = "unknown"

    @classmethod
    def record_kind(cls, intent: "Intent") -> Optional[RecordKind]:
        """Тип записи, к которому относится намерение (если есть)."""
        return _INTENT_KINDS.get(intent)

    @classmethod
    def is_list(cls, intent: "Intent") -> bool:
        return intent in {cls.SUBSCRIPTION_LIST, cls.EXPENSE_LIST, cls.INCOME_LIST}

    @classmethod
    def is_remove(cls, intent: "Intent") -> bool:
        return intent in {
            cls.SUBSCRIPTION_REMOVE, cls.EXPENSE_REMOVE, cls.INCOME_REMOVE, cls.REMOVE,
        }

    @classmethod
    def is_add(cls, intent: "Intent") -> bool:
        return intent in {cls.EXPENSE_ADD, cls.INCOME_ADD, cls.SUBSCRIPTION_ADD, cls.ADD}


_INTENT_KINDS = {
    Intent.SUBSCRIPTION_LIST: RecordKind.SUBSCRIPTION,
    Intent.SUBSCRIPTION_REMOVE: RecordKind.SUBSCRIPTION,
    Intent.SUBSCRIPTION_ADD: RecordKind.SUBSCRIPTION,
    Intent.REMOVE: RecordKind.SUBSCRIPTION,
    Intent.ADD: RecordKind.SUBSCRIPTION,
    Intent.EXPENSE_LIST: RecordKind.EXPENSE,
    Intent.EXPENSE_REMOVE: RecordKind.EXPENSE,
    Intent.EXPENSE_ADD: RecordKind.EXPENSE,
    Intent.INCOME_LIST: RecordKind.INCOME,
    Intent.INCOME_REMOVE: RecordKind.INCOME,
    Intent.INCOME_ADD: RecordKind.INCOME,
}

@dataclass(frozen=True)
class IntentResult:
    """
    Результат классификации намерения.

    Attributes:
        intent: Определённое намерение
        confidence: Эвристический вес правила (0.0 - 1.0)
        lang: Язык сообщения
    """
    intent: Intent
    confidence: float
    lang: Language = Language.EN
