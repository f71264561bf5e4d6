"""NLU Models - dataclasses для работы с NLU."""

from .intents import Intent, IntentResult, Language, RecordKind
from .slots import BillingPeriod, Currency, SubscriptionDate, Slots
from .context import PendingConversation, PendingKind, RemovalCandidate

__all__ = [
    "Intent",
    "IntentResult",
    "Language",
    "RecordKind",
    "BillingPeriod",
    "Currency",
    "SubscriptionDate",
    "Slots",
    "PendingConversation",
    "PendingKind",
    "RemovalCandidate",
]
