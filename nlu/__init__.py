"""
NLU (Natural Language Understanding) модуль.

Обеспечивает понимание пользовательских сообщений:
- Нормализация текста и определение языка
- Классификация намерений (intents)
- Извлечение слотов (сумма, валюта, даты, название, категория)
- Уточняющий диалог с коротким состоянием на чат
"""

from .models import (
    Intent,
    IntentResult,
    Language,
    RecordKind,
    Slots,
    PendingConversation,
    PendingKind,
)
from .normalizer import normalize, detect_language
from .pipeline import NLUPipeline, NLUResult
from .context_manager import PendingStore, InMemoryPendingStore

__all__ = [
    # Models
    "Intent",
    "IntentResult",
    "Language",
    "RecordKind",
    "Slots",
    "PendingConversation",
    "PendingKind",
    # Pipeline
    "normalize",
    "detect_language",
    "NLUPipeline",
    "NLUResult",
    "PendingStore",
    "InMemoryPendingStore",
]
