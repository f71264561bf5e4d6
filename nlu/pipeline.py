"""
NLU Pipeline - основной пайплайн обработки сообщений.

Нормализация -> определение языка -> классификация намерения -> слоты.
Все этапы чистые: пайплайн не обращается ни к сети, ни к диску.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from nlu.models import (
    BillingPeriod,
    Intent,
    IntentResult,
    Language,
    RecordKind,
    Slots,
)
from nlu.classifiers import RuleBasedIntentClassifier
from nlu.extractors import (
    detect_currency,
    extract_category,
    extract_cost,
    extract_subscription_cost,
    extract_title_generic,
    parse_date_enhanced,
    parse_transaction_date,
)
from nlu.normalizer import detect_language, normalize
from nlu import vocabulary as vocab
from utils.logger import setup_logger

logger = setup_logger(name="nlu_pipeline", level=logging.INFO)


@dataclass(frozen=True)
class NLUResult:
    """
    Результат обработки сообщения NLU пайплайном.
    """
    normalized: str
    intent: IntentResult
    slots: Slots

    @property
    def lang(self) -> Language:
        return self.intent.lang


def detect_billing_period(text: str) -> BillingPeriod:
    """Годовая оплата, если в тексте есть маркер "в год"/"yearly"/"연간"."""
    if vocab.contains_any((text or "").lower(), vocab.YEARLY_MARKERS):
        return BillingPeriod.YEARLY
    return BillingPeriod.MONTHLY


class NLUPipeline:
    """
    Главный пайплайн обработки естественного языка.

    Использует:
    - Нормализатор и определитель языка
    - Rule-based классификатор намерений
    - Извлекатели слотов (сумма, валюта, даты, название, категория)
    """

    def __init__(self, classifier: Optional[RuleBasedIntentClassifier] = None):
        self.intent_classifier = classifier or RuleBasedIntentClassifier()

    def process(self, raw: str, now: Optional[datetime] = None) -> NLUResult:
        """
        Обработать сообщение пользователя.

        Args:
            raw: Исходный текст сообщения (или расшифровка голосового)
            now: Текущее время (для дат), по умолчанию datetime.now()

        Returns:
            NLUResult с нормализованным текстом, намерением и слотами
        """
        lang = detect_language(raw or "")
        text = normalize(raw or "")
        intent_result = self.intent_classifier.classify(text, lang)
        slots = self.extract_slots(text, intent_result, now=now)

        logger.debug(
            f"NLU: intent={intent_result.intent.value} "
            f"confidence={intent_result.confidence} lang={lang.value}"
        )
        return NLUResult(normalized=text, intent=intent_result, slots=slots)

    def extract_slots(
        self,
        text: str,
        intent_result: IntentResult,
        now: Optional[datetime] = None,
    ) -> Slots:
        """
        Извлечь слоты из нормализованного текста.

        Стоимость подписки ищется рядом с валютой, сумма расхода или
        дохода - первое число в тексте.
        """
        text = text or ""
        kind = Intent.record_kind(intent_result.intent)
        return self.extract_slots_for_kind(text, kind, intent_result.lang, now=now)

    def extract_slots_for_kind(
        self,
        text: str,
        kind: Optional[RecordKind],
        lang: Language = Language.EN,
        now: Optional[datetime] = None,
    ) -> Slots:
        """Извлечь слоты, когда тип записи уже известен (например, после уточнения)."""
        billing_period = detect_billing_period(text)

        if kind == RecordKind.SUBSCRIPTION:
            amount = extract_subscription_cost(text)
        else:
            amount = extract_cost(text)

        category = extract_category(text, lang)
        return Slots(
            amount=amount,
            currency=detect_currency(text),
            billing_period=billing_period,
            subscription_date=parse_date_enhanced(text, billing_period, now=now),
            transaction_date=parse_transaction_date(text, now=now),
            title=extract_title_generic(text, category),
            category=category,
        )
