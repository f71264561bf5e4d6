from datetime import datetime

import pytest

from nlu import NLUPipeline
from nlu.models import BillingPeriod, Intent, Language, RecordKind
from nlu.pipeline import detect_billing_period


@pytest.fixture
def pipeline():
    return NLUPipeline()


def test_subscription_message(pipeline, now):
    result = pipeline.process("Добавь Netflix 10000 вон 12 числа", now=now)

    assert result.intent.intent == Intent.SUBSCRIPTION_ADD
    assert result.lang == Language.RU
    assert result.slots.amount == 10000.0
    assert result.slots.currency_code == "WON"
    assert result.slots.title == "netflix"
    assert result.slots.subscription_date.date == datetime(2024, 4, 12)
    assert result.slots.subscription_date.recurrence_label == "Каждый 12 числа"


def test_expense_message(pipeline, now):
    result = pipeline.process("Расход 12000 вон кафе сегодня", now=now)

    assert result.intent.intent == Intent.EXPENSE_ADD
    assert result.slots.amount == 12000.0
    assert result.slots.title == "кафе"
    assert result.slots.transaction_date == datetime(2024, 3, 20)


def test_korean_message(pipeline, now):
    result = pipeline.process("넷플릭스 10000원 추가", now=now)

    assert result.lang == Language.KO
    assert result.intent.intent == Intent.SUBSCRIPTION_ADD
    assert result.slots.amount == 10000.0
    assert result.slots.title == "넷플릭스"


def test_yearly_subscription(pipeline, now):
    result = pipeline.process("Подписка YouTube 14900 вон в год", now=now)

    assert result.slots.billing_period == BillingPeriod.YEARLY
    assert result.slots.subscription_date.recurrence_label == "Каждый год, 1 апреля"
    assert result.slots.title == "youtube"


def test_slots_for_known_kind(pipeline, now):
    slots = pipeline.extract_slots_for_kind(
        "KT 15 числа 12000 рублей", RecordKind.SUBSCRIPTION, Language.RU, now=now
    )
    assert slots.amount == 12000.0
    assert slots.currency_code == "RUB"

    slots = pipeline.extract_slots_for_kind(
        "KT 15 числа 12000 рублей", RecordKind.EXPENSE, Language.RU, now=now
    )
    assert slots.amount == 15.0


def test_slots_to_dict(pipeline, now):
    data = pipeline.process("Расход 12000 вон кафе сегодня", now=now).slots.to_dict()

    assert data["currencySymbol"] == "₩"
    assert data["billingPeriod"] == "monthly"
    assert data["transactionDate"] == "2024-03-20T00:00:00"


def test_empty_message(pipeline, now):
    result = pipeline.process("", now=now)

    assert result.intent.intent == Intent.UNKNOWN
    assert result.slots.amount is None
    assert result.slots.title == ""


def test_detect_billing_period():
    assert detect_billing_period("14900 вон в год") == BillingPeriod.YEARLY
    assert detect_billing_period("yearly plan") == BillingPeriod.YEARLY
    assert detect_billing_period("10000 вон") == BillingPeriod.MONTHLY
