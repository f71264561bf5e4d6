from datetime import datetime

from handlers.formatting import format_amount, format_date, render_reply
from nlu.dialogue import DialogueReply
from nlu.models import RecordKind, RemovalCandidate


def test_format_amount():
    assert format_amount(12000.0) == "12 000"
    assert format_amount(1234567) == "1 234 567"
    assert format_amount(9.99) == "9.99"
    assert format_amount(None) == "-"


def test_format_date():
    assert format_date(datetime(2024, 3, 20)) == "20.03.2024"
    assert format_date("2024-04-12T00:00:00") == "12.04.2024"
    assert format_date(None) == "-"


def test_added_subscription():
    reply = DialogueReply(
        "added_subscription",
        params={
            "name": "Netflix",
            "cost": 10000.0,
            "currency_symbol": "₩",
            "recurrence_label": "Каждый 12 числа",
            "next_payment_date": datetime(2024, 4, 12),
        },
        kind=RecordKind.SUBSCRIPTION,
    )
    text = render_reply(reply)

    assert "Netflix - 10 000 ₩" in text
    assert "Каждый 12 числа, следующий платёж 12.04.2024" in text


def test_added_expense():
    reply = DialogueReply(
        "added_expense",
        params={"title": "Кафе", "amount": 12000.0, "currency_symbol": "₩", "spent_at": datetime(2024, 3, 20)},
        kind=RecordKind.EXPENSE,
    )
    assert "Кафе - 12 000 ₩ (20.03.2024)" in render_reply(reply)


def test_user_text_is_escaped():
    reply = DialogueReply("removed", params={"name": "<b>x</b>"}, kind=RecordKind.SUBSCRIPTION)
    text = render_reply(reply)

    assert "&lt;b&gt;x&lt;/b&gt;" in text
    assert "<b>" not in text


def test_list():
    reply = DialogueReply(
        "list",
        kind=RecordKind.SUBSCRIPTION,
        records=[{
            "name": "Netflix",
            "cost": 10000.0,
            "currency_symbol": "₩",
            "recurrence_label": "Каждый 12 числа",
            "category": "Общие",
        }],
    )
    text = render_reply(reply)

    assert text.startswith("🔁 Подписки:")
    assert "1. Netflix - 10 000 ₩ (Каждый 12 числа, Общие)" in text


def test_list_empty():
    text = render_reply(DialogueReply("list_empty", kind=RecordKind.EXPENSE))
    assert "нет расходов" in text


def test_removal_choice():
    reply = DialogueReply(
        "ask_removal_choice",
        kind=RecordKind.SUBSCRIPTION,
        candidates=[RemovalCandidate("1", "Netflix"), RemovalCandidate("2", "Netflix Kids")],
    )
    text = render_reply(reply)

    assert "1. Netflix\n2. Netflix Kids" in text


def test_validation_errors():
    reply = DialogueReply("validation_failed", params={"errors": ["Название слишком короткое"]})
    assert "• Название слишком короткое" in render_reply(reply)


def test_type_choice():
    reply = DialogueReply(
        "ask_type_choice", params={"title": "Кофе", "amount": 5000.0, "currency_symbol": "₩"}
    )
    text = render_reply(reply)

    assert "«Кофе», 5 000 ₩" in text
    assert "3. Подписка" in text


def test_missing_amount_has_example():
    reply = DialogueReply("missing_amount", params={"title": "Кафе"}, kind=RecordKind.EXPENSE)
    text = render_reply(reply)

    assert "«Кафе»" in text
    assert "Расход 12000 вон кафе сегодня" in text


def test_unknown_key_falls_back():
    assert render_reply(DialogueReply("no_such_key")) == render_reply(DialogueReply("unknown"))
