"""
Отображение ответов DialogueManager в текст сообщения.

Бот работает с parse_mode=HTML, поэтому всё, что пришло от
пользователя (названия, категории), экранируется.
"""

import html
from datetime import datetime
from typing import Any, Dict, List, Optional

from config.constants import MAX_LIST_ITEMS, MAX_MESSAGE_LENGTH
from config.messages import (
    ADD_EXAMPLES,
    COMMAND_MESSAGES,
    DIALOGUE_MESSAGES,
    EMOJI,
    KIND_NAMES_GENITIVE,
    KIND_TITLES,
)
from database.storage import Record
from nlu.dialogue import DialogueReply
from nlu.models import RecordKind, RemovalCandidate


def format_amount(value: Any) -> str:
    """12000.0 -> "12 000", 9.99 -> "9.99"."""
    if value is None:
        return "-"
    number = float(value)
    if number.is_integer():
        return f"{int(number):,}".replace(",", " ")
    return f"{number:,.2f}".replace(",", " ")


def format_date(value: Any) -> str:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return html.escape(value)
    if isinstance(value, datetime):
        return value.strftime("%d.%m.%Y")
    return "-"


def _escape(value: Any) -> str:
    return html.escape(str(value)) if value is not None else ""


def format_record(index: int, kind: RecordKind, record: Record) -> str:
    """Одна строка списка записей."""
    if kind == RecordKind.SUBSCRIPTION:
        return (
            f"{index}. {_escape(record.get('name'))} - "
            f"{format_amount(record.get('cost'))} {_escape(record.get('currency_symbol'))} "
            f"({_escape(record.get('recurrence_label'))}, {_escape(record.get('category'))})"
        )

    date_field = "spent_at" if kind == RecordKind.EXPENSE else "received_at"
    return (
        f"{index}. {_escape(record.get('title'))} - "
        f"{format_amount(record.get('amount'))} {_escape(record.get('currency_symbol'))} "
        f"({format_date(record.get(date_field))}, {_escape(record.get('category'))})"
    )


def format_candidates(candidates: List[RemovalCandidate]) -> str:
    return "\n".join(
        f"{i}. {_escape(candidate.display_name)}" for i, candidate in enumerate(candidates, 1)
    )


def _truncate(text: str) -> str:
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    return text[:MAX_MESSAGE_LENGTH - 1] + "…"


def render_reply(reply: DialogueReply) -> str:
    """
    Текст ответа пользователю.

    Args:
        reply: Ответ автомата диалога

    Returns:
        Готовый текст (HTML)
    """
    if reply.key in ("start", "help"):
        return COMMAND_MESSAGES[reply.key]

    template = DIALOGUE_MESSAGES.get(reply.key, DIALOGUE_MESSAGES["unknown"])
    kind_value = reply.kind.value if reply.kind else RecordKind.SUBSCRIPTION.value
    params: Dict[str, Any] = {
        key: _escape(value) for key, value in reply.params.items()
        if key not in ("errors",)
    }
    params.update(
        emoji=EMOJI[kind_value],
        title=params.get("title", KIND_TITLES[kind_value]),
        kind_genitive=KIND_NAMES_GENITIVE[kind_value],
        example=html.escape(ADD_EXAMPLES[kind_value]),
    )

    if reply.key == "list":
        lines = [
            format_record(i, reply.kind, record)
            for i, record in enumerate(reply.records[:MAX_LIST_ITEMS], 1)
        ]
        if len(reply.records) > MAX_LIST_ITEMS:
            lines.append(f"… и ещё {len(reply.records) - MAX_LIST_ITEMS}")
        params["items"] = "\n".join(lines)
        params["title"] = KIND_TITLES[kind_value]
    elif reply.key in ("ask_removal_choice", "removal_choice_invalid"):
        params["items"] = format_candidates(reply.candidates)
    elif reply.key == "validation_failed":
        params["errors"] = "\n".join(f"• {_escape(e)}" for e in reply.params.get("errors", []))
    elif reply.key.startswith("added_"):
        params["cost"] = format_amount(reply.params.get("cost"))
        params["amount"] = format_amount(reply.params.get("amount"))
        date_value = _first_present(reply.params, ("next_payment_date", "spent_at", "received_at"))
        params["date"] = format_date(date_value)
    elif reply.key == "ask_type_choice":
        params["amount"] = format_amount(reply.params.get("amount"))

    return _truncate(template.format(**params))


def _first_present(params: Dict[str, Any], keys) -> Optional[Any]:
    for key in keys:
        if params.get(key) is not None:
            return params[key]
    return None
