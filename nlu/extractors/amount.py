"""Извлечение валюты и суммы из нормализованного текста."""

import math
import re
from typing import List, Optional

from nlu.models import Currency
from nlu import vocabulary as vocab

# Число с группировкой разрядов пробелом ("12 000") и дробной частью через точку или запятую
NUMBER_RE = re.compile(
    r"(?<!\d)(?<!\d[.,])(\d{1,3}(?:[ \u00a0]\d{3})+|\d+)(?:[.,](\d+))?(?!\d)"
)
# Окно после числа, в котором ищется маркер валюты
CURRENCY_WINDOW = 12

_CURRENCY_MARKER_RE = re.compile(vocab.currency_marker_pattern(), re.IGNORECASE)


def detect_currency(text: str) -> Currency:
    """
    Определить валюту по символу или слову.

    Приоритет при нескольких совпадениях: KZT -> RUB -> USD -> WON.
    По умолчанию - WON (₩).
    """
    if not text:
        return vocab.DEFAULT_CURRENCY

    lowered = text.lower()
    for currency in vocab.CURRENCY_PRIORITY:
        if currency.symbol in lowered:
            return currency
        tokens = vocab.flatten(vocab.CURRENCY_TOKENS[currency])
        if vocab.contains_any(lowered, tokens, allow_digit_before=True):
            return currency
    return vocab.DEFAULT_CURRENCY


def parse_number(match: "re.Match[str]") -> Optional[float]:
    integer = re.sub(r"[ \u00a0]", "", match.group(1))
    fraction = match.group(2)
    raw = f"{integer}.{fraction}" if fraction else integer
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def find_numbers(text: str) -> List["re.Match[str]"]:
    """Все числовые токены в порядке появления."""
    if not text:
        return []
    return list(NUMBER_RE.finditer(text))


def extract_cost(text: str) -> Optional[float]:
    """
    Первая сумма в тексте.

    Для расходов и доходов сумма обычно идёт первой:
    "Расход 12000 вон кафе сегодня".
    """
    for match in find_numbers(text):
        value = parse_number(match)
        if value is not None:
            return value
    return None


def extract_subscription_cost(text: str) -> Optional[float]:
    """
    Стоимость подписки: число, ближе всего привязанное к валюте.

    Числа просматриваются с конца; берётся первое, за которым в пределах
    нескольких символов следует символ или слово валюты. Если такого нет,
    берётся последнее число. Одиночное число перед стоимостью чаще всего
    является днём месяца: "KT 15 числа 12000 рублей".
    """
    matches = find_numbers(text)
    if not matches:
        return None

    for match in reversed(matches):
        window = text[match.end():match.end() + CURRENCY_WINDOW]
        if _CURRENCY_MARKER_RE.search(window):
            value = parse_number(match)
            if value is not None:
                return value

    return parse_number(matches[-1])
