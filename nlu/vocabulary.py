"""
Многоязычные словари и поиск токенов с учётом границ слов.

Каждое понятие (валюта, тип записи, глагол) отображается в набор
поверхностных форм по языкам. Все проверки идут через одну функцию
contains_token, которая не использует ASCII-шный \\b: граница слова -
это любой символ, не являющийся буквой или цифрой, либо край строки.
"""

import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Tuple

from nlu.models import Currency, Language, RecordKind

# Буква или цифра любой письменности
_ALNUM = r"[^\W_]"
# Только буква (цифры допустимы перед токеном валюты: "6000вон")
_LETTER = r"[^\W\d_]"


@lru_cache(maxsize=2048)
def _token_pattern(token: str, allow_digit_before: bool) -> "re.Pattern[str]":
    before = _LETTER if allow_digit_before else _ALNUM
    body = r"\s+".join(re.escape(part) for part in token.split())
    return re.compile(rf"(?<!{before}){body}(?!{_ALNUM})", re.IGNORECASE)


def find_token(text: str, token: str, allow_digit_before: bool = False) -> Optional["re.Match[str]"]:
    """Найти первое вхождение токена, окружённого границами слова."""
    if not text or not token:
        return None
    return _token_pattern(token, allow_digit_before).search(text)


def contains_token(text: str, token: str, allow_digit_before: bool = False) -> bool:
    return find_token(text, token, allow_digit_before) is not None


def contains_any(text: str, tokens: Iterable[str], allow_digit_before: bool = False) -> bool:
    return any(contains_token(text, t, allow_digit_before) for t in tokens)


def flatten(table: Dict[Language, Tuple[str, ...]]) -> Tuple[str, ...]:
    """Все формы понятия по всем языкам."""
    result: List[str] = []
    for forms in table.values():
        result.extend(forms)
    return tuple(result)


# ---------------------------------------------------------------------------
# Валюты
# ---------------------------------------------------------------------------

CURRENCY_KZT = Currency("KZT", "₸")
CURRENCY_RUB = Currency("RUB", "₽")
CURRENCY_USD = Currency("USD", "$")
CURRENCY_WON = Currency("WON", "₩")
DEFAULT_CURRENCY = CURRENCY_WON

CURRENCY_TOKENS: Dict[Currency, Dict[Language, Tuple[str, ...]]] = {
    CURRENCY_KZT: {
        Language.RU: ("тг", "тенге", "теңге", "тенг"),
        Language.EN: ("kzt", "tenge"),
        Language.KO: ("텡게",),
    },
    CURRENCY_RUB: {
        Language.RU: ("руб", "рубль", "рубля", "рублей", "рубл", "р"),
        Language.EN: ("rub", "rubles", "ruble", "roubles"),
        Language.KO: ("루블",),
    },
    CURRENCY_USD: {
        Language.RU: ("доллар", "доллара", "долларов", "долл", "дол", "бакс", "бакса", "баксов"),
        Language.EN: ("usd", "dollar", "dollars", "bucks"),
        Language.KO: ("달러", "불"),
    },
    CURRENCY_WON: {
        Language.RU: ("вон", "вона", "вонов"),
        Language.EN: ("won", "krw"),
        Language.KO: ("원",),
    },
}

# Порядок приоритета при нескольких совпадениях
CURRENCY_PRIORITY: Tuple[Currency, ...] = (CURRENCY_KZT, CURRENCY_RUB, CURRENCY_USD, CURRENCY_WON)

CURRENCY_GLYPH_MAP: Dict[str, Currency] = {
    "₸": CURRENCY_KZT,
    "₽": CURRENCY_RUB,
    "$": CURRENCY_USD,
    "₩": CURRENCY_WON,
}
CURRENCY_GLYPHS = "₽₩₸€$"

ALL_CURRENCY_WORDS: Tuple[str, ...] = tuple(
    token for currency in CURRENCY_PRIORITY for token in flatten(CURRENCY_TOKENS[currency])
)


def currency_marker_pattern() -> str:
    """Регулярное выражение для символа валюты или слова-валюты."""
    words = sorted(ALL_CURRENCY_WORDS, key=len, reverse=True)
    alternation = "|".join(re.escape(w) for w in words)
    return rf"(?:[{re.escape(CURRENCY_GLYPHS)}]|(?<!{_LETTER})(?:{alternation})(?!{_ALNUM}))"


# ---------------------------------------------------------------------------
# Типы записей и команды
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: Dict[RecordKind, Dict[Language, Tuple[str, ...]]] = {
    RecordKind.SUBSCRIPTION: {
        Language.RU: ("подписка", "подписку", "подписки", "подписок", "подпиской", "подписке"),
        Language.EN: ("subscription", "subscriptions"),
        Language.KO: ("구독",),
    },
    RecordKind.EXPENSE: {
        Language.RU: ("расход", "расходы", "расхода", "расходов", "трата", "траты", "трату", "трат"),
        Language.EN: ("expense", "expenses"),
        Language.KO: ("지출",),
    },
    RecordKind.INCOME: {
        Language.RU: ("доход", "доходы", "дохода", "доходов"),
        Language.EN: ("income", "incomes"),
        Language.KO: ("수입",),
    },
}

ADD_TRIGGERS: Dict[RecordKind, Dict[Language, Tuple[str, ...]]] = {
    RecordKind.EXPENSE: {
        Language.RU: CATEGORY_KEYWORDS[RecordKind.EXPENSE][Language.RU] + (
            "потратил", "потратила", "потратили", "потрачено",
            "купил", "купила", "купили", "заплатил", "заплатила", "оплатил", "оплатила",
        ),
        Language.EN: ("expense", "expenses", "spent", "spend", "paid", "bought"),
        Language.KO: ("지출", "썼어", "썼다", "샀어", "샀다", "결제"),
    },
    RecordKind.INCOME: {
        Language.RU: CATEGORY_KEYWORDS[RecordKind.INCOME][Language.RU] + (
            "получил", "получила", "получили", "заработал", "заработала", "заработали",
        ),
        Language.EN: ("income", "incomes", "earned", "received", "got paid"),
        Language.KO: ("수입", "벌었어", "받았어"),
    },
    RecordKind.SUBSCRIPTION: {
        Language.RU: CATEGORY_KEYWORDS[RecordKind.SUBSCRIPTION][Language.RU] + ("подпишись",),
        Language.EN: ("subscription", "subscriptions", "subscribe"),
        Language.KO: ("구독",),
    },
}

ADD_VERBS: Tuple[str, ...] = (
    "добавь", "добавить", "добавьте", "добавил", "добавила", "запиши", "записать",
    "add", "track", "record",
    "추가", "추가해", "추가해줘",
)

REMOVE_VERBS: Tuple[str, ...] = (
    "удали", "удалить", "удалите", "удаляй", "убери", "убрать", "уберите", "сотри", "стереть",
    "delete", "remove", "erase",
    "삭제", "삭제해", "삭제해줘", "지워", "지워줘",
)

LIST_PHRASES: Dict[RecordKind, Tuple[str, ...]] = {
    RecordKind.SUBSCRIPTION: (
        "мои подписки", "список подписок", "покажи подписки", "все подписки",
        "my subscriptions", "list subscriptions", "show subscriptions",
        "내 구독", "구독 목록", "구독 리스트",
    ),
    RecordKind.EXPENSE: (
        "мои расходы", "список расходов", "покажи расходы", "все расходы", "мои траты",
        "my expenses", "list expenses", "show expenses",
        "내 지출", "지출 목록", "지출 리스트",
    ),
    RecordKind.INCOME: (
        "мои доходы", "список доходов", "покажи доходы", "все доходы",
        "my incomes", "my income", "list incomes", "show incomes", "show income",
        "내 수입", "수입 목록", "수입 리스트",
    ),
}

LIST_WORDS: Tuple[str, ...] = ("список", "list", "목록")

GREETINGS: Tuple[str, ...] = (
    "привет", "здравствуй", "здравствуйте", "добрый день", "добрый вечер", "доброе утро",
    "hello", "hi", "hey",
    "안녕", "안녕하세요",
)

CANCEL_WORDS: Tuple[str, ...] = (
    "отмена", "отменить", "отмени", "стоп", "cancel", "stop", "취소",
)

SKIP_WORDS: Tuple[str, ...] = ("пропустить", "пропусти", "skip", "건너뛰기", "스킵")

YEARLY_MARKERS: Tuple[str, ...] = (
    "в год", "ежегодно", "ежегодная", "ежегодный", "годовая", "годовой",
    "yearly", "annual", "annually", "per year", "a year",
    "연간", "매년",
)

CATEGORY_LABELS: Dict[Language, Tuple[str, ...]] = {
    Language.RU: ("категория", "категорию", "категории", "категорией"),
    Language.EN: ("category",),
    Language.KO: ("카테고리", "분류"),
}
