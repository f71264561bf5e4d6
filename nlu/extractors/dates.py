"""
Извлечение дат.

Три независимых извлекателя с общими под-правилами:

- parse_date_enhanced: дата следующего платежа подписки + описание цикла
- parse_transaction_date: дата расхода/дохода
- parse_date: исторический разбор "дня месяца"

Каждый извлекатель - упорядоченный список резолверов, возвращающих
Optional; побеждает первый непустой результат, иначе значение по умолчанию.
Прошедший день месяца без явного месяца всегда переносится на следующий
месяц. Прошедшие день и месяц без года переносятся на следующий год только
для подписок: расход или доход вполне может быть в прошлом.
"""

import re
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from nlu.models import BillingPeriod, SubscriptionDate
from nlu import vocabulary as vocab
from nlu.extractors import amount

DateResolver = Callable[[str, datetime], Optional[datetime]]

# Ключ - первые три буквы названия месяца
RU_MONTHS = {
    "янв": 1, "фев": 2, "мар": 3, "апр": 4, "май": 5, "мая": 5, "мае": 5,
    "июн": 6, "июл": 7, "авг": 8, "сен": 9, "окт": 10, "ноя": 11, "дек": 12,
}
EN_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
RU_MONTHS_GENITIVE = (
    "января", "февраля", "марта", "апреля", "мая", "июня",
    "июля", "августа", "сентября", "октября", "ноября", "декабря",
)

_RU_MONTH_RE = (
    r"янв(?:ар[ьяе])?|фев(?:рал[ьяе])?|мар(?:т[ае]?)?|апр(?:ел[ьяе])?|ма[йяе]"
    r"|июн(?:[ьяе])?|июл(?:[ьяе])?|авг(?:уст[ае]?)?|сен(?:тябр[ьяе])?"
    r"|окт(?:ябр[ьяе])?|ноя(?:бр[ьяе])?|дек(?:абр[ьяе]|ябр[ьяе])?"
)
_EN_MONTH_RE = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)

_B = r"(?![^\W_])"
_NUMERIC_DATE_RE = re.compile(r"(?<!\d)(\d{1,2})[./](\d{1,2})(?:[./](\d{4}|\d{2}))?(?![\d])")
_DAY_MONTH_RU_RE = re.compile(rf"(?<!\d)(\d{{1,2}})\s*-?(?:го|е)?\s+({_RU_MONTH_RE}){_B}", re.IGNORECASE)
_DAY_MONTH_EN_RE = re.compile(
    rf"(?<!\d)(\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?({_EN_MONTH_RE}){_B}", re.IGNORECASE
)
_MONTH_DAY_EN_RE = re.compile(
    rf"(?<![^\W_])({_EN_MONTH_RE})\s+(\d{{1,2}})(?:st|nd|rd|th)?(?!\d)", re.IGNORECASE
)
_KO_MONTH_DAY_RE = re.compile(r"(?<!\d)(\d{1,2})\s*월\s*(\d{1,2})\s*일")

_IN_DAYS_RE = [
    re.compile(rf"(?<![^\W_])через\s+(\d{{1,3}})\s*(?:дн(?:я|ей)?|день){_B}", re.IGNORECASE),
    re.compile(rf"(?<![^\W_])in\s+(\d{{1,3}})\s*days?{_B}", re.IGNORECASE),
    re.compile(r"(?<!\d)(\d{1,3})\s*일\s*(?:후|뒤)"),
]
_DAYS_AGO_RE = [
    re.compile(rf"(?<!\d)(\d{{1,3}})\s*(?:дн(?:я|ей)?|день)\s+назад{_B}", re.IGNORECASE),
    re.compile(rf"(?<!\d)(\d{{1,3}})\s*days?\s+ago{_B}", re.IGNORECASE),
    re.compile(r"(?<!\d)(\d{1,3})\s*일\s*전"),
]

# День с явным суффиксом: "12 числа", "12-го", "12е", "12th", "12일"
_EXPLICIT_DAY_RE = re.compile(
    rf"(?<!\d)(\d{{1,2}})\s*-?\s*(?:числа|число|чис|го|е|th|st|nd|rd){_B}", re.IGNORECASE
)
_KO_DAY_RE = re.compile(r"(?<!\d)(\d{1,2})\s*일(?!\s*(?:후|뒤|전))")
_TRANSACTION_DAY_RE = re.compile(rf"(?<!\d)(\d{{1,2}})\s*-?\s*(?:числа|число){_B}", re.IGNORECASE)
# Одно- и двузначные числа; числа от 100 не рассматриваются как день
_BARE_DAY_RE = re.compile(r"(?<![\d.,])(\d{1,2})(?![\d]|[.,]\d)")

# Относительные дни: (смещение, формы). Длинные формы проверяются раньше коротких.
SUBSCRIPTION_RELATIVE_DAYS = (
    (2, ("послезавтра", "day after tomorrow", "모레")),
    (1, ("завтра", "tomorrow", "내일")),
    (0, ("сегодня", "today", "오늘")),
)
TRANSACTION_RELATIVE_DAYS = (
    (-2, ("позавчера", "day before yesterday", "그저께", "그제")),
    (2, ("послезавтра", "day after tomorrow", "모레")),
    (-1, ("вчера", "yesterday", "어제")),
    (1, ("завтра", "tomorrow", "내일")),
    (0, ("сегодня", "today", "오늘")),
)


def _today(now: Optional[datetime]) -> datetime:
    now = now or datetime.now()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _safe_date(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def project_day_of_month(day: int, today: datetime) -> Optional[datetime]:
    """
    День месяца -> ближайшая не прошедшая дата.

    Если день уже прошёл в текущем месяце, берётся следующий месяц.
    Несуществующий день (31 в 30-дневном месяце) прижимается к концу месяца.
    """
    if not 1 <= day <= 31:
        return None
    candidate = today + relativedelta(day=day)
    if candidate < today:
        candidate = today + relativedelta(months=1, day=day)
    return candidate


def _project_day_month(
    day: int, month: int, today: datetime, roll_forward: bool = True
) -> Optional[datetime]:
    candidate = _safe_date(today.year, month, day)
    if candidate is None:
        return None
    if roll_forward and candidate < today:
        candidate = _safe_date(today.year + 1, month, day)
    return candidate


def _month_from_token(token: str) -> Optional[int]:
    key = token.lower()[:3]
    return RU_MONTHS.get(key) or EN_MONTHS.get(key)


# ---------------------------------------------------------------------------
# Резолверы
# ---------------------------------------------------------------------------

def _relative_days(table) -> DateResolver:
    def resolve(text: str, today: datetime) -> Optional[datetime]:
        for offset, forms in table:
            if vocab.contains_any(text, forms):
                return today + timedelta(days=offset)
        return None
    return resolve


def _offset_days(patterns: Sequence["re.Pattern[str]"], sign: int) -> DateResolver:
    def resolve(text: str, today: datetime) -> Optional[datetime]:
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                days = max(0, int(match.group(1)))
                return today + timedelta(days=sign * days)
        return None
    return resolve


def resolve_numeric_date(
    text: str, today: datetime, roll_forward: bool = True
) -> Optional[datetime]:
    """dd.mm, dd/mm, dd.mm.yy, dd.mm.yyyy"""
    for match in _NUMERIC_DATE_RE.finditer(text):
        day, month = int(match.group(1)), int(match.group(2))
        year_raw = match.group(3)
        if year_raw:
            year = int(year_raw)
            if year < 100:
                year += 2000
            candidate = _safe_date(year, month, day)
        else:
            candidate = _project_day_month(day, month, today, roll_forward)
        if candidate is not None:
            return candidate
    return None


def resolve_month_name(
    text: str, today: datetime, roll_forward: bool = True
) -> Optional[datetime]:
    """"17 февраля", "17 feb", "feb 17", "2월 17일" """
    for pattern in (_DAY_MONTH_RU_RE, _DAY_MONTH_EN_RE):
        match = pattern.search(text)
        if match:
            month = _month_from_token(match.group(2))
            if month:
                return _project_day_month(int(match.group(1)), month, today, roll_forward)

    match = _MONTH_DAY_EN_RE.search(text)
    if match:
        month = _month_from_token(match.group(1))
        if month:
            return _project_day_month(int(match.group(2)), month, today, roll_forward)

    match = _KO_MONTH_DAY_RE.search(text)
    if match:
        return _project_day_month(int(match.group(2)), int(match.group(1)), today, roll_forward)
    return None


def _past_allowed(resolver: Callable[..., Optional[datetime]]) -> DateResolver:
    """Вариант резолвера без переноса прошедшей даты на следующий год."""
    return lambda text, today: resolver(text, today, roll_forward=False)


def _amount_spans(text: str) -> List[Tuple[int, int]]:
    """Позиции чисел от 100 ("10 000", "12000") - это суммы, а не дни."""
    spans = []
    for match in amount.find_numbers(text):
        value = amount.parse_number(match)
        if value is not None and value >= 100:
            spans.append(match.span())
    return spans


def find_day_number(text: str) -> Optional[int]:
    """
    Запрошенный день месяца, как его написал пользователь.

    Сначала ищется день с явным суффиксом ("12 числа"), берётся последний.
    Иначе среди одно-двузначных чисел берётся последнее: сумма обычно
    идёт первой, день - последним ("Netflix 10000 вон 12 числа").
    Цифры внутри сумм от 100 (включая "10 000") днями не считаются.
    """
    spans = _amount_spans(text)

    def outside_amounts(match: "re.Match[str]") -> bool:
        return not any(start <= match.start() < end for start, end in spans)

    explicit = [
        (m.start(), int(m.group(1)))
        for pattern in (_EXPLICIT_DAY_RE, _KO_DAY_RE)
        for m in pattern.finditer(text)
        if outside_amounts(m)
    ]
    explicit = [(pos, day) for pos, day in explicit if 1 <= day <= 31]
    if explicit:
        return max(explicit)[1]

    candidates = [int(m.group(1)) for m in _BARE_DAY_RE.finditer(text) if outside_amounts(m)]
    candidates = [d for d in candidates if 1 <= d <= 31]
    if candidates:
        return candidates[-1]
    return None


def resolve_transaction_day(text: str, today: datetime) -> Optional[datetime]:
    """"15 число" / "15 числа" / "15일" - день месяца для расходов и доходов."""
    for pattern in (_TRANSACTION_DAY_RE, _KO_DAY_RE):
        match = pattern.search(text)
        if match:
            return project_day_of_month(int(match.group(1)), today)
    return None


SUBSCRIPTION_RESOLVERS: List[DateResolver] = [
    _relative_days(SUBSCRIPTION_RELATIVE_DAYS),
    _offset_days(_IN_DAYS_RE, 1),
    resolve_numeric_date,
    resolve_month_name,
]

TRANSACTION_RESOLVERS: List[DateResolver] = [
    _relative_days(TRANSACTION_RELATIVE_DAYS),
    _offset_days(_IN_DAYS_RE, 1),
    _offset_days(_DAYS_AGO_RE, -1),
    _past_allowed(resolve_numeric_date),
    _past_allowed(resolve_month_name),
    resolve_transaction_day,
]


def first_resolved(
    resolvers: Sequence[DateResolver], text: str, today: datetime
) -> Optional[datetime]:
    """Первый непустой результат из упорядоченного списка резолверов."""
    for resolver in resolvers:
        result = resolver(text, today)
        if result is not None:
            return result
    return None


# ---------------------------------------------------------------------------
# Публичные функции
# ---------------------------------------------------------------------------

def recurrence_label(
    date: datetime,
    billing_period: BillingPeriod = BillingPeriod.MONTHLY,
    day: Optional[int] = None,
) -> str:
    """
    Человекочитаемое описание цикла оплаты.

    day - запрошенный день месяца; дата платежа могла быть прижата к концу
    короткого месяца, а цикл описывается по запрошенному дню.
    """
    if billing_period == BillingPeriod.YEARLY:
        return f"Каждый год, {date.day} {RU_MONTHS_GENITIVE[date.month - 1]}"
    return f"Каждый {day or date.day} числа"


def default_payment_date(now: Optional[datetime] = None) -> SubscriptionDate:
    """Значение по умолчанию: 1 число следующего месяца."""
    today = _today(now)
    return SubscriptionDate(today + relativedelta(months=1, day=1), "Каждый 1 числа")


def _day_of_month_date(
    text: str, today: datetime, billing_period: BillingPeriod = BillingPeriod.MONTHLY
) -> Optional[SubscriptionDate]:
    day = find_day_number(text)
    if day is None:
        return None
    resolved = project_day_of_month(day, today)
    return SubscriptionDate(resolved, recurrence_label(resolved, billing_period, day=day))


def parse_date(text: str, now: Optional[datetime] = None) -> SubscriptionDate:
    """
    Исторический разбор дня месяца ("12 числа", "12").

    Returns:
        SubscriptionDate; если день не найден - 1 число следующего месяца
    """
    result = _day_of_month_date((text or "").lower(), _today(now))
    return result if result is not None else default_payment_date(now)


def parse_date_enhanced(
    text: str,
    billing_period: BillingPeriod = BillingPeriod.MONTHLY,
    now: Optional[datetime] = None,
) -> SubscriptionDate:
    """
    Дата следующего платежа подписки и описание цикла.

    Порядок: сегодня/завтра/послезавтра -> "через N дней" -> dd.mm[.yyyy]
    -> "<день> <месяц>" -> день месяца -> 1 число следующего месяца.
    """
    today = _today(now)
    lowered = (text or "").lower()
    resolved = first_resolved(SUBSCRIPTION_RESOLVERS, lowered, today)
    if resolved is not None:
        return SubscriptionDate(resolved, recurrence_label(resolved, billing_period))

    result = _day_of_month_date(lowered, today, billing_period)
    if result is not None:
        return result

    fallback = default_payment_date(now)
    if billing_period == BillingPeriod.YEARLY:
        return SubscriptionDate(fallback.date, recurrence_label(fallback.date, billing_period))
    return fallback


def parse_transaction_date(text: str, now: Optional[datetime] = None) -> datetime:
    """
    Дата расхода или дохода (полночь).

    Понимает сегодня/вчера/позавчера/завтра/послезавтра на ru/en/ko,
    "через N дней", "N дней назад", dd.mm[.yyyy], "<день> <месяц>", "<день> число".
    По умолчанию - сегодня.
    """
    today = _today(now)
    resolved = first_resolved(TRANSACTION_RESOLVERS, (text or "").lower(), today)
    return resolved if resolved is not None else today
