"""
Извлечение названия записи и пользовательской категории.

Название получается вычитанием: из текста убираются служебные слова,
числа, валюты и метка категории, остаток и есть название.
"""

import re
from typing import FrozenSet, Iterable, List, Optional

from config.constants import MAX_CATEGORY_LENGTH, MAX_TITLE_LENGTH
from nlu.models import Language
from nlu import vocabulary as vocab

_PUNCTUATION = ".,;:()"
_CATEGORY_STOP = r"\d.,;:()+/" + re.escape(vocab.CURRENCY_GLYPHS)
_LATIN_RE = re.compile(r"[a-z]", re.IGNORECASE)
_DIGITS_RE = re.compile(r"\d+")
_NUMERIC_TOKEN_RE = re.compile(r"[\d.,:/+\-]*\d[\d.,:/+\-]*")


def _label_pattern(labels: Iterable[str]) -> "re.Pattern[str]":
    alternation = "|".join(re.escape(label) for label in sorted(labels, key=len, reverse=True))
    return re.compile(
        rf"(?<![^\W_])(?:{alternation})(?![^\W_])\s*-?\s*([^{_CATEGORY_STOP}]+)",
        re.IGNORECASE,
    )


_CATEGORY_PATTERNS = {
    lang: _label_pattern(labels) for lang, labels in vocab.CATEGORY_LABELS.items()
}


def _category_from_matches(matches: List["re.Match[str]"]) -> Optional[str]:
    if not matches:
        return None
    # Категория обычно в конце фразы
    last = max(matches, key=lambda m: m.start())
    value = last.group(1).strip(" -")[:MAX_CATEGORY_LENGTH].strip()
    if not value:
        return None
    if _LATIN_RE.match(value[0]):
        value = value[0].upper() + value[1:]
    return value


def extract_category(text: str, lang: Language = Language.EN) -> Optional[str]:
    """
    Пользовательская категория: "категория еда", "category food", "카테고리 식비".

    Сначала проверяются метки языка сообщения, затем все остальные.
    Если совпадений несколько, побеждает последнее. Латинское название
    получает заглавную первую букву, прочие письменности не трогаются.

    Returns:
        Название категории или None
    """
    if not text:
        return None

    own = _CATEGORY_PATTERNS.get(lang)
    if own is not None:
        value = _category_from_matches(list(own.finditer(text)))
        if value:
            return value

    matches = [m for pattern in _CATEGORY_PATTERNS.values() for m in pattern.finditer(text)]
    return _category_from_matches(matches)


def _split_forms(forms: Iterable[str]) -> List[str]:
    words: List[str] = []
    for form in forms:
        words.extend(form.lower().split())
    return words


_PREPOSITIONS = (
    "в", "во", "на", "за", "по", "с", "со", "от", "до", "для", "и", "к", "у", "о", "об", "из",
    "мне", "мой", "моя", "мою", "мои", "новую", "новый", "новая", "каждый", "каждое", "каждого",
    "in", "on", "for", "at", "to", "the", "a", "an", "of", "from", "by", "and", "my",
    "every", "each", "per",
    "에", "에서", "으로", "로", "내",
)
_DATE_WORDS = (
    "сегодня", "вчера", "позавчера", "завтра", "послезавтра", "через", "назад",
    "today", "yesterday", "tomorrow", "after", "before", "ago",
    "오늘", "어제", "그저께", "그제", "내일", "모레", "후", "뒤", "전",
)
_DAY_SUFFIXES = (
    "числа", "число", "чис", "го", "е", "день", "дня", "дней",
    "th", "st", "nd", "rd", "day", "days",
    "일", "월",
)
_MONTH_WORDS = (
    "январь", "января", "февраль", "февраля", "март", "марта", "апрель", "апреля",
    "май", "мая", "июнь", "июня", "июль", "июля", "август", "августа",
    "сентябрь", "сентября", "октябрь", "октября", "ноябрь", "ноября", "декабрь", "декабря",
    "january", "jan", "february", "feb", "march", "mar", "april", "apr", "may",
    "june", "jun", "july", "jul", "august", "aug", "september", "sep", "sept",
    "october", "oct", "november", "nov", "december", "dec",
)
_BILLING_WORDS = (
    "месяц", "месяца", "ежемесячно", "ежемесячная", "ежемесячный", "год", "года",
    "month", "monthly", "year",
    "매월", "매달", "월간",
)

STOP_WORDS: FrozenSet[str] = frozenset(
    _split_forms(vocab.ADD_VERBS)
    + _split_forms(vocab.REMOVE_VERBS)
    + _split_forms(vocab.SKIP_WORDS)
    + [w for table in vocab.ADD_TRIGGERS.values() for w in _split_forms(vocab.flatten(table))]
    + [w for table in vocab.CATEGORY_KEYWORDS.values() for w in _split_forms(vocab.flatten(table))]
    + _split_forms(vocab.ALL_CURRENCY_WORDS)
    + _split_forms(vocab.flatten(vocab.CATEGORY_LABELS))
    + _split_forms(vocab.YEARLY_MARKERS)
    + _split_forms(_PREPOSITIONS)
    + _split_forms(_DATE_WORDS)
    + _split_forms(_DAY_SUFFIXES)
    + _split_forms(_MONTH_WORDS)
    + _split_forms(_BILLING_WORDS)
)


def _clean_token(token: str) -> str:
    token = token.strip(_PUNCTUATION)
    if not token:
        return ""
    if _NUMERIC_TOKEN_RE.fullmatch(token):
        return ""
    if any(ch.isdigit() for ch in token):
        # "6000вон" -> "вон", "netflix2" -> "netflix"
        token = _DIGITS_RE.sub("", token)
    token = "".join(ch for ch in token if ch not in vocab.CURRENCY_GLYPHS)
    token = token.strip(_PUNCTUATION + "-+/")
    if token in STOP_WORDS or len(token) < 2:
        return ""
    return token


def extract_title_generic(text: str, category: Optional[str] = None) -> str:
    """
    Название записи: всё, что осталось после удаления служебных токенов.

    Удаляются глаголы, типы записей, предлоги, слова дат, валюты,
    метки категории и сама категория, числа и короткий мусор.

    Returns:
        Название в нижнем регистре (не длиннее 120 символов) или "",
        если осмысленного остатка нет
    """
    if not text:
        return ""

    tokens = text.lower().split()
    category_tokens = category.lower().split() if category else []
    span = len(category_tokens)

    kept: List[str] = []
    i = 0
    while i < len(tokens):
        if span and [t.strip(_PUNCTUATION) for t in tokens[i:i + span]] == category_tokens:
            i += span
            continue
        cleaned = _clean_token(tokens[i])
        if cleaned:
            kept.append(cleaned)
        i += 1

    title = " ".join(kept)[:MAX_TITLE_LENGTH].strip()
    return title if len(title) >= 2 else ""
