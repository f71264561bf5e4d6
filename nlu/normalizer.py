"""
Нормализация входного текста и определение языка.

Все функции чистые и тотальные: на любую строку возвращают результат.
"""

import re

from nlu.models import Language

CURRENCY_GLYPHS = "₽₩₸€$"

_QUOTES_RE = re.compile(r"[\"\u201c\u201d\u201e\u201f\u00ab\u00bb\u2039\u203a\u301d\u301e\uff02]")
_APOSTROPHES_RE = re.compile(r"[\u2018\u2019\u201a\u201b`\u00b4\u02bc\uff07]")
_NBSP_RE = re.compile(r"[\u00a0\u2007\u202f\u2060]")
# Разрешены буквы и цифры любой письменности, пробелы, .,;:()-+$/ и символы валют
_DISALLOWED_RE = re.compile(r"[^\w\s.,;:()\-+/" + re.escape(CURRENCY_GLYPHS) + r"]|_")
_SPACES_RE = re.compile(r"\s+")

_HANGUL_RE = re.compile(r"[\u1100-\u11ff\u3130-\u318f\ua960-\ua97f\uac00-\ud7a3\ud7b0-\ud7ff]")
_CYRILLIC_RE = re.compile(r"[\u0400-\u04ff\u0500-\u052f]")


def normalize(raw: str) -> str:
    """
    Привести сырой текст к каноническому виду.

    Кавычки заменяются пробелом, апострофы унифицируются и удаляются вместе
    с прочими недопустимыми символами, неразрывные пробелы становятся
    обычными, "ё" сворачивается в "е", пробелы схлопываются.

    Функция идемпотентна: normalize(normalize(x)) == normalize(x).
    """
    if not raw:
        return ""

    text = _QUOTES_RE.sub(" ", raw)
    text = _APOSTROPHES_RE.sub("'", text)
    text = text.replace("'", "")
    text = _NBSP_RE.sub(" ", text)
    text = text.replace("ё", "е").replace("Ё", "Е")
    text = _DISALLOWED_RE.sub(" ", text)
    text = _SPACES_RE.sub(" ", text)
    return text.strip()


def detect_language(raw: str) -> Language:
    """
    Определить язык по письменности: хангыль -> ko, кириллица -> ru, иначе en.

    Работает на сыром тексте, до нормализации.
    """
    if not raw:
        return Language.EN
    if _HANGUL_RE.search(raw):
        return Language.KO
    if _CYRILLIC_RE.search(raw):
        return Language.RU
    return Language.EN
