"""
Rule-based Intent Classifier.

Классификатор намерений на основе упорядоченного списка правил:
побеждает первое сработавшее правило, у каждого правила своя
фиксированная уверенность.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from nlu.models import Intent, IntentResult, Language, RecordKind
from nlu import vocabulary as vocab
from utils.logger import setup_logger

logger = setup_logger(name="intent_classifier", level=logging.INFO)

Predicate = Callable[[str, Language], bool]

_DIGIT_RE = re.compile(r"\d")
_DIGIT_CURRENCY_RE = re.compile(
    r"\d\s*(?:" + "|".join(
        re.escape(w) for w in sorted(vocab.ALL_CURRENCY_WORDS, key=len, reverse=True)
    ) + r")(?![^\W_])",
    re.IGNORECASE,
)


def _all_forms(table) -> Tuple[str, ...]:
    return vocab.flatten(table)


_CATEGORY_FORMS = {kind: _all_forms(table) for kind, table in vocab.CATEGORY_KEYWORDS.items()}
_TRIGGER_FORMS = {kind: _all_forms(table) for kind, table in vocab.ADD_TRIGGERS.items()}


def has_category_keyword(text: str, kind: Optional[RecordKind] = None) -> bool:
    """Есть ли в тексте слово-тип записи (подписка/расход/доход)."""
    kinds = [kind] if kind else list(RecordKind)
    return any(vocab.contains_any(text, _CATEGORY_FORMS[k]) for k in kinds)


def has_remove_verb(text: str) -> bool:
    return vocab.contains_any(text, vocab.REMOVE_VERBS)


def has_add_verb(text: str) -> bool:
    return vocab.contains_any(text, vocab.ADD_VERBS)


def looks_like_money(text: str) -> bool:
    """
    Эвристика "похоже на сумму": есть цифра и символ валюты,
    слово-валюта или конструкция "<цифра> <валюта>".
    """
    if not _DIGIT_RE.search(text):
        return False
    if any(glyph in text for glyph in vocab.CURRENCY_GLYPHS):
        return True
    if vocab.contains_any(text, vocab.ALL_CURRENCY_WORDS, allow_digit_before=True):
        return True
    return bool(_DIGIT_CURRENCY_RE.search(text))


def is_cancel_request(text: str) -> bool:
    """
    Команда /cancel или сообщение, состоящее из слова отмены.

    Слово отмены внутри длинной фразы отменой диалога не считается.
    """
    lowered = (text or "").strip().lower()
    if lowered.startswith("/cancel"):
        return True
    return lowered.strip(" .,;:()") in vocab.CANCEL_WORDS


def _command(prefix: str) -> Predicate:
    return lambda text, lang: text.strip().startswith(prefix)


def _list_phrase(kind: RecordKind) -> Predicate:
    phrases = vocab.LIST_PHRASES[kind]
    return lambda text, lang: any(phrase in text for phrase in phrases)


def _remove_of(kind: RecordKind) -> Predicate:
    return lambda text, lang: has_remove_verb(text) and has_category_keyword(text, kind)


def _add_trigger(kind: RecordKind) -> Predicate:
    forms = _TRIGGER_FORMS[kind]
    return lambda text, lang: vocab.contains_any(text, forms)


def _money_with_add_verb(text: str, lang: Language) -> bool:
    return looks_like_money(text) and has_add_verb(text)


def _money_without_category(text: str, lang: Language) -> bool:
    return looks_like_money(text) and not has_add_verb(text) and not has_category_keyword(text)


@dataclass(frozen=True)
class IntentRule:
    """Правило классификации: предикат -> намерение с фиксированной уверенностью."""
    name: str
    predicate: Predicate
    intent: Intent
    confidence: float

    def matches(self, text: str, lang: Language) -> bool:
        return self.predicate(text, lang)


# Порядок важен: первое сработавшее правило побеждает
RULES: List[IntentRule] = [
    IntentRule("command_start", _command("/start"), Intent.START, 1.0),
    IntentRule("command_help", _command("/help"), Intent.HELP, 1.0),
    IntentRule("command_cancel", _command("/cancel"), Intent.CANCEL, 1.0),

    IntentRule("list_subscriptions", _list_phrase(RecordKind.SUBSCRIPTION), Intent.SUBSCRIPTION_LIST, 0.95),
    IntentRule("list_expenses", _list_phrase(RecordKind.EXPENSE), Intent.EXPENSE_LIST, 0.95),
    IntentRule("list_incomes", _list_phrase(RecordKind.INCOME), Intent.INCOME_LIST, 0.95),

    IntentRule("remove_subscription", _remove_of(RecordKind.SUBSCRIPTION), Intent.SUBSCRIPTION_REMOVE, 0.9),
    IntentRule("remove_expense", _remove_of(RecordKind.EXPENSE), Intent.EXPENSE_REMOVE, 0.9),
    IntentRule("remove_income", _remove_of(RecordKind.INCOME), Intent.INCOME_REMOVE, 0.9),
    IntentRule("remove_generic", lambda text, lang: has_remove_verb(text), Intent.REMOVE, 0.7),

    IntentRule("add_expense", _add_trigger(RecordKind.EXPENSE), Intent.EXPENSE_ADD, 0.9),
    IntentRule("add_income", _add_trigger(RecordKind.INCOME), Intent.INCOME_ADD, 0.9),
    IntentRule("add_subscription", _add_trigger(RecordKind.SUBSCRIPTION), Intent.SUBSCRIPTION_ADD, 0.85),

    IntentRule("greeting", lambda text, lang: vocab.contains_any(text, vocab.GREETINGS), Intent.GREET, 0.8),

    IntentRule("money_with_add_verb", _money_with_add_verb, Intent.SUBSCRIPTION_ADD, 0.6),
    IntentRule("money_ambiguous", _money_without_category, Intent.ADD_AMBIGUOUS, 0.45),

    IntentRule("bare_list", lambda text, lang: vocab.contains_any(text, vocab.LIST_WORDS), Intent.SUBSCRIPTION_LIST, 0.55),
]

UNKNOWN_CONFIDENCE = 0.1


class RuleBasedIntentClassifier:
    """
    Классификатор намерений на основе правил.

    Ожидает нормализованный текст; регистр приводится внутри.
    """

    def __init__(self, rules: Optional[List[IntentRule]] = None):
        self.rules = list(rules) if rules is not None else list(RULES)

    def classify(self, text: str, lang: Language = Language.EN) -> IntentResult:
        """
        Классифицировать текст.

        Args:
            text: Нормализованный текст сообщения
            lang: Язык сообщения

        Returns:
            IntentResult с намерением, уверенностью и языком
        """
        lowered = (text or "").lower().strip()
        if lowered:
            for rule in self.rules:
                if rule.matches(lowered, lang):
                    logger.debug(f"Rule '{rule.name}' matched -> {rule.intent.value}")
                    return IntentResult(rule.intent, rule.confidence, lang)

        return IntentResult(Intent.UNKNOWN, UNKNOWN_CONFIDENCE, lang)

    def explain(self, text: str, lang: Language = Language.EN) -> List[str]:
        """Имена всех правил, которые сработали бы на тексте (для отладки)."""
        lowered = (text or "").lower().strip()
        return [rule.name for rule in self.rules if rule.matches(lowered, lang)]
