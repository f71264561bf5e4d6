"""NLU Classifiers - rule-based классификация намерений."""

from .intent_classifier import (
    RULES,
    IntentRule,
    RuleBasedIntentClassifier,
    is_cancel_request,
    looks_like_money,
)

__all__ = [
    "RULES",
    "IntentRule",
    "RuleBasedIntentClassifier",
    "is_cancel_request",
    "looks_like_money",
]
