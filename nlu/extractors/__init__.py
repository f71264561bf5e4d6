"""NLU Extractors - извлечение слотов из нормализованного текста."""

from .amount import detect_currency, extract_cost, extract_subscription_cost
from .dates import (
    default_payment_date,
    parse_date,
    parse_date_enhanced,
    parse_transaction_date,
    recurrence_label,
)
from .text import extract_category, extract_title_generic

__all__ = [
    "detect_currency",
    "extract_cost",
    "extract_subscription_cost",
    "default_payment_date",
    "parse_date",
    "parse_date_enhanced",
    "parse_transaction_date",
    "recurrence_label",
    "extract_category",
    "extract_title_generic",
]
