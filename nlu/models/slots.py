"""Slot models: typed values extracted from a message."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class BillingPeriod(Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str


@dataclass(frozen=True)
class SubscriptionDate:
    """
    Дата следующего платежа и человекочитаемое описание цикла.

    Attributes:
        date: Дата следующего платежа (полночь)
        recurrence_label: Описание цикла ("Каждый 12 числа")
    """
    date: datetime
    recurrence_label: str

    @property
    def iso(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class Slots:
    """
    Слоты, извлечённые из нормализованного текста.

    Пустой title ("") означает, что название не найдено.
    """
    amount: Optional[float]
    currency: Currency
    billing_period: BillingPeriod
    subscription_date: SubscriptionDate
    transaction_date: datetime
    title: str = ""
    category: Optional[str] = None

    @property
    def currency_code(self) -> str:
        return self.currency.code

    @property
    def currency_symbol(self) -> str:
        return self.currency.symbol

    def has_title(self) -> bool:
        return len(self.title) >= 2

    def has_amount(self) -> bool:
        return self.amount is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "currencyCode": self.currency.code,
            "currencySymbol": self.currency.symbol,
            "billingPeriod": self.billing_period.value,
            "subscriptionDate": {
                "date": self.subscription_date.iso,
                "recurrenceLabel": self.subscription_date.recurrence_label,
            },
            "transactionDate": self.transaction_date.isoformat(),
            "title": self.title,
            "category": self.category,
        }
