import math
import re
from typing import Any, Dict, List, Optional, Tuple

from config.constants import (
    MAX_CATEGORY_LENGTH,
    MAX_COST,
    MAX_MESSAGE_LENGTH,
    MAX_NAME_LENGTH,
    MIN_COST,
    MIN_NAME_LENGTH,
    VALID_CURRENCIES,
)


class InputValidator:
    """
    Класс для валидации пользовательского ввода и записей перед сохранением

    Каждое нарушенное правило даёт своё сообщение, чтобы пользователь
    знал, что именно исправить.
    """

    def validate_message(self, text: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Валидация входящего сообщения

        Returns:
            Tuple (is_valid, error_message)
        """
        if not text or not text.strip():
            return False, "Сообщение не может быть пустым"

        if len(text) > MAX_MESSAGE_LENGTH:
            return False, f"Сообщение слишком длинное (максимум {MAX_MESSAGE_LENGTH} символов)"

        # Проверка на спам (много повторяющихся символов)
        if re.search(r'(.)\1{20,}', text):
            return False, "Сообщение содержит слишком много повторяющихся символов"

        return True, None

    def _check_name(self, value: Any, label: str) -> List[str]:
        name = (value or "").strip() if isinstance(value, str) else ""
        if len(name) < MIN_NAME_LENGTH:
            return [f"{label} слишком короткое (минимум {MIN_NAME_LENGTH} символа)"]
        if len(name) > MAX_NAME_LENGTH:
            return [f"{label} слишком длинное (максимум {MAX_NAME_LENGTH} символов)"]
        return []

    def _check_amount(self, value: Any, label: str) -> List[str]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return [f"{label} должна быть числом"]
        if not math.isfinite(value):
            return [f"{label} должна быть конечным числом"]
        if value < MIN_COST or value > MAX_COST:
            return [f"{label} должна быть от {MIN_COST} до {MAX_COST:,}".replace(",", " ")]
        return []

    def _check_common(self, fields: Dict[str, Any]) -> List[str]:
        errors = []
        currency = fields.get("currency")
        if currency not in VALID_CURRENCIES:
            errors.append(f"Неизвестная валюта (допустимы: {', '.join(VALID_CURRENCIES)})")

        category = fields.get("category")
        if category is not None and len(str(category)) > MAX_CATEGORY_LENGTH:
            errors.append(f"Категория слишком длинная (максимум {MAX_CATEGORY_LENGTH} символов)")
        return errors

    def validate_subscription(self, fields: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        Валидация подписки перед сохранением

        Args:
            fields: Поля подписки (name, cost, currency, category, ...)

        Returns:
            Tuple (is_valid, errors)
        """
        errors = (
            self._check_name(fields.get("name"), "Название")
            + self._check_amount(fields.get("cost"), "Стоимость")
            + self._check_common(fields)
        )
        return not errors, errors

    def validate_transaction(self, fields: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Валидация расхода или дохода перед сохранением"""
        errors = (
            self._check_name(fields.get("title"), "Название")
            + self._check_amount(fields.get("amount"), "Сумма")
            + self._check_common(fields)
        )
        return not errors, errors
