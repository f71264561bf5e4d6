import pytest

from utils.validators import InputValidator


@pytest.fixture
def validator():
    return InputValidator()


def subscription(**overrides):
    fields = {"name": "Netflix", "cost": 10000.0, "currency": "WON", "category": "Общие"}
    fields.update(overrides)
    return fields


def test_valid_subscription(validator):
    assert validator.validate_subscription(subscription()) == (True, [])


@pytest.mark.parametrize("overrides, fragment", [
    ({"name": "N"}, "слишком короткое"),
    ({"name": "x" * 101}, "слишком длинное"),
    ({"name": None}, "слишком короткое"),
    ({"cost": -1}, "от 0 до 1 000 000 000"),
    ({"cost": 1_000_000_001}, "от 0 до 1 000 000 000"),
    ({"cost": float("inf")}, "конечным"),
    ({"cost": float("nan")}, "конечным"),
    ({"cost": "100"}, "числом"),
    ({"cost": True}, "числом"),
    ({"cost": None}, "числом"),
    ({"currency": "EUR"}, "Неизвестная валюта"),
    ({"category": "x" * 51}, "Категория"),
])
def test_invalid_subscription(validator, overrides, fragment):
    is_valid, errors = validator.validate_subscription(subscription(**overrides))
    assert not is_valid
    assert len(errors) == 1
    assert fragment in errors[0]


def test_errors_accumulate(validator):
    is_valid, errors = validator.validate_subscription({"name": "", "cost": -5, "currency": "XYZ"})
    assert not is_valid
    assert len(errors) == 3


def test_boundaries_are_allowed(validator):
    assert validator.validate_subscription(subscription(cost=0))[0]
    assert validator.validate_subscription(subscription(cost=1_000_000_000))[0]
    assert validator.validate_subscription(subscription(name="ab"))[0]


def test_transaction(validator):
    fields = {"title": "Кафе", "amount": 12000.0, "currency": "WON", "category": "Общие"}
    assert validator.validate_transaction(fields) == (True, [])

    is_valid, errors = validator.validate_transaction(dict(fields, title="", amount=None))
    assert not is_valid
    assert any(error.startswith("Название") for error in errors)
    assert any(error.startswith("Сумма") for error in errors)


def test_validate_message(validator):
    assert validator.validate_message("Мои подписки") == (True, None)
    assert not validator.validate_message("")[0]
    assert not validator.validate_message("   ")[0]
    assert not validator.validate_message("x" * 4001)[0]
    assert not validator.validate_message("а" * 25)[0]
