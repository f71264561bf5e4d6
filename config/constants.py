"""
Статичные константы приложения

Здесь должны быть только константы, которые:
- Не изменяются между окружениями (dev/prod)
- Не являются секретами
- Определяют поведение приложения
"""

# Незавершённые диалоги
DEFAULT_PENDING_TTL_MINUTES = 10
MAX_REMOVAL_CANDIDATES = 10

# Валидация записей
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MIN_COST = 0
MAX_COST = 1_000_000_000
MAX_CATEGORY_LENGTH = 50
MAX_TITLE_LENGTH = 120
VALID_CURRENCIES = ("RUB", "USD", "WON", "KZT")

# Значения по умолчанию
DEFAULT_CATEGORY = "Общие"

# Ограничения интерфейса
MAX_MESSAGE_LENGTH = 4000
MAX_LIST_ITEMS = 50
