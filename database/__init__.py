"""Хранилище финансовых записей."""

from .storage import FinanceStorage, Record, StorageError, matches_query
from .sqlite_storage import SQLiteFinanceStorage

__all__ = [
    "FinanceStorage",
    "Record",
    "StorageError",
    "SQLiteFinanceStorage",
    "matches_query",
]
