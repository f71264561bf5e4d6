"""
Хранилище финансовых записей на SQLite (aiosqlite).

Каждый тип записи живёт в своей таблице, все запросы фильтруются по chat_id.
"""

import logging
import os
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple

import aiosqlite

from database.storage import FinanceStorage, Record, StorageError, matches_query
from nlu.models import RecordKind, RemovalCandidate
from utils.logger import setup_logger

logger = setup_logger(name="sqlite_storage", level=logging.INFO)

# Таблица, колонка с названием и колонки записи (без id, chat_id, created_at)
_SCHEMA: Dict[RecordKind, Tuple[str, str, Tuple[str, ...]]] = {
    RecordKind.SUBSCRIPTION: (
        "subscriptions",
        "name",
        (
            "name", "cost", "currency", "currency_symbol", "billing_period",
            "next_payment_date", "recurrence_label", "category", "icon",
        ),
    ),
    RecordKind.EXPENSE: (
        "expenses",
        "title",
        ("title", "amount", "currency", "currency_symbol", "spent_at", "category"),
    ),
    RecordKind.INCOME: (
        "incomes",
        "title",
        ("title", "amount", "currency", "currency_symbol", "received_at", "category"),
    ),
}

_COLUMN_TYPES = {
    "cost": "REAL NOT NULL",
    "amount": "REAL NOT NULL",
    "name": "TEXT NOT NULL",
    "title": "TEXT NOT NULL",
}


def _to_db(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class SQLiteFinanceStorage(FinanceStorage):
    """
    FinanceStorage поверх SQLite.

    Ошибки aiosqlite не выходят наружу: они логируются и
    превращаются в StorageError.
    """

    def __init__(self, db_path: str = "db/finance.db"):
        self.db_path = db_path
        self._initialized = False

    async def init_db(self):
        """Инициализация таблиц в БД."""
        if self._initialized:
            return

        try:
            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            async with aiosqlite.connect(self.db_path) as db:
                for table, _, columns in _SCHEMA.values():
                    column_defs = ",\n".join(
                        f"{column} {_COLUMN_TYPES.get(column, 'TEXT')}" for column in columns
                    )
                    await db.execute(f"""
                        CREATE TABLE IF NOT EXISTS {table} (
                            id INTEGER PRIMARY KEY AUTOINCREMENT,
                            chat_id INTEGER NOT NULL,
                            {column_defs},
                            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                        )
                    """)
                    await db.execute(
                        f"CREATE INDEX IF NOT EXISTS idx_{table}_chat ON {table}(chat_id)"
                    )
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            logger.error(f"Ошибка инициализации БД: {e}")
            raise StorageError("Не удалось инициализировать хранилище") from e

        self._initialized = True
        logger.info("SQLiteFinanceStorage инициализирован")

    async def _fetch(self, chat_id: int, kind: RecordKind) -> List[Record]:
        table, _, _ = _SCHEMA[kind]
        query = f"SELECT * FROM {table} WHERE chat_id = ? ORDER BY id"

        await self.init_db()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(query, (chat_id,)) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error(f"Ошибка чтения {table} для чата {chat_id}: {e}")
            raise StorageError(f"Не удалось прочитать {table}") from e

        records = []
        for row in rows:
            record = dict(row)
            record["id"] = str(record["id"])
            records.append(record)
        return records

    async def list_records(self, chat_id: int, kind: RecordKind) -> List[Record]:
        return await self._fetch(chat_id, kind)

    async def lookup_candidates(
        self, chat_id: int, kind: RecordKind, query: str
    ) -> List[RemovalCandidate]:
        _, name_column, _ = _SCHEMA[kind]
        records = await self._fetch(chat_id, kind)
        return [
            RemovalCandidate(id=record["id"], display_name=record[name_column])
            for record in records
            if matches_query(record[name_column], query)
        ]

    async def commit_record(self, chat_id: int, kind: RecordKind, fields: Record) -> str:
        table, _, columns = _SCHEMA[kind]
        values = [_to_db(fields.get(column)) for column in columns]
        placeholders = ", ".join("?" for _ in range(len(columns) + 1))

        await self.init_db()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute(
                    f"INSERT INTO {table} (chat_id, {', '.join(columns)}) VALUES ({placeholders})",
                    (chat_id, *values),
                )
                await db.commit()
                record_id = cursor.lastrowid
        except aiosqlite.Error as e:
            logger.error(f"Ошибка записи в {table} для чата {chat_id}: {e}")
            raise StorageError(f"Не удалось сохранить запись в {table}") from e

        logger.info(f"Создана запись {table}#{record_id} для чата {chat_id}")
        return str(record_id)

    async def delete_record(self, chat_id: int, kind: RecordKind, record_id: str) -> None:
        table, _, _ = _SCHEMA[kind]

        await self.init_db()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    f"DELETE FROM {table} WHERE chat_id = ? AND id = ?",
                    (chat_id, int(record_id)),
                )
                await db.commit()
        except (aiosqlite.Error, ValueError) as e:
            logger.error(f"Ошибка удаления {table}#{record_id} для чата {chat_id}: {e}")
            raise StorageError(f"Не удалось удалить запись из {table}") from e

        logger.info(f"Удалена запись {table}#{record_id} для чата {chat_id}")
