from datetime import datetime
from typing import Dict, List

import pytest

from database.storage import FinanceStorage, Record, StorageError, matches_query
from nlu.context_manager import InMemoryPendingStore
from nlu.dialogue import DialogueManager
from nlu.models import RecordKind, RemovalCandidate

NAME_FIELDS = {
    RecordKind.SUBSCRIPTION: "name",
    RecordKind.EXPENSE: "title",
    RecordKind.INCOME: "title",
}


class FakeStorage(FinanceStorage):
    """Хранилище в памяти; fail=True имитирует сбой бэкенда."""

    def __init__(self):
        self.records: Dict[RecordKind, List[Record]] = {kind: [] for kind in RecordKind}
        self.fail = False
        self._next_id = 1

    def _check(self):
        if self.fail:
            raise StorageError("backend is down")

    def add(self, chat_id: int, kind: RecordKind, **fields) -> str:
        record_id = str(self._next_id)
        self._next_id += 1
        self.records[kind].append(dict(fields, id=record_id, chat_id=chat_id))
        return record_id

    async def lookup_candidates(self, chat_id, kind, query):
        self._check()
        name_field = NAME_FIELDS[kind]
        return [
            RemovalCandidate(id=r["id"], display_name=r[name_field])
            for r in self.records[kind]
            if r["chat_id"] == chat_id and matches_query(r[name_field], query)
        ]

    async def commit_record(self, chat_id, kind, fields):
        self._check()
        return self.add(chat_id, kind, **fields)

    async def delete_record(self, chat_id, kind, record_id):
        self._check()
        self.records[kind] = [
            r for r in self.records[kind]
            if not (r["chat_id"] == chat_id and r["id"] == record_id)
        ]

    async def list_records(self, chat_id, kind):
        self._check()
        return [r for r in self.records[kind] if r["chat_id"] == chat_id]


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def now():
    return datetime(2024, 3, 20, 14, 30)


@pytest.fixture
def clock(now):
    return FakeClock(now)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def pending(clock):
    return InMemoryPendingStore(ttl_minutes=10, clock=clock)


@pytest.fixture
def dialogue(storage, pending, clock):
    return DialogueManager(storage, pending, clock=clock)
