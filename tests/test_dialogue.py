import asyncio
from datetime import datetime, timedelta

from nlu.context_manager import InMemoryPendingStore
from nlu.dialogue import DialogueManager
from nlu.models import PendingKind, RecordKind

CHAT = 1


async def send(dialogue, *messages, chat_id=CHAT):
    reply = None
    for message in messages:
        reply = await dialogue.handle(chat_id, message)
    return reply


class TestDirectAdd:
    async def test_subscription(self, dialogue, storage, pending):
        reply = await send(dialogue, "Добавь Netflix 10000 вон 12 числа")

        assert reply.key == "added_subscription"
        assert reply.state is None
        record = storage.records[RecordKind.SUBSCRIPTION][0]
        assert record["name"] == "Netflix"
        assert record["cost"] == 10000.0
        assert record["currency"] == "WON"
        assert record["currency_symbol"] == "₩"
        assert record["billing_period"] == "monthly"
        assert record["next_payment_date"] == datetime(2024, 4, 12)
        assert record["recurrence_label"] == "Каждый 12 числа"
        assert record["category"] == "Общие"
        assert record["icon"] == "N"
        assert await pending.get(CHAT) is None

    async def test_expense(self, dialogue, storage):
        reply = await send(dialogue, "Расход 12000 вон кафе сегодня")

        assert reply.key == "added_expense"
        assert reply.params["id"] == "1"
        record = storage.records[RecordKind.EXPENSE][0]
        assert record["title"] == "Кафе"
        assert record["amount"] == 12000.0
        assert record["spent_at"] == datetime(2024, 3, 20)

    async def test_income(self, dialogue, storage):
        reply = await send(dialogue, "Получил 50000 вон зарплата")

        assert reply.key == "added_income"
        record = storage.records[RecordKind.INCOME][0]
        assert record["title"] == "Зарплата"
        assert record["received_at"] == datetime(2024, 3, 20)

    async def test_expense_without_amount(self, dialogue, storage, pending):
        reply = await send(dialogue, "Расход кафе")

        assert reply.key == "missing_amount"
        assert reply.params["title"] == "Кафе"
        assert storage.records[RecordKind.EXPENSE] == []
        assert await pending.get(CHAT) is None

    async def test_expense_without_title(self, dialogue, pending):
        reply = await send(dialogue, "Расход 5000 вон")

        assert reply.key == "missing_title"
        assert reply.kind == RecordKind.EXPENSE
        assert await pending.get(CHAT) is None


class TestSubscriptionFlow:
    async def test_full_flow_with_skipped_date(self, dialogue, storage, pending):
        reply = await send(dialogue, "Добавь подписку")
        assert reply.key == "ask_name"
        assert (await pending.get(CHAT)).kind == PendingKind.AWAITING_ADD_NAME

        reply = await send(dialogue, "N")
        assert reply.key == "name_too_short"
        assert (await pending.get(CHAT)).kind == PendingKind.AWAITING_ADD_NAME

        reply = await send(dialogue, "Netflix")
        assert reply.key == "ask_cost"
        assert reply.state == PendingKind.AWAITING_ADD_COST

        reply = await send(dialogue, "abc")
        assert reply.key == "cost_not_recognized"

        reply = await send(dialogue, "10000 вон")
        assert reply.key == "ask_date"
        assert reply.state == PendingKind.AWAITING_ADD_DATE

        reply = await send(dialogue, "пропустить")
        assert reply.key == "added_subscription"
        record = storage.records[RecordKind.SUBSCRIPTION][0]
        assert record["name"] == "Netflix"
        assert record["cost"] == 10000.0
        assert record["next_payment_date"] == datetime(2024, 4, 1)
        assert record["recurrence_label"] == "Каждый 1 числа"
        assert await pending.get(CHAT) is None

    async def test_explicit_date(self, dialogue, storage):
        reply = await send(dialogue, "Добавь подписку", "Netflix", "10000", "15 числа")

        assert reply.key == "added_subscription"
        record = storage.records[RecordKind.SUBSCRIPTION][0]
        assert record["next_payment_date"] == datetime(2024, 4, 15)
        assert record["currency"] == "WON"

    async def test_cost_from_first_message_skips_cost_step(self, dialogue, storage):
        reply = await send(dialogue, "Подписка 9900 вон", "Spotify")
        assert reply.key == "ask_date"

        reply = await send(dialogue, "пропустить")
        assert reply.key == "added_subscription"
        assert storage.records[RecordKind.SUBSCRIPTION][0]["cost"] == 9900.0

    async def test_cost_currency_is_remembered(self, dialogue, storage):
        await send(dialogue, "Добавь подписку", "Yandex", "300 рублей", "пропустить")

        record = storage.records[RecordKind.SUBSCRIPTION][0]
        assert record["currency"] == "RUB"
        assert record["currency_symbol"] == "₽"

    async def test_cancel_in_the_middle(self, dialogue, storage, pending):
        await send(dialogue, "Добавь подписку", "Netflix")

        reply = await send(dialogue, "отмена")
        assert reply.key == "cancelled"
        assert await pending.get(CHAT) is None
        assert storage.records[RecordKind.SUBSCRIPTION] == []

    async def test_cancel_command(self, dialogue, pending):
        await send(dialogue, "Добавь подписку")

        reply = await send(dialogue, "/cancel")
        assert reply.key == "cancelled"
        assert await pending.get(CHAT) is None

    async def test_expired_flow_starts_over(self, dialogue, clock, now, storage):
        await send(dialogue, "Добавь подписку")
        clock.now = now + timedelta(minutes=11)

        reply = await send(dialogue, "Netflix")
        assert reply.key == "unknown"
        assert storage.records[RecordKind.SUBSCRIPTION] == []

    async def test_turns_refresh_ttl(self, dialogue, clock, now):
        await send(dialogue, "Добавь подписку")
        clock.now = now + timedelta(minutes=8)
        await send(dialogue, "Netflix")
        clock.now = now + timedelta(minutes=16)

        reply = await send(dialogue, "10000")
        assert reply.key == "ask_date"


class TestValidation:
    async def test_long_name_is_rejected(self, dialogue, storage, pending):
        reply = await send(dialogue, "Добавь подписку", "x" * 101, "10000", "пропустить")

        assert reply.key == "validation_failed"
        assert any("слишком длинное" in error for error in reply.params["errors"])
        assert storage.records[RecordKind.SUBSCRIPTION] == []
        assert await pending.get(CHAT) is None

    async def test_cost_out_of_range(self, dialogue, storage):
        reply = await send(dialogue, "Добавь Netflix 2000000000 вон 12 числа")

        assert reply.key == "validation_failed"
        assert len(reply.params["errors"]) == 1
        assert storage.records[RecordKind.SUBSCRIPTION] == []


class TestTypeChoice:
    async def test_choice_by_number(self, dialogue, storage, pending):
        reply = await send(dialogue, "Кофе 5000 вон")
        assert reply.key == "ask_type_choice"
        assert reply.params["title"] == "Кофе"
        assert reply.params["amount"] == 5000.0
        assert (await pending.get(CHAT)).kind == PendingKind.AWAITING_TYPE_CHOICE

        reply = await send(dialogue, "непонятно")
        assert reply.key == "type_choice_invalid"
        assert (await pending.get(CHAT)).kind == PendingKind.AWAITING_TYPE_CHOICE

        reply = await send(dialogue, "1")
        assert reply.key == "added_expense"
        record = storage.records[RecordKind.EXPENSE][0]
        assert record["title"] == "Кофе"
        assert record["amount"] == 5000.0
        assert await pending.get(CHAT) is None

    async def test_choice_by_keyword(self, dialogue, storage):
        reply = await send(dialogue, "Кофе 5000 вон", "подписка")

        assert reply.key == "added_subscription"
        record = storage.records[RecordKind.SUBSCRIPTION][0]
        assert record["name"] == "Кофе"
        assert record["next_payment_date"] == datetime(2024, 4, 1)

    async def test_choice_income(self, dialogue, storage):
        reply = await send(dialogue, "Кофе 5000 вон", "доход")

        assert reply.key == "added_income"
        assert storage.records[RecordKind.INCOME][0]["title"] == "Кофе"


class TestRemoval:
    async def test_several_candidates_then_index(self, dialogue, storage, pending):
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Netflix")
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Netflix Kids")
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Spotify")

        reply = await send(dialogue, "Удали подписку netflix")
        assert reply.key == "ask_removal_choice"
        assert [c.display_name for c in reply.candidates] == ["Netflix", "Netflix Kids"]
        assert (await pending.get(CHAT)).kind == PendingKind.AWAITING_REMOVAL_CHOICE

        reply = await send(dialogue, "5")
        assert reply.key == "removal_choice_invalid"
        assert len(reply.candidates) == 2

        reply = await send(dialogue, "2")
        assert reply.key == "removed"
        assert reply.params["name"] == "Netflix Kids"
        names = [r["name"] for r in storage.records[RecordKind.SUBSCRIPTION]]
        assert names == ["Netflix", "Spotify"]
        assert await pending.get(CHAT) is None

    async def test_choice_by_exact_name(self, dialogue, storage):
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Netflix")
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Netflix Kids")

        reply = await send(dialogue, "Удали подписку netflix", "netflix")

        assert reply.params["name"] == "Netflix"
        names = [r["name"] for r in storage.records[RecordKind.SUBSCRIPTION]]
        assert names == ["Netflix Kids"]

    async def test_choice_by_name_with_apostrophe(self, dialogue, storage):
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="McDonald's")
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="McDonald's Drive")

        reply = await send(dialogue, "Удали подписку mcdonald", "McDonald's")

        assert reply.key == "removed"
        assert reply.params["name"] == "McDonald's"
        names = [r["name"] for r in storage.records[RecordKind.SUBSCRIPTION]]
        assert names == ["McDonald's Drive"]

    async def test_single_match_is_removed_at_once(self, dialogue, storage):
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Spotify")

        reply = await send(dialogue, "Удали подписку spotify")
        assert reply.key == "removed"
        assert storage.records[RecordKind.SUBSCRIPTION] == []

    async def test_generic_remove_targets_subscriptions(self, dialogue, storage):
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Netflix")

        reply = await send(dialogue, "Удали Netflix")
        assert reply.key == "removed"
        assert reply.kind == RecordKind.SUBSCRIPTION

    async def test_remove_expense(self, dialogue, storage):
        storage.add(CHAT, RecordKind.EXPENSE, title="Кафе")

        reply = await send(dialogue, "удали расход кафе")
        assert reply.key == "removed"
        assert storage.records[RecordKind.EXPENSE] == []

    async def test_not_found(self, dialogue, storage):
        storage.add(CHAT, RecordKind.SUBSCRIPTION, name="Netflix")

        reply = await send(dialogue, "Удали подписку hulu")
        assert reply.key == "not_found"
        assert reply.params["query"] == "hulu"

    async def test_missing_name(self, dialogue):
        reply = await send(dialogue, "Удали подписку")
        assert reply.key == "remove_missing_name"

    async def test_other_chat_records_are_invisible(self, dialogue, storage):
        storage.add(2, RecordKind.SUBSCRIPTION, name="Netflix")

        reply = await send(dialogue, "Удали подписку netflix")
        assert reply.key == "not_found"

    async def test_candidates_are_capped(self, dialogue, storage, pending):
        for i in range(12):
            storage.add(CHAT, RecordKind.SUBSCRIPTION, name=f"Netflix {i + 1}")

        reply = await send(dialogue, "Удали подписку netflix")
        assert len(reply.candidates) == 10
        assert len((await pending.get(CHAT)).candidates) == 10


class TestLists:
    async def test_empty(self, dialogue):
        reply = await send(dialogue, "Мои подписки")
        assert reply.key == "list_empty"
        assert reply.kind == RecordKind.SUBSCRIPTION

    async def test_records_of_chat(self, dialogue, storage):
        storage.add(CHAT, RecordKind.EXPENSE, title="Кафе", amount=12000.0)
        storage.add(2, RecordKind.EXPENSE, title="Такси", amount=6000.0)

        reply = await send(dialogue, "Мои расходы")
        assert reply.key == "list"
        assert [r["title"] for r in reply.records] == ["Кафе"]


class TestStorageFailure:
    async def test_commit_failure(self, dialogue, storage, pending):
        storage.fail = True

        reply = await send(dialogue, "Расход 12000 вон кафе сегодня")
        assert reply.key == "storage_error"
        assert await pending.get(CHAT) is None

    async def test_failure_at_end_of_flow_resets_state(self, dialogue, storage, pending):
        await send(dialogue, "Добавь подписку", "Netflix", "10000")
        storage.fail = True

        reply = await send(dialogue, "пропустить")
        assert reply.key == "storage_error"
        assert await pending.get(CHAT) is None

    async def test_list_failure(self, dialogue, storage):
        storage.fail = True
        assert (await send(dialogue, "Мои подписки")).key == "storage_error"

    async def test_lookup_failure(self, dialogue, storage):
        storage.fail = True
        assert (await send(dialogue, "Удали подписку netflix")).key == "storage_error"


class TestSimpleReplies:
    async def test_greeting(self, dialogue):
        assert (await send(dialogue, "Привет")).key == "greet"

    async def test_start_and_help(self, dialogue):
        assert (await send(dialogue, "/start")).key == "start"
        assert (await send(dialogue, "/help")).key == "help"

    async def test_unknown(self, dialogue):
        assert (await send(dialogue, "что-то непонятное")).key == "unknown"

    async def test_cancel_when_idle(self, dialogue):
        assert (await send(dialogue, "отмена")).key == "cancelled"

    async def test_reset_drops_pending(self, dialogue, pending):
        await send(dialogue, "Добавь подписку")
        await dialogue.reset(CHAT)
        assert await pending.get(CHAT) is None


async def test_chats_are_independent(dialogue, storage, pending):
    await send(dialogue, "Добавь подписку", chat_id=1)

    replies = await asyncio.gather(
        dialogue.handle(1, "Netflix"),
        dialogue.handle(2, "Расход 12000 вон кафе сегодня"),
    )

    assert [r.key for r in replies] == ["ask_cost", "added_expense"]
    assert (await pending.get(1)).kind == PendingKind.AWAITING_ADD_COST
    assert await pending.get(2) is None


class YieldingPendingStore(InMemoryPendingStore):
    """Отдаёт управление циклу событий на каждом чтении."""

    async def get(self, chat_id):
        await asyncio.sleep(0)
        return await super().get(chat_id)


async def test_turns_of_one_chat_run_in_order(storage, clock):
    pending = YieldingPendingStore(ttl_minutes=10, clock=clock)
    dialogue = DialogueManager(storage, pending, clock=clock)
    await send(dialogue, "Добавь подписку")

    replies = await asyncio.gather(
        dialogue.handle(CHAT, "Netflix"),
        dialogue.handle(CHAT, "10000 вон"),
    )

    assert [r.key for r in replies] == ["ask_cost", "ask_date"]
    conversation = await pending.get(CHAT)
    assert conversation.kind == PendingKind.AWAITING_ADD_DATE
    assert conversation.payload["name"] == "Netflix"
    assert conversation.payload["cost"] == 10000.0
