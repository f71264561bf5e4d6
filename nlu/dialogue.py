"""
Dialogue Manager - конечный автомат уточняющего диалога.

Получает сырой текст, решает, выполнить действие сразу, задать
уточняющий вопрос или предложить выбор из списка. Состояние между
ходами хранится в PendingStore; отсутствие записи означает idle.

Сбои хранилища перехватываются в точке обращения к нему: пользователь
получает общий ответ, диалог всегда возвращается в idle.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from config.constants import DEFAULT_CATEGORY, MAX_REMOVAL_CANDIDATES, MIN_NAME_LENGTH
from database.storage import FinanceStorage, Record, StorageError
from nlu.classifiers import is_cancel_request
from nlu.classifiers.intent_classifier import has_category_keyword
from nlu.context_manager import PendingStore
from nlu.extractors import default_payment_date, detect_currency, extract_cost, parse_date_enhanced
from nlu.models import (
    BillingPeriod,
    Intent,
    Language,
    PendingConversation,
    PendingKind,
    RecordKind,
    RemovalCandidate,
    Slots,
    SubscriptionDate,
)
from nlu.normalizer import detect_language, normalize
from nlu.pipeline import NLUPipeline
from nlu import vocabulary as vocab
from utils.logger import setup_logger
from utils.validators import InputValidator

logger = setup_logger(name="dialogue", level=logging.INFO)

Clock = Callable[[], datetime]

# Порядок вариантов в вопросе "что это?"
TYPE_CHOICES = {
    "1": RecordKind.EXPENSE,
    "2": RecordKind.INCOME,
    "3": RecordKind.SUBSCRIPTION,
}

_SIMPLE_REPLIES = {
    Intent.START: "start",
    Intent.HELP: "help",
    Intent.GREET: "greet",
    Intent.UNKNOWN: "unknown",
}


@dataclass
class DialogueReply:
    """
    Ответ автомата на одно сообщение.

    Attributes:
        key: Ключ шаблона ответа
        params: Подстановки для шаблона
        kind: Тип записи, к которому относится ответ
        records: Записи для ответа на запрос списка
        candidates: Варианты для выбора удаляемой записи
        state: Состояние после хода (None - idle)
    """
    key: str
    params: Dict[str, Any] = field(default_factory=dict)
    kind: Optional[RecordKind] = None
    records: List[Record] = field(default_factory=list)
    candidates: List[RemovalCandidate] = field(default_factory=list)
    state: Optional[PendingKind] = None


def display_name(title: str) -> str:
    """Название для показа и хранения: первая буква заглавная."""
    title = title.strip()
    return title[:1].upper() + title[1:] if title else title


def _choice_key(text: str) -> str:
    """Ответ пользователя и имя кандидата сравниваются в одном нормализованном виде."""
    return normalize(text).strip(" .,;:()")


class DialogueManager:
    """
    Конечный автомат диалога.

    Ходы одного чата сериализуются блокировкой из PendingStore,
    разные чаты обрабатываются независимо.
    """

    def __init__(
        self,
        storage: FinanceStorage,
        pending: PendingStore,
        pipeline: Optional[NLUPipeline] = None,
        clock: Optional[Clock] = None,
        validator: Optional[InputValidator] = None,
    ):
        self.storage = storage
        self.pending = pending
        self.pipeline = pipeline or NLUPipeline()
        self.validator = validator or InputValidator()
        self._clock = clock or datetime.now

    async def handle(self, chat_id: int, raw_text: str) -> DialogueReply:
        """
        Обработать одно сообщение чата.

        Args:
            chat_id: Идентификатор чата
            raw_text: Сырой текст (или расшифровка голосового)

        Returns:
            DialogueReply
        """
        async with self.pending.lock(chat_id):
            return await self._handle_locked(chat_id, raw_text or "")

    async def reset(self, chat_id: int):
        """Сбросить незавершённый диалог (например, по /start)."""
        async with self.pending.lock(chat_id):
            await self.pending.delete(chat_id)

    async def _handle_locked(self, chat_id: int, raw_text: str) -> DialogueReply:
        now = self._clock()
        text = normalize(raw_text)

        if is_cancel_request(text):
            await self.pending.delete(chat_id)
            logger.info(f"Chat {chat_id}: dialogue cancelled")
            return DialogueReply("cancelled")

        conversation = await self.pending.get(chat_id)
        if conversation is None:
            return await self._handle_idle(chat_id, raw_text, now)

        logger.info(f"Chat {chat_id}: state {conversation.kind.value}")
        handlers = {
            PendingKind.AWAITING_ADD_NAME: self._on_add_name,
            PendingKind.AWAITING_ADD_COST: self._on_add_cost,
            PendingKind.AWAITING_ADD_DATE: self._on_add_date,
            PendingKind.AWAITING_TYPE_CHOICE: self._on_type_choice,
            PendingKind.AWAITING_REMOVAL_CHOICE: self._on_removal_choice,
        }
        return await handlers[conversation.kind](conversation, text, now)

    # ------------------------------------------------------------------
    # idle
    # ------------------------------------------------------------------

    async def _handle_idle(self, chat_id: int, raw_text: str, now: datetime) -> DialogueReply:
        result = self.pipeline.process(raw_text, now=now)
        intent = result.intent.intent
        kind = Intent.record_kind(intent)
        logger.info(
            f"Chat {chat_id}: intent {intent.value} ({result.intent.confidence:.2f}, {result.lang.value})"
        )

        if intent in _SIMPLE_REPLIES:
            return DialogueReply(_SIMPLE_REPLIES[intent])
        if intent == Intent.CANCEL:
            return DialogueReply("cancelled")
        if Intent.is_list(intent):
            return await self._list(chat_id, kind)
        if Intent.is_add(intent):
            return await self._add(chat_id, kind, result.slots, now)
        if Intent.is_remove(intent):
            return await self._remove(chat_id, kind, result.slots.title, now)
        if intent == Intent.ADD_AMBIGUOUS:
            return await self._ask_type(chat_id, result.slots, result.normalized, result.lang, now)
        return DialogueReply("unknown")

    async def _list(self, chat_id: int, kind: RecordKind) -> DialogueReply:
        try:
            records = await self.storage.list_records(chat_id, kind)
        except StorageError:
            return await self._storage_failure(chat_id, "list", kind)

        if not records:
            return DialogueReply("list_empty", kind=kind)
        return DialogueReply("list", kind=kind, records=records)

    async def _add(
        self,
        chat_id: int,
        kind: RecordKind,
        slots: Slots,
        now: datetime,
    ) -> DialogueReply:
        if not slots.has_title():
            if kind == RecordKind.SUBSCRIPTION:
                return await self._start_subscription_flow(chat_id, slots, now)
            return DialogueReply("missing_title", kind=kind)

        if not slots.has_amount():
            return DialogueReply(
                "missing_amount", params={"title": display_name(slots.title)}, kind=kind
            )

        return await self._commit(chat_id, kind, self._fields_from_slots(kind, slots))

    async def _start_subscription_flow(
        self, chat_id: int, slots: Slots, now: datetime
    ) -> DialogueReply:
        payload: Dict[str, Any] = {"billing_period": slots.billing_period.value}
        if slots.has_amount():
            payload.update(
                cost=slots.amount,
                currency=slots.currency_code,
                currency_symbol=slots.currency_symbol,
            )
        conversation = PendingConversation(
            chat_id=chat_id,
            kind=PendingKind.AWAITING_ADD_NAME,
            payload=payload,
            record_kind=RecordKind.SUBSCRIPTION,
            created_at=now,
        )
        await self.pending.set(conversation)
        return DialogueReply(
            "ask_name", kind=RecordKind.SUBSCRIPTION, state=PendingKind.AWAITING_ADD_NAME
        )

    async def _ask_type(
        self,
        chat_id: int,
        slots: Slots,
        text: str,
        lang: Language,
        now: datetime,
    ) -> DialogueReply:
        if not slots.has_amount():
            return DialogueReply("missing_amount", params={"title": display_name(slots.title)})
        if not slots.has_title():
            return DialogueReply("missing_title")

        conversation = PendingConversation(
            chat_id=chat_id,
            kind=PendingKind.AWAITING_TYPE_CHOICE,
            payload={"text": text, "lang": lang.value},
            created_at=now,
        )
        await self.pending.set(conversation)
        return DialogueReply(
            "ask_type_choice",
            params={
                "title": display_name(slots.title),
                "amount": slots.amount,
                "currency_symbol": slots.currency_symbol,
            },
            state=PendingKind.AWAITING_TYPE_CHOICE,
        )

    async def _remove(
        self, chat_id: int, kind: RecordKind, query: str, now: datetime
    ) -> DialogueReply:
        if not query:
            return DialogueReply("remove_missing_name", kind=kind)

        try:
            candidates = await self.storage.lookup_candidates(chat_id, kind, query)
        except StorageError:
            return await self._storage_failure(chat_id, "lookup", kind)

        if not candidates:
            return DialogueReply("not_found", params={"query": query}, kind=kind)
        if len(candidates) == 1:
            return await self._delete(chat_id, kind, candidates[0])

        candidates = candidates[:MAX_REMOVAL_CANDIDATES]
        conversation = PendingConversation(
            chat_id=chat_id,
            kind=PendingKind.AWAITING_REMOVAL_CHOICE,
            record_kind=kind,
            candidates=candidates,
            created_at=now,
        )
        await self.pending.set(conversation)
        return DialogueReply(
            "ask_removal_choice",
            kind=kind,
            candidates=candidates,
            state=PendingKind.AWAITING_REMOVAL_CHOICE,
        )

    # ------------------------------------------------------------------
    # Незавершённые диалоги
    # ------------------------------------------------------------------

    async def _on_add_name(
        self, conversation: PendingConversation, text: str, now: datetime
    ) -> DialogueReply:
        name = text.strip()
        if len(name) < MIN_NAME_LENGTH:
            return DialogueReply(
                "name_too_short", kind=RecordKind.SUBSCRIPTION, state=conversation.kind
            )

        next_kind = (
            PendingKind.AWAITING_ADD_DATE
            if "cost" in conversation.payload
            else PendingKind.AWAITING_ADD_COST
        )
        await self.pending.set(conversation.advance(next_kind, now=now, name=display_name(name)))
        key = "ask_date" if next_kind == PendingKind.AWAITING_ADD_DATE else "ask_cost"
        return DialogueReply(key, kind=RecordKind.SUBSCRIPTION, state=next_kind)

    async def _on_add_cost(
        self, conversation: PendingConversation, text: str, now: datetime
    ) -> DialogueReply:
        cost = extract_cost(text)
        if cost is None:
            return DialogueReply(
                "cost_not_recognized", kind=RecordKind.SUBSCRIPTION, state=conversation.kind
            )

        currency = detect_currency(text)
        await self.pending.set(conversation.advance(
            PendingKind.AWAITING_ADD_DATE,
            now=now,
            cost=cost,
            currency=currency.code,
            currency_symbol=currency.symbol,
        ))
        return DialogueReply(
            "ask_date", kind=RecordKind.SUBSCRIPTION, state=PendingKind.AWAITING_ADD_DATE
        )

    async def _on_add_date(
        self, conversation: PendingConversation, text: str, now: datetime
    ) -> DialogueReply:
        payload = conversation.payload
        billing_period = BillingPeriod(payload.get("billing_period", BillingPeriod.MONTHLY.value))

        if vocab.contains_any(text.lower(), vocab.SKIP_WORDS):
            payment = default_payment_date(now)
        else:
            payment = parse_date_enhanced(text, billing_period, now=now)

        fields = self._subscription_fields(
            name=payload.get("name", ""),
            cost=payload.get("cost"),
            currency_code=payload.get("currency", vocab.DEFAULT_CURRENCY.code),
            currency_symbol=payload.get("currency_symbol", vocab.DEFAULT_CURRENCY.symbol),
            billing_period=billing_period,
            payment=payment,
            category=None,
        )
        await self.pending.delete(conversation.chat_id)
        return await self._commit(conversation.chat_id, RecordKind.SUBSCRIPTION, fields)

    async def _on_type_choice(
        self, conversation: PendingConversation, text: str, now: datetime
    ) -> DialogueReply:
        kind = self._resolve_type_choice(text)
        if kind is None:
            return DialogueReply("type_choice_invalid", state=conversation.kind)

        chat_id = conversation.chat_id
        await self.pending.delete(chat_id)

        original = conversation.payload.get("text", "")
        lang = Language(conversation.payload.get("lang", detect_language(original).value))
        slots = self.pipeline.extract_slots_for_kind(original, kind, lang, now=now)
        logger.info(f"Chat {chat_id}: type resolved to {kind.value}")

        if not slots.has_title():
            return DialogueReply("missing_title", kind=kind)
        if not slots.has_amount():
            return DialogueReply(
                "missing_amount", params={"title": display_name(slots.title)}, kind=kind
            )
        return await self._commit(chat_id, kind, self._fields_from_slots(kind, slots))

    async def _on_removal_choice(
        self, conversation: PendingConversation, text: str, now: datetime
    ) -> DialogueReply:
        candidates = conversation.candidates
        kind = conversation.record_kind or RecordKind.SUBSCRIPTION
        choice = self._resolve_removal_choice(text, candidates)
        if choice is None:
            return DialogueReply(
                "removal_choice_invalid",
                kind=kind,
                candidates=candidates,
                state=conversation.kind,
            )

        await self.pending.delete(conversation.chat_id)
        return await self._delete(conversation.chat_id, kind, choice)

    @staticmethod
    def _resolve_type_choice(text: str) -> Optional[RecordKind]:
        answer = text.strip().lower().strip(" .,;:()")
        if answer in TYPE_CHOICES:
            return TYPE_CHOICES[answer]

        matched = [
            kind for kind in RecordKind
            if has_category_keyword(answer, kind)
            or vocab.contains_any(answer, vocab.flatten(vocab.ADD_TRIGGERS[kind]))
        ]
        return matched[0] if len(matched) == 1 else None

    @staticmethod
    def _resolve_removal_choice(
        text: str, candidates: List[RemovalCandidate]
    ) -> Optional[RemovalCandidate]:
        answer = _choice_key(text)
        if answer.isdigit():
            index = int(answer)
            if 1 <= index <= len(candidates):
                return candidates[index - 1]
            return None

        folded = answer.casefold()
        for candidate in candidates:
            if _choice_key(candidate.display_name).casefold() == folded:
                return candidate
        return None

    # ------------------------------------------------------------------
    # Запись и удаление
    # ------------------------------------------------------------------

    def _subscription_fields(
        self,
        name: str,
        cost: Optional[float],
        currency_code: str,
        currency_symbol: str,
        billing_period: BillingPeriod,
        payment: SubscriptionDate,
        category: Optional[str],
    ) -> Record:
        name = display_name(name)
        return {
            "name": name,
            "cost": cost,
            "currency": currency_code,
            "currency_symbol": currency_symbol,
            "billing_period": billing_period.value,
            "next_payment_date": payment.date,
            "recurrence_label": payment.recurrence_label,
            "category": category or DEFAULT_CATEGORY,
            "icon": name[:1].upper(),
        }

    def _fields_from_slots(self, kind: RecordKind, slots: Slots) -> Record:
        if kind == RecordKind.SUBSCRIPTION:
            return self._subscription_fields(
                name=slots.title,
                cost=slots.amount,
                currency_code=slots.currency_code,
                currency_symbol=slots.currency_symbol,
                billing_period=slots.billing_period,
                payment=slots.subscription_date,
                category=slots.category,
            )

        date_field = "spent_at" if kind == RecordKind.EXPENSE else "received_at"
        return {
            "title": display_name(slots.title),
            "amount": slots.amount,
            "currency": slots.currency_code,
            "currency_symbol": slots.currency_symbol,
            date_field: slots.transaction_date,
            "category": slots.category or DEFAULT_CATEGORY,
        }

    def _validate(self, kind: RecordKind, fields: Record):
        if kind == RecordKind.SUBSCRIPTION:
            return self.validator.validate_subscription(fields)
        return self.validator.validate_transaction(fields)

    async def _commit(self, chat_id: int, kind: RecordKind, fields: Record) -> DialogueReply:
        is_valid, errors = self._validate(kind, fields)
        if not is_valid:
            await self.pending.delete(chat_id)
            logger.info(f"Chat {chat_id}: {kind.value} rejected by validation ({len(errors)} errors)")
            return DialogueReply("validation_failed", params={"errors": errors}, kind=kind)

        try:
            record_id = await self.storage.commit_record(chat_id, kind, fields)
        except StorageError:
            return await self._storage_failure(chat_id, "commit", kind)

        await self.pending.delete(chat_id)
        logger.info(f"Chat {chat_id}: {kind.value} #{record_id} created")
        params = dict(fields, id=record_id)
        return DialogueReply(f"added_{kind.value}", params=params, kind=kind)

    async def _delete(
        self, chat_id: int, kind: RecordKind, candidate: RemovalCandidate
    ) -> DialogueReply:
        try:
            await self.storage.delete_record(chat_id, kind, candidate.id)
        except StorageError:
            return await self._storage_failure(chat_id, "delete", kind)

        await self.pending.delete(chat_id)
        logger.info(f"Chat {chat_id}: {kind.value} #{candidate.id} deleted")
        return DialogueReply("removed", params={"name": candidate.display_name}, kind=kind)

    async def _storage_failure(
        self, chat_id: int, operation: str, kind: Optional[RecordKind]
    ) -> DialogueReply:
        logger.error(
            f"Chat {chat_id}: storage {operation} failed for {kind.value if kind else '-'}",
            exc_info=True,
        )
        await self.pending.delete(chat_id)
        return DialogueReply("storage_error", kind=kind)
