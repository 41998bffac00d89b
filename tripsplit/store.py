"""Chats, expenses and an in-memory store for a trip's records."""

from __future__ import annotations

import dataclasses
import itertools
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from .debts import Debt
from .i18n import Args, Context, Formats, Translatable, translate
from .models import Name, Owes, PaidFor, Split, Traveler, TransferredTo
from .money import Money
from .naming import table_name


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _id_of(record: Any) -> Hashable:
    """Accept either a record or its id."""
    return getattr(record, "id", record)


def _fuzzy_match(text: str, pattern: str) -> bool:
    """Case-insensitive match of ``pattern`` as a subsequence of ``text``."""
    remaining = iter(text.lower())
    return all(ch in remaining for ch in pattern.lower())


@dataclass(frozen=True)
class Chat:
    """A chat the bot talks in, with its language and currency."""

    id: int
    last_interaction_utc: datetime
    lang: str
    currency: str


@dataclass(frozen=True)
class Expense(Translatable):
    """An expense of a chat, numbered from 1 within the chat."""

    id: Hashable
    chat: int
    number: int
    description: str
    amount: Decimal

    def translate(self, ctx: Context) -> str:
        amount = Money.from_context(self.amount, ctx)
        return translate(
            ctx,
            Formats.FORMAT_EXPENSE,
            {
                Args.NUMBER: self.number,
                Args.DESCRIPTION: self.description,
                Args.AMOUNT: str(amount),
            },
        )


class TravelStore:
    """Keeps chats, travelers, expenses, transfers and debts in memory."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._chats: dict[int, Chat] = {}
        self._travelers: dict[Hashable, Traveler] = {}
        self._expenses: dict[Hashable, Expense] = {}
        self._paid_for: list[PaidFor] = []
        self._splits: list[Split] = []
        self._transfers: list[TransferredTo] = []
        self._owes: list[Owes] = []

    def _new_id(self, cls: type) -> str:
        return f"{table_name(cls)}:{next(self._ids)}"

    # --- Chats -------------------------------------------------------------

    def create_chat(self, chat_id: int, lang: str, currency: str) -> Chat:
        """Create a chat record; raises ValueError if it already exists."""
        if chat_id in self._chats:
            raise ValueError(f"chat {chat_id} already exists")
        chat = Chat(id=chat_id, last_interaction_utc=_now(), lang=str(lang), currency=currency)
        self._chats[chat_id] = chat
        return chat

    def get_chat(self, chat_id: int) -> Chat | None:
        return self._chats.get(chat_id)

    def _update_chat(self, chat_id: int, **changes: Any) -> Chat | None:
        chat = self._chats.get(chat_id)
        if chat is None:
            return None
        chat = dataclasses.replace(chat, **changes)
        self._chats[chat_id] = chat
        return chat

    def touch_chat(self, chat_id: int) -> Chat | None:
        """Record an interaction now; None if the chat does not exist."""
        return self._update_chat(chat_id, last_interaction_utc=_now())

    def set_chat_lang(self, chat_id: int, lang: str) -> Chat | None:
        return self._update_chat(chat_id, lang=str(lang))

    def set_chat_currency(self, chat_id: int, currency: str) -> Chat | None:
        return self._update_chat(chat_id, currency=currency)

    # --- Travelers ---------------------------------------------------------

    def create_traveler(self, chat_id: int, name: Name) -> Traveler:
        traveler = Traveler(id=self._new_id(Traveler), chat=chat_id, name=name)
        self._travelers[traveler.id] = traveler
        return traveler

    def count_travelers(self, chat_id: int, name: Name) -> int:
        return sum(
            1 for t in self._travelers.values() if t.chat == chat_id and t.name == name
        )

    def travelers(self, chat_id: int) -> list[Traveler]:
        """Travelers of a chat, ordered by name."""
        return sorted(
            (t for t in self._travelers.values() if t.chat == chat_id),
            key=lambda t: t.name,
        )

    def traveler_by_name(self, chat_id: int, name: Name) -> Traveler | None:
        return next(
            (t for t in self._travelers.values() if t.chat == chat_id and t.name == name),
            None,
        )

    # --- Expenses ----------------------------------------------------------

    def create_expense(self, chat_id: int, description: str, amount: Any) -> Expense:
        """Create an expense numbered one past the chat's highest number."""
        highest = max((e.number for e in self._expenses.values() if e.chat == chat_id), default=0)
        expense = Expense(
            id=self._new_id(Expense),
            chat=chat_id,
            number=highest + 1,
            description=description,
            amount=_decimal(amount),
        )
        self._expenses[expense.id] = expense
        return expense

    def count_expenses(self, chat_id: int, number: int) -> int:
        return sum(
            1 for e in self._expenses.values() if e.chat == chat_id and e.number == number
        )

    def delete_expense(self, chat_id: int, number: int) -> None:
        """Delete an expense together with its payer and split relations."""
        doomed = {
            e.id for e in self._expenses.values() if e.chat == chat_id and e.number == number
        }
        for expense_id in doomed:
            del self._expenses[expense_id]
        self._paid_for = [edge for edge in self._paid_for if edge.out not in doomed]
        self._splits = [edge for edge in self._splits if edge.out not in doomed]

    def expenses(self, chat_id: int) -> list[Expense]:
        """Expenses of a chat, ordered by number."""
        return sorted(
            (e for e in self._expenses.values() if e.chat == chat_id),
            key=lambda e: e.number,
        )

    def expenses_by_description(self, chat_id: int, fuzzy_descr: str) -> list[Expense]:
        """Expenses whose description fuzzily matches, ordered by number."""
        return [e for e in self.expenses(chat_id) if _fuzzy_match(e.description, fuzzy_descr)]

    def expenses_by_payer(self, traveler: Any) -> list[Expense]:
        payer = _id_of(traveler)
        return [
            self._expenses[edge.out]
            for edge in self._paid_for
            if edge.in_ == payer and edge.out in self._expenses
        ]

    def expense_by_number(self, chat_id: int, number: int) -> Expense | None:
        return next(
            (e for e in self._expenses.values() if e.chat == chat_id and e.number == number),
            None,
        )

    def relate_paid_for(self, traveler: Any, expense: Any) -> PaidFor:
        edge = PaidFor(id=self._new_id(PaidFor), in_=_id_of(traveler), out=_id_of(expense))
        self._paid_for.append(edge)
        return edge

    def relate_split(self, amount: Any, traveler: Any, expense: Any) -> Split:
        edge = Split(
            id=self._new_id(Split),
            amount=_decimal(amount),
            in_=_id_of(traveler),
            out=_id_of(expense),
        )
        self._splits.append(edge)
        return edge

    # --- Transfers ---------------------------------------------------------

    def _chat_of(self, traveler_id: Hashable) -> int:
        traveler = self._travelers.get(traveler_id)
        if traveler is None:
            raise KeyError(f"unknown traveler: {traveler_id!r}")
        return traveler.chat

    def relate_transfer(self, amount: Any, sender: Any, receiver: Any) -> TransferredTo:
        """Record a transfer numbered one past the sender's chat's highest number."""
        sender_id = _id_of(sender)
        chat_id = self._chat_of(sender_id)
        highest = max(
            (t.number for t in self._transfers if self._chat_of(t.in_) == chat_id), default=0
        )
        edge = TransferredTo(
            id=self._new_id(TransferredTo),
            number=highest + 1,
            amount=_decimal(amount),
            in_=sender_id,
            out=_id_of(receiver),
        )
        self._transfers.append(edge)
        return edge

    def count_transfers(self, chat_id: int, number: int) -> int:
        return sum(
            1
            for t in self._transfers
            if t.number == number and self._chat_of(t.in_) == chat_id
        )

    def delete_transfer(self, chat_id: int, number: int) -> None:
        self._transfers = [
            t
            for t in self._transfers
            if not (t.number == number and self._chat_of(t.in_) == chat_id)
        ]

    # --- Debts -------------------------------------------------------------

    def set_debts(self, chat_id: int, debts: Iterable[Debt]) -> list[Owes]:
        """Replace the chat's debts with ``debts``."""
        self._owes = [o for o in self._owes if self._chat_of(o.in_) != chat_id]
        created = [
            Owes(
                id=self._new_id(Owes),
                amount=_decimal(item.debt),
                in_=_id_of(item.debtor),
                out=_id_of(item.creditor),
            )
            for item in debts
        ]
        self._owes.extend(created)
        return created

    def debts(self, chat_id: int) -> list[Owes]:
        return [o for o in self._owes if self._chat_of(o.in_) == chat_id]