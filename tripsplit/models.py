"""Traveler names and the records shared between travelers and expenses."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Hashable

from .errors import InvalidCharacterError, ReservedKeywordError, StartsWithSlashError
from .i18n import Args, Context, Formats, Translatable, translate
from .money import Money

ALL_KWORD = "all"
END_KWORD = "end"
DECIMAL_SEP = "."
SPLIT_AMONG_ENTRIES_SEP = ";"
SPLIT_AMONG_NAME_AMOUNT_SEP = ":"

RESERVED_KWORDS: tuple[str, ...] = (ALL_KWORD, END_KWORD)
INVALID_CHARS: tuple[str, ...] = (",", SPLIT_AMONG_ENTRIES_SEP, SPLIT_AMONG_NAME_AMOUNT_SEP)


@dataclass(frozen=True, order=True)
class Name:
    """A validated traveler name."""

    value: str = "Default"

    @classmethod
    def parse(cls, text: str) -> Name:
        """Validate ``text`` and return it as a name, trimmed.

        Raises a NameValidationError subclass when the name is rejected.
        """
        stripped = text.strip()
        lowered = stripped.lower()
        if lowered in RESERVED_KWORDS:
            raise ReservedKeywordError(stripped)
        bad = next((ch for ch in lowered if ch in INVALID_CHARS), None)
        if bad is not None:
            raise InvalidCharacterError(stripped, bad)
        if stripped.startswith("/"):
            raise StartsWithSlashError(stripped)
        return cls(stripped)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Traveler:
    """A traveler taking part in a chat's trip."""

    id: Hashable
    chat: Hashable
    name: Name


@dataclass
class ShareDetails(Translatable):
    """The part of an expense owed by one traveler."""

    traveler_name: Name
    amount: Decimal

    def translate(self, ctx: Context) -> str:
        amount = Money.from_context(self.amount, ctx)
        return translate(
            ctx,
            Formats.FORMAT_SHARE_DETAILS,
            {Args.TRAVELER_NAME: str(self.traveler_name), Args.AMOUNT: str(amount)},
        )


@dataclass
class ExpenseDetails(Translatable):
    """An expense together with who paid it and how it was split."""

    expense_number: int
    expense_description: str
    expense_amount: Decimal
    creditor_name: Name
    shares: list[ShareDetails] = field(default_factory=list)
    chat: Any = None

    def translate(self, ctx: Context) -> str:
        amount = Money.from_context(self.expense_amount, ctx)
        shares = "\n".join(share.translate(ctx) for share in self.shares)
        return translate(
            ctx,
            Formats.FORMAT_EXPENSE_DETAILS,
            {
                Args.NUMBER: str(self.expense_number),
                Args.DESCRIPTION: self.expense_description,
                Args.AMOUNT: str(amount),
                Args.CREDITOR: str(self.creditor_name),
                Args.SHARES: shares,
            },
        )


@dataclass
class Transfer(Translatable):
    """Money sent from one traveler to another."""

    number: int
    amount: Decimal
    sender_name: Name
    receiver_name: Name
    chat: Any = None

    def translate(self, ctx: Context) -> str:
        amount = Money.from_context(self.amount, ctx)
        return translate(
            ctx,
            Formats.FORMAT_TRANSFER,
            {
                Args.NUMBER: self.number,
                Args.SENDER: str(self.sender_name),
                Args.RECEIVER: str(self.receiver_name),
                Args.AMOUNT: str(amount),
            },
        )


@dataclass(frozen=True)
class Owes:
    """A simplified debt: ``in_`` owes ``amount`` to ``out``."""

    id: Hashable
    amount: Decimal
    in_: Hashable
    out: Hashable


@dataclass(frozen=True)
class PaidFor:
    """Traveler ``in_`` paid for expense ``out``."""

    id: Hashable
    in_: Hashable
    out: Hashable


@dataclass(frozen=True)
class Split:
    """Traveler ``in_`` takes ``amount`` of expense ``out``."""

    id: Hashable
    amount: Decimal
    in_: Hashable
    out: Hashable


@dataclass(frozen=True)
class TransferredTo:
    """Traveler ``in_`` sent ``amount`` to traveler ``out``; numbered per chat."""

    id: Hashable
    number: int
    amount: Decimal
    in_: Hashable
    out: Hashable