"""Errors raised while validating names, adding expenses and running commands."""

from __future__ import annotations

import enum
from abc import abstractmethod
from decimal import Decimal
from typing import Any

from .i18n import Args, Commands, Context, Errors, Translatable, translate


def _arg_value(value: Any) -> Any:
    """Render decimals in plain notation; leave other values to the formatter."""
    if isinstance(value, Decimal):
        return format(value, "f")
    return value


class _TranslatableError(Translatable, Exception):
    """An exception whose text is a localized message."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.args))


# --- Name validation ------------------------------------------------------


class NameValidationError(_TranslatableError):
    """A traveler name was rejected."""

    def __init__(self, name: str, *details: Any) -> None:
        super().__init__(name, *details)
        self.name = name

    @abstractmethod
    def _message(self) -> tuple[str, dict[str, Any]]:
        ...

    def translate(self, ctx: Context) -> str:
        key, args = self._message()
        return translate(ctx, key, args)


class StartsWithSlashError(NameValidationError):
    """The name starts with a slash and would look like a command."""

    def _message(self) -> tuple[str, dict[str, Any]]:
        return Errors.NAME_VALIDATION_ERROR_STARTS_WITH_SLASH, {Args.NAME: self.name}


class InvalidCharacterError(NameValidationError):
    """The name holds a character that is not allowed."""

    def __init__(self, name: str, char: str) -> None:
        super().__init__(name, char)
        self.char = char

    def _message(self) -> tuple[str, dict[str, Any]]:
        return Errors.NAME_VALIDATION_ERROR_INVALID_CHAR, {
            Args.NAME: self.name,
            Args.CHAR: self.char,
        }


class ReservedKeywordError(NameValidationError):
    """The name is one of the reserved keywords."""

    def _message(self) -> tuple[str, dict[str, Any]]:
        return Errors.NAME_VALIDATION_ERROR_RESERVED_KEYWORD, {Args.NAME: self.name}


# --- Adding expenses ------------------------------------------------------


class AddExpenseError(_TranslatableError):
    """The shares of an expense could not be parsed or computed."""

    @abstractmethod
    def _render(self, ctx: Context) -> str:
        ...

    def translate(self, ctx: Context) -> str:
        return self._render(ctx)


class RepeatedTravelerNameError(AddExpenseError):
    def __init__(self, name: Any) -> None:
        super().__init__(name)
        self.name = name

    def _render(self, ctx: Context) -> str:
        return translate(
            ctx, Errors.ADD_EXPENSE_ERROR_REPEATED_TRAVELER_NAME, {Args.NAME: self.name}
        )


class TravelerNotFoundError(AddExpenseError):
    def __init__(self, name: Any) -> None:
        super().__init__(name)
        self.name = name

    def _render(self, ctx: Context) -> str:
        return translate(
            ctx, Errors.ADD_EXPENSE_ERROR_TRAVELER_NOT_FOUND, {Args.NAME: self.name}
        )


class ExpenseTooHighError(AddExpenseError):
    """The fixed shares add up to more than the total."""

    def __init__(self, tot_amount: Decimal) -> None:
        super().__init__(tot_amount)
        self.tot_amount = tot_amount

    def _render(self, ctx: Context) -> str:
        return translate(
            ctx,
            Errors.ADD_EXPENSE_ERROR_EXPENSE_TOO_HIGH,
            {Args.AMOUNT: _arg_value(self.tot_amount)},
        )


class ExpenseTooLowError(AddExpenseError):
    """The shares cover less than the total and nobody takes the rest."""

    def __init__(self, expense: Decimal, tot_amount: Decimal) -> None:
        super().__init__(expense, tot_amount)
        self.expense = expense
        self.tot_amount = tot_amount

    def _render(self, ctx: Context) -> str:
        return translate(
            ctx,
            Errors.ADD_EXPENSE_ERROR_EXPENSE_TOO_LOW,
            {
                Args.EXPENSE: _arg_value(self.expense),
                Args.AMOUNT: _arg_value(self.tot_amount),
            },
        )


class InvalidFormatError(AddExpenseError):
    """An entry of the shares list does not match the expected format."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text

    def _render(self, ctx: Context) -> str:
        return translate(ctx, Errors.ADD_EXPENSE_ERROR_INVALID_FORMAT, {Args.INPUT: self.text})


class NoTravelersSpecifiedError(AddExpenseError):
    def _render(self, ctx: Context) -> str:
        return translate(ctx, Errors.ADD_EXPENSE_ERROR_NO_TRAVELERS_SPECIFIED)


class NameValidationFailedError(AddExpenseError):
    """A name in the shares list was rejected."""

    def __init__(self, error: NameValidationError) -> None:
        super().__init__(error)
        self.error = error

    def _render(self, ctx: Context) -> str:
        return self.error.translate(ctx)


class GenericAddExpenseError(AddExpenseError):
    """Any other failure, such as a storage error."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(error)
        self.error = error

    def _render(self, ctx: Context) -> str:
        return str(self.error)


# --- Ending the dialogue --------------------------------------------------


class EndError(_TranslatableError):
    """Saving the expense at the end of the dialogue failed."""

    @abstractmethod
    def _render(self, ctx: Context) -> str:
        ...

    def translate(self, ctx: Context) -> str:
        return self._render(ctx)


class ClosingDialogueError(EndError):
    def _render(self, ctx: Context) -> str:
        return translate(ctx, Errors.END_ERROR_CLOSING_DIALOGUE)


class NoExpenseCreatedError(EndError):
    def _render(self, ctx: Context) -> str:
        return translate(ctx, Errors.END_ERROR_EXPENSE_CREATED)


class SharesError(EndError):
    """The shares could not be computed."""

    def __init__(self, error: AddExpenseError) -> None:
        super().__init__(error)
        self.error = error

    def _render(self, ctx: Context) -> str:
        return self.error.translate(ctx)


class GenericEndError(EndError):
    def __init__(self, error: BaseException) -> None:
        super().__init__(error)
        self.error = error

    def _render(self, ctx: Context) -> str:
        return str(self.error)


# --- Commands -------------------------------------------------------------


class CommandErrorKind(enum.Enum):
    """The command that failed; the value is its message key."""

    EMPTY_INPUT = Errors.COMMAND_ERROR_EMPTY_INPUT
    HELP = Errors.COMMAND_ERROR_HELP
    SET_LANGUAGE = Errors.COMMAND_ERROR_SET_LANGUAGE
    SET_CURRENCY = Errors.COMMAND_ERROR_SET_CURRENCY
    ADD_TRAVELER = Errors.COMMAND_ERROR_ADD_TRAVELER
    DELETE_TRAVELER = Errors.COMMAND_ERROR_DELETE_TRAVELER
    LIST_TRAVELERS = Errors.COMMAND_ERROR_LIST_TRAVELERS
    DELETE_EXPENSE = Errors.COMMAND_ERROR_DELETE_EXPENSE
    LIST_EXPENSES = Errors.COMMAND_ERROR_LIST_EXPENSES
    SHOW_EXPENSE = Errors.COMMAND_ERROR_SHOW_EXPENSE
    TRANSFER = Errors.COMMAND_ERROR_TRANSFER
    DELETE_TRANSFER = Errors.COMMAND_ERROR_DELETE_TRANSFER
    LIST_TRANSFERS = Errors.COMMAND_ERROR_LIST_TRANSFERS
    SHOW_BALANCES = Errors.COMMAND_ERROR_SHOW_BALANCES


_KIND_FIELDS: dict[CommandErrorKind, dict[str, str]] = {
    CommandErrorKind.EMPTY_INPUT: {},
    CommandErrorKind.HELP: {"command": Args.COMMAND, "best_match": Args.BEST_MATCH},
    CommandErrorKind.SET_LANGUAGE: {"langid": Args.LANGID},
    CommandErrorKind.SET_CURRENCY: {"currency": Args.CURRENCY},
    CommandErrorKind.ADD_TRAVELER: {"name": Args.NAME},
    CommandErrorKind.DELETE_TRAVELER: {"name": Args.NAME},
    CommandErrorKind.LIST_TRAVELERS: {},
    CommandErrorKind.DELETE_EXPENSE: {"number": Args.NUMBER},
    CommandErrorKind.LIST_EXPENSES: {"description": Args.DESCRIPTION},
    CommandErrorKind.SHOW_EXPENSE: {"number": Args.NUMBER},
    CommandErrorKind.TRANSFER: {
        "sender": Args.SENDER,
        "receiver": Args.RECEIVER,
        "amount": Args.AMOUNT,
    },
    CommandErrorKind.DELETE_TRANSFER: {"number": Args.NUMBER},
    CommandErrorKind.LIST_TRANSFERS: {"name": Args.NAME},
    CommandErrorKind.SHOW_BALANCES: {"name": Args.NAME},
}

_OPTIONAL_FIELDS = {"best_match"}


class CommandError(_TranslatableError):
    """A command failed; ``kind`` says which one, keyword fields give details."""

    def __init__(self, kind: CommandErrorKind, **kwargs: Any) -> None:
        kind = CommandErrorKind(kind)
        expected = _KIND_FIELDS[kind]
        unknown = set(kwargs) - set(expected)
        if unknown:
            raise TypeError(f"unexpected fields for {kind.name}: {sorted(unknown)}")
        missing = set(expected) - set(kwargs) - _OPTIONAL_FIELDS
        if missing:
            raise TypeError(f"missing fields for {kind.name}: {sorted(missing)}")
        details = {name: kwargs.get(name) for name in expected}
        super().__init__(kind, tuple(details.items()))
        self.kind = kind
        self.details = details
        for name, value in details.items():
            setattr(self, name, value)

    def translate(self, ctx: Context) -> str:
        if self.kind is CommandErrorKind.HELP:
            command = self.details["command"]
            first = translate(ctx, Errors.COMMAND_ERROR_HELP, {Args.COMMAND: command})
            best_match = self.details["best_match"]
            if best_match is not None:
                second = translate(
                    ctx,
                    Commands.UNKNOWN_COMMAND_BEST_MATCH,
                    {Args.COMMAND: command, Args.BEST_MATCH: best_match},
                )
            else:
                second = translate(ctx, Commands.UNKNOWN_COMMAND, {Args.COMMAND: command})
            return f"{first}\n\n{second}"
        args = {
            arg: _arg_value(self.details[name])
            for name, arg in _KIND_FIELDS[self.kind].items()
        }
        return translate(ctx, self.kind.value, args or None)