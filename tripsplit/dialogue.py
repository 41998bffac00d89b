"""The conversation that walks a chat through adding an expense."""

from __future__ import annotations

import dataclasses
import enum
import logging
import re
from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional

from .debts import Debt, simplify_balances
from .errors import (
    AddExpenseError,
    ClosingDialogueError,
    EndError,
    ExpenseTooHighError,
    GenericAddExpenseError,
    GenericEndError,
    NameValidationError,
    NoExpenseCreatedError,
    SharesError,
)
from .i18n import Args, Context, translate
from .models import Name, Traveler
from .shares import AmountSpec, SplitOutcome, compute_shares, parse_split_among
from .store import Expense, TravelStore

logger = logging.getLogger(__name__)

_AMOUNT_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")


class _Keys:
    """Message keys used by the dialogue."""

    PROCESS_ALREADY_RUNNING = "process-already-running"
    START = "add-expense-start"
    ASK_DESCRIPTION = "add-expense-ask-description"
    ASK_AMOUNT = "add-expense-ask-amount"
    INVALID_DESCRIPTION = "add-expense-invalid-description"
    ASK_PAID_BY = "add-expense-ask-paid-by"
    INVALID_AMOUNT = "add-expense-invalid-amount"
    INVALID_PAID_BY = "add-expense-invalid-paid-by"
    ASK_SHARES = "add-expense-ask-shares"
    TRAVELER_NOT_FOUND = "add-expense-traveler-not-found"
    TRAVELER_GENERIC_ERROR = "add-expense-traveler-generic-error"
    CONTINUE_SPLIT = "add-expense-continue-split"
    OK = "add-expense-ok"
    ERROR_ON_COMPUTING_SHARES = "add-expense-error-on-computing-shares"
    CREATING_EXPENSE_GENERIC_ERROR = "add-expense-creating-expense-generic-error"
    SHARES_PARSING_ERROR = "add-expense-shares-parsing-error"
    INVALID_SHARES = "add-expense-invalid-shares"
    SHARES_CLEARED = "add-expense-shares-cleared"


@dataclass
class AddExpenseState:
    """Where a chat is in the add-expense conversation and what it gathered."""

    class Step(enum.Enum):
        START = "start"
        RECEIVE_DESCRIPTION = "receive_description"
        RECEIVE_AMOUNT = "receive_amount"
        RECEIVE_PAID_BY = "receive_paid_by"
        START_SPLIT_AMONG = "start_split_among"
        RECEIVE_SPLIT_AMONG = "receive_split_among"

    step: AddExpenseState.Step = Step.START
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    paid_by: Optional[Traveler] = None
    split_among: dict[Name, AmountSpec] = field(default_factory=dict)


class DialogueStorage:
    """Keeps the running dialogue state of each chat in memory."""

    def __init__(self) -> None:
        self._states: dict[Hashable, AddExpenseState] = {}

    def get(self, chat_id: Hashable) -> AddExpenseState | None:
        return self._states.get(chat_id)

    def update(self, chat_id: Hashable, state: AddExpenseState) -> None:
        self._states[chat_id] = state

    def exit(self, chat_id: Hashable) -> None:
        """Forget the chat's dialogue; nothing happens if none is running."""
        self._states.pop(chat_id, None)

    def is_running(self, chat_id: Hashable) -> bool:
        return chat_id in self._states


def _parse_amount(text: str | None) -> Decimal | None:
    if text is None or not _AMOUNT_RE.fullmatch(text):
        return None
    return Decimal(text)


class AddExpenseDialogue:
    """Drives the add-expense conversation; every step returns the reply to send."""

    def __init__(
        self,
        store: TravelStore,
        storage: DialogueStorage | None = None,
        ctx: Context | None = None,
    ) -> None:
        self.store = store
        self.storage = storage if storage is not None else DialogueStorage()
        self.ctx = ctx if ctx is not None else Context()

    def _t(self, key: str, args: Mapping[str, Any] | None = None) -> str:
        if args is None:
            return translate(self.ctx, key)
        return translate(self.ctx, key, dict(args))

    # --- Entry points ------------------------------------------------------

    def start(self, chat_id: Hashable) -> str:
        """Begin the dialogue, unless one is already under way in the chat."""
        state = self.storage.get(chat_id)
        if state is not None and state.step is not AddExpenseState.Step.START:
            return self._t(_Keys.PROCESS_ALREADY_RUNNING)
        self.storage.update(chat_id, AddExpenseState(AddExpenseState.Step.RECEIVE_DESCRIPTION))
        return f"{self._t(_Keys.START)}\n\n{self._t(_Keys.ASK_DESCRIPTION)}"

    def receive(self, chat_id: Hashable, text: str | None) -> str | None:
        """Feed a message to the running dialogue.

        ``text`` is None for messages without text. Returns None when no
        dialogue step is waiting for input in this chat.
        """
        state = self.storage.get(chat_id)
        if state is None:
            return None
        handlers: dict[AddExpenseState.Step, Callable[..., str]] = {
            AddExpenseState.Step.RECEIVE_DESCRIPTION: self._receive_description,
            AddExpenseState.Step.RECEIVE_AMOUNT: self._receive_amount,
            AddExpenseState.Step.RECEIVE_PAID_BY: self._receive_paid_by,
            AddExpenseState.Step.START_SPLIT_AMONG: self._receive_split_among,
            AddExpenseState.Step.RECEIVE_SPLIT_AMONG: self._receive_split_among,
        }
        handler = handlers.get(state.step)
        if handler is None:
            return None
        return handler(chat_id, state, text)

    # --- Steps -------------------------------------------------------------

    def _receive_description(self, chat_id: Hashable, state: AddExpenseState, text: str | None) -> str:
        if text is None:
            logger.warning("Invalid description: received None.")
            return self._t(_Keys.INVALID_DESCRIPTION)
        self.storage.update(
            chat_id,
            AddExpenseState(AddExpenseState.Step.RECEIVE_AMOUNT, description=text),
        )
        return self._t(_Keys.ASK_AMOUNT)

    def _receive_amount(self, chat_id: Hashable, state: AddExpenseState, text: str | None) -> str:
        amount = _parse_amount(text)
        if amount is None:
            logger.warning("Invalid amount: received %r.", text)
            return self._t(_Keys.INVALID_AMOUNT)
        self.storage.update(
            chat_id,
            dataclasses.replace(state, step=AddExpenseState.Step.RECEIVE_PAID_BY, amount=amount),
        )
        return self._t(_Keys.ASK_PAID_BY)

    def _receive_paid_by(self, chat_id: Hashable, state: AddExpenseState, text: str | None) -> str:
        if text is None:
            logger.warning("Invalid name: received None.")
            return self._t(_Keys.INVALID_PAID_BY)
        try:
            name = Name.parse(text)
        except NameValidationError as err:
            logger.warning("%r", err)
            return f"{self._t(_Keys.INVALID_PAID_BY)}\n\n{err.translate(self.ctx)}"

        try:
            traveler = self.store.traveler_by_name(chat_id, name)
        except Exception:
            logger.exception("Could not look up traveler %s", name)
            return self._t(_Keys.TRAVELER_GENERIC_ERROR, {Args.NAME: str(name)})

        if traveler is None:
            logger.warning("Invalid traveler: received %s.", name)
            return self._t(_Keys.TRAVELER_NOT_FOUND, {Args.NAME: str(name)})

        self.storage.update(
            chat_id,
            dataclasses.replace(
                state,
                step=AddExpenseState.Step.START_SPLIT_AMONG,
                paid_by=traveler,
                split_among={},
            ),
        )
        return self._t(_Keys.ASK_SHARES)

    def _known_names(self, chat_id: Hashable) -> Iterator[Name]:
        for traveler in self.store.travelers(chat_id):
            yield traveler.name

    def _error_reply(
        self, chat_id: Hashable, state: AddExpenseState, header: str, err: AddExpenseError
    ) -> str:
        reply = self._t(header)
        too_high = isinstance(err, ExpenseTooHighError)
        if not isinstance(err, GenericAddExpenseError):
            reply += "\n" + err.translate(self.ctx)
            if too_high:
                reply += "\n" + self._t(_Keys.SHARES_CLEARED)
        if too_high:
            self.storage.update(
                chat_id,
                dataclasses.replace(
                    state, step=AddExpenseState.Step.RECEIVE_SPLIT_AMONG, split_among={}
                ),
            )
        return reply

    def _receive_split_among(self, chat_id: Hashable, state: AddExpenseState, text: str | None) -> str:
        if text is None:
            logger.warning("Invalid text: received None.")
            return self._t(_Keys.INVALID_SHARES)

        split_among = dict(state.split_among)
        try:
            outcome = parse_split_among(text, split_among, self._known_names(chat_id))
        except AddExpenseError as err:
            logger.error("%r", err)
            return self._error_reply(chat_id, state, _Keys.SHARES_PARSING_ERROR, err)
        except Exception as exc:
            logger.error("%r", exc)
            return self._error_reply(
                chat_id, state, _Keys.SHARES_PARSING_ERROR, GenericAddExpenseError(exc)
            )

        if outcome is SplitOutcome.LIST:
            self.storage.update(
                chat_id,
                dataclasses.replace(
                    state,
                    step=AddExpenseState.Step.RECEIVE_SPLIT_AMONG,
                    split_among=split_among,
                ),
            )
            return self._t(_Keys.CONTINUE_SPLIT)

        try:
            expense = self.end(
                chat_id, state.description or "", state.amount, state.paid_by, split_among
            )
        except SharesError as err:
            return self._error_reply(chat_id, state, _Keys.ERROR_ON_COMPUTING_SHARES, err.error)
        except GenericEndError:
            return self._t(_Keys.CREATING_EXPENSE_GENERIC_ERROR)
        except EndError as err:
            return err.translate(self.ctx)
        return f"{self._t(_Keys.OK)}\n\n{expense.translate(self.ctx)}"

    # --- Saving ------------------------------------------------------------

    def end(
        self,
        chat_id: Hashable,
        description: str,
        amount: Decimal,
        paid_by: Traveler,
        split_among: Mapping[Name, AmountSpec],
    ) -> Expense:
        """Save the expense with its shares, update debts and close the dialogue.

        Raises an EndError subclass when the expense cannot be saved.
        """
        try:
            shares = compute_shares(amount, dict(split_among))
        except AddExpenseError as err:
            logger.error("%r", err)
            raise SharesError(err) from err

        try:
            expense = self.store.create_expense(chat_id, description, amount)
        except Exception as exc:
            logger.error("%r", exc)
            raise GenericEndError(exc) from exc
        if expense is None:
            logger.error("No expense has been created.")
            raise NoExpenseCreatedError()

        try:
            resolved = self._resolve_shares(chat_id, shares)
            self.store.relate_paid_for(paid_by, expense)
            for traveler, share in resolved:
                self.store.relate_split(share, traveler, expense)
        except Exception as exc:
            try:
                self.store.delete_expense(chat_id, expense.number)
            except Exception as delete_exc:
                logger.warning("%r", delete_exc)
            logger.error("%r", exc)
            raise ClosingDialogueError() from exc

        try:
            self._update_debts(chat_id, paid_by, resolved)
        except Exception as exc:
            logger.warning("%r", exc)

        try:
            self.storage.exit(chat_id)
        except Exception as exc:
            logger.error("%r", exc)
            raise ClosingDialogueError() from exc
        return expense

    def _resolve_shares(
        self, chat_id: Hashable, shares: Mapping[Name, Decimal]
    ) -> list[tuple[Traveler, Decimal]]:
        resolved = []
        for name, share in shares.items():
            traveler = self.store.traveler_by_name(chat_id, name)
            if traveler is None:
                raise LookupError(f"traveler {name} not found")
            resolved.append((traveler, share))
        return resolved

    def _update_debts(
        self, chat_id: Hashable, paid_by: Traveler, resolved: list[tuple[Traveler, Decimal]]
    ) -> None:
        existing = [
            Debt(debtor=owes.in_, creditor=owes.out, debt=owes.amount)
            for owes in self.store.debts(chat_id)
        ]
        new = [
            Debt(debtor=traveler.id, creditor=paid_by.id, debt=share)
            for traveler, share in resolved
        ]
        self.store.set_debts(chat_id, simplify_balances(existing + new))