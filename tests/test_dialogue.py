from decimal import Decimal

import pytest

from tripsplit.dialogue import AddExpenseDialogue, AddExpenseState, DialogueStorage
from tripsplit.errors import (
    ClosingDialogueError,
    ExpenseTooHighError,
    ExpenseTooLowError,
    InvalidCharacterError,
    InvalidFormatError,
    NameValidationFailedError,
    NoTravelersSpecifiedError,
    RepeatedTravelerNameError,
    ReservedKeywordError,
    SharesError,
    StartsWithSlashError,
)
from tripsplit.i18n import Args, Context, translate
from tripsplit.models import Name
from tripsplit.shares import Dynamic, Fixed
from tripsplit.store import TravelStore

CHAT = 42


def make(names=("Alice", "Bob", "Charlie")):
    store = TravelStore()
    travelers = {n: store.create_traveler(CHAT, Name.parse(n)) for n in names}
    ctx = Context()
    dialogue = AddExpenseDialogue(store, DialogueStorage(), ctx)
    return store, dialogue, ctx, travelers


def add_expense(dialogue, description, amount, payer, shares):
    reply = dialogue.start(CHAT)
    reply = dialogue.receive(CHAT, description)
    reply = dialogue.receive(CHAT, amount)
    reply = dialogue.receive(CHAT, payer)
    for line in shares:
        reply = dialogue.receive(CHAT, line)
    return reply


def ok_reply(store, ctx, number=1):
    expense = store.expense_by_number(CHAT, number)
    return f"{translate(ctx, 'add-expense-ok')}\n\n{expense.translate(ctx)}"


def test_add_expense_all_ok():
    store, dialogue, ctx, t = make()
    reply = add_expense(dialogue, "Test expense", "100.7", "Alice", ["all"])
    assert reply == ok_reply(store, ctx)
    assert store.expense_by_number(CHAT, 1).amount == Decimal("100.7")
    assert not dialogue.storage.is_running(CHAT)
    pairs = {(o.in_, o.out) for o in store.debts(CHAT)}
    assert pairs == {(t["Bob"].id, t["Alice"].id), (t["Charlie"].id, t["Alice"].id)}


def test_add_expense_end_ok():
    store, dialogue, ctx, _ = make()
    reply = add_expense(
        dialogue, "Test expense", "100.7", "Bob", ["Alice:70", "Bob:20%;Charlie", "end"]
    )
    assert reply == ok_reply(store, ctx)
    assert store.expense_by_number(CHAT, 1).description == "Test expense"


def test_add_expense_invalid_amount():
    _, dialogue, ctx, _ = make()
    dialogue.start(CHAT)
    dialogue.receive(CHAT, "Test expense")
    reply = dialogue.receive(CHAT, "invalid amount")
    assert reply == translate(ctx, "add-expense-invalid-amount")
    assert dialogue.storage.get(CHAT).step is AddExpenseState.Step.RECEIVE_AMOUNT


def test_add_expense_invalid_paid_by():
    _, dialogue, ctx, _ = make()
    dialogue.start(CHAT)
    dialogue.receive(CHAT, "Test expense")
    dialogue.receive(CHAT, "100.7")
    header = translate(ctx, "add-expense-invalid-paid-by")

    reply = dialogue.receive(CHAT, "/Alice")
    assert reply == f"{header}\n\n{StartsWithSlashError('/Alice').translate(ctx)}"

    reply = dialogue.receive(CHAT, "Alice,")
    assert reply == f"{header}\n\n{InvalidCharacterError('Alice,', ',').translate(ctx)}"

    reply = dialogue.receive(CHAT, "all")
    assert reply == f"{header}\n\n{ReservedKeywordError('all').translate(ctx)}"


def test_add_expense_traveler_not_found():
    _, dialogue, ctx, _ = make(("Alice", "Bob"))
    dialogue.start(CHAT)
    dialogue.receive(CHAT, "Test expense")
    dialogue.receive(CHAT, "100.7")
    reply = dialogue.receive(CHAT, "Charlie")
    assert reply == translate(ctx, "add-expense-traveler-not-found", {Args.NAME: "Charlie"})


def test_add_expense_too_high_then_ok():
    store, dialogue, ctx, _ = make(("Alice", "Bob"))
    reply = add_expense(dialogue, "Test expense", "100", "Alice", ["Alice:80;Bob:30", "end"])
    expected = "\n".join(
        [
            translate(ctx, "add-expense-error-on-computing-shares"),
            ExpenseTooHighError(Decimal(100)).translate(ctx),
            translate(ctx, "add-expense-shares-cleared"),
        ]
    )
    assert reply == expected
    assert dialogue.storage.get(CHAT).split_among == {}

    dialogue.receive(CHAT, "Alice:100")
    reply = dialogue.receive(CHAT, "end")
    assert reply == ok_reply(store, ctx)


def test_add_expense_too_low():
    store, dialogue, ctx, _ = make(("Alice", "Bob"))
    reply = add_expense(dialogue, "Test expense", "100", "Alice", ["Alice:20;Bob:30", "end"])
    expected = "\n".join(
        [
            translate(ctx, "add-expense-error-on-computing-shares"),
            ExpenseTooLowError(Decimal(50), Decimal(100)).translate(ctx),
        ]
    )
    assert reply == expected
    assert store.expense_by_number(CHAT, 1) is None


def parsing_error(ctx, err):
    return f"{translate(ctx, 'add-expense-shares-parsing-error')}\n{err.translate(ctx)}"


def test_repeated_traveler_name():
    _, dialogue, ctx, _ = make(("Alice", "Bob"))
    reply = add_expense(dialogue, "Test expense", "100", "Alice", ["Alice:50;Bob:30;Alice:20"])
    assert reply == parsing_error(ctx, RepeatedTravelerNameError(Name.parse("Alice")))


def test_invalid_shares_format():
    _, dialogue, ctx, _ = make(("Alice", "Bob"))
    reply = add_expense(dialogue, "Test expense", "100", "Alice", ["Alice:;Bob:30"])
    assert reply == parsing_error(ctx, InvalidFormatError("Alice:"))


def test_invalid_name_in_shares():
    _, dialogue, ctx, _ = make(("Alice", "Bob"))
    reply = add_expense(dialogue, "Test expense", "100", "Alice", ["all:30;Bob"])
    assert reply == parsing_error(ctx, NameValidationFailedError(ReservedKeywordError("all")))


def test_no_travelers_specified():
    _, dialogue, ctx, _ = make(("Alice", "Bob"))
    reply = add_expense(dialogue, "Test expense", "100", "Alice", ["end"])
    assert reply == parsing_error(ctx, NoTravelersSpecifiedError())


def test_continue_split_keeps_shares():
    _, dialogue, ctx, _ = make(("Alice", "Bob"))
    reply = add_expense(dialogue, "Test expense", "100", "Alice", ["Alice:40"])
    assert reply == translate(ctx, "add-expense-continue-split")
    state = dialogue.storage.get(CHAT)
    assert state.step is AddExpenseState.Step.RECEIVE_SPLIT_AMONG
    assert state.split_among == {Name("Alice"): Fixed(Decimal(40))}


def test_start_twice_reports_running():
    _, dialogue, ctx, _ = make()
    dialogue.start(CHAT)
    assert dialogue.start(CHAT) == translate(ctx, "process-already-running")


def test_missing_description_text():
    _, dialogue, ctx, _ = make()
    dialogue.start(CHAT)
    assert dialogue.receive(CHAT, None) == translate(ctx, "add-expense-invalid-description")


def test_receive_without_dialogue_returns_none():
    _, dialogue, _, _ = make()
    assert dialogue.receive(CHAT, "hello") is None


def test_storage_lifecycle():
    storage = DialogueStorage()
    assert storage.is_running(1) is False
    state = AddExpenseState(AddExpenseState.Step.RECEIVE_DESCRIPTION)
    storage.update(1, state)
    assert storage.get(1) == state
    assert storage.is_running(1) is True
    storage.exit(1)
    assert storage.get(1) is None


def test_end_raises_shares_error():
    _, dialogue, _, t = make(("Alice", "Bob"))
    with pytest.raises(SharesError) as info:
        dialogue.end(
            CHAT,
            "x",
            Decimal(10),
            t["Alice"],
            {Name("Alice"): Fixed(Decimal(20))},
        )
    assert info.value.error == ExpenseTooHighError(Decimal(10))


def test_end_unknown_traveler_rolls_back():
    store, dialogue, _, t = make(("Alice",))
    with pytest.raises(ClosingDialogueError):
        dialogue.end(
            CHAT,
            "x",
            Decimal(10),
            t["Alice"],
            {Name("Alice"): Dynamic(), Name("Zed"): Dynamic()},
        )
    assert store.expenses(CHAT) == []