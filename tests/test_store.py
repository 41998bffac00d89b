from decimal import Decimal

import pytest

from tripsplit.debts import Debt
from tripsplit.i18n import Context, Formats, Localizer, get_localizer, set_localizer
from tripsplit.models import Name
from tripsplit.money import Money
from tripsplit.store import Chat, Expense, TravelStore

CHAT = 42
OTHER_CHAT = 7


@pytest.fixture
def store():
    return TravelStore()


@pytest.fixture
def localizer():
    previous = get_localizer()
    loc = Localizer(
        "en-US",
        {"en-US": "format-expense = #{ $number } { $description }: { $amount }\n"},
    )
    set_localizer(loc)
    yield loc
    set_localizer(previous)


def test_create_and_get_chat(store):
    chat = store.create_chat(CHAT, "en-US", "EUR")
    assert store.get_chat(CHAT) == chat
    assert (chat.lang, chat.currency) == ("en-US", "EUR")


def test_create_chat_twice_raises(store):
    store.create_chat(CHAT, "en-US", "EUR")
    with pytest.raises(ValueError):
        store.create_chat(CHAT, "it-IT", "USD")


def test_missing_chat_updates_return_none(store):
    assert store.get_chat(CHAT) is None
    assert store.touch_chat(CHAT) is None
    assert store.set_chat_lang(CHAT, "it-IT") is None
    assert store.set_chat_currency(CHAT, "USD") is None


def test_chat_updates(store):
    created = store.create_chat(CHAT, "en-US", "EUR")
    touched = store.touch_chat(CHAT)
    assert touched.last_interaction_utc >= created.last_interaction_utc
    assert store.set_chat_lang(CHAT, "it-IT").lang == "it-IT"
    updated = store.set_chat_currency(CHAT, "USD")
    assert isinstance(updated, Chat)
    assert (updated.lang, updated.currency) == ("it-IT", "USD")
    assert store.get_chat(CHAT) == updated


def test_travelers_sorted_and_counted(store):
    for name in ("Charlie", "Alice", "Bob"):
        store.create_traveler(CHAT, Name.parse(name))
    store.create_traveler(OTHER_CHAT, Name.parse("Alice"))
    names = [str(t.name) for t in store.travelers(CHAT)]
    assert names == sorted(["Charlie", "Alice", "Bob"])
    assert store.count_travelers(CHAT, Name.parse("Alice")) == 1
    assert store.count_travelers(CHAT, Name.parse("Dave")) == 0
    found = store.traveler_by_name(CHAT, Name.parse("Bob"))
    assert found.name == Name.parse("Bob") and found.chat == CHAT
    assert store.traveler_by_name(OTHER_CHAT, Name.parse("Bob")) is None


def test_expense_numbers_are_per_chat(store):
    first = store.create_expense(CHAT, "Dinner", Decimal("30"))
    second = store.create_expense(CHAT, "Train", "12.5")
    other = store.create_expense(OTHER_CHAT, "Hotel", 100)
    assert second.number == first.number + 1
    assert other.number == first.number
    assert second.amount == Decimal("12.5")
    assert [e.number for e in store.expenses(CHAT)] == [first.number, second.number]


def test_delete_expense_and_renumber(store):
    store.create_expense(CHAT, "Dinner", 30)
    second = store.create_expense(CHAT, "Train", 10)
    assert store.count_expenses(CHAT, second.number) == 1
    store.delete_expense(CHAT, second.number)
    assert store.count_expenses(CHAT, second.number) == 0
    assert store.expense_by_number(CHAT, second.number) is None
    again = store.create_expense(CHAT, "Bus", 5)
    assert again.number == second.number


def test_delete_expense_removes_relations(store):
    alice = store.create_traveler(CHAT, Name.parse("Alice"))
    expense = store.create_expense(CHAT, "Dinner", 30)
    store.relate_paid_for(alice, expense)
    split = store.relate_split(Decimal("30"), alice, expense)
    assert (split.in_, split.out) == (alice.id, expense.id)
    assert store.expenses_by_payer(alice) == [expense]
    store.delete_expense(CHAT, expense.number)
    assert store.expenses_by_payer(alice) == []


def test_expenses_by_description(store):
    dinner = store.create_expense(CHAT, "Dinner at port", 30)
    store.create_expense(CHAT, "Train tickets", 10)
    snacks = store.create_expense(CHAT, "dinner snacks", 5)
    assert store.expenses_by_description(CHAT, "DINNER") == [dinner, snacks]
    assert store.expenses_by_description(CHAT, "dnr") == [dinner, snacks]
    assert store.expenses_by_description(OTHER_CHAT, "dinner") == []


def test_expense_by_number(store):
    expense = store.create_expense(CHAT, "Dinner", 30)
    assert store.expense_by_number(CHAT, expense.number) == expense
    assert store.expense_by_number(OTHER_CHAT, expense.number) is None


def test_transfers_numbered_counted_and_deleted(store):
    alice = store.create_traveler(CHAT, Name.parse("Alice"))
    bob = store.create_traveler(CHAT, Name.parse("Bob"))
    carol = store.create_traveler(OTHER_CHAT, Name.parse("Carol"))
    dave = store.create_traveler(OTHER_CHAT, Name.parse("Dave"))
    first = store.relate_transfer(Decimal("5"), alice, bob)
    second = store.relate_transfer(Decimal("6"), bob.id, alice.id)
    other = store.relate_transfer(Decimal("7"), carol, dave)
    assert second.number == first.number + 1
    assert other.number == first.number
    assert store.count_transfers(CHAT, first.number) == 1
    store.delete_transfer(CHAT, first.number)
    assert store.count_transfers(CHAT, first.number) == 0
    assert store.count_transfers(OTHER_CHAT, other.number) == 1


def test_transfer_from_unknown_traveler_raises(store):
    bob = store.create_traveler(CHAT, Name.parse("Bob"))
    with pytest.raises(KeyError):
        store.relate_transfer(Decimal("5"), "traveler:missing", bob)


def test_set_debts_replaces_only_that_chat(store):
    alice = store.create_traveler(CHAT, Name.parse("Alice"))
    bob = store.create_traveler(CHAT, Name.parse("Bob"))
    carol = store.create_traveler(OTHER_CHAT, Name.parse("Carol"))
    dave = store.create_traveler(OTHER_CHAT, Name.parse("Dave"))
    store.set_debts(OTHER_CHAT, [Debt(carol.id, dave.id, Decimal("3"))])
    store.set_debts(CHAT, [Debt(alice.id, bob.id, Decimal("10"))])
    store.set_debts(CHAT, [Debt(bob.id, alice.id, Decimal("4"))])
    owes = store.debts(CHAT)
    assert [(o.in_, o.out, o.amount) for o in owes] == [(bob.id, alice.id, Decimal("4"))]
    assert [(o.in_, o.out) for o in store.debts(OTHER_CHAT)] == [(carol.id, dave.id)]


def test_expense_translate_without_catalogue_returns_key(store):
    expense = store.create_expense(CHAT, "Dinner", 30)
    assert expense.translate(Context(langid="en-US")) == Formats.FORMAT_EXPENSE


def test_expense_translate_uses_currency(store, localizer):
    expense = store.create_expense(CHAT, "Dinner", Decimal("12.5"))
    assert isinstance(expense, Expense)
    eur = expense.translate(Context(currency="EUR"))
    assert eur == f"#{expense.number} Dinner: {Money(Decimal('12.5'), 'EUR')}"
    usd = expense.translate(Context(currency="USD"))
    assert usd == f"#{expense.number} Dinner: {Money(Decimal('12.5'), 'USD')}"
    assert str(expense) == expense.translate(Context())