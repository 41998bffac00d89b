# tripsplit

Keep track of shared expenses during a trip, one chat at a time.

tripsplit holds the travelers of a chat, the expenses they pay, how each
expense is split among them and the transfers between them, and works out a
short list of debts that settles the chat up. It is a library: the pieces a
chat bot needs to run an "add expense" conversation, with every reply
produced as a localized message.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `tripsplit.models` – `Name` (validated traveler names), `Traveler`,
  `ShareDetails`, `ExpenseDetails`, `Transfer` and the relation records
  `Owes`, `PaidFor`, `Split`, `TransferredTo`.
- `tripsplit.store` – `Chat`, `Expense` and `TravelStore`, an in-memory store
  for chats, travelers, expenses, payer and split relations, transfers and
  debts.
- `tripsplit.shares` – `parse_split_among` and `compute_shares`, with the
  share kinds `Fixed`, `Percentage` and `Dynamic` and the `SplitOutcome` enum.
- `tripsplit.debts` – `Debt` and `simplify_balances`.
- `tripsplit.dialogue` – `AddExpenseDialogue`, `AddExpenseState` and
  `DialogueStorage`.
- `tripsplit.money` – `Money`, `Currency` and `find_currency`.
- `tripsplit.errors` – the exceptions, each able to render itself as a
  localized message.
- `tripsplit.i18n` – message keys, `Context`, `Localizer`, `translate` and
  related helpers.
- `tripsplit.naming` – `to_snake_case`, `table_name` and `field_names`.

## Concepts

- **Names.** `Name.parse` trims its input and raises `ReservedKeywordError`
  for `all` or `end` (any case), `InvalidCharacterError` for a name holding
  `,`, `;` or `:`, and `StartsWithSlashError` for a name starting with `/`.
- **Expenses** are numbered per chat: each new one gets the chat's highest
  number plus one. Transfers are numbered the same way.
- **Shares.** A line of shares is a list of entries separated by `;`. Each
  entry is a name, optionally followed by `:` and an amount; an amount ending
  in `%` is a percentage. `compute_shares` takes fixed amounts first, applies
  percentages to what the fixed amounts leave, and divides the remainder
  equally among entries without an amount. It raises `ExpenseTooHighError`
  when fixed amounts exceed the total, and `ExpenseTooLowError` when money is
  left over and no entry takes it. In `parse_split_among`, `all` adds every
  known traveler not yet listed and ends the list; `end` ends it and needs at
  least one entry.
- **Debts.** `simplify_balances` keeps everyone's net balance and replaces the
  debts with a shorter list, pairing the smallest open debtor with the
  smallest open creditor each time.

## Usage

```python
from tripsplit.dialogue import AddExpenseDialogue, DialogueStorage
from tripsplit.i18n import Context
from tripsplit.models import Name
from tripsplit.store import TravelStore

store = TravelStore()
store.create_chat(1, "en", "EUR")
for name in ("Alice", "Bob", "Charlie"):
    store.create_traveler(1, Name.parse(name))

dialogue = AddExpenseDialogue(store, DialogueStorage(), Context())
dialogue.start(1)
dialogue.receive(1, "Dinner")
dialogue.receive(1, "90")
dialogue.receive(1, "Alice")
print(dialogue.receive(1, "all"))

print(store.expenses(1))
print(store.debts(1))
```

`start` returns the opening reply, or the "process already running" message
if a dialogue is under way in the chat. `receive` returns the reply to a
message, or `None` when no dialogue is running. The amount must be a plain
decimal number such as `12.50`. When the shares are complete the expense is
stored with its payer and split relations, the chat's debts are recomputed
from the existing debts plus the new shares, and the dialogue is closed.
If the fixed shares exceed the total, the listed shares are cleared and the
dialogue asks for them again.

The share logic can be used on its own:

```python
from decimal import Decimal
from tripsplit.models import Name
from tripsplit.shares import compute_shares, parse_split_among

names = [Name.parse(n) for n in ("Alice", "Bob", "Charlie")]
split = {}
parse_split_among("Alice:70;Bob:20%;Charlie", split, names)
print(compute_shares(Decimal("100.7"), split))
```

Amounts print in a currency's own style through `Money`:

```python
from decimal import Decimal
from tripsplit.money import Money

str(Money(Decimal("10.5"), "EUR"))   # '€10,50'
str(Money(Decimal("10.5"), "XYZ"))   # '10.5 XYZ'
Money(Decimal("1.005"), "USD").round_value()   # Decimal('1.00')
```

## Messages

Every user-facing text is looked up by key through `tripsplit.i18n.translate`
in the language of a `Context`. Catalogues use a Fluent-style syntax; build a
`Localizer(fallback, catalogues)`, add text with `add_messages`, or load
`<locale>/*.ftl` files with `Localizer.from_directory`, then install it with
`set_localizer`. `is_lang_available` and `available_langs` report the loaded
locales. A key with no message is returned unchanged, so with no catalogues
loaded the dialogue replies consist of message keys.

## What it does not do

- It does not connect to any messaging service and has no command-line
  program; the caller passes message text in and sends the replies out.
- Only the add-expense conversation is provided. There are no handlers for
  commands such as adding or deleting travelers, listing expenses, recording
  transfers or showing balances, although `CommandError` describes their
  failures and the store offers the underlying operations.
- Recording a transfer with `TravelStore.relate_transfer` does not change the
  stored debts.
- `TravelStore` keeps everything in memory; nothing is saved to disk.
- No message catalogues are shipped.