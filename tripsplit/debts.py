"""Debts between travelers and their simplification into few transfers."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Debt:
    """``debtor`` owes ``debt`` to ``creditor``."""

    debtor: Hashable
    creditor: Hashable
    debt: Decimal


def simplify_balances(debts: Iterable[Debt]) -> list[Debt]:
    """Replace a set of debts by an equivalent, shorter list of debts.

    Every participant keeps the same net balance. The smallest open debtor is
    always matched with the smallest open creditor.
    """
    balances: dict[Hashable, Decimal] = {}
    for item in debts:
        amount = Decimal(item.debt)
        balances[item.debtor] = balances.get(item.debtor, Decimal(0)) - amount
        balances[item.creditor] = balances.get(item.creditor, Decimal(0)) + amount

    creditors = sorted(
        ((who, value) for who, value in balances.items() if value > 0),
        key=lambda entry: entry[1],
        reverse=True,
    )
    debtors = sorted(
        ((who, value) for who, value in balances.items() if value < 0),
        key=lambda entry: entry[1],
    )

    simplified: list[Debt] = []
    while debtors and creditors:
        debtor, debtor_amount = debtors.pop()
        creditor, creditor_amount = creditors.pop()

        amount = min(-debtor_amount, creditor_amount)
        simplified.append(Debt(debtor=debtor, creditor=creditor, debt=amount))

        debtor_amount += amount
        if debtor_amount < 0:
            debtors.append((debtor, debtor_amount))

        creditor_amount -= amount
        if creditor_amount > 0:
            creditors.append((creditor, creditor_amount))

    return simplified