from decimal import Decimal

import pytest

from tripsplit.debts import Debt, simplify_balances


def _net(debts):
    balances = {}
    for item in debts:
        balances[item.debtor] = balances.get(item.debtor, Decimal(0)) - Decimal(item.debt)
        balances[item.creditor] = balances.get(item.creditor, Decimal(0)) + Decimal(item.debt)
    return {who: value for who, value in balances.items() if value != 0}


def test_empty_list_stays_empty():
    assert simplify_balances([]) == []


def test_chain_collapses_to_single_debt():
    debts = [Debt("alice", "bob", Decimal("10")), Debt("bob", "carol", Decimal("10"))]
    assert simplify_balances(debts) == [Debt("alice", "carol", Decimal("10"))]


def test_mutual_debts_cancel_out():
    debts = [Debt("alice", "bob", Decimal("5")), Debt("bob", "alice", Decimal("5"))]
    assert simplify_balances(debts) == []


def test_single_debt_is_kept():
    debts = [Debt("alice", "bob", Decimal("7.25"))]
    assert simplify_balances(debts) == debts


@pytest.mark.parametrize(
    "debts",
    [
        [
            Debt("a", "b", Decimal("30")),
            Debt("c", "b", Decimal("12.5")),
            Debt("b", "d", Decimal("8")),
            Debt("d", "a", Decimal("3.3")),
        ],
        [
            Debt("a", "b", Decimal("1")),
            Debt("b", "c", Decimal("2")),
            Debt("c", "d", Decimal("3")),
            Debt("d", "e", Decimal("4")),
            Debt("e", "a", Decimal("5")),
        ],
    ],
)
def test_net_balances_are_preserved(debts):
    simplified = simplify_balances(debts)
    assert _net(simplified) == _net(debts)
    assert all(item.debt > 0 for item in simplified)
    assert all(item.debtor != item.creditor for item in simplified)
    assert len(simplified) <= len(_net(debts)) - 1


def test_record_ids_are_returned_unchanged():
    debtor = ("traveler", 1)
    creditor = ("traveler", 2)
    simplified = simplify_balances([Debt(debtor, creditor, Decimal("4"))])
    assert simplified[0].debtor is debtor
    assert simplified[0].creditor is creditor