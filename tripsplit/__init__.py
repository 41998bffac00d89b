"""Shared travel expense tracking: names, shares, debts, money and the add-expense dialogue."""

__version__ = "0.2.2"