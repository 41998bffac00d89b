"""Money amounts formatted for their currency."""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any

from .i18n import Context


@dataclass(frozen=True)
class Currency:
    """A known currency and how its amounts are written."""

    code: str
    symbol: str
    exponent: int
    symbol_first: bool
    exponent_separator: str = "."
    crypto: bool = False


_ISO: dict[str, Currency] = {
    currency.code: currency
    for currency in (
        Currency("AUD", "$", 2, True),
        Currency("BRL", "R$", 2, True, ","),
        Currency("CAD", "$", 2, True),
        Currency("CHF", "Fr", 2, True),
        Currency("CNY", "¥", 2, True),
        Currency("CZK", "Kč", 2, False, ","),
        Currency("DKK", "kr.", 2, False, ","),
        Currency("EUR", "€", 2, True, ","),
        Currency("GBP", "£", 2, True),
        Currency("HKD", "$", 2, True),
        Currency("HUF", "Ft", 2, False, ","),
        Currency("ILS", "₪", 2, True),
        Currency("INR", "₹", 2, True),
        Currency("JPY", "¥", 0, True),
        Currency("KRW", "₩", 0, True),
        Currency("KWD", "د.ك", 3, True),
        Currency("MXN", "$", 2, True),
        Currency("NOK", "kr", 2, False, ","),
        Currency("NZD", "$", 2, True),
        Currency("PLN", "zł", 2, False, ","),
        Currency("RUB", "₽", 2, False, ","),
        Currency("SEK", "kr", 2, False, ","),
        Currency("SGD", "$", 2, True),
        Currency("THB", "฿", 2, True),
        Currency("TRY", "₺", 2, True, ","),
        Currency("USD", "$", 2, True),
        Currency("ZAR", "R", 2, True),
    )
}

_CRYPTO: dict[str, Currency] = {
    currency.code: currency
    for currency in (
        Currency("BTC", "₿", 8, True, crypto=True),
        Currency("ETH", "ETH", 18, False, crypto=True),
        Currency("USDT", "USDT", 6, False, crypto=True),
    )
}


def find_currency(code: str) -> Currency | None:
    """Look up a currency code, ISO currencies first, then crypto ones."""
    return _ISO.get(code) or _CRYPTO.get(code)


def _plain(amount: Decimal) -> str:
    return format(amount, "f")


def _quantize(amount: Decimal, exponent: int) -> Decimal:
    with decimal.localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + exponent + 2)
        return amount.quantize(Decimal(1).scaleb(-exponent), rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class Money:
    """An amount with a currency code, known or not."""

    amount: Decimal
    code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

    @classmethod
    def from_context(cls, amount: Any, ctx: Context) -> Money:
        """Build an amount in the context's currency."""
        return cls(amount, ctx.currency)

    @property
    def currency(self) -> Currency | None:
        return find_currency(self.code)

    def round_value(self) -> Decimal:
        """Round half-even to the currency's minor unit; unknown codes are kept as is."""
        currency = self.currency
        if currency is None:
            return self.amount
        places = self.amount.as_tuple().exponent
        if isinstance(places, int) and -places > currency.exponent:
            return _quantize(self.amount, currency.exponent)
        return self.amount

    def __str__(self) -> str:
        currency = self.currency
        if currency is None:
            return f"{_plain(self.amount)} {self.code}"
        rounded = _quantize(abs(self.amount), currency.exponent)
        integer, _, fraction = _plain(rounded).partition(".")
        text = integer if currency.exponent == 0 else integer + currency.exponent_separator + fraction
        sign = "-" if self.amount < 0 else ""
        if currency.symbol_first:
            return f"{sign}{currency.symbol}{text}"
        return f"{sign}{text}{currency.symbol}"