"""Parsing how an expense is split among travelers and computing the shares."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, MutableMapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from .errors import (
    ExpenseTooHighError,
    ExpenseTooLowError,
    InvalidFormatError,
    NameValidationError,
    NameValidationFailedError,
    NoTravelersSpecifiedError,
    RepeatedTravelerNameError,
    TravelerNotFoundError,
)
from .models import (
    ALL_KWORD,
    DECIMAL_SEP,
    END_KWORD,
    SPLIT_AMONG_ENTRIES_SEP,
    SPLIT_AMONG_NAME_AMOUNT_SEP,
    Name,
)


@dataclass(frozen=True)
class Fixed:
    """A share of a fixed amount."""

    amount: Decimal


@dataclass(frozen=True)
class Percentage:
    """A share given as a percentage of what the fixed shares leave."""

    amount: Decimal


@dataclass(frozen=True)
class Dynamic:
    """An equal part of whatever remains after the other shares."""

    _marker: None = field(default=None, repr=False)


AmountSpec = Union[Fixed, Percentage, Dynamic]


class SplitOutcome(enum.Enum):
    """What the dialogue should do after a line of shares was parsed."""

    LIST = "list"
    END = "end"


_NAME_GRP = "name"
_AMOUNT_GRP = "amount"
_PERCENTAGE_GRP = "percentage"

_SPLIT_AMONG_REGEX = re.compile(
    r"^\s*(?P<{name}>[^{sep}]+)(\s*{sep}\s*(?P<{amount}>\d+({dec}\d+)?\s*(?P<{pct}>%)?))?\s*$".format(
        name=_NAME_GRP,
        amount=_AMOUNT_GRP,
        pct=_PERCENTAGE_GRP,
        sep=re.escape(SPLIT_AMONG_NAME_AMOUNT_SEP),
        dec=re.escape(DECIMAL_SEP),
    )
)


def _replace_sorted(
    split_among: MutableMapping[Name, AmountSpec], entries: dict[Name, AmountSpec]
) -> None:
    split_among.clear()
    split_among.update(sorted(entries.items(), key=lambda item: item[0]))


def _parse_entry(entry: str) -> tuple[Name, AmountSpec]:
    caps = _SPLIT_AMONG_REGEX.match(entry)
    if caps is None:
        raise InvalidFormatError(entry)
    try:
        name = Name.parse(caps.group(_NAME_GRP))
    except NameValidationError as err:
        raise NameValidationFailedError(err) from err

    amount_text = caps.group(_AMOUNT_GRP)
    if amount_text is None:
        return name, Dynamic()
    amount_text = amount_text.replace(DECIMAL_SEP, ".").rstrip()
    amount_text = amount_text.rstrip("%").rstrip()
    amount = Decimal(amount_text)
    if caps.group(_PERCENTAGE_GRP) is not None:
        return name, Percentage(amount)
    return name, Fixed(amount)


def parse_split_among(
    text: str,
    split_among: MutableMapping[Name, AmountSpec],
    known_names: Iterable[Name],
) -> SplitOutcome:
    """Parse one line of shares into ``split_among``.

    ``known_names`` are the names of the chat's travelers. The mapping is
    only changed when the line is accepted, and is kept ordered by name.
    Raises an AddExpenseError subclass when the line is rejected.
    """
    text = text.strip()
    lowered = text.lower()

    if lowered == END_KWORD.lower():
        if not split_among:
            raise NoTravelersSpecifiedError()
        return SplitOutcome.END

    if lowered == ALL_KWORD.lower():
        entries = dict(split_among)
        for name in known_names:
            entries.setdefault(name, Dynamic())
        _replace_sorted(split_among, entries)
        return SplitOutcome.END

    entries = dict(split_among)
    for entry in text.split(SPLIT_AMONG_ENTRIES_SEP):
        name, spec = _parse_entry(entry)
        if name in entries:
            raise RepeatedTravelerNameError(name)
        entries[name] = spec

    known = set(known_names)
    missing = next((name for name in sorted(entries) if name not in known), None)
    if missing is not None:
        raise TravelerNotFoundError(missing)

    _replace_sorted(split_among, entries)
    return SplitOutcome.LIST


def compute_shares(
    total: Decimal, split_among: MutableMapping[Name, AmountSpec]
) -> dict[Name, Decimal]:
    """Turn share specifications into amounts, ordered by name.

    Fixed shares are taken first, percentages apply to what they leave, and
    dynamic shares divide the remainder equally. Raises ExpenseTooHighError
    when fixed shares exceed the total and ExpenseTooLowError when something
    is left over with no dynamic share to take it.
    """
    total = total if isinstance(total, Decimal) else Decimal(str(total))
    residual = total
    count_dynamics = 0

    for spec in split_among.values():
        if isinstance(spec, Fixed):
            residual -= spec.amount
            if residual < 0:
                raise ExpenseTooHighError(total)
        elif isinstance(spec, Dynamic):
            count_dynamics += 1

    base = residual
    resolved: dict[Name, AmountSpec] = {}
    for name, spec in split_among.items():
        if isinstance(spec, Percentage):
            fixed = base * spec.amount / Decimal(100)
            residual -= fixed
            spec = Fixed(fixed)
        resolved[name] = spec

    if count_dynamics == 0 and residual > 0:
        raise ExpenseTooLowError(total - residual, total)

    split_residual = residual / Decimal(count_dynamics) if count_dynamics else Decimal(0)

    return {
        name: spec.amount if isinstance(spec, Fixed) else split_residual
        for name, spec in sorted(resolved.items(), key=lambda item: item[0])
    }