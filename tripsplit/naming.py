"""Derive table and field names for record classes."""

from __future__ import annotations

import dataclasses
import keyword


def to_snake_case(text: str) -> str:
    """Convert a CamelCase identifier to snake_case, keeping leading underscores."""
    words: list[str] = []
    stripped = text.lstrip("_")
    words.extend("" for _ in range(len(text) - len(stripped)))

    for part in stripped.split("_"):
        if not part:
            continue
        last_upper = False
        buf = ""
        for ch in part:
            if buf and buf != "'" and ch.isupper() and not last_upper:
                words.append(buf)
                buf = ""
            last_upper = ch.isupper()
            buf += ch.lower()
        words.append(buf)
    return "_".join(words)


def table_name(cls: type) -> str:
    """Return the table name for a record class."""
    return to_snake_case(cls.__name__)


def field_names(cls: type) -> dict[str, str]:
    """Map upper-case constant names to the stored field names of a dataclass.

    A trailing underscore used to avoid a Python keyword is dropped, so a
    field named ``in_`` is stored as ``in``.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError("table naming only supports dataclasses with named fields")
    names: dict[str, str] = {}
    for fld in dataclasses.fields(cls):
        name = fld.name
        if name.endswith("_") and keyword.iskeyword(name[:-1]):
            name = name[:-1]
        names[name.upper()] = name
    return names