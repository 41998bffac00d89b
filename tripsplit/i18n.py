"""Message catalogues, translation context and message keys."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Union

DEFAULT_LOCALE = "en-US"
DEFAULT_CURRENCY = "EUR"


class Args:
    AMOUNT = "amount"
    AVAILABLE_LANGS = "available-langs"
    BEST_MATCH = "best-match"
    CHAR = "char"
    COMMAND = "command"
    CREDITOR = "creditor"
    CURRENCY = "currency"
    DEBT = "debt"
    DEBTOR = "debtor"
    DESCRIPTION = "description"
    EXPENSE = "expense"
    EXPENSES = "expenses"
    HELP_MESSAGE = "help-message"
    INPUT = "input"
    LANGID = "langid"
    NAME = "name"
    NUMBER = "number"
    OTHER_TRAVELER_NAME = "other-traveler-name"
    RECEIVER = "receiver"
    SENDER = "sender"
    SHARES = "shares"
    TRAVELER_IS_CASE_CREDITOR = "creditor"
    TRAVELER_IS_CASE_DEBTOR = "debtor"
    TRAVELER_IS = "traveler-is"
    TRAVELER_NAME = "traveler-name"


class Commands:
    COMMAND_DESCRIPTIONS = "command-descriptions"
    PROCESS_ALREADY_RUNNING = "process-already-running"
    SET_LANGUAGE_NOT_AVAILABLE = "set-language-not-available"
    SET_LANGUAGE_OK = "set-language-ok"
    SET_CURRENCY_OK = "set-currency-ok"
    ADD_TRAVELER_ALREADY_ADDED = "add-traveler-already-added"
    ADD_TRAVELER_OK = "add-traveler-ok"
    CANCEL_NO_PROCESS_TO_CANCEL = "cancel-no-process-to-cancel"
    CANCEL_OK = "cancel-ok"
    DELETE_EXPENSE_NOT_FOUND = "delete-expense-not-found"
    DELETE_EXPENSE_OK = "delete-expense-ok"
    DELETE_TRAVELER_HAS_EXPENSES = "delete-traveler-has-expenses"
    DELETE_TRAVELER_NOT_FOUND = "delete-traveler-not-found"
    DELETE_TRAVELER_OK = "delete-traveler-ok"
    LIST_EXPENSES_DESCR_NOT_FOUND = "list-expenses-descr-not-found"
    LIST_EXPENSES_NOT_FOUND = "list-expenses-not-found"
    LIST_TRAVELERS_NOT_FOUND = "list-travelers-not-found"
    SHOW_BALANCES_OK = "show-balances-ok"
    SHOW_BALANCES_SETTLED_UP = "show-balances-settled-up"
    SHOW_BALANCES_TRAVELER_OK = "show-balances-traveler-ok"
    SHOW_BALANCES_TRAVELER_NOT_FOUND = "show-balances-traveler-not-found"
    SHOW_BALANCES_TRAVELER_SETTLED_UP = "show-balances-traveler-settled-up"
    SHOW_EXPENSE_NOT_FOUND = "show-expense-not-found"
    TRANSFER_OK = "transfer-ok"
    TRANSFER_RECEIVER_NOT_FOUND = "transfer-receiver-not-found"
    TRANSFER_SENDER_NOT_FOUND = "transfer-sender-not-found"
    DELETE_TRANSFER_NOT_FOUND = "delete-transfer-not-found"
    DELETE_TRANSFER_OK = "delete-transfer-ok"
    LIST_TRANSFERS_NAME_NOT_FOUND = "list-transfers-name-not-found"
    LIST_TRANSFERS_NOT_FOUND = "list-transfers-not-found"
    INVALID_COMMAND_USAGE = "invalid-command-usage"
    UNKNOWN_COMMAND = "unknown-command"
    UNKNOWN_COMMAND_BEST_MATCH = "unknown-command-best-match"


class Errors:
    COMMAND_ERROR_EMPTY_INPUT = "command-error-empty-input"
    COMMAND_ERROR_HELP = "command-error-help"
    COMMAND_ERROR_SET_LANGUAGE = "command-error-set-language"
    COMMAND_ERROR_SET_CURRENCY = "command-error-set-currency"
    COMMAND_ERROR_ADD_TRAVELER = "command-error-add-traveler"
    COMMAND_ERROR_DELETE_TRAVELER = "command-error-delete-traveler"
    COMMAND_ERROR_LIST_TRAVELERS = "command-error-list-travelers"
    COMMAND_ERROR_DELETE_EXPENSE = "command-error-delete-expense"
    COMMAND_ERROR_LIST_EXPENSES = "command-error-list-expenses"
    COMMAND_ERROR_SHOW_EXPENSE = "command-error-show-expense"
    COMMAND_ERROR_TRANSFER = "command-error-transfer"
    COMMAND_ERROR_DELETE_TRANSFER = "command-error-delete-transfer"
    COMMAND_ERROR_LIST_TRANSFERS = "command-error-list-transfers"
    COMMAND_ERROR_SHOW_BALANCES = "command-error-show-balances"
    NAME_VALIDATION_ERROR_STARTS_WITH_SLASH = "name-validation-error-starts-with-slash"
    NAME_VALIDATION_ERROR_INVALID_CHAR = "name-validation-error-invalid-char"
    NAME_VALIDATION_ERROR_RESERVED_KEYWORD = "name-validation-error-reserved-keyword"
    ADD_EXPENSE_ERROR_REPEATED_TRAVELER_NAME = "add-expense-error-repeated-traveler-name"
    ADD_EXPENSE_ERROR_TRAVELER_NOT_FOUND = "add-expense-error-traveler-not-found"
    ADD_EXPENSE_ERROR_EXPENSE_TOO_HIGH = "add-expense-error-expense-too-high"
    ADD_EXPENSE_ERROR_EXPENSE_TOO_LOW = "add-expense-error-expense-too-low"
    ADD_EXPENSE_ERROR_INVALID_FORMAT = "add-expense-error-invalid-format"
    ADD_EXPENSE_ERROR_NO_TRAVELERS_SPECIFIED = "add-expense-error-no-travelers-specified"
    END_ERROR_CLOSING_DIALOGUE = "end-error-closing-dialogue"
    END_ERROR_EXPENSE_CREATED = "end-error-no-expense-created"


class Formats:
    FORMAT_SHARE_DETAILS = "format-share-details"
    FORMAT_EXPENSE_DETAILS = "format-expense-details"
    FORMAT_EXPENSE = "format-expense"
    FORMAT_TRANSFER = "format-transfer"


class Help:
    HELP_HELP = "help-help"
    HELP_SET_LANGUAGE = "help-set-language"
    HELP_SET_CURRENCY = "help-set-currency"
    HELP_ADD_TRAVELER = "help-add-traveler"
    HELP_DELETE_TRAVELER = "help-delete-traveler"
    HELP_LIST_TRAVELERS = "help-list-travelers"
    HELP_ADD_EXPENSE = "help-add-expense"
    HELP_DELETE_EXPENSE = "help-delete-expense"
    HELP_LIST_EXPENSES = "help-list-expenses"
    HELP_SHOW_EXPENSE = "help-show-expense"
    HELP_TRANSFER = "help-transfer"
    HELP_DELETE_TRANSFER = "help-delete-transfer"
    HELP_LIST_TRANSFERS = "help-list-transfers"
    HELP_SHOW_BALANCES = "help-show-balances"
    HELP_CANCEL = "help-cancel"


class Terms:
    ADD_EXPENSE_COMMAND = "-add-expense-command"
    ADD_TRAVELER_COMMAND = "-add-traveler-command"
    CANCEL_COMMAND = "-cancel-command"
    DELETE_EXPENSE_COMMAND = "-delete-expense-command"
    DELETE_TRAVELER_COMMAND = "-delete-traveler-command"
    HELP_COMMAND = "-help-command"
    LIST_EXPENSES_COMMAND = "-list-expenses-command"
    LIST_TRAVELERS_COMMAND = "-list-travelers-command"
    SET_CURRENCY_COMMAND = "-set-currency-command"
    SET_LANGUAGE_COMMAND = "-set-language-command"
    SHOW_BALANCES_COMMAND = "-show-balances-command"
    SHOW_EXPENSE_COMMAND = "-show-expense-command"
    TRANSFER_COMMAND = "-transfer-command"
    DELETE_TRANSFER_COMMAND = "-delete-transfer-command"
    LIST_TRANSFERS_COMMAND = "-list-transfers-command"
    I18N_DECIMAL_SEP = "-decimal-sep"
    I18N_SPLIT_AMONG_ENTRIES_SEP = "-split-among-entries-sep"
    I18N_SPLIT_AMONG_NAME_AMOUNT_SEP = "-split-among-name-amount-sep"
    I18N_ALL_KWORD = "-all-kword"
    I18N_END_KWORD = "-end-kword"


class Dialogues:
    ADD_EXPENSE_START = "add-expense-start"
    ADD_EXPENSE_ASK_DESCRIPTION = "add-expense-ask-description"
    ADD_EXPENSE_ASK_AMOUNT = "add-expense-ask-amount"
    ADD_EXPENSE_INVALID_DESCRIPTION = "add-expense-invalid-description"
    ADD_EXPENSE_ASK_PAID_BY = "add-expense-ask-paid-by"
    ADD_EXPENSE_INVALID_AMOUNT = "add-expense-invalid-amount"
    ADD_EXPENSE_INVALID_PAID_BY = "add-expense-invalid-paid-by"
    ADD_EXPENSE_ASK_SHARES = "add-expense-ask-shares"
    ADD_EXPENSE_TRAVELER_NOT_FOUND = "add-expense-traveler-not-found"
    ADD_EXPENSE_TRAVELER_GENERIC_ERROR = "add-expense-traveler-generic-error"
    ADD_EXPENSE_CONTINUE_SPLIT = "add-expense-continue-split"
    ADD_EXPENSE_OK = "add-expense-ok"
    ADD_EXPENSE_ERROR_ON_COMPUTING_SHARES = "add-expense-error-on-computing-shares"
    ADD_EXPENSE_CREATING_EXPENSE_GENERIC_ERROR = "add-expense-creating-expense-generic-error"
    ADD_EXPENSE_SHARES_PARSING_ERROR = "add-expense-shares-parsing-error"
    ADD_EXPENSE_INVALID_SHARES = "add-expense-invalid-shares"
    ADD_EXPENSE_SHARES_CLEARED = "add-expense-shares-cleared"


_COMMAND_VARIANTS = {
    Terms.CANCEL_COMMAND: "Cancel",
    Terms.ADD_EXPENSE_COMMAND: "AddExpense",
    Terms.ADD_TRAVELER_COMMAND: "AddTraveler",
    Terms.DELETE_EXPENSE_COMMAND: "DeleteExpense",
    Terms.DELETE_TRAVELER_COMMAND: "DeleteTraveler",
    Terms.HELP_COMMAND: "Help",
    Terms.LIST_EXPENSES_COMMAND: "ListExpenses",
    Terms.LIST_TRAVELERS_COMMAND: "ListTravelers",
    Terms.SET_CURRENCY_COMMAND: "SetCurrency",
    Terms.SET_LANGUAGE_COMMAND: "SetLanguage",
    Terms.SHOW_BALANCES_COMMAND: "ShowBalances",
    Terms.SHOW_EXPENSE_COMMAND: "ShowExpense",
    Terms.TRANSFER_COMMAND: "Transfer",
    Terms.DELETE_TRANSFER_COMMAND: "DeleteTransfer",
    Terms.LIST_TRANSFERS_COMMAND: "ListTransfers",
}


# --- Message syntax -------------------------------------------------------


class _ParseError(ValueError):
    pass


@dataclass(frozen=True)
class _VariableRef:
    name: str


@dataclass(frozen=True)
class _StringLiteral:
    value: str


@dataclass(frozen=True)
class _NumberLiteral:
    text: str


@dataclass(frozen=True)
class _MessageRef:
    name: str


@dataclass(frozen=True)
class _TermRef:
    name: str


@dataclass(frozen=True)
class _FunctionCall:
    name: str
    args: tuple


@dataclass(frozen=True)
class _Select:
    selector: Any
    variants: tuple
    default: int


_Pattern = tuple
_Element = Union[str, Any]

_IDENT_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_-]*")
_NUMBER_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")
_VARIANT_KEY_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?|[a-zA-Z][a-zA-Z0-9_-]*")
_NAMED_ARG_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_-]*[ \t\n]*:")
_ENTRY_RE = re.compile(r"^(-?[a-zA-Z][a-zA-Z0-9_-]*)[ \t]*=[ \t]*(.*)$")
_ATTRIBUTE_RE = re.compile(r"^[ \t]+\.[a-zA-Z][a-zA-Z0-9_-]*[ \t]*=")
_MAX_DEPTH = 32


class _PatternParser:
    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def parse(self) -> _Pattern:
        pattern = self._pattern(in_variant=False)
        if self._pos != len(self._text):
            raise _ParseError(f"unexpected input at {self._pos}")
        return pattern

    def _peek(self, size: int = 1) -> str:
        return self._text[self._pos:self._pos + size]

    def _skip_ws(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos] in " \t\r\n":
            self._pos += 1

    def _expect(self, token: str) -> None:
        if not self._text.startswith(token, self._pos):
            raise _ParseError(f"expected {token!r} at {self._pos}")
        self._pos += len(token)

    def _match(self, regex: re.Pattern) -> str:
        found = regex.match(self._text, self._pos)
        if not found:
            raise _ParseError(f"unexpected input at {self._pos}")
        self._pos = found.end()
        return found.group(0)

    def _variant_boundary(self) -> bool:
        rest = self._text[self._pos + 1:].lstrip(" \t\r\n")
        return rest.startswith(("[", "*[", "}"))

    def _pattern(self, in_variant: bool) -> _Pattern:
        elements: list[_Element] = []
        buf: list[str] = []
        while self._pos < len(self._text):
            ch = self._text[self._pos]
            if ch == "{":
                if buf:
                    elements.append("".join(buf))
                    buf = []
                self._pos += 1
                elements.append(self._placeable())
            elif in_variant and (ch == "}" or (ch == "\n" and self._variant_boundary())):
                break
            else:
                buf.append(ch)
                self._pos += 1
        if buf:
            elements.append("".join(buf))
        return tuple(elements)

    def _placeable(self) -> Any:
        self._skip_ws()
        expression = self._inline()
        self._skip_ws()
        if self._peek(2) == "->":
            self._pos += 2
            expression = self._select(expression)
            self._skip_ws()
        self._expect("}")
        return expression

    def _select(self, selector: Any) -> _Select:
        variants: list[tuple[str, _Pattern]] = []
        default: int | None = None
        while True:
            self._skip_ws()
            if self._peek() == "}":
                break
            is_default = self._peek() == "*"
            if is_default:
                self._pos += 1
            self._expect("[")
            self._skip_ws()
            key = self._match(_VARIANT_KEY_RE)
            self._skip_ws()
            self._expect("]")
            value = _trim(self._pattern(in_variant=True))
            if is_default:
                if default is not None:
                    raise _ParseError("more than one default variant")
                default = len(variants)
            variants.append((key, value))
        if default is None:
            raise _ParseError("select expression without a default variant")
        return _Select(selector, tuple(variants), default)

    def _inline(self) -> Any:
        ch = self._peek()
        if ch == "$":
            self._pos += 1
            return _VariableRef(self._match(_IDENT_RE))
        if ch == "{":
            self._pos += 1
            return self._placeable()
        if ch == '"':
            return _StringLiteral(self._string())
        if _NUMBER_RE.match(self._text, self._pos):
            return _NumberLiteral(self._match(_NUMBER_RE))
        if ch == "-":
            self._pos += 1
            name = "-" + self._match(_IDENT_RE)
            if self._peek() == "(":
                self._call_args()
            return _TermRef(name)
        name = self._match(_IDENT_RE)
        if self._peek() == "(":
            return _FunctionCall(name, self._call_args())
        return _MessageRef(name)

    def _string(self) -> str:
        self._expect('"')
        out: list[str] = []
        while True:
            if self._pos >= len(self._text):
                raise _ParseError("unterminated string literal")
            ch = self._text[self._pos]
            if ch == '"':
                self._pos += 1
                return "".join(out)
            if ch == "\n":
                raise _ParseError("line break in string literal")
            if ch == "\\":
                escape = self._text[self._pos + 1:self._pos + 2]
                if escape in ('"', "\\"):
                    out.append(escape)
                    self._pos += 2
                elif escape in ("u", "U"):
                    width = 4 if escape == "u" else 6
                    digits = self._text[self._pos + 2:self._pos + 2 + width]
                    if not re.fullmatch(rf"[0-9a-fA-F]{{{width}}}", digits):
                        raise _ParseError("bad unicode escape")
                    out.append(chr(int(digits, 16)))
                    self._pos += 2 + width
                else:
                    raise _ParseError("unknown escape sequence")
            else:
                out.append(ch)
                self._pos += 1

    def _call_args(self) -> tuple:
        self._expect("(")
        args: list[Any] = []
        while True:
            self._skip_ws()
            if self._peek() == ")":
                self._pos += 1
                return tuple(args)
            named = _NAMED_ARG_RE.match(self._text, self._pos)
            if named:
                self._pos = named.end()
                self._skip_ws()
                self._inline()  # named options do not affect formatting here
            else:
                args.append(self._inline())
            self._skip_ws()
            if self._peek() == ",":
                self._pos += 1
            elif self._peek() != ")":
                raise _ParseError(f"expected ',' or ')' at {self._pos}")


def _trim(pattern: _Pattern) -> _Pattern:
    elements = list(pattern)
    if elements and isinstance(elements[0], str):
        elements[0] = elements[0].lstrip(" \t\r\n")
    if elements and isinstance(elements[-1], str):
        elements[-1] = elements[-1].rstrip()
    return tuple(el for el in elements if el != "")


def _is_continuation(line: str) -> bool:
    return not line.strip() or line[0] in " \t[*}"


def _join_value(first: str, continuation: list[str]) -> str:
    indents = [len(line) - len(line.lstrip(" ")) for line in continuation if line.strip()]
    indent = min(indents, default=0)
    dedented = [line[indent:] if line.strip() else "" for line in continuation]
    lines = ([first.rstrip()] if first.strip() else []) + dedented
    return "\n".join(lines).rstrip()


def _parse_resource(source: str) -> tuple[dict[str, _Pattern], dict[str, _Pattern]]:
    messages: dict[str, _Pattern] = {}
    terms: dict[str, _Pattern] = {}
    lines = source.splitlines()
    index = 0
    while index < len(lines):
        entry = _ENTRY_RE.match(lines[index])
        index += 1
        if not entry:
            continue
        ident, first = entry.groups()
        continuation: list[str] = []
        while index < len(lines) and _is_continuation(lines[index]):
            continuation.append(lines[index])
            index += 1
        for position, line in enumerate(continuation):
            if _ATTRIBUTE_RE.match(line):
                continuation = continuation[:position]
                break
        raw = _join_value(first, continuation)
        if not raw:
            continue
        try:
            pattern = _trim(_PatternParser(raw).parse())
        except _ParseError:
            continue
        (terms if ident.startswith("-") else messages)[ident] = pattern
    return messages, terms


def _normalize_langid(text: str) -> str:
    parts = re.split(r"[-_]", str(text).strip())
    if not re.fullmatch(r"[A-Za-z]{2,3}|[A-Za-z]{5,8}", parts[0]):
        raise ValueError(f"invalid language identifier: {text!r}")
    normalized = [parts[0].lower()]
    stage = 0
    for part in parts[1:]:
        if stage == 0 and re.fullmatch(r"[A-Za-z]{4}", part):
            normalized.append(part.title())
            stage = 1
        elif stage <= 1 and re.fullmatch(r"[A-Za-z]{2}|[0-9]{3}", part):
            normalized.append(part.upper())
            stage = 2
        elif re.fullmatch(r"[A-Za-z0-9]{5,8}|[0-9][A-Za-z0-9]{3}", part):
            normalized.append(part.lower())
            stage = 3
        else:
            raise ValueError(f"invalid language identifier: {text!r}")
    return "-".join(normalized)


def _as_number(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return None


# --- Catalogues -----------------------------------------------------------


@dataclass
class _Bundle:
    messages: dict = field(default_factory=dict)
    terms: dict = field(default_factory=dict)


class Localizer:
    """Holds message catalogues per locale and formats messages."""

    def __init__(self, fallback: str, catalogues: Mapping[str, Any] | None = None) -> None:
        self.fallback = _normalize_langid(fallback)
        self._bundles: dict[str, _Bundle] = {}
        for langid, source in (catalogues or {}).items():
            chunks = [source] if isinstance(source, str) else list(source)
            for chunk in chunks:
                self.add_messages(langid, chunk)

    @classmethod
    def from_directory(cls, path: str | Path, fallback: str) -> Localizer:
        """Load every ``<locale>/*.ftl`` file found under ``path``."""
        catalogues: dict[str, list[str]] = {}
        for locale_dir in sorted(Path(path).iterdir()):
            if locale_dir.is_dir():
                catalogues[locale_dir.name] = [
                    ftl.read_text(encoding="utf-8") for ftl in sorted(locale_dir.glob("*.ftl"))
                ]
        return cls(fallback, catalogues)

    def add_messages(self, langid: str, source: str) -> None:
        """Parse ``source`` and add its messages and terms to a locale."""
        locale = _normalize_langid(langid)
        bundle = self._bundles.get(locale)
        if bundle is None:
            bundle = _Bundle()
            bundle.terms.update(
                {term: (variant.lower(),) for term, variant in _COMMAND_VARIANTS.items()}
            )
            self._bundles[locale] = bundle
        messages, terms = _parse_resource(source)
        bundle.messages.update(messages)
        bundle.terms.update(terms)

    def lookup(
        self, langid: str, key: str, args: Mapping[str, Any] | None = None
    ) -> str | None:
        """Format message ``key`` for ``langid``, or return None if it is unknown."""
        arguments = dict(args or {})
        for locale in self._chain(langid):
            bundle = self._bundles.get(locale)
            if bundle is not None and key in bundle.messages:
                return self._format(bundle, bundle.messages[key], arguments, 0)
        return None

    def locales(self) -> tuple[str, ...]:
        return tuple(self._bundles)

    def _chain(self, langid: str) -> list[str]:
        requested = _normalize_langid(langid)
        language = requested.split("-")[0]
        chain = [requested]
        chain.extend(loc for loc in self._bundles if loc.split("-")[0] == language)
        chain.append(self.fallback)
        return list(dict.fromkeys(chain))

    def _format(self, bundle: _Bundle, pattern: _Pattern, args: dict, depth: int) -> str:
        if depth > _MAX_DEPTH:
            return "{???}"
        return "".join(
            element if isinstance(element, str)
            else str(self._resolve(bundle, element, args, depth))
            for element in pattern
        )

    def _resolve(self, bundle: _Bundle, expression: Any, args: dict, depth: int) -> Any:
        if isinstance(expression, _VariableRef):
            if expression.name in args:
                return args[expression.name]
            return "{$" + expression.name + "}"
        if isinstance(expression, _StringLiteral):
            return expression.value
        if isinstance(expression, _NumberLiteral):
            return Decimal(expression.text)
        if isinstance(expression, _MessageRef):
            pattern = bundle.messages.get(expression.name)
            if pattern is None:
                return "{" + expression.name + "}"
            return self._format(bundle, pattern, args, depth + 1)
        if isinstance(expression, _TermRef):
            pattern = bundle.terms.get(expression.name)
            if pattern is None:
                return "{" + expression.name + "}"
            return self._format(bundle, pattern, {}, depth + 1)
        if isinstance(expression, _FunctionCall):
            if expression.name == "NUMBER" and expression.args:
                return self._resolve(bundle, expression.args[0], args, depth)
            return "{" + expression.name + "()}"
        if isinstance(expression, _Select):
            selector = self._resolve(bundle, expression.selector, args, depth)
            chosen = _choose_variant(selector, expression)
            return self._format(bundle, chosen, args, depth + 1)
        raise TypeError(f"unknown expression: {expression!r}")


def _choose_variant(selector: Any, select: _Select) -> _Pattern:
    number = _as_number(selector)
    for key, value in select.variants:
        if _NUMBER_RE.fullmatch(key):
            if number is not None and Decimal(key) == number:
                return value
        elif str(selector) == key:
            return value
    if number is not None:
        category = "one" if number == 1 else "other"
        for key, value in select.variants:
            if key == category:
                return value
    return select.variants[select.default][1]


class _State:
    localizer = Localizer(DEFAULT_LOCALE)


def get_localizer() -> Localizer:
    return _State.localizer


def set_localizer(localizer: Localizer) -> None:
    _State.localizer = localizer


# --- Translation ----------------------------------------------------------


@dataclass
class Context:
    """Per-chat language and currency used when rendering messages."""

    langid: str = field(default_factory=lambda: get_localizer().fallback)
    currency: str = DEFAULT_CURRENCY


class Translatable(ABC):
    """Something that renders itself as a localized message."""

    @abstractmethod
    def translate(self, ctx: Context) -> str:
        ...

    def translate_default(self) -> str:
        return self.translate(Context())

    def __str__(self) -> str:
        return self.translate_default()


def translate(ctx: Context, key: str, args: Mapping[str, Any] | None = None) -> str:
    """Format ``key`` in the context's language, falling back to the key itself."""
    result = get_localizer().lookup(ctx.langid, key, args)
    return key if result is None else result


def translate_default(key: str, args: Mapping[str, Any] | None = None) -> str:
    return translate(Context(), key, args)


def is_lang_available(langid: str) -> bool:
    try:
        locale = _normalize_langid(langid)
    except ValueError:
        return False
    return locale in get_localizer().locales()


def available_langs() -> Iterator[str]:
    return iter(get_localizer().locales())