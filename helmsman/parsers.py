"""
Type-parser table: turns one raw token into a value of a declared type.

Overview
- Parsers: a table mapping a type to a single-argument parse(text) callable.
  • register(type, parser) / @parsers.register(type): add or replace an entry.
  • lookup(type): exact entry, then the first entry along the type's MRO,
    then the enum fallback (member by upper-cased name).
  • convert(text, type): single-value conversion used by both parsing modes.

Builtin entries
- str, int, float, complex, Decimal, Fraction
- bool: "true"/"1" and "false"/"0" (case-insensitive), anything else fails.
- UUID, date, time, datetime (ISO 8601), Path.

Conversion contract
- “T | None” is reduced to T before lookup.
- None passes through as None without invoking any parser.
- ValueError/TypeError/ArithmeticError/LookupError raised by a parser become an
  UncastableValueError carrying the raw text; a missing parser is an
  UnparsableTypeError.

The table is read-heavy: populate it during setup, before dispatch starts.
"""
import builtins
import datetime
import decimal
import enum
import fractions
import logging
import pathlib
import uuid

from .faults import UncastableValueError, UnparsableTypeError
from .utils import Unset, rename, unwrap

logger = logging.getLogger(__name__)


def _parse_bool(text, /):
    match text.strip().lower():
        case "true" | "1":
            return True
        case "false" | "0":
            return False
        case _:
            raise ValueError(f"invalid boolean literal: {text!r}")


def _parse_enum(type, /):
    @rename("parse_" + type.__name__.lower())
    def parser(text):
        try:
            return type[text.strip().upper()]
        except KeyError:
            raise ValueError(f"{text!r} is not a member of {type.__name__}") from None
    return parser


class Parsers:
    """
    Mapping of value type -> parse(text) callable.

    A fresh table carries the builtin entries; pass builtins=False to start empty.
    """

    def __init__(self, *, builtins=True):
        self._parsers = {}
        if builtins:
            self._parsers.update({
                str: str,
                int: int,
                float: float,
                complex: complex,
                bool: _parse_bool,
                decimal.Decimal: decimal.Decimal,
                fractions.Fraction: fractions.Fraction,
                uuid.UUID: uuid.UUID,
                datetime.date: datetime.date.fromisoformat,
                datetime.time: datetime.time.fromisoformat,
                datetime.datetime: datetime.datetime.fromisoformat,
                pathlib.Path: pathlib.Path,
            })

    def register(self, type, parser=Unset, /):
        """
        Register a parser for a type; usable directly or as a decorator.

        Forms
        - parsers.register(Point, Point.parse)
        - @parsers.register(Point)
          def parse_point(text): ...
        """
        if not isinstance(type, builtins.type):
            raise TypeError("register() first argument must be a type")

        @rename("register")
        def wrapper(parser, /):
            if not callable(parser):
                raise TypeError("register() parser must be callable")
            logger.debug("registered parser %r for %s", parser, type.__qualname__)
            self._parsers[type] = parser
            return parser

        return wrapper(parser) if parser is not Unset else wrapper

    def lookup(self, type, /):
        """
        Return the parser for a type, or None when there is none.
        """
        type = unwrap(type)
        if type in self._parsers:
            return self._parsers[type]
        # enums come before their mixin bases (an IntEnum must not parse as int)
        if isinstance(type, enum.EnumMeta):
            return _parse_enum(type)
        for base in getattr(type, "__mro__", ())[1:]:
            if base in self._parsers:
                return self._parsers[base]
        return None

    def convert(self, text, type, /):
        """
        Convert one raw string into a value of the given type.
        """
        if text is None:
            return None
        if (parser := self.lookup(type)) is None:
            raise UnparsableTypeError(f"no parser is registered for type {getattr(unwrap(type), '__name__', type)!r}", type=type)
        try:
            return parser(text)
        except (ValueError, TypeError, ArithmeticError, LookupError) as exception:
            raise UncastableValueError(
                f"cannot convert {text!r} to {getattr(unwrap(type), '__name__', type)}",
                text=text,
                type=type,
                hint=str(exception) or Unset,
            ) from exception

    def __contains__(self, type):
        return self.lookup(type) is not None

    def __len__(self):
        return len(self._parsers)


__all__ = (
    "Parsers",
)
