"""
Helmsman faults (errors raised while resolving, parsing and running commands) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
- CommandException: base type carrying a message + options; knows how to render
  itself through rich (header, message, hint) honouring fancy/colorful options.
- Parse faults (ParseError and subclasses): raised by the argument parsing engine;
  the handler never runs when one of them is raised.
- InvalidArgumentsError: parsed values cannot be bound to the handler inputs.
- InputExhausted: the terminal “no more input” signal of a line source (not a fault).

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- Parsers and the pipeline raise faults; output sinks render them via __rich__.
- Options are merged into a fault via __replace__(**options) before rendering.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - routing (2110x)
      • UNKNOWN_COMMAND
    - parsing (2111x)
      • UNKNOWN_ARGUMENT, MISSING_ARGUMENT, MISSING_VALUE, UNCASTABLE_VALUE, UNPARSABLE_TYPE,
        PARSING_FAILURE
    - binding (2112x)
      • INVALID_ARGUMENTS
    - execution (2113x)
      • PREHOOK_FAILURE, HANDLER_FAILURE, POSTHOOK_FAILURE, ERRORHOOK_FAILURE, DEFERRED_FAILURE
    - results (2114x)
      • UNSUCCESSFUL_RESULT
    - input (2115x)
      • UNREADABLE_INPUT

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing (21xxx) ---
    UNKNOWN_COMMAND             = 21101

    # --- parsing (21xxx) ---
    UNKNOWN_ARGUMENT            = 21111
    MISSING_ARGUMENT            = 21112
    MISSING_VALUE               = 21113
    UNCASTABLE_VALUE            = 21114
    UNPARSABLE_TYPE             = 21115
    PARSING_FAILURE             = 21116

    # --- binding (21xxx) ---
    INVALID_ARGUMENTS           = 21121

    # --- execution (21xxx) ---
    PREHOOK_FAILURE             = 21131
    HANDLER_FAILURE             = 21132
    POSTHOOK_FAILURE            = 21133
    ERRORHOOK_FAILURE           = 21134
    DEFERRED_FAILURE            = 21135

    # --- results (21xxx) ---
    UNSUCCESSFUL_RESULT         = 21141

    # --- input (21xxx) ---
    UNREADABLE_INPUT            = 21151

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base type for every engine fault.

    class attributes
    - __code__: FaultCode used when no 'code' option is given.
    - __title__: short title shown in the rendered header.
    - __hint__: one-line hint shown under the message.

    options (read-only mapping, merged via __replace__)
    - code, title, hint: override the class defaults.
    - fancy: render inside a panel.
    - colorful: apply the palette (see __styles__ in __main__).
    - prog: program name for the header (defaults to __prog__ in __main__, then "helmsman").
    - anything else the raiser wants to carry (e.g. text/type on conversion faults).
    """
    __code__ = Unset
    __title__ = "command error"
    __hint__ = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint", type(self).__hint__)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), style)

        prog = text(self.options.get("prog", getattr(main, "__prog__", "helmsman")), styler("prog-name"))
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"

        header = Text.assemble(
            "[ ",
            prog,
            " | ",
            text(code, styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CommandException):
    __code__ = FaultCode.UNKNOWN_COMMAND
    __title__ = "unknown command"
    __hint__ = "type 'help' to list the available commands"


class ParseError(CommandException):
    """base type for faults raised while turning raw text into argument values."""
    __title__ = "parse error"


class UnknownArgumentError(ParseError):
    __code__ = FaultCode.UNKNOWN_ARGUMENT
    __title__ = "unknown argument"
    __hint__ = "check the flag spelling with 'help <command>'"


class MissingArgumentError(ParseError):
    __code__ = FaultCode.MISSING_ARGUMENT
    __title__ = "missing argument"
    __hint__ = "supply every argument shown between angle brackets"


class MissingValueError(ParseError):
    __code__ = FaultCode.MISSING_VALUE
    __title__ = "missing value"
    __hint__ = "follow the flag with its value"


class UncastableValueError(ParseError):
    """
    conversion of one raw token failed.

    options
    - text: the offending raw text.
    - type: the target type.
    """
    __code__ = FaultCode.UNCASTABLE_VALUE
    __title__ = "uncastable value"

    @property
    def text(self):
        return self.options.get("text")


class UnparsableTypeError(ParseError):
    __code__ = FaultCode.UNPARSABLE_TYPE
    __title__ = "unparsable type"
    __hint__ = "register a parser for this type"


class InvalidArgumentsError(CommandException):
    __code__ = FaultCode.INVALID_ARGUMENTS
    __title__ = "invalid arguments"


class InputExhausted(Exception):
    """
    raised by a line source when no more input will ever be available.

    this is the terminal condition of the reader loop, never reported as a fault.
    """


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownCommandError",
    "ParseError",
    "UnknownArgumentError",
    "MissingArgumentError",
    "MissingValueError",
    "UncastableValueError",
    "UnparsableTypeError",
    "InvalidArgumentsError",
    "InputExhausted",
)
