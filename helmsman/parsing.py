"""
Argument parsing engine: raw argument text -> {Argument: value}.

Two independent algorithms, selected by Command.named:

Positional mode (parse_positional)
- whitespace is collapsed and the text split into tokens.
- arguments are walked in order with a token cursor:
  • injectable arguments are resolved by the injector, consuming nothing;
  • the last non-injectable argument, when greedy and tokens remain, takes all
    remaining tokens joined by single spaces;
  • when tokens ran out, an effectively-mandatory argument is a missing-argument
    fault, an optional one gets None and the cursor stays put;
  • otherwise the token under the cursor is converted and the cursor advances.
- tokens beyond the last argument are ignored, nothing is reordered.

Named mode (parse_named)
- tokenize() honours double quotes ("a b c" is one token, \\" a literal quote).
- "-x" is a short flag, "--xyz" a long one; every following non-flag token up
  to the next flag belongs to it (joined by single spaces).
- unknown flags are faults; values of injectable arguments are discarded;
  empty values of effectively-mandatory arguments are faults.
- flags may come in any order; omitted optional flags yield None, omitted
  effectively-mandatory ones are faults; non-flag tokens before the first flag
  are ignored.
- every injectable argument is resolved once flags are consumed.

    >>> tokenize('-t "a b c" -n 1')
    ['-t', 'a b c', '-n', '1']
"""
import logging

from .faults import MissingArgumentError, MissingValueError, UnknownArgumentError
from .utils import coalesce

logger = logging.getLogger(__name__)


def tokenize(text, /):
    """
    Split text on whitespace, keeping double-quoted spans as single tokens.

    - a quote toggles quoting unless it is escaped as \\", which yields a literal quote.
    - quotes themselves are dropped; an empty quoted span yields an empty token.
    """
    tokens = []
    current = []
    quoting = quoted = False
    index, length = 0, len(text)

    while index < length:
        char = text[index]
        if char == "\\" and index + 1 < length and text[index + 1] == '"':
            current.append('"')
            index += 2
            continue
        if char == '"':
            quoting = not quoting
            quoted = True
        elif char.isspace() and not quoting:
            if current or quoted:
                tokens.append("".join(current))
            current, quoted = [], False
        else:
            current.append(char)
        index += 1

    if current or quoted:
        tokens.append("".join(current))
    return tokens


def _ordinal(number):
    # 1 -> "1st", 2 -> "2nd", 11 -> "11th"
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _inject(arguments, values, context, injector):
    for argument in arguments:
        if argument.injectable:
            values[argument] = injector.resolve(argument, context)


def parse_positional(command, unparsed, context, /, parsers, injector):
    """
    Parse positional tokens into values for command.arguments.
    """
    tokens = unparsed.split()
    arguments = command.arguments
    values = {}

    positionals = [argument for argument in arguments if not argument.injectable]
    if not positionals:
        _inject(arguments, values, context, injector)
        return values

    last = positionals[-1]
    cursor = 0

    for argument in arguments:
        if argument.injectable:
            values[argument] = injector.resolve(argument, context)
            continue

        if argument is last and argument.greedy and cursor < len(tokens):
            values[argument] = parsers.convert(" ".join(tokens[cursor:]), argument.type)
            cursor = len(tokens)
            continue

        if cursor >= len(tokens):
            if argument.required:
                position = positionals.index(argument) + 1
                raise MissingArgumentError(
                    f"missing {_ordinal(position)} argument {argument.label!r}",
                    argument=argument,
                    index=position - 1,
                    hint=f"usage: {command.usage}",
                )
            values[argument] = None
            continue

        values[argument] = parsers.convert(tokens[cursor], argument.type)
        cursor += 1

    if cursor < len(tokens):
        logger.debug("ignored %d trailing token(s) for %r", len(tokens) - cursor, command.qualname)
    return values


def _resolve_flag(command, token):
    if token.startswith("--"):
        flag = token[2:]
        for argument in command.arguments:
            if flag and flag == coalesce(argument.longname, argument.parameter):
                return argument
    else:
        flag = token[1:]
        for argument in command.arguments:
            if flag and flag == argument.name:
                return argument
    raise UnknownArgumentError(
        f"unknown argument {token!r} for command {command.qualname!r}",
        token=token,
        hint=f"usage: {command.usage}",
    )


def parse_named(command, unparsed, context, /, parsers, injector):
    """
    Parse "-x value --long value" flags into values for command.arguments.
    """
    tokens = tokenize(unparsed)
    arguments = command.arguments
    values = {}
    index = 0

    while index < len(tokens):
        token = tokens[index]
        if not token.startswith("-"):
            index += 1
            continue

        argument = _resolve_flag(command, token)
        index += 1
        start = index
        while index < len(tokens) and not tokens[index].startswith("-"):
            index += 1

        if argument.injectable:
            continue

        if not (raw := " ".join(tokens[start:index])):
            if argument.required:
                raise MissingValueError(
                    f"missing value for argument {token!r}",
                    argument=argument,
                    token=token,
                )
            values[argument] = None
            continue

        values[argument] = parsers.convert(raw, argument.type)

    for argument in arguments:
        if argument.injectable or argument in values:
            continue
        if argument.required:
            raise MissingArgumentError(
                f"missing argument {argument.label!r}",
                argument=argument,
                hint=f"usage: {command.usage}",
            )
        values[argument] = None

    _inject(arguments, values, context, injector)
    # declaration order, whatever the order of the flags
    return {argument: values[argument] for argument in arguments}


def parse(command, unparsed, context, /, parsers, injector):
    """
    Parse with the algorithm selected by command.named.
    """
    if command.named:
        return parse_named(command, unparsed, context, parsers, injector)
    return parse_positional(command, unparsed, context, parsers, injector)


__all__ = (
    "tokenize",
    "parse_positional",
    "parse_named",
    "parse",
)
