"""
Syntax strings: a pure, derived view over a command descriptor.

- mandatory (effectively mandatory) arguments render as <label>
- optional arguments render as [label]
- injectable arguments are omitted
- labels come from Argument.label ("--long", else short name, else parameter, else arg<index>)

    >>> generate(echo)
    '<text> [number] [decimal]'
    >>> usage(echo)
    'test echo <text> [number] [decimal]'
"""


def render(argument, /):
    """Render one argument as <label> or [label]."""
    if argument.required:
        return f"<{argument.label}>"
    return f"[{argument.label}]"


def generate(command, /):
    """
    Generate the argument part of a command's syntax.
    """
    return " ".join(render(argument) for argument in command.arguments if not argument.injectable)


def usage(command, /):
    """
    Qualified name followed by the command syntax (the override when one was declared).
    """
    return " ".join(part for part in (command.qualname, command.syntax) if part)


__all__ = (
    "generate",
    "usage",
)
