"""
Builtin help command.

- "help": lists the registered top-level commands (count, name, syntax,
  description and number of subcommands).
- "help <name>": usage, description, arguments and subcommands of one command.
- "help lookups": every registered qualified name, in lookup order.

The command reaches the registry and the output sink through the injected
context (context.engine), so one build() result serves exactly one engine.

Palette keys (override through __styles__ in __main__)
- count-label, command-name, syntax, description, argument-name, argument-type,
  required, optional, table-border
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Group
from rich.table import Table
from rich.text import Text

from .arguments import Argument
from .context import Context
from .commands import command
from .results import Result
from .utils import pluralize


def _palette(colorful):
    styles = defaultdict(str, {
        "count-label": "bold #FFFFFF",
        "command-name": "bold #36C5F0",  # sky-blue commands
        "syntax": "bold #FFD600",  # amber parameters
        "description": "#9CA3AF",  # muted gray
        "argument-name": "bold #00E6FF",
        "argument-type": "#FF4D94",
        "required": "bold #22C55E",
        "optional": "#737373",
        "table-border": "#4B5563",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _counted(count, noun):
    return f"{count} {noun if count == 1 else pluralize(noun)}"


def _summary(descr):
    return descr.splitlines()[0] if descr else ""


def listing(registry, /, colorful=True):
    """
    Table of the top-level commands known to a registry.
    """
    styler = _palette(colorful)
    roots = registry.roots

    table = Table(box=ROUNDED, border_style=styler("table-border"), show_edge=True)
    table.add_column("name", style=styler("command-name"), no_wrap=True)
    table.add_column("syntax", style=styler("syntax"))
    table.add_column("description", style=styler("description"))
    table.add_column("subcommands", justify="right")

    for root in roots:
        table.add_row(
            Text(root.qualname),
            Text(root.syntax if root.handler else ""),
            Text(_summary(root.descr)),
            str(len(root.children)),
        )

    return Group(Text(_counted(len(roots), "command"), styler("count-label")), table)


def details(target, /, colorful=True):
    """
    Usage, description, arguments and subcommands of one command.
    """
    styler = _palette(colorful)
    renders = [Text.assemble(("usage: ", styler("count-label")), (target.usage, styler("command-name")))]

    if target.descr:
        renders.append(Text(target.descr, styler("description")))

    if arguments := [argument for argument in target.arguments if not argument.injectable]:
        table = Table(box=ROUNDED, border_style=styler("table-border"), title=_counted(len(arguments), "argument"))
        table.add_column("argument", style=styler("argument-name"), no_wrap=True)
        table.add_column("type", style=styler("argument-type"))
        table.add_column("")
        table.add_column("description", style=styler("description"))
        for argument in arguments:
            table.add_row(
                Text(argument.label),
                Text(getattr(argument.type, "__name__", str(argument.type))),
                Text("required", styler("required")) if argument.required else Text("optional", styler("optional")),
                Text(str(argument.descr or "")),
            )
        renders.append(table)

    if children := target.children:
        table = Table(box=ROUNDED, border_style=styler("table-border"), title=_counted(len(children), "subcommand"))
        table.add_column("name", style=styler("command-name"), no_wrap=True)
        table.add_column("syntax", style=styler("syntax"))
        table.add_column("description", style=styler("description"))
        for child in children.values():
            table.add_row(Text(child.qualname), Text(child.syntax), Text(_summary(child.descr)))
        renders.append(table)

    return Group(*renders)


def build():
    """
    Build a fresh "help" command (with its "lookups" subcommand).
    """

    @command(name="help", descr="list the available commands, or describe one of them")
    def help(
            context=Argument(type=Context),
            name=Argument(type=str, descr="qualified name of a command", mandatory=False),
            /,
    ):
        engine = context.engine
        colorful = getattr(engine.output, "colorful", True)

        if name is None:
            engine.output.info(listing(engine.registry, colorful))
            return Result.success()

        name = " ".join(name.split())
        if (target := engine.registry.get(name)) is None:
            target = next((root for root in engine.registry.roots if root.qualname == name), None)
        if target is None:
            return Result.error(f"Unknown command {name!r}, type 'help' to list the available commands")

        engine.output.info(details(target, colorful))
        return Result.success()

    @help.command(name="lookups", descr="list every registered name, in lookup order")
    def lookups(context=Argument(type=Context), /):
        registry = context.engine.registry
        styler = _palette(getattr(context.engine.output, "colorful", True))
        context.engine.output.info(Group(
            Text(_counted(len(registry), "lookup"), styler("count-label")),
            *(Text(name, styler("command-name")) for name in registry),
        ))

    return help


__all__ = (
    "build",
    "listing",
    "details",
)
