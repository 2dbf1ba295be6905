"""
Helmsman command layer: declare commands, their arguments, hooks and subcommands.

What this module provides
- Command: an immutable descriptor wrapping a handler callable with
  • arguments discovered from the handler's defaults (Argument instances), or
    an explicit argument list for data-driven registration,
  • handler bindings computed once (handler parameter -> argument),
  • positional or named parsing mode,
  • pre/post/error hooks (set once, inherited by subcommands),
  • one level of subcommands (parent -> children).

- Factories and helpers:
  • command(...): create a Command or a decorator that produces one.
  • group(name, ...): a handlerless command that only hosts subcommands.
  • collect(module): top-level commands defined by a module (used by Engine.include).

Quick start
    from helmsman import Argument, command

    @command(name="test")
    def test(text=Argument(type=str), /):
        print(text)

    @test.command(name="echo-optional")
    def echo(text=Argument(type=str), number=Argument(type=int | None, mandatory=False), /):
        print(text, number)

    @test.before
    def before(context):
        print("about to run", context.command.qualname)

Design notes
- Qualified names are the space-joined path ("test echo-optional"); the registry
  resolves input lines against them by longest match.
- Deeper paths are expressed by naming a top-level command with several words
  ("test two-level-deep"), never by nesting subcommands twice.
"""
import functools
import inspect
import logging
import operator
import re
from inspect import Parameter
from typing import NamedTuple

from .arguments import PRIMITIVES, Argument, injectable
from .faults import InvalidArgumentsError
from .syntax import generate, usage
from .utils import *

logger = logging.getLogger(__name__)


class Binding(NamedTuple):
    """
    One handler parameter and what feeds it.

    - argument is an Argument: the parsed value is passed.
    - argument is None: no argument matches; invoking the handler is an invalid-arguments fault.
    - argument is Unset: nothing matches but the parameter has a default, which is passed as-is.
    """
    parameter: Parameter
    argument: Argument | None | UnsetType


class CommandType(type):
    """
    Metaclass that turns command classes into introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(qualname='test echo', syntax='<text>', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _signature(handler, /):
    """
    Signature of a handler with string annotations evaluated when possible.
    """
    try:
        return inspect.signature(handler, eval_str=True)
    except NameError:
        return inspect.signature(handler)


def _process_strings(cls, metadata):
    """
    Validate and normalize 'name', 'descr' and 'syntax'.

    - name: defaults to the handler's __name__ with underscores turned into dashes;
      words are separated by single spaces; groups (no handler) must name themselves.
    - descr: defaults to the handler's docstring; non-empty when provided.
    - syntax: optional override of the generated syntax; non-empty when provided.
    """
    handler = metadata["handler"]

    if (name := metadata["name"]) is Unset:
        if handler is Unset:
            raise TypeError(f"{cls.__typename__} without a handler must specify a 'name'")
        name = getattr(handler, "__name__", Unset)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'handler' has no name, specify a 'name'")
        name = name.strip("_").replace("_", "-")
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := " ".join(name.split())):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    if (descr := metadata["descr"]) is Unset and handler is not Unset:
        descr = inspect.getdoc(handler) or Unset
    if not isinstance(descr, str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(syntax := metadata["syntax"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'syntax' must be a string")
    elif isinstance(syntax, str) and not (syntax := syntax.strip()):
        raise ValueError(f"{cls.__typename__} 'syntax' cannot be empty")
    metadata["syntax"] = coalesce(syntax)

    if not isinstance(metadata["named"], bool):
        raise TypeError(f"{cls.__typename__} 'named' must be a boolean")


def _process_arguments(cls, metadata):
    """
    Materialize the argument descriptors, stamping 'parameter' and 'index'.

    Sources
    - explicit 'arguments' iterable: index defaults to the position in the iterable.
    - otherwise the handler signature: every parameter whose default is an
      Argument; index defaults to the parameter position, parameter to its name.

    Also records metadata["sources"] (parameter name -> stamped argument) for
    _process_bindings().
    """
    handler = metadata["handler"]
    arguments = metadata["arguments"]
    sources = metadata["sources"] = {}

    if handler is not Unset and not callable(handler):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")

    if arguments is not Unset:
        if isinstance(arguments, str | Argument):
            raise TypeError(f"{cls.__typename__} 'arguments' must be an iterable of arguments")
        stamped = []
        for position, argument in enumerate(arguments):
            if not isinstance(argument, Argument):
                raise TypeError(f"{cls.__typename__} 'arguments' must contain only arguments")
            stamped.append(argument.__replace__(index=coalesce(argument.index, position)))
        metadata["arguments"] = tuple(stamped)
    elif handler is not Unset:
        stamped = []
        for position, parameter in enumerate(_signature(handler).parameters.values()):
            if not isinstance(parameter.default, Argument):
                continue
            argument = parameter.default.__replace__(
                parameter=coalesce(parameter.default.parameter, parameter.name),
                index=coalesce(parameter.default.index, position),
            )
            stamped.append(argument)
            sources[parameter.name] = argument
        metadata["arguments"] = tuple(stamped)
    else:
        metadata["arguments"] = ()

    positionals = [argument for argument in metadata["arguments"] if not argument.injectable]

    # at most one declared-greedy argument, and only in last position
    greedy = [argument for argument in positionals if argument.explicit]
    if len(greedy) > 1:
        raise ValueError(f"{cls.__typename__} can declare at most one greedy argument")
    if greedy and greedy[0] is not positionals[-1]:
        raise ValueError(f"{cls.__typename__} greedy argument {greedy[0].label!r} must be the last one")

    if metadata["named"]:
        shorts, longs = set(), set()
        for argument in positionals:
            if argument.name:
                if argument.name in shorts:
                    raise ValueError(f"{cls.__typename__} flag '-{argument.name}' is declared twice")
                shorts.add(argument.name)
            if long := coalesce(argument.longname, argument.parameter):
                if long in longs:
                    raise ValueError(f"{cls.__typename__} flag '--{long}' is declared twice")
                longs.add(long)


def _process_bindings(cls, metadata):
    """
    Bind every handler parameter to the argument feeding it, once.

    Matching order
    - the parameter default is an Argument: that argument.
    - named mode: the argument whose parameter/long/short name equals the parameter name.
    - annotated parameter: arguments whose type is the annotation (or a subclass);
      several candidates are disambiguated by index == parameter position.
    - unannotated parameter: the argument whose parameter name matches.
    Variadic parameters are ignored.
    """
    bindings = metadata["bindings"] = []
    sources = metadata.pop("sources")
    if (handler := metadata["handler"]) is Unset:
        return

    arguments = metadata["arguments"]

    def subclass(argument, annotation):
        target, expected = unwrap(argument.type), unwrap(annotation)
        try:
            return issubclass(target, expected)
        except TypeError:
            return target == expected

    for position, parameter in enumerate(_signature(handler).parameters.values()):
        if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
            continue
        if parameter.name in sources:
            bindings.append(Binding(parameter, sources[parameter.name]))
            continue

        if metadata["named"]:
            candidates = [
                argument for argument in arguments
                if parameter.name in (argument.parameter, argument.longname, argument.name)
            ]
        elif parameter.annotation is not Parameter.empty:
            candidates = [argument for argument in arguments if subclass(argument, parameter.annotation)]
        else:
            candidates = [argument for argument in arguments if argument.parameter == parameter.name]

        if len(candidates) > 1:
            candidates = [argument for argument in candidates if argument.index == position]

        if candidates:
            bindings.append(Binding(parameter, candidates[0]))
        elif parameter.default is not Parameter.empty:
            bindings.append(Binding(parameter, Unset))
        else:
            logger.debug("parameter %r of %r has no matching argument", parameter.name, metadata["name"])
            bindings.append(Binding(parameter, None))


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names.
    """
    if parent is None:
        return
    if parent._children.setdefault(self.name, self) is self:
        return
    raise ValueError(f"{type(self).__typename__} subcommand name {self.name!r} is already in use")


def _set_hook(self, slot, hook, decorator):
    if not callable(hook):
        raise TypeError(f"{type(self).__typename__} {decorator} hook must be callable")
    if getattr(self, slot) is not None:
        raise TypeError(f"{type(self).__typename__} {decorator} hook cannot be overridden")
    setattr(self, slot, hook)
    return hook


@injectable
class Command(metaclass=CommandType):
    """
    Descriptor of one invocable command.

    Responsibilities
    - Introspection: name, descr, arguments, bindings, children... are read-only properties.
    - Composition: one level of parent/child hierarchy for subcommands.
    - Invocation: bind() turns parsed values into the handler's call arguments;
      calling the command calls the handler directly.
    - Hooks: before/after/fallback decorators; subcommands inherit them.

    Lifecycle
    - Built once, at declaration time; immutable afterwards except for adding
      children and setting each hook once. Register it with an engine after
      the tree is complete.
    """

    __introspectable__ = (
        "handler",
        "name",
        "descr",
        "arguments",
        "bindings",
        "named",
        "parent",
        "children",
    )

    __displayable__ = (
        "qualname",
        "descr",
        "syntax",
        "arguments",
        "named",
        "children",
    )

    @property
    def path(self):
        """
        Commands from the root to this one.
        """
        return (self.parent, self) if self.parent else (self,)

    @property
    def root(self):
        return self.path[0]

    @property
    def qualname(self):
        """
        Space-joined path used as the registry key, e.g. "test echo".
        """
        return " ".join(command.name for command in self.path)

    @property
    def syntax(self):
        """
        The declared syntax override, else the generated one (e.g. "<text> [number]").
        """
        return self._syntax if self._syntax is not None else generate(self)

    @property
    def usage(self):
        return usage(self)

    @property
    def prehook(self):
        return self._prehook or getattr(self.parent, "prehook", None)

    @property
    def posthook(self):
        return self._posthook or getattr(self.parent, "posthook", None)

    @property
    def errorhook(self):
        return self._errorhook or getattr(self.parent, "errorhook", None)

    def __new__(
            cls,
            handler=Unset,
            /,
            parent=Unset,
            name=Unset,
            descr=Unset,
            syntax=Unset,
            arguments=Unset,
            *,
            named=False,
    ):
        """
        Build a command descriptor.

        Parameters
        - handler: Callable | Unset
          The callable to run. Without one the command is a group: it can host
          subcommands but is never registered for lookup.
        - parent: Command | Unset
          Parent command; only top-level commands can be parents.
        - name: str | Unset
          Defaults to the handler's __name__ (underscores become dashes).
        - descr: str | Unset
          Defaults to the handler's docstring.
        - syntax: str | Unset
          Overrides the generated syntax string.
        - arguments: Iterable[Argument] | Unset
          Explicit argument list; by default collected from the handler defaults.
        - named: bool
          Parse "-x value --long value" flags instead of positional tokens.

        Raises
        - TypeError/ValueError on invalid metadata, a second greedy argument,
          duplicated flags, nesting deeper than one level or a taken name.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        elif parent and parent.parent:
            raise ValueError(f"{cls.__typename__} subcommands cannot be nested more than one level deep")

        metadata = {
            "handler": handler,
            "name": name,
            "descr": descr,
            "syntax": syntax,
            "arguments": arguments,
            "named": named,
            "parent": parent,
            "children": {},
        }
        _process_strings(cls, metadata)
        _process_arguments(cls, metadata)
        _process_bindings(cls, metadata)

        self = super().__new__(cls)
        self._prehook = None
        self._posthook = None
        self._errorhook = None
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        _attach_to_parent(self, self._parent)
        logger.debug("built command %r with %d argument(s)", self.qualname, len(self._arguments))
        return self

    def __call__(self, *args, **kwargs):
        if self._handler is None:
            raise TypeError(f"{type(self).__typename__} {self.qualname!r} has no handler")
        return self._handler(*args, **kwargs)

    def bind(self, values, /):
        """
        Turn parsed values (Argument -> value) into handler call arguments.

        Returns
        - (args, kwargs) ready for self.handler(*args, **kwargs).

        Raises
        - InvalidArgumentsError: a parameter has no matching argument, or a null
          value would be bound to a non-nullable primitive parameter.
        """
        args, kwargs = [], {}
        for parameter, argument in self._bindings:
            if argument is None:
                raise InvalidArgumentsError(
                    f"no argument of command {self.qualname!r} matches parameter {parameter.name!r}",
                    parameter=parameter.name,
                )
            if argument is Unset:
                value = parameter.default
            else:
                value = values.get(argument)
                if value is None and (argument.primitive or parameter.annotation in PRIMITIVES):
                    raise InvalidArgumentsError(
                        f"parameter {parameter.name!r} of command {self.qualname!r} cannot be null",
                        parameter=parameter.name,
                    )
            if parameter.kind is Parameter.KEYWORD_ONLY:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return args, kwargs

    def before(self, hook, /):
        """
        Register the pre-hook, called with the context before the handler.

        Can be set only once per command; subcommands inherit it.
        """
        return _set_hook(self, "_prehook", hook, "before")

    def after(self, hook, /):
        """
        Register the post-hook, called with the context after a normal completion.
        """
        return _set_hook(self, "_posthook", hook, "after")

    def fallback(self, hook, /):
        """
        Register the error hook, called with (context, exception) on every fault.

        Rules
        - Must be callable.
        - Can be set only once per command (cannot be overridden).
        - A fault raised by the hook itself is reported and discarded.
        """
        return _set_hook(self, "_errorhook", hook, "fallback")

    def command(self, handler=Unset, /, *args, **kwargs):
        """
        Create a subcommand under this command (directly or as a decorator).
        """
        return command(handler, self, *args, **kwargs)

    def walk(self):
        """
        Yield this command and its subcommands, parents first.
        """
        yield self
        for child in self._children.values():
            yield from child.walk()


def command(handler=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:     cmd = command(func, name="x")
    - Decorator:  @command(name="x")
                  def func(...): ...
    - Bare:       @command
                  def func(...): ...

    Parameters
    - handler: Unset | Callable
    - *args, **kwargs: forwarded to Command (parent, name, descr, syntax, arguments, named).
    """
    @rename("command")
    def wrapper(handler, /):
        if not callable(handler) or isinstance(handler, Command):
            raise TypeError("@command() must be applied to a callable")
        return Command(handler, *args, **kwargs)

    return wrapper(handler) if handler is not Unset else wrapper


def group(name, /, descr=Unset, *, named=False):
    """
    Create a handlerless command that only hosts subcommands.
    """
    return Command(Unset, Unset, name, descr, named=named)


def collect(module, /):
    """
    Top-level commands defined in a module's globals, in definition order.
    """
    return [
        object for object in vars(module).values()
        if isinstance(object, Command) and not object.parent
    ]


__all__ = (
    "Binding",
    "Command",
    "command",
    "group",
    "collect",
)

del CommandType
