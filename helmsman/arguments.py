r"""
Helmsman argument descriptors and type markers.

Overview
- Argument: immutable metadata for one handler parameter (short/long flag names,
  declared type, mandatory/injectable/greedy flags, positional index).
- Type markers
  • @greedy: values of this type swallow every remaining positional token.
  • @injectable: values of this type are supplied by the injector, never parsed.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    stored fields via read-only properties declared in __introspectable__.

Derived rules (computed on read, never stored)
- required: the mandatory flag, or a non-nullable primitive scalar type
  (bool, int, float, complex). Declare “int | None” to make an int optional.
- greedy: a textual type (str or subclass), the greedy flag, or a @greedy type.
- injectable: the injectable flag, or an @injectable type.
- label: "--longname", else "name", else the parameter name, else "arg<index>".

Metadata (sanitized on construction)
- name / longname: Unset | str, a flag name without its leading dashes.
- type: a class or a “T | None” union of a class.
- descr: Unset | str | Text (short help), non-empty when provided.
- parameter: Unset | str, the handler parameter this argument feeds.
- index: Unset | int (>= 0), the declared position.

Quick example:
    >>> from helmsman.arguments import Argument
    >>> text = Argument("t", "text", type=str)
    >>> count = Argument("n", "number", type=int | None, mandatory=False)
    >>> count.required, text.greedy
    (False, True)
"""
import builtins
import functools
import operator
import re

from rich.text import Text

from .utils import *

# Scalars that cannot represent absence unless declared as “T | None”.
PRIMITIVES = frozenset({bool, int, float, complex})


class ArgumentType(type):
    """
    Metaclass that turns argument classes into introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
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
            - argument(name='t', longname='text', type=<class 'str'>, ...)
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


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: validate the short/long flag names and the parameter name.

    Rules
    - Each of 'name', 'longname' and 'parameter' is Unset or a string.
    - Strings are trimmed and must be non-empty.
    - Flag names must not carry their dashes ("t", "text", not "-t", "--text")
      and must match r"[^\W_][\w-]*".

    Raises
    - TypeError: non-string values.
    - ValueError: empty or malformed names.
    """
    for key in ("name", "longname", "parameter"):
        if not isinstance(value := metadata[key], str | Unset):
            raise TypeError(f"{cls.__typename__} {key!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {key!r} cannot be empty")
        elif isinstance(value, str) and key != "parameter" and not re.fullmatch(r"[^\W_][\w-]*", value):
            raise ValueError(f"{cls.__typename__} {key!r} must be a flag name without leading dashes")
        metadata[key] = value


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate 'type', 'descr', 'index' and the boolean flags.

    - type: a class, or a union of a class with None (the nullable counterpart).
    - descr: Unset | str | Text, non-empty after trimming; Unset becomes None.
    - index: Unset | int >= 0.
    - mandatory/injectable/greedy: booleans.
    """
    if not isinstance(unwrap(metadata["type"]), builtins.type):
        raise TypeError(f"{cls.__typename__} 'type' must be a class or an optional class")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(index := metadata["index"], int | Unset) or isinstance(index, bool):
        raise TypeError(f"{cls.__typename__} 'index' must be an integer")
    elif isinstance(index, int) and index < 0:
        raise ValueError(f"{cls.__typename__} 'index' must be a non-negative integer")

    for key in ("mandatory", "injectable", "greedy"):
        if not isinstance(metadata[key], bool):
            raise TypeError(f"{cls.__typename__} {key!r} must be a boolean")


class Argument(metaclass=ArgumentType):
    """
    Immutable metadata for one handler parameter.

    Arguments are usually declared as parameter defaults and completed by the
    owning command (which stamps 'parameter' and 'index'):

        def echo(text=Argument(type=str), count=Argument(type=int | None, mandatory=False), /): ...

    Properties
    - The names listed in __introspectable__ are read-only mirrors of the
      sanitized metadata; required/greedy/injectable/label are derived.
    """

    __introspectable__ = (
        "name",
        "longname",
        "parameter",
        "descr",
        "type",
        "index",
        "mandatory",
    )

    __displayable__ = (
        "name",
        "longname",
        "parameter",
        "type",
        "index",
        "required",
        "greedy",
        "injectable",
    )

    def __new__(
            cls,
            name=Unset,
            longname=Unset,
            /,
            type=str,
            descr=Unset,
            *,
            mandatory=True,
            injectable=False,
            greedy=False,
            parameter=Unset,
            index=Unset,
    ):
        metadata = {
            "name": name,
            "longname": longname,
            "parameter": parameter,
            "type": type,
            "descr": descr,
            "index": index,
            "mandatory": mandatory,
            "injectable": injectable,
            "greedy": greedy,
        }
        _sanitize_names(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def required(self):
        """
        Effectively mandatory: must be supplied because its type cannot represent absence.
        """
        return self._mandatory or self.primitive

    @property
    def primitive(self):
        """
        Declared as a non-nullable primitive scalar (bool, int, float, complex).
        """
        return self._type in PRIMITIVES

    @property
    def greedy(self):
        """
        Whether this argument swallows every remaining positional token.
        """
        target = unwrap(self._type)
        return (
            self._greedy
            or getattr(target, "__greedy__", False)
            or isinstance(target, builtins.type) and issubclass(target, str)
        )

    @property
    def explicit(self):
        """
        Greedy by declaration (flag or @greedy type) rather than by being textual.
        """
        return self._greedy or getattr(unwrap(self._type), "__greedy__", False)

    @property
    def injectable(self):
        return self._injectable or getattr(unwrap(self._type), "__injectable__", False)

    @property
    def label(self):
        if self._longname:
            return "--" + self._longname
        if self._name:
            return self._name
        if self._parameter:
            return self._parameter
        return f"arg{coalesce(self._index, 0)}"

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {
            "type": self._type,
            "descr": self._descr if self._descr is not None else Unset,
            "mandatory": self._mandatory,
            "injectable": self._injectable,
            "greedy": self._greedy,
            "parameter": self._parameter,
            "index": self._index,
        } | overrides
        return type(self)(
            metadata.pop("name", self._name),
            metadata.pop("longname", self._longname),
            **metadata,
        )


@rename("greedy")
def greedy(cls, /):
    """
    Class decorator: arguments of this type consume every remaining positional token.
    """
    if not isinstance(cls, type):
        raise TypeError("@greedy must be applied to a class")
    cls.__greedy__ = True
    return cls


@rename("injectable")
def injectable(cls, /):
    """
    Class decorator: arguments of this type are resolved by the injector instead of parsed.
    """
    if not isinstance(cls, type):
        raise TypeError("@injectable must be applied to a class")
    cls.__injectable__ = True
    return cls


__all__ = (
    "Argument",
    "greedy",
    "injectable",
)

del ArgumentType
