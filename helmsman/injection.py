"""
Injection resolvers: values for injectable arguments, supplied without consuming input.

Overview
- Injector: a table mapping a type to resolver(argument, context) -> value.
  • register(type, resolver) / @injector.register(type)
  • resolve(argument, context): first resolver found along the MRO of the
    argument type (“T | None” reduced to T); None when nothing applies.

Builtin resolvers
- Context -> the context itself.
- Command -> the command being executed.
The engine adds Engine -> the owning engine for its own injector.
"""
import builtins
import logging

from .commands import Command
from .context import Context
from .utils import Unset, rename, unwrap

logger = logging.getLogger(__name__)


class Injector:
    """
    Mapping of injectable type -> resolver(argument, context).
    """

    def __init__(self):
        self._resolvers = {
            Context: lambda argument, context: context,
            Command: lambda argument, context: context.command,
        }

    def register(self, type, resolver=Unset, /):
        """
        Register a resolver for a type; usable directly or as a decorator.

        Resolvers are called with (argument, context) and return the value to inject.
        """
        if not isinstance(type, builtins.type):
            raise TypeError("register() first argument must be a type")

        @rename("register")
        def wrapper(resolver, /):
            if not callable(resolver):
                raise TypeError("register() resolver must be callable")
            logger.debug("registered resolver %r for %s", resolver, type.__qualname__)
            self._resolvers[type] = resolver
            return resolver

        return wrapper(resolver) if resolver is not Unset else wrapper

    def lookup(self, type, /):
        for base in getattr(unwrap(type), "__mro__", ()):
            if base in self._resolvers:
                return self._resolvers[base]
        return None

    def resolve(self, argument, context, /):
        """
        Return the value to inject for an argument, or None when no resolver applies.
        """
        if (resolver := self.lookup(argument.type)) is None:
            logger.debug("no resolver for injectable argument %s", argument.label)
            return None
        return resolver(argument, context)

    def __contains__(self, type):
        return self.lookup(type) is not None


__all__ = (
    "Injector",
)
