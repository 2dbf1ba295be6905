"""
Command registry: flat table of qualified name -> command, with longest-match lookup.

Ordering
- keys iterate by descending length, then lexicographically ascending, so that
  longer (more specific) names always come first and ties are deterministic.

Lookup
- lookup(line) tries the whitespace-delimited prefixes of the line from the
  full line down to its first word and returns the first registered one.
  "test two-level-deep foo" therefore resolves to "test two-level-deep" even
  when "test" is registered as well.
- a miss returns None; it is an ordinary outcome, not a fault.

Concurrency
- no internal locking: register commands before dispatch starts, or
  synchronize registration and dispatch externally.
"""
import bisect
import logging
import re
from collections.abc import Mapping

from .commands import Command

logger = logging.getLogger(__name__)


def _order(name):
    return -len(name), name


class Registry(Mapping):
    """
    Read-only mapping of qualified name -> Command; mutate via register/unregister.
    """

    def __init__(self, *commands):
        self._commands = {}
        self._names = []
        self._roots = {}
        self.register(*commands)

    def register(self, *commands):
        """
        Insert or replace every command (and its subcommands) that has a handler.

        Commands are keyed by qualified name; registering a name again replaces
        the previous entry, so the size never grows on re-registration.
        """
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError("register() arguments must be commands")
            self._roots[command.root.qualname] = command.root
            for node in command.walk():
                if node.handler is None:
                    continue
                if (name := node.qualname) not in self._commands:
                    bisect.insort(self._names, name, key=_order)
                else:
                    logger.debug("replacing command %r", name)
                self._commands[name] = node
                logger.debug("registered command %r", name)

    def unregister(self, name, /):
        """
        Remove one qualified name; KeyError when it is not registered.

        The top-level command stops being listed in roots once neither it nor
        any of its subcommands is registered.
        """
        root = self._commands.pop(name).root
        self._names.remove(name)
        if not any(node.qualname in self._commands for node in root.walk()):
            self._roots.pop(root.qualname, None)

    def lookup(self, line, /):
        """
        Return the command registered under the longest word prefix of line, or None.
        """
        return self.resolve(line)[0]

    def resolve(self, line, /):
        """
        Split a line into (command, remainder).

        The remainder is the text following the matched words, trimmed; on a
        miss the result is (None, the trimmed line).
        """
        if not isinstance(line, str):
            raise TypeError("resolve() argument must be a string")
        words = line.split()
        for length in range(len(words), 0, -1):
            if (command := self._commands.get(" ".join(words[:length]))) is not None:
                head = re.match(r"\s*" + r"\s+".join(map(re.escape, words[:length])), line)
                return command, line[head.end():].strip()
        return None, line.strip()

    @property
    def roots(self):
        """
        Top-level commands, in registration order.
        """
        return list(self._roots.values())

    def __getitem__(self, name):
        return self._commands[name]

    def __iter__(self):
        return iter(list(self._names))

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return f"registry({list(self._names)!r})"


__all__ = (
    "Registry",
)
