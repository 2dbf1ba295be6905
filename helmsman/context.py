"""
Execution context: the transient state of one command invocation.

A context is created by the engine for every resolved line, filled by the
pipeline as it moves through its stages, and discarded afterwards. It is never
shared across invocations. Hooks receive it as their first argument and
handlers can ask for it by declaring an argument of type Context.
"""
import threading
from enum import Enum

from .arguments import injectable


class Stage(Enum):
    """
    Pipeline states, in order; FAILED is reachable from any of them.
    """
    RESOLVED = "resolved"
    PARSED = "parsed"
    PREHOOK = "prehook"
    INVOKED = "invoked"
    NORMALIZED = "normalized"
    POSTHOOK = "posthook"
    COMPLETE = "complete"
    FAILED = "failed"


@injectable
class Context:
    """
    One in-flight invocation.

    Attributes
    - engine: the engine that dispatched the line (None when built by hand).
    - command: the resolved command descriptor.
    - unparsed: the raw argument text that followed the qualified name.
    - values: mapping of Argument -> resolved value, filled by the parser.
    - result: the normalized Result once the handler completed normally.
    - exception: the fault that moved the pipeline to FAILED, if any.
    - stage: the current Stage.
    """

    def __init__(self, command, unparsed="", /, engine=None):
        self.engine = engine
        self.command = command
        self.unparsed = unparsed
        self.values = {}
        self.result = None
        self.exception = None
        self.stage = Stage.RESOLVED
        self._done = threading.Event()

    @property
    def done(self):
        return self._done.is_set()

    @property
    def failed(self):
        return self.stage is Stage.FAILED

    def wait(self, timeout=None):
        """
        Block until the pipeline reached COMPLETE or FAILED.

        Returns True when it did, False when the timeout elapsed first.
        """
        return self._done.wait(timeout)

    def get(self, name, default=None, /):
        """
        Look up a parsed value by argument label, long name, short name or parameter name.
        """
        for argument, value in self.values.items():
            if name in (argument.label, argument.longname, argument.name, argument.parameter):
                return value
        return default

    def _finish(self, stage, /):
        self.stage = stage
        self._done.set()

    def __repr__(self):
        return f"context(command={self.command.qualname!r}, unparsed={self.unparsed!r}, stage={self.stage.value!r})"


__all__ = (
    "Context",
    "Stage",
)
