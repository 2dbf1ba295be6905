"""
Line sources and output sinks used by the engine.

Line sources (Input)
- read() blocks until the next line is available and returns it; it raises
  InputExhausted once no more input will ever come. Any other exception is a
  read fault: the reader loop reports it and keeps going.
- interrupt() wakes a blocked read() when the source supports it.
- Implementations
  • ConsoleInput: interactive prompt through a rich Console.
  • StreamInput: any text stream (a file, sys.stdin, io.StringIO).
  • QueueInput: a thread-safe mailbox fed with write(line) and closed with close().

Output sinks (Output)
- info(text) and error(text, cause=None); the engine never inspects what a
  sink does with them.
- Implementations
  • ConsoleOutput: rich console rendering; faults use their own rich panel,
    other causes a rich traceback.
  • RecordingOutput: keeps every message, for tests and embedding.
"""
import queue
import sys
import threading
from abc import ABC, abstractmethod
from collections import defaultdict

from rich.console import Console
from rich.text import Text
from rich.traceback import Traceback

from .faults import CommandException, InputExhausted
from .utils import Unset, coalesce

_CLOSED = object()


class Input(ABC):
    """
    Blocking source of input lines.
    """

    @abstractmethod
    def read(self):
        """
        Return the next line (without its line terminator).

        Raises InputExhausted when the source is exhausted.
        """

    def interrupt(self):
        """
        Wake a blocked read(), if the source supports it.
        """


class ConsoleInput(Input):
    """
    Interactive prompt; EOF (Ctrl-D) and Ctrl-C end the input.
    """

    def __init__(self, prompt="> ", /, console=Unset):
        self.prompt = prompt
        self.console = coalesce(console, Console())

    def read(self):
        try:
            return self.console.input(self.prompt)
        except (EOFError, KeyboardInterrupt):
            raise InputExhausted from None


class StreamInput(Input):
    """
    Lines of a text stream; the end of the stream ends the input.
    """

    def __init__(self, stream=Unset, /):
        self.stream = coalesce(stream, sys.stdin)

    def read(self):
        if not (line := self.stream.readline()):
            raise InputExhausted
        return line.rstrip("\r\n")


class QueueInput(Input):
    """
    Thread-safe mailbox: producers write() lines, the reader loop read()s them.

    close() makes every following read() raise InputExhausted once the lines
    already written have been consumed; interrupt() does the same.
    """

    def __init__(self, *lines):
        self._queue = queue.Queue()
        for line in lines:
            self.write(line)

    def write(self, line, /):
        if not isinstance(line, str):
            raise TypeError("write() argument must be a string")
        self._queue.put(line)

    def close(self):
        self._queue.put(_CLOSED)

    def interrupt(self):
        self.close()

    def read(self):
        if (line := self._queue.get()) is _CLOSED:
            # keep the mailbox closed for any later reader
            self._queue.put(_CLOSED)
            raise InputExhausted
        return line


class Output(ABC):
    """
    Sink for the engine's messages.
    """

    @abstractmethod
    def info(self, text, /):
        """Report an informational message (a string or any rich renderable)."""

    @abstractmethod
    def error(self, text, cause=None, /):
        """Report an error message, with the exception that caused it if any."""


class ConsoleOutput(Output):
    """
    Rich console sink.

    Options
    - fancy: render faults inside panels.
    - colorful: apply the palette (overridable through __styles__ in __main__).
    - tracebacks: render non-fault causes as rich tracebacks (else one line).
    - console: the rich Console to print to (default: a new one); errors go to
      a stderr console unless an explicit console is given.
    """

    def __init__(self, *, fancy=False, colorful=True, tracebacks=True, console=Unset):
        self.fancy = fancy
        self.colorful = colorful
        self.tracebacks = tracebacks
        self.console = coalesce(console, Console())
        self.stderr = coalesce(console, Console(stderr=True))
        self._lock = threading.Lock()

    def _style(self, name):
        styles = defaultdict(str, {
            "info": "",
            "error": "bold #FF4DA6",
            "cause": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))
        return styles[name] if self.colorful else ""

    def info(self, text, /):
        with self._lock:
            if isinstance(text, str):
                self.console.print(Text(text, self._style("info")))
            else:
                self.console.print(text)

    def error(self, text, cause=None, /):
        with self._lock:
            if isinstance(cause, CommandException):
                self.stderr.print(cause.__replace__(fancy=self.fancy, colorful=self.colorful))
                return
            self.stderr.print(Text(text, self._style("error")))
            if cause is None:
                return
            if self.tracebacks and cause.__traceback__ is not None:
                self.stderr.print(Traceback.from_exception(type(cause), cause, cause.__traceback__))
            else:
                self.stderr.print(Text(f"{type(cause).__name__}: {cause}", self._style("cause")))


class RecordingOutput(Output):
    """
    Sink keeping every message in memory (thread-safe).

    Attributes
    - infos: list of info messages.
    - errors: list of (text, cause) pairs.
    """

    def __init__(self):
        self.infos = []
        self.errors = []
        self._lock = threading.Lock()

    def info(self, text, /):
        with self._lock:
            self.infos.append(text)

    def error(self, text, cause=None, /):
        with self._lock:
            self.errors.append((text, cause))

    @property
    def message(self):
        """The last error message, or None."""
        with self._lock:
            return self.errors[-1][0] if self.errors else None

    @property
    def exception(self):
        """The cause of the last error, or None."""
        with self._lock:
            return self.errors[-1][1] if self.errors else None

    def clear(self):
        with self._lock:
            self.infos.clear()
            self.errors.clear()


__all__ = (
    "Input",
    "ConsoleInput",
    "StreamInput",
    "QueueInput",
    "Output",
    "ConsoleOutput",
    "RecordingOutput",
)
