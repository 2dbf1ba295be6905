"""
Helmsman results: what a handler hands back, and how the pipeline reads it.

Overview
- Result: explicit outcome object (success, or failure with an optional message).
- Outcome: closed variant produced by normalize() with exactly three cases
  • Immediate(result): the handler returned a Result.
  • Deferred(future): the handler returned a concurrent.futures.Future, or an
    awaitable that was scheduled on an event loop; the pipeline continues when
    it settles.
  • Implicit(): anything else (including None) counts as success.

Quick example:
    >>> normalize(Result.error("nope"))
    Immediate(result=Result(successful=False, message='nope'))
    >>> normalize(42)
    Implicit()
"""
import inspect
from concurrent.futures import Future
from dataclasses import dataclass
from typing import final


@final
class Result:
    """
    Explicit handler outcome.

    Use the constructors rather than the class directly:
    - Result.success()
    - Result.error(message=None)
    """
    __slots__ = ("_successful", "_message")

    def __init__(self, successful, message=None, /):
        if not isinstance(successful, bool):
            raise TypeError("result 'successful' must be a boolean")
        if message is not None and not isinstance(message, str):
            raise TypeError("result 'message' must be a string")
        self._successful = successful
        self._message = message

    @classmethod
    def success(cls):
        return cls(True)

    @classmethod
    def error(cls, message=None, /):
        return cls(False, message)

    @property
    def successful(self):
        return self._successful

    @property
    def message(self):
        return self._message

    def __eq__(self, other):
        if not isinstance(other, Result):
            return NotImplemented
        return (self._successful, self._message) == (other._successful, other._message)

    def __hash__(self):
        return hash((self._successful, self._message))

    def __repr__(self):
        return f"Result(successful={self._successful!r}, message={self._message!r})"


class Outcome:
    """base of the closed normalize() variant; see Immediate, Deferred and Implicit."""
    __slots__ = ()

    def __init_subclass__(cls, **options):
        if cls.__name__ not in ("Immediate", "Deferred", "Implicit") or cls.__module__ != __name__:
            raise TypeError("type 'Outcome' is not an acceptable base type")
        super().__init_subclass__(**options)


@final
@dataclass(frozen=True, slots=True)
class Immediate(Outcome):
    result: Result


@final
@dataclass(frozen=True, slots=True)
class Deferred(Outcome):
    future: Future


@final
@dataclass(frozen=True, slots=True)
class Implicit(Outcome):
    @property
    def result(self):
        return Result.success()


def settle(future, /):
    """
    Read a settled future as a Result.

    - A Result value is used as-is; any other value counts as success.
    - A fault (or cancellation) is raised to the caller.
    """
    value = future.result()
    return value if isinstance(value, Result) else Result.success()


def normalize(value, /, schedule=None):
    """
    Classify a handler return value into one of the three outcome cases.

    Parameters
    - value: whatever the handler returned.
    - schedule: callable(awaitable) -> concurrent.futures.Future, used for
      coroutines and other awaitables. Without it, awaitables are rejected.

    Raises
    - TypeError: an awaitable was returned but no scheduler is available.
    """
    if isinstance(value, Result):
        return Immediate(value)
    if isinstance(value, Future):
        return Deferred(value)
    if inspect.isawaitable(value):
        if schedule is None:
            if inspect.iscoroutine(value):
                value.close()
            raise TypeError("awaitable results require an event loop to run on")
        return Deferred(schedule(value))
    return Implicit()


__all__ = (
    "Result",
    "Outcome",
    "Immediate",
    "Deferred",
    "Implicit",
    "normalize",
    "settle",
)
