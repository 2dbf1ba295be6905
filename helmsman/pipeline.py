"""
Execution pipeline: runs one resolved context to completion.

States (see Stage)
    RESOLVED → PARSED → PREHOOK → INVOKED → NORMALIZED → POSTHOOK → COMPLETE
    with FAILED reachable from any of them.

Transitions
- RESOLVED → PARSED: the parsing engine fills context.values; a parse fault fails
  the context before any hook or the handler runs, and so does any other fault
  raised by a registered parser or injection resolver.
- PARSED → PREHOOK: the pre-hook (if any) sees the context; a fault skips the
  handler and the post-hook.
- PREHOOK → INVOKED: bindings turn values into call arguments (invalid-arguments
  fault otherwise) and the handler runs.
- INVOKED → NORMALIZED: the return value is normalized (results.normalize); a
  deferred outcome suspends the pipeline until its future settles, possibly on
  another thread.
- NORMALIZED → POSTHOOK → COMPLETE: a non-success result is reported (it is an
  outcome, not a fault, and never reaches the error hook); then the post-hook runs.

Failure routing
- every fault is reported to the output sink first, then offered to the error
  hook as hook(context, exception); a fault raised by the error hook is reported
  and discarded.
"""
import asyncio
import functools
import logging

from .context import Stage
from .faults import CommandException, FaultCode
from .parsing import parse
from .results import Deferred, normalize, settle

logger = logging.getLogger(__name__)

NO_MESSAGE = "Command execution failed (however, no message was given.)"


class Pipeline:
    """
    Stateless runner shared by every invocation of one engine.

    Parameters
    - output: sink with info(text) and error(text, cause=None).
    - parsers: the type-parser table.
    - injector: the injection-resolver table.
    - schedule: callable(awaitable) -> concurrent.futures.Future, used for
      awaitable handler results (None rejects them as handler faults).
    """

    def __init__(self, output, parsers, injector, /, schedule=None):
        self.output = output
        self.parsers = parsers
        self.injector = injector
        self.schedule = schedule

    def execute(self, context, /):
        """
        Run the context through every stage; returns the same context.

        The context is done (context.wait()) once it reached COMPLETE or FAILED,
        which may happen later for deferred results.
        """
        command = context.command
        logger.debug("executing %r with %r", command.qualname, context.unparsed)

        try:
            context.values = parse(command, context.unparsed, context, self.parsers, self.injector)
        except CommandException as fault:
            return self._fail(context, fault, fault.code, str(fault))
        except Exception as fault:
            return self._fail(context, fault, FaultCode.PARSING_FAILURE, f"An unexpected error occurred while parsing arguments of {command.qualname!r}: {fault}")
        context.stage = Stage.PARSED

        if (prehook := command.prehook) is not None:
            try:
                prehook(context)
            except Exception as fault:
                return self._fail(context, fault, FaultCode.PREHOOK_FAILURE, f"Pre-hook of command {command.qualname!r} failed: {fault}")
        context.stage = Stage.PREHOOK

        try:
            args, kwargs = command.bind(context.values)
        except CommandException as fault:
            return self._fail(context, fault, FaultCode.INVALID_ARGUMENTS, str(fault))
        except Exception as fault:
            return self._fail(context, fault, FaultCode.INVALID_ARGUMENTS, f"Arguments of {command.qualname!r} could not be bound: {fault}")

        try:
            value = command(*args, **kwargs)
        except Exception as fault:
            return self._fail(context, fault, FaultCode.HANDLER_FAILURE, f"Command {command.qualname!r} failed: {fault}")
        context.stage = Stage.INVOKED

        try:
            outcome = normalize(value, self.schedule)
        except TypeError as fault:
            return self._fail(context, fault, FaultCode.HANDLER_FAILURE, f"Command {command.qualname!r} failed: {fault}")

        if isinstance(outcome, Deferred):
            logger.debug("command %r deferred its result", command.qualname)
            outcome.future.add_done_callback(functools.partial(self._resume, context))
            return context

        self._complete(context, outcome.result)
        return context

    def _resume(self, context, future, /):
        try:
            result = settle(future)
        except (Exception, asyncio.CancelledError) as fault:
            self._fail(
                context,
                fault,
                FaultCode.DEFERRED_FAILURE,
                f"Asynchronous execution of command {context.command.qualname!r} failed: {fault!r}",
            )
            return
        self._complete(context, result)

    def _complete(self, context, result, /):
        command = context.command
        context.result = result
        context.stage = Stage.NORMALIZED

        if not result.successful:
            logger.debug("command %r returned an unsuccessful result", command.qualname)
            self._report(FaultCode.UNSUCCESSFUL_RESULT, result.message or NO_MESSAGE, None)

        if (posthook := command.posthook) is not None:
            try:
                posthook(context)
            except Exception as fault:
                return self._fail(context, fault, FaultCode.POSTHOOK_FAILURE, f"Post-hook of command {command.qualname!r} failed: {fault}")
            context.stage = Stage.POSTHOOK

        context._finish(Stage.COMPLETE)
        logger.debug("command %r completed", command.qualname)

    def _fail(self, context, fault, code, text, /):
        command = context.command
        context.exception = fault
        context.stage = Stage.FAILED
        self._report(code, text, fault)

        if (errorhook := command.errorhook) is not None:
            try:
                errorhook(context, fault)
            except Exception as secondary:
                logger.warning("error hook of %r failed: %r", command.qualname, secondary)
                self._report(FaultCode.ERRORHOOK_FAILURE, f"Error hook of command {command.qualname!r} failed: {secondary}", secondary)

        context._finish(Stage.FAILED)
        return context

    def _report(self, code, text, cause, /):
        logger.debug("[%s] %s", code.normalize() if isinstance(code, FaultCode) else "-", text)
        try:
            self.output.error(text, cause)
        except Exception:
            logger.exception("output sink failed to report %r", text)


__all__ = (
    "Pipeline",
    "NO_MESSAGE",
)
