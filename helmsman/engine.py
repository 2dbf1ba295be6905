"""
Helmsman engine: the reader loop that turns input lines into command executions.

What this module provides
- Engine: owns a registry, a type-parser table, an injector, a pipeline and a
  reader thread.
  • start()/stop(): explicit lifecycle; starting a running engine or stopping a
    stopped one is a RuntimeError.
  • dispatch(line): resolve one line and hand it to the work strategy.
  • register(*commands), command(...), include(pattern): populate the registry.
- console(...): an engine reading from and writing to the terminal.

Reader loop
- one blocking read per iteration; blank lines are skipped; InputExhausted ends
  the loop quietly; any other read fault is reported ("Failed to read input!")
  and the loop continues.
- lines are resolved in arrival order; completions follow the work strategy.

Work strategies (executor=)
- None: inline, the reader waits for the pipeline (completions strictly ordered).
- a concurrent.futures.Executor: each context is submit()ted to it.
- any callable: called with a zero-argument callable that runs the pipeline.

Awaitable handler results run on the engine's event loop: the one given as
loop=, or a private loop on a daemon thread, started on first use; stop() lets
it wind down once the results still pending on it have settled.

Quick start
    from helmsman import Argument, command, console

    engine = console()

    @engine.command(name="greet")
    def greet(name=Argument(type=str), /):
        print("hello", name)

    engine.start()
    engine.join()
"""
import asyncio
import importlib
import logging
import threading

from .commands import collect, command
from .context import Context
from .faults import FaultCode, InputExhausted, UnknownCommandError
from .help import build as build_help
from .injection import Injector
from .parsers import Parsers
from .pipeline import Pipeline
from .registry import Registry
from .streams import ConsoleInput, ConsoleOutput, Input, Output
from .utils import Unset, coalesce, mglob, rename

logger = logging.getLogger(__name__)


async def _await(awaitable):
    return await awaitable


async def _drain():
    current = asyncio.current_task()
    while pending := {task for task in asyncio.all_tasks() if task is not current}:
        await asyncio.wait(pending)
    asyncio.get_running_loop().stop()


def _serve(loop, /):
    try:
        loop.run_forever()
    finally:
        loop.close()


class Engine:
    """
    Command-dispatch engine bound to one line source and one output sink.

    Parameters
    - input: Input, the line source read by the reader thread.
    - output: Output, the sink for every report.
    - executor: None | concurrent.futures.Executor | Callable, the work strategy.
    - parsers: Parsers | Unset, the type-parser table (default: builtins).
    - injector: Injector | Unset, the injection resolvers (default: builtins).
    - loop: asyncio.AbstractEventLoop | Unset, where awaitable results run.
    - help: bool, register the builtin "help" command.
    """

    def __init__(
            self,
            input,
            output,
            /,
            *,
            executor=None,
            parsers=Unset,
            injector=Unset,
            loop=Unset,
            help=True,
    ):
        if not isinstance(input, Input):
            raise TypeError("engine 'input' must be an input")
        if not isinstance(output, Output):
            raise TypeError("engine 'output' must be an output")
        if executor is not None and not hasattr(executor, "submit") and not callable(executor):
            raise TypeError("engine 'executor' must be an executor or a callable")
        if not isinstance(parsers := coalesce(parsers, Parsers()), Parsers):
            raise TypeError("engine 'parsers' must be a parser table")
        if not isinstance(injector := coalesce(injector, Injector()), Injector):
            raise TypeError("engine 'injector' must be an injector")
        if loop is not Unset and not isinstance(loop, asyncio.AbstractEventLoop):
            raise TypeError("engine 'loop' must be an event loop")

        self.input = input
        self.output = output
        self.executor = executor
        self.parsers = parsers
        self.injector = injector
        self.registry = Registry()
        self.pipeline = Pipeline(output, parsers, injector, self._schedule)

        self.injector.register(Engine, lambda argument, context: context.engine)

        self._loop = coalesce(loop, None)
        self._owned = None
        self._reader = None
        self._running = False
        self._lock = threading.Lock()

        if help:
            self.register(build_help())

    @property
    def running(self):
        return self._running

    def register(self, *commands):
        """
        Register commands (and their subcommands); see Registry.register.
        """
        self.registry.register(*commands)
        return commands[0] if len(commands) == 1 else commands

    def command(self, handler=Unset, /, *args, **kwargs):
        """
        Create a top-level command and register it (directly or as a decorator).

        Subcommands added to it later must be registered again.
        """
        @rename("command")
        def wrapper(handler, /):
            return self.register(command(handler, *args, **kwargs))

        return wrapper(handler) if handler is not Unset else wrapper

    def include(self, source, /):
        """
        Import the modules matching a module glob and register their top-level commands.

        Raises TypeError when a matched module cannot be imported.
        """
        if not isinstance(source, str):
            raise TypeError("include() argument must be a string")

        included = []
        for name in mglob(source):
            try:
                module = importlib.import_module(name)
            except ImportError:
                raise TypeError(f"unable to import module {name!r}") from None
            for found in collect(module):
                self.registry.register(found)
                included.append(found)
        logger.debug("included %d command(s) from %r", len(included), source)
        return included

    def start(self):
        """
        Start the reader thread.
        """
        with self._lock:
            if self._running:
                raise RuntimeError("engine is already running")
            self._running = True
            self._reader = threading.Thread(target=self._read, name="helmsman-reader", daemon=True)
            self._reader.start()
        logger.debug("engine started")

    def stop(self):
        """
        Stop acquiring input; in-flight executions are not cancelled.

        The engine stays running (lifecycle-wise) after its input is exhausted,
        until stop() is called.
        """
        with self._lock:
            if not self._running:
                raise RuntimeError("engine is not running")
            self._running = False
            owned, self._owned = self._owned, None
        self.input.interrupt()
        if owned is not None:
            loop, _ = owned
            # the loop winds down (and closes) once its pending tasks settled
            asyncio.run_coroutine_threadsafe(_drain(), loop)
        logger.debug("engine stopped")

    def join(self, timeout=None):
        """
        Wait for the reader thread to end; returns False on timeout.
        """
        if (reader := self._reader) is None:
            return True
        reader.join(timeout)
        return not reader.is_alive()

    def dispatch(self, line, /):
        """
        Resolve one line and hand it to the work strategy.

        Returns
        - the Context of the execution, or None when no command matched.
        """
        command, remainder = self.registry.resolve(line)
        if command is None:
            fault = UnknownCommandError(f"Unknown command {line.strip()!r}")
            logger.debug("[%s] %s", FaultCode.UNKNOWN_COMMAND.normalize(), fault)
            self.output.error(str(fault), fault)
            return None

        context = Context(command, remainder, engine=self)
        logger.debug("dispatching %r with %r", command.qualname, remainder)

        task = lambda: self.pipeline.execute(context)
        if self.executor is None:
            task()
        elif hasattr(self.executor, "submit"):
            self.executor.submit(task)
        else:
            self.executor(task)
        return context

    def _read(self):
        while self._running:
            try:
                line = self.input.read()
            except InputExhausted:
                logger.debug("input exhausted")
                break
            except Exception as fault:
                logger.warning("[%s] read failure %r", FaultCode.UNREADABLE_INPUT.normalize(), fault)
                self.output.error("Failed to read input!", fault)
                continue

            if not self._running:
                break
            if line is None or not line.strip():
                continue

            try:
                self.dispatch(line)
            except Exception as fault:
                logger.exception("dispatch of %r failed", line)
                self.output.error(f"Failed to dispatch {line.strip()!r}", fault)
        logger.debug("reader stopped")

    def _schedule(self, awaitable, /):
        return asyncio.run_coroutine_threadsafe(_await(awaitable), self._event_loop())

    def _event_loop(self):
        if self._loop is not None:
            return self._loop
        with self._lock:
            if self._owned is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=_serve, args=(loop,), name="helmsman-loop", daemon=True)
                thread.start()
                self._owned = loop, thread
            return self._owned[0]


def console(prompt="> ", /, **options):
    """
    Engine reading from the terminal prompt and printing through rich.

    Options
    - fancy, colorful: forwarded to ConsoleOutput.
    - executor, parsers, injector, loop, help: forwarded to Engine.
    """
    output = ConsoleOutput(fancy=options.pop("fancy", False), colorful=options.pop("colorful", True))
    return Engine(ConsoleInput(prompt), output, **options)


__all__ = (
    "Engine",
    "console",
)
