"""
Logging setup for applications embedding helmsman.

Every helmsman module logs through logging.getLogger(__name__); the package
logger only carries a NullHandler, so nothing is printed until the host
configures logging, either on its own or through configure().
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .utils import Unset, coalesce


def configure(level="INFO", /, *, console=Unset, tracebacks=True):
    """
    Attach a rich handler to the "helmsman" logger.

    Parameters
    - level: logging level name or number.
    - console: rich Console the records are printed to (default: stderr).
    - tracebacks: render exception records as rich tracebacks.

    Calling configure() again replaces the previously attached handler.
    """
    root = logging.getLogger("helmsman")
    root.setLevel(level)

    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        level=level,
        console=coalesce(console, Console(stderr=True)),
        rich_tracebacks=tracebacks,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    return handler


__all__ = (
    "configure",
)
