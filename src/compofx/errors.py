"""Error reporting and exception types.

Failures inside effects, watchers, cleanups and render requests are recovered
locally and only surface here. Every report carries the [compofx] prefix so it
stands apart from host-framework errors in the same log stream.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger("compofx")

PREFIX = "[compofx]"

ErrorHandler = Callable[[str, BaseException], None]

_handler: ErrorHandler | None = None


class CompofxError(Exception):
    """Base class for API misuse errors."""


class BindingError(CompofxError):
    """A host was attached twice, or a binding was detached twice."""


class PluginError(CompofxError):
    """A plugin handle was used after uninstall."""


def set_error_handler(handler: ErrorHandler | None) -> None:
    """Route reported errors to handler(message, error) instead of the logger.

    Pass None to restore the default logging behaviour.
    """
    global _handler
    _handler = handler


def report(message: str, error: BaseException) -> None:
    """Report a recovered error with the library prefix."""
    if _handler is not None:
        try:
            _handler(f"{PREFIX} {message}", error)
            return
        except Exception:
            logger.exception("%s Error in error handler", PREFIX)
    logger.error("%s %s: %s", PREFIX, message, error, exc_info=error)


def warn(message: str) -> None:
    logger.warning("%s %s", PREFIX, message)
