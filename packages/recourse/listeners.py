"""Process-wide interception of unhandled failures.

Two interception points are installed by ``GlobalErrorListener.attach``:

- unhandled rejections: the asyncio event loop exception handler, which sees
  task exceptions that were never retrieved and failing loop callbacks;
- uncaught exceptions: ``sys.excepthook`` and ``threading.excepthook``.

Each interception is reported through the handler and the resulting record is
forwarded to the listener callback. The hook that was installed before attach
still runs afterwards, so the interpreter's own traceback output is kept even
when handler logging is off. Render failures are not intercepted here;
render boundaries report them explicitly.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from collections.abc import Callable
from types import TracebackType
from typing import Any, ClassVar

from packages.recourse.errors import ErrorRecord
from packages.recourse.handler import ErrorHandler
from packages.recourse.logging import fields, get_logger

logger = get_logger(__name__)

SOURCE_UNHANDLED_REJECTION = "unhandled_rejection"
SOURCE_UNCAUGHT_EXCEPTION = "uncaught_exception"

LoopExceptionHandler = Callable[[asyncio.AbstractEventLoop, dict[str, Any]], object]


class GlobalErrorListener:
    """Attach/detach lifecycle for the global interception points.

    Only one listener can be attached per process at a time; ``attach`` and
    ``detach`` are both idempotent. Call them from startup and teardown code.
    """

    _active: ClassVar[GlobalErrorListener | None] = None

    def __init__(self, handler: ErrorHandler) -> None:
        self._handler = handler
        self._on_error: Callable[[ErrorRecord], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous_loop_handler: LoopExceptionHandler | None = None
        self._previous_excepthook: Callable[..., Any] | None = None
        self._previous_threading_excepthook: Callable[..., Any] | None = None
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        """Return the event loop whose exception handler is installed."""
        return self._loop

    def attach(
        self,
        on_error: Callable[[ErrorRecord], None] | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Install both interception points once.

        ``loop`` defaults to the running loop. Without any loop only the
        uncaught-exception point is installed.
        """
        if self._attached:
            return
        active = GlobalErrorListener._active
        if active is not None and active is not self:
            logger.warning("another global error listener is already attached")
            return

        self._on_error = on_error

        self._previous_excepthook = sys.excepthook
        self._previous_threading_excepthook = threading.excepthook
        sys.excepthook = self._handle_uncaught
        threading.excepthook = self._handle_thread_uncaught

        resolved = loop or _running_loop()
        if resolved is None:
            logger.warning(
                "no event loop available; unhandled rejection hook not installed"
            )
        else:
            self._loop = resolved
            self._previous_loop_handler = resolved.get_exception_handler()
            resolved.set_exception_handler(self._handle_loop_exception)

        self._attached = True
        GlobalErrorListener._active = self

    def detach(self) -> None:
        """Remove both interception points and restore previous hooks."""
        if not self._attached:
            return

        if sys.excepthook == self._handle_uncaught:
            sys.excepthook = self._previous_excepthook or sys.__excepthook__
        if threading.excepthook == self._handle_thread_uncaught:
            threading.excepthook = (
                self._previous_threading_excepthook or threading.__excepthook__
            )
        if self._loop is not None and not self._loop.is_closed():
            self._loop.set_exception_handler(self._previous_loop_handler)

        self._loop = None
        self._previous_loop_handler = None
        self._previous_excepthook = None
        self._previous_threading_excepthook = None
        self._on_error = None
        self._attached = False
        if GlobalErrorListener._active is self:
            GlobalErrorListener._active = None

    def _handle_uncaught(
        self,
        exc_type: type[BaseException],
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Report ``Exception`` failures, then always chain to the previous hook."""
        previous = self._previous_excepthook or sys.__excepthook__
        if issubclass(exc_type, Exception):
            self._dispatch(
                exc if exc is not None else exc_type(),
                {fields.SOURCE: SOURCE_UNCAUGHT_EXCEPTION},
            )
        previous(exc_type, exc, tb)

    def _handle_thread_uncaught(self, args: threading.ExceptHookArgs) -> None:
        previous = self._previous_threading_excepthook or threading.__excepthook__
        if issubclass(args.exc_type, Exception):
            context: dict[str, object] = {fields.SOURCE: SOURCE_UNCAUGHT_EXCEPTION}
            if args.thread is not None:
                context["thread"] = args.thread.name
            self._dispatch(
                args.exc_value if args.exc_value is not None else args.exc_type(),
                context,
            )
        previous(args)

    def _handle_loop_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: dict[str, Any],
    ) -> None:
        exc = context.get("exception")
        if exc is None or isinstance(exc, Exception):
            value = exc if exc is not None else context.get("message")
            self._dispatch(value, {fields.SOURCE: SOURCE_UNHANDLED_REJECTION})

        if self._previous_loop_handler is not None:
            self._previous_loop_handler(loop, context)
        else:
            loop.default_exception_handler(context)

    def _dispatch(self, value: object, context: dict[str, object]) -> None:
        """Report one intercepted failure and forward the record."""
        record = self._handler.report(value, None, context)
        on_error = self._on_error
        if on_error is None:
            return
        try:
            on_error(record)
        except Exception:
            logger.warning("global error listener callback failed", exc_info=True)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
