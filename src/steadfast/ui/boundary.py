"""Fault isolation for units of rendering work.

A :class:`FaultBoundary` catches exceptions raised while rendering one
subtree and funnels them into the shared error handler with
``operation="ui_render"``. What gets drawn instead is up to the caller:
after a fault the boundary reports ``has_error`` and exposes the
:class:`HandlingResult` with the message to show.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Mapping, Optional, TypeVar

from ..errors.handler import ErrorHandler
from ..errors.types import HandlingResult, create_context
from ..util.log import Log

T = TypeVar("T")

FaultCallback = Callable[[Exception, HandlingResult], None]

RENDER_OPERATION = "ui_render"

log = Log.create({"service": "ui.boundary"})


class FaultBoundary:
    """Scoped region that records the first rendering fault until reset."""

    def __init__(
        self,
        on_error: Optional[FaultCallback] = None,
        *,
        handler: Optional[ErrorHandler] = None,
        module: str = "fault_boundary",
        name: Optional[str] = None,
        max_resets: int = 3,
        custom_messages: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.on_error = on_error
        self.module = module
        self.name = name
        self.max_resets = max_resets
        self.custom_messages = custom_messages
        self.error: Optional[Exception] = None
        self.result: Optional[HandlingResult] = None
        self.resets = 0
        self._handler = handler

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def can_reset(self) -> bool:
        return self.resets < self.max_resets

    def render(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
        """Run ``fn``; return None instead of raising when it faults.

        While the boundary holds a fault, ``fn`` is not called at all.
        """
        if self.has_error:
            return None
        try:
            return fn(*args, **kwargs)
        except Exception as error:
            self.capture(error, target=getattr(fn, "__qualname__", repr(fn)))
            return None

    def wrap(self, fn: Callable[..., T]) -> Callable[..., Optional[T]]:
        """Decorate ``fn`` so every call renders through this boundary."""

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Optional[T]:
            return self.render(fn, *args, **kwargs)

        return wrapper

    def __enter__(self) -> "FaultBoundary":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not isinstance(exc, Exception):
            return False
        self.capture(exc, target=self.name)
        return True

    def capture(self, error: Exception, target: Optional[str] = None) -> HandlingResult:
        """Record ``error`` and hand it to the error handler."""
        data = {"boundary": self.name, "target": target}
        context = create_context(
            RENDER_OPERATION,
            self.module,
            {key: value for key, value in data.items() if value is not None},
        )
        handler = self._handler or ErrorHandler.current()
        result = handler.handle_error(error, context, self.custom_messages)
        self.error = error
        self.result = result
        if self.on_error is not None:
            self.on_error(error, result)
        return result

    def reset(self) -> bool:
        """Clear the recorded fault so the subtree renders again.

        Returns False once ``max_resets`` is used up; the fault stays recorded.
        """
        if not self.has_error:
            return True
        if not self.can_reset:
            log.warn("fault boundary reset limit reached", {"boundary": self.name, "resets": self.resets})
            return False
        self.error = None
        self.result = None
        self.resets += 1
        return True


def create_fault_boundary(
    on_error: Optional[FaultCallback] = None,
    *,
    handler: Optional[ErrorHandler] = None,
    module: str = "fault_boundary",
    max_resets: int = 3,
    custom_messages: Optional[Mapping[str, str]] = None,
) -> Callable[[Optional[str]], FaultBoundary]:
    """Return a factory producing identically configured boundaries.

    Each subtree gets its own boundary so one fault does not hide siblings::

        boundary_for = create_fault_boundary(on_error=show_toast)
        sidebar = boundary_for("sidebar")
        sidebar.render(draw_sidebar, state)
    """

    def factory(name: Optional[str] = None) -> FaultBoundary:
        return FaultBoundary(
            on_error,
            handler=handler,
            module=module,
            name=name,
            max_resets=max_resets,
            custom_messages=custom_messages,
        )

    return factory
