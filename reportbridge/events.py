"""
Test-runner lifecycle events.

The host test runner publishes lifecycle events through an
EventDispatcher; the reporting plugin subscribes to them. Handlers may
be plain functions or coroutine functions; coroutines are awaited one
after another, in subscription order.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class Event(str, Enum):
    """Lifecycle events emitted by the host test runner."""
    SUITE_BEFORE = "suite.before"
    STEP_FAILED = "step.failed"
    STEP_PASSED = "step.passed"
    TEST_FAILED = "test.failed"
    TEST_PASSED = "test.passed"
    TEST_STARTED = "test.started"
    TEST_FINISHED = "test.finished"
    WORKERS_RESULT = "workers.result"
    ALL_RESULT = "all.result"


class EventDispatcher:
    """
    Minimal publish/subscribe hub for lifecycle events.

    Example:
        dispatcher = EventDispatcher()
        dispatcher.on(Event.SUITE_BEFORE, lambda suite: print(suite.title))
        await dispatcher.emit(Event.SUITE_BEFORE, SuiteRecord("Login"))
    """

    def __init__(self) -> None:
        self._handlers: dict[Event, list[Handler]] = defaultdict(list)

    def on(self, event: Event | str, handler: Handler) -> None:
        """Subscribe a handler to an event."""
        self._handlers[Event(event)].append(handler)

    def off(self, event: Event | str, handler: Handler) -> None:
        """Unsubscribe a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(Event(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: Event | str) -> list[Handler]:
        """Handlers currently subscribed to an event."""
        return list(self._handlers.get(Event(event), []))

    async def emit(self, event: Event | str, *args: Any) -> None:
        """
        Deliver an event to every subscribed handler.

        A failing handler is logged and does not prevent later handlers
        from running.
        """
        event = Event(event)
        for handler in self.handlers(event):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Handler {handler!r} failed for event '{event.value}'")
