"""
Event bus.

Publishing records the event and schedules every subscribed handler as
its own asyncio task, then returns. Handlers run detached and unordered;
their failures are logged and never reach the publisher.

Example:
    bus = InMemoryEventBus()

    async def on_created(event: Event) -> None:
        ...

    bus.subscribe("customer.created", on_created)
    await bus.publish(Event(name="customer.created", payload=payload))
    await bus.drain()  # tests and shutdown only
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from .definition import Event

logger = logging.getLogger(__name__)

EventHandler = Callable[[Event], Awaitable[None] | None]


@runtime_checkable
class EventBus(Protocol):
    """Publish/subscribe contract used by the action context."""

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        ...

    def unsubscribe(self, event_name: str, handler: EventHandler) -> bool:
        ...

    async def publish(self, event: Event) -> None:
        ...


class InMemoryEventBus:
    """
    Process-local event bus backed by asyncio tasks.

    Coroutine handlers are awaited inside their task; plain callables run
    in a worker thread so they cannot block the event loop.
    """

    def __init__(self, history_size: int = 1000):
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._history: deque[Event] = deque(maxlen=history_size)
        self._tasks: set[asyncio.Task[None]] = set()

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_name].append(handler)
        logger.debug(f"Subscribed handler to event '{event_name}'")

    def unsubscribe(self, event_name: str, handler: EventHandler) -> bool:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def handlers(self, event_name: str) -> list[EventHandler]:
        return list(self._handlers.get(event_name, []))

    async def publish(self, event: Event) -> None:
        """Record ``event`` and schedule its handlers. Does not wait for them."""
        self._history.append(event)
        handlers = self._handlers.get(event.name, [])
        logger.debug(f"Publishing event '{event.name}' to {len(handlers)} handler(s)")

        for handler in list(handlers):
            task = asyncio.create_task(
                self._dispatch(handler, event),
                name=f"endor-event-{event.name}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, handler: EventHandler, event: Event) -> None:
        try:
            if inspect.iscoroutinefunction(handler):
                await handler(event)
            else:
                result = await asyncio.to_thread(handler, event)
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            logger.error(
                f"Event handler failed for '{event.name}': {e}",
                exc_info=True,
            )

    @property
    def history(self) -> list[Event]:
        """Published events, oldest first."""
        return list(self._history)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight handlers to finish."""
        while self._tasks:
            await asyncio.wait(list(self._tasks), timeout=timeout)
            if timeout is not None:
                break
