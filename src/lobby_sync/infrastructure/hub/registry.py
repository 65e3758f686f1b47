"""Observer registry used by hub clients and feeds."""
from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class HandlerSubscription:
    """Implements application.ports.hub.Subscription."""

    def __init__(self, registry: EventRegistry, event: str, handler: Handler) -> None:
        self._registry = registry
        self._event = event
        self._handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._registry._remove(self._event, self._handler)


class EventRegistry:
    """Keeps handlers per event name and fans payloads out to them.

    A failing handler is logged and never prevents delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def subscribe(self, event: str, handler: Handler) -> HandlerSubscription:
        self._handlers.setdefault(event, []).append(handler)
        logger.debug("Handler subscribed to %s (total=%d)", event, len(self._handlers[event]))
        return HandlerSubscription(self, event, handler)

    def handler_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    def emit(self, event: str, payload: Any = None) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for %s failed", event)

    def clear(self) -> None:
        self._handlers.clear()

    def _remove(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[event]
