"""Host-side event dispatch table.

:class:`EventDispatcher` owns the mapping from event name to an ordered
list of :class:`EventHandler` objects. Extensions contribute handlers via
their :attr:`~parley.extensions.base.Extension.events` mapping; the client
registers its own with :meth:`parley.client.Client.event`.

Handlers run sequentially in registration order. A handler that raises is
logged and does not prevent the remaining handlers from running. One-shot
handlers are removed before they are invoked, so they run at most once even
if the event is dispatched again while they are still running.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EventHandler:
    """An invocable handler registered for an event.

    Equality is identity, so a handler can be removed with exactly the
    object that was added.

    Attributes:
        callback: Sync or async callable receiving the event arguments.
        id: Optional identifier, usable with
            :meth:`EventDispatcher.remove_by_id`.
        metadata: Immutable metadata; ``metadata["once"]`` marks a one-shot
            handler and ``metadata["extension"]`` names the contributing
            extension.
    """

    callback: Callable[..., Any]
    id: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def once(self) -> bool:
        return bool(self.metadata.get("once", False))

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        result = self.callback(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


class EventDispatcher:
    """Ordered, per-event handler table with sequential dispatch."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def add(self, event_name: str, handler: EventHandler) -> EventHandler:
        self._handlers.setdefault(event_name, []).append(handler)
        return handler

    def add_handlers(self, handlers: Mapping[str, Sequence[EventHandler]]) -> None:
        """Merge a whole ``event name -> handlers`` mapping, keeping its order."""
        for event_name, event_handlers in handlers.items():
            for handler in event_handlers:
                self.add(event_name, handler)

    def remove(self, event_name: str, handler: EventHandler) -> bool:
        """Remove *handler* (by identity). Returns ``False`` if it was not registered."""
        event_handlers = self._handlers.get(event_name, [])
        for index, registered in enumerate(event_handlers):
            if registered is handler:
                del event_handlers[index]
                if not event_handlers:
                    del self._handlers[event_name]
                return True
        return False

    def remove_handlers(self, handlers: Mapping[str, Sequence[EventHandler]]) -> None:
        """Remove every handler of a mapping previously passed to :meth:`add_handlers`."""
        for event_name, event_handlers in handlers.items():
            for handler in event_handlers:
                self.remove(event_name, handler)

    def remove_by_id(self, event_name: str, handler_id: str) -> int:
        """Remove all handlers of *event_name* carrying *handler_id*. Returns the count removed."""
        matches = [h for h in self._handlers.get(event_name, []) if h.id == handler_id]
        for handler in matches:
            self.remove(event_name, handler)
        return len(matches)

    def handlers(self, event_name: str) -> tuple[EventHandler, ...]:
        return tuple(self._handlers.get(event_name, ()))

    def event_names(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, event_name: str, *args: Any, **kwargs: Any) -> int:
        """Invoke every handler for *event_name* in registration order.

        Returns:
            The number of handlers that were invoked.
        """
        snapshot = list(self._handlers.get(event_name, ()))
        logger.debug("Dispatching '%s' to %d handler(s)", event_name, len(snapshot))
        for handler in snapshot:
            if handler.once:
                self.remove(event_name, handler)
            try:
                await handler(*args, **kwargs)
            except Exception:
                logger.exception(
                    "Handler %r for event '%s' raised", handler.id or handler.callback, event_name
                )
        return len(snapshot)
