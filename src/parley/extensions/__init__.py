"""Extension system for parley -- declaration, binding, and loading.

Key classes:

* :class:`Extension` -- base class; handlers are declared with the
  :func:`event`, :func:`once_event` and :func:`command` decorators.
* :class:`ExtensionRegistry` -- builds the immutable :class:`ExtensionSpec`
  of an extension type.
* :class:`ExtensionManager` -- loads extensions into a client and unloads
  them again.

Example::

    from parley.extensions import Extension, event

    class Echo(Extension):
        @event("message_create")
        async def echo(self, message):
            ...

    client.load_extension(Echo)
"""

from parley.extensions.base import BoundCommand, Extension
from parley.extensions.manager import ENTRY_POINT_GROUP, ExtensionManager
from parley.extensions.registry import (
    CommandDeclaration,
    EventDeclaration,
    ExtensionRegistry,
    ExtensionSpec,
    command,
    event,
    once_event,
)

__all__ = [
    "BoundCommand",
    "CommandDeclaration",
    "ENTRY_POINT_GROUP",
    "EventDeclaration",
    "Extension",
    "ExtensionManager",
    "ExtensionRegistry",
    "ExtensionSpec",
    "command",
    "event",
    "once_event",
]
