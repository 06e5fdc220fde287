"""Base class for parley extensions.

An extension is a unit of third-party code that contributes event handlers
and application commands to a :class:`~parley.client.Client` without
modifying it. Handlers are declared on the class with the
:func:`~parley.extensions.registry.event`,
:func:`~parley.extensions.registry.once_event` and
:func:`~parley.extensions.registry.command` decorators::

    class MessageExpander(Extension):
        @event("message_create")
        async def expand(self, message):
            ...

        @once_event("ready")
        async def announce(self):
            ...

When the class is created its declarations are frozen into
``MessageExpander.__extension_spec__``. Each instance then exposes them as
bound handlers through :attr:`Extension.events`, computed on first access
and cached for the instance's lifetime. The host merges that mapping into
its dispatch table and removes the same objects again on unload.

The extension lifecycle is:

1. Instantiation -- the host calls ``ExtensionClass(client)``.
2. :meth:`Extension.on_load` -- called once, before handlers are merged.
3. Handlers and commands run zero or more times.
4. :meth:`Extension.on_unload` -- called once, after handlers are removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property, partial
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Mapping

from parley.dispatch import EventHandler
from parley.extensions.registry import (
    CommandDeclaration,
    ExtensionRegistry,
    ExtensionSpec,
    collect_declarations,
)

if TYPE_CHECKING:
    from parley.client import Client


@dataclass(frozen=True, eq=False)
class BoundCommand:
    """A command declaration bound to an extension instance."""

    declaration: CommandDeclaration
    extension: Extension

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def guild_ids(self) -> tuple[int, ...]:
        return self.declaration.guild_ids

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return await EventHandler(partial(self.declaration.body, self.extension))(*args, **kwargs)


class Extension:
    """Base class for all extensions.

    Subclasses declare handlers with decorators; all lifecycle hooks have
    no-op defaults so extensions only override what they need.

    Args:
        client: The host client. Handlers reach it as ``self.client``.
    """

    __extension_spec__: ClassVar[ExtensionSpec] = ExtensionRegistry("Extension").build()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        registry = ExtensionRegistry(cls.__qualname__)
        # base-class declarations first, each class in its own definition order;
        # an overridden method only counts where it is defined last
        for klass in reversed(cls.__mro__):
            if issubclass(klass, Extension):
                collect_declarations(registry, cls, klass.__dict__)
        cls.__extension_spec__ = registry.build()

    def __init__(self, client: Client) -> None:
        self.client = client

    @property
    def name(self) -> str:
        """Unique name the extension is registered under. Defaults to the class name."""
        return type(self).__qualname__

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return (type(self).__doc__ or "").strip().split("\n")[0]

    def on_load(self) -> None:
        """Called once when the extension is loaded by the host."""

    def on_unload(self) -> None:
        """Called once when the extension is unloaded. Release resources here."""

    @cached_property
    def events(self) -> Mapping[str, tuple[EventHandler, ...]]:
        """Read-only ``event name -> bound handlers`` mapping, in declaration order.

        Each handler calls the declared body with this instance as its
        first argument and the event arguments forwarded unchanged.
        """
        spec = type(self).__extension_spec__
        return MappingProxyType(
            {
                name: tuple(
                    EventHandler(
                        callback=partial(declaration.body, self),
                        id=declaration.id,
                        metadata=declaration.metadata,
                    )
                    for declaration in declarations
                )
                for name, declarations in spec.events.items()
            }
        )

    @cached_property
    def commands(self) -> tuple[BoundCommand, ...]:
        """All commands of the extension, in declaration order."""
        return tuple(
            BoundCommand(declaration, self)
            for declaration in type(self).__extension_spec__.commands
        )

    @cached_property
    def pending_commands(self) -> tuple[BoundCommand, ...]:
        """Guild-scoped commands still awaiting per-guild registration by the host."""
        return tuple(c for c in self.commands if c.guild_ids)
