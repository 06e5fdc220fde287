"""Declaration registry for extension types.

An :class:`ExtensionRegistry` collects event-handler and command declarations
for one extension type before any instance exists, then freezes them with
:meth:`ExtensionRegistry.build` into an immutable :class:`ExtensionSpec`.
:class:`~parley.extensions.base.Extension` does this automatically at class
creation from methods marked with :func:`event`, :func:`once_event` and
:func:`command`; the registry can also be driven by hand::

    registry = ExtensionRegistry("greeter")
    registry.register_event("message_create", on_message)
    registry.register_once_event("ready", on_ready)
    spec = registry.build()

Declaration order is preserved and becomes dispatch order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from parley.exceptions import DeclarationError

EVENT_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")
COMMAND_NAME_RE = re.compile(r"^[-_a-z0-9]{1,32}$")

_EVENT_MARK = "__parley_events__"
_COMMAND_MARK = "__parley_commands__"


def validate_event_name(name: Any) -> str:
    """Return *name* if it is a valid event name, else raise :class:`DeclarationError`."""
    if not isinstance(name, str) or not EVENT_NAME_RE.match(name):
        raise DeclarationError(
            f"Event name must be a lowercase identifier such as 'message_create', got {name!r}"
        )
    return name


def _validate_body(body: Any) -> None:
    if body is None:
        raise DeclarationError("A handler body must be given")
    if not callable(body):
        raise DeclarationError(f"Handler body must be callable, got {type(body).__name__}")


@dataclass(frozen=True)
class EventDeclaration:
    """One declared event handler: ``(event, id, metadata, body)``."""

    event: str
    body: Callable[..., Any]
    id: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def once(self) -> bool:
        return bool(self.metadata.get("once", False))


@dataclass(frozen=True)
class CommandDeclaration:
    """One declared application command.

    Commands with an empty ``guild_ids`` are global.
    """

    name: str
    body: Callable[..., Any]
    description: str = ""
    guild_ids: tuple[int, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class ExtensionSpec:
    """Immutable declaration table of one extension type."""

    name: str
    events: Mapping[str, tuple[EventDeclaration, ...]]
    commands: tuple[CommandDeclaration, ...]

    @property
    def event_names(self) -> list[str]:
        return list(self.events)


class ExtensionRegistry:
    """Mutable builder for an :class:`ExtensionSpec`.

    Args:
        owner: Name of the owning extension type. Every declaration's
            metadata is tagged with it under ``"extension"``.
    """

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._events: dict[str, list[EventDeclaration]] = {}
        self._commands: list[CommandDeclaration] = []

    def register_event(
        self,
        name: str,
        body: Optional[Callable[..., Any]],
        *,
        id: Optional[str] = None,
        **metadata: Any,
    ) -> EventDeclaration:
        """Declare a handler for the event *name*.

        Raises:
            DeclarationError: If *name* is not a valid event name or *body*
                is missing.
        """
        validate_event_name(name)
        _validate_body(body)
        metadata["extension"] = self.owner
        declaration = EventDeclaration(
            event=name, body=body, id=id, metadata=MappingProxyType(metadata),  # type: ignore[arg-type]
        )
        self._events.setdefault(name, []).append(declaration)
        return declaration

    def register_once_event(
        self,
        name: str,
        body: Optional[Callable[..., Any]],
        *,
        id: Optional[str] = None,
        **metadata: Any,
    ) -> EventDeclaration:
        """Declare a handler that is removed after its first dispatch."""
        return self.register_event(name, body, id=id, once=True, **metadata)

    def register_command(
        self,
        name: str,
        body: Optional[Callable[..., Any]],
        *,
        description: str = "",
        guild_ids: Sequence[int] = (),
        **metadata: Any,
    ) -> CommandDeclaration:
        """Declare an application command.

        Raises:
            DeclarationError: If *name* is not a valid command name or
                *body* is missing.
        """
        if not isinstance(name, str) or not COMMAND_NAME_RE.match(name):
            raise DeclarationError(
                f"Command name must be 1-32 lowercase letters, digits, '-' or '_', got {name!r}"
            )
        _validate_body(body)
        metadata["extension"] = self.owner
        declaration = CommandDeclaration(
            name=name,
            body=body,  # type: ignore[arg-type]
            description=description,
            guild_ids=tuple(int(g) for g in guild_ids),
            metadata=MappingProxyType(metadata),
        )
        self._commands.append(declaration)
        return declaration

    def event(self, name: str, *, id: Optional[str] = None, **metadata: Any) -> Callable:
        """Decorator form of :meth:`register_event`."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register_event(name, func, id=id, **metadata)
            return func

        return decorator

    def once_event(self, name: str, *, id: Optional[str] = None, **metadata: Any) -> Callable:
        """Decorator form of :meth:`register_once_event`."""
        return self.event(name, id=id, once=True, **metadata)

    def build(self) -> ExtensionSpec:
        """Freeze the current declarations into an :class:`ExtensionSpec`."""
        return ExtensionSpec(
            name=self.owner,
            events=MappingProxyType(
                {name: tuple(decls) for name, decls in self._events.items()}
            ),
            commands=tuple(self._commands),
        )


# --------------------------------------------------------------------- #
# Method markers, collected by Extension.__init_subclass__
# --------------------------------------------------------------------- #


def _mark(func: Callable[..., Any], attr: str, entry: dict[str, Any]) -> None:
    _validate_body(func)
    marks = func.__dict__.setdefault(attr, [])
    # decorators apply bottom-up; keep the order they are written in
    marks.insert(0, entry)


def event(name: str, *, id: Optional[str] = None, **metadata: Any) -> Callable:
    """Mark an extension method as a handler for the event *name*.

    Example::

        class Greeter(Extension):
            @event("member_join")
            async def welcome(self, member):
                ...
    """
    validate_event_name(name)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        _mark(func, _EVENT_MARK, {"name": name, "id": id, "metadata": metadata})
        return func

    return decorator


def once_event(name: str, *, id: Optional[str] = None, **metadata: Any) -> Callable:
    """Like :func:`event`, but the handler runs only for the first dispatch."""
    return event(name, id=id, once=True, **metadata)


def command(
    name: str,
    *,
    description: str = "",
    guild_ids: Sequence[int] = (),
    **metadata: Any,
) -> Callable:
    """Mark an extension method as an application command."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        _mark(
            func,
            _COMMAND_MARK,
            {
                "name": name,
                "description": description,
                "guild_ids": guild_ids,
                "metadata": metadata,
            },
        )
        return func

    return decorator


def collect_declarations(
    registry: ExtensionRegistry,
    owner: type,
    namespace: Mapping[str, Any],
) -> None:
    """Register the marked functions of a class namespace, in definition order.

    A function is skipped unless it is still what *owner* resolves the
    attribute to, so an override in a subclass replaces the base declaration.
    """
    for attr, value in namespace.items():
        if getattr(owner, attr, None) is not value:
            continue
        for entry in getattr(value, _EVENT_MARK, ()):
            registry.register_event(entry["name"], value, id=entry["id"], **entry["metadata"])
        for entry in getattr(value, _COMMAND_MARK, ()):
            registry.register_command(
                entry["name"],
                value,
                description=entry["description"],
                guild_ids=entry["guild_ids"],
                **entry["metadata"],
            )
