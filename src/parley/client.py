"""The host client tying transport, dispatch and extensions together."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Optional

import httpx

from parley.allowed_mentions import AllowedMentions
from parley.channel import DMTarget, TextChannel, VoiceChannel
from parley.config import resolve_config
from parley.dispatch import EventDispatcher, EventHandler
from parley.extensions.base import Extension
from parley.extensions.manager import ExtensionManager
from parley.extensions.registry import validate_event_name
from parley.http import HTTPClient
from parley.models import ClientConfig

GUILD_VOICE_TYPE = 2


class Client:
    """A REST client with an event dispatch table and extension support.

    The client owns the :class:`~parley.http.HTTPClient` used by every
    messaging target it hands out, and the default
    :class:`~parley.allowed_mentions.AllowedMentions` merged into every
    outgoing message. Gateway connections are not part of this library:
    whatever receives events feeds them in through :meth:`dispatch`.

    Args:
        config: Resolved configuration. Defaults to an empty
            :class:`~parley.models.ClientConfig`.
        allowed_mentions: Default mention policy. Defaults to the one in
            *config*.
        transport: Optional :mod:`httpx` transport for the REST client.

    Example::

        async with Client.from_config() as client:
            client.load_extension(MessageExpander)
            await client.channel(123).post("Hello")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        allowed_mentions: Optional[AllowedMentions] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.http = HTTPClient(
            self.config.token,
            base_url=self.config.base_url,
            request_config=self.config.request,
            transport=transport,
        )
        self.allowed_mentions = allowed_mentions or AllowedMentions.from_config(
            self.config.allowed_mentions
        )
        self.dispatcher = EventDispatcher()
        self.extensions = ExtensionManager(self, self.dispatcher)

    @classmethod
    def from_config(
        cls,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        **kwargs: Any,
    ) -> Client:
        """Build a client from :func:`~parley.config.resolve_config`."""
        return cls(resolve_config(token=token, base_url=base_url), **kwargs)

    async def __aenter__(self) -> Client:
        self.http.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        self.extensions.unload_all()
        await self.http.close()

    # ------------------------------------------------------------------ #
    # Events
    # ------------------------------------------------------------------ #

    def event(self, name: str, *, id: Optional[str] = None, **metadata: Any) -> Callable:
        """Decorator registering a client-level handler for the event *name*."""
        validate_event_name(name)

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.dispatcher.add(
                name, EventHandler(func, id=id, metadata=MappingProxyType(metadata))
            )
            return func

        return decorator

    def once(self, name: str, *, id: Optional[str] = None, **metadata: Any) -> Callable:
        """Like :meth:`event`, but the handler runs only for the first dispatch."""
        return self.event(name, id=id, once=True, **metadata)

    async def dispatch(self, event_name: str, *args: Any, **kwargs: Any) -> int:
        """Run every handler registered for *event_name*; see :class:`~parley.dispatch.EventDispatcher`."""
        return await self.dispatcher.dispatch(event_name, *args, **kwargs)

    # ------------------------------------------------------------------ #
    # Extensions
    # ------------------------------------------------------------------ #

    def load_extension(self, extension: Any, name: Optional[str] = None) -> Extension:
        return self.extensions.load_extension(extension, name=name)

    def unload_extension(self, name: str) -> Extension:
        return self.extensions.unload_extension(name)

    def discover_extensions(self) -> list[str]:
        return self.extensions.discover(self.config.extensions)

    # ------------------------------------------------------------------ #
    # Messaging targets
    # ------------------------------------------------------------------ #

    def channel(self, channel_id: int, guild_id: Optional[int] = None) -> TextChannel:
        """Return a messaging target for a channel whose id is known."""
        return TextChannel(self, channel_id, guild_id=guild_id)

    def dm(self, user_id: int) -> DMTarget:
        """Return a messaging target for a user's direct-message channel."""
        return DMTarget(self, user_id)

    async def fetch_channel(self, channel_id: int) -> TextChannel:
        """Fetch a channel to learn its guild and name.

        Raises:
            NotFoundError: If the channel does not exist.
        """
        _resp, data = await self.http.get(f"/channels/{channel_id}")
        guild_id = data.get("guild_id")
        channel_cls = VoiceChannel if data.get("type") == GUILD_VOICE_TYPE else TextChannel
        return channel_cls(
            self,
            int(data["id"]),
            guild_id=int(guild_id) if guild_id else None,
            name=data.get("name"),
        )
