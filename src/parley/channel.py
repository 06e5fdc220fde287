"""Concrete messaging targets: guild channels and direct-message recipients."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from parley.messageable import Connectable, Messageable

if TYPE_CHECKING:
    from parley.client import Client


class TextChannel(Messageable):
    """A channel whose id is known up front."""

    def __init__(
        self,
        client: Client,
        channel_id: int,
        guild_id: Optional[int] = None,
        name: Optional[str] = None,
    ) -> None:
        self._client = client
        self.id = int(channel_id)
        self.guild_id = guild_id
        self.name = name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} guild_id={self.guild_id}>"

    async def _resolve_channel_id(self) -> int:
        return self.id


class VoiceChannel(TextChannel, Connectable):
    """A voice channel. Its text chat is messageable; voice is not supported."""


class DMTarget(Messageable):
    """A user reached through their direct-message channel.

    The DM channel id is not known until it is opened with
    ``POST /users/@me/channels``; the first operation opens it and later
    operations reuse the id.
    """

    def __init__(self, client: Client, user_id: int) -> None:
        self._client = client
        self.user_id = int(user_id)
        self.guild_id = None
        self._channel_id: Optional[int] = None

    def __repr__(self) -> str:
        return f"<DMTarget user_id={self.user_id} channel_id={self._channel_id}>"

    async def _resolve_channel_id(self) -> int:
        if self._channel_id is None:
            _resp, data = await self._client.http.post(
                "/users/@me/channels", {"recipient_id": str(self.user_id)},
            )
            self._channel_id = int(data["id"])
        return self._channel_id
