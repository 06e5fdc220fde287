"""Outbound messaging pipeline shared by every channel-like target.

:class:`Messageable` turns high-level requests (post, edit, delete, fetch,
pin, typing) into exactly one REST call each. Concrete targets provide:

* ``_client`` -- the host :class:`~parley.client.Client`, which owns the
  :class:`~parley.http.HTTPClient` and the default
  :class:`~parley.allowed_mentions.AllowedMentions`;
* ``guild_id`` -- the parent guild, injected into decoded messages;
* :meth:`Messageable._resolve_channel_id` -- the (possibly suspending)
  lookup of the channel id.

Every operation resolves the channel id once, before the request path is
built. Transport errors propagate unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from parley.allowed_mentions import AllowedMentions
from parley.components import ComponentLayout, components_to_payload
from parley.embed import Embed
from parley.exceptions import InvalidUsageError, ParleyError, UnsupportedCapabilityError
from parley.file import File, multipart_fields
from parley.message import Message, MessageReference

if TYPE_CHECKING:
    from parley.client import Client

logger = logging.getLogger(__name__)

SUPPRESS_EMBEDS_FLAG = 1 << 2
TYPING_INTERVAL = 5.0

Snowflake = Union[int, str]
MessageLike = Union[Message, Snowflake]


def _snowflake(value: Any) -> int:
    return int(getattr(value, "id", value))


def _exclusive(**kwargs: Any) -> None:
    given = [name for name, value in kwargs.items() if value is not None]
    if len(given) > 1:
        raise InvalidUsageError(f"Only one of {', '.join(kwargs)} may be given, got {', '.join(given)}")


class Messageable:
    """Mixin implementing the messaging operations of a channel-like target."""

    _client: Client
    guild_id: Optional[int] = None

    async def _resolve_channel_id(self) -> int:
        raise NotImplementedError

    # ------------------------------------------------------------------ #
    # Payload construction
    # ------------------------------------------------------------------ #

    def _build_payload(
        self,
        content: Optional[str],
        embed: Optional[Embed],
        embeds: Optional[Sequence[Embed]],
        allowed_mentions: Optional[AllowedMentions],
        components: Optional[ComponentLayout],
    ) -> dict[str, Any]:
        _exclusive(embed=embed, embeds=embeds)
        payload: dict[str, Any] = {}
        if content:
            payload["content"] = content
        selected = [embed] if embed is not None else embeds
        if selected is not None:
            payload["embeds"] = [e.to_hash() for e in selected]
        default = self._client.allowed_mentions
        payload["allowed_mentions"] = (
            allowed_mentions.to_hash(default) if allowed_mentions else default.to_hash()
        )
        if components is not None:
            payload["components"] = components_to_payload(components)
        return payload

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def post(
        self,
        content: Optional[str] = None,
        *,
        tts: bool = False,
        embed: Optional[Embed] = None,
        embeds: Optional[Sequence[Embed]] = None,
        allowed_mentions: Optional[AllowedMentions] = None,
        reference: Optional[Union[Message, MessageReference]] = None,
        components: Optional[ComponentLayout] = None,
        file: Optional[File] = None,
        files: Optional[Sequence[File]] = None,
    ) -> Message:
        """Post a message to the channel.

        Args:
            content: Message text. Omitted from the body when empty.
            tts: Whether the message is read out with text-to-speech.
            embed: A single embed. Mutually exclusive with *embeds*.
            embeds: Several embeds. Mutually exclusive with *embed*.
            allowed_mentions: Policy merged over the client default.
            reference: The message to reply to.
            components: Flat list of components (one row) or list of rows.
            file: A single attachment. Mutually exclusive with *files*.
            files: Several attachments. Mutually exclusive with *file*.

        Returns:
            The created :class:`~parley.message.Message`.

        Raises:
            InvalidUsageError: If mutually exclusive arguments are combined.
            HTTPError: Propagated from the transport.
        """
        _exclusive(file=file, files=files)
        payload = self._build_payload(content, embed, embeds, allowed_mentions, components)
        payload["tts"] = tts
        if reference is not None:
            payload["message_reference"] = reference.to_reference().to_hash()

        attachments = [file] if file is not None else files
        kwargs: dict[str, Any] = {}
        if attachments:
            kwargs["data"], kwargs["files"] = multipart_fields(payload, attachments)
        else:
            kwargs["body"] = payload

        channel_id = await self._resolve_channel_id()
        _resp, data = await self._client.http.post(f"/channels/{channel_id}/messages", **kwargs)
        return Message.from_data(data, guild_id=self.guild_id)

    send_message = post

    async def edit_message(
        self,
        message: MessageLike,
        content: Optional[str] = None,
        *,
        embed: Optional[Embed] = None,
        embeds: Optional[Sequence[Embed]] = None,
        allowed_mentions: Optional[AllowedMentions] = None,
        components: Optional[ComponentLayout] = None,
        suppress: Optional[bool] = None,
    ) -> Message:
        """Edit a message sent by this client.

        Args:
            message: The message or its id.
            suppress: ``True`` hides the message's embeds, ``False`` shows
                them again; ``None`` leaves the flags untouched.

        Other arguments behave as in :meth:`post`.
        """
        payload = self._build_payload(content, embed, embeds, allowed_mentions, components)
        if suppress is not None:
            payload["flags"] = SUPPRESS_EMBEDS_FLAG if suppress else 0

        channel_id = await self._resolve_channel_id()
        _resp, data = await self._client.http.patch(
            f"/channels/{channel_id}/messages/{_snowflake(message)}", payload,
        )
        return Message.from_data(data, guild_id=self.guild_id)

    async def delete_message(self, message: MessageLike, *, reason: Optional[str] = None) -> None:
        channel_id = await self._resolve_channel_id()
        await self._client.http.delete(
            f"/channels/{channel_id}/messages/{_snowflake(message)}",
            audit_log_reason=reason,
        )

    destroy_message = delete_message

    async def fetch_message(self, message_id: Snowflake) -> Message:
        """Fetch a single message.

        Raises:
            NotFoundError: If the message does not exist.
        """
        channel_id = await self._resolve_channel_id()
        _resp, data = await self._client.http.get(
            f"/channels/{channel_id}/messages/{_snowflake(message_id)}",
        )
        return Message.from_data(data, guild_id=self.guild_id)

    async def fetch_messages(
        self,
        limit: int = 50,
        *,
        before: Optional[MessageLike] = None,
        after: Optional[MessageLike] = None,
        around: Optional[MessageLike] = None,
    ) -> list[Message]:
        """Fetch the message history.

        At most one of *before*, *after* and *around* may be given; each
        selects messages relative to the given message.

        Args:
            limit: Number of messages to fetch (1-100).
            before: Fetch messages older than this message.
            after: Fetch messages newer than this message.
            around: Fetch messages around this message.
        """
        _exclusive(before=before, after=after, around=around)
        params: dict[str, Any] = {"limit": limit}
        for key, cursor in (("before", before), ("after", after), ("around", around)):
            if cursor is not None:
                params[key] = _snowflake(cursor)

        channel_id = await self._resolve_channel_id()
        _resp, data = await self._client.http.get(
            f"/channels/{channel_id}/messages", params=params,
        )
        return [Message.from_data(m, guild_id=self.guild_id) for m in data or []]

    async def fetch_pins(self) -> list[Message]:
        channel_id = await self._resolve_channel_id()
        _resp, data = await self._client.http.get(f"/channels/{channel_id}/pins")
        return [Message.from_data(m, guild_id=self.guild_id) for m in data or []]

    async def pin_message(self, message: MessageLike, *, reason: Optional[str] = None) -> None:
        channel_id = await self._resolve_channel_id()
        await self._client.http.put(
            f"/channels/{channel_id}/pins/{_snowflake(message)}",
            audit_log_reason=reason,
        )

    async def unpin_message(self, message: MessageLike, *, reason: Optional[str] = None) -> None:
        channel_id = await self._resolve_channel_id()
        await self._client.http.delete(
            f"/channels/{channel_id}/pins/{_snowflake(message)}",
            audit_log_reason=reason,
        )

    def typing(self) -> Typing:
        """Show the typing indicator.

        ``await channel.typing()`` sends a single indicator, which the
        platform shows for about ten seconds. ``async with channel.typing():``
        keeps it alive for the duration of the block::

            async with channel.typing():
                report = await build_report()
            await channel.post(report)
        """
        return Typing(self)


class Typing:
    """Awaitable and async context manager returned by :meth:`Messageable.typing`."""

    def __init__(self, target: Messageable) -> None:
        self._target = target
        self._task: Optional[asyncio.Task[None]] = None

    async def _ping(self, channel_id: int) -> None:
        await self._target._client.http.post(f"/channels/{channel_id}/typing")

    async def trigger(self) -> None:
        await self._ping(await self._target._resolve_channel_id())

    def __await__(self):
        return self.trigger().__await__()

    async def _keep_alive(self, channel_id: int) -> None:
        while True:
            try:
                await self._ping(channel_id)
            except ParleyError as exc:
                logger.warning("Typing indicator failed in channel %s: %s", channel_id, exc)
            await asyncio.sleep(TYPING_INTERVAL)

    async def __aenter__(self) -> Typing:
        channel_id = await self._target._resolve_channel_id()
        self._task = asyncio.create_task(self._keep_alive(channel_id))
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled():
            # the keep-alive died on its own; surface its error
            task.result()


class Connectable:
    """Mixin for voice-capable channels."""

    async def connect(self) -> None:
        raise UnsupportedCapabilityError("Voice connections are not provided by parley")
