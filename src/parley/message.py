"""Message data model decoded from the platform's message documents."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parley.embed import Embed


class MessageReference(BaseModel):
    """Reference to another message, used for replies.

    Attributes:
        fail_if_not_exists: When ``False`` the reply is sent as a plain
            message if the referenced message was deleted.
    """

    model_config = ConfigDict(frozen=True)

    message_id: int
    channel_id: Optional[int] = None
    guild_id: Optional[int] = None
    fail_if_not_exists: bool = True

    def to_reference(self) -> MessageReference:
        return self

    def to_hash(self) -> dict[str, Any]:
        ref: dict[str, Any] = {
            "message_id": str(self.message_id),
            "fail_if_not_exists": self.fail_if_not_exists,
        }
        if self.channel_id is not None:
            ref["channel_id"] = str(self.channel_id)
        if self.guild_id is not None:
            ref["guild_id"] = str(self.guild_id)
        return ref


class Message(BaseModel):
    """A message as returned by the REST API.

    ``guild_id`` is not part of every response shape; the messaging layer
    injects it from the channel the message was fetched through. Keys not
    modelled here are kept in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    channel_id: int
    guild_id: Optional[int] = None
    content: str = ""
    tts: bool = False
    pinned: bool = False
    flags: int = 0
    author_id: Optional[int] = None
    timestamp: Optional[datetime] = None
    edited_timestamp: Optional[datetime] = None
    embeds: list[Embed] = Field(default_factory=list)

    @field_validator("guild_id", mode="before")
    @classmethod
    def _empty_guild(cls, value: Any) -> Any:
        # DMs carry no guild; the injected context is then an empty string
        return value or None

    @field_validator("embeds", mode="before")
    @classmethod
    def _decode_embeds(cls, value: Any) -> Any:
        return [Embed.from_data(e) if isinstance(e, dict) else e for e in value or []]

    @classmethod
    def from_data(cls, data: dict[str, Any], guild_id: Optional[int] = None) -> Message:
        """Decode a message document, merging in the known parent guild id."""
        merged = {**data, "guild_id": data.get("guild_id") or guild_id}
        author = data.get("author")
        if isinstance(author, dict) and "id" in author:
            merged["author_id"] = author["id"]
        return cls.model_validate(merged)

    @property
    def suppressed_embeds(self) -> bool:
        return bool(self.flags & (1 << 2))

    def to_reference(self, fail_if_not_exists: bool = True) -> MessageReference:
        return MessageReference(
            message_id=self.id,
            channel_id=self.channel_id,
            guild_id=self.guild_id,
            fail_if_not_exists=fail_if_not_exists,
        )
