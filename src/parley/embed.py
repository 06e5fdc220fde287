"""Embed value model -- structured rich-content documents attached to messages.

An :class:`Embed` is built by application code for sending, or rebuilt
from a received document with :meth:`Embed.from_data`. :meth:`Embed.to_hash`
produces the wire document and omits every attribute that is unset.

Plain strings assigned to :attr:`~Embed.author`, :attr:`~Embed.footer`,
:attr:`~Embed.image` or :attr:`~Embed.thumbnail` -- at construction or by
later assignment -- are converted into the matching wrapper::

    embed = Embed("Weekly report", color=0x5865F2)
    embed.image = "https://example.com/chart.png"
    embed.to_hash()["image"]   # {"url": "https://example.com/chart.png"}

``video`` and ``provider`` are only ever populated from received documents
and are never sent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Author(BaseModel):
    """Author block of an embed: ``Author(name, url=None, icon=None)``."""

    model_config = ConfigDict(validate_assignment=True)

    name: str
    url: Optional[str] = None
    icon: Optional[str] = None

    def __init__(
        self, name: str, url: Optional[str] = None, icon: Optional[str] = None, **data: Any
    ) -> None:
        super().__init__(name=name, url=url, icon=icon, **data)

    def to_hash(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url, "icon_url": self.icon}


class Footer(BaseModel):
    """Footer block of an embed: ``Footer(text, icon=None)``."""

    model_config = ConfigDict(validate_assignment=True)

    text: str
    icon: Optional[str] = None

    def __init__(self, text: str, icon: Optional[str] = None, **data: Any) -> None:
        super().__init__(text=text, icon=icon, **data)

    def to_hash(self) -> dict[str, Any]:
        return {"text": self.text, "icon_url": self.icon}


class EmbedField(BaseModel):
    """A name/value pair rendered in the embed body."""

    model_config = ConfigDict(validate_assignment=True)

    name: str
    value: str
    inline: bool = True

    def __init__(self, name: str, value: str, inline: bool = True, **data: Any) -> None:
        super().__init__(name=name, value=value, inline=inline, **data)

    def to_hash(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "inline": self.inline}


class Image(BaseModel):
    """Large image of an embed.

    ``proxy_url``, ``height`` and ``width`` are filled in by the platform and
    are only present on images decoded from a received document.
    """

    model_config = ConfigDict(validate_assignment=True)

    url: str
    proxy_url: Optional[str] = None
    height: Optional[int] = None
    width: Optional[int] = None

    def __init__(self, url: str, **data: Any) -> None:
        super().__init__(url=url, **data)

    def to_hash(self) -> dict[str, Any]:
        return {"url": self.url}


class Thumbnail(Image):
    """Small image shown in the top-right corner of an embed."""


class Video(BaseModel):
    """Video of a received embed. Read-only."""

    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    proxy_url: Optional[str] = None
    height: Optional[int] = None
    width: Optional[int] = None


class Provider(BaseModel):
    """Provider of a received embed. Read-only."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    url: Optional[str] = None


class Embed(BaseModel):
    """A rich embed.

    ``title`` and ``description`` may be passed positionally; everything
    else is keyword-only.

    Args:
        title: Title of the embed.
        description: Main text of the embed.
        url: URL the title links to.
        timestamp: Timestamp shown in the footer.
        color: Colour of the left border, as an int (``0xFF0000``) or any
            object convertible with ``int()``.
        author: An :class:`Author` or a plain author name.
        footer: A :class:`Footer` or plain footer text.
        image: An :class:`Image` or a plain image URL.
        thumbnail: A :class:`Thumbnail` or a plain image URL.
        fields: Ordered :class:`EmbedField` list.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    timestamp: Optional[datetime] = None
    color: Optional[int] = None
    author: Optional[Author] = None
    footer: Optional[Footer] = None
    image: Optional[Image] = None
    thumbnail: Optional[Thumbnail] = None
    fields: list[EmbedField] = Field(default_factory=list)
    type: str = Field(default="rich", frozen=True)
    video: Optional[Video] = Field(default=None, frozen=True)
    provider: Optional[Provider] = Field(default=None, frozen=True)

    def __init__(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        **data: Any,
    ) -> None:
        super().__init__(title=title, description=description, **data)

    @field_validator("color", mode="before")
    @classmethod
    def _coerce_color(cls, value: Any) -> Any:
        if value is None or isinstance(value, int):
            return value
        return int(value)

    @field_validator("author", "footer", "image", "thumbnail", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, str):
            return value
        if info.field_name == "author":
            return Author(value)
        if info.field_name == "footer":
            return Footer(value)
        if info.field_name == "thumbnail":
            return Thumbnail(value)
        return Image(value)

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> Embed:
        """Rebuild an embed from a received embed document."""
        footer = data.get("footer")
        author = data.get("author")
        return cls.model_validate(
            {
                "title": data.get("title"),
                "description": data.get("description"),
                "url": data.get("url"),
                "timestamp": data.get("timestamp"),
                "color": data.get("color"),
                "type": data.get("type", "rich"),
                "footer": (
                    {"text": footer.get("text", ""), "icon": footer.get("icon_url")}
                    if footer
                    else None
                ),
                "author": (
                    {
                        "name": author.get("name", ""),
                        "url": author.get("url"),
                        "icon": author.get("icon_url"),
                    }
                    if author
                    else None
                ),
                "image": data.get("image"),
                "thumbnail": data.get("thumbnail"),
                "video": data.get("video"),
                "provider": data.get("provider"),
                "fields": [
                    {
                        "name": f["name"],
                        "value": f["value"],
                        "inline": f.get("inline", False),
                    }
                    for f in data.get("fields", [])
                ],
            }
        )

    def to_hash(self) -> dict[str, Any]:
        """Serialize to the wire document, omitting unset attributes."""
        ret: dict[str, Any] = {"type": "rich"}
        if self.title is not None:
            ret["title"] = self.title
        if self.description is not None:
            ret["description"] = self.description
        if self.url is not None:
            ret["url"] = self.url
        if self.timestamp is not None:
            ret["timestamp"] = self.timestamp.isoformat()
        if self.color is not None:
            ret["color"] = self.color
        if self.footer is not None:
            ret["footer"] = self.footer.to_hash()
        if self.image is not None:
            ret["image"] = self.image.to_hash()
        if self.thumbnail is not None:
            ret["thumbnail"] = self.thumbnail.to_hash()
        if self.author is not None:
            ret["author"] = self.author.to_hash()
        if self.fields:
            ret["fields"] = [f.to_hash() for f in self.fields]
        return ret
