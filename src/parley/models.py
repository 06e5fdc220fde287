"""Pydantic configuration models shared across parley.

These models are serialised as JSON in the user's config directory and
loaded by :mod:`parley.config`. Wire-level data models (embeds, messages)
live in their own modules.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_BASE_URL = "https://discord.com/api/v10"


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every API call."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    max_retries: int = Field(
        default=3, description="Max retry attempts on connection errors and 5xx"
    )
    user_agent: str = Field(
        default="parley (https://github.com/parley-lib/parley)",
        description="User-Agent header sent with every request",
    )


class AllowedMentionsConfig(BaseModel):
    """Client-wide default mention policy.

    ``None`` leaves the switch unset so the platform default applies.
    """

    everyone: Optional[bool] = None
    roles: Optional[bool] = None
    users: Optional[bool] = None
    replied_user: Optional[bool] = None


class ExtensionsConfig(BaseModel):
    """Explicit extension allow/deny lists for entry-point discovery."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class ClientConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/parley/config.json``.

    Loaded by :func:`~parley.config.load_config`; see
    :func:`~parley.config.resolve_config` for the precedence chain.
    """

    token: Optional[str] = Field(
        default=None,
        description="Bot token, or a credential source such as env:VAR / file:/path",
    )
    base_url: str = Field(default=DEFAULT_BASE_URL, description="REST API root")
    request: RequestConfig = Field(default_factory=RequestConfig)
    allowed_mentions: AllowedMentionsConfig = Field(
        default_factory=AllowedMentionsConfig
    )
    extensions: ExtensionsConfig = Field(default_factory=ExtensionsConfig)
