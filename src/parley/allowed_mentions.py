"""Allowed-mentions policy -- which mentions in a message actually notify."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from parley.models import AllowedMentionsConfig

MentionTargets = Union[bool, Sequence[int]]
"""``True``/``False`` toggles a whole category; a sequence allows only those ids."""


def _first_set(value: Any, fallback: Any) -> Any:
    return fallback if value is None else value


@dataclass(frozen=True)
class AllowedMentions:
    """Mention policy attached to an outgoing message.

    Every attribute left as ``None`` is taken from the ``other`` policy
    passed to :meth:`to_hash` (normally the client default), and from the
    platform default when neither sets it.

    Attributes:
        everyone: Whether ``@everyone`` / ``@here`` notify.
        roles: ``True``/``False`` for all roles, or the ids of the roles
            allowed to be mentioned.
        users: ``True``/``False`` for all users, or the ids of the users
            allowed to be mentioned.
        replied_user: Whether the author of the replied-to message is pinged.
    """

    everyone: Optional[bool] = None
    roles: Optional[MentionTargets] = None
    users: Optional[MentionTargets] = None
    replied_user: Optional[bool] = None

    @classmethod
    def from_config(cls, config: AllowedMentionsConfig) -> AllowedMentions:
        return cls(
            everyone=config.everyone,
            roles=config.roles,
            users=config.users,
            replied_user=config.replied_user,
        )

    def to_hash(self, other: Optional[AllowedMentions] = None) -> dict[str, Any]:
        """Serialize, filling unset attributes from *other*."""
        everyone = _first_set(self.everyone, other and other.everyone)
        roles = _first_set(self.roles, other and other.roles)
        users = _first_set(self.users, other and other.users)
        replied_user = _first_set(self.replied_user, other and other.replied_user)

        parse = ["everyone", "roles", "users"]
        payload: dict[str, Any] = {}
        if everyone is False:
            parse.remove("everyone")
        for key, targets in (("roles", roles), ("users", users)):
            if targets is False:
                parse.remove(key)
            elif not isinstance(targets, bool) and targets:
                parse.remove(key)
                payload[key] = [str(target) for target in targets]
        payload["parse"] = parse
        if replied_user is not None:
            payload["replied_user"] = replied_user
        return payload
