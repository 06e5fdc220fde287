"""Message components (buttons, select menus) and their action-row serializer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from parley.exceptions import InvalidUsageError

ACTION_ROW_TYPE = 1
BUTTON_TYPE = 2
SELECT_MENU_TYPE = 3
SELECT_OPTION_MAX_OPTIONS = 25


class ButtonStyle(enum.IntEnum):
    PRIMARY = 1
    SECONDARY = 2
    SUCCESS = 3
    DANGER = 4
    LINK = 5


@dataclass
class Button:
    """A clickable button.

    Link buttons (``style=ButtonStyle.LINK``) carry ``url`` instead of
    ``custom_id``.
    """

    label: str
    style: ButtonStyle = ButtonStyle.SECONDARY
    custom_id: Optional[str] = None
    url: Optional[str] = None
    emoji: Optional[str] = None
    disabled: bool = False

    def to_hash(self) -> dict[str, Any]:
        button: dict[str, Any] = {
            "type": BUTTON_TYPE,
            "style": int(self.style),
            "label": self.label,
            "disabled": self.disabled,
        }
        if self.style == ButtonStyle.LINK:
            button["url"] = self.url
        else:
            button["custom_id"] = self.custom_id
        if self.emoji:
            button["emoji"] = {"name": self.emoji}
        return button


@dataclass
class SelectOption:
    label: str
    value: str
    description: Optional[str] = None
    emoji: Optional[str] = None
    default: bool = False

    def to_hash(self) -> dict[str, Any]:
        option: dict[str, Any] = {
            "label": self.label,
            "value": self.value,
            "default": self.default,
        }
        if self.description:
            option["description"] = self.description
        if self.emoji:
            option["emoji"] = {"name": self.emoji}
        return option


@dataclass
class SelectMenu:
    """A drop-down menu. Options beyond the platform limit of 25 are dropped."""

    custom_id: str
    options: list[SelectOption] = field(default_factory=list)
    placeholder: Optional[str] = None
    min_values: int = 1
    max_values: int = 1
    disabled: bool = False

    def to_hash(self) -> dict[str, Any]:
        select: dict[str, Any] = {
            "type": SELECT_MENU_TYPE,
            "custom_id": self.custom_id,
            "options": [o.to_hash() for o in self.options[:SELECT_OPTION_MAX_OPTIONS]],
            "min_values": self.min_values,
            "max_values": min(self.max_values, SELECT_OPTION_MAX_OPTIONS),
            "disabled": self.disabled,
        }
        if self.placeholder:
            select["placeholder"] = self.placeholder[:100]
        return select


Component = Union[Button, SelectMenu]
ComponentLayout = Union[Sequence[Component], Sequence[Sequence[Component]]]


def build_action_row(components: Sequence[Component]) -> dict[str, Any]:
    return {
        "type": ACTION_ROW_TYPE,
        "components": [c.to_hash() for c in components],
    }


def components_to_payload(components: ComponentLayout) -> list[dict[str, Any]]:
    """Serialize a component layout into action rows.

    A flat sequence of components is treated as one implicit row; a
    sequence of sequences is taken as already grouped rows. An empty
    layout yields an empty list, which clears the components on edit.

    Raises:
        InvalidUsageError: If the layout mixes components and rows, or a
            row holds anything but components.
    """
    if not components:
        return []
    if all(isinstance(c, (Button, SelectMenu)) for c in components):
        return [build_action_row(components)]  # type: ignore[arg-type]
    for row in components:
        if not isinstance(row, (list, tuple)) or not all(
            isinstance(c, (Button, SelectMenu)) for c in row
        ):
            raise InvalidUsageError(
                "components must be a flat list of components or a list of rows, "
                f"got {row!r}"
            )
    return [build_action_row(row) for row in components]
