"""Tests for message components and action-row layout."""

from __future__ import annotations

import pytest

from parley.components import (
    Button,
    ButtonStyle,
    SelectMenu,
    SelectOption,
    build_action_row,
    components_to_payload,
)
from parley.exceptions import InvalidUsageError


class TestButton:
    def test_interactive_button(self) -> None:
        button = Button("OK", style=ButtonStyle.PRIMARY, custom_id="ok", emoji="✅")
        assert button.to_hash() == {
            "type": 2,
            "style": 1,
            "label": "OK",
            "disabled": False,
            "custom_id": "ok",
            "emoji": {"name": "✅"},
        }

    def test_link_button_carries_url(self) -> None:
        data = Button("Docs", style=ButtonStyle.LINK, url="https://example.com").to_hash()
        assert data["url"] == "https://example.com"
        assert "custom_id" not in data


class TestSelectMenu:
    def test_options_capped(self) -> None:
        menu = SelectMenu(
            "pick",
            options=[SelectOption(str(i), str(i)) for i in range(30)],
            max_values=40,
        )
        data = menu.to_hash()
        assert len(data["options"]) == 25
        assert data["max_values"] == 25

    def test_placeholder_truncated(self) -> None:
        data = SelectMenu("pick", placeholder="x" * 150).to_hash()
        assert data["placeholder"] == "x" * 100

    def test_option_description(self) -> None:
        option = SelectOption("A", "a", description="first", default=True)
        assert option.to_hash() == {
            "label": "A",
            "value": "a",
            "default": True,
            "description": "first",
        }


class TestLayout:
    def test_empty_layout_clears(self) -> None:
        assert components_to_payload([]) == []

    def test_flat_list_is_one_row(self) -> None:
        a, b = Button("A", custom_id="a"), Button("B", custom_id="b")
        assert components_to_payload([a, b]) == [build_action_row([a, b])]

    def test_nested_lists_are_rows(self) -> None:
        a, b = Button("A", custom_id="a"), SelectMenu("m")
        rows = components_to_payload([[a], [b]])
        assert [row["type"] for row in rows] == [1, 1]
        assert rows[0]["components"] == [a.to_hash()]
        assert rows[1]["components"] == [b.to_hash()]

    def test_mixed_layout_rejected(self) -> None:
        a, b = Button("A", custom_id="a"), Button("B", custom_id="b")
        with pytest.raises(InvalidUsageError, match="list of rows"):
            components_to_payload([[a], b])

    def test_row_of_non_components_rejected(self) -> None:
        with pytest.raises(InvalidUsageError):
            components_to_payload([[Button("A", custom_id="a")], ["B"]])
