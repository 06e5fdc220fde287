"""Tests for the Message model and message references."""

from __future__ import annotations

from parley.embed import Embed
from parley.message import Message, MessageReference


DOC = {
    "id": "1001",
    "channel_id": "20",
    "content": "hello",
    "author": {"id": "77", "username": "someone"},
    "timestamp": "2021-09-01T12:00:00+00:00",
    "flags": 4,
    "embeds": [{"type": "rich", "title": "T"}],
    "mention_everyone": False,
}


class TestFromData:
    def test_decodes_document(self) -> None:
        message = Message.from_data(DOC)
        assert message.id == 1001
        assert message.channel_id == 20
        assert message.content == "hello"
        assert message.author_id == 77
        assert message.embeds == [Embed.from_data({"type": "rich", "title": "T"})]

    def test_injects_guild_id(self) -> None:
        assert Message.from_data(DOC, guild_id=3).guild_id == 3

    def test_document_guild_id_wins(self) -> None:
        assert Message.from_data({**DOC, "guild_id": "5"}, guild_id=3).guild_id == 5

    def test_missing_guild_is_none(self) -> None:
        assert Message.from_data(DOC).guild_id is None

    def test_unknown_keys_kept(self) -> None:
        assert Message.from_data(DOC).model_extra["mention_everyone"] is False

    def test_suppressed_embeds(self) -> None:
        assert Message.from_data(DOC).suppressed_embeds is True
        assert Message.from_data({**DOC, "flags": 0}).suppressed_embeds is False


class TestReference:
    def test_message_to_reference(self) -> None:
        ref = Message.from_data(DOC, guild_id=3).to_reference(fail_if_not_exists=False)
        assert ref.to_hash() == {
            "message_id": "1001",
            "channel_id": "20",
            "guild_id": "3",
            "fail_if_not_exists": False,
        }

    def test_reference_is_its_own_reference(self) -> None:
        ref = MessageReference(message_id=1)
        assert ref.to_reference() is ref
        assert ref.to_hash() == {"message_id": "1", "fail_if_not_exists": True}
