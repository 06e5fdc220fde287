"""Tests for posting messages through the messaging pipeline."""

from __future__ import annotations

import json

import pytest

from conftest import FakeAPI, request_json
from parley.allowed_mentions import AllowedMentions
from parley.client import Client
from parley.components import Button
from parley.embed import Embed
from parley.exceptions import ForbiddenError, InvalidUsageError
from parley.file import File
from parley.message import Message, MessageReference


CHANNEL = 20
DEFAULT_MENTIONS = {"parse": ["everyone", "roles", "users"]}


def _multipart_parts(request) -> tuple[str, list[bytes]]:
    """Split a recorded multipart request into its parts (headers + body, no delimiters)."""
    content_type = request.headers["content-type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    boundary = content_type.split("boundary=", 1)[1]
    chunks = request.content.split(f"--{boundary}".encode())
    assert chunks[0] == b""
    assert chunks[-1] == b"--\r\n"
    return boundary, [chunk[2:-2] for chunk in chunks[1:-1]]


# ---------------------------------------------------------------------------
# JSON bodies
# ---------------------------------------------------------------------------


class TestPostJson:
    @pytest.mark.asyncio
    async def test_plain_content(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL, content="hi")

        message = await client.channel(CHANNEL).post("hi")

        request = api.last
        assert request.method == "POST"
        assert request.url.path == f"/channels/{CHANNEL}/messages"
        assert request.headers["content-type"] == "application/json"
        assert request_json(request) == {
            "content": "hi",
            "tts": False,
            "allowed_mentions": DEFAULT_MENTIONS,
        }
        assert isinstance(message, Message)
        assert message.content == "hi"

    @pytest.mark.asyncio
    async def test_empty_content_omitted(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        await client.channel(CHANNEL).post("", embed=Embed("T"))
        body = request_json(api.last)
        assert "content" not in body
        assert body["embeds"] == [{"title": "T", "type": "rich"}]

    @pytest.mark.asyncio
    async def test_embeds_and_tts(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        await client.channel(CHANNEL).post(tts=True, embeds=[Embed("A"), Embed("B")])
        body = request_json(api.last)
        assert body["tts"] is True
        assert [e["title"] for e in body["embeds"]] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_embed_and_embeds_exclusive(self, client: Client, api: FakeAPI) -> None:
        with pytest.raises(InvalidUsageError):
            await client.channel(CHANNEL).post(embed=Embed("A"), embeds=[Embed("B")])
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_allowed_mentions_override_merged(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        client.allowed_mentions = AllowedMentions(everyone=False)

        await client.channel(CHANNEL).post("hi", allowed_mentions=AllowedMentions(users=[7]))

        assert request_json(api.last)["allowed_mentions"] == {
            "parse": ["roles"],
            "users": ["7"],
        }

    @pytest.mark.asyncio
    async def test_host_default_mentions(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        client.allowed_mentions = AllowedMentions(everyone=False, replied_user=False)
        await client.channel(CHANNEL).post("hi")
        assert request_json(api.last)["allowed_mentions"] == {
            "parse": ["roles", "users"],
            "replied_user": False,
        }

    @pytest.mark.asyncio
    async def test_reply_reference(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        channel = client.channel(CHANNEL, guild_id=3)

        await channel.post("re", reference=MessageReference(message_id=55, channel_id=CHANNEL))
        assert request_json(api.last)["message_reference"] == {
            "message_id": "55",
            "channel_id": str(CHANNEL),
            "fail_if_not_exists": True,
        }

    @pytest.mark.asyncio
    async def test_reply_to_message(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        original = Message.from_data({"id": "55", "channel_id": str(CHANNEL)}, guild_id=3)

        await client.channel(CHANNEL, guild_id=3).post("re", reference=original)
        assert request_json(api.last)["message_reference"]["guild_id"] == "3"

    @pytest.mark.asyncio
    async def test_components(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        await client.channel(CHANNEL).post("pick", components=[Button("Go", custom_id="go")])
        rows = request_json(api.last)["components"]
        assert rows == [{"type": 1, "components": [Button("Go", custom_id="go").to_hash()]}]

    @pytest.mark.asyncio
    async def test_mixed_component_layout_not_sent(self, client: Client, api: FakeAPI) -> None:
        go = Button("Go", custom_id="go")
        with pytest.raises(InvalidUsageError):
            await client.channel(CHANNEL).post("pick", components=[[go], go])
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_guild_id_injected(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        message = await client.channel(CHANNEL, guild_id=3).post("hi")
        assert message.guild_id == 3

    @pytest.mark.asyncio
    async def test_send_message_alias(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        await client.channel(CHANNEL).send_message("hi")
        assert request_json(api.last)["content"] == "hi"

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, client: Client, api: FakeAPI) -> None:
        api.route(
            "POST",
            f"/channels/{CHANNEL}/messages",
            json={"code": 50013, "message": "Missing Permissions"},
            status=403,
        )
        with pytest.raises(ForbiddenError) as exc_info:
            await client.channel(CHANNEL).post("hi")
        assert exc_info.value.code == 50013


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


class TestPostAttachments:
    @pytest.mark.asyncio
    async def test_single_file(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        await client.channel(CHANNEL).post("hi", file=File(b"1,2", "data.csv", "text/csv"))

        _boundary, parts = _multipart_parts(api.last)
        assert len(parts) == 2
        json_headers, json_body = parts[0].split(b"\r\n\r\n", 1)
        assert b'name="payload_json"' in json_headers
        assert json.loads(json_body) == {
            "content": "hi",
            "tts": False,
            "allowed_mentions": DEFAULT_MENTIONS,
        }
        file_headers, file_body = parts[1].split(b"\r\n\r\n", 1)
        assert b'name="files[0]"; filename="data.csv"' in file_headers
        assert b"Content-Type: text/csv" in file_headers
        assert file_body == b"1,2"

    @pytest.mark.asyncio
    async def test_json_part_matches_json_body(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        channel = client.channel(CHANNEL)
        kwargs = {"embed": Embed("T", color=1), "tts": True}

        await channel.post("same", **kwargs)
        plain = request_json(api.last)
        await channel.post("same", file=File(b"x", "x.txt"), **kwargs)
        _boundary, parts = _multipart_parts(api.last)

        assert json.loads(parts[0].split(b"\r\n\r\n", 1)[1]) == plain

    @pytest.mark.asyncio
    async def test_several_files(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        files = [File(b"a", "a.txt"), File(b"b", "b.txt"), File(b"c", "c.txt")]
        await client.channel(CHANNEL).post(files=files)

        _boundary, parts = _multipart_parts(api.last)
        assert [p.split(b"\r\n\r\n", 1)[1] for p in parts[1:]] == [b"a", b"b", b"c"]
        assert b'name="files[2]"; filename="c.txt"' in parts[3]

    @pytest.mark.asyncio
    async def test_file_and_files_exclusive(self, client: Client) -> None:
        with pytest.raises(InvalidUsageError):
            await client.channel(CHANNEL).post(file=File(b"a"), files=[File(b"b")])

    @pytest.mark.asyncio
    async def test_boundary_unique_per_request(self, client: Client, api: FakeAPI) -> None:
        api.route_message(CHANNEL)
        channel = client.channel(CHANNEL)
        await channel.post(file=File(b"a"))
        await channel.post(file=File(b"a"))
        first, second = (_multipart_parts(r)[0] for r in api.requests)
        assert first != second
