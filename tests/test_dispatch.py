"""Tests for the host event dispatcher."""

from __future__ import annotations

import logging
from types import MappingProxyType

import pytest

from parley.dispatch import EventDispatcher, EventHandler


def _recording_handler(log: list, label: str, **kwargs) -> EventHandler:
    async def callback(*args, **kw) -> None:
        log.append((label, args, kw))

    return EventHandler(callback, **kwargs)


class TestRegistration:
    def test_add_and_handlers(self) -> None:
        dispatcher = EventDispatcher()
        a = dispatcher.add("ready", EventHandler(print))
        assert dispatcher.handlers("ready") == (a,)
        assert dispatcher.event_names() == ["ready"]

    def test_remove_is_by_identity(self) -> None:
        dispatcher = EventDispatcher()
        a = EventHandler(print)
        twin = EventHandler(print)
        dispatcher.add("ready", a)

        assert a != twin
        assert dispatcher.remove("ready", twin) is False
        assert dispatcher.remove("ready", a) is True
        assert dispatcher.handlers("ready") == ()
        assert dispatcher.event_names() == []

    def test_remove_by_id(self) -> None:
        dispatcher = EventDispatcher()
        dispatcher.add("ready", EventHandler(print, id="x"))
        dispatcher.add("ready", EventHandler(print, id="x"))
        keep = dispatcher.add("ready", EventHandler(print, id="y"))
        assert dispatcher.remove_by_id("ready", "x") == 2
        assert dispatcher.handlers("ready") == (keep,)

    def test_add_and_remove_mapping(self) -> None:
        dispatcher = EventDispatcher()
        other = dispatcher.add("ready", EventHandler(print))
        contributed = {"ready": (EventHandler(print),), "message_create": (EventHandler(print),)}

        dispatcher.add_handlers(contributed)
        assert len(dispatcher.handlers("ready")) == 2

        dispatcher.remove_handlers(contributed)
        assert dispatcher.handlers("ready") == (other,)
        assert dispatcher.handlers("message_create") == ()


class TestDispatch:
    @pytest.mark.asyncio
    async def test_runs_in_registration_order(self) -> None:
        log: list = []
        dispatcher = EventDispatcher()
        for label in "abc":
            dispatcher.add("message_create", _recording_handler(log, label))

        count = await dispatcher.dispatch("message_create", "msg", edited=False)

        assert count == 3
        assert log == [(label, ("msg",), {"edited": False}) for label in "abc"]

    @pytest.mark.asyncio
    async def test_unknown_event(self) -> None:
        assert await EventDispatcher().dispatch("nothing") == 0

    @pytest.mark.asyncio
    async def test_once_handler_runs_once(self) -> None:
        log: list = []
        dispatcher = EventDispatcher()
        dispatcher.add(
            "ready", _recording_handler(log, "once", metadata=MappingProxyType({"once": True}))
        )
        dispatcher.add("ready", _recording_handler(log, "always"))

        await dispatcher.dispatch("ready")
        await dispatcher.dispatch("ready")

        assert [label for label, _, _ in log] == ["once", "always", "always"]

    @pytest.mark.asyncio
    async def test_once_handler_removed_before_running(self) -> None:
        dispatcher = EventDispatcher()
        calls: list[int] = []

        async def reentrant() -> None:
            calls.append(1)
            await dispatcher.dispatch("ready")

        dispatcher.add("ready", EventHandler(reentrant, metadata=MappingProxyType({"once": True})))
        await dispatcher.dispatch("ready")
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_failing_handler_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        log: list = []
        dispatcher = EventDispatcher()

        async def broken() -> None:
            raise RuntimeError("handler failed")

        dispatcher.add("ready", EventHandler(broken, id="broken"))
        dispatcher.add("ready", _recording_handler(log, "after"))

        with caplog.at_level(logging.ERROR, logger="parley.dispatch"):
            count = await dispatcher.dispatch("ready")

        assert count == 2
        assert [label for label, _, _ in log] == ["after"]
        assert "'broken' for event 'ready' raised" in caplog.text

    @pytest.mark.asyncio
    async def test_sync_callback(self) -> None:
        seen: list = []
        dispatcher = EventDispatcher()
        dispatcher.add("ready", EventHandler(seen.append))
        await dispatcher.dispatch("ready", 1)
        assert seen == [1]
