"""Tests for the WebSocket change broadcaster."""

import asyncio
import json
from datetime import UTC, datetime

from starlette.websockets import WebSocketState

from daily_tracker.realtime.broadcaster import Broadcaster


class FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[str] = []
        self.fail = fail
        self.accepted = False
        self.client_state = WebSocketState.CONNECTING

    async def accept(self) -> None:
        self.accepted = True
        self.client_state = WebSocketState.CONNECTED

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(data)


def _run(coro):
    return asyncio.run(coro)


class TestBroadcast:
    def test_delivers_to_all_open_clients(self):
        async def scenario():
            hub = Broadcaster()
            a, b = FakeSocket(), FakeSocket()
            await hub.connect(a)
            await hub.connect(b)
            delivered = await hub.broadcast("task:created", {"id": "t1"})
            return delivered, a, b

        delivered, a, b = _run(scenario())
        assert delivered == 2
        assert json.loads(a.sent[0]) == {"event": "task:created", "data": {"id": "t1"}}
        assert a.sent == b.sent

    def test_failed_client_does_not_block_others(self):
        async def scenario():
            hub = Broadcaster()
            broken, healthy = FakeSocket(fail=True), FakeSocket()
            await hub.connect(broken)
            await hub.connect(healthy)
            delivered = await hub.broadcast("note:deleted", {"id": "n1"})
            return hub, delivered, healthy

        hub, delivered, healthy = _run(scenario())
        assert delivered == 1
        assert len(healthy.sent) == 1
        assert hub.client_count == 1

    def test_closed_clients_are_skipped(self):
        async def scenario():
            hub = Broadcaster()
            closed = FakeSocket()
            await hub.connect(closed)
            closed.client_state = WebSocketState.DISCONNECTED
            return hub, await hub.broadcast("job:updated", {}), closed

        hub, delivered, closed = _run(scenario())
        assert delivered == 0
        assert closed.sent == []
        assert hub.client_count == 0

    def test_payload_is_json_encoded(self):
        async def scenario():
            hub = Broadcaster()
            sock = FakeSocket()
            await hub.connect(sock)
            await hub.broadcast("job:created", {"createdAt": datetime(2026, 3, 2, tzinfo=UTC)})
            return sock

        sock = _run(scenario())
        assert json.loads(sock.sent[0])["data"]["createdAt"].startswith("2026-03-02T00:00:00")

    def test_disconnect(self):
        async def scenario():
            hub = Broadcaster()
            sock = FakeSocket()
            await hub.connect(sock)
            hub.disconnect(sock)
            return hub, await hub.broadcast("job:created", {}), sock

        hub, delivered, sock = _run(scenario())
        assert delivered == 0
        assert sock.sent == []


class TestPublish:
    def test_without_clients_is_a_no_op(self):
        Broadcaster().publish("job:created", {"id": "j1"})

    def test_schedules_on_the_running_loop(self):
        async def scenario():
            hub = Broadcaster()
            sock = FakeSocket()
            await hub.connect(sock)
            hub.publish("folder:created", {"id": "f1"})
            await asyncio.sleep(0.01)
            return sock

        sock = _run(scenario())
        assert json.loads(sock.sent[0])["event"] == "folder:created"


class TestHandleMessage:
    def test_ping_gets_pong(self):
        async def scenario():
            hub = Broadcaster()
            sock = FakeSocket()
            await hub.handle_message(sock, json.dumps({"type": "ping"}))
            return sock

        assert _run(scenario()).sent == [json.dumps({"type": "pong"})]

    def test_other_messages_ignored(self):
        async def scenario():
            hub = Broadcaster()
            sock = FakeSocket()
            await hub.handle_message(sock, json.dumps({"type": "subscribe"}))
            await hub.handle_message(sock, "not json")
            await hub.handle_message(sock, "[1, 2]")
            return sock

        assert _run(scenario()).sent == []
