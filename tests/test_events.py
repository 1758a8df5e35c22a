from __future__ import annotations

from socketio.exceptions import ConnectionError as PushConnectionError

from tableorder.events import (
    NEW_ORDER,
    ORDER_DELETED,
    ORDER_UPDATE,
    EventHub,
    Resequencer,
    SocketIOChannel,
    event_order_id,
    event_version,
)


class FakeClient:
    def __init__(self, fail: bool = False) -> None:
        self.handlers = {}
        self.connected = False
        self.fail = fail

    def on(self, name, handler):
        self.handlers[name] = handler

    def connect(self, url):
        if self.fail:
            raise PushConnectionError("refused")
        self.connected = True

    def disconnect(self):
        self.connected = False


def test_hub_unsubscribe():
    hub = EventHub()
    seen = []
    unsubscribe = hub.on(ORDER_UPDATE, seen.append)

    hub.emit(ORDER_UPDATE, 1)
    unsubscribe()
    hub.emit(ORDER_UPDATE, 2)

    assert seen == [1]
    assert hub.subscriber_count(ORDER_UPDATE) == 0


def test_hub_failing_handler_does_not_stop_others():
    hub = EventHub()
    seen = []

    def broken(payload):
        raise RuntimeError("boom")

    hub.on(NEW_ORDER, broken)
    hub.on(NEW_ORDER, seen.append)
    hub.emit(NEW_ORDER, {"_id": "a"})

    assert seen == [{"_id": "a"}]


def test_resequencer_orders_by_version():
    seq = Resequencer()

    assert seq.admit_update("a", 2)
    assert not seq.admit_update("a", 1)
    assert seq.admit_update("a", 2)
    assert seq.admit_update("a", None)
    assert seq.admit_update("b", 1)


def test_resequencer_tombstones_deleted_orders():
    seq = Resequencer()
    seq.admit_update("a", 1)

    assert not seq.admit_delete("a", 0)
    assert seq.admit_delete("a", None)
    assert seq.is_deleted("a")
    assert not seq.admit_update("a", 5)


def test_event_payload_helpers():
    assert event_order_id({"_id": "x"}) == "x"
    assert event_order_id({"id": "y"}) == "y"
    assert event_order_id("z") == "z"
    assert event_order_id(None) is None
    assert event_version({"seq": 3}) == 3.0
    assert event_version({"updatedAt": "not a date"}) is None
    assert event_version("z") is None


def test_channel_forwards_events_through_dispatch():
    hub = EventHub()
    client = FakeClient()
    dispatched = []

    def dispatch(fn, *args):
        dispatched.append(args)
        fn(*args)

    channel = SocketIOChannel(hub, "http://push.test", dispatch=dispatch, client=client)
    seen = []
    hub.on(ORDER_DELETED, seen.append)

    assert channel.connect() is True
    client.handlers[ORDER_DELETED]({"id": "a"})

    assert dispatched == [(ORDER_DELETED, {"id": "a"})]
    assert seen == [{"id": "a"}]
    assert set(client.handlers) == {NEW_ORDER, ORDER_UPDATE, ORDER_DELETED}

    channel.disconnect()
    assert channel.connected is False


def test_channel_connect_failure_is_reported():
    channel = SocketIOChannel(EventHub(), "http://push.test", client=FakeClient(fail=True))

    assert channel.connect() is False
    assert channel.connected is False
