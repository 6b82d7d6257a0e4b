"""
Tests for the notification broadcaster.

Fake sockets stand in for WebSocket connections; a fake Redis client
stands in for the shared channel.
"""

import asyncio
import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from mototaxi.app.core.reliability import CircuitBreaker
from mototaxi.app.models.ride_enums import RideEvent
from mototaxi.app.services.broadcaster import Broadcaster, RedisBroadcaster, make_envelope


class FakeWebSocket:
    def __init__(self, fail=False, delay=0.0):
        self.accepted = False
        self.sent = []
        self.fail = fail
        self.delay = delay

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


class FakePubSub:
    def __init__(self, messages):
        self.messages = messages
        self.subscribed = []
        self.closed = False

    async def subscribe(self, channel):
        self.subscribed.append(channel)

    async def unsubscribe(self, channel):
        self.subscribed.remove(channel)

    async def aclose(self):
        self.closed = True

    async def listen(self):
        for message in self.messages:
            yield message


class FakeRedis:
    def __init__(self, fail=False, messages=()):
        self.published = []
        self.fail = fail
        self.calls = 0
        self.pubsub_instance = FakePubSub(list(messages))

    async def publish(self, channel, message):
        self.calls += 1
        if self.fail:
            raise RedisConnectionError("connection refused")
        self.published.append((channel, message))
        return 1

    def pubsub(self):
        return self.pubsub_instance


RIDE = {"id": "ride-1", "status": "PENDING"}


# In-process fan-out
@pytest.mark.asyncio
async def test_publish_reaches_every_subscriber():
    hub = Broadcaster()
    sockets = [FakeWebSocket() for _ in range(3)]
    for ws in sockets:
        await hub.connect(ws)

    await hub.publish(RideEvent.CREATED, RIDE)

    for ws in sockets:
        assert ws.accepted
        assert ws.sent == [{"event": "ride-created", "data": RIDE}]


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_noop():
    hub = Broadcaster()
    await hub.publish(RideEvent.CREATED, RIDE)
    assert await hub.deliver(make_envelope(RideEvent.CREATED, RIDE)) == 0


@pytest.mark.asyncio
async def test_late_subscriber_gets_no_replay():
    hub = Broadcaster()
    early, late = FakeWebSocket(), FakeWebSocket()
    await hub.connect(early)
    await hub.publish(RideEvent.CREATED, RIDE)
    await hub.connect(late)
    await hub.publish(RideEvent.STATUS_CHANGED, {**RIDE, "status": "ACCEPTED"})

    assert [m["event"] for m in early.sent] == ["ride-created", "ride-status-changed"]
    assert [m["event"] for m in late.sent] == ["ride-status-changed"]


@pytest.mark.asyncio
async def test_failed_socket_is_dropped_and_others_still_served():
    hub = Broadcaster()
    healthy, broken = FakeWebSocket(), FakeWebSocket(fail=True)
    await hub.connect(healthy)
    await hub.connect(broken)

    delivered = await hub.deliver(make_envelope(RideEvent.CREATED, RIDE))

    assert delivered == 1
    assert broken not in hub.active_connections
    assert healthy in hub.active_connections
    assert len(healthy.sent) == 1


@pytest.mark.asyncio
async def test_slow_socket_times_out_and_is_dropped():
    hub = Broadcaster(send_timeout=0.05)
    fast, slow = FakeWebSocket(), FakeWebSocket(delay=1.0)
    await hub.connect(fast)
    await hub.connect(slow)

    delivered = await hub.deliver(make_envelope(RideEvent.CREATED, RIDE))

    assert delivered == 1
    assert slow not in hub.active_connections
    assert fast.sent


@pytest.mark.asyncio
async def test_unsubscribed_socket_receives_nothing():
    hub = Broadcaster()
    ws = FakeWebSocket()
    await hub.connect(ws)
    hub.unsubscribe(ws)
    hub.unsubscribe(ws)

    await hub.publish(RideEvent.CREATED, RIDE)
    assert ws.sent == []


@pytest.mark.asyncio
async def test_stop_clears_subscribers():
    hub = Broadcaster()
    await hub.connect(FakeWebSocket())
    await hub.stop()
    assert hub.active_connections == set()


# Redis backend
@pytest.mark.asyncio
async def test_redis_publish_sends_envelope_to_channel():
    redis = FakeRedis()
    hub = RedisBroadcaster(redis, "rides", CircuitBreaker(name="test"))

    await hub.publish(RideEvent.CREATED, RIDE)

    channel, message = redis.published[0]
    assert channel == "rides"
    assert json.loads(message) == {"event": "ride-created", "data": RIDE}


@pytest.mark.asyncio
async def test_redis_publish_failure_is_swallowed(caplog):
    hub = RedisBroadcaster(FakeRedis(fail=True), "rides", CircuitBreaker(name="test"))

    await hub.publish(RideEvent.CREATED, RIDE)

    assert "Redis publish of 'ride-created' failed" in caplog.text


@pytest.mark.asyncio
async def test_redis_circuit_opens_after_repeated_failures():
    redis = FakeRedis(fail=True)
    breaker = CircuitBreaker(name="test", failure_threshold=2, reset_timeout=60)
    hub = RedisBroadcaster(redis, "rides", breaker)

    for _ in range(5):
        await hub.publish(RideEvent.CREATED, RIDE)

    assert breaker.is_open
    assert redis.calls == 2


@pytest.mark.asyncio
async def test_relay_delivers_channel_messages_to_local_sockets():
    envelope = make_envelope(RideEvent.STATUS_CHANGED, RIDE)
    redis = FakeRedis(messages=[
        {"type": "subscribe", "data": 1},
        {"type": "message", "data": "not json"},
        {"type": "message", "data": json.dumps(envelope)},
    ])
    hub = RedisBroadcaster(redis, "rides", CircuitBreaker(name="test"))
    ws = FakeWebSocket()
    await hub.connect(ws)

    await hub._listen()

    assert ws.sent == [envelope]
    assert redis.pubsub_instance.closed
    assert redis.pubsub_instance.subscribed == []


@pytest.mark.asyncio
async def test_relay_task_starts_and_stops():
    hub = RedisBroadcaster(FakeRedis(), "rides", CircuitBreaker(name="test"), retry_delay=0.01)

    await hub.start()
    assert hub._relay_task is not None

    await hub.stop()
    assert hub._relay_task is None
