"""
Notification Broadcaster.

Fans ride-lifecycle events out to every WebSocket connected at the time
of publication. Delivery is best-effort: no persistence, no replay, no
acknowledgement. Clients that need certainty poll the ride endpoints.

Two backends:
- Broadcaster: in-process fan-out, enough for a single API worker.
- RedisBroadcaster: publishes to a Redis channel; every worker relays
  the channel to its own sockets.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Set

from fastapi import WebSocket
from redis.exceptions import RedisError

from mototaxi.app.core.config import settings
from mototaxi.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger(__name__)


def make_envelope(event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"event": event, "data": payload}


class Broadcaster:
    """In-process publish/subscribe over the active WebSocket set."""

    def __init__(self, send_timeout: float = 1.0):
        self.active_connections: Set[WebSocket] = set()
        self.send_timeout = send_timeout

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.subscribe(websocket)

    def subscribe(self, websocket: WebSocket):
        self.active_connections.add(websocket)
        logger.info("Subscriber connected (%d active)", len(self.active_connections))

    def unsubscribe(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.discard(websocket)
            logger.info("Subscriber disconnected (%d active)", len(self.active_connections))

    async def publish(self, event: str, payload: Dict[str, Any]) -> None:
        """Fire-and-forget: never raises because a subscriber is gone."""
        await self.deliver(make_envelope(event, payload))

    async def deliver(self, message: Dict[str, Any]) -> int:
        """
        Send one message to the sockets connected right now.

        Returns:
            Number of subscribers the message reached
        """
        targets = list(self.active_connections)
        if not targets:
            return 0

        results = await asyncio.gather(
            *(asyncio.wait_for(ws.send_json(message), self.send_timeout) for ws in targets),
            return_exceptions=True,
        )

        delivered = 0
        for ws, outcome in zip(targets, results):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Dropping subscriber after failed send of '%s': %s",
                    message.get("event"), type(outcome).__name__,
                )
                self.unsubscribe(ws)
            else:
                delivered += 1
        return delivered

    async def start(self) -> None:
        """Nothing to run for the in-process backend."""

    async def stop(self) -> None:
        self.active_connections.clear()


class RedisBroadcaster(Broadcaster):
    """
    Broadcaster sharing one event stream across API workers.

    publish() goes to Redis; relay() (one task per worker) forwards
    channel messages to the local sockets.
    """

    def __init__(self, redis, channel: str, breaker: CircuitBreaker,
                 send_timeout: float = 1.0, retry_delay: float = 2.0):
        super().__init__(send_timeout=send_timeout)
        self.redis = redis
        self.channel = channel
        self.breaker = breaker
        self.retry_delay = retry_delay
        self._relay_task = None

    async def publish(self, event: str, payload: Dict[str, Any]) -> None:
        message = json.dumps(make_envelope(event, payload))
        try:
            await self.breaker.call(self.redis.publish, self.channel, message)
        except CircuitOpenError:
            logger.warning("Broadcast circuit open, dropped '%s'", event)
        except (RedisError, OSError) as exc:
            logger.warning("Redis publish of '%s' failed: %s", event, exc)

    async def relay(self) -> None:
        """Forward channel messages to local subscribers until cancelled."""
        while True:
            try:
                await self._listen()
                logger.warning("Broadcast relay stream ended, resubscribing in %ss", self.retry_delay)
            except (RedisError, OSError) as exc:
                logger.warning("Broadcast relay lost Redis (%s), retrying in %ss", exc, self.retry_delay)
            await asyncio.sleep(self.retry_delay)

    async def _listen(self) -> None:
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(self.channel)
        logger.info("Broadcast relay subscribed to %s", self.channel)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    envelope = json.loads(message["data"])
                except (TypeError, ValueError):
                    logger.warning("Ignoring malformed broadcast message")
                    continue
                await self.deliver(envelope)
        finally:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()

    async def start(self) -> None:
        if self._relay_task is None:
            self._relay_task = asyncio.create_task(self.relay())

    async def stop(self) -> None:
        if self._relay_task is not None:
            self._relay_task.cancel()
            try:
                await self._relay_task
            except asyncio.CancelledError:
                pass
            self._relay_task = None
        await super().stop()


def build_broadcaster() -> Broadcaster:
    """Create the broadcaster selected by settings.broadcast_backend."""
    if settings.broadcast_backend == "redis":
        from mototaxi.app.core.redis_client import redis_client

        breaker = CircuitBreaker(
            name="broadcast",
            failure_threshold=settings.broadcast_failure_threshold,
            reset_timeout=settings.broadcast_reset_timeout,
        )
        return RedisBroadcaster(redis_client, settings.broadcast_channel, breaker)
    return Broadcaster()


# Global broadcaster instance
broadcaster = build_broadcaster()


def get_broadcaster() -> Broadcaster:
    """FastAPI dependency returning the process-wide broadcaster."""
    return broadcaster
