"""Live stats stream, one broadcaster per connected WebSocket client."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from starlette.websockets import WebSocketDisconnect

from beamshare.exceptions import StoreError
from beamshare.schemas.system import StatsSnapshot

if TYPE_CHECKING:
    from starlette.websockets import WebSocket

    from beamshare.services.stats_store import StatsStore
    from beamshare.services.system_service import SystemMonitor

logger = logging.getLogger(__name__)

PING_FRAME = {"type": "ping"}
ERROR_FRAME = {"error": "Failed to retrieve stats"}

_CONNECTION_ERRORS = (WebSocketDisconnect, RuntimeError, OSError)


class StreamState(str, Enum):
    CONNECTING = "connecting"
    STREAMING = "streaming"
    CLOSED = "closed"


class StatsBroadcaster:
    """Pushes stats snapshots to one client until it goes away.

    While streaming, the main loop waits on three things at once: the refresh
    timer (send a fresh snapshot), the keepalive timer (send a ping frame) and
    the listener task, which ends when the client closes, errors, or stays
    silent past the read deadline. Any inbound frame, normally the client's
    ``{"type": "pong"}``, refreshes that deadline.
    """

    REFRESH_INTERVAL = 60.0  # seconds
    KEEPALIVE_INTERVAL = 30.0  # seconds
    READ_DEADLINE = 60.0  # seconds without an inbound frame = dead client

    def __init__(
        self,
        websocket: WebSocket,
        stats_store: StatsStore,
        monitor: SystemMonitor,
        refresh_interval: float | None = None,
        keepalive_interval: float | None = None,
        read_deadline: float | None = None,
    ):
        self._ws = websocket
        self._store = stats_store
        self._monitor = monitor
        self._refresh_interval = refresh_interval or self.REFRESH_INTERVAL
        self._keepalive_interval = keepalive_interval or self.KEEPALIVE_INTERVAL
        self._read_deadline = read_deadline or self.READ_DEADLINE
        self._state = StreamState.CONNECTING
        self._listener: asyncio.Task | None = None
        self._client_gone = False

    @property
    def state(self) -> StreamState:
        return self._state

    def _transition(self, new_state: StreamState) -> None:
        if self._state == StreamState.CLOSED or new_state == self._state:
            return
        logger.debug("Stats stream: %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    async def snapshot(self) -> dict[str, Any]:
        """Counters plus a host resource reading, ready for ``send_json``."""
        stats = await self._store.get_stats()
        frame = StatsSnapshot(
            downloads=stats.downloads,
            requests=stats.requests,
            uploads=stats.uploads,
            start_time=stats.start_time,
            system=self._monitor.snapshot(),
        )
        return frame.model_dump(mode="json", by_alias=True)

    async def run(self) -> None:
        """Serve the connection until it reaches ``CLOSED``."""
        try:
            await self._ws.accept()
            logger.debug("WebSocket connection established for stats")
            self._transition(StreamState.STREAMING)

            if not await self._send_snapshot(initial=True):
                return
            self._listener = asyncio.create_task(self._listen())
            await self._stream()
        finally:
            await self._close()

    async def _stream(self) -> None:
        refresh = self._timer(self._refresh_interval)
        keepalive = self._timer(self._keepalive_interval)
        try:
            while self._state == StreamState.STREAMING:
                done, _ = await asyncio.wait(
                    {refresh, keepalive, self._listener},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if self._listener in done:
                    logger.debug("WebSocket connection closed by client")
                    self._transition(StreamState.CLOSED)
                    break
                if keepalive in done:
                    keepalive = self._timer(self._keepalive_interval)
                    if not await self._send(PING_FRAME):
                        break
                if refresh in done:
                    refresh = self._timer(self._refresh_interval)
                    if not await self._send_snapshot():
                        break
        finally:
            refresh.cancel()
            keepalive.cancel()

    @staticmethod
    def _timer(interval: float) -> asyncio.Task:
        return asyncio.create_task(asyncio.sleep(interval))

    async def _listen(self) -> None:
        """Drain inbound frames; return when the client is gone or silent."""
        while True:
            try:
                message = await asyncio.wait_for(self._ws.receive(), timeout=self._read_deadline)
            except asyncio.TimeoutError:
                logger.debug("No frame from stats client within %.1fs, dropping it", self._read_deadline)
                return
            except _CONNECTION_ERRORS as e:
                logger.debug("WebSocket receive failed: %s", e)
                self._client_gone = True
                return
            if message.get("type") == "websocket.disconnect":
                self._client_gone = True
                return

    async def _send(self, payload: dict[str, Any]) -> bool:
        try:
            await self._ws.send_json(payload)
        except _CONNECTION_ERRORS as e:
            logger.debug("WebSocket send failed, connection closed: %s", e)
            self._client_gone = True
            self._transition(StreamState.CLOSED)
            return False
        return True

    async def _send_snapshot(self, initial: bool = False) -> bool:
        try:
            payload = await self.snapshot()
        except StoreError as e:
            logger.error("Failed to retrieve stats: %s", e)
            sent = await self._send(ERROR_FRAME)
            if initial:
                self._transition(StreamState.CLOSED)
                return False
            return sent

        if not await self._send(payload):
            return False
        logger.debug(
            "Sent stats: downloads=%d uploads=%d requests=%d",
            payload["downloads"], payload["uploads"], payload["requests"],
        )
        return True

    async def _close(self) -> None:
        self._transition(StreamState.CLOSED)
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        if not self._client_gone:
            try:
                await self._ws.close()
            except _CONNECTION_ERRORS as e:
                logger.debug("WebSocket already closed: %s", e)
