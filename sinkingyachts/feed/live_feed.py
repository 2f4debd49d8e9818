"""Live database change feed over the Sinking Yachts WebSocket."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import aiohttp

from ..constants import CONNECT_TIMEOUT, FEED_HEARTBEAT, FEED_URL, RECONNECT_DELAY
from ..errors import DecodeError
from ..models import Change, ChangeType, ConnectionState, decode_change

logger = logging.getLogger(__name__)


class LiveFeed:
    """Keeps one WebSocket open to the push endpoint and dispatches change events."""

    def __init__(
        self,
        identity: str,
        *,
        url: str = FEED_URL,
        reconnect_delay: float = RECONNECT_DELAY,
        connect_timeout: float = CONNECT_TIMEOUT,
        heartbeat: Optional[float] = FEED_HEARTBEAT,
        on_add: Optional[Callable[[str], None]] = None,
        on_delete: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[DecodeError], None]] = None,
        on_state_change: Optional[Callable[[ConnectionState], None]] = None,
    ):
        """
        Initialize the feed.

        Args:
            identity: Value of the X-Identity header sent on connect
            url: WebSocket endpoint
            reconnect_delay: Fixed wait in seconds before every reconnect
            connect_timeout: Dial timeout in seconds
            heartbeat: Ping interval in seconds; the connection is dropped if a pong is missed
            on_add: Called once per domain of an "add" event
            on_delete: Called once per domain of a "delete" event
            on_error: Called with the DecodeError of a malformed frame
            on_state_change: Called on every connection state transition
        """
        self.identity = identity
        self.url = url
        self.reconnect_delay = reconnect_delay
        self.connect_timeout = connect_timeout
        self.heartbeat = heartbeat
        self.on_add = on_add
        self.on_delete = on_delete
        self.on_error = on_error
        self.on_state_change = on_state_change

        self._state = ConnectionState.DISCONNECTED
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

        self.connect_attempts = 0
        self.messages_received = 0
        self.decode_errors = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        self._state = state
        logger.debug(f"Feed state: {state.value}")
        if self.on_state_change:
            try:
                self.on_state_change(state)
            except Exception as e:
                logger.error(f"Error in feed state callback: {e}")

    def handle_message(self, raw: str | bytes) -> Change:
        """
        Decode one complete frame and dispatch its domains in order.

        Raises:
            DecodeError: If the frame is not a valid change event
        """
        change = decode_change(raw)
        self.messages_received += 1

        callback = self.on_add if change.type is ChangeType.ADD else self.on_delete
        for domain in change.domains:
            if callback is None:
                continue
            try:
                callback(domain)
            except Exception as e:
                logger.error(f"Error in {change.type.value} callback for {domain}: {e}")

        return change

    def _report_decode_error(self, error: DecodeError) -> None:
        self.decode_errors += 1
        logger.error(f"Failed to decode feed frame: {error.message}")
        if self.on_error:
            try:
                self.on_error(error)
            except Exception as e:
                logger.error(f"Error in feed error callback: {e}")

    async def _receive(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        """Consume messages until the socket closes or fails."""
        async for msg in ws:
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                try:
                    self.handle_message(msg.data)
                except DecodeError as e:
                    self._report_decode_error(e)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning(f"Feed connection error: {ws.exception()}")
                break

    async def _connect_once(self, session: aiohttp.ClientSession) -> None:
        self.connect_attempts += 1
        self._set_state(ConnectionState.CONNECTING)
        async with session.ws_connect(
            self.url,
            headers={"X-Identity": self.identity},
            heartbeat=self.heartbeat,
        ) as ws:
            self._ws = ws
            self._set_state(ConnectionState.CONNECTED)
            logger.info(f"Feed connected to {self.url}")
            try:
                await self._receive(ws)
            finally:
                self._ws = None
        logger.info(f"Feed connection closed (code={ws.close_code})")

    async def _wait_reconnect(self) -> None:
        """Sleep for the reconnect delay unless stop() is called first."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.reconnect_delay)
        except asyncio.TimeoutError:
            pass

    async def run(self) -> None:
        """Run the connect/receive/reconnect loop until stop() is called."""
        logger.info("Starting live feed...")
        timeout = aiohttp.ClientTimeout(total=None, connect=self.connect_timeout)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            while not self._stop_event.is_set():
                try:
                    await self._connect_once(session)
                except asyncio.CancelledError:
                    raise
                except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                    logger.error(f"Feed connection error: {e}")
                except Exception as e:
                    logger.exception(f"Unexpected feed error: {e}")
                finally:
                    self._set_state(ConnectionState.DISCONNECTED)

                if self._stop_event.is_set():
                    break
                logger.info(f"Reconnecting to feed in {self.reconnect_delay} seconds...")
                await self._wait_reconnect()

        logger.info("Live feed stopped")

    async def start(self) -> None:
        """Start the feed loop as a background task."""
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Stop the feed loop and close the connection."""
        task = self._task
        self._task = None
        self._stop_event.set()

        ws = self._ws
        if ws is not None and not ws.closed:
            await ws.close()

        if task:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self._set_state(ConnectionState.DISCONNECTED)
