"""
Slack RTM Session

One persistent websocket to Slack, with keep-alive and reconnection.

State machine:
  DISCONNECTED → CONNECTING → HANDSHAKING → LIVE → (CLOSING | FAILED) → ...

- CONNECTING:  rtm.connect bootstrap + websocket open
- HANDSHAKING: socket open, waiting for `hello`
- LIVE:        `hello` received, keep-alive running, messages dispatched
- FAILED:      close code != 1000 or write error, reconnect after backoff
- CLOSING:     local shutdown, no further reconnects

Exactly one reader (the run loop) and one write lock. Message ids come from
one sequence per session and are never reset across reconnects.
"""

import asyncio
import json
import logging
import random
from enum import Enum
from functools import partial
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError
from websockets.asyncio.client import connect as connect_websocket
from websockets.exceptions import ConnectionClosed
from websockets.frames import CloseCode

from gateway.context import Platform, RequestContext, bind_logger

from .schemas import RtmMessageEvent, RtmMessageFrame, RtmPingFrame

logger = logging.getLogger(__name__)


class RtmState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    LIVE = "live"
    CLOSING = "closing"
    FAILED = "failed"


class RtmWriteError(Exception):
    """A frame could not be written to the RTM socket."""
    pass


class MessageIdSequence:
    """
    Monotonic outbound frame ids shared by pings and replies.

    next() has no suspension point, so it is atomic on the event loop.
    """

    def __init__(self, start: int = 0):
        self._last = start

    @property
    def last(self) -> int:
        return self._last

    def next(self) -> int:
        self._last += 1
        return self._last


class SlackRtmSession:
    """
    Slack RTM adapter.

    Args:
        client: Object with `async rtm_connect() -> str` (SlackWebClient)
        submit: Executor entry point, called with (ctx, text) per message
        ping_interval: Seconds between keep-alive pings while LIVE
        ping_initial_delay: Seconds before the first ping after `hello`
        write_timeout: Per-frame write timeout in seconds
        backoff_base / backoff_max: Reconnect backoff bounds in seconds
        connect: Websocket connect factory, `connect(url)` usable with `async with`
    """

    def __init__(
        self,
        client,
        submit: Callable[[RequestContext, str], Any],
        ping_interval: float = 30.0,
        ping_initial_delay: float = 1.0,
        write_timeout: float = 10.0,
        backoff_base: float = 1.0,
        backoff_max: float = 60.0,
        connect: Optional[Callable] = None,
    ):
        self._client = client
        self._submit = submit
        self._ping_interval = ping_interval
        self._ping_initial_delay = ping_initial_delay
        self._write_timeout = write_timeout
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        # Application-level pings replace the library's protocol pings
        self._connect = connect or partial(connect_websocket, ping_interval=None)

        self._ids = MessageIdSequence()
        self._write_lock = asyncio.Lock()
        self._state = RtmState.DISCONNECTED
        self._live = asyncio.Event()
        self._ws = None
        self._reader_task: Optional[asyncio.Task] = None
        self._keepalive_task: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()
        self._closing = False
        self._attempt = 0

    # ========================================================================
    # STATE
    # ========================================================================

    @property
    def state(self) -> RtmState:
        return self._state

    @property
    def message_ids(self) -> MessageIdSequence:
        return self._ids

    def _set_state(self, state: RtmState) -> None:
        if state is self._state:
            return
        logger.debug(f"RTM state {self._state.value} -> {state.value}")
        self._state = state
        if state is RtmState.LIVE:
            self._live.set()
        else:
            self._live.clear()

    async def wait_until_live(self, timeout: Optional[float] = None) -> None:
        await asyncio.wait_for(self._live.wait(), timeout=timeout)

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def start(self) -> None:
        """Spawn the reader task (connect, read, reconnect)."""
        if self._reader_task is None or self._reader_task.done():
            self._closing = False
            self._reader_task = asyncio.create_task(self.run(), name="slack-rtm-reader")

    async def run(self) -> None:
        """Connect and read until closed locally or normally by Slack."""
        while not self._closing:
            self._set_state(RtmState.CONNECTING)
            normal_closure = False

            try:
                url = await self._client.rtm_connect()
                async with self._connect(url) as ws:
                    self._ws = ws
                    self._set_state(RtmState.HANDSHAKING)
                    async for raw in ws:
                        self._handle_frame(raw)
                    normal_closure = ws.close_code == CloseCode.NORMAL_CLOSURE
                    self._log_close(ws.close_code, ws.close_reason)
            except ConnectionClosed as e:
                self._log_close(
                    e.rcvd.code if e.rcvd else None,
                    e.rcvd.reason if e.rcvd else str(e),
                )
            except Exception as e:
                logger.warning(f"A RTM session error occurred: {e}", exc_info=True)
            finally:
                self._stop_keepalive()
                self._ws = None

            if self._closing:
                break
            if normal_closure:
                break

            self._set_state(RtmState.FAILED)
            delay = self._backoff_delay()
            self._attempt += 1
            logger.info(f"Reconnecting to Slack RTM in {delay:.2f}s (attempt {self._attempt})")
            await asyncio.sleep(delay)

        self._set_state(RtmState.DISCONNECTED)

    async def close(self) -> None:
        """
        Local shutdown: close the socket with 1000, then stop the keep-alive.
        Idempotent.
        """
        if self._closing:
            return
        self._closing = True
        self._set_state(RtmState.CLOSING)

        ws = self._ws
        if ws is not None:
            try:
                await ws.close(code=CloseCode.NORMAL_CLOSURE, reason="shutdown")
            except Exception as e:
                logger.warning(f"Error while closing RTM socket: {e}")

        self._stop_keepalive()

        if self._reader_task is not None:
            self._reader_task.cancel()
            await asyncio.gather(self._reader_task, return_exceptions=True)
            self._reader_task = None
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

        self._set_state(RtmState.DISCONNECTED)
        logger.info("Slack RTM session closed")

    def _backoff_delay(self) -> float:
        # Exponential backoff with jitter in [delay/2, delay]
        delay = min(self._backoff_max, self._backoff_base * (2 ** self._attempt))
        return random.uniform(delay / 2, delay)

    @staticmethod
    def _log_close(code: Optional[int], reason: Optional[str]) -> None:
        if code == CloseCode.NORMAL_CLOSURE:
            logger.info(f"The RTM session is closed because of code<{code}> reason<{reason}>")
        else:
            logger.error(f"The RTM session is closed because of code<{code}> reason<{reason}>")

    # ========================================================================
    # INBOUND
    # ========================================================================

    def _handle_frame(self, raw) -> None:
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-JSON RTM frame: {str(raw)[:100]}")
            return
        if not isinstance(frame, dict):
            return

        frame_type = frame.get("type")
        if frame_type == "hello" and self._state in (RtmState.HANDSHAKING, RtmState.LIVE):
            self._on_hello()
        elif frame_type == "message" and self._state is RtmState.LIVE:
            self._on_message(frame)

    def _on_hello(self) -> None:
        self._attempt = 0
        self._set_state(RtmState.LIVE)
        logger.info("Slack RTM session is live")
        self._start_keepalive()

    def _on_message(self, frame: dict) -> None:
        try:
            event = RtmMessageEvent.model_validate(frame)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed message frame: {e.error_count()} error(s)")
            return

        if not event.text or not event.channel:
            return

        ctx = RequestContext(
            platform=Platform.SLACK,
            reply_target=event.channel,
            text=event.text,
        )
        bind_logger(logger, ctx).debug(
            f"Received text<{event.text}> from channel<{event.channel}>"
        )
        self._submit(ctx, ctx.text)

    # ========================================================================
    # KEEP-ALIVE
    # ========================================================================

    def _start_keepalive(self) -> None:
        self._stop_keepalive()
        self._keepalive_task = asyncio.create_task(self._keepalive(), name="slack-rtm-keepalive")

    def _stop_keepalive(self) -> None:
        task = self._keepalive_task
        self._keepalive_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _keepalive(self) -> None:
        await asyncio.sleep(self._ping_initial_delay)
        while self._state is RtmState.LIVE:
            try:
                await self._send_frame(lambda msg_id: RtmPingFrame(id=msg_id))
            except RtmWriteError as e:
                logger.warning(f"Failed to ping Slack: {e}")
                return
            await asyncio.sleep(self._ping_interval)

    # ========================================================================
    # OUTBOUND
    # ========================================================================

    async def send_message(self, channel: str, text: str) -> int:
        """
        Write one message frame.

        Returns:
            The id assigned to the frame

        Raises:
            RtmWriteError: Session not live, write failed or timed out
        """
        return await self._send_frame(
            lambda msg_id: RtmMessageFrame(id=msg_id, channel=channel, text=text)
        )

    async def _send_frame(self, build: Callable[[int], BaseModel]) -> int:
        async with self._write_lock:
            ws = self._ws
            if ws is None or self._state is not RtmState.LIVE:
                raise RtmWriteError(f"RTM session is {self._state.value}")

            # Drawn under the lock so ids increase in wire order
            msg_id = self._ids.next()
            payload = build(msg_id).model_dump_json()
            try:
                await asyncio.wait_for(ws.send(payload), timeout=self._write_timeout)
            except (ConnectionClosed, OSError, asyncio.TimeoutError) as e:
                logger.error(f"Failed to write RTM frame id<{msg_id}>: {e!r}")
                self._fail_connection(ws)
                raise RtmWriteError(f"write of frame {msg_id} failed: {e!r}") from e
            return msg_id

    def _fail_connection(self, ws) -> None:
        """Leave LIVE and close the socket so the reader reconnects."""
        if self._closing:
            return
        self._set_state(RtmState.FAILED)
        self._stop_keepalive()
        task = asyncio.create_task(ws.close(code=CloseCode.INTERNAL_ERROR, reason="write failed"))
        self._background.add(task)
        task.add_done_callback(self._background.discard)


