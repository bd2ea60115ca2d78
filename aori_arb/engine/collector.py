"""
Aori event collector.
Drains the request and feed sockets into one ordered event stream.
"""

import asyncio
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from ..clients.provider import AoriProvider
from ..constants import SUBSCRIBED_SENTINEL
from ..exceptions import DecodeError, TransportError
from ..models.events import AoriEvent, Subscribed, decode_response
from ..utils.logger import get_logger
from .core import Collector

logger = get_logger("collector")

# Marks the end of one socket's stream on the shared queue
_CLOSED = object()


class SocketState(Enum):
    """Lifecycle of one drained socket."""
    CONNECTED = "connected"
    DRAINING = "draining"
    CLOSED = "closed"


def process_payload(payload: Union[str, bytes]) -> Optional[AoriEvent]:
    """
    Turn one frame into an event.

    Returns None for frames that cannot be decoded; those are logged and
    dropped, never raised.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Dropping non-UTF-8 binary frame")
            return None

    if SUBSCRIBED_SENTINEL in payload:
        return Subscribed()

    try:
        return decode_response(payload).result
    except DecodeError as e:
        logger.warning(f"Failed to decode frame: {e}", extra={"frame": payload[:200]})
        return None


class AoriCollector(Collector[AoriEvent]):
    """
    Collector over both Aori sockets.

    One drain task per socket feeds an unbounded queue. Order is preserved
    within a socket; frames from the two sockets interleave arbitrarily.
    The stream ends once both sockets have closed.
    """

    def __init__(self, provider: AoriProvider):
        self.provider = provider
        self._queue: asyncio.Queue = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []
        self._states: dict[str, SocketState] = {
            "request": SocketState.CONNECTED,
            "feed": SocketState.CONNECTED,
        }
        self._frames_dropped = 0

    async def get_event_stream(self) -> AsyncIterator[AoriEvent]:
        """Subscribe to the orderbook and start draining both sockets."""
        await self.provider.subscribe_orderbook()

        self._tasks = [
            asyncio.create_task(self._drain("request", self.provider.recv_request)),
            asyncio.create_task(self._drain("feed", self.provider.recv_feed)),
        ]
        return self._iterate(len(self._tasks))

    async def _iterate(self, open_sockets: int) -> AsyncIterator[AoriEvent]:
        while open_sockets:
            item = await self._queue.get()
            if item is _CLOSED:
                open_sockets -= 1
                continue
            yield item

    async def _drain(
        self,
        name: str,
        recv: Callable[[], Awaitable[Optional[Union[str, bytes]]]]
    ) -> None:
        self._set_state(name, SocketState.DRAINING)
        try:
            while True:
                frame = await recv()
                if frame is None:
                    break
                try:
                    event = process_payload(frame)
                except Exception as e:
                    logger.error(
                        f"Unexpected error processing {name} frame: {e!r}",
                        extra={"frame": str(frame)[:200]}
                    )
                    event = None
                if event is None:
                    self._frames_dropped += 1
                    continue
                self._queue.put_nowait(event)
        except TransportError as e:
            logger.error(f"Stopped draining {name} socket: {e}")
        finally:
            self._set_state(name, SocketState.CLOSED)
            self._queue.put_nowait(_CLOSED)

    def _set_state(self, name: str, state: SocketState) -> None:
        self._states[name] = state
        logger.info(f"{name} socket {state.value}")

    @property
    def states(self) -> dict[str, SocketState]:
        return dict(self._states)

    @property
    def frames_dropped(self) -> int:
        return self._frames_dropped

    async def close(self) -> None:
        """Cancel the drain tasks."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
