"""
Executors that dispatch strategy actions to the Aori exchange.
"""

from collections import deque
from dataclasses import dataclass

from ..clients.provider import AoriProvider
from ..exceptions import TransportError
from ..utils.logger import get_logger, TradeLogger
from .core import Executor

logger = get_logger("executor")
trade_logger = TradeLogger()


@dataclass(frozen=True)
class SendPayload:
    """Action: write a prebuilt request payload to the request socket."""
    payload: dict

    @property
    def request_id(self):
        return self.payload.get("id")

    @property
    def method(self):
        return self.payload.get("method")


class AoriExecutor(Executor[SendPayload]):
    """Sends action payloads through the provider."""

    def __init__(self, provider: AoriProvider):
        self.provider = provider

    async def execute(self, action: SendPayload) -> None:
        """
        Send one payload.

        Raises:
            TransportError: if the write fails
        """
        logger.debug("Received action", extra={"request_id": action.request_id})
        try:
            await self.provider.send(action.payload)
        except TransportError as e:
            trade_logger.payload_failed(action.request_id, action.method, str(e))
            raise
        trade_logger.payload_sent(action.request_id, action.method)


class LoggingExecutor(Executor[SendPayload]):
    """
    Simulation executor: records actions instead of sending them.

    Only the most recent max_recent actions are kept; actions_seen counts
    all of them.
    """

    def __init__(self, max_recent: int = 1000):
        self.actions: deque[SendPayload] = deque(maxlen=max_recent)
        self.actions_seen = 0

    async def execute(self, action: SendPayload) -> None:
        self.actions.append(action)
        self.actions_seen += 1
        logger.info(
            "[SIMULATION] Would send payload",
            extra={"request_id": action.request_id, "method": action.method}
        )
