"""
Collector / strategy / executor contract and a minimal engine that runs it.

Events are consumed on a single task so that strategy state is only ever
touched sequentially.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Generic, TypeVar

from ..utils.logger import get_logger

logger = get_logger("engine")

E = TypeVar("E")
A = TypeVar("A")


class Collector(ABC, Generic[E]):
    """Produces a stream of events."""

    @abstractmethod
    async def get_event_stream(self) -> AsyncIterator[E]:
        ...


class Strategy(ABC, Generic[E, A]):
    """Turns events into actions."""

    async def sync_state(self) -> None:
        """Load any initial state before events start flowing."""

    @abstractmethod
    async def process_event(self, event: E) -> list[A]:
        ...


class Executor(ABC, Generic[A]):
    """Carries out actions."""

    @abstractmethod
    async def execute(self, action: A) -> None:
        ...


@dataclass
class EngineStats:
    events_processed: int = 0
    actions_dispatched: int = 0
    actions_failed: int = 0


class Engine(Generic[E, A]):
    """
    Wires one collector, one strategy and one executor together.

    The strategy runs on the consuming task only. Executor failures are
    logged and do not stop the event loop.
    """

    def __init__(
        self,
        collector: Collector[E],
        strategy: Strategy[E, A],
        executor: Executor[A]
    ):
        self.collector = collector
        self.strategy = strategy
        self.executor = executor
        self._running = False
        self._stats = EngineStats()

    async def run(self) -> None:
        """Consume events until the stream ends or stop() is called."""
        self._running = True
        await self.strategy.sync_state()

        stream = await self.collector.get_event_stream()
        logger.info("Engine started")

        try:
            async for event in stream:
                if not self._running:
                    break
                self._stats.events_processed += 1
                actions = await self.strategy.process_event(event)
                for action in actions:
                    await self._dispatch(action)
        finally:
            self._running = False
            logger.info(
                "Engine stopped",
                extra={
                    "events_processed": self._stats.events_processed,
                    "actions_dispatched": self._stats.actions_dispatched,
                    "actions_failed": self._stats.actions_failed
                }
            )

    async def _dispatch(self, action: A) -> None:
        try:
            await self.executor.execute(action)
            self._stats.actions_dispatched += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._stats.actions_failed += 1
            logger.error(f"Action failed: {e}")

    def stop(self) -> None:
        """Stop after the current event."""
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> EngineStats:
        return self._stats
