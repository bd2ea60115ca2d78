"""
Tests for the engine and executors.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from aori_arb.arbitrage.simple_arb import SimpleArb
from aori_arb.clients.provider import AoriProvider
from aori_arb.engine.collector import AoriCollector
from aori_arb.engine.core import Collector, Engine, Executor, Strategy
from aori_arb.engine.executor import AoriExecutor, LoggingExecutor, SendPayload
from aori_arb.exceptions import TransportError

from conftest import USDC, WETH, FakeConnection, make_frame, make_snapshot


class ListCollector(Collector):
    def __init__(self, events):
        self.events = events

    async def get_event_stream(self):
        async def stream():
            for event in self.events:
                yield event
        return stream()


class EchoStrategy(Strategy):
    def __init__(self):
        self.synced = False
        self.seen = []

    async def sync_state(self):
        self.synced = True

    async def process_event(self, event):
        self.seen.append(event)
        return [event * 10]


class FlakyExecutor(Executor):
    def __init__(self):
        self.executed = []

    async def execute(self, action):
        if action == 20:
            raise TransportError("write failed")
        self.executed.append(action)


class TestEngine:
    """Tests for Engine."""

    @pytest.mark.asyncio
    async def test_runs_events_in_order(self):
        strategy = EchoStrategy()
        executor = LoggingExecutor()
        engine = Engine(ListCollector([1, 2, 3]), strategy, executor)

        await engine.run()

        assert strategy.synced
        assert strategy.seen == [1, 2, 3]
        assert list(executor.actions) == [10, 20, 30]
        assert not engine.is_running
        assert engine.get_stats().events_processed == 3

    @pytest.mark.asyncio
    async def test_executor_failure_does_not_stop(self):
        """A failed action is counted and the next one still runs."""
        executor = FlakyExecutor()
        engine = Engine(ListCollector([1, 2, 3]), EchoStrategy(), executor)

        await engine.run()

        stats = engine.get_stats()
        assert executor.executed == [10, 30]
        assert stats.actions_dispatched == 2
        assert stats.actions_failed == 1

    @pytest.mark.asyncio
    async def test_stop(self):
        strategy = EchoStrategy()
        engine = Engine(ListCollector([1, 2, 3]), strategy, LoggingExecutor())

        original = strategy.process_event

        async def stop_after_first(event):
            engine.stop()
            return await original(event)

        strategy.process_event = stop_after_first
        await engine.run()

        assert strategy.seen == [1]

    @pytest.mark.asyncio
    async def test_end_to_end_over_fake_sockets(self, provider, request_conn):
        """Feed frames through collector and strategy to take payloads on the wire."""
        feed = FakeConnection([
            "Subscribed to orderbook updates",
            make_frame(make_snapshot("0xaaa", USDC, WETH, 20, 10)),
            make_frame(make_snapshot("0xbbb", WETH, USDC, 15, 12)),
        ])
        live = AoriProvider(request_conn, feed, signer=provider.signer, identity=provider.identity)
        strategy = SimpleArb(live.signer, live.counter, "key")
        engine = Engine(AoriCollector(live), strategy, AoriExecutor(live))

        await asyncio.wait_for(engine.run(), timeout=5)

        sent = request_conn.sent_payloads
        assert [p["method"] for p in sent] == ["aori_takeOrder", "aori_takeOrder"]
        assert [p["params"][0]["orderId"] for p in sent] == ["0xaaa", "0xbbb"]
        # Subscription took id 1
        assert [p["id"] for p in sent] == [2, 3]

    @pytest.mark.asyncio
    async def test_malformed_order_does_not_stop_engine(self, provider, request_conn):
        """An order with a non-address token is dropped; later orders still match."""
        bad = make_snapshot("0xbad", USDC, WETH, 20, 10).to_dict()
        bad["inputToken"] = 123
        feed = FakeConnection([
            json.dumps({"id": None, "result": {"type": "OrderCreated", "data": bad}}),
            make_frame(make_snapshot("0xaaa", USDC, WETH, 20, 10)),
            make_frame(make_snapshot("0xbbb", WETH, USDC, 15, 12)),
        ])
        live = AoriProvider(request_conn, feed, signer=provider.signer, identity=provider.identity)
        strategy = SimpleArb(live.signer, live.counter, "key")
        engine = Engine(AoriCollector(live), strategy, AoriExecutor(live))

        await asyncio.wait_for(engine.run(), timeout=5)

        assert [o.order_hash for o in strategy.ledger] == ["0xaaa", "0xbbb"]
        assert [p["params"][0]["orderId"] for p in request_conn.sent_payloads] == ["0xaaa", "0xbbb"]


class TestExecutors:
    """Tests for AoriExecutor and LoggingExecutor."""

    @pytest.mark.asyncio
    async def test_aori_executor_sends(self):
        provider = AsyncMock()
        action = SendPayload({"id": 4, "method": "aori_takeOrder", "params": []})

        await AoriExecutor(provider).execute(action)

        provider.send.assert_awaited_once_with(action.payload)

    @pytest.mark.asyncio
    async def test_aori_executor_reraises_transport_error(self):
        provider = AsyncMock()
        provider.send.side_effect = TransportError("closed")

        with pytest.raises(TransportError):
            await AoriExecutor(provider).execute(SendPayload({"id": 1, "method": "aori_ping"}))

    @pytest.mark.asyncio
    async def test_logging_executor_records(self):
        executor = LoggingExecutor()
        action = SendPayload({"id": 9, "method": "aori_takeOrder"})

        await executor.execute(action)

        assert list(executor.actions) == [action]
        assert executor.actions_seen == 1
        assert action.request_id == 9
        assert action.method == "aori_takeOrder"

    @pytest.mark.asyncio
    async def test_logging_executor_is_bounded(self):
        """Only the most recent actions are kept in simulation mode."""
        executor = LoggingExecutor(max_recent=3)

        for request_id in range(10):
            await executor.execute(SendPayload({"id": request_id, "method": "aori_takeOrder"}))

        assert [a.request_id for a in executor.actions] == [7, 8, 9]
        assert executor.actions_seen == 10
