#!/usr/bin/env python3
"""
Live view of the Aori orderbook feed.
Connects without a wallet, subscribes and prints every event.
"""

import asyncio

from aori_arb.clients.provider import AoriProvider
from aori_arb.engine.collector import AoriCollector
from aori_arb.models.events import OrderCreated, OrderCancelled, OrderTaken, Subscribed
from aori_arb.utils.logger import setup_logging


def describe(event) -> str:
    """One line per event."""
    if isinstance(event, Subscribed):
        return f"✅ {event.message}"

    data = event.data
    label = {
        OrderCreated: "🟢 CREATED  ",
        OrderCancelled: "🔴 CANCELLED",
        OrderTaken: "💱 TAKEN    ",
    }[type(event)]
    return (
        f"{label} {data.order_hash[:12]}… "
        f"{data.input_amount} {data.input_token[:8]}… -> "
        f"{data.output_amount} {data.output_token[:8]}… "
        f"(chain {data.chain_id})"
    )


async def main():
    setup_logging(level="WARNING", json_format=False)

    print("\n" + "="*60)
    print("🔌 AORI ORDERBOOK FEED")
    print("="*60)

    provider = await AoriProvider.vanilla()
    collector = AoriCollector(provider)

    try:
        stream = await collector.get_event_stream()
        async for event in stream:
            print(describe(event))
    finally:
        await collector.close()
        await provider.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nStopped.")
