"""
Shared fixtures and fakes for the Aori bot tests.
"""

import asyncio
import json
from collections import deque
from typing import Optional

import pytest
import websockets

from aori_arb.clients.payloads import RequestIdCounter
from aori_arb.clients.provider import AoriProvider, WalletIdentity
from aori_arb.clients.signer import SigningContext
from aori_arb.models.events import OrderSnapshot
from aori_arb.models.order import ConsiderationItem, ItemType, OfferItem, Order


# Throwaway key from the eth-account documentation; never funded
TEST_PRIVATE_KEY = "0xb25c7db31feed9122727bf0939dc769a96564b2de4c4726d035b36ecf1e5b364"
TEST_CHAIN_ID = 5

USDC = "0xD3664B5e72B46eaba722aB6f43c22dBF40181954"
WETH = "0x2715Ccea428F8c7694f7e78B2C89cb454c5F7294"
OTHER_A = "0x1111111111111111111111111111111111111111"
OTHER_B = "0x2222222222222222222222222222222222222222"
OFFERER = "0x3333333333333333333333333333333333333333"


class FakeConnection:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, frames=()):
        self.frames = deque(frames)
        self.sent: list[str] = []
        self.closed = False
        self.send_error: Optional[BaseException] = None

    async def send(self, text):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(text)

    async def recv(self):
        await asyncio.sleep(0)
        if self.frames:
            frame = self.frames.popleft()
            if isinstance(frame, BaseException):
                raise frame
            return frame
        raise websockets.ConnectionClosedOK(None, None)

    async def close(self):
        self.closed = True

    @property
    def sent_payloads(self) -> list[dict]:
        return [json.loads(text) for text in self.sent]


def make_order(
    input_token: str,
    output_token: str,
    input_amount: int,
    output_amount: int,
    salt: int = 0
) -> Order:
    """ERC20-for-ERC20 order selling input_token for output_token."""
    return Order(
        offerer=OFFERER,
        offer=[OfferItem(
            item_type=ItemType.ERC20,
            token=input_token,
            start_amount=input_amount,
            end_amount=input_amount,
        )],
        consideration=[ConsiderationItem(
            item_type=ItemType.ERC20,
            token=output_token,
            recipient=OFFERER,
            start_amount=output_amount,
            end_amount=output_amount,
        )],
        start_time=1697240202000,
        end_time=1697326602000,
        salt=salt,
    )


def make_snapshot(
    order_hash: str,
    input_token: str,
    output_token: str,
    input_amount: int,
    output_amount: int,
    chain_id: int = TEST_CHAIN_ID,
    taken_at: Optional[int] = None
) -> OrderSnapshot:
    """Exchange view of an order, as carried by order events."""
    return OrderSnapshot(
        order=make_order(input_token, output_token, input_amount, output_amount),
        signature="0x" + "ab" * 65,
        order_hash=order_hash,
        input_token=input_token,
        output_token=output_token,
        input_amount=input_amount,
        output_amount=output_amount,
        chain_id=chain_id,
        active=True,
        created_at=1697240202000,
        last_updated_at=1697240202000,
        is_public=True,
        taken_at=taken_at,
    )


def make_frame(
    snapshot: OrderSnapshot,
    event_type: str = "OrderCreated",
    request_id: Optional[int] = None
) -> str:
    """Wire frame carrying one order event."""
    return json.dumps({
        "id": request_id,
        "result": {"type": event_type, "data": snapshot.to_dict()},
    })


@pytest.fixture
def signer():
    """Signer holding the test key."""
    return SigningContext(TEST_PRIVATE_KEY, TEST_CHAIN_ID)


@pytest.fixture
def counter():
    return RequestIdCounter()


@pytest.fixture
def request_conn():
    return FakeConnection()


@pytest.fixture
def feed_conn():
    return FakeConnection()


@pytest.fixture
def provider(request_conn, feed_conn, signer):
    """Authenticated provider over fake sockets."""
    identity = WalletIdentity(
        address=signer.address,
        chain_id=TEST_CHAIN_ID,
        signature=signer.sign_message(signer.address),
    )
    return AoriProvider(request_conn, feed_conn, signer=signer, identity=identity)


@pytest.fixture
def vanilla_provider(request_conn, feed_conn):
    """Provider without a wallet."""
    return AoriProvider(request_conn, feed_conn)
