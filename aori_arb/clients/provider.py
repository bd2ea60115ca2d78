"""
Aori exchange provider.
Owns the request and feed websockets, the request id counter and the
wallet session, and exposes one method per protocol operation.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional, Union

import websockets
from web3 import AsyncWeb3, Web3, WebSocketProvider

from ..constants import MARKET_FEED_URL, REQUEST_URL
from ..exceptions import ExchangeConnectionError, SigningError, TransportError
from ..models.order import Order
from ..utils.logger import get_logger
from .payloads import (
    RequestIdCounter,
    create_account_orders_payload,
    create_auth_wallet_payload,
    create_cancel_order_payload,
    create_check_auth_payload,
    create_make_order_payload,
    create_order_status_payload,
    create_ping_payload,
    create_subscribe_orderbook_payload,
    create_take_order_payload,
    create_view_orderbook_payload,
)
from .signer import SigningContext

logger = get_logger("provider")


@dataclass(frozen=True)
class WalletIdentity:
    """Authenticated wallet session: address, chain and address signature."""
    address: str
    chain_id: int
    signature: str


async def resolve_chain_id(node_url: str) -> int:
    """Ask a blockchain node for its chain id."""
    if node_url.startswith(("ws://", "wss://")):
        async with AsyncWeb3(WebSocketProvider(node_url)) as w3:
            return await w3.eth.chain_id

    def _query() -> int:
        w3 = Web3(Web3.HTTPProvider(node_url))
        return w3.eth.chain_id

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _query)


async def connect_websockets(request_url: str, feed_url: str):
    """Open the request and feed sockets concurrently."""
    results = await asyncio.gather(
        websockets.connect(request_url),
        websockets.connect(feed_url),
        return_exceptions=True
    )
    errors = [r for r in results if isinstance(r, BaseException)]
    if errors:
        for conn in results:
            if not isinstance(conn, BaseException):
                await conn.close()
        raise ExchangeConnectionError(f"Failed to connect to Aori websockets: {errors[0]}") from errors[0]
    return results[0], results[1]


class _SocketHalf:
    """One websocket with independent send and receive locks."""

    def __init__(self, name: str, conn):
        self.name = name
        self.conn = conn
        self._send_lock = asyncio.Lock()
        self._recv_lock = asyncio.Lock()

    async def send(self, text: str) -> None:
        async with self._send_lock:
            try:
                await self.conn.send(text)
            except (websockets.ConnectionClosed, OSError) as e:
                raise TransportError(f"{self.name} socket write failed: {e}") from e

    async def recv(self) -> Optional[Union[str, bytes]]:
        async with self._recv_lock:
            try:
                return await self.conn.recv()
            except websockets.ConnectionClosedOK:
                return None
            except (websockets.ConnectionClosed, OSError) as e:
                raise TransportError(f"{self.name} socket read failed: {e}") from e

    async def close(self) -> None:
        await self.conn.close()


class AoriProvider:
    """
    Client for the Aori order exchange.

    Two sockets: the request socket carries JSON-RPC requests and their
    responses, the feed socket carries the orderbook subscription. Writes
    do not wait for responses; callers correlate by the payload id.
    """

    def __init__(
        self,
        request_conn,
        feed_conn,
        signer: Optional[SigningContext] = None,
        identity: Optional[WalletIdentity] = None,
        counter: Optional[RequestIdCounter] = None
    ):
        """
        Initialize provider around already-open sockets.

        Args:
            request_conn: Connected request websocket
            feed_conn: Connected feed websocket
            signer: Wallet signer, None for an unauthenticated provider
            identity: Wallet session data
            counter: Request id counter (a new one by default)
        """
        self._request = _SocketHalf("request", request_conn)
        self._feed = _SocketHalf("feed", feed_conn)
        self.signer = signer
        self.identity = identity
        self.counter = counter or RequestIdCounter()

    @classmethod
    async def connect(
        cls,
        request_url: str = REQUEST_URL,
        feed_url: str = MARKET_FEED_URL,
        private_key: Optional[str] = None,
        wallet_address: Optional[str] = None,
        node_url: Optional[str] = None
    ) -> "AoriProvider":
        """
        Connect both sockets and, when credentials are given, set up the
        wallet session.

        Raises:
            ExchangeConnectionError: if a socket or the node is unreachable
            SigningError: if the private key is malformed
        """
        logger.info(
            "Connecting to Aori",
            extra={"request_url": request_url, "feed_url": feed_url}
        )
        request_conn, feed_conn = await connect_websockets(request_url, feed_url)

        if not (private_key and wallet_address and node_url):
            logger.info("Aori provider connected without wallet")
            return cls(request_conn, feed_conn)

        try:
            chain_id = await resolve_chain_id(node_url)
            signer = SigningContext(private_key, chain_id)
            if signer.address.lower() != wallet_address.lower():
                raise SigningError(
                    f"wallet: address {wallet_address} does not match the private key ({signer.address})"
                )
            identity = WalletIdentity(
                address=wallet_address,
                chain_id=chain_id,
                signature=signer.sign_message(wallet_address),
            )
        except SigningError:
            await request_conn.close()
            await feed_conn.close()
            raise
        except Exception as e:
            await request_conn.close()
            await feed_conn.close()
            raise ExchangeConnectionError(f"Failed to resolve chain id from {node_url}: {e}") from e

        logger.info(
            "Aori provider connected",
            extra={"wallet": wallet_address, "chain_id": chain_id}
        )
        return cls(request_conn, feed_conn, signer=signer, identity=identity)

    @classmethod
    async def vanilla(
        cls,
        request_url: str = REQUEST_URL,
        feed_url: str = MARKET_FEED_URL
    ) -> "AoriProvider":
        """Connect without a wallet; only unauthenticated calls will work."""
        return await cls.connect(request_url, feed_url)

    @classmethod
    async def from_config(cls, config) -> "AoriProvider":
        """Connect using a loaded Config."""
        return await cls.connect(
            request_url=config.aori.request_url,
            feed_url=config.aori.feed_url,
            private_key=config.wallet.private_key,
            wallet_address=config.wallet.wallet_address,
            node_url=config.wallet.node_url,
        )

    @property
    def chain_id(self) -> Optional[int]:
        return self.identity.chain_id if self.identity else None

    def _require_signer(self) -> SigningContext:
        if self.signer is None or not self.signer.can_sign:
            raise SigningError("wallet: add wallet private key to use this call")
        return self.signer

    def _require_identity(self) -> WalletIdentity:
        if self.identity is None:
            raise SigningError("wallet: add wallet private key to authenticate")
        return self.identity

    def _require_chain_id(self) -> int:
        if self.chain_id is None:
            raise SigningError("chain_id: chain id is not set")
        return self.chain_id

    # Generic send

    async def send(self, payload: Any) -> None:
        """
        Write a payload as one text frame on the request socket.

        Raises:
            TransportError: on write failure
        """
        await self._request.send(json.dumps(payload))
        logger.debug("Payload sent", extra={"request_id": _payload_id(payload)})

    async def send_feed(self, payload: Any) -> None:
        """Write a payload as one text frame on the feed socket."""
        await self._feed.send(json.dumps(payload))

    async def recv_request(self) -> Optional[Union[str, bytes]]:
        """Read one frame from the request socket; None once closed."""
        return await self._request.recv()

    async def recv_feed(self) -> Optional[Union[str, bytes]]:
        """Read one frame from the feed socket; None once closed."""
        return await self._feed.recv()

    # Specific requests

    async def ping(self) -> dict:
        payload = create_ping_payload(self.counter)
        await self.send(payload)
        return payload

    async def auth_wallet(self) -> dict:
        identity = self._require_identity()
        payload = create_auth_wallet_payload(self.counter, identity.address, identity.signature)
        await self.send(payload)
        return payload

    async def check_auth(self, jwt: str) -> dict:
        payload = create_check_auth_payload(self.counter, jwt)
        await self.send(payload)
        return payload

    async def view_orderbook(
        self,
        base: str,
        quote: str,
        side: str,
        limit: Optional[int] = None
    ) -> dict:
        payload = create_view_orderbook_payload(
            self.counter, self._require_chain_id(), base, quote, side, limit
        )
        await self.send(payload)
        return payload

    async def make_order(self, order: Order) -> dict:
        signer = self._require_signer()
        payload = create_make_order_payload(
            self.counter, signer, order, self._require_chain_id()
        )
        await self.send(payload)
        return payload

    async def make_order_with_chain_id(self, order: Order, chain_id: int) -> dict:
        signer = self._require_signer()
        payload = create_make_order_payload(self.counter, signer, order, chain_id)
        await self.send(payload)
        return payload

    async def take_order(
        self,
        order: Order,
        order_id: str,
        seat_id: str,
        api_key: str
    ) -> dict:
        signer = self._require_signer()
        payload = create_take_order_payload(
            self.counter, signer, order, order_id, seat_id, api_key
        )
        await self.send(payload)
        return payload

    async def cancel_order(self, order_id: str, api_key: str) -> dict:
        signer = self._require_signer()
        payload = create_cancel_order_payload(self.counter, signer, order_id, api_key)
        await self.send(payload)
        return payload

    async def subscribe_orderbook(self) -> dict:
        """Subscribe on the feed socket; the ack arrives there as free text."""
        payload = create_subscribe_orderbook_payload(self.counter)
        await self.send_feed(payload)
        return payload

    async def account_orders(self) -> dict:
        identity = self._require_identity()
        payload = create_account_orders_payload(self.counter, identity.address, identity.signature)
        await self.send(payload)
        return payload

    async def order_status(self, order_hash: str) -> dict:
        payload = create_order_status_payload(self.counter, order_hash)
        await self.send(payload)
        return payload

    async def close(self) -> None:
        """Close both sockets."""
        await asyncio.gather(
            self._request.close(),
            self._feed.close(),
            return_exceptions=True
        )
        logger.info("Aori provider disconnected")

    def __repr__(self) -> str:
        wallet = self.identity.address if self.identity else None
        return f"AoriProvider(wallet={wallet!r}, last_id={self.counter.last_id})"


def _payload_id(payload: Any) -> Optional[int]:
    return payload.get("id") if isinstance(payload, dict) else None
