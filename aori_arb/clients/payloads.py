"""
JSON-RPC request payloads for the Aori exchange.

Every constructor takes the shared RequestIdCounter and stamps the payload
with a fresh id. Payloads that need proof of authorship sign before taking
an id, so a signing failure never consumes one.
"""

import threading
from typing import Optional

from ..constants import JSONRPC_VERSION, METHOD_PREFIX
from ..exceptions import LockError
from ..models.order import Order
from .signer import SigningContext


class RequestIdCounter:
    """
    Monotonically increasing request id, safe to share between tasks and
    executor threads. One counter per provider; never a module global.
    """

    def __init__(self, start: int = 0, lock_timeout: float = 5.0):
        self._value = start
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout

    def next_id(self) -> int:
        """
        Increment and return the counter.

        Raises:
            LockError: if the counter lock cannot be acquired in time
        """
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise LockError("Timed out waiting for the request id lock")
        try:
            self._value += 1
            return self._value
        finally:
            self._lock.release()

    @property
    def last_id(self) -> int:
        return self._value


def _envelope(counter: RequestIdCounter, method: str, params: list) -> dict:
    return {
        "id": counter.next_id(),
        "jsonrpc": JSONRPC_VERSION,
        "method": f"{METHOD_PREFIX}{method}",
        "params": params,
    }


def create_ping_payload(counter: RequestIdCounter) -> dict:
    return _envelope(counter, "ping", [])


def create_auth_wallet_payload(
    counter: RequestIdCounter,
    wallet_addr: str,
    wallet_sig: str
) -> dict:
    """Authenticate a wallet with its signature over its own address."""
    return _envelope(counter, "authWallet", [{
        "address": wallet_addr,
        "signature": wallet_sig,
    }])


def create_check_auth_payload(counter: RequestIdCounter, jwt: str) -> dict:
    return _envelope(counter, "checkAuth", [{"auth": jwt}])


def create_view_orderbook_payload(
    counter: RequestIdCounter,
    chain_id: int,
    base: str,
    quote: str,
    side: str,
    limit: Optional[int] = None
) -> dict:
    """
    Query one side of a base/quote book.

    Args:
        side: "BUY" or "SELL"
        limit: Maximum orders returned (exchange default is 100)
    """
    side = side.upper()
    if side not in ("BUY", "SELL"):
        raise ValueError(f"side must be BUY or SELL, got {side!r}")

    params = {
        "chainId": chain_id,
        "query": {
            "base": base,
            "quote": quote,
        },
        "side": side,
    }
    if limit is not None:
        params["limit"] = limit
    return _envelope(counter, "viewOrderbook", [params])


def create_make_order_payload(
    counter: RequestIdCounter,
    signer: SigningContext,
    order: Order,
    chain_id: int,
    is_public: bool = True
) -> dict:
    """
    Place a new order, signed over its EIP-712 hash.

    Raises:
        SigningError: if the signer has no key
    """
    signature = signer.sign_order(order, chain_id)
    return _envelope(counter, "makeOrder", [{
        "order": {
            "signature": signature,
            "parameters": order.to_dict(),
        },
        "isPublic": is_public,
        "chainId": chain_id,
    }])


def create_take_order_payload(
    counter: RequestIdCounter,
    signer: SigningContext,
    order: Order,
    order_id: str,
    seat_id: str,
    api_key: str
) -> dict:
    """
    Take a resting order.

    Args:
        order: Parameters of the order being taken
        order_id: Its order hash
        seat_id: Seat to settle through
        api_key: Aori API key

    Raises:
        SigningError: if the signer has no key
    """
    signature = signer.sign_order(order)
    return _envelope(counter, "takeOrder", [{
        "order": {
            "signature": signature,
            "parameters": order.to_dict(),
        },
        "orderId": order_id,
        "seatId": seat_id,
        "apiKey": api_key,
    }])


def create_cancel_order_payload(
    counter: RequestIdCounter,
    signer: SigningContext,
    order_id: str,
    api_key: str
) -> dict:
    """
    Cancel an order. Unlike make/take, the signature is a personal-message
    signature over the order id string itself.

    Raises:
        SigningError: if the signer has no key
    """
    signature = signer.sign_message(order_id)
    return _envelope(counter, "cancelOrder", [{
        "orderId": order_id,
        "signature": signature,
        "apiKey": api_key,
    }])


def create_subscribe_orderbook_payload(counter: RequestIdCounter) -> dict:
    return _envelope(counter, "subscribeOrderbook", [])


def create_account_orders_payload(
    counter: RequestIdCounter,
    wallet_addr: str,
    wallet_sig: str
) -> dict:
    return _envelope(counter, "accountOrders", [{
        "offerer": wallet_addr,
        "signature": wallet_sig,
    }])


def create_order_status_payload(counter: RequestIdCounter, order_hash: str) -> dict:
    return _envelope(counter, "orderStatus", [{"orderHash": order_hash}])
