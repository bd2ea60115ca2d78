"""
Exchange events decoded from Aori websocket frames.

Every frame is a JSON-RPC style envelope ``{"id": ..., "result": ...}``
whose result is tagged by a free-text ``type`` field. Decoding is closed:
an unknown tag is a DecodeError, never a passthrough.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from ..constants import SUBSCRIBED_MESSAGE, SUBSCRIBED_SENTINEL
from ..exceptions import DecodeError
from .order import Order, parse_address, parse_str, parse_uint, require_field


class EventType(Enum):
    """Tag values of the ``type`` field."""
    SUBSCRIBED = SUBSCRIBED_SENTINEL
    ORDER_CREATED = "OrderCreated"
    ORDER_CANCELLED = "OrderCancelled"
    ORDER_TAKEN = "OrderTaken"


@dataclass(frozen=True)
class OrderSnapshot:
    """An order as reported by the exchange, with its resolved trade."""
    order: Order
    signature: str
    order_hash: str
    input_token: str
    output_token: str
    input_amount: int
    output_amount: int
    chain_id: int
    active: bool
    created_at: int
    last_updated_at: int
    is_public: bool
    rate: Optional[float] = None
    taken_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "OrderSnapshot":
        """
        Decode the ``data`` object of an order event.

        Raises:
            DecodeError: on missing fields or malformed values
        """
        created = require_field(data, "order")
        rate = data.get("rate")
        taken_at = data.get("takenAt")
        try:
            rate = float(rate) if rate is not None else None
        except (TypeError, ValueError):
            raise DecodeError(f"rate: not a number: {rate!r}") from None

        return cls(
            order=Order.from_dict(require_field(created, "parameters")),
            signature=parse_str(require_field(created, "signature"), "signature"),
            order_hash=parse_str(require_field(data, "orderHash"), "orderHash"),
            input_token=parse_address(require_field(data, "inputToken"), "inputToken"),
            output_token=parse_address(require_field(data, "outputToken"), "outputToken"),
            input_amount=parse_uint(require_field(data, "inputAmount"), "inputAmount"),
            output_amount=parse_uint(require_field(data, "outputAmount"), "outputAmount"),
            chain_id=parse_uint(require_field(data, "chainId"), "chainId"),
            active=bool(data.get("active", True)),
            created_at=parse_uint(data.get("createdAt", 0), "createdAt"),
            last_updated_at=parse_uint(data.get("lastUpdatedAt", 0), "lastUpdatedAt"),
            is_public=bool(data.get("isPublic", True)),
            rate=rate,
            taken_at=parse_uint(taken_at, "takenAt") if taken_at is not None else None,
        )

    def to_dict(self) -> dict:
        data = {
            "order": {
                "parameters": self.order.to_dict(),
                "signature": self.signature,
            },
            "orderHash": self.order_hash,
            "inputToken": self.input_token,
            "outputToken": self.output_token,
            "inputAmount": str(self.input_amount),
            "outputAmount": str(self.output_amount),
            "chainId": self.chain_id,
            "active": self.active,
            "createdAt": self.created_at,
            "lastUpdatedAt": self.last_updated_at,
            "isPublic": self.is_public,
        }
        if self.rate is not None:
            data["rate"] = self.rate
        if self.taken_at is not None:
            data["takenAt"] = self.taken_at
        return data


@dataclass(frozen=True)
class Subscribed:
    """Acknowledgement of the orderbook subscription."""
    message: str = SUBSCRIBED_MESSAGE


@dataclass(frozen=True)
class OrderCreated:
    data: OrderSnapshot


@dataclass(frozen=True)
class OrderCancelled:
    data: OrderSnapshot


@dataclass(frozen=True)
class OrderTaken:
    data: OrderSnapshot


AoriEvent = Union[Subscribed, OrderCreated, OrderCancelled, OrderTaken]

_ORDER_EVENTS = {
    EventType.ORDER_CREATED: OrderCreated,
    EventType.ORDER_CANCELLED: OrderCancelled,
    EventType.ORDER_TAKEN: OrderTaken,
}


@dataclass(frozen=True)
class AoriResponse:
    """Response envelope carrying one event."""
    id: Optional[int]
    result: AoriEvent


@dataclass(frozen=True)
class OrderbookView:
    """Reply to a viewOrderbook request."""
    id: Optional[int]
    orders: list[OrderSnapshot]


def decode_event(obj: Any) -> AoriEvent:
    """
    Decode a tagged event object.

    Raises:
        DecodeError: on a missing or unknown tag, or malformed data
    """
    if not isinstance(obj, dict):
        raise DecodeError(f"event must be an object, got {type(obj).__name__}")

    tag = obj.get("type")
    if not isinstance(tag, str):
        raise DecodeError("missing field 'type'")
    try:
        event_type = EventType(tag)
    except ValueError:
        raise DecodeError(f"unknown event type {tag!r}") from None

    if event_type is EventType.SUBSCRIBED:
        return Subscribed()

    data = require_field(obj, "data")
    if not isinstance(data, dict):
        raise DecodeError(f"{tag}: data must be an object")
    return _ORDER_EVENTS[event_type](OrderSnapshot.from_dict(data))


def _load_envelope(text: Union[str, bytes]) -> dict:
    try:
        envelope = json.loads(text)
    except (ValueError, RecursionError) as e:
        # ValueError also covers integers past the int-string digit limit
        raise DecodeError(f"invalid JSON: {str(e)[:200]}") from None
    if not isinstance(envelope, dict):
        raise DecodeError("envelope must be an object")
    if "result" not in envelope:
        raise DecodeError("missing field 'result'")
    request_id = envelope.get("id")
    if request_id is not None and (isinstance(request_id, bool) or not isinstance(request_id, int)):
        raise DecodeError(f"id must be an integer or null, got {request_id!r}")
    return envelope


def decode_response(text: Union[str, bytes]) -> AoriResponse:
    """Decode a ``{id, result}`` frame whose result is a tagged event."""
    envelope = _load_envelope(text)
    return AoriResponse(id=envelope.get("id"), result=decode_event(envelope["result"]))


def decode_orderbook_response(text: Union[str, bytes]) -> OrderbookView:
    """Decode a viewOrderbook reply: ``{id, result: {orders: [...]}}``."""
    envelope = _load_envelope(text)
    orders = require_field(envelope["result"], "orders")
    if not isinstance(orders, list):
        raise DecodeError("orders must be an array")
    return OrderbookView(
        id=envelope.get("id"),
        orders=[OrderSnapshot.from_dict(order) for order in orders],
    )
