# Orders and exchange events
from .order import Order, OfferItem, ConsiderationItem, ItemType, OrderType
from .events import (
    AoriEvent,
    AoriResponse,
    OrderSnapshot,
    Subscribed,
    OrderCreated,
    OrderCancelled,
    OrderTaken,
    decode_event,
    decode_response,
)

__all__ = [
    "Order", "OfferItem", "ConsiderationItem", "ItemType", "OrderType",
    "AoriEvent", "AoriResponse", "OrderSnapshot", "Subscribed",
    "OrderCreated", "OrderCancelled", "OrderTaken",
    "decode_event", "decode_response",
]
