"""
Seaport order model used by the Aori exchange.

Orders travel on the wire as JSON with every numeric field encoded as a
decimal string, since amounts and salts routinely exceed 64 bits. What gets
signed is not that JSON but the order's EIP-712 hash under the Seaport
domain.
"""

import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

from eth_account.messages import encode_typed_data
from eth_utils import is_hex_address, is_hexstr, keccak
from web3 import Web3

from ..constants import (
    CURRENT_SEAPORT_ADDRESS,
    CURRENT_SEAPORT_VERSION,
    DEFAULT_CONDUIT_KEY,
    DEFAULT_DURATION_MS,
    DEFAULT_ORDER_ADDRESS,
    DEFAULT_ZONE_HASH,
    SEAPORT_NAME,
)
from ..exceptions import DecodeError


class ItemType(IntEnum):
    """Seaport item types."""
    NATIVE = 0
    ERC20 = 1
    ERC721 = 2
    ERC1155 = 3
    ERC721_WITH_CRITERIA = 4
    ERC1155_WITH_CRITERIA = 5


class OrderType(IntEnum):
    """Seaport order types."""
    FULL_OPEN = 0
    PARTIAL_OPEN = 1
    FULL_RESTRICTED = 2
    PARTIAL_RESTRICTED = 3
    CONTRACT = 4


# EIP-712 type definitions, fields in canonical (struct) order
EIP712_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "OrderComponents": [
        {"name": "offerer", "type": "address"},
        {"name": "zone", "type": "address"},
        {"name": "offer", "type": "OfferItem[]"},
        {"name": "consideration", "type": "ConsiderationItem[]"},
        {"name": "orderType", "type": "uint8"},
        {"name": "startTime", "type": "uint256"},
        {"name": "endTime", "type": "uint256"},
        {"name": "zoneHash", "type": "bytes32"},
        {"name": "salt", "type": "uint256"},
        {"name": "conduitKey", "type": "bytes32"},
        {"name": "counter", "type": "uint256"},
    ],
    "OfferItem": [
        {"name": "itemType", "type": "uint8"},
        {"name": "token", "type": "address"},
        {"name": "identifierOrCriteria", "type": "uint256"},
        {"name": "startAmount", "type": "uint256"},
        {"name": "endAmount", "type": "uint256"},
    ],
    "ConsiderationItem": [
        {"name": "itemType", "type": "uint8"},
        {"name": "token", "type": "address"},
        {"name": "identifierOrCriteria", "type": "uint256"},
        {"name": "startAmount", "type": "uint256"},
        {"name": "endAmount", "type": "uint256"},
        {"name": "recipient", "type": "address"},
    ],
}


def seaport_domain(chain_id: int) -> dict:
    """EIP-712 domain of the Seaport contract on a given chain."""
    return {
        "name": SEAPORT_NAME,
        "version": CURRENT_SEAPORT_VERSION,
        "chainId": chain_id,
        "verifyingContract": Web3.to_checksum_address(CURRENT_SEAPORT_ADDRESS),
    }


def parse_uint(value: Any, name: str) -> int:
    """
    Parse a wire numeric field.

    Accepts JSON integers, decimal strings and 0x-prefixed hex strings.
    """
    if isinstance(value, bool):
        raise DecodeError(f"{name}: expected an integer, got a boolean")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                result = int(text, 16)
            else:
                result = int(text, 10)
        except ValueError:
            raise DecodeError(f"{name}: not a number: {value!r}") from None
    else:
        raise DecodeError(f"{name}: expected a number, got {type(value).__name__}")
    if result < 0:
        raise DecodeError(f"{name}: negative value {result}")
    return result


def require_field(data: dict, key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise DecodeError(f"missing field {key!r}") from None
    except TypeError:
        raise DecodeError(f"expected an object, got {type(data).__name__}") from None


def parse_address(value: Any, name: str) -> str:
    """Accept a 0x-prefixed 20-byte hex address, in any letter case."""
    if not isinstance(value, str) or not value.lower().startswith("0x") or not is_hex_address(value):
        raise DecodeError(f"{name}: not a hex address: {value!r}")
    return value


def parse_bytes32(value: Any, name: str) -> str:
    """Accept a 0x-prefixed hex string of exactly 32 bytes."""
    if not isinstance(value, str) or not value.lower().startswith("0x") \
            or not is_hexstr(value) or len(value) != 66:
        raise DecodeError(f"{name}: not a 32-byte hex string: {value!r}")
    return value


def parse_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"{name}: expected a string, got {type(value).__name__}")
    return value


def _bytes32(value: str, name: str) -> bytes:
    text = value[2:] if value.lower().startswith("0x") else value
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        raise ValueError(f"{name}: not a hex string: {value!r}") from None
    if len(raw) > 32:
        raise ValueError(f"{name}: longer than 32 bytes")
    return raw.rjust(32, b"\x00")


@dataclass
class OfferItem:
    """Item the offerer gives up."""
    item_type: int
    token: str
    identifier_or_criteria: int = 0
    start_amount: int = 0
    end_amount: int = 0

    def to_dict(self) -> dict:
        return {
            "itemType": int(self.item_type),
            "token": self.token,
            "identifierOrCriteria": str(self.identifier_or_criteria),
            "startAmount": str(self.start_amount),
            "endAmount": str(self.end_amount),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OfferItem":
        return cls(
            item_type=parse_uint(require_field(data, "itemType"), "itemType"),
            token=parse_address(require_field(data, "token"), "token"),
            identifier_or_criteria=parse_uint(data.get("identifierOrCriteria", 0), "identifierOrCriteria"),
            start_amount=parse_uint(require_field(data, "startAmount"), "startAmount"),
            end_amount=parse_uint(require_field(data, "endAmount"), "endAmount"),
        )

    def _typed(self) -> dict:
        return {
            "itemType": int(self.item_type),
            "token": Web3.to_checksum_address(self.token),
            "identifierOrCriteria": self.identifier_or_criteria,
            "startAmount": self.start_amount,
            "endAmount": self.end_amount,
        }


@dataclass
class ConsiderationItem:
    """Item the offerer expects to receive, and who receives it."""
    item_type: int
    token: str
    recipient: str
    identifier_or_criteria: int = 0
    start_amount: int = 0
    end_amount: int = 0

    def to_dict(self) -> dict:
        return {
            "itemType": int(self.item_type),
            "token": self.token,
            "identifierOrCriteria": str(self.identifier_or_criteria),
            "startAmount": str(self.start_amount),
            "endAmount": str(self.end_amount),
            "recipient": self.recipient,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConsiderationItem":
        return cls(
            item_type=parse_uint(require_field(data, "itemType"), "itemType"),
            token=parse_address(require_field(data, "token"), "token"),
            recipient=parse_address(require_field(data, "recipient"), "recipient"),
            identifier_or_criteria=parse_uint(data.get("identifierOrCriteria", 0), "identifierOrCriteria"),
            start_amount=parse_uint(require_field(data, "startAmount"), "startAmount"),
            end_amount=parse_uint(require_field(data, "endAmount"), "endAmount"),
        )

    def _typed(self) -> dict:
        return {
            "itemType": int(self.item_type),
            "token": Web3.to_checksum_address(self.token),
            "identifierOrCriteria": self.identifier_or_criteria,
            "startAmount": self.start_amount,
            "endAmount": self.end_amount,
            "recipient": Web3.to_checksum_address(self.recipient),
        }


@dataclass
class Order:
    """
    Seaport order components.

    The same type covers the feed's order parameters (which carry
    totalOriginalConsiderationItems instead of a counter) and the
    components that get signed; a missing counter decodes as 0.
    """
    offerer: str
    zone: str = DEFAULT_ORDER_ADDRESS
    offer: list[OfferItem] = field(default_factory=list)
    consideration: list[ConsiderationItem] = field(default_factory=list)
    order_type: int = OrderType.PARTIAL_RESTRICTED
    start_time: int = 0
    end_time: int = 0
    zone_hash: str = DEFAULT_ZONE_HASH
    salt: int = 0
    conduit_key: str = DEFAULT_CONDUIT_KEY
    counter: int = 0

    def to_dict(self) -> dict:
        """Wire JSON with numeric fields as decimal strings."""
        return {
            "offerer": self.offerer,
            "zone": self.zone,
            "offer": [item.to_dict() for item in self.offer],
            "consideration": [item.to_dict() for item in self.consideration],
            "orderType": int(self.order_type),
            "startTime": str(self.start_time),
            "endTime": str(self.end_time),
            "zoneHash": self.zone_hash,
            "salt": str(self.salt),
            "conduitKey": self.conduit_key,
            "totalOriginalConsiderationItems": len(self.consideration),
            "counter": str(self.counter),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        """
        Decode wire JSON into an order.

        Raises:
            DecodeError: on missing fields or malformed values
        """
        offer = require_field(data, "offer")
        consideration = require_field(data, "consideration")
        if not isinstance(offer, list) or not isinstance(consideration, list):
            raise DecodeError("offer and consideration must be arrays")

        return cls(
            offerer=parse_address(require_field(data, "offerer"), "offerer"),
            zone=parse_address(require_field(data, "zone"), "zone"),
            offer=[OfferItem.from_dict(item) for item in offer],
            consideration=[ConsiderationItem.from_dict(item) for item in consideration],
            order_type=parse_uint(require_field(data, "orderType"), "orderType"),
            start_time=parse_uint(require_field(data, "startTime"), "startTime"),
            end_time=parse_uint(require_field(data, "endTime"), "endTime"),
            zone_hash=parse_bytes32(data.get("zoneHash", DEFAULT_ZONE_HASH), "zoneHash"),
            salt=parse_uint(data.get("salt", 0), "salt"),
            conduit_key=parse_bytes32(data.get("conduitKey", DEFAULT_CONDUIT_KEY), "conduitKey"),
            counter=parse_uint(data.get("counter", 0), "counter"),
        )

    @classmethod
    def limit_order(
        cls,
        wallet: str,
        sell_token: str,
        sell_amount: Union[int, str],
        buy_token: str,
        buy_amount: Union[int, str],
        duration_ms: int = DEFAULT_DURATION_MS
    ) -> "Order":
        """
        Build an ERC20-for-ERC20 limit order starting now.

        Args:
            wallet: Offerer address, also the consideration recipient
            sell_token: Token offered
            sell_amount: Amount offered (base units)
            buy_token: Token wanted
            buy_amount: Amount wanted (base units)
            duration_ms: Validity window in milliseconds
        """
        start_time = int(time.time() * 1000)
        sell = parse_uint(sell_amount, "sell_amount")
        buy = parse_uint(buy_amount, "buy_amount")
        return cls(
            offerer=wallet,
            offer=[OfferItem(
                item_type=ItemType.ERC20,
                token=sell_token,
                start_amount=sell,
                end_amount=sell,
            )],
            consideration=[ConsiderationItem(
                item_type=ItemType.ERC20,
                token=buy_token,
                recipient=wallet,
                start_amount=buy,
                end_amount=buy,
            )],
            start_time=start_time,
            end_time=start_time + duration_ms,
        )

    def typed_data(self, chain_id: int) -> dict:
        """Full EIP-712 message for this order on the given chain."""
        return {
            "types": EIP712_TYPES,
            "primaryType": "OrderComponents",
            "domain": seaport_domain(chain_id),
            "message": {
                "offerer": Web3.to_checksum_address(self.offerer),
                "zone": Web3.to_checksum_address(self.zone),
                "offer": [item._typed() for item in self.offer],
                "consideration": [item._typed() for item in self.consideration],
                "orderType": int(self.order_type),
                "startTime": self.start_time,
                "endTime": self.end_time,
                "zoneHash": _bytes32(self.zone_hash, "zoneHash"),
                "salt": self.salt,
                "conduitKey": _bytes32(self.conduit_key, "conduitKey"),
                "counter": self.counter,
            },
        }

    def signing_hash(self, chain_id: int) -> bytes:
        """32-byte EIP-712 digest: keccak(0x19 0x01 || domainSeparator || structHash)."""
        signable = encode_typed_data(full_message=self.typed_data(chain_id))
        return keccak(b"\x19" + signable.version + signable.header + signable.body)
