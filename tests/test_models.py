"""
Tests for the order model and event decoding.
"""

import json

import pytest

from aori_arb.exceptions import DecodeError
from aori_arb.models.events import (
    OrderCancelled,
    OrderCreated,
    OrderTaken,
    Subscribed,
    decode_event,
    decode_orderbook_response,
    decode_response,
)
from aori_arb.models.order import ItemType, Order, OrderType, parse_uint

from conftest import OFFERER, USDC, WETH, make_frame, make_order, make_snapshot


BIG = 2**64 + 12345  # beyond native 64-bit range


class TestOrder:
    """Tests for the order wire format."""

    def test_to_dict_uses_decimal_strings(self):
        """Numeric fields should be encoded as decimal strings."""
        order = make_order(USDC, WETH, BIG, 1500000, salt=BIG * 3)
        data = order.to_dict()

        assert data["offer"][0]["startAmount"] == str(BIG)
        assert data["consideration"][0]["startAmount"] == "1500000"
        assert data["salt"] == str(BIG * 3)
        assert data["startTime"] == "1697240202000"
        assert data["counter"] == "0"
        assert data["orderType"] == 3
        assert data["offer"][0]["itemType"] == 1
        assert data["totalOriginalConsiderationItems"] == 1

    def test_round_trip_preserves_large_values(self):
        """Encoding then decoding should give back the same order."""
        order = make_order(USDC, WETH, BIG, BIG + 1, salt=2**255 - 1)
        order.counter = BIG

        wire = json.loads(json.dumps(order.to_dict()))
        decoded = Order.from_dict(wire)

        assert decoded == order
        assert decoded.offer[0].start_amount == BIG
        assert decoded.counter == BIG

    def test_decodes_feed_parameters_without_counter(self):
        """Order parameters from the feed carry no counter."""
        data = make_order(USDC, WETH, 10, 20).to_dict()
        del data["counter"]

        decoded = Order.from_dict(data)

        assert decoded.counter == 0
        assert decoded.order_type == OrderType.PARTIAL_RESTRICTED

    def test_hex_salt_accepted(self):
        """0x-prefixed numeric strings should parse as hex."""
        data = make_order(USDC, WETH, 10, 20).to_dict()
        data["salt"] = "0xff"

        assert Order.from_dict(data).salt == 255

    @pytest.mark.parametrize("bad", [
        {"startAmount": "ten"},
        {"startAmount": -1},
        {"startAmount": True},
        {"startAmount": 1.5},
    ])
    def test_malformed_amount_rejected(self, bad):
        """Malformed amounts should raise DecodeError."""
        data = make_order(USDC, WETH, 10, 20).to_dict()
        data["offer"][0].update(bad)

        with pytest.raises(DecodeError):
            Order.from_dict(data)

    def test_missing_field_rejected(self):
        data = make_order(USDC, WETH, 10, 20).to_dict()
        del data["offerer"]

        with pytest.raises(DecodeError):
            Order.from_dict(data)

    @pytest.mark.parametrize("field,value", [
        ("offerer", 123),
        ("offerer", "0x1234"),
        ("zone", "0xZZ5c7db31feed9122727bf0939dc769a96564b2d"),
        ("zone", "3333333333333333333333333333333333333333"),
        ("zoneHash", "0x00"),
        ("conduitKey", None),
    ])
    def test_malformed_hex_fields_rejected(self, field, value):
        """Addresses and bytes32 fields must be 0x hex of the right length."""
        data = make_order(USDC, WETH, 10, 20).to_dict()
        data[field] = value

        with pytest.raises(DecodeError):
            Order.from_dict(data)

    @pytest.mark.parametrize("field", ["token", "recipient"])
    def test_malformed_item_address_rejected(self, field):
        data = make_order(USDC, WETH, 10, 20).to_dict()
        data["consideration"][0][field] = 42

        with pytest.raises(DecodeError):
            Order.from_dict(data)

    def test_lowercase_addresses_accepted(self):
        data = make_order(USDC.lower(), WETH.lower(), 10, 20).to_dict()

        assert Order.from_dict(data).offer[0].token == USDC.lower()

    def test_limit_order(self):
        """Limit orders should be ERC20 for ERC20 for 24 hours."""
        order = Order.limit_order(OFFERER, WETH, "1000000000000000", USDC, 1500000)

        assert order.offer[0].item_type == ItemType.ERC20
        assert order.offer[0].start_amount == 1000000000000000
        assert order.consideration[0].token == USDC
        assert order.consideration[0].recipient == OFFERER
        assert order.end_time - order.start_time == 86_400_000

    def test_signing_hash(self):
        """The typed hash should be 32 bytes and cover every field."""
        order = make_order(USDC, WETH, 10, 20)
        digest = order.signing_hash(5)

        assert len(digest) == 32
        assert order.signing_hash(5) == digest

        bumped = make_order(USDC, WETH, 10, 20)
        bumped.counter = 1
        assert bumped.signing_hash(5) != digest
        assert order.signing_hash(1) != digest

    def test_parse_uint(self):
        assert parse_uint("0", "x") == 0
        assert parse_uint(" 42 ", "x") == 42
        assert parse_uint("0x10", "x") == 16
        assert parse_uint(str(BIG), "x") == BIG


class TestEvents:
    """Tests for event decoding."""

    def test_decode_order_created(self):
        snapshot = make_snapshot("0xaaa", USDC, WETH, 100, 50)

        response = decode_response(make_frame(snapshot, request_id=7))

        assert response.id == 7
        assert isinstance(response.result, OrderCreated)
        assert response.result.data == snapshot

    @pytest.mark.parametrize("tag,cls", [
        ("OrderCancelled", OrderCancelled),
        ("OrderTaken", OrderTaken),
    ])
    def test_decode_other_order_events(self, tag, cls):
        snapshot = make_snapshot("0xbbb", USDC, WETH, 100, 50, taken_at=1697240203000)

        event = decode_response(make_frame(snapshot, event_type=tag)).result

        assert isinstance(event, cls)
        assert event.data.order_hash == "0xbbb"
        assert event.data.taken_at == 1697240203000

    def test_decode_subscribed_tag(self):
        event = decode_event({"type": "Subscribed to orderbook updates"})

        assert isinstance(event, Subscribed)

    def test_large_amounts_preserved(self):
        """Event amounts beyond 64 bits should decode exactly."""
        snapshot = make_snapshot("0xccc", USDC, WETH, BIG, BIG * 2)

        event = decode_response(make_frame(snapshot)).result

        assert event.data.input_amount == BIG
        assert event.data.output_amount == BIG * 2

    def test_numeric_amounts_accepted(self):
        """Amounts may also arrive as JSON numbers."""
        data = make_snapshot("0xddd", USDC, WETH, 100, 50).to_dict()
        data["inputAmount"] = 100
        data["outputAmount"] = 50

        event = decode_event({"type": "OrderCreated", "data": data})

        assert event.data.input_amount == 100

    def test_unknown_tag_rejected(self):
        with pytest.raises(DecodeError):
            decode_event({"type": "OrderSettled", "data": {}})

    def test_missing_tag_rejected(self):
        with pytest.raises(DecodeError):
            decode_event({"data": {}})

    def test_missing_data_rejected(self):
        with pytest.raises(DecodeError):
            decode_event({"type": "OrderCreated"})

    @pytest.mark.parametrize("field,value", [
        ("inputToken", 123),
        ("outputToken", "weth"),
        ("orderHash", 7),
    ])
    def test_wrong_typed_snapshot_fields_rejected(self, field, value):
        data = make_snapshot("0xeee", USDC, WETH, 100, 50).to_dict()
        data[field] = value

        with pytest.raises(DecodeError):
            decode_event({"type": "OrderCreated", "data": data})

    def test_oversized_integer_rejected(self):
        """Integers past the int-string digit limit fail as DecodeError."""
        frame = '{"id": ' + "1" * 5000 + ', "result": {}}'

        with pytest.raises(DecodeError):
            decode_response(frame)

    def test_deep_nesting_rejected(self):
        frame = '{"id": 1, "result": ' + "[" * 100000 + "]" * 100000 + "}"

        with pytest.raises(DecodeError):
            decode_response(frame)

    @pytest.mark.parametrize("frame", [
        "not json",
        "[]",
        '{"id": 1}',
        '{"id": "one", "result": {"type": "OrderCreated"}}',
        '{"id": 1, "result": true}',
    ])
    def test_malformed_envelope_rejected(self, frame):
        with pytest.raises(DecodeError):
            decode_response(frame)

    def test_decode_orderbook_response(self):
        orders = [
            make_snapshot("0x01", USDC, WETH, 100, 50).to_dict(),
            make_snapshot("0x02", WETH, USDC, 60, 110).to_dict(),
        ]
        frame = json.dumps({"id": 3, "result": {"orders": orders}})

        view = decode_orderbook_response(frame)

        assert view.id == 3
        assert [o.order_hash for o in view.orders] == ["0x01", "0x02"]
