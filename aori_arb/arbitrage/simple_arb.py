"""
Two-leg arbitrage between opposing orders on the Aori orderbook.

For every new order on a watched token, look through the orders seen so
far for one that sells what this order buys, buys what it sells, and
offers more than this order asks for. When one exists, take both.

Partial fills are not supported, so a match needs the counter-order to
cover the full amount.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ..clients.payloads import RequestIdCounter, create_take_order_payload
from ..clients.signer import SigningContext
from ..constants import DEFAULT_SEAT_ID
from ..engine.core import Strategy
from ..engine.executor import SendPayload
from ..exceptions import SigningError
from ..models.events import (
    AoriEvent,
    OrderCancelled,
    OrderCreated,
    OrderSnapshot,
    OrderTaken,
)
from ..utils.logger import get_logger, TradeLogger

logger = get_logger("simple_arb")
trade_logger = TradeLogger()


@dataclass(frozen=True, eq=False)
class TokenEntry:
    """A watched token. Identity is (address, chain id); the ticker is a label."""
    address: str
    ticker: str
    chain_id: int

    def matches(self, address: str, chain_id: int) -> bool:
        return self.address.lower() == address.lower() and self.chain_id == chain_id

    def __eq__(self, other) -> bool:
        if not isinstance(other, TokenEntry):
            return NotImplemented
        return self.matches(other.address, other.chain_id)

    def __hash__(self) -> int:
        return hash((self.address.lower(), self.chain_id))


# Goerli test tokens
DEFAULT_TOKEN_LIST = (
    TokenEntry(address="0xD3664B5e72B46eaba722aB6f43c22dBF40181954", ticker="usdc", chain_id=5),
    TokenEntry(address="0x2715Ccea428F8c7694f7e78B2C89cb454c5F7294", ticker="weth", chain_id=5),
)


@dataclass
class ArbStats:
    """Statistics for the strategy."""
    events_seen: int = 0
    orders_admitted: int = 0
    orders_pruned: int = 0
    matches_found: int = 0
    actions_emitted: int = 0


def _same_token(a: str, b: str) -> bool:
    return a.lower() == b.lower()


class SimpleArb(Strategy[AoriEvent, SendPayload]):
    """
    Arbitrage strategy over an in-memory ledger of created orders.

    The ledger is append-only by default: cancelled and taken orders stay
    eligible for matching. Set prune_inactive to drop them when the
    exchange reports them.
    """

    def __init__(
        self,
        signer: SigningContext,
        counter: RequestIdCounter,
        api_key: str,
        token_list: Iterable[TokenEntry] = DEFAULT_TOKEN_LIST,
        seat_id: str = DEFAULT_SEAT_ID,
        prune_inactive: bool = False
    ):
        """
        Initialize strategy.

        Args:
            signer: Wallet signer for take-order payloads
            counter: Request id counter shared with the provider
            api_key: Aori API key sent with every take
            token_list: Watched tokens
            seat_id: Seat id sent with every take
            prune_inactive: Remove orders on cancel/take events
        """
        self.signer = signer
        self.counter = counter
        self.api_key = api_key
        self.token_list = tuple(token_list)
        self.seat_id = seat_id
        self.prune_inactive = prune_inactive

        self._ledger: list[OrderSnapshot] = []
        self._stats = ArbStats()

        for token in self.token_list:
            logger.info(
                f"Watching {token.ticker}",
                extra={"token": token.address, "chain_id": token.chain_id}
            )

    @property
    def ledger(self) -> tuple[OrderSnapshot, ...]:
        return tuple(self._ledger)

    def is_token_relevant(self, token_address: str, chain_id: int) -> bool:
        return any(token.matches(token_address, chain_id) for token in self.token_list)

    async def sync_state(self) -> None:
        # TODO: seed the ledger with viewOrderbook for every watched pair
        return None

    async def process_event(self, event: AoriEvent) -> list[SendPayload]:
        return self.on_event(event)

    def on_event(self, event: AoriEvent) -> list[SendPayload]:
        """
        React to one exchange event.

        Returns:
            Two take-order actions when the event completes an arbitrage,
            otherwise an empty list
        """
        self._stats.events_seen += 1

        if isinstance(event, (OrderCancelled, OrderTaken)):
            if self.prune_inactive:
                self._prune(event.data.order_hash)
            return []

        if not isinstance(event, OrderCreated):
            return []

        order = event.data
        if not (
            self.is_token_relevant(order.input_token, order.chain_id)
            or self.is_token_relevant(order.output_token, order.chain_id)
        ):
            return []

        logger.info("New order stored", extra={"order_hash": order.order_hash})
        self._ledger.append(order)
        self._stats.orders_admitted += 1

        best = self.find_best_match(order)
        if best is None:
            return []

        self._stats.matches_found += 1
        trade_logger.opportunity_detected(
            maker_hash=best.order_hash,
            taker_hash=order.order_hash,
            input_token=order.input_token,
            output_token=order.output_token,
            surplus=best.input_amount - order.output_amount
        )
        actions = self.generate_take_orders([best, order])
        self._stats.actions_emitted += len(actions)
        return actions

    def find_best_match(self, order: OrderSnapshot) -> Optional[OrderSnapshot]:
        """
        Find the ledger entry with the largest surplus against an order.

        A candidate sells the order's output token, buys its input token,
        and offers strictly more than the order's output amount. Equal
        surpluses go to the earliest entry.
        """
        best: Optional[OrderSnapshot] = None
        best_surplus = 0

        for entry in self._ledger:
            if entry is order or entry.order_hash == order.order_hash:
                continue
            if not (
                _same_token(entry.input_token, order.output_token)
                and _same_token(entry.output_token, order.input_token)
            ):
                continue
            surplus = entry.input_amount - order.output_amount
            if surplus > best_surplus:
                best = entry
                best_surplus = surplus

        return best

    def generate_take_orders(self, orders: list[OrderSnapshot]) -> list[SendPayload]:
        """
        Build one take-order action per leg.

        Either every leg is built or none is: a signing or encoding failure on any leg
        returns an empty list.
        """
        actions = []
        for order in orders:
            try:
                payload = create_take_order_payload(
                    self.counter,
                    self.signer,
                    order.order,
                    order.order_hash,
                    self.seat_id,
                    self.api_key
                )
            except (SigningError, ValueError) as e:
                logger.error(
                    f"Failed to sign take order: {e}",
                    extra={"order_hash": order.order_hash}
                )
                return []
            actions.append(SendPayload(payload))

        logger.info(
            "Take orders generated",
            extra={"order_hashes": [order.order_hash for order in orders]}
        )
        return actions

    def _prune(self, order_hash: str) -> None:
        before = len(self._ledger)
        self._ledger = [entry for entry in self._ledger if entry.order_hash != order_hash]
        removed = before - len(self._ledger)
        if removed:
            self._stats.orders_pruned += removed
            logger.info("Order removed from ledger", extra={"order_hash": order_hash})

    def get_stats(self) -> ArbStats:
        """Get strategy statistics."""
        return self._stats
