"""
Market Snapshot Reader

Turns a raw order-book payload (a JSON array of [price, count, amount]
triples) into validated levels and extracts the touch of the book.

Sign convention of the feed:
- amount > 0: bid level
- amount < 0: ask level
- amount == 0: neither side, ignored
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError

from simulation.errors import NoLiquidityError, SnapshotUnavailableError

logger = logging.getLogger(__name__)


class OrderBookLevel(BaseModel):
    """Single price level of the public order book."""
    price: float = Field(gt=0, allow_inf_nan=False, description="Price level")
    count: int = Field(ge=0, description="Number of orders at this level")
    amount: float = Field(allow_inf_nan=False, description="Signed amount: > 0 bid, < 0 ask")

    @property
    def is_bid(self) -> bool:
        return self.amount > 0

    @property
    def is_ask(self) -> bool:
        return self.amount < 0

    @classmethod
    def from_triple(cls, raw: Any) -> 'OrderBookLevel':
        """Build a level from a raw [price, count, amount] entry."""
        if not isinstance(raw, (list, tuple)) or len(raw) != 3:
            raise SnapshotUnavailableError(f"Invalid price level format: {raw!r}")
        price, count, amount = raw
        try:
            return cls(price=price, count=count, amount=amount)
        except ValidationError as e:
            raise SnapshotUnavailableError(f"Invalid price level {raw!r}: {e}") from e


@dataclass(frozen=True)
class BestOfBook:
    """Touch of the book; either side may be absent."""
    best_bid: Optional[OrderBookLevel] = None
    best_ask: Optional[OrderBookLevel] = None

    @property
    def is_complete(self) -> bool:
        return self.best_bid is not None and self.best_ask is not None

    def require(self) -> Tuple[OrderBookLevel, OrderBookLevel]:
        """Return (best_bid, best_ask) or raise NoLiquidityError."""
        missing = []
        if self.best_bid is None:
            missing.append("bid")
        if self.best_ask is None:
            missing.append("ask")
        if missing:
            raise NoLiquidityError(missing)
        return self.best_bid, self.best_ask


def parse_levels(payload: Any) -> List[OrderBookLevel]:
    """
    Validate a raw order-book payload.

    Raises:
        SnapshotUnavailableError: payload is not a list or any entry is malformed
    """
    if not isinstance(payload, list):
        raise SnapshotUnavailableError(
            f"Expected a list of price levels, got {type(payload).__name__}"
        )
    return [OrderBookLevel.from_triple(entry) for entry in payload]


def read_best_of_book(
    levels: Sequence[OrderBookLevel],
    legacy_ask_selection: bool = False
) -> BestOfBook:
    """
    Scan the levels once and pick the best bid and best ask.

    A bid replaces the current best bid only at a strictly higher price, an
    ask replaces the current best ask only at a strictly lower price.

    With legacy_ask_selection the ask comparison uses the current best *bid*
    price as reference: a candidate ask replaces the current best ask
    whenever the best bid is priced below it. That ranks asks incorrectly as
    soon as there is more than one ask level and is kept as an opt-in
    compatibility mode. In this mode a second ask seen before any bid
    cannot be compared and makes the snapshot unusable.
    """
    best_bid: Optional[OrderBookLevel] = None
    best_ask: Optional[OrderBookLevel] = None

    for level in levels:
        if level.is_bid:
            if best_bid is None or level.price > best_bid.price:
                best_bid = level
        elif level.is_ask:
            if best_ask is None:
                best_ask = level
            elif legacy_ask_selection:
                if best_bid is None:
                    raise SnapshotUnavailableError(
                        "Unable to determine top of market: ask compared before any bid"
                    )
                if best_bid.price < level.price:
                    best_ask = level
            elif level.price < best_ask.price:
                best_ask = level
        else:
            logger.debug(f"Ignoring zero-amount level at {level.price}")

    return BestOfBook(best_bid=best_bid, best_ask=best_ask)
