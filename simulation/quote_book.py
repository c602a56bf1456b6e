"""
Quote Book

Fixed-capacity ladder of synthetic resting quotes, N slots per side. A slot
is either empty (None) or holds exactly one Quote. New quotes only go into
empty slots, so replenishing twice in a row never duplicates quotes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Side(Enum):
    BID = "bid"
    ASK = "ask"

    @property
    def sign(self) -> int:
        """Sign of quote amounts on this side."""
        return 1 if self is Side.BID else -1


@dataclass(frozen=True)
class Quote:
    """A synthetic resting order. amount > 0 is a bid, amount < 0 an ask."""
    price: float
    amount: float

    def __post_init__(self):
        if self.amount == 0:
            raise ValueError(f"Quote amount must be non-zero, got {self.amount}")

    @property
    def side(self) -> Side:
        return Side.BID if self.amount > 0 else Side.ASK

    @property
    def notional(self) -> float:
        return self.amount * self.price


class QuotePricer:
    """
    Naive uniform-random quoting policy around the touch.

    Prices are drawn from [best * (1 - p), best * (1 + p)) with
    p = random_percent / 100, amounts from [min_amount, max_amount).
    """

    def __init__(
        self,
        random_percent: float = 5.0,
        min_amount: float = 0.1,
        max_amount: float = 2.0,
        seed: Optional[int] = None
    ):
        if not 0 <= random_percent < 100:
            raise ValueError(f"random_percent must be in [0, 100), got {random_percent}")
        if not 0 < min_amount < max_amount:
            raise ValueError(
                f"Need 0 < min_amount < max_amount, got {min_amount}, {max_amount}"
            )
        self.random_percent = random_percent
        self.min_amount = min_amount
        self.max_amount = max_amount
        self.rng = np.random.default_rng(seed)

    def random_price(self, best_price: float) -> float:
        p = self.random_percent / 100.0
        return float(self.rng.uniform(best_price * (1.0 - p), best_price * (1.0 + p)))

    def random_amount(self) -> float:
        return float(self.rng.uniform(self.min_amount, self.max_amount))


class QuoteBook:
    """Resting synthetic quotes, num_orders slots per side."""

    def __init__(self, num_orders: int = 5):
        if num_orders < 1:
            raise ValueError(f"num_orders must be >= 1, got {num_orders}")
        self.num_orders = num_orders
        self._slots: Dict[Side, List[Optional[Quote]]] = {
            Side.BID: [None] * num_orders,
            Side.ASK: [None] * num_orders,
        }

    def get(self, side: Side, slot_index: int) -> Optional[Quote]:
        return self._slots[side][slot_index]

    def place_if_empty(self, side: Side, slot_index: int, price: float, amount: float) -> bool:
        """Place a quote into an empty slot. Returns False if the slot is occupied."""
        slots = self._slots[side]
        if slots[slot_index] is not None:
            return False
        slots[slot_index] = Quote(price=price, amount=amount)
        logger.info(f"PLACE {side.name} @ {price} {abs(amount)}")
        return True

    def refresh_side(
        self,
        side: Side,
        best_price: float,
        random_price_fn: Callable[[float], float],
        random_amount_fn: Callable[[], float]
    ) -> List[Tuple[int, Quote]]:
        """Fill every empty slot on side with a fresh random quote."""
        placed = []
        for slot_index in range(self.num_orders):
            if self._slots[side][slot_index] is not None:
                continue
            price = random_price_fn(best_price)
            amount = side.sign * random_amount_fn()
            if self.place_if_empty(side, slot_index, price, amount):
                placed.append((slot_index, self._slots[side][slot_index]))
        return placed

    def clear_slot(self, side: Side, slot_index: int) -> Optional[Quote]:
        """Empty one slot and return the quote it held."""
        quote = self._slots[side][slot_index]
        self._slots[side][slot_index] = None
        return quote

    def clear_all(self) -> int:
        """Empty every slot on both sides. Returns the number of quotes removed."""
        cancelled = 0
        for side, slots in self._slots.items():
            for slot_index in range(self.num_orders):
                if slots[slot_index] is not None:
                    cancelled += 1
                    slots[slot_index] = None
        if cancelled:
            logger.debug(f"Cancelled {cancelled} unfilled quotes")
        return cancelled

    def occupied_slots(self, side: Side) -> List[Tuple[int, Quote]]:
        return [(i, q) for i, q in enumerate(self._slots[side]) if q is not None]

    def __len__(self) -> int:
        return len(self.occupied_slots(Side.BID)) + len(self.occupied_slots(Side.ASK))

    def __repr__(self) -> str:
        return (
            f"QuoteBook(bids={len(self.occupied_slots(Side.BID))}/{self.num_orders}, "
            f"asks={len(self.occupied_slots(Side.ASK))}/{self.num_orders})"
        )
