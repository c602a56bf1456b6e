"""
Fill Simulator

Resolves resting quotes against the latest touch of the public book:
- a bid priced above the best bid is considered filled
- an ask priced below the best ask is considered filled

Fills are all-or-nothing. Each fill moves the base asset by the quote amount
and the counter asset by -amount * price, then frees the slot.
"""

import logging
from dataclasses import dataclass
from typing import List

from simulation.ledger import Ledger
from simulation.market_snapshot import OrderBookLevel
from simulation.quote_book import QuoteBook, Side

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fill:
    """Simulated execution of one resting quote."""
    side: Side
    slot_index: int
    price: float
    amount: float
    base_delta: float
    counter_delta: float


class FillSimulator:
    """Applies fills to the ledger and clears filled slots."""

    def __init__(self, ledger: Ledger, base_asset: str, counter_asset: str):
        self.ledger = ledger
        self.base_asset = base_asset
        self.counter_asset = counter_asset

    @staticmethod
    def is_marketable(side: Side, quote_price: float, touch: OrderBookLevel) -> bool:
        if side is Side.BID:
            return quote_price > touch.price
        return quote_price < touch.price

    def resolve(
        self,
        book: QuoteBook,
        best_bid: OrderBookLevel,
        best_ask: OrderBookLevel
    ) -> List[Fill]:
        """
        Fill every marketable quote on both sides.

        Raises:
            UnknownAssetError: base or counter asset not registered (nothing is mutated)
        """
        # Fail before touching any balance or slot
        self.ledger.get(self.base_asset)
        self.ledger.get(self.counter_asset)

        fills = []
        for side, touch in ((Side.BID, best_bid), (Side.ASK, best_ask)):
            for slot_index, quote in book.occupied_slots(side):
                if not self.is_marketable(side, quote.price, touch):
                    continue
                fill = Fill(
                    side=side,
                    slot_index=slot_index,
                    price=quote.price,
                    amount=quote.amount,
                    base_delta=quote.amount,
                    counter_delta=-quote.notional,
                )
                self.ledger.adjust(self.base_asset, fill.base_delta)
                self.ledger.adjust(self.counter_asset, fill.counter_delta)
                book.clear_slot(side, slot_index)
                fills.append(fill)

                logger.info(
                    f"FILLED {side.name} @ {fill.price} {abs(fill.amount)} "
                    f"({self.base_asset} {fill.base_delta} {self.counter_asset} {fill.counter_delta})"
                )
        return fills
