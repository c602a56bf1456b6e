"""
Quote-and-fill simulation engine.

Components:
- Ledger: validated per-asset balances
- Market snapshot reader: order-book payload -> best bid/ask
- QuoteBook: fixed ladder of synthetic resting quotes
- FillSimulator: marks quotes filled as the market moves
"""

from simulation.errors import (
    ErrorKind,
    MarketMakerError,
    UnknownAssetError,
    SnapshotUnavailableError,
    NoLiquidityError,
)

from simulation.ledger import Ledger

from simulation.market_snapshot import (
    OrderBookLevel,
    BestOfBook,
    parse_levels,
    read_best_of_book,
)

from simulation.quote_book import (
    Side,
    Quote,
    QuotePricer,
    QuoteBook,
)

from simulation.fill_simulator import Fill, FillSimulator

__all__ = [
    # Errors
    "ErrorKind",
    "MarketMakerError",
    "UnknownAssetError",
    "SnapshotUnavailableError",
    "NoLiquidityError",
    # Ledger
    "Ledger",
    # Snapshot reader
    "OrderBookLevel",
    "BestOfBook",
    "parse_levels",
    "read_best_of_book",
    # Quotes
    "Side",
    "Quote",
    "QuotePricer",
    "QuoteBook",
    # Fills
    "Fill",
    "FillSimulator",
]
