"""
Error taxonomy for the quote-and-fill simulation.

Every error carries an ErrorKind tag so the orchestrator can report why a
cycle was skipped without string matching.
"""

from enum import Enum
from typing import Iterable


class ErrorKind(Enum):
    UNKNOWN_ASSET = "unknown_asset"
    SNAPSHOT_UNAVAILABLE = "snapshot_unavailable"
    NO_LIQUIDITY = "no_liquidity"


class MarketMakerError(Exception):
    """Base class for all simulation errors."""

    kind: ErrorKind


class UnknownAssetError(MarketMakerError):
    """Balance operation on an asset that was never registered."""

    kind = ErrorKind.UNKNOWN_ASSET

    def __init__(self, asset: str):
        self.asset = asset
        super().__init__(f"Unknown asset {asset}")


class SnapshotUnavailableError(MarketMakerError):
    """Order book could not be fetched or parsed."""

    kind = ErrorKind.SNAPSHOT_UNAVAILABLE

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Order book snapshot unavailable: {reason}")


class NoLiquidityError(MarketMakerError):
    """Snapshot was valid but one or both sides of the book are empty."""

    kind = ErrorKind.NO_LIQUIDITY

    def __init__(self, missing_sides: Iterable[str]):
        self.missing_sides = tuple(missing_sides)
        super().__init__(f"No liquidity on side(s): {', '.join(self.missing_sides)}")
