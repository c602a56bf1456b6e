"""
In-memory balance ledger.

Balances are created only through registration. Reads and adjustments of an
asset that was never registered raise UnknownAssetError, which guards
against typos in asset symbols. Balances may go negative.
"""

import logging
from typing import Dict, Set

from simulation.errors import UnknownAssetError

logger = logging.getLogger(__name__)


class Ledger:
    """Per-asset signed balances."""

    def __init__(self):
        self._balances: Dict[str, float] = {}

    def register(self, asset: str, initial_amount: float) -> None:
        """Create a balance entry for asset."""
        self.set(asset, initial_amount)
        logger.debug(f"Registered {asset} with balance {initial_amount}")

    def has_asset(self, asset: str) -> bool:
        return asset in self._balances

    def get(self, asset: str) -> float:
        if not self.has_asset(asset):
            raise UnknownAssetError(asset)
        return self._balances[asset]

    def set(self, asset: str, amount: float) -> None:
        """Overwrite the stored amount (also the registration path)."""
        self._balances[asset] = float(amount)

    def adjust(self, asset: str, delta: float) -> float:
        """Add delta to a known asset and return the new balance."""
        new_amount = self.get(asset) + delta
        self.set(asset, new_amount)
        return new_amount

    def known_assets(self) -> Set[str]:
        return set(self._balances)

    def snapshot(self) -> Dict[str, float]:
        """Copy of all balances, safe to hand to readers."""
        return dict(self._balances)

    def reset(self) -> None:
        """Clear all balances."""
        self._balances.clear()

    def __repr__(self) -> str:
        balances = " ".join(f"{a}:{v}" for a, v in self._balances.items())
        return f"Ledger({balances or 'empty'})"
