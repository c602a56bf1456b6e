"""
Simulated Market Maker Agent

Polls the public order book, keeps a ladder of synthetic quotes around the
touch and simulates fills as the market moves.

Cycle (every ORDERBOOK_INTERVAL_MS, armed after the previous cycle ends):
1. Fetch snapshot, extract best bid/ask.
2. First snapshot: place quotes on both sides, switch to STEADY.
3. STEADY: simulate fills -> cancel unfilled (optional) -> replenish (optional).

A separate loop logs the balances every BALANCES_INTERVAL_MS. Fetch or
liquidity problems never stop the agent, the cycle is just skipped; an
unexpected error in a cycle is logged and the next tick runs as usual.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from dotenv import load_dotenv

from simulation.errors import (
    ErrorKind,
    NoLiquidityError,
    SnapshotUnavailableError,
    UnknownAssetError,
)
from simulation.fill_simulator import Fill, FillSimulator
from simulation.ledger import Ledger
from simulation.market_snapshot import OrderBookLevel, read_best_of_book
from simulation.quote_book import Quote, QuoteBook, QuotePricer, Side
from data_ingestion.orderbook_client import OrderBookClient

from .base import BaseAgent


class AgentState(Enum):
    AWAITING_FIRST_SNAPSHOT = "awaiting_first_snapshot"
    STEADY = "steady"


@dataclass
class CycleReport:
    """Outcome of one order book cycle."""
    state: AgentState
    best_bid: Optional[float] = None
    best_ask: Optional[float] = None
    fills: List[Fill] = field(default_factory=list)
    cancelled: int = 0
    placed: List[Tuple[Side, int, Quote]] = field(default_factory=list)
    skipped_reason: Optional[ErrorKind] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


class MarketMakerAgent(BaseAgent):
    """
    Quote-and-fill orchestrator.

    The ledger, quote book and order book client are injected so the same
    agent can run against the live feed or against canned snapshots.
    """

    def __init__(
        self,
        name: str,
        ledger: Ledger,
        client: Optional[OrderBookClient],
        pricer: QuotePricer,
        book: Optional[QuoteBook] = None,
        config: Dict = None
    ):
        super().__init__(name, config)
        config = self.config

        # Account
        self.base_asset = config.get('base_asset', 'ETH')
        self.counter_asset = config.get('counter_asset', 'USD')

        # Policy
        self.replenish_orders = config.get('replenish_orders', True)
        self.cancel_unfilled = config.get('cancel_unfilled', True)
        self.legacy_ask_selection = config.get('legacy_ask_selection', False)

        # Timers (seconds)
        self.orderbook_interval = config.get('orderbook_interval_s', 5.0)
        self.balances_interval = config.get('balances_interval_s', 30.0)

        self.ledger = ledger
        self.client = client
        self.pricer = pricer
        self.book = book or QuoteBook(config.get('num_orders', 5))
        self.fill_simulator = FillSimulator(ledger, self.base_asset, self.counter_asset)

        # State
        self.state = AgentState.AWAITING_FIRST_SNAPSHOT
        self.cycle_count = 0
        self.skipped_count = 0
        self.fill_count = 0

    def _replenish(self, best_bid: OrderBookLevel, best_ask: OrderBookLevel) -> List[Tuple[Side, int, Quote]]:
        placed = []
        for side, touch in ((Side.BID, best_bid), (Side.ASK, best_ask)):
            for slot_index, quote in self.book.refresh_side(
                side, touch.price, self.pricer.random_price, self.pricer.random_amount
            ):
                placed.append((side, slot_index, quote))
        return placed

    def handle_snapshot(self, levels: Sequence[OrderBookLevel]) -> CycleReport:
        """
        Apply one validated snapshot to the quote book and ledger.

        Raises:
            SnapshotUnavailableError: legacy ask selection could not rank the asks
            NoLiquidityError: best bid or best ask missing (nothing is changed)
            UnknownAssetError: base or counter asset not registered
        """
        best_bid, best_ask = read_best_of_book(
            levels, legacy_ask_selection=self.legacy_ask_selection
        ).require()

        report = CycleReport(state=self.state, best_bid=best_bid.price, best_ask=best_ask.price)

        if self.state is AgentState.AWAITING_FIRST_SNAPSHOT:
            report.placed = self._replenish(best_bid, best_ask)
            self.state = AgentState.STEADY
            self.logger.info(
                f"Initial quotes placed around {best_bid.price} / {best_ask.price}"
            )
            return report

        report.fills = self.fill_simulator.resolve(self.book, best_bid, best_ask)
        self.fill_count += len(report.fills)

        if self.cancel_unfilled:
            report.cancelled = self.book.clear_all()

        if self.replenish_orders:
            report.placed = self._replenish(best_bid, best_ask)

        return report

    async def run_cycle(self) -> CycleReport:
        """Fetch one snapshot and process it. Never raises for expected failures."""
        self.cycle_count += 1
        try:
            levels = await self.client.fetch_levels_async()
            return self.handle_snapshot(levels)
        except (SnapshotUnavailableError, NoLiquidityError) as e:
            self.logger.warning(f"Skipping cycle {self.cycle_count}: {e}")
            kind = e.kind
        except UnknownAssetError as e:
            self.logger.error(f"Skipping cycle {self.cycle_count}: {e}")
            kind = e.kind
        self.skipped_count += 1
        return CycleReport(state=self.state, skipped_reason=kind)

    def format_balances(self) -> str:
        balances = self.ledger.snapshot()
        ordered = [a for a in (self.base_asset, self.counter_asset) if a in balances]
        ordered += sorted(a for a in balances if a not in ordered)
        return " ".join(f"{asset}:{balances[asset]}" for asset in ordered)

    def display_balances(self) -> str:
        """Log the current balances (read-only)."""
        line = f"BALANCES: {self.format_balances()}"
        self.logger.info(line)
        return line

    async def _orderbook_loop(self):
        while self.is_running:
            try:
                await self.run_cycle()
            except Exception as e:
                self.skipped_count += 1
                self.logger.error(f"Cycle {self.cycle_count} failed: {e}", exc_info=True)
            if not await self.sleep(self.orderbook_interval):
                break

    async def _balances_loop(self):
        while self.is_running:
            self.display_balances()
            if not await self.sleep(self.balances_interval):
                break

    async def run(self):
        """Main agent loop: order book cycles and balance display run independently."""
        self.logger.info(
            f"Market maker running: {self.book.num_orders} quotes per side, "
            f"replenish={self.replenish_orders}, cancel_unfilled={self.cancel_unfilled}"
        )
        await asyncio.gather(self._orderbook_loop(), self._balances_loop())

    async def cleanup(self):
        """Close the HTTP session and log final balances."""
        if self.client:
            self.client.close()
        self.display_balances()
        self.logger.info(
            f"Cycles: {self.cycle_count}, skipped: {self.skipped_count}, fills: {self.fill_count}"
        )
        await super().cleanup()


def build_agent(settings, name: str = "MM-Sim") -> MarketMakerAgent:
    """Wire ledger, client, pricer and quote book from Settings."""
    ledger = Ledger()
    ledger.register(settings.account.base_asset, settings.account.initial_base_balance)
    ledger.register(settings.account.counter_asset, settings.account.initial_counter_balance)

    pricer = QuotePricer(
        random_percent=settings.quoting.random_percent,
        min_amount=settings.quoting.minimum_amount,
        max_amount=settings.quoting.maximum_amount,
        seed=settings.quoting.random_seed,
    )

    config = {
        'base_asset': settings.account.base_asset,
        'counter_asset': settings.account.counter_asset,
        'num_orders': settings.quoting.num_orders,
        'replenish_orders': settings.quoting.replenish_orders,
        'cancel_unfilled': settings.quoting.cancel_unfilled,
        'legacy_ask_selection': settings.quoting.legacy_ask_selection,
        'orderbook_interval_s': settings.schedule.orderbook_interval_s,
        'balances_interval_s': settings.schedule.balances_interval_s,
    }

    return MarketMakerAgent(
        name,
        ledger=ledger,
        client=OrderBookClient.from_settings(settings.market_data),
        pricer=pricer,
        config=config,
    )


def configure_logging(logging_config):
    """Configure root logging from a LoggingConfig."""
    handlers = [logging.StreamHandler()]
    if logging_config.file:
        handlers.append(logging.FileHandler(logging_config.file))
    logging.basicConfig(
        level=getattr(logging, logging_config.level),
        format=logging_config.format,
        handlers=handlers,
    )


def main():
    """Run the simulated market maker until interrupted."""
    load_dotenv()
    from config.settings import settings

    configure_logging(settings.logging)
    logging.getLogger(__name__).info(f"\n{settings!r}")

    agent = build_agent(settings)
    try:
        asyncio.run(agent.start())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
