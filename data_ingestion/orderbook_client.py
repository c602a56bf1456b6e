"""
Public Order Book REST Client

Polls a Bitfinex-style public order book endpoint:

    GET {base_url}/{symbol}/{precision}
    -> [[price, count, amount], ...]   // amount > 0 bid, amount < 0 ask

No API key required. Every request is bounded by a timeout and retried a
limited number of times with exponential backoff. Any transport, HTTP or
payload problem surfaces as SnapshotUnavailableError so the caller can simply
skip the cycle.
"""

import asyncio
import logging
import time
from typing import Any, List, Optional

import requests

from simulation.errors import SnapshotUnavailableError
from simulation.market_snapshot import OrderBookLevel, parse_levels

logger = logging.getLogger(__name__)


class OrderBookClient:
    """
    Blocking HTTP client for order book snapshots, with an asyncio wrapper.

    Features:
    - Shared requests.Session with JSON headers
    - Explicit request timeout
    - Bounded retries with exponential backoff
    - Pydantic validation of every price level
    """

    DEFAULT_BASE_URL = "https://api.deversifi.com/bfx/v2/book"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        symbol: str = 'tETHUSD',
        precision: str = 'P0',
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize order book client.

        Args:
            base_url: Endpoint without symbol/precision
            symbol: Trading pair (default: tETHUSD)
            precision: Price aggregation level (default: P0)
            timeout: Per-request timeout in seconds
            max_retries: Additional attempts after the first failure
            retry_backoff: Initial delay between attempts in seconds
            session: Optional pre-configured session (mainly for tests)
        """
        self.url = f"{base_url.rstrip('/')}/{symbol}/{precision}"
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff

        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'Content-Type': 'application/json',
        })

        self.request_count = 0
        self.error_count = 0

        logger.info(f"Initialized order book client: {self.url}")

    @classmethod
    def from_settings(cls, config) -> 'OrderBookClient':
        """Build a client from a MarketDataConfig."""
        return cls(
            base_url=config.base_url,
            symbol=config.symbol,
            precision=config.precision,
            timeout=config.timeout_s,
            max_retries=config.max_retries,
            retry_backoff=config.retry_backoff_s,
        )

    def _request_payload(self) -> Any:
        """Single GET returning the decoded JSON body."""
        self.request_count += 1
        resp = self.session.get(self.url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def fetch_payload(self) -> Any:
        """
        Fetch the raw JSON payload, retrying transport and HTTP failures.

        Raises:
            SnapshotUnavailableError: all attempts failed
        """
        delay = self.retry_backoff
        attempts = self.max_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                return self._request_payload()
            except (requests.RequestException, ValueError) as e:
                self.error_count += 1
                logger.warning(f"Order book request failed (attempt {attempt}/{attempts}): {e}")
                if attempt == attempts:
                    raise SnapshotUnavailableError(f"Could not fetch orderbook: {e}") from e
                if delay > 0:
                    time.sleep(delay)
                delay *= 2

    def fetch_levels(self) -> List[OrderBookLevel]:
        """Fetch and validate the order book."""
        payload = self.fetch_payload()
        try:
            return parse_levels(payload)
        except SnapshotUnavailableError:
            self.error_count += 1
            raise

    async def fetch_levels_async(self) -> List[OrderBookLevel]:
        """Run fetch_levels in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.fetch_levels)

    def close(self):
        """Close the underlying HTTP session. Safe to call multiple times."""
        self.session.close()
        logger.info(
            f"Order book client closed. Requests: {self.request_count}, Errors: {self.error_count}"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
