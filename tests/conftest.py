import pytest
from unittest.mock import MagicMock, AsyncMock

from simulation.ledger import Ledger
from simulation.market_snapshot import OrderBookLevel
from simulation.quote_book import QuoteBook, QuotePricer


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    env_vars = {
        'ORDERBOOK_BASE_URL': 'https://api.deversifi.com/bfx/v2/book',
        'ORDERBOOK_SYMBOL': 'tETHUSD',
        'ORDERBOOK_PRECISION': 'P0',
        'MM_BASE_ASSET': 'ETH',
        'MM_COUNTER_ASSET': 'USD',
        'MM_INITIAL_BASE_BALANCE': '10.0',
        'MM_INITIAL_COUNTER_BALANCE': '2000.0',
        'LOG_LEVEL': 'INFO',
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def ledger():
    ledger = Ledger()
    ledger.register("ETH", 10.0)
    ledger.register("USD", 2000.0)
    return ledger


@pytest.fixture
def quote_book():
    return QuoteBook(num_orders=5)


@pytest.fixture
def pricer():
    return QuotePricer(random_percent=5.0, min_amount=0.1, max_amount=2.0, seed=42)


@pytest.fixture
def make_levels():
    """Build validated levels from raw [price, count, amount] triples."""
    def _make(triples):
        return [OrderBookLevel(price=p, count=c, amount=a) for p, c, a in triples]
    return _make


@pytest.fixture
def sample_orderbook_payload():
    return [
        [1000.0, 2, 1.5],
        [999.5, 1, 0.7],
        [998.0, 4, 3.2],
        [1010.0, 1, -0.9],
        [1011.5, 3, -2.4],
        [1013.0, 2, -1.1],
    ]


@pytest.fixture
def mock_session():
    """requests.Session stand-in whose get() returns a configurable response."""
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.raise_for_status.return_value = None
    session.get.return_value = response
    return session


@pytest.fixture
def mock_orderbook_client():
    client = MagicMock()
    client.fetch_levels_async = AsyncMock()
    return client
