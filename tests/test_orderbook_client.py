"""
Tests for OrderBookClient.

Tests cover:
- URL and header construction
- Successful fetch and validation
- Transport errors, HTTP errors and bad JSON become SnapshotUnavailableError
- Bounded retries with backoff
- Malformed payloads are not retried
- Async wrapper
"""

import asyncio
import pytest
import requests
from unittest.mock import MagicMock, call, patch

from config.settings import MarketDataConfig
from data_ingestion.orderbook_client import OrderBookClient
from simulation.errors import SnapshotUnavailableError


@pytest.fixture
def no_sleep():
    with patch('data_ingestion.orderbook_client.time.sleep') as mock_sleep:
        yield mock_sleep


# ============================================================================
# INITIALIZATION TESTS
# ============================================================================

def test_client_initialization(mock_session):
    client = OrderBookClient(session=mock_session)

    assert client.url == 'https://api.deversifi.com/bfx/v2/book/tETHUSD/P0'
    assert client.timeout == 10.0
    assert client.max_retries == 2
    assert mock_session.headers['Accept'] == 'application/json'
    assert mock_session.headers['Content-Type'] == 'application/json'


def test_client_custom_symbol_and_precision(mock_session):
    client = OrderBookClient(
        base_url='https://example.com/book/',
        symbol='tBTCUSD',
        precision='P2',
        session=mock_session
    )

    assert client.url == 'https://example.com/book/tBTCUSD/P2'


def test_client_from_settings(mock_env_vars, monkeypatch):
    monkeypatch.setenv('ORDERBOOK_TIMEOUT_S', '3.5')
    monkeypatch.setenv('ORDERBOOK_MAX_RETRIES', '4')

    client = OrderBookClient.from_settings(MarketDataConfig())

    assert client.url == 'https://api.deversifi.com/bfx/v2/book/tETHUSD/P0'
    assert client.timeout == 3.5
    assert client.max_retries == 4


# ============================================================================
# FETCH TESTS
# ============================================================================

def test_fetch_levels_success(mock_session, sample_orderbook_payload):
    mock_session.get.return_value.json.return_value = sample_orderbook_payload
    client = OrderBookClient(session=mock_session)

    levels = client.fetch_levels()

    assert len(levels) == 6
    assert levels[0].price == 1000.0
    mock_session.get.assert_called_once_with(client.url, timeout=10.0)
    assert client.request_count == 1
    assert client.error_count == 0


def test_fetch_empty_book(mock_session):
    mock_session.get.return_value.json.return_value = []
    client = OrderBookClient(session=mock_session)

    assert client.fetch_levels() == []


# ============================================================================
# FAILURE HANDLING TESTS - CRITICAL
# ============================================================================

def test_timeout_retried_then_unavailable(mock_session, no_sleep):
    mock_session.get.side_effect = requests.Timeout("read timed out")
    client = OrderBookClient(session=mock_session, max_retries=2, retry_backoff=0.5)

    with pytest.raises(SnapshotUnavailableError):
        client.fetch_levels()

    assert mock_session.get.call_count == 3
    assert client.error_count == 3
    # Exponential backoff between attempts
    assert no_sleep.call_args_list == [call(0.5), call(1.0)]


def test_connection_error_without_retries(mock_session, no_sleep):
    mock_session.get.side_effect = requests.ConnectionError("no route to host")
    client = OrderBookClient(session=mock_session, max_retries=0)

    with pytest.raises(SnapshotUnavailableError):
        client.fetch_levels()

    assert mock_session.get.call_count == 1
    no_sleep.assert_not_called()


def test_http_error_status(mock_session, no_sleep):
    mock_session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503")
    client = OrderBookClient(session=mock_session, max_retries=1)

    with pytest.raises(SnapshotUnavailableError):
        client.fetch_levels()

    assert mock_session.get.call_count == 2


def test_invalid_json(mock_session, no_sleep):
    mock_session.get.return_value.json.side_effect = ValueError("Expecting value")
    client = OrderBookClient(session=mock_session, max_retries=0)

    with pytest.raises(SnapshotUnavailableError):
        client.fetch_levels()


def test_recovers_after_transient_failure(mock_session, no_sleep, sample_orderbook_payload):
    good = MagicMock()
    good.json.return_value = sample_orderbook_payload
    mock_session.get.side_effect = [requests.ConnectionError("reset"), good]
    client = OrderBookClient(session=mock_session, max_retries=2)

    levels = client.fetch_levels()

    assert len(levels) == 6
    assert mock_session.get.call_count == 2
    assert client.error_count == 1


def test_malformed_payload_not_retried(mock_session, no_sleep):
    mock_session.get.return_value.json.return_value = {"error": "ERR_RATE_LIMIT"}
    client = OrderBookClient(session=mock_session, max_retries=3)

    with pytest.raises(SnapshotUnavailableError):
        client.fetch_levels()

    assert mock_session.get.call_count == 1
    assert client.error_count == 1


def test_malformed_level_in_payload(mock_session):
    mock_session.get.return_value.json.return_value = [[1000.0, 1, 1.0], ["bad", 1, 1.0]]
    client = OrderBookClient(session=mock_session)

    with pytest.raises(SnapshotUnavailableError):
        client.fetch_levels()


# ============================================================================
# ASYNC / LIFECYCLE TESTS
# ============================================================================

def test_fetch_levels_async(mock_session, sample_orderbook_payload):
    mock_session.get.return_value.json.return_value = sample_orderbook_payload
    client = OrderBookClient(session=mock_session)

    levels = asyncio.run(client.fetch_levels_async())

    assert len(levels) == 6


def test_context_manager_closes_session(mock_session):
    with OrderBookClient(session=mock_session):
        pass

    mock_session.close.assert_called_once()
