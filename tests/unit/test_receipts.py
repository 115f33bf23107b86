"""Unit tests for the receipts repository and its fetch contract."""

import datetime
import unittest.mock as mock

import httpx
import pytest
from postgrest.exceptions import APIError

from receipt_dashboard.config import BackendConfig
from receipt_dashboard.loaders.receipts import (
    DataAccessError,
    ReceiptRepository,
    format_date_bound,
    previous_window,
)

pytestmark = pytest.mark.unit


def test_fetch_receipts_without_bounds(fake_query, raw_rows):
    client = fake_query(rows=raw_rows)
    repo = ReceiptRepository(client)

    rows = repo.fetch_receipts()

    assert rows == raw_rows
    assert client.calls == [
        ("table", "moneyreciept"),
        ("select", "*"),
        ("order", "rcdt", True),
        ("execute",),
    ]


def test_fetch_receipts_applies_inclusive_bounds(fake_query):
    client = fake_query()
    repo = ReceiptRepository(client)

    repo.fetch_receipts(datetime.date(2024, 1, 1), "2024-01-31")

    assert ("gte", "rcdt", "2024-01-01") in client.calls
    assert ("lte", "rcdt", "2024-01-31") in client.calls


def test_fetch_receipts_only_lower_bound(fake_query):
    client = fake_query()
    ReceiptRepository(client).fetch_receipts(start="2024-01-01", end="")

    ops = [call[0] for call in client.calls]
    assert "gte" in ops
    assert "lte" not in ops


def test_fetch_receipts_handles_null_data(fake_query):
    client = fake_query()
    client.execute = mock.Mock(return_value=mock.Mock(data=None))

    assert ReceiptRepository(client).fetch_receipts() == []


def test_fetch_receipts_wraps_api_errors(fake_query):
    error = APIError({"message": "permission denied for table moneyreciept", "code": "42501"})
    repo = ReceiptRepository(fake_query(error=error))

    with pytest.raises(DataAccessError, match="permission denied") as excinfo:
        repo.fetch_receipts()

    assert excinfo.value.__cause__ is error


def test_fetch_receipts_wraps_transport_errors(fake_query):
    repo = ReceiptRepository(fake_query(error=httpx.ConnectError("connection refused")))

    with pytest.raises(DataAccessError, match="Could not reach"):
        repo.fetch_receipts()


def test_from_config_requires_credentials():
    with pytest.raises(DataAccessError):
        ReceiptRepository.from_config(BackendConfig())


def test_from_config_builds_supabase_client():
    config = BackendConfig(url="https://example.supabase.co", key="anon-key")
    with mock.patch("receipt_dashboard.loaders.receipts.create_client") as m:
        repo = ReceiptRepository.from_config(config)

    m.assert_called_once_with("https://example.supabase.co", "anon-key")
    assert repo.client is m.return_value


def test_backend_config_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon-key")

    config = BackendConfig.from_env()

    assert config.is_configured
    assert config.url == "https://example.supabase.co"


def test_format_date_bound():
    assert format_date_bound(None) is None
    assert format_date_bound("") is None
    assert format_date_bound(datetime.date(2024, 2, 29)) == "2024-02-29"
    assert format_date_bound(datetime.datetime(2024, 2, 29, 13, 0)) == "2024-02-29"
    assert format_date_bound("2024-02-29") == "2024-02-29"


def test_previous_window_same_length():
    assert previous_window("2024-01-08", "2024-01-14") == (
        datetime.date(2024, 1, 1),
        datetime.date(2024, 1, 7),
    )


def test_previous_window_single_day():
    assert previous_window(datetime.date(2024, 3, 1), datetime.date(2024, 3, 1)) == (
        datetime.date(2024, 2, 29),
        datetime.date(2024, 2, 29),
    )


@pytest.mark.parametrize(
    "start, end",
    [(None, "2024-01-14"), ("2024-01-08", None), ("2024-01-14", "2024-01-08")],
)
def test_previous_window_requires_ordered_bounds(start, end):
    assert previous_window(start, end) is None


def test_fetch_window_queries_previous_period():
    repo = ReceiptRepository(client=None)
    repo.fetch_receipts = mock.Mock(side_effect=[["current"], ["previous"]])

    current, previous = repo.fetch_window("2024-01-08", "2024-01-14")

    assert current == ["current"]
    assert previous == ["previous"]
    assert repo.fetch_receipts.call_args_list == [
        mock.call("2024-01-08", "2024-01-14"),
        mock.call(datetime.date(2024, 1, 1), datetime.date(2024, 1, 7)),
    ]


def test_fetch_window_without_both_bounds_skips_previous():
    repo = ReceiptRepository(client=None)
    repo.fetch_receipts = mock.Mock(return_value=["current"])

    assert repo.fetch_window("2024-01-08", None) == (["current"], [])
    repo.fetch_receipts.assert_called_once()
