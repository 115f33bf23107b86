"""Unit tests for dashboard session state and the stale-response guard."""

import datetime
import unittest.mock as mock

import pytest

from receipt_dashboard.loaders.receipts import DataAccessError, ReceiptRepository
from receipt_dashboard.session import DashboardSession

pytestmark = pytest.mark.unit


@pytest.fixture
def repository():
    repo = mock.Mock(spec=ReceiptRepository)
    repo.fetch_window.return_value = ([{"rcdt": "2024-01-01", "netamt": "10"}], [])
    return repo


def test_refresh_commits_rows(repository):
    session = DashboardSession(repository, start="2024-01-01", end="2024-01-31")

    assert session.refresh() is True

    repository.fetch_window.assert_called_once_with("2024-01-01", "2024-01-31")
    assert session.rows == [{"rcdt": "2024-01-01", "netamt": "10"}]
    assert session.error is None
    assert session.loaded


def test_refresh_error_clears_data(repository):
    session = DashboardSession(repository)
    session.refresh()

    repository.fetch_window.side_effect = DataAccessError("JWT expired")
    assert session.refresh() is True

    assert session.error == "JWT expired"
    assert session.rows == []
    assert session.previous_rows == []


def test_successful_refresh_clears_previous_error(repository):
    session = DashboardSession(repository)
    repository.fetch_window.side_effect = [DataAccessError("down"), ([{"netamt": "1"}], [])]

    session.refresh()
    session.refresh()

    assert session.error is None
    assert session.rows == [{"netamt": "1"}]


def test_stale_response_is_discarded(repository):
    session = DashboardSession(repository)
    newer_rows = [{"rcdt": "2024-02-01", "netamt": "99"}]
    outcomes = []

    def overlapping_fetch(start, end):
        if repository.fetch_window.call_count == 1:
            # A second refresh starts and finishes before the first one returns
            repository.fetch_window.side_effect = None
            repository.fetch_window.return_value = (newer_rows, [])
            outcomes.append(session.refresh())
            return [{"rcdt": "2023-12-31", "netamt": "1"}], []
        return newer_rows, []

    repository.fetch_window.side_effect = overlapping_fetch

    assert session.refresh() is False
    assert outcomes == [True]
    assert session.rows == newer_rows
    assert session.sequence == 2


def test_stale_error_is_discarded(repository):
    session = DashboardSession(repository)

    def failing_fetch(start, end):
        repository.fetch_window.side_effect = None
        session.refresh()
        raise DataAccessError("timeout")

    repository.fetch_window.side_effect = failing_fetch

    assert session.refresh() is False
    assert session.error is None
    assert session.rows == [{"rcdt": "2024-01-01", "netamt": "10"}]


def test_notify_change_marks_session_stale(repository):
    session = DashboardSession(repository)
    assert not session.has_pending_changes

    session.notify_change({"data": {"type": "INSERT"}})
    assert session.has_pending_changes

    session.refresh()
    assert not session.has_pending_changes


def test_set_date_range_reports_changes(repository):
    session = DashboardSession(repository)

    assert session.set_date_range(datetime.date(2024, 1, 1), None) is True
    assert session.set_date_range(datetime.date(2024, 1, 1), None) is False
    assert session.window_label == "2024-01-01 to …"
    assert session.clear_date_range() is True
    assert session.window_label == "All dates"
