"""Shared fixtures and Supabase test doubles."""

from types import SimpleNamespace

import pytest


class FakeQuery:
    """Stands in for the PostgREST select builder and records every call."""

    def __init__(self, rows=None, error=None):
        self.rows = rows if rows is not None else []
        self.error = error
        self.calls = []

    def table(self, name):
        self.calls.append(("table", name))
        return self

    def select(self, columns):
        self.calls.append(("select", columns))
        return self

    def order(self, column, desc=False):
        self.calls.append(("order", column, desc))
        return self

    def gte(self, column, value):
        self.calls.append(("gte", column, value))
        return self

    def lte(self, column, value):
        self.calls.append(("lte", column, value))
        return self

    def execute(self):
        self.calls.append(("execute",))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=list(self.rows))


@pytest.fixture
def raw_rows() -> list[dict]:
    """Rows shaped like the moneyreciept table, amounts as text."""
    return [
        {
            "id": 3,
            "rcdt": "2024-01-02",
            "mrbillno": "MR1003",
            "paidby": "R. Iyer",
            "totalamt": "110.00",
            "discamt": "10.00",
            "netamt": "100.00",
            "due": "0",
            "remarks": "Cash",
            "userid": "reception1",
        },
        {
            "id": 2,
            "rcdt": "2024-01-01",
            "mrbillno": "MR1002",
            "paidby": "S. Khan",
            "totalamt": "30",
            "discamt": "0",
            "netamt": "30",
            "due": "5.5",
            "remarks": "UPI",
            "userid": "reception2",
        },
        {
            "id": 1,
            "rcdt": "2024-01-01",
            "mrbillno": "MR1001",
            "paidby": "A. Sharma",
            "totalamt": "25",
            "discamt": "5",
            "netamt": "20",
            "due": None,
            "remarks": "Cash",
            "userid": "reception1",
        },
    ]


@pytest.fixture
def fake_query():
    """Factory for FakeQuery doubles."""
    return FakeQuery
