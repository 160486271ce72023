"""
conftest.py - Shared pytest fixtures for txledger tests

Provides common fixtures used across unit, conformance and functional tests:
- A fresh, quiet engine
- A funded engine with a few deposits already applied
- A factory writing CSV event logs to a temporary directory
"""

import textwrap
from decimal import Decimal

import pytest

from txledger import LedgerEngine, Transaction, TransactionKind


@pytest.fixture
def engine():
    """Empty engine with verbose output disabled."""
    return LedgerEngine(verbose=False)


@pytest.fixture
def funded_engine():
    """
    Engine with three deposits applied:
        client 1: tx 1 = 10.0, tx 2 = 5.5
        client 2: tx 3 = 7.25
    """
    engine = LedgerEngine(verbose=False)
    engine.apply(Transaction(TransactionKind.DEPOSIT, 1, 1, Decimal("10.0")))
    engine.apply(Transaction(TransactionKind.DEPOSIT, 1, 2, Decimal("5.5")))
    engine.apply(Transaction(TransactionKind.DEPOSIT, 2, 3, Decimal("7.25")))
    return engine


@pytest.fixture
def write_csv(tmp_path):
    """
    Write a CSV event log and return its path.

    The text is dedented and stripped of the leading newline, so tests can
    use indented triple-quoted strings.
    """
    counter = {"n": 0}

    def _write(text: str, name: str = None) -> str:
        counter["n"] += 1
        path = tmp_path / (name or f"transactions_{counter['n']:03d}.csv")
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return str(path)

    return _write
