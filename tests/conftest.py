"""Shared fixtures."""

from datetime import date

import pytest

from finance_tracker.config import AppSettings
from finance_tracker.ledger import LedgerStore


TODAY = date(2024, 12, 15)


@pytest.fixture
def store() -> LedgerStore:
    """Empty store with a fixed clock."""
    return LedgerStore(clock=lambda: TODAY)


@pytest.fixture
def app_settings() -> AppSettings:
    """Default settings, independent of the environment."""
    return AppSettings(_env_file=None)
