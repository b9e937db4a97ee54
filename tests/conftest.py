"""
Shared pytest fixtures for doctoral_credits tests.
"""
import logging
from datetime import date

import pytest

from doctoral_credits.data_manager import DataManager
from doctoral_credits.ledger import CreditLedger
from doctoral_credits.schema import ActivityEntry


@pytest.fixture
def ledger():
    """An empty ledger with no change listener."""
    return CreditLedger()


@pytest.fixture
def make_entry():
    """
    Factory for complete entries. Keyword arguments override the defaults.
    """
    def _make(title="Entry", date_from=date(2025, 1, 15), **kwargs):
        return ActivityEntry(title=title, date_from=date_from, **kwargs)
    return _make


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "store" / "storage.json"


@pytest.fixture
def data_manager(storage_path):
    return DataManager(storage_path)


@pytest.fixture
def populated_ledger(ledger, make_entry):
    """
    A ledger with entries in hour-based and day-based types.
    """
    ledger.add_entry("courses", make_entry("Statistics", classroom_hours=10, autonomous_hours=20))
    ledger.add_entry("courses", make_entry("Machine Learning", classroom_hours=7, autonomous_hours=20,
                                           date_to=date(2025, 2, 1)))
    ledger.add_entry("seminars", make_entry("Research ethics", classroom_hours=5, autonomous_hours=15))
    ledger.add_entry("dissemination", make_entry("Science fair", days=2))
    ledger.add_entry("extraCurricular", make_entry("Summer school", days=10,
                                                   date_to=date(2025, 7, 10)))
    return ledger


@pytest.fixture
def clean_root_logger():
    """
    Restores the root logger handlers and level after a logging test.
    """
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
