# doctoral_credits/__init__.py
"""Credit-accounting engine for the Doctoral Credits Tracker."""

from .calculations import CreditReporter, CreditStats
from .catalog import definition_of
from .ledger import ActivityAggregate, CreditLedger
from .schema import ActivityEntry, ActivityType, DayBased, HourBased

__all__ = [
    "ActivityAggregate",
    "ActivityEntry",
    "ActivityType",
    "CreditLedger",
    "CreditReporter",
    "CreditStats",
    "DayBased",
    "HourBased",
    "definition_of",
]
