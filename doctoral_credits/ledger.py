"""Credit ledger: per-activity-type entry lists and their derived totals.

The ledger owns one `ActivityAggregate` per catalog key. Totals are always
re-derived from the entry list after a mutation (never patched in place), so
they cannot drift from the entries they summarise.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

import pandas as pd

from .calculations import calculate_credits, credits_for_entry
from .catalog import CATALOG, activity_keys, definition_of
from .schema import ActivityEntry, ActivityType, new_uid

logger = logging.getLogger(__name__)

TypeKey = Union[str, ActivityType]

@dataclass
class ActivityAggregate:
    classroom_total: float = 0.0
    autonomous_total: float = 0.0
    days_total: float = 0.0
    entries: List[ActivityEntry] = field(default_factory=list)

    def recompute(self) -> None:
        """Re-derives the three totals from the current entries."""
        self.classroom_total = sum(e.classroom_hours for e in self.entries)
        self.autonomous_total = sum(e.autonomous_hours for e in self.entries)
        self.days_total = sum(e.days or 0.0 for e in self.entries)

    def to_record(self) -> dict:
        return {
            "classroom": self.classroom_total,
            "autonomous": self.autonomous_total,
            "days": self.days_total,
            "entries": [e.to_record() for e in self.entries],
        }

class CreditLedger:
    """
    Mapping from activity-type key to ActivityAggregate, always covering every
    catalog key.

    Args:
        on_change: Optional callback invoked with the ledger after every
            successful mutation (used to persist on change).
    """

    def __init__(self, on_change: Optional[Callable[["CreditLedger"], None]] = None):
        self._aggregates: Dict[str, ActivityAggregate] = {
            key: ActivityAggregate() for key in activity_keys()
        }
        self.on_change = on_change

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _resolve(self, type_key: TypeKey) -> str:
        # Raises KeyError for keys outside the catalog
        definition_of(type_key)
        return type_key.value if isinstance(type_key, ActivityType) else type_key

    def aggregate(self, type_key: TypeKey) -> ActivityAggregate:
        return self._aggregates[self._resolve(type_key)]

    def entries(self, type_key: TypeKey) -> List[ActivityEntry]:
        """A copy of the type's entries in insertion order."""
        return list(self.aggregate(type_key).entries)

    def iter_entries(self) -> Iterator[Tuple[str, ActivityEntry]]:
        """Yields (type_key, entry) in catalog order, then insertion order."""
        for key in activity_keys():
            for entry in self._aggregates[key].entries:
                yield key, entry

    def keys(self) -> List[str]:
        return list(self._aggregates.keys())

    def __len__(self) -> int:
        return sum(len(agg.entries) for agg in self._aggregates.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, CreditLedger):
            return NotImplemented
        return self._aggregates == other._aggregates

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_entry(self, type_key: TypeKey, entry: ActivityEntry) -> Optional[ActivityEntry]:
        """
        Appends an entry to a type's list and recomputes that type's totals.

        Returns:
            The stored entry (stamped with its activity type), or None when the
            entry has no title or no start date. Rejected entries leave the
            ledger untouched.
        """
        key = self._resolve(type_key)

        if not entry.is_complete():
            logger.debug("Rejected incomplete entry for %s: %r", key, entry)
            return None

        stored = dataclasses.replace(entry, activity_type=key, uid=entry.uid or new_uid())

        aggregate = self._aggregates[key]
        aggregate.entries.append(stored)
        aggregate.recompute()

        logger.info("Added entry %s to %s (%d entries)", stored.uid, key, len(aggregate.entries))
        self._notify()
        return stored

    def delete_entry_at(self, type_key: TypeKey, index: int) -> Optional[ActivityEntry]:
        """
        Removes the entry at a list position. Later entries shift down by one.
        Out-of-range (including negative) indices are a no-op returning None.
        """
        key = self._resolve(type_key)
        aggregate = self._aggregates[key]

        if not isinstance(index, int) or index < 0 or index >= len(aggregate.entries):
            logger.debug("Ignored delete of %s[%r]: out of range", key, index)
            return None

        removed = aggregate.entries.pop(index)
        aggregate.recompute()

        logger.info("Deleted entry %s from %s", removed.uid, key)
        self._notify()
        return removed

    def delete_entry(self, type_key: TypeKey, uid: str) -> Optional[ActivityEntry]:
        """Removes the entry with the given identifier; unknown ids are a no-op."""
        key = self._resolve(type_key)
        for index, entry in enumerate(self._aggregates[key].entries):
            if entry.uid == uid:
                return self.delete_entry_at(key, index)

        logger.debug("Ignored delete of unknown entry %s in %s", uid, key)
        return None

    def recompute(self, type_key: Optional[TypeKey] = None) -> None:
        """Re-derives totals for one type, or for every type when none is given."""
        if type_key is None:
            for aggregate in self._aggregates.values():
                aggregate.recompute()
        else:
            self.aggregate(type_key).recompute()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    # ------------------------------------------------------------------
    # Credits
    # ------------------------------------------------------------------

    def credits_for(self, type_key: TypeKey) -> float:
        """Credits of a type, evaluated once over its aggregate totals."""
        aggregate = self.aggregate(type_key)
        return calculate_credits(
            definition_of(type_key),
            classroom_hours=aggregate.classroom_total,
            autonomous_hours=aggregate.autonomous_total,
            days=aggregate.days_total,
        )

    def credits_for_entry(self, entry: ActivityEntry) -> float:
        """Credits of a single entry; does not touch the ledger."""
        return credits_for_entry(entry)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_record(self) -> dict:
        """Structured record keyed like the ledger, ready for json.dumps."""
        return {key: agg.to_record() for key, agg in self._aggregates.items()}

    @classmethod
    def from_record(cls,
                    record: Optional[dict],
                    on_change: Optional[Callable[["CreditLedger"], None]] = None) -> "CreditLedger":
        """
        Rebuilds a ledger from a stored record.

        Missing types start empty, unknown keys are dropped, and totals are
        recomputed from the entries instead of trusting the stored sums.
        """
        ledger = cls()
        for key, raw in (record or {}).items():
            if key not in CATALOG:
                logger.warning("Dropping unknown activity type %r from stored record", key)
                continue
            if not isinstance(raw, dict):
                continue

            aggregate = ledger._aggregates[key]
            for raw_entry in raw.get("entries") or []:
                if isinstance(raw_entry, dict):
                    entry = ActivityEntry.from_record(raw_entry, activity_type=key)
                    aggregate.entries.append(dataclasses.replace(entry, activity_type=key))
            aggregate.recompute()

        ledger.on_change = on_change
        return ledger

    def to_dataframe(self) -> pd.DataFrame:
        """Flat table of all entries with their per-entry credits."""
        columns = ["uid", "activity_type", "title", "date_from", "date_to",
                   "classroom_hours", "autonomous_hours", "days", "credits"]
        rows = []
        for key, entry in self.iter_entries():
            rows.append({
                "uid": entry.uid,
                "activity_type": key,
                "title": entry.title,
                "date_from": entry.date_from,
                "date_to": entry.date_to,
                "classroom_hours": entry.classroom_hours,
                "autonomous_hours": entry.autonomous_hours,
                "days": entry.days,
                "credits": self.credits_for_entry(entry),
            })

        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(rows, columns=columns)
