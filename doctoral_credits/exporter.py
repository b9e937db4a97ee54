"""CSV export of the credit ledger."""

from datetime import date
from typing import Optional

import pandas as pd

from .calculations import round_half_up
from .catalog import definition_of
from .ledger import CreditLedger

EXPORT_COLUMNS = [
    "Type",
    "Title",
    "Date From",
    "Date To",
    "Classroom Hours",
    "Autonomous Hours",
    "Days",
    "Credits",
]

def _whole_hours(value: float) -> int:
    return int(round_half_up(value, 0))

def build_export_frame(ledger: CreditLedger) -> pd.DataFrame:
    """
    One row per entry, in catalog order then insertion order.
    Hours are shown as whole numbers; missing Days / Date To are empty strings.
    """
    rows = []
    for key, entry in ledger.iter_entries():
        rows.append({
            "Type": definition_of(key).name,
            "Title": entry.title,
            "Date From": entry.date_from.isoformat() if entry.date_from else "",
            "Date To": entry.date_to.isoformat() if entry.date_to else "",
            "Classroom Hours": _whole_hours(entry.classroom_hours),
            "Autonomous Hours": _whole_hours(entry.autonomous_hours),
            "Days": "" if entry.days is None else entry.days,
            # Rounded per entry, independently of the aggregate total
            "Credits": ledger.credits_for_entry(entry),
        })

    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

def export_csv(ledger: CreditLedger) -> str:
    """Returns the CSV document (header + rows) as text."""
    return build_export_frame(ledger).to_csv(index=False, lineterminator="\n")

def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"doctoral_credits_{today.isoformat()}.csv"
