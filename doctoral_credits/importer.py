import logging
from typing import Iterator, List, Tuple

import pandas as pd

from .calculations import credits_for_entry
from .catalog import is_day_based, key_for_name
from .exporter import EXPORT_COLUMNS
from .ledger import CreditLedger
from .schema import ActivityEntry, to_number

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["Type", "Title", "Date From"]

# Float noise only; stored credits carry one decimal
CREDIT_TOLERANCE = 1e-6

def map_export_columns_to_schema(df: pd.DataFrame) -> pd.DataFrame:
    """
    Renames the export headers to the entry field names.
    Header matching ignores case and surrounding whitespace.
    """
    mapping = {
        "type": "activity_type",
        "title": "title",
        "date from": "date_from",
        "date to": "date_to",
        "classroom hours": "classroom_hours",
        "autonomous hours": "autonomous_hours",
        "days": "days",
        "credits": "credits",
    }

    renames = {}
    for col in df.columns:
        normalised = str(col).strip().lower()
        if normalised in mapping:
            renames[col] = mapping[normalised]
    return df.rename(columns=renames)

def read_export(file) -> pd.DataFrame:
    """
    Reads a previously exported CSV (path or uploaded file object).

    Raises:
        ValueError: if the file cannot be parsed or lacks the required columns.
    """
    try:
        df = pd.read_csv(file, dtype=str, keep_default_na=False)
    except Exception as e:
        raise ValueError(f"Could not read file: {e}") from e

    present = {str(c).strip().lower() for c in df.columns}
    missing = [c for c in REQUIRED_COLUMNS if c.lower() not in present]
    if missing:
        raise ValueError(
            f"Missing required columns: {', '.join(missing)}. "
            f"Expected header: {','.join(EXPORT_COLUMNS)}"
        )

    return map_export_columns_to_schema(df)

def _parse_rows(df: pd.DataFrame) -> Iterator[Tuple[str, ActivityEntry, str]]:
    """Yields (type_key, entry, stored Credits cell) for rows with a known Type."""
    for _, row in df.iterrows():
        try:
            key = key_for_name(str(row.get("activity_type", "")))
        except KeyError:
            logger.warning("Skipping imported row with unknown type %r", row.get("activity_type"))
            continue

        if is_day_based(key):
            entry = ActivityEntry.from_form(
                title=row.get("title"),
                date_from=row.get("date_from"),
                date_to=row.get("date_to"),
                days=row.get("days", ""),
                activity_type=key,
            )
        else:
            entry = ActivityEntry.from_form(
                title=row.get("title"),
                date_from=row.get("date_from"),
                date_to=row.get("date_to"),
                classroom_hours=row.get("classroom_hours"),
                autonomous_hours=row.get("autonomous_hours"),
                activity_type=key,
            )

        yield key, entry, str(row.get("credits", "")).strip()

def entries_from_frame(df: pd.DataFrame) -> List[Tuple[str, ActivityEntry]]:
    """
    Converts rows of an export frame into (type_key, entry) pairs.
    Rows with an unknown Type are skipped; numbers are coerced, never rejected.
    Credits are recomputed by the ledger; see `credit_mismatches`.
    """
    return [(key, entry) for key, entry, _ in _parse_rows(df)]

def credit_mismatches(df: pd.DataFrame) -> int:
    """
    Counts rows whose stored Credits differ from the credits recomputed from
    the imported hours or days. Exported hours are whole numbers, so entries
    logged with fractional hours can come back with different credits.
    Rows with an empty Credits cell are not compared.
    """
    mismatched = 0
    for key, entry, stored in _parse_rows(df):
        if not stored:
            continue
        recomputed = credits_for_entry(entry)
        if abs(recomputed - to_number(stored)) > CREDIT_TOLERANCE:
            logger.warning("Imported %s entry %r: file says %s CD, recomputed %.1f CD",
                           key, entry.title, stored, recomputed)
            mismatched += 1
    return mismatched

def import_into(ledger: CreditLedger, df: pd.DataFrame) -> int:
    """Adds every imported row to the ledger; returns how many were accepted."""
    accepted = 0
    for key, entry in entries_from_frame(df):
        if ledger.add_entry(key, entry) is not None:
            accepted += 1

    logger.info("Imported %d of %d rows", accepted, len(df))
    return accepted
