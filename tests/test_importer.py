"""
Unit tests for doctoral_credits.importer.
"""
import io

import pytest

from doctoral_credits.catalog import activity_keys
from doctoral_credits.exporter import export_csv
from doctoral_credits.importer import credit_mismatches, entries_from_frame, import_into, read_export
from doctoral_credits.ledger import CreditLedger

HEADER = "Type,Title,Date From,Date To,Classroom Hours,Autonomous Hours,Days,Credits\n"


class TestReadExport:
    """Parsing uploaded CSV files."""

    def test_renames_columns(self):
        df = read_export(io.StringIO(HEADER + "Labs,Lab A,2025-01-01,,15,10,,1.0\n"))
        assert {"activity_type", "title", "date_from", "classroom_hours"} <= set(df.columns)

    def test_header_case_is_ignored(self):
        df = read_export(io.StringIO("type,TITLE,date from\nLabs,Lab A,2025-01-01\n"))
        assert list(df["title"]) == ["Lab A"]

    def test_missing_columns(self):
        with pytest.raises(ValueError, match="Missing required columns"):
            read_export(io.StringIO("Title,Days\nA,1\n"))

    def test_unreadable_file(self):
        with pytest.raises(ValueError, match="Could not read file"):
            read_export(io.StringIO(""))


class TestEntriesFromFrame:
    """Rows to entries."""

    def test_hour_and_day_rows(self):
        df = read_export(io.StringIO(
            HEADER
            + "Seminars,Ethics,2025-02-01,2025-02-03,10,15,,1.0\n"
            + "Dissemination,Poster,2025-03-01,,0,0,2,1.0\n"
        ))
        (k1, seminar), (k2, poster) = entries_from_frame(df)

        assert k1 == "seminars"
        assert seminar.classroom_hours == 10.0
        assert seminar.days is None
        assert seminar.date_to.isoformat() == "2025-02-03"

        assert k2 == "dissemination"
        assert poster.days == 2.0
        assert poster.date_to is None

    def test_unknown_type_is_skipped(self):
        df = read_export(io.StringIO(HEADER + "Sports,Run,2025-01-01,,1,1,,0\n"))
        assert entries_from_frame(df) == []

    def test_junk_numbers_become_zero(self):
        df = read_export(io.StringIO(HEADER + "labs,Lab,2025-01-01,,lots,??,,x\n"))
        (_, entry), = entries_from_frame(df)
        assert entry.classroom_hours == 0.0
        assert entry.autonomous_hours == 0.0


class TestImportInto:
    """Adding imported rows through the ledger."""

    def test_export_then_import(self, ledger, make_entry):
        ledger.add_entry("courses", make_entry("Stats", classroom_hours=10, autonomous_hours=20))
        ledger.add_entry("tutoring", make_entry("Tutor", classroom_hours=20, autonomous_hours=5))
        ledger.add_entry("extraCurricular", make_entry("Summer school", days=3))

        target = CreditLedger()
        accepted = import_into(target, read_export(io.StringIO(export_csv(ledger))))

        assert accepted == 3
        for key in activity_keys():
            assert target.credits_for(key) == ledger.credits_for(key)
            assert [e.title for e in target.entries(key)] == [e.title for e in ledger.entries(key)]

    def test_incomplete_rows_are_rejected(self, ledger):
        df = read_export(io.StringIO(
            HEADER
            + "Labs,,2025-01-01,,15,10,,1.0\n"
            + "Labs,No date,,,15,10,,1.0\n"
            + "Labs,Good,2025-01-01,,15,10,,1.0\n"
        ))
        assert import_into(ledger, df) == 1
        assert [e.title for e in ledger.entries("labs")] == ["Good"]

    def test_fractional_hours_change_credits(self, ledger, make_entry):
        # 2.4h classroom exports as 2h: 0.48 rounds to 0.5 CD, 2h gives 0.4 CD
        ledger.add_entry("courses", make_entry("Reading group", classroom_hours=2.4, autonomous_hours=20))
        df = read_export(io.StringIO(export_csv(ledger)))

        target = CreditLedger()
        import_into(target, df)

        assert ledger.credits_for("courses") == 0.5
        assert target.credits_for("courses") == 0.4
        assert credit_mismatches(df) == 1


class TestCreditMismatches:
    """Stored Credits compared with recomputed credits."""

    def test_matching_export_has_no_mismatches(self, populated_ledger):
        df = read_export(io.StringIO(export_csv(populated_ledger)))
        assert credit_mismatches(df) == 0

    def test_mismatch_is_counted_and_logged(self, caplog):
        df = read_export(io.StringIO(
            HEADER
            + "Labs,Lab A,2025-01-01,,15,10,,1.0\n"
            + "Labs,Lab B,2025-01-01,,15,10,,2.5\n"
            + "Dissemination,Poster,2025-03-01,,,,2,3\n"
        ))
        with caplog.at_level("WARNING", logger="doctoral_credits.importer"):
            assert credit_mismatches(df) == 2
        assert "Lab B" in caplog.text
        assert "Poster" in caplog.text

    def test_empty_credits_cell_is_not_compared(self):
        df = read_export(io.StringIO(HEADER + "Labs,Lab A,2025-01-01,,15,10,,\n"))
        assert credit_mismatches(df) == 0

    def test_missing_credits_column(self):
        df = read_export(io.StringIO("Type,Title,Date From,Days\nDissemination,Poster,2025-03-01,2\n"))
        assert credit_mismatches(df) == 0
