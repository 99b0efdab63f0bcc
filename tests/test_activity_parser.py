"""Tests for turning feed CSV text into ActivityRecord objects."""

from scripts.activity_parser import MIN_COLUMNS, process_csv
from tests.conftest import HEADER, SAMPLE_ROWS


def _row(**overrides):
    cols = [
        "E9", "test user", "test manager", "west", "pune", "cluster lead",
        "P1", "05-10-2025", "won", "", "", "11:00 AM", "RV", "05-Oct-2025",
    ]
    names = [
        "emp_id", "employee", "manager", "zone", "city", "cluster_head",
        "pipeline", "activity_date", "status", "hi_po", "unused",
        "timestamp", "activity_type", "date",
    ]
    for key, value in overrides.items():
        cols[names.index(key)] = value
    return ",".join(cols)


class TestProcessCsv:
    def test_parses_sample_feed(self, sample_csv):
        records = process_csv(sample_csv)
        assert len(records) == len(SAMPLE_ROWS)
        first = records[0]
        assert first.emp_id == "E1"
        assert first.employee == "Rahul Sharma"
        assert first.manager == "Anita Desai"
        assert first.zone == "North"
        assert first.city == "Delhi"
        assert first.pipeline == "P1"
        assert first.status == "WON"
        assert first.timestamp_minutes == 580
        assert first.date == "01-Oct-2025"

    def test_header_only_or_empty_yields_nothing(self):
        assert process_csv("") == []
        assert process_csv(HEADER) == []
        assert process_csv(HEADER + "\n\n   \n") == []

    def test_first_line_always_treated_as_header(self):
        records = process_csv(_row(emp_id="A") + "\n" + _row(emp_id="B"))
        assert [r.emp_id for r in records] == ["B"]

    def test_short_lines_skipped(self):
        short = ",".join(["x"] * (MIN_COLUMNS - 1))
        csv_text = "\n".join([HEADER, short, _row()])
        records = process_csv(csv_text)
        assert len(records) == 1

    def test_missing_date_column_reads_empty(self):
        thirteen = ",".join(_row().split(",")[:MIN_COLUMNS])
        records = process_csv(HEADER + "\n" + thirteen)
        assert len(records) == 1
        assert records[0].date == ""

    def test_crlf_line_endings(self):
        csv_text = "\r\n".join([HEADER, _row(), _row(emp_id="E10")]) + "\r\n"
        records = process_csv(csv_text)
        assert [r.emp_id for r in records] == ["E9", "E10"]
        assert records[1].date == "05-Oct-2025"

    def test_case_rules_per_column(self):
        records = process_csv(HEADER + "\n" + _row(
            status="closed won", hi_po="HIPO_Inactive", activity_type="sp", pipeline=" p-1 ",
        ))
        record = records[0]
        assert record.status == "CLOSED WON"
        assert record.is_won
        assert record.hi_po == "hipo_inactive"
        assert record.is_hipo_inactive
        assert record.activity_type == "SP"
        assert record.pipeline == "p-1"

    def test_quoted_city_with_comma(self):
        records = process_csv(HEADER + "\n" + _row(city='"delhi, ncr"'))
        assert records[0].city == "Delhi Ncr"

    def test_unparseable_timestamp_is_zero(self):
        records = process_csv(HEADER + "\n" + _row(timestamp="n/a"))
        assert records[0].timestamp_minutes == 0

    def test_preserves_row_order_and_is_repeatable(self, sample_csv):
        first = process_csv(sample_csv)
        second = process_csv(sample_csv)
        assert first == second
        assert [r.emp_id for r in first] == ["E1", "E2", "E3", "E4"]
