"""Tests for the text helpers: name normalisation, clock parsing, CSV splitting."""

import pytest

from scripts.lib.parsing import (
    format_minutes,
    normalize_text,
    parse_clock,
    parse_csv_line,
    parse_time,
)


class TestNormalizeText:
    def test_collapses_case_and_whitespace(self):
        assert normalize_text("  RAHUL  sharma. ") == "Rahul Sharma"

    def test_punctuation_becomes_word_break(self):
        assert normalize_text("MUMBAI-west") == "Mumbai West"
        assert normalize_text("o'brien") == "O Brien"

    def test_spellings_group_together(self):
        assert normalize_text("anita desai") == normalize_text("ANITA   DESAI")

    @pytest.mark.parametrize("value", [
        "  navi-MUMBAI  sector 7 ",
        "o'brien & SONS, ltd.",
        "a b c\td\ne",
        "café Über-Straße",
        "İstanbul",
        "x--y__z..",
        "north\u00a0 zone\u2003east",
        "\u3000 \t\u00a0 ",
        "123 456",
        "!!!",
        "",
    ])
    def test_idempotent(self, value):
        once = normalize_text(value)
        assert normalize_text(once) == once

    def test_unicode_whitespace_collapses(self):
        assert normalize_text("north\u00a0 zone\u2003east") == "North Zone East"

    def test_digits_kept(self):
        assert normalize_text("zone 2b") == "Zone 2b"

    @pytest.mark.parametrize("value", ["", "   ", "---"])
    def test_empty_results(self, value):
        assert normalize_text(value) == ""


class TestParseTime:
    @pytest.mark.parametrize("text,expected", [
        ("2:15 PM", 855),
        ("9:40 AM", 580),
        ("9:05 am", 545),
        ("12:00 AM", 0),
        ("12:30 PM", 750),
        ("11:59 PM", 1439),
        ("9", 540),
        ("10:05:33 AM", 605),
    ])
    def test_twelve_hour_clock(self, text, expected):
        assert parse_time(text) == expected

    def test_missing_meridiem_reads_as_am(self):
        assert parse_time("7:30") == 450

    def test_bad_minutes_count_as_zero(self):
        assert parse_time("9:xx AM") == 540

    @pytest.mark.parametrize("text", ["", None, "garbage", "13:00 PM", "25:00"])
    def test_unparseable_or_out_of_range_is_zero(self, text):
        assert parse_time(text) == 0

    def test_empty_hour_reads_as_zero(self):
        assert parse_time(":30 PM") == 750
        assert parse_time(":45 AM") == 45
        assert parse_clock(":00") == 0

    def test_parse_clock_separates_midnight_from_failure(self):
        assert parse_clock("12:00 AM") == 0
        assert parse_clock("garbage") is None
        assert parse_clock("") is None


class TestFormatMinutes:
    @pytest.mark.parametrize("minutes,label", [
        (0, "12:00 AM"),
        (570, "9:30 AM"),
        (720, "12:00 PM"),
        (750, "12:30 PM"),
        (1439, "11:59 PM"),
    ])
    def test_labels(self, minutes, label):
        assert format_minutes(minutes) == label

    def test_label_parses_back(self):
        assert parse_time(format_minutes(855)) == 855


class TestParseCsvLine:
    def test_plain_fields(self):
        assert parse_csv_line("a,b,c") == ["a", "b", "c"]

    def test_quoted_comma_stays_in_field(self):
        assert parse_csv_line('a,"b,c",d') == ["a", "b,c", "d"]

    def test_empty_fields_preserved(self):
        assert parse_csv_line("a,,b,") == ["a", "", "b", ""]

    def test_empty_line_is_one_field(self):
        assert parse_csv_line("") == [""]

    def test_unbalanced_quote_swallows_rest_of_line(self):
        assert parse_csv_line('a,"b,c') == ["a", '"b,c']

    def test_field_count_matches_unquoted_commas(self):
        line = 'x,"1,2",y,"3",z'
        assert len(parse_csv_line(line)) == 5
