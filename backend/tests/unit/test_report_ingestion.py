"""Tests for report ingestion (raw rows → DefectReportEntry)."""

import pytest

from qa_matrix.services.report_ingestion import (
    find_column,
    find_header_row,
    gravity_to_rating,
    normalize_header,
    parse_quantity,
    parse_report_rows,
)


class TestHeaders:
    """Test header normalisation and column lookup."""

    def test_normalize_header(self):
        assert normalize_header("  Défaut_Code ") == "defaut code"
        assert normalize_header("Location   Details") == "location details"
        assert normalize_header(None) == ""

    def test_find_column_exact_first(self):
        headers = ["defect description details", "defect description"]
        assert find_column(headers, "Defect Description") == 1

    def test_find_column_prefix_then_substring(self):
        headers = ["qty", "location details (line)", "the quantity col"]
        assert find_column(headers, "Location Details") == 1
        assert find_column(headers, "Quantity") == 2

    def test_find_column_alternative_names(self):
        assert find_column(["date", "location"], "Location Details", "Location") == 1

    def test_find_column_missing(self):
        assert find_column(["date"], "Gravity") == -1

    def test_header_row_after_title(self, report_rows):
        assert find_header_row(report_rows) == 1

    def test_header_row_defaults_to_first(self):
        assert find_header_row([["a", "b"], ["c", "d"]]) == 0


class TestCellParsing:
    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        (2.7, 2),
        ("4", 4),
        ("3 pcs", 3),
        ("", 1),
        (None, 1),
        ("abc", 1),
        (0, 1),
        ("-2", 1),
        (True, 1),
        (float("nan"), 1),
        (float("inf"), 1),
        (float("-inf"), 1),
    ])
    def test_parse_quantity(self, value, expected):
        assert parse_quantity(value) == expected

    @pytest.mark.parametrize("gravity,rating", [
        ("A", 5), (" a ", 5), ("B", 3), ("C", 1), ("", 1), ("Z", 1),
    ])
    def test_gravity_to_rating(self, gravity, rating):
        assert gravity_to_rating(gravity) == rating


class TestParseReportRows:
    """Test the full row → entry conversion."""

    def test_parses_sample_report(self, sample_entries):
        assert len(sample_entries) == 4

        first = sample_entries[0]
        assert first.location == "C80"
        assert first.defect_code == "D101"
        assert first.description == "Missing bolt"
        assert first.description_detail == "LH door"
        assert first.gravity == "B"
        assert first.quantity == 2
        assert first.source == "DVX"
        assert first.responsible == "Line 2"
        assert first.date == "2024-05-02"
        assert first.pof_family == "Fasteners"
        assert first.pof_code == "Chassis"

    def test_quantity_fallbacks(self, sample_entries):
        assert [e.quantity for e in sample_entries] == [2, 1, 1, 3]

    def test_blank_rows_skipped(self, report_rows):
        entries = parse_report_rows(report_rows + [[], ["2024-05-04", "", "", "", "", "A", 2]])
        assert len(entries) == 4

    def test_short_rows_padded(self):
        rows = [
            ["Location Details", "Defect Description", "Gravity", "Quantity"],
            ["T30"],
        ]
        [entry] = parse_report_rows(rows)
        assert entry.location == "T30"
        assert entry.description == ""
        assert entry.quantity == 1

    def test_numeric_cells_become_text(self):
        rows = [
            ["Location Details", "Defect Description", "Defect Code", "Gravity"],
            [80, "Loose nut", 1203, "A"],
        ]
        [entry] = parse_report_rows(rows)
        assert entry.location == "80"
        assert entry.defect_code == "1203"

    def test_too_few_rows(self):
        assert parse_report_rows([]) == []
        assert parse_report_rows([["Defect Description"]]) == []

    def test_search_text(self, sample_entries):
        assert sample_entries[0].search_text == "C80 Missing bolt LH door"
