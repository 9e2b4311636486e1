import io

import openpyxl
import pytest

import utils
from conftest import extended_row
from data_loading import (
    load_phone_report,
    new_dashboard_state,
    read_csv_rows,
    read_excel_rows,
    read_report_rows,
)
from phone_report_calculations import AGENT_KEY, AVAILABILITY_KEY, CALLS_KEY

SIMPLE_CSV = (
    "Phone Report,,,,,,,,,,\n"
    ",Agent,,Outbound,No Answer,,,,,,Available\n"
    ",Alice,,50,1,,,,,,90%\n"
    "\n"
    ",Bob,,10,20,,,,,,5%\n"
    ",Carol,,30,,,,,,,45.5%\n"
)


def workbook_bytes(rows):
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row_idx, row in enumerate(rows, start=1):
        for col_idx, value in enumerate(row, start=1):
            if value not in ("", None):
                sheet.cell(row=row_idx, column=col_idx, value=value)
    extra = workbook.create_sheet("Ignored")
    extra["A1"] = "second sheet"
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestReadRows:
    def test_csv_rows_skip_blank_lines(self):
        rows = read_csv_rows(SIMPLE_CSV.encode("utf-8"))
        assert len(rows) == 5
        assert rows[2] == ["", "Alice", "", "50", "1", "", "", "", "", "", "90%"]

    def test_csv_keeps_rows_of_empty_cells(self):
        rows = read_csv_rows(b",,\na,b,c\n")
        assert rows == [["", "", ""], ["a", "b", "c"]]

    def test_csv_keeps_whitespace_only_lines(self):
        rows = read_csv_rows(b"h\n   \n,Alice,,10,2,,,,,,20%\n")
        assert len(rows) == 3
        assert rows[1][0] == "   "
        assert rows[2][1] == "Alice"

    def test_whitespace_header_line_keeps_first_agent(self):
        state, error = load_phone_report(b"Phone Report\n   \n,Alice,,10,2,,,,,,20%\n", "report.csv")
        assert error is None
        assert state["datasets"]["calls"] == [{AGENT_KEY: "Alice", CALLS_KEY: 10}]

    def test_csv_pads_ragged_rows(self):
        rows = read_csv_rows(b"Title\n,Alice,,10,2\n")
        assert rows == [["Title", "", "", "", ""], ["", "Alice", "", "10", "2"]]

    def test_csv_with_bom_and_quotes(self):
        rows = read_csv_rows("\ufeffa,\"Doe, Jane\",c\n".encode("utf-8"))
        assert rows == [["a", "Doe, Jane", "c"]]

    def test_empty_csv(self):
        assert read_csv_rows(b"") == []

    def test_excel_rows_keep_blank_rows_and_first_sheet_only(self):
        content = workbook_bytes([["Title"], [], ["", "Agent", "Alice", "", 10, 2]])
        rows = read_excel_rows(content, "report.xlsx")
        assert len(rows) == 3
        assert rows[1] == [""] * 6
        assert rows[2] == ["", "Agent", "Alice", "", 10, 2]

    def test_unsupported_extension(self):
        with pytest.raises(ValueError, match="Unsupported file type"):
            read_report_rows(b"data", "report.txt")


class TestLoadPhoneReport:
    def test_missing_input_is_a_no_op(self):
        assert load_phone_report(None, None) == (None, None)
        assert load_phone_report(b"", "report.csv") == (None, None)

    def test_csv_defaults_to_simple_layout(self):
        state, error = load_phone_report(SIMPLE_CSV.encode("utf-8"), "report.csv")
        assert error is None
        assert state["layout"]["name"] == "simple"
        datasets = state["datasets"]
        assert [r[AGENT_KEY] for r in datasets["calls"]] == ["Alice", "Carol", "Bob"]
        assert [r[AGENT_KEY] for r in datasets["no_answers"]] == ["Bob", "Alice"]
        assert datasets["availability"][1][AVAILABILITY_KEY] == 45.5
        assert state["metrics"]["has_data"] is True
        assert state["loaded_at"] is not None

    def test_xlsx_defaults_to_extended_layout(self):
        header = [["Agent Activity Report"]] + [[] for _ in range(10)]
        data = [
            extended_row("Alice", 10, 2, 0.29, label="Agent"),
            extended_row("Bob", 20, 1, 0.75, label="Agent"),
            extended_row("Team A", 30, 3, 0.5, label="Subtotal"),
            extended_row("", "", "", ""),
            extended_row("All", 30, 3, 0.5, label="Total"),
        ]
        state, error = load_phone_report(workbook_bytes(header + data), "report.xlsx")
        assert error is None
        assert state["layout"]["name"] == "extended"
        calls = state["datasets"]["calls"]
        assert calls == [{AGENT_KEY: "Bob", CALLS_KEY: 20}, {AGENT_KEY: "Alice", CALLS_KEY: 10}]
        availability = state["datasets"]["availability"]
        assert availability[0][AVAILABILITY_KEY] == pytest.approx(75.0)

    def test_explicit_layout_and_percent_column(self):
        content = b"h\nh\n,Alice,,10,2,,,,35%,,\n"
        state, error = load_phone_report(content, "old.csv", layout_name="simple", percent_column=8)
        assert error is None
        assert state["datasets"]["availability"] == [{AGENT_KEY: "Alice", AVAILABILITY_KEY: 35.0}]

    def test_simple_percent_column_does_not_apply_to_spreadsheets(self):
        header = [["Agent Activity Report"]] + [[] for _ in range(10)]
        content = workbook_bytes(header + [extended_row("Alice", 10, 2, 0.29, label="Agent")])
        state, error = load_phone_report(content, "report.xlsx", layout_name=None, percent_column=10)
        assert error is None
        assert state["layout"]["percent_column"] == 11
        assert state["datasets"]["availability"] == [
            {AGENT_KEY: "Alice", AVAILABILITY_KEY: pytest.approx(29.0)}
        ]

    def test_unsupported_extension_is_reported(self):
        state, error = load_phone_report(b"data", "report.pdf")
        assert state is None
        assert "Unsupported file type" in error
        assert any(key.startswith("Upload_UnsupportedType") for key in utils.load_metrics()["errors"])

    def test_corrupt_workbook_is_reported(self):
        state, error = load_phone_report(b"not a workbook", "report.xlsx")
        assert state is None
        assert "report.xlsx" in error

    def test_reupload_produces_identical_datasets(self):
        content = SIMPLE_CSV.encode("utf-8")
        first, _ = load_phone_report(content, "report.csv")
        second, _ = load_phone_report(content, "report.csv")
        assert first["datasets"] == second["datasets"]
        assert first["metrics"] == second["metrics"]

    def test_report_without_agents_degrades_to_empty_state(self):
        state, error = load_phone_report(b"h\nh\n,,,,\n", "report.csv")
        assert error is None
        assert state["datasets"]["calls"] == []
        assert state["metrics"]["has_data"] is False


def test_new_dashboard_state_is_empty():
    state = new_dashboard_state()
    assert state["filename"] is None
    assert state["datasets"]["calls"] == []
    assert state["metrics"]["has_data"] is False
    assert state["metrics"]["summary"]["total_agents"] == 0
