import pytest

import report_layouts
from report_layouts import (
    LAYOUTS,
    default_layout_for_filename,
    get_layout,
    percent_column_choices,
    resolve_layout,
)


def test_get_layout_returns_a_copy():
    layout = get_layout("simple")
    layout["percent_column"] = 99
    assert LAYOUTS["simple"]["percent_column"] == 10


def test_percent_column_override():
    assert get_layout("simple", percent_column=8)["percent_column"] == 8
    assert get_layout("simple")["percent_column"] == 10


def test_unknown_layout():
    with pytest.raises(ValueError, match="Unknown layout"):
        get_layout("legacy")


def test_negative_percent_column():
    with pytest.raises(ValueError):
        get_layout("simple", percent_column=-1)


@pytest.mark.parametrize("filename, expected", [
    ("report.csv", "simple"),
    ("REPORT.CSV", "simple"),
    ("report.xlsx", "extended"),
    ("report.xls", "extended"),
    ("report.pdf", None),
    ("report", None),
])
def test_default_layout_for_filename(filename, expected):
    assert default_layout_for_filename(filename) == expected


def test_resolve_layout_prefers_explicit_name():
    assert resolve_layout("report.xlsx", "simple")["name"] == "simple"
    assert resolve_layout("report.xlsx")["name"] == "extended"
    assert resolve_layout("report.txt") is None


def test_extended_layout_settings():
    layout = get_layout("extended")
    assert layout["header_skip"] == 11
    assert layout["label_column"] == 1
    assert layout["percent_is_fraction"] is True


def test_resolve_layout_applies_percent_column_to_simple_only():
    assert resolve_layout("report.csv", percent_column=8)["percent_column"] == 8
    assert resolve_layout("report.xlsx", percent_column=10)["percent_column"] == 11
    assert resolve_layout("report.csv", "extended", percent_column=8)["percent_column"] == 11


def test_resolve_layout_uses_configured_percent_column(monkeypatch):
    monkeypatch.setattr(report_layouts, "DEFAULT_PERCENT_COLUMN", 8)
    assert resolve_layout("report.csv")["percent_column"] == 8
    assert resolve_layout("report.xlsx")["percent_column"] == 11


def test_percent_column_choices(monkeypatch):
    monkeypatch.setattr(report_layouts, "DEFAULT_PERCENT_COLUMN", None)
    assert percent_column_choices() == [10, 8]
    monkeypatch.setattr(report_layouts, "DEFAULT_PERCENT_COLUMN", 8)
    assert percent_column_choices() == [8, 10]
    monkeypatch.setattr(report_layouts, "DEFAULT_PERCENT_COLUMN", 9)
    assert percent_column_choices() == [9, 10, 8]
