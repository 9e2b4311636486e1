"""
Column layouts for phone report exports.

Each layout is a positional mapping that says where the agent name and the
three metrics live inside a raw row, how many header rows precede the data,
and which percentage convention the availability column uses.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")

# Label cells (lower-cased, trimmed) that mark aggregate rows in the extended export
SKIPPED_LABELS = {"subtotal", "total"}

LAYOUTS = {
    # Layout A: CSV export, "29%" strings in the availability column
    "simple": {
        "name": "simple",
        "description": "Simple CSV export (2 header rows, availability as '29%')",
        "header_skip": 2,
        "agent_column": 1,
        "label_column": None,
        "calls_column": 3,
        "no_answer_column": 4,
        "percent_column": 10,
        "percent_is_fraction": False,
    },
    # Layout B: spreadsheet export, data starts at row index 11, availability as 0.29
    "extended": {
        "name": "extended",
        "description": "Extended spreadsheet export (data from row 12, availability as 0.29)",
        "header_skip": 11,
        "agent_column": 2,
        "label_column": 1,
        "calls_column": 4,
        "no_answer_column": 5,
        "percent_column": 11,
        "percent_is_fraction": True,
    },
}

# Older simple exports put the availability percentage at index 8
SIMPLE_PERCENT_COLUMNS = (10, 8)

DEFAULT_LAYOUT = os.environ.get("PHONE_REPORT_LAYOUT") or None
_percent_override = os.environ.get("PHONE_REPORT_PERCENT_COLUMN", "").strip()
DEFAULT_PERCENT_COLUMN = int(_percent_override) if _percent_override.isdigit() else None


def percent_column_choices():
    """Availability column choices for the simple layout, configured default first."""
    choices = [column for column in SIMPLE_PERCENT_COLUMNS if column != DEFAULT_PERCENT_COLUMN]
    if DEFAULT_PERCENT_COLUMN is not None:
        choices.insert(0, DEFAULT_PERCENT_COLUMN)
    return choices


def get_layout(name: str, percent_column: Optional[int] = None) -> Dict[str, Any]:
    """
    Look up a named layout.

    Args:
        name: Layout name ("simple" or "extended")
        percent_column: Optional override for the availability column index

    Returns:
        A copy of the layout dictionary, safe to modify

    Raises:
        ValueError: If the layout name is unknown
    """
    if name not in LAYOUTS:
        raise ValueError(
            f"Unknown layout: {name!r} (expected one of {', '.join(sorted(LAYOUTS))})"
        )
    layout = dict(LAYOUTS[name])
    if percent_column is not None:
        if percent_column < 0:
            raise ValueError(f"percent_column must be >= 0, got {percent_column}")
        layout["percent_column"] = int(percent_column)
    return layout


def default_layout_for_filename(filename: str) -> Optional[str]:
    """
    Pick the layout matching the export type of a file.

    CSV reports come from the simple export, spreadsheets from the extended one.
    Returns None for unsupported extensions.
    """
    extension = Path(filename or "").suffix.lower()
    if extension == ".csv":
        return "simple"
    if extension in (".xlsx", ".xls"):
        return "extended"
    return None


def resolve_layout(
    filename: str,
    layout_name: Optional[str] = None,
    percent_column: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """
    Resolve the layout to use for an upload.

    An explicit layout name wins, then the PHONE_REPORT_LAYOUT setting, then
    the file extension. The percentage column override only applies to the
    simple layout; the extended export always keeps its own column.
    """
    name = layout_name or DEFAULT_LAYOUT or default_layout_for_filename(filename)
    if name is None:
        return None
    if name != "simple":
        percent_column = None
    elif percent_column is None:
        percent_column = DEFAULT_PERCENT_COLUMN
    return get_layout(name, percent_column)
