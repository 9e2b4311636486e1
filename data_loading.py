"""
Data loading functions for uploaded phone reports.

This module turns the bytes of an uploaded CSV or spreadsheet into a table of
raw rows and runs the calculation pipeline over it, producing the dashboard
state for one upload.
"""

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import List, Tuple, Optional, Dict, Any

import openpyxl
import pandas as pd
import xlrd

from phone_report_calculations import build_agent_datasets, calculate_all_metrics, empty_datasets
from report_layouts import SUPPORTED_EXTENSIONS, resolve_layout
from utils import track_error, logger


def _decode_text(file_bytes: bytes) -> str:
    try:
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("Report is not valid UTF-8, decoding as latin-1")
        return file_bytes.decode("latin-1")


def read_csv_rows(file_bytes: bytes) -> List[List[str]]:
    """Read a CSV report into rows of string cells.

    No header row is interpreted and only truly empty lines are skipped; a
    line of spaces or of bare delimiters is kept as a row. Rows shorter than
    the widest row are padded with empty strings.

    Args:
        file_bytes: Raw bytes of the CSV file.

    Returns:
        List of rows, each a list of cell strings.
    """
    text = _decode_text(file_bytes)
    rows = [fields for fields in csv.reader(io.StringIO(text)) if fields not in ([], [""])]
    if not rows:
        return []

    df = pd.DataFrame(rows, dtype=object)
    return df.fillna("").values.tolist()


def _xlsx_rows(file_bytes: bytes) -> List[List[Any]]:
    workbook = openpyxl.load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        return [
            ["" if value is None else value for value in row]
            for row in sheet.iter_rows(values_only=True)
        ]
    finally:
        workbook.close()


def _xls_rows(file_bytes: bytes) -> List[List[Any]]:
    workbook = xlrd.open_workbook(file_contents=file_bytes)
    sheet = workbook.sheet_by_index(0)
    return [sheet.row_values(index) for index in range(sheet.nrows)]


def read_excel_rows(file_bytes: bytes, filename: str) -> List[List[Any]]:
    """Read the first sheet of a spreadsheet report into rows of cells.

    Blank rows are kept so that row positions match the sheet; missing cells
    become empty strings.

    Args:
        file_bytes: Raw bytes of the workbook.
        filename: Original file name, used to pick the .xlsx or .xls reader.

    Returns:
        List of rows, each a list of cell values.
    """
    if Path(filename).suffix.lower() == ".xls":
        rows = _xls_rows(file_bytes)
    else:
        rows = _xlsx_rows(file_bytes)

    width = max((len(row) for row in rows), default=0)
    return [list(row) + [""] * (width - len(row)) for row in rows]


def read_report_rows(file_bytes: bytes, filename: str) -> List[List[Any]]:
    """Read an uploaded report into rows, dispatching on the file extension.

    Raises:
        ValueError: If the extension is not .csv, .xlsx or .xls.
    """
    extension = Path(filename).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValueError(
            f"Unsupported file type '{extension or filename}'. "
            f"Upload one of: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    if extension == ".csv":
        return read_csv_rows(file_bytes)
    return read_excel_rows(file_bytes, filename)


def new_dashboard_state() -> Dict[str, Any]:
    """State of a dashboard before any report has been uploaded."""
    datasets = empty_datasets()
    return {
        "filename": None,
        "layout": None,
        "datasets": datasets,
        "metrics": calculate_all_metrics(datasets),
        "loaded_at": None,
    }


def load_phone_report(
    file_bytes: Optional[bytes],
    filename: Optional[str],
    layout_name: Optional[str] = None,
    percent_column: Optional[int] = None,
) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Parse an uploaded phone report into a fresh dashboard state.

    Each call builds its state from scratch; nothing carries over from a
    previous upload.

    Args:
        file_bytes: Raw bytes of the uploaded file (None when nothing is selected).
        filename: Original file name.
        layout_name: Layout to force, or None to pick by file type.
        percent_column: Optional availability column override for the layout.

    Returns:
        Tuple of (state, error_message). Both are None when no file was given;
        otherwise exactly one is None.
    """
    if not file_bytes or not filename:
        return None, None

    layout = resolve_layout(filename, layout_name, percent_column)
    if layout is None:
        error_msg = (
            f"Unsupported file type for {filename}. "
            f"Upload one of: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
        track_error("Upload_UnsupportedType", error_msg)
        return None, error_msg

    try:
        rows = read_report_rows(file_bytes, filename)
    except ValueError as e:
        error_msg = f"Could not read {filename}: {e}"
        track_error("Upload_Parse", error_msg)
        return None, error_msg
    except Exception as e:
        error_msg = f"Could not read {filename}: {e}"
        track_error("Upload_Unexpected", error_msg)
        logger.exception("Unexpected error reading uploaded report")
        return None, error_msg

    datasets = build_agent_datasets(rows, layout)
    state = {
        "filename": filename,
        "layout": layout,
        "datasets": datasets,
        "metrics": calculate_all_metrics(datasets),
        "loaded_at": datetime.now().isoformat(),
    }
    logger.info(
        f"Loaded {filename} ({len(rows)} rows, layout '{layout['name']}'): "
        f"{len(datasets['calls'])} agents with call data"
    )
    return state, None
