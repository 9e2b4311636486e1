"""
Calculation functions for the Phone Report dashboard.

This module turns raw report rows into per-agent metric lists and derives the
summary averages and the elite / at-risk agent cohorts. It has no UI
dependencies: every function accepts plain rows or lists of record
dictionaries and returns JSON-serializable values.
"""

import logging
import math
import numbers
import re
from typing import Dict, List, Optional, Any, Iterable, Sequence, Set

import numpy as np
import pandas as pd

from report_layouts import SKIPPED_LABELS

logger = logging.getLogger(__name__)

AGENT_KEY = "Agent"
CALLS_KEY = "OutboundCalls"
NO_ANSWERS_KEY = "NoAnswers"
AVAILABILITY_KEY = "PercentageAvailable"

# Dataset list name -> metric key
DATASET_KEYS = {
    "calls": CALLS_KEY,
    "no_answers": NO_ANSWERS_KEY,
    "availability": AVAILABILITY_KEY,
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


# ============================================================================
# Cell Parsing
# ============================================================================


def cell_to_text(cell: Any) -> str:
    """
    Convert a raw cell to trimmed text.

    Empty cells (None, NaN) become "". Whole floats coming from spreadsheets
    are rendered without the trailing ".0".
    """
    if cell is None:
        return ""
    if isinstance(cell, float):
        if math.isnan(cell):
            return ""
        if cell.is_integer():
            return str(int(cell))
    elif not isinstance(cell, str) and pd.isna(cell):
        return ""
    return str(cell).strip()


def _is_number(cell: Any) -> bool:
    return isinstance(cell, numbers.Real) and not isinstance(cell, bool)


def parse_int_cell(cell: Any) -> Optional[int]:
    """
    Parse a cell as a base-10 integer.

    Text cells use their leading integer ("12 calls" -> 12, "3.7" -> 3);
    numeric cells are truncated toward zero.

    Returns:
        The integer, or None if the cell holds no finite integer
    """
    if _is_number(cell):
        value = float(cell)
        if not math.isfinite(value):
            return None
        return int(value)
    if not isinstance(cell, str):
        return None
    match = _LEADING_INT.match(cell)
    if not match:
        return None
    return int(match.group(1))


def parse_float_cell(cell: Any) -> Optional[float]:
    """
    Parse a cell as a float using its leading numeric text.

    Returns:
        The finite float, or None if the cell cannot be parsed
    """
    if _is_number(cell):
        value = float(cell)
    elif isinstance(cell, str):
        match = _LEADING_FLOAT.match(cell)
        if not match:
            return None
        value = float(match.group(1))
    else:
        return None
    return value if math.isfinite(value) else None


def parse_percentage_cell(cell: Any, is_fraction: bool) -> Optional[float]:
    """
    Parse an availability cell on the 0-100 scale.

    Args:
        cell: Raw cell value
        is_fraction: True when the layout stores 0.29 for 29%,
            False when it stores the text "29%"

    Returns:
        Percentage as a float, or None if the cell cannot be parsed
    """
    if is_fraction:
        value = parse_float_cell(cell)
        return None if value is None else value * 100

    if isinstance(cell, str):
        text = cell.strip()
        if text.endswith("%"):
            text = text[:-1]
        return parse_float_cell(text)
    return parse_float_cell(cell)


# ============================================================================
# Row Extraction and Dataset Building
# ============================================================================


def _cell_at(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def extract_row_metrics(row: Sequence[Any], layout: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract the metrics of one raw report row.

    A row with a blank agent name, or with a subtotal/total label in layouts
    that carry a label column, yields an empty dict. Otherwise the result
    always has "Agent" plus whichever of the three metrics parsed; a metric
    that fails to parse is simply absent.

    Args:
        row: Ordered raw cells of one row
        layout: Layout dictionary from report_layouts.get_layout

    Returns:
        Partial record dictionary
    """
    agent = cell_to_text(_cell_at(row, layout["agent_column"]))
    if not agent:
        return {}

    label_column = layout.get("label_column")
    if label_column is not None:
        label = cell_to_text(_cell_at(row, label_column)).lower()
        if label in SKIPPED_LABELS:
            return {}

    metrics: Dict[str, Any] = {AGENT_KEY: agent}

    outbound_calls = parse_int_cell(_cell_at(row, layout["calls_column"]))
    if outbound_calls is not None:
        metrics[CALLS_KEY] = outbound_calls

    no_answers = parse_int_cell(_cell_at(row, layout["no_answer_column"]))
    if no_answers is not None:
        metrics[NO_ANSWERS_KEY] = no_answers

    availability = parse_percentage_cell(
        _cell_at(row, layout["percent_column"]), layout["percent_is_fraction"]
    )
    if availability is not None:
        metrics[AVAILABILITY_KEY] = availability

    return metrics


def sort_metric_records(records: Iterable[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """Sort records descending by key; equal values keep their input order."""
    return sorted(records, key=lambda record: record[key], reverse=True)


def build_agent_datasets(
    rows: Iterable[Sequence[Any]], layout: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Build the three per-agent metric lists from raw report rows.

    The layout's header rows are dropped first. Each data row contributes to
    each list independently, and agent names are not deduplicated.

    Args:
        rows: All rows of the report, header rows included
        layout: Layout dictionary from report_layouts.get_layout

    Returns:
        Dictionary with "calls", "no_answers" and "availability" lists, each
        sorted descending by its metric, plus "rows_read" and "rows_skipped"
    """
    data_rows = list(rows)[layout["header_skip"]:]
    calls, no_answers, availability = [], [], []
    rows_skipped = 0

    for row in data_rows:
        metrics = extract_row_metrics(row, layout)
        if not metrics:
            rows_skipped += 1
            continue

        agent = metrics[AGENT_KEY]
        if CALLS_KEY in metrics:
            calls.append({AGENT_KEY: agent, CALLS_KEY: metrics[CALLS_KEY]})
        if NO_ANSWERS_KEY in metrics:
            no_answers.append({AGENT_KEY: agent, NO_ANSWERS_KEY: metrics[NO_ANSWERS_KEY]})
        if AVAILABILITY_KEY in metrics:
            availability.append({AGENT_KEY: agent, AVAILABILITY_KEY: metrics[AVAILABILITY_KEY]})

    logger.info(
        f"Built datasets with layout '{layout['name']}': {len(data_rows)} data rows, "
        f"{rows_skipped} skipped, {len(calls)} calls / {len(no_answers)} no-answer / "
        f"{len(availability)} availability records"
    )

    return {
        "calls": sort_metric_records(calls, CALLS_KEY),
        "no_answers": sort_metric_records(no_answers, NO_ANSWERS_KEY),
        "availability": sort_metric_records(availability, AVAILABILITY_KEY),
        "rows_read": len(data_rows),
        "rows_skipped": rows_skipped,
    }


def empty_datasets() -> Dict[str, Any]:
    """Datasets of a dashboard with nothing uploaded."""
    return {"calls": [], "no_answers": [], "availability": [], "rows_read": 0, "rows_skipped": 0}


# ============================================================================
# Rank Selection
# ============================================================================


def _select_agents(
    records: Sequence[Dict[str, Any]], key: str, count: int, descending: bool
) -> Set[str]:
    ranked = sorted(records, key=lambda record: record[key], reverse=descending)
    return {record[AGENT_KEY] for record in ranked[:count]}


def get_top_percentile(
    records: Sequence[Dict[str, Any]], key: str, percent: float = 0.5
) -> Set[str]:
    """Agents in the top ceil(n * percent) records by key."""
    count = math.ceil(len(records) * percent)
    return _select_agents(records, key, count, descending=True)


def get_bottom_percentile(
    records: Sequence[Dict[str, Any]], key: str, percent: float = 0.5
) -> Set[str]:
    """
    Agents in the bottom ceil(n * percent) records by key.

    Also ceiling-sized, so for odd n at 50% the median record is in both the
    top and the bottom percentile.
    """
    count = math.ceil(len(records) * percent)
    return _select_agents(records, key, count, descending=False)


def get_top_half(records: Sequence[Dict[str, Any]], key: str) -> Set[str]:
    """Agents in the top ceil(n / 2) records by key."""
    count = math.ceil(len(records) / 2)
    return _select_agents(records, key, count, descending=True)


def get_bottom_half(records: Sequence[Dict[str, Any]], key: str) -> Set[str]:
    """Agents in the bottom floor(n / 2) records by key; partitions with get_top_half."""
    count = len(records) // 2
    return _select_agents(records, key, count, descending=False)


# ============================================================================
# Cohorts
# ============================================================================


def _first_values(records: Sequence[Dict[str, Any]], key: str) -> Dict[str, Any]:
    values = {}
    for record in records:
        values.setdefault(record[AGENT_KEY], record[key])
    return values


def join_agent_metrics(
    calls_records: Sequence[Dict[str, Any]], datasets: Dict[str, Any]
) -> List[Dict[str, Any]]:
    """
    Join calls records with the no-answer and availability lists.

    Lookups are by exact agent name (first match wins); an agent missing from
    a list gets 0 for that metric.
    """
    no_answers = _first_values(datasets["no_answers"], NO_ANSWERS_KEY)
    availability = _first_values(datasets["availability"], AVAILABILITY_KEY)
    return [
        {
            AGENT_KEY: record[AGENT_KEY],
            CALLS_KEY: record[CALLS_KEY],
            NO_ANSWERS_KEY: no_answers.get(record[AGENT_KEY], 0),
            AVAILABILITY_KEY: availability.get(record[AGENT_KEY], 0),
        }
        for record in calls_records
    ]


def identify_elite_agents(datasets: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Identify elite agents.

    Elite = top 50% in outbound calls AND top 50% in availability AND bottom
    50% in no answers (ceiling-sized percentile sets).

    Args:
        datasets: Output of build_agent_datasets

    Returns:
        Joined records in outbound-calls order
    """
    calls = datasets["calls"]
    top_calls = get_top_percentile(calls, CALLS_KEY)
    top_availability = get_top_percentile(datasets["availability"], AVAILABILITY_KEY)
    bottom_no_answers = get_bottom_percentile(datasets["no_answers"], NO_ANSWERS_KEY)

    members = [
        record for record in calls
        if record[AGENT_KEY] in top_calls
        and record[AGENT_KEY] in top_availability
        and record[AGENT_KEY] in bottom_no_answers
    ]
    return join_agent_metrics(members, datasets)


def identify_at_risk_agents(datasets: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Identify at-risk agents.

    At-risk = bottom half in outbound calls AND bottom half in availability
    AND top half in no answers (floor-sized bottom, ceiling-sized top).

    Args:
        datasets: Output of build_agent_datasets

    Returns:
        Joined records in outbound-calls order
    """
    calls = datasets["calls"]
    bottom_calls = get_bottom_half(calls, CALLS_KEY)
    bottom_availability = get_bottom_half(datasets["availability"], AVAILABILITY_KEY)
    top_no_answers = get_top_half(datasets["no_answers"], NO_ANSWERS_KEY)

    members = [
        record for record in calls
        if record[AGENT_KEY] in bottom_calls
        and record[AGENT_KEY] in bottom_availability
        and record[AGENT_KEY] in top_no_answers
    ]
    return join_agent_metrics(members, datasets)


def build_complete_rankings(datasets: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Every calls record joined with its other metrics, highest calls first."""
    return join_agent_metrics(datasets["calls"], datasets)


# ============================================================================
# Summary
# ============================================================================


def calculate_average(records: Sequence[Dict[str, Any]], key: str) -> float:
    """Arithmetic mean of key across records; 0.0 for an empty list."""
    if not records:
        return 0.0
    values = [record.get(key) or 0 for record in records]
    return float(np.mean(values))


def calculate_summary_metrics(datasets: Dict[str, Any]) -> Dict[str, Any]:
    """
    Calculate the four summary statistics.

    Returns:
        Dictionary with total_agents, avg_outbound_calls, avg_no_answers and
        avg_availability
    """
    return {
        "total_agents": int(len(datasets["calls"])),
        "avg_outbound_calls": calculate_average(datasets["calls"], CALLS_KEY),
        "avg_no_answers": calculate_average(datasets["no_answers"], NO_ANSWERS_KEY),
        "avg_availability": calculate_average(datasets["availability"], AVAILABILITY_KEY),
    }


def has_complete_data(datasets: Dict[str, Any]) -> bool:
    """True when all three metric lists are non-empty."""
    return all(datasets[name] for name in DATASET_KEYS)


def calculate_all_metrics(datasets: Dict[str, Any]) -> Dict[str, Any]:
    """
    Calculate everything the dashboard and the exports display.

    Args:
        datasets: Output of build_agent_datasets

    Returns:
        Dictionary containing summary, elite_agents, at_risk_agents,
        complete_rankings, has_data and has_complete_data
    """
    return {
        "summary": calculate_summary_metrics(datasets),
        "elite_agents": identify_elite_agents(datasets),
        "at_risk_agents": identify_at_risk_agents(datasets),
        "complete_rankings": build_complete_rankings(datasets),
        "has_data": bool(datasets["calls"]),
        "has_complete_data": has_complete_data(datasets),
    }


def format_availability(value: Any) -> str:
    """Render an availability percentage with one decimal, e.g. "29.0%"."""
    return f"{float(value or 0):.1f}%"
