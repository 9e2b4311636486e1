import os
import tempfile

import pytest

# utils configures its log directory at import time
os.environ.setdefault("PHONE_REPORT_LOG_DIR", tempfile.mkdtemp(prefix="phone-report-logs-"))

import utils  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_metrics(tmp_path, monkeypatch):
    """Keep usage metrics and preferences out of the shared log directory."""
    monkeypatch.setattr(utils, "metrics_file", tmp_path / "usage_metrics.json")
    monkeypatch.setattr(utils, "preferences_file", tmp_path / "preferences.json")
    return tmp_path


def simple_row(agent, calls, no_answers, percent, label=""):
    """A Layout A data row: agent at 1, calls at 3, no answers at 4, percent at 10."""
    return ["", agent, label, calls, no_answers, "", "", "", "", "", percent]


def extended_row(agent, calls, no_answers, fraction, label=""):
    """A Layout B data row: label at 1, agent at 2, calls at 4, no answers at 5, fraction at 11."""
    return ["", label, agent, "", calls, no_answers, "", "", "", "", "", fraction]


SIMPLE_HEADER = [
    ["Phone Report", "", "", "", "", "", "", "", "", "", ""],
    ["", "Agent", "", "Outbound", "No Answer", "", "", "", "", "", "Available"],
]


@pytest.fixture
def simple_rows():
    return SIMPLE_HEADER + [
        simple_row("Alice", "50", "1", "90%"),
        simple_row("Bob", "10", "20", "5%"),
        simple_row("Carol", "30", "8", "45.5%"),
    ]


@pytest.fixture
def extended_header():
    return [["Report header", "", "", "", "", "", "", "", "", "", "", ""]] + [[""] * 12 for _ in range(10)]
