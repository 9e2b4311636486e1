"""
Bar charts for the per-agent metric lists.

Charts are plain matplotlib figures styled with seaborn, so the same figures
are shown in the dashboard and written into the PDF export.
"""

from typing import Dict, List, Any

import matplotlib

matplotlib.use("Agg")
matplotlib.rcParams["figure.max_open_warning"] = 0

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from phone_report_calculations import AGENT_KEY, CALLS_KEY, NO_ANSWERS_KEY, AVAILABILITY_KEY

CALLS_COLOR = "#6366f1"
NO_ANSWERS_COLOR = "#f97316"
AVAILABILITY_COLOR = "#10b981"

DARK_BACKGROUND = "#0f172a"
DARK_TEXT = "#f1f5f9"
LIGHT_BACKGROUND = "#ffffff"
LIGHT_TEXT = "#1f2937"

# (title, dataset name, value key, color, percent axis)
DASHBOARD_CHARTS = [
    ("Outbound Calls by Agent", "calls", CALLS_KEY, CALLS_COLOR, False),
    ("No Answers (RONA) by Agent", "no_answers", NO_ANSWERS_KEY, NO_ANSWERS_COLOR, False),
    ("Percentage Available by Agent", "availability", AVAILABILITY_KEY, AVAILABILITY_COLOR, True),
]


def theme_colors(dark_mode: bool) -> Dict[str, str]:
    """Background and text colors for the current theme."""
    if dark_mode:
        return {"background": DARK_BACKGROUND, "text": DARK_TEXT}
    return {"background": LIGHT_BACKGROUND, "text": LIGHT_TEXT}


def _style_axes(fig: plt.Figure, ax: plt.Axes, dark_mode: bool) -> None:
    colors = theme_colors(dark_mode)
    fig.patch.set_facecolor(colors["background"])
    ax.set_facecolor(colors["background"])
    ax.tick_params(colors=colors["text"])
    ax.title.set_color(colors["text"])
    ax.yaxis.label.set_color(colors["text"])
    for spine in ax.spines.values():
        spine.set_color(colors["text"])


def create_empty_chart(message: str, dark_mode: bool = False) -> plt.Figure:
    """Placeholder figure shown when there is nothing to plot."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _style_axes(fig, ax, dark_mode)
    ax.axis("off")
    ax.text(
        0.5,
        0.5,
        message,
        ha="center",
        va="center",
        fontsize=14,
        color=theme_colors(dark_mode)["text"],
        transform=ax.transAxes,
    )
    return fig


def create_metric_bar_chart(
    records: List[Dict[str, Any]],
    value_key: str,
    title: str,
    color: str,
    dark_mode: bool = False,
    percent: bool = False,
) -> plt.Figure:
    """Create a bar chart of one metric per agent.

    Bars follow the order of records, which the dataset builder already sorts
    descending. Agents listed twice get two bars.

    Args:
        records: Metric records with "Agent" and value_key.
        value_key: Record key holding the metric value.
        title: Chart title.
        color: Bar color.
        dark_mode: Render with the dark theme colors.
        percent: Label bars as percentages with one decimal.

    Returns:
        matplotlib figure
    """
    if not records:
        return create_empty_chart("No data available", dark_mode)

    agents = [str(record[AGENT_KEY]) for record in records]
    values = [float(record[value_key]) for record in records]
    positions = np.arange(len(agents))

    with sns.axes_style("white"):
        fig, ax = plt.subplots(figsize=(max(10, len(agents) * 0.45), 6))
        bars = ax.bar(positions, values, color=color, edgecolor=color, alpha=0.9)

    labels = [f"{value:.1f}%" for value in values] if percent else [f"{value:g}" for value in values]
    ax.bar_label(bars, labels=labels, padding=2, fontsize=8, color=theme_colors(dark_mode)["text"])

    ax.set_xticks(positions)
    ax.set_xticklabels(agents, rotation=45, ha="right", fontsize=9)
    ax.set_title(title, fontsize=14, fontweight="bold", pad=16)
    if percent:
        ax.set_ylabel("Availability (%)")
    ax.grid(axis="y", alpha=0.3, linestyle="--")
    sns.despine(ax=ax)
    _style_axes(fig, ax, dark_mode)

    plt.tight_layout()
    return fig


def create_dashboard_charts(datasets: Dict[str, Any], dark_mode: bool = False) -> Dict[str, plt.Figure]:
    """Create the three dashboard charts, keyed by title.

    Only metrics with at least one record get a chart.
    """
    charts = {}
    for title, dataset_name, value_key, color, percent in DASHBOARD_CHARTS:
        records = datasets.get(dataset_name) or []
        if not records:
            continue
        charts[title] = create_metric_bar_chart(
            records, value_key, title, color, dark_mode=dark_mode, percent=percent
        )
    return charts
