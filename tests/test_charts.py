import matplotlib.pyplot as plt
from matplotlib.colors import to_rgb

from charts import DARK_BACKGROUND, create_dashboard_charts, create_metric_bar_chart
from phone_report_calculations import AGENT_KEY, AVAILABILITY_KEY, CALLS_KEY


def test_bar_chart_keeps_order_and_duplicates():
    records = [
        {AGENT_KEY: "Alice", CALLS_KEY: 12},
        {AGENT_KEY: "Alice", CALLS_KEY: 10},
        {AGENT_KEY: "Bob", CALLS_KEY: 3},
    ]
    fig = create_metric_bar_chart(records, CALLS_KEY, "Outbound Calls by Agent", "#6366f1")
    ax = fig.axes[0]
    assert [label.get_text() for label in ax.get_xticklabels()] == ["Alice", "Alice", "Bob"]
    assert [patch.get_height() for patch in ax.patches] == [12, 10, 3]
    plt.close(fig)


def test_percent_chart_labels():
    records = [{AGENT_KEY: "Alice", AVAILABILITY_KEY: 29.0}]
    fig = create_metric_bar_chart(records, AVAILABILITY_KEY, "Availability", "#10b981", percent=True)
    labels = [text.get_text() for text in fig.axes[0].texts]
    assert "29.0%" in labels
    plt.close(fig)


def test_empty_chart_placeholder():
    fig = create_metric_bar_chart([], CALLS_KEY, "Outbound Calls by Agent", "#6366f1")
    assert fig.axes[0].texts[0].get_text() == "No data available"
    plt.close(fig)


def test_dark_mode_background():
    records = [{AGENT_KEY: "Alice", CALLS_KEY: 1}]
    fig = create_metric_bar_chart(records, CALLS_KEY, "Calls", "#6366f1", dark_mode=True)
    assert fig.patch.get_facecolor()[:3] == to_rgb(DARK_BACKGROUND)
    plt.close(fig)


def test_dashboard_charts_skip_empty_lists():
    datasets = {
        "calls": [{AGENT_KEY: "Alice", CALLS_KEY: 1}],
        "no_answers": [],
        "availability": [{AGENT_KEY: "Alice", AVAILABILITY_KEY: 50.0}],
    }
    charts = create_dashboard_charts(datasets)
    assert list(charts) == ["Outbound Calls by Agent", "Percentage Available by Agent"]
    for fig in charts.values():
        plt.close(fig)
