import hashlib
import warnings

import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from charts import create_dashboard_charts, theme_colors
from data_loading import load_phone_report, new_dashboard_state
from phone_report_calculations import AGENT_KEY, CALLS_KEY, NO_ANSWERS_KEY, AVAILABILITY_KEY
from report_export import (
    build_all_reports,
    ELITE_DESCRIPTION,
    AT_RISK_DESCRIPTION,
    EXCEL_FILENAME,
    EXCEL_MIME,
    PDF_FILENAME,
    PDF_MIME,
    WORD_FILENAME,
    WORD_MIME,
)
from report_layouts import LAYOUTS, SUPPORTED_EXTENSIONS, percent_column_choices
from utils import (
    load_theme_preference,
    logger,
    record_session_start,
    save_theme_preference,
    track_feature_usage,
)

# Suppress noisy matplotlib categorical-unit warnings about agent names that look like numbers
warnings.filterwarnings('ignore', category=UserWarning, module='matplotlib.category')

AUTO_LAYOUT = "Auto (by file type)"

st.set_page_config(page_title="Phone Report Analytics", page_icon="📊", layout="wide")

# --- Session state ---
if 'session_started' not in st.session_state:
    record_session_start()
    st.session_state.session_started = True
if 'dashboard' not in st.session_state:
    st.session_state.dashboard = new_dashboard_state()
if 'upload_signature' not in st.session_state:
    st.session_state.upload_signature = None
if 'dark_mode' not in st.session_state:
    st.session_state.dark_mode = load_theme_preference() == "dark"


def upload_signature(uploaded_file, layout_choice, percent_column) -> str:
    """Identify an upload together with the layout settings it was parsed with."""
    digest = hashlib.md5(uploaded_file.getvalue()).hexdigest()
    return f"{uploaded_file.name}|{digest}|{layout_choice}|{percent_column}"


@st.cache_data(max_entries=4, show_spinner=False)
def get_cached_downloads(signature: str, dark_mode: bool, _dashboard):
    """Build the export files once per upload and theme.

    Args:
        signature: Upload signature the dashboard was loaded from (cache key)
        dark_mode: Theme of the PDF charts (cache key)
        _dashboard: Dashboard state, not hashed

    Returns:
        Dict of file contents keyed by "pdf", "docx" and "xlsx"
    """
    return build_all_reports(
        _dashboard["datasets"],
        _dashboard["metrics"],
        dark_mode=dark_mode,
        source_name=_dashboard["filename"],
    )


def on_theme_change():
    save_theme_preference("dark" if st.session_state.dark_mode else "light")
    track_feature_usage("toggle_theme")


# --- Sidebar ---
st.sidebar.header("⚙️ Report Settings")
layout_choice = st.sidebar.selectbox(
    "Report layout",
    [AUTO_LAYOUT] + list(LAYOUTS),
    format_func=lambda name: name if name == AUTO_LAYOUT else f"{name} - {LAYOUTS[name]['description']}",
    help="CSV files default to the simple layout, spreadsheets to the extended layout",
)
percent_column = st.sidebar.selectbox(
    "Availability column (simple layout)",
    percent_column_choices(),
    help="Column index of the '29%' availability cell; older exports use 8",
)
st.sidebar.markdown("---")
st.sidebar.toggle("🌙 Dark Mode", key="dark_mode", on_change=on_theme_change)

dark_mode = st.session_state.dark_mode
colors = theme_colors(dark_mode)
if dark_mode:
    st.markdown(f"""
    <style>
    .stApp {{
        background-color: {colors['background']};
        color: {colors['text']};
    }}
    </style>
    """, unsafe_allow_html=True)

# --- Header and upload ---
st.title("📊 Phone Report Analytics")
st.caption("Upload your phone report to analyze agent performance metrics")

uploaded_file = st.file_uploader(
    "Phone report",
    type=[extension.lstrip(".") for extension in SUPPORTED_EXTENSIONS],
    help="CSV or spreadsheet export of the phone report",
)

if uploaded_file is not None:
    layout_name = None if layout_choice == AUTO_LAYOUT else layout_choice
    signature = upload_signature(uploaded_file, layout_choice, percent_column)
    if signature != st.session_state.upload_signature:
        with st.spinner(f"Processing {uploaded_file.name}..."):
            state, error = load_phone_report(
                uploaded_file.getvalue(),
                uploaded_file.name,
                layout_name=layout_name,
                percent_column=percent_column,
            )
        st.session_state.upload_signature = signature
        if error:
            st.session_state.dashboard = new_dashboard_state()
            st.error(f"❌ {error}")
        elif state is not None:
            st.session_state.dashboard = state
            track_feature_usage("upload_report")
            logger.info(f"Dashboard refreshed from {uploaded_file.name}")

dashboard = st.session_state.dashboard
datasets = dashboard["datasets"]
metrics = dashboard["metrics"]

if dashboard["filename"]:
    st.sidebar.markdown("---")
    st.sidebar.success(f"📄 {dashboard['filename']}")
    st.sidebar.caption(
        f"Layout: {dashboard['layout']['name']} | "
        f"{datasets['rows_read']} data rows, {datasets['rows_skipped']} skipped"
    )
    if not metrics["has_data"]:
        st.warning("⚠️ No agent data found in this report. Check the selected layout.")

# --- Export buttons (disabled until a dataset is loaded) ---
export_col1, export_col2, export_col3 = st.columns(3)
pdf_bytes = word_bytes = excel_bytes = None
if metrics["has_data"]:
    downloads = get_cached_downloads(st.session_state.upload_signature, dark_mode, dashboard)
    pdf_bytes, word_bytes, excel_bytes = downloads["pdf"], downloads["docx"], downloads["xlsx"]

with export_col1:
    st.download_button(
        label="📄 Export to PDF",
        data=pdf_bytes or b"",
        file_name=PDF_FILENAME,
        mime=PDF_MIME,
        disabled=pdf_bytes is None,
        on_click=track_feature_usage,
        args=("export_pdf",),
    )
with export_col2:
    st.download_button(
        label="📝 Export to Word",
        data=word_bytes or b"",
        file_name=WORD_FILENAME,
        mime=WORD_MIME,
        disabled=word_bytes is None,
        on_click=track_feature_usage,
        args=("export_word",),
    )
with export_col3:
    st.download_button(
        label="📥 Export to Excel",
        data=excel_bytes or b"",
        file_name=EXCEL_FILENAME,
        mime=EXCEL_MIME,
        disabled=excel_bytes is None,
        on_click=track_feature_usage,
        args=("export_excel",),
    )

# --- Summary cards ---
if metrics["has_complete_data"]:
    summary = metrics["summary"]
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("👥 Total Agents", summary["total_agents"])
    with col2:
        st.metric("📞 Avg Outbound Calls", f"{summary['avg_outbound_calls']:.0f}")
    with col3:
        st.metric("📵 Avg No Answers", f"{summary['avg_no_answers']:.0f}")
    with col4:
        st.metric("🕒 Avg Availability", f"{summary['avg_availability']:.1f}%")

# --- Charts ---
for title, fig in create_dashboard_charts(datasets, dark_mode=dark_mode).items():
    st.subheader(title)
    st.pyplot(fig)
    plt.close(fig)


def render_agent_list(heading, description, agents):
    st.subheader(heading)
    st.caption(description)
    if not agents:
        st.write("No agents matched all criteria.")
        return
    for agent in agents:
        st.markdown(
            f"**{agent[AGENT_KEY]}** · 📞 {agent[CALLS_KEY]} calls · "
            f"📵 {agent[NO_ANSWERS_KEY]} RONA · 🕒 {agent[AVAILABILITY_KEY]:.1f}%"
        )


# --- Cohorts ---
if metrics["has_complete_data"]:
    elite_col, at_risk_col = st.columns(2)
    with elite_col:
        render_agent_list("🌟 Elite Agents", ELITE_DESCRIPTION, metrics["elite_agents"])
    with at_risk_col:
        render_agent_list("🚨 At-Risk Agents", AT_RISK_DESCRIPTION, metrics["at_risk_agents"])

    with st.expander("📋 Complete Agent Rankings"):
        rankings_df = pd.DataFrame(metrics["complete_rankings"])
        rankings_df.columns = ["Agent Name", "Outbound Calls", "No Answers", "Availability"]
        st.dataframe(
            rankings_df,
            hide_index=True,
            use_container_width=True,
            column_config={"Availability": st.column_config.NumberColumn(format="%.1f%%")},
        )
elif not dashboard["filename"]:
    st.info("💡 Upload a CSV or spreadsheet phone report to get started.")
