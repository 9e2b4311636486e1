"""
Report exports for the Phone Report dashboard.

Builds the downloadable artifacts from the calculated metrics:
a multi-page PDF (matplotlib PdfPages), a Word document (python-docx) and an
Excel workbook (pandas ExcelWriter with xlsxwriter). Every builder returns the
file contents as bytes, or None when there is no data to export.
"""

import io
import logging
from datetime import datetime
from typing import Dict, List, Optional, Any

import matplotlib.pyplot as plt
import pandas as pd
from docx import Document
from docx.enum.table import WD_ALIGN_VERTICAL
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor
from matplotlib.backends.backend_pdf import PdfPages

from charts import create_dashboard_charts, theme_colors
from phone_report_calculations import (
    AGENT_KEY,
    CALLS_KEY,
    NO_ANSWERS_KEY,
    AVAILABILITY_KEY,
    format_availability,
)

logger = logging.getLogger(__name__)

PDF_FILENAME = "agent-report.pdf"
WORD_FILENAME = "agent-performance-report.docx"
EXCEL_FILENAME = "agent-performance-report.xlsx"

PDF_MIME = "application/pdf"
WORD_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
EXCEL_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

REPORT_TITLE = "Agent Performance Report"
TABLE_HEADERS = ["Agent Name", "Outbound Calls", "No Answers", "Availability"]

ELITE_DESCRIPTION = "Top 50% in Calls & Availability, Bottom 50% in No Answers"
AT_RISK_DESCRIPTION = "Bottom 50% in Calls & Availability, Top 50% in No Answers"
RANKINGS_DESCRIPTION = "Sorted by Outbound Calls (Highest to Lowest)"

# (heading, description, metrics key, header color, empty message)
REPORT_SECTIONS = [
    ("Elite Agents", ELITE_DESCRIPTION, "elite_agents", "2563EB",
     "No agents met all elite criteria."),
    ("At-Risk Agents", AT_RISK_DESCRIPTION, "at_risk_agents", "DC2626",
     "No agents met all at-risk criteria."),
    ("Complete Agent Rankings", RANKINGS_DESCRIPTION, "complete_rankings", "7C3AED",
     "No agent data available."),
]

PDF_ROWS_PER_PAGE = 28


def format_generated_date(generated_at: datetime) -> str:
    """Long date for report headers, e.g. "Monday, October 19, 2026"."""
    return f"{generated_at:%A, %B} {generated_at.day}, {generated_at.year}"


def summary_lines(summary: Dict[str, Any]) -> List[tuple]:
    """The four labeled summary statistics as (label, formatted value) pairs."""
    return [
        ("Total Agents Analyzed", str(summary["total_agents"])),
        ("Average Outbound Calls", f"{summary['avg_outbound_calls']:.1f}"),
        ("Average No Answers (RONA)", f"{summary['avg_no_answers']:.1f}"),
        ("Average Availability", format_availability(summary["avg_availability"])),
    ]


def table_row(record: Dict[str, Any]) -> List[str]:
    """Display cells of one joined agent record."""
    return [
        str(record[AGENT_KEY]),
        str(record[CALLS_KEY]),
        str(record[NO_ANSWERS_KEY]),
        format_availability(record[AVAILABILITY_KEY]),
    ]


# ============================================================================
# Word
# ============================================================================


def _shade_cell(cell, fill: str) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), fill)
    tc_pr.append(shading)


def _write_cell(cell, text: str, align, bold: bool = False, color: Optional[str] = None, size: int = 10) -> None:
    cell.vertical_alignment = WD_ALIGN_VERTICAL.CENTER
    paragraph = cell.paragraphs[0]
    paragraph.alignment = align
    run = paragraph.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)
    if color:
        run.font.color.rgb = RGBColor.from_string(color)


def _add_agent_table(doc, records: List[Dict[str, Any]], header_color: str) -> None:
    widths = [Inches(2.6), Inches(1.25), Inches(1.25), Inches(1.25)]
    table = doc.add_table(rows=1, cols=len(TABLE_HEADERS))
    table.style = "Table Grid"

    for idx, (cell, header) in enumerate(zip(table.rows[0].cells, TABLE_HEADERS)):
        cell.width = widths[idx]
        _shade_cell(cell, header_color)
        align = WD_ALIGN_PARAGRAPH.LEFT if idx == 0 else WD_ALIGN_PARAGRAPH.CENTER
        _write_cell(cell, header, align, bold=True, color="FFFFFF", size=11)

    for row_idx, record in enumerate(records):
        cells = table.add_row().cells
        fill = "F3F4F6" if row_idx % 2 == 0 else "FFFFFF"
        for idx, (cell, text) in enumerate(zip(cells, table_row(record))):
            cell.width = widths[idx]
            _shade_cell(cell, fill)
            align = WD_ALIGN_PARAGRAPH.LEFT if idx == 0 else WD_ALIGN_PARAGRAPH.CENTER
            _write_cell(cell, text, align)


def _add_heading(doc, text: str, color: str, size: int = 16) -> None:
    paragraph = doc.add_paragraph()
    paragraph.paragraph_format.space_before = Pt(15)
    run = paragraph.add_run(text)
    run.bold = True
    run.font.size = Pt(size)
    run.font.color.rgb = RGBColor.from_string(color)


def _add_note(doc, text: str) -> None:
    paragraph = doc.add_paragraph()
    run = paragraph.add_run(text)
    run.italic = True
    run.font.size = Pt(10)
    run.font.color.rgb = RGBColor.from_string("6B7280")


def build_word_report(metrics: Dict[str, Any], generated_at: Optional[datetime] = None) -> Optional[bytes]:
    """
    Build the Word performance report.

    Args:
        metrics: Output of calculate_all_metrics
        generated_at: Timestamp printed under the title (defaults to now)

    Returns:
        .docx file contents, or None when there is no calls data
    """
    if not metrics.get("has_data"):
        logger.info("Word export skipped: no data loaded")
        return None

    generated_at = generated_at or datetime.now()
    doc = Document()
    for section in doc.sections:
        section.top_margin = section.bottom_margin = Inches(1)
        section.left_margin = section.right_margin = Inches(1)

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    title_run = title.add_run(REPORT_TITLE)
    title_run.bold = True
    title_run.font.size = Pt(24)
    title_run.font.color.rgb = RGBColor.from_string("1F2937")

    generated = doc.add_paragraph()
    generated.alignment = WD_ALIGN_PARAGRAPH.CENTER
    generated_run = generated.add_run(f"Generated: {format_generated_date(generated_at)}")
    generated_run.italic = True
    generated_run.font.size = Pt(11)
    generated_run.font.color.rgb = RGBColor.from_string("6B7280")

    _add_heading(doc, "Executive Summary", "059669")
    for label, value in summary_lines(metrics["summary"]):
        paragraph = doc.add_paragraph()
        label_run = paragraph.add_run(f"{label}: ")
        label_run.font.size = Pt(11)
        value_run = paragraph.add_run(value)
        value_run.bold = True
        value_run.font.size = Pt(11)

    for heading, description, key, color, empty_message in REPORT_SECTIONS:
        _add_heading(doc, heading, color)
        _add_note(doc, description)
        records = metrics[key]
        if records:
            _add_agent_table(doc, records, color)
        else:
            paragraph = doc.add_paragraph()
            run = paragraph.add_run(empty_message)
            run.italic = True
            run.font.size = Pt(11)

    buffer = io.BytesIO()
    doc.save(buffer)
    logger.info(f"Word report built ({len(metrics['complete_rankings'])} agents)")
    return buffer.getvalue()


# ============================================================================
# PDF
# ============================================================================


def _text_page(lines: List[str], dark_mode: bool, title: Optional[str] = None) -> plt.Figure:
    colors = theme_colors(dark_mode)
    fig = plt.figure(figsize=(11, 8.5))
    fig.patch.set_facecolor(colors["background"])
    ax = fig.add_subplot(111)
    ax.axis("off")
    if title:
        ax.text(0.5, 0.7, title, ha="center", va="center", fontsize=24,
                fontweight="bold", color=colors["text"], transform=ax.transAxes)
        ax.text(0.5, 0.45, "\n".join(lines), ha="center", va="center", fontsize=13,
                color=colors["text"], transform=ax.transAxes)
    else:
        ax.text(0.1, 0.9, "\n".join(lines), ha="left", va="top", fontsize=13,
                family="monospace", color=colors["text"], transform=ax.transAxes)
    return fig


def _table_pages(
    heading: str,
    description: str,
    records: List[Dict[str, Any]],
    header_color: str,
    empty_message: str,
    dark_mode: bool,
) -> List[plt.Figure]:
    colors = theme_colors(dark_mode)
    if not records:
        return [_text_page([heading, "", description, "", empty_message], dark_mode)]

    pages = []
    chunks = [records[i:i + PDF_ROWS_PER_PAGE] for i in range(0, len(records), PDF_ROWS_PER_PAGE)]
    for page_number, chunk in enumerate(chunks, start=1):
        fig = plt.figure(figsize=(11, 8.5))
        fig.patch.set_facecolor(colors["background"])
        ax = fig.add_subplot(111)
        ax.axis("off")
        suffix = f" (page {page_number} of {len(chunks)})" if len(chunks) > 1 else ""
        ax.set_title(f"{heading}{suffix}\n{description}", fontsize=14,
                     fontweight="bold", color=colors["text"], pad=20)

        table = ax.table(
            cellText=[table_row(record) for record in chunk],
            colLabels=TABLE_HEADERS,
            colWidths=[0.4, 0.2, 0.2, 0.2],
            loc="upper center",
            cellLoc="center",
        )
        table.auto_set_font_size(False)
        table.set_fontsize(9)
        table.scale(1, 1.3)
        for (row_idx, _), cell in table.get_celld().items():
            if row_idx == 0:
                cell.set_facecolor(f"#{header_color}")
                cell.get_text().set_color("white")
                cell.get_text().set_fontweight("bold")
            else:
                cell.set_facecolor("#F3F4F6" if row_idx % 2 == 1 else "#FFFFFF")
        pages.append(fig)
    return pages


def build_pdf_report(
    datasets: Dict[str, Any],
    metrics: Dict[str, Any],
    dark_mode: bool = False,
    generated_at: Optional[datetime] = None,
    source_name: Optional[str] = None,
) -> Optional[bytes]:
    """
    Build a multi-page PDF of the dashboard.

    Pages: title, executive summary, the three metric charts, then the elite,
    at-risk and complete-ranking tables.

    Args:
        datasets: Output of build_agent_datasets
        metrics: Output of calculate_all_metrics
        dark_mode: Render pages with the dark theme
        generated_at: Timestamp printed on the title page (defaults to now)
        source_name: Uploaded file name shown on the title page

    Returns:
        PDF file contents, or None when there is no calls data
    """
    if not metrics.get("has_data"):
        logger.info("PDF export skipped: no data loaded")
        return None

    generated_at = generated_at or datetime.now()
    title_lines = [f"Generated: {generated_at.strftime('%B %d, %Y at %I:%M %p')}"]
    if source_name:
        title_lines.insert(0, f"Source: {source_name}")

    pages = [_text_page(title_lines, dark_mode, title="Phone Report Analytics")]
    pages.append(_text_page(
        ["EXECUTIVE SUMMARY", ""] + [f"{label}: {value}" for label, value in summary_lines(metrics["summary"])],
        dark_mode,
    ))
    pages.extend(create_dashboard_charts(datasets, dark_mode=dark_mode).values())
    for heading, description, key, color, empty_message in REPORT_SECTIONS:
        pages.extend(_table_pages(heading, description, metrics[key], color, empty_message, dark_mode))

    buffer = io.BytesIO()
    with PdfPages(buffer) as pdf:
        for fig in pages:
            pdf.savefig(fig, bbox_inches="tight", facecolor=fig.get_facecolor())
            plt.close(fig)

    logger.info(f"PDF report built ({len(pages)} pages)")
    return buffer.getvalue()


# ============================================================================
# Excel
# ============================================================================


def _records_frame(records: List[Dict[str, Any]], columns: List[str], headers: List[str]) -> pd.DataFrame:
    df = pd.DataFrame(records, columns=columns)
    df.columns = headers
    return df


def build_excel_report(datasets: Dict[str, Any], metrics: Dict[str, Any]) -> Optional[bytes]:
    """
    Build an Excel workbook with one sheet per metric list and per cohort.

    Args:
        datasets: Output of build_agent_datasets
        metrics: Output of calculate_all_metrics

    Returns:
        .xlsx file contents, or None when there is no calls data
    """
    if not metrics.get("has_data"):
        logger.info("Excel export skipped: no data loaded")
        return None

    joined_columns = [AGENT_KEY, CALLS_KEY, NO_ANSWERS_KEY, AVAILABILITY_KEY]
    sheets = {
        "Summary": pd.DataFrame(summary_lines(metrics["summary"]), columns=["Metric", "Value"]),
        "Outbound Calls": _records_frame(datasets["calls"], [AGENT_KEY, CALLS_KEY], ["Agent Name", "Outbound Calls"]),
        "No Answers": _records_frame(datasets["no_answers"], [AGENT_KEY, NO_ANSWERS_KEY], ["Agent Name", "No Answers"]),
        "Availability": _records_frame(
            datasets["availability"], [AGENT_KEY, AVAILABILITY_KEY], ["Agent Name", "Availability"]
        ),
        "Elite Agents": _records_frame(metrics["elite_agents"], joined_columns, TABLE_HEADERS),
        "At-Risk Agents": _records_frame(metrics["at_risk_agents"], joined_columns, TABLE_HEADERS),
        "Complete Rankings": _records_frame(metrics["complete_rankings"], joined_columns, TABLE_HEADERS),
    }

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="xlsxwriter") as writer:
        one_decimal = writer.book.add_format({"num_format": "0.0"})
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            worksheet = writer.sheets[sheet_name]
            worksheet.set_column(0, 0, 32)
            worksheet.set_column(1, len(df.columns) - 1, 16)
            if "Availability" in df.columns:
                col = df.columns.get_loc("Availability")
                worksheet.set_column(col, col, 16, one_decimal)

    logger.info("Excel report built")
    return buffer.getvalue()


def build_all_reports(
    datasets: Dict[str, Any],
    metrics: Dict[str, Any],
    dark_mode: bool = False,
    source_name: Optional[str] = None,
) -> Dict[str, Optional[bytes]]:
    """Build every download for one loaded report, keyed by format ("pdf", "docx", "xlsx")."""
    return {
        "pdf": build_pdf_report(datasets, metrics, dark_mode=dark_mode, source_name=source_name),
        "docx": build_word_report(metrics),
        "xlsx": build_excel_report(datasets, metrics),
    }
