#!/usr/bin/env python3
"""
Agent Performance Report Generator

Runs the phone report pipeline on a local CSV or spreadsheet export and writes
the PDF, Word and Excel reports the dashboard offers for download.
"""

import argparse
import sys
from pathlib import Path

from data_loading import load_phone_report
from phone_report_calculations import format_availability
from report_export import (
    build_excel_report,
    build_pdf_report,
    build_word_report,
    EXCEL_FILENAME,
    PDF_FILENAME,
    WORD_FILENAME,
)
from report_layouts import LAYOUTS

EXPORT_FORMATS = ("pdf", "docx", "xlsx")


def write_reports(state, output_dir: Path, formats, dark_mode: bool = False):
    """Write the requested report formats and return the paths written."""
    datasets = state["datasets"]
    metrics = state["metrics"]
    builders = {
        "pdf": (PDF_FILENAME, lambda: build_pdf_report(
            datasets, metrics, dark_mode=dark_mode, source_name=state["filename"]
        )),
        "docx": (WORD_FILENAME, lambda: build_word_report(metrics)),
        "xlsx": (EXCEL_FILENAME, lambda: build_excel_report(datasets, metrics)),
    }

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for export_format in formats:
        filename, build = builders[export_format]
        content = build()
        if content is None:
            continue
        path = output_dir / filename
        path.write_bytes(content)
        written.append(path)
    return written


def print_summary(state):
    summary = state["metrics"]["summary"]
    datasets = state["datasets"]
    print("SUMMARY")
    print("-------")
    print(f"  Layout: {state['layout']['name']}")
    print(f"  Data rows: {datasets['rows_read']} ({datasets['rows_skipped']} skipped)")
    print(f"  Total Agents: {summary['total_agents']}")
    print(f"  Avg Outbound Calls: {summary['avg_outbound_calls']:.1f}")
    print(f"  Avg No Answers (RONA): {summary['avg_no_answers']:.1f}")
    print(f"  Avg Availability: {format_availability(summary['avg_availability'])}")
    print(f"  Elite Agents: {len(state['metrics']['elite_agents'])}")
    print(f"  At-Risk Agents: {len(state['metrics']['at_risk_agents'])}")
    print()


def main(argv=None):
    """Main function to run the agent report generator."""
    parser = argparse.ArgumentParser(
        description="Generate agent performance reports from a phone report export"
    )
    parser.add_argument("report", type=str, help="Path to the phone report (.csv, .xlsx or .xls)")
    parser.add_argument(
        "--layout",
        choices=sorted(LAYOUTS),
        help="Report layout (default: simple for CSV, extended for spreadsheets)",
    )
    parser.add_argument(
        "--percent-column",
        type=int,
        help="Column index of the availability percentage, simple layout only (10, older exports: 8)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=".",
        help="Directory for the generated reports (default: current directory)",
    )
    parser.add_argument(
        "--formats",
        nargs="+",
        choices=EXPORT_FORMATS,
        default=list(EXPORT_FORMATS),
        help="Report formats to write (default: all)",
    )
    parser.add_argument("--dark", action="store_true", help="Render the PDF with the dark theme")

    args = parser.parse_args(argv)

    report_path = Path(args.report)
    if not report_path.exists():
        print(f"❌ File not found: {report_path}")
        return 1

    print(f"📊 Loading {report_path.name}...")
    state, error = load_phone_report(
        report_path.read_bytes(),
        report_path.name,
        layout_name=args.layout,
        percent_column=args.percent_column,
    )
    if error:
        print(f"❌ {error}")
        return 1
    if not state["metrics"]["has_data"]:
        print("❌ No agent call data found. Check the --layout and --percent-column options.")
        return 1

    print_summary(state)

    written = write_reports(state, Path(args.output_dir), args.formats, dark_mode=args.dark)
    for path in written:
        print(f"✅ Wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
