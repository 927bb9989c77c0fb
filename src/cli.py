"""CLI entry point for the analytics dashboard normalizer.

Runs a load cycle against the dashboard's data sources, or extracts a
local workbook, and writes the normalized report as JSON.

Usage::

    # Load all three sources from the dev server
    python -m src.cli load --base-url http://localhost:5173 -o report.json

    # Same, with endpoints from a YAML config and the daily series as CSV
    python -m src.cli load --config sources.yaml \\
        -o report.json --daily-csv daily.csv

    # Extract a local workbook without any HTTP
    python -m src.cli extract --xlsx data/data.xlsx -o sheet.json

    # Show (or export) the worksheet layout
    python -m src.cli layout --save layout.yaml
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.processor.aggregator import load_report_sync
from src.processor.extractor import extract_sheet
from src.processor.ingestion import SourceError, read_grid
from src.processor.transform import build_chart_payload, daily_frame
from src.qa.validator import ReportValidator
from src.schema.config import SourceConfig
from src.schema.design_system import (
    format_currency,
    format_number,
    format_percentage,
)
from src.schema.layout import build_default_layout
from src.schema.loader import load_config, load_layout, save_layout


# ---------------------------------------------------------------------------
# Config / layout loading
# ---------------------------------------------------------------------------

def _load_layout(args):
    """Load a SheetLayout from --layout, or the built-in one."""
    if getattr(args, "layout", None):
        path = Path(args.layout)
        if not path.exists():
            _error(f"Layout file not found: {path}")
        return load_layout(path)
    return build_default_layout()


def _load_config(args):
    """Build a SourceConfig from --config and --base-url."""
    config = SourceConfig()
    if getattr(args, "config", None):
        path = Path(args.config)
        if not path.exists():
            _error(f"Config file not found: {path}")
        config = load_config(path)
    if getattr(args, "base_url", None):
        config.base_url = args.base_url
    return config


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _write_json(data, output):
    """Write JSON to a file, or stdout when output is None."""
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if output is None:
        print(text)
        return
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    _info(f"Written: {path}")


def _print_summary(report):
    """Print the headline numbers the dashboard shows."""
    for point in report.overview + report.conversion:
        _info(f"{point.metric}: {format_number(point.value)}")
    _info(f"Daily rows: {len(report.daily)}")
    if report.statistic is not None:
        _info(f"Total users ({report.statistic.filter_year}): "
              f"{format_number(report.statistic.total_users)}")
    if report.revenue is not None:
        _info("Revenue this year: "
              f"{format_currency(report.revenue.total_revenue_for_year)}")
        _info("Revenue this month: "
              f"{format_currency(report.revenue.current_month_revenue)}")
        _info("Growth this month: "
              f"{format_percentage(report.revenue.revenue_growth_rate_percentage)}")
    for message in report.errors:
        _warn(message)


def _run_qa(report, verbose):
    qa_result = ReportValidator().validate(report)
    if qa_result.passed and not qa_result.warnings:
        _info(qa_result.summary())
    else:
        _warn(qa_result.summary())
        if verbose:
            print(qa_result.report(), file=sys.stderr)
    return qa_result


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_load(args):
    """Load all sources and write the normalized report."""
    config = _load_config(args)
    layout = _load_layout(args)
    _info(f"Loading sources from {config.base_url}")

    report = load_report_sync(config, layout)
    _print_summary(report)
    _run_qa(report, args.verbose)

    data = report.to_dict()
    data["charts"] = build_chart_payload(report)
    _write_json(data, args.output)

    if args.daily_csv:
        path = Path(args.daily_csv)
        path.parent.mkdir(parents=True, exist_ok=True)
        daily_frame(report).to_csv(path, index=False)
        _info(f"Written: {path} ({len(report.daily)} rows)")

    if args.strict and report.has_errors:
        _error(f"{len(report.errors)} source(s) failed to load.")


def cmd_extract(args):
    """Extract the spreadsheet sections from a local workbook."""
    layout = _load_layout(args)
    path = Path(args.xlsx)
    if not path.exists():
        _error(f"Workbook not found: {path}")

    _info(f"Reading {path} with layout {layout.name}")
    try:
        grid = read_grid(path.read_bytes())
    except SourceError as exc:
        _error(str(exc))

    sections = extract_sheet(grid, layout)
    _info(f"Daily rows: {len(sections.daily)}")
    _write_json({
        "overview": [p.to_dict() for p in sections.overview],
        "conversion": [p.to_dict() for p in sections.conversion],
        "daily": [p.to_dict() for p in sections.daily],
    }, args.output)


def cmd_layout(args):
    """Show the worksheet layout."""
    layout = _load_layout(args)

    print(f"Layout:      {layout.name}")
    for f in layout.fields:
        print(f"  [{f.row:2d},{f.col:2d}] {f.section.value:<10} "
              f"{f.metric} ({f.parser.value})")
    cols = layout.daily_columns
    print(f"Daily:       rows {layout.daily_start_row}+ "
          f"(date={cols.date}, visits={cols.visits}, "
          f"signUps={cols.sign_ups}, upgrades={cols.upgrades})")

    if args.save:
        save_layout(layout, args.save)
        _info(f"Written: {args.save}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dashboard-normalizer",
        description="Normalize the analytics dashboard's data sources.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- load ----
    load = subparsers.add_parser(
        "load",
        help="Fetch the spreadsheet and both APIs into one report.",
    )
    load.add_argument(
        "--config",
        help="YAML file with base_url / paths / timeout / headers.",
    )
    load.add_argument(
        "--base-url",
        dest="base_url",
        help="Override the base URL the sources are served from.",
    )
    _add_layout_arg(load)
    _add_output_arg(load)
    load.add_argument(
        "--daily-csv",
        dest="daily_csv",
        help="Also write the daily series as CSV.",
    )
    load.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Exit with status 1 if any source failed.",
    )
    load.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show debug logging and the full QA report.",
    )
    load.set_defaults(func=cmd_load)

    # ---- extract ----
    ext = subparsers.add_parser(
        "extract",
        help="Extract the spreadsheet sections from a local .xlsx file.",
    )
    ext.add_argument(
        "--xlsx",
        required=True,
        help="Path to the workbook.",
    )
    _add_layout_arg(ext)
    _add_output_arg(ext)
    ext.set_defaults(func=cmd_extract)

    # ---- layout ----
    lay = subparsers.add_parser(
        "layout",
        help="Show the worksheet layout (cell offsets).",
    )
    _add_layout_arg(lay)
    lay.add_argument(
        "--save",
        help="Write the layout to a YAML file.",
    )
    lay.set_defaults(func=cmd_layout)

    return parser


def _add_layout_arg(parser):
    parser.add_argument(
        "--layout",
        help="Path to a custom YAML worksheet layout.",
    )


def _add_output_arg(parser):
    parser.add_argument(
        "-o", "--output",
        help="Output JSON file (default: stdout).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
    logging.basicConfig(level=level, format="  %(levelname)s %(name)s: %(message)s")
    args.func(args)


if __name__ == "__main__":
    main()
