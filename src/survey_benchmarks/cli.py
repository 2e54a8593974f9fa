"""Command-line interface for the benchmark engine.

Provides subcommands: `summarize`, `options`, and `variables`. Each command
is implemented as a `cmd_*` function that accepts an argparse namespace and
reads its survey rows from a CSV or JSON export.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from survey_benchmarks.aggregate.frames import grouped_to_frame, summary_to_frame
from survey_benchmarks.aggregate.summary import GROUP_KEYS
from survey_benchmarks.config import get_settings
from survey_benchmarks.engine import BenchmarkEngine
from survey_benchmarks.ingest.load_rows import read_rows
from survey_benchmarks.logging_config import configure_logging
from survey_benchmarks.models import FilterCriteria
from survey_benchmarks.normalize.names import variable_display_name

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    """Build filter criteria from the shared filter flags."""
    return FilterCriteria(
        specialty=args.specialty,
        survey_source=args.source,
        geographic_region=args.region,
        provider_type=args.provider_type,
        year=args.year,
        data_category=args.category,
    )


def _load_engine(args: argparse.Namespace) -> BenchmarkEngine:
    """Read the input export and index it.

    Raises:
        RuntimeError: if the export yields no valid rows.
    """
    rows, bad = read_rows(Path(args.input))
    if not rows:
        raise RuntimeError(f"No valid survey rows in {args.input} (bad={bad}).")
    return BenchmarkEngine(rows)


# --------------------------------------------------
# SUMMARIZE
# --------------------------------------------------
def cmd_summarize(args: argparse.Namespace) -> None:
    """Print simple and weighted summaries for the selected variables."""
    engine = _load_engine(args)
    criteria = _criteria_from_args(args)

    if args.group_by:
        frame = grouped_to_frame(engine.summarize_by_group(args.variable, criteria, args.group_by))
    else:
        frame = summary_to_frame(engine.summarize(args.variable, criteria))

    log.info("Summarized %d filtered rows", len(engine.filter(criteria)))
    with pd.option_context("display.max_rows", None, "display.width", 200):
        print(frame.to_string(index=False))


# --------------------------------------------------
# OPTIONS
# --------------------------------------------------
def cmd_options(args: argparse.Namespace) -> None:
    """Print the filter values still available under the given filters."""
    engine = _load_engine(args)
    for dimension, values in engine.filter_options(_criteria_from_args(args)).items():
        print(f"{dimension}: {', '.join(values) if values else '-'}")


# --------------------------------------------------
# VARIABLES
# --------------------------------------------------
def cmd_variables(args: argparse.Namespace) -> None:
    """Print discovered variables with the number of rows reporting each."""
    engine = _load_engine(args)
    for name, count in engine.discover_variables().items():
        print(f"{name}\t{count}\t{variable_display_name(name)}")


# --------------------------------------------------
# CLI
# --------------------------------------------------
def _add_filter_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--specialty", default=None)
    parser.add_argument("--source", default=None)
    parser.add_argument("--region", default=None)
    parser.add_argument("--provider-type", default=None)
    parser.add_argument("--year", default=None)
    parser.add_argument("--category", default=None)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    The returned parser has subcommands `summarize`, `options` and
    `variables`, all reading rows from `--input`.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="survey-benchmarks")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_sum = sub.add_parser("summarize")
    p_sum.add_argument("--input", required=True)
    p_sum.add_argument("--variable", action="append", required=True)
    p_sum.add_argument("--group-by", choices=sorted(GROUP_KEYS), default=None)
    _add_filter_flags(p_sum)

    p_opt = sub.add_parser("options")
    p_opt.add_argument("--input", required=True)
    _add_filter_flags(p_opt)

    p_var = sub.add_parser("variables")
    p_var.add_argument("--input", required=True)

    return p


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    settings = get_settings()
    configure_logging(settings.log_path, settings.log_level)

    args = build_parser().parse_args(argv)

    if args.cmd == "summarize":
        cmd_summarize(args)
    elif args.cmd == "options":
        cmd_options(args)
    elif args.cmd == "variables":
        cmd_variables(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
