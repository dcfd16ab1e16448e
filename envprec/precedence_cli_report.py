"""Implementation of `envprec report` command."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .logging_utils import setup_logging
from .probe.targets import load_target_profile
from .report.aggregator import write_report

logger = logging.getLogger(__name__)


def add_report_arguments(parser: argparse.ArgumentParser) -> None:
    """Add report command arguments."""
    parser.add_argument(
        "root",
        nargs="?",
        default="artifacts",
        help="Directory searched recursively for result.json files (default: artifacts)"
    )
    parser.add_argument(
        "output",
        nargs="?",
        default="REPORT.md",
        help="Markdown report path (default: REPORT.md); a .csv summary is written beside it"
    )
    parser.add_argument(
        "--target",
        help="Target profile used for labels and the fallback mechanism list"
    )


def run_report(args: argparse.Namespace) -> int:
    """Execute report command."""
    setup_logging(target_name=args.target or "report")

    try:
        profile = load_target_profile(args.target)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        output = write_report(Path(args.root), Path(args.output), profile)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Wrote {output}")
    return 0
