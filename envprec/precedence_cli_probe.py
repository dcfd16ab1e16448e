"""Implementation of `envprec probe` command."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .logging_utils import setup_logging
from .outcome import EXIT_SETUP_ERROR, resolve_exit_code
from .probe.engine import run_precedence_probe
from .probe.record import artifact_record_path, write_record
from .probe.summary import choose_palette, generate_summary_text
from .probe.targets import SetupError, load_target_profile
from .run_id_manager import generate_run_id

logger = logging.getLogger(__name__)


def add_probe_arguments(parser: argparse.ArgumentParser) -> None:
    """Add probe command arguments."""
    parser.add_argument(
        "-p", "--property",
        dest="property_key",
        help="Observable key to test (default: random <prefix>NNNN)"
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Print the result record as JSON (machine readable)"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress human-readable progress (JSON is still printed with -j)"
    )
    parser.add_argument(
        "-k", "--keep-temp",
        action="store_true",
        help="Keep the temporary working directory"
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable color output"
    )
    parser.add_argument(
        "--no-sanity",
        action="store_true",
        help="Skip the final all-mechanisms sanity check"
    )
    parser.add_argument(
        "--target",
        help="Target profile name or YAML path (default: $ENVPREC_TARGET or jvm)"
    )
    parser.add_argument(
        "--executable",
        help="Target executable (default: $JAVA_HOME/bin/java, then PATH)"
    )
    parser.add_argument(
        "--output",
        help="Also write the JSON record to this path (e.g. artifacts/precedence-json-jdk-21/result.json)"
    )
    parser.add_argument(
        "--artifacts-dir",
        help="Also write the JSON record under this directory as precedence-json-<label>-<detected version>/result.json"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with code 2 unless the run status is ok"
    )
    parser.add_argument(
        "--log-dir",
        help="Write a debug log under this directory"
    )
    parser.add_argument(
        "--run-id",
        help="Run ID for the log directory (auto-generated if not provided)"
    )


def run_probe(args: argparse.Namespace) -> int:
    """Execute probe command.

    Returns:
        Exit code (1 for setup errors, 2 for non-ok runs under --strict, else 0)
    """
    load_dotenv()

    run_id = generate_run_id(args.run_id, prefix="precedence_")
    setup = setup_logging(
        target_name=args.target or "default",
        log_dir=args.log_dir,
        run_id=run_id,
        stream=sys.stderr,
        quiet=args.quiet,
    )

    try:
        profile = load_target_profile(args.target)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_SETUP_ERROR

    setup.log_config({
        "Run ID": run_id,
        "Mechanisms": ", ".join(profile.mechanisms),
        "Property": args.property_key or "(random)",
        "Sanity check": not args.no_sanity,
    })

    try:
        result = run_precedence_probe(
            profile,
            key=args.property_key,
            executable=args.executable,
            sanity=not args.no_sanity,
            keep_temp=args.keep_temp,
        )
    except SetupError as e:
        logger.error(f"ERROR: {e}")
        return EXIT_SETUP_ERROR

    destinations = []
    if args.output:
        destinations.append(Path(args.output))
    if args.artifacts_dir:
        destinations.append(artifact_record_path(Path(args.artifacts_dir), profile.version_label, result.target_version))
    for destination in destinations:
        path = write_record(result.record, destination)
        logger.info(f"Wrote result record: {path}")

    if args.json:
        print(result.record.to_json())
    elif not args.quiet:
        palette = choose_palette(not args.no_color, sys.stdout.isatty())
        hint = profile.render_payload(result.key, "...")
        print(generate_summary_text(result, payload_hint=hint, palette=palette), end="")

    return resolve_exit_code([result.record.status], policy="strict" if args.strict else "relaxed")
