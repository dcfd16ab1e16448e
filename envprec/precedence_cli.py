"""envprec CLI entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, List, Optional

from .config_loader import list_target_profiles, load_target_config


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=False))


def _cmd_targets(args: argparse.Namespace) -> int:
    names = list_target_profiles()
    if args.json:
        _print_json({
            "targets": {name: load_target_config(name) for name in names},
        })
        return 0
    for name in names:
        config = load_target_config(name)
        description = config.get("description", "")
        suffix = f" - {description}" if description else ""
        print(f"  - {name}{suffix}")
        if args.verbose:
            for mechanism in config["mechanisms"]:
                print(f"      - {mechanism}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envprec",
        description="envprec - determine precedence among environment-variable option mechanisms",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # probe
    from .precedence_cli_probe import add_probe_arguments, run_probe

    probe_parser = subparsers.add_parser(
        "probe",
        help="Probe the target and infer the precedence order",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  envprec probe\n"
            "  envprec probe -p testKey -j\n"
            "  envprec probe -q -j > result.json\n"
            "  envprec probe -j --output artifacts/precedence-json-jdk-21/result.json\n"
            "  envprec probe -q --artifacts-dir artifacts\n"
            "\n"
            "Exit codes:\n"
            "  0 success (even if the order is inconclusive)\n"
            "  1 setup / runtime error\n"
            "  2 status other than ok under --strict\n"
        ),
    )
    add_probe_arguments(probe_parser)
    probe_parser.set_defaults(_handler=run_probe)

    # report
    from .precedence_cli_report import add_report_arguments, run_report

    report_parser = subparsers.add_parser(
        "report",
        help="Aggregate result.json files from several versions into REPORT.md",
    )
    add_report_arguments(report_parser)
    report_parser.set_defaults(_handler=run_report)

    # targets
    targets_parser = subparsers.add_parser(
        "targets",
        help="List bundled target profiles",
    )
    targets_parser.add_argument("--json", action="store_true", help="Output as JSON")
    targets_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Include each target's mechanisms",
    )
    targets_parser.set_defaults(_handler=_cmd_targets)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "_handler", None)
    if handler is None:
        parser.error("No command handler registered")
    return int(handler(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
