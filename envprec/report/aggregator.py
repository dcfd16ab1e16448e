"""Aggregate per-version result records into a Markdown comparison report."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..probe.record import TrialRecord
from ..probe.summary import format_chain
from ..probe.targets import TargetProfile

logger = logging.getLogger(__name__)

RESULT_FILENAME = "result.json"
_VERSION_DIR_RE = re.compile(r"jdk-([0-9]+)$")

NONE_LABEL = "(none)"
INCONCLUSIVE_LABEL = "(inconclusive)"


@dataclass(frozen=True)
class ReportEntry:
    version: str
    path: Path
    record: TrialRecord
    raw_text: str

    @property
    def precedence(self) -> Optional[str]:
        if self.record.order is None:
            return None
        return format_chain(self.record.order)


def find_result_files(root: Path) -> List[Path]:
    return sorted(path for path in Path(root).rglob(RESULT_FILENAME) if path.is_file())


def version_tag(path: Path) -> str:
    """``.../precedence-json-jdk-21/result.json`` -> ``21``; else the parent dir name."""
    match = _VERSION_DIR_RE.search(path.parent.name)
    if match:
        return match.group(1)
    return path.parent.name or "?"


def load_entries(root: Path) -> List[ReportEntry]:
    """Load every record under ``root``; unreadable files are skipped with a warning."""
    entries = []
    for path in find_result_files(root):
        try:
            raw_text = path.read_text(encoding="utf-8")
            record = TrialRecord.from_json(raw_text)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Skipping {path}: {e}")
            continue
        entries.append(ReportEntry(version_tag(path), path, record, raw_text))
    return entries


def _join(names: Sequence[str]) -> str:
    return ", ".join(names) or NONE_LABEL


def matrix_mechanisms(entries: Sequence[ReportEntry], fallback: Sequence[str]) -> List[str]:
    """Sorted union of the first record's mechanisms, or the profile's list."""
    if entries:
        first = entries[0].record
        names = sorted(set(first.supported) | set(first.unsupported))
        if names:
            return names
    return list(fallback)


def build_summary_rows(entries: Sequence[ReportEntry]) -> List[Dict[str, str]]:
    return [
        {
            "version": entry.version,
            "supported": _join(entry.record.supported),
            "unsupported": _join(entry.record.unsupported),
            "precedence": entry.precedence or INCONCLUSIVE_LABEL,
            "status": entry.record.status,
        }
        for entry in entries
    ]


def render_report(
    entries: Sequence[ReportEntry],
    profile: TargetProfile,
    generated_at: Optional[datetime] = None,
) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    label = profile.version_label
    lines: List[str] = [
        f"# {profile.report_title}",
        "",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M UTC')}",
        "",
        f"This report aggregates precedence detection across multiple {label} versions.",
        "",
        "## Summary Table",
        "",
        f"| {label} | Supported Vars | Unsupported Vars | Precedence (highest→lowest) | Status |",
        f"|{'-' * (len(label) + 2)}|----------------|------------------|-----------------------------|--------|",
    ]
    for row in build_summary_rows(entries):
        lines.append(
            f"| {row['version']} | {row['supported']} | {row['unsupported']} "
            f"| {row['precedence']} | {row['status']} |"
        )

    mechanisms = matrix_mechanisms(entries, profile.mechanisms)
    lines += [
        "",
        "## Support Matrix",
        "",
        "Legend: ✅ supported, ❌ unsupported",
        "",
        f"| {label} |" + "".join(f" {name} |" for name in mechanisms),
        f"|{'-' * (len(label) + 2)}|" + "---|" * len(mechanisms),
    ]
    for entry in entries:
        cells = "".join(
            " ✅ |" if name in entry.record.supported else " ❌ |" for name in mechanisms
        )
        lines.append(f"| {entry.version} |{cells}")

    lines += ["", f"## Detailed Per-{label} Results", ""]
    for entry in entries:
        lines.append(f"### {label} {entry.version}")
        if entry.precedence:
            lines.append(f"**Precedence:** `{entry.precedence}`")
        else:
            lines.append(f"**Precedence:** {INCONCLUSIVE_LABEL}")
        lines += [
            "",
            "<details><summary>Raw JSON</summary>",
            "",
            "```json",
            entry.raw_text.rstrip("\n"),
            "```",
            "</details>",
            "",
        ]

    lines += [
        "## Notes",
        "",
        f"* If a variable is marked unsupported for a {label} version, comparisons involving it are "
        'reported as "unsupported" and it is excluded from the precedence chain.',
        "* Status values: ok (consistent), mismatch (sanity check disagreed), "
        "inconclusive (insufficient data or full cycle).",
    ]
    return "\n".join(lines) + "\n"


def write_report(root: Path, output: Path, profile: TargetProfile) -> Path:
    """Render ``output`` (Markdown) and a sibling CSV summary from records under ``root``.

    Raises:
        FileNotFoundError: no readable result files under ``root``
    """
    entries = load_entries(root)
    if not entries:
        raise FileNotFoundError(f"No {RESULT_FILENAME} files found under {root}")

    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_report(entries, profile), encoding="utf-8")
    logger.info(f"Wrote {output} ({len(entries)} records)")

    csv_file = output.with_suffix(".csv")
    pd.DataFrame(build_summary_rows(entries)).to_csv(csv_file, index=False)
    logger.info(f"CSV version saved to: {csv_file}")
    return output
