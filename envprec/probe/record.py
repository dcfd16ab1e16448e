"""Trial records - the serialized result of one engine run.

The JSON form is the contract consumed by the report aggregator::

    {"property": "foo123", "supported": [...], "unsupported": [...],
     "pairwise": {"A_vs_B": "A", ...}, "edges": ["A>B", ...],
     "order": ["A", "B"] | null,
     "sanity": {"raw": "...", "value": "..."} | null,
     "status": "ok" | "mismatch" | "inconclusive"}
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from ..outcome import RUN_STATUSES, resolve_run_status
from .comparator import PairwiseOutcome
from .detector import SupportSet
from .ranking import RankResult
from .sanity import SanityResult

# Control characters other than \b \t \n \f \r
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x07\x0b\x0e-\x1f]")


def sanitize_raw_output(text: str) -> str:
    """Drop control characters JSON would otherwise carry as \\u escapes."""
    return _CONTROL_CHARS_RE.sub("", text or "")


@dataclass(frozen=True)
class TrialRecord:
    """Write-once aggregate of one run, in serialization-ready form."""

    observable: str
    supported: Tuple[str, ...]
    unsupported: Tuple[str, ...]
    pairwise: Tuple[Tuple[str, str], ...]
    edges: Tuple[str, ...]
    order: Optional[Tuple[str, ...]]
    sanity: Optional[Tuple[str, str]]
    status: str

    @property
    def pairwise_map(self) -> Dict[str, str]:
        return dict(self.pairwise)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property": self.observable,
            "supported": list(self.supported),
            "unsupported": list(self.unsupported),
            "pairwise": dict(self.pairwise),
            "edges": list(self.edges),
            "order": list(self.order) if self.order is not None else None,
            "sanity": (
                {"raw": self.sanity[0], "value": self.sanity[1]}
                if self.sanity is not None
                else None
            ),
            "status": self.status,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrialRecord":
        if not isinstance(data, dict):
            raise ValueError(f"Record must be a JSON object, got {type(data).__name__}")
        status = data.get("status")
        if status not in RUN_STATUSES:
            raise ValueError(f"Unknown record status: {status!r}")
        sanity = data.get("sanity")
        if sanity is not None and not isinstance(sanity, dict):
            raise ValueError(f"Record sanity must be an object or null, got {type(sanity).__name__}")
        order = data.get("order")
        pairwise = data.get("pairwise") or {}
        if not isinstance(pairwise, dict):
            raise ValueError(f"Record pairwise must be an object, got {type(pairwise).__name__}")
        return cls(
            observable=data.get("property", ""),
            supported=tuple(data.get("supported") or ()),
            unsupported=tuple(data.get("unsupported") or ()),
            pairwise=tuple(pairwise.items()),
            edges=tuple(data.get("edges") or ()),
            order=tuple(order) if order is not None else None,
            sanity=(sanity.get("raw", ""), sanity.get("value", "")) if sanity else None,
            status=status,
        )

    @classmethod
    def from_json(cls, text: str) -> "TrialRecord":
        return cls.from_dict(json.loads(text))


def build_trial_record(
    key: str,
    support: SupportSet,
    outcomes: Sequence[PairwiseOutcome],
    ranking: RankResult,
    sanity: SanityResult,
) -> TrialRecord:
    """Freeze a finished run into its record."""
    status = resolve_run_status(
        order_found=not ranking.inconclusive,
        sanity_classification=sanity.classification,
    )
    return TrialRecord(
        observable=key,
        supported=support.supported,
        unsupported=support.unsupported,
        pairwise=tuple((outcome.pair_name, outcome.outcome) for outcome in outcomes),
        edges=tuple(outcome.edge for outcome in outcomes),
        order=ranking.order,
        sanity=(sanitize_raw_output(sanity.raw or ""), sanity.value or "") if sanity.ran else None,
        status=status,
    )


def write_record(record: TrialRecord, path: Path) -> Path:
    """Write the record as a single JSON line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(record.to_json() + "\n")
    return path


def artifact_record_path(root: Path, version_label: str, version: Optional[int]) -> Path:
    """``<root>/precedence-json-<label>-<version>/result.json``, the layout the report reads."""
    label = version_label.lower() or "version"
    return Path(root) / f"precedence-json-{label}-{version if version is not None else 'unknown'}" / "result.json"
