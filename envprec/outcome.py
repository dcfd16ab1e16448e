"""Run outcome helpers for concise machine-readable status reporting."""

from __future__ import annotations

from typing import List, Optional


STATUS_OK = "ok"
STATUS_MISMATCH = "mismatch"
STATUS_INCONCLUSIVE = "inconclusive"

RUN_STATUSES = (STATUS_OK, STATUS_MISMATCH, STATUS_INCONCLUSIVE)

# Pairwise outcome sentinels (a definite outcome is a mechanism name)
OUTCOME_UNSUPPORTED = "unsupported"
OUTCOME_UNKNOWN = "unknown"

SANITY_OK = "ok"
SANITY_MISMATCH = "mismatch"
SANITY_UNKNOWN = "unknown"
SANITY_SKIPPED = "skipped"
SANITY_NOT_APPLICABLE = "not-applicable"

EXIT_OK = 0
EXIT_SETUP_ERROR = 1
EXIT_STRICT_FAILURE = 2


def is_definite_outcome(outcome: Optional[str]) -> bool:
    """True when a pairwise outcome names a winning mechanism."""
    return bool(outcome) and outcome not in {OUTCOME_UNSUPPORTED, OUTCOME_UNKNOWN}


def resolve_run_status(*, order_found: bool, sanity_classification: str) -> str:
    """Map the ranking verdict and sanity classification to an overall status."""
    if not order_found:
        return STATUS_INCONCLUSIVE
    if sanity_classification == SANITY_MISMATCH:
        return STATUS_MISMATCH
    return STATUS_OK


def resolve_exit_code(statuses: List[str], *, policy: str = "relaxed") -> int:
    """Compute process exit code from run statuses and policy.

    Analytical outcomes never look like setup failures: ``relaxed`` always
    exits 0, ``strict`` exits 2 unless every run was ``ok``.
    """
    policy = (policy or "relaxed").lower()

    if policy == "strict":
        if any(status != STATUS_OK for status in statuses):
            return EXIT_STRICT_FAILURE
        return EXIT_OK

    return EXIT_OK
