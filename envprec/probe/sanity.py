"""Sanity validation - all supported mechanisms at once versus the predicted top."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..outcome import (
    SANITY_MISMATCH,
    SANITY_NOT_APPLICABLE,
    SANITY_OK,
    SANITY_SKIPPED,
    SANITY_UNKNOWN,
)
from .detector import SupportSet
from .ranking import RankResult
from .runner import ProbeRunner, make_tag, mechanism_from_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanityResult:
    raw: Optional[str]
    value: Optional[str]
    winner: Optional[str]
    expected: Optional[str]
    classification: str

    @property
    def ran(self) -> bool:
        return self.classification != SANITY_SKIPPED


def skipped_sanity() -> SanityResult:
    return SanityResult(raw=None, value=None, winner=None, expected=None, classification=SANITY_SKIPPED)


def classify_sanity(value: Optional[str], ranking: RankResult, support: SupportSet) -> str:
    expected = ranking.top
    if expected is None or len(support.supported) < 2:
        return SANITY_NOT_APPLICABLE
    if not value:
        return SANITY_UNKNOWN
    if value == make_tag(expected):
        return SANITY_OK
    return SANITY_MISMATCH


def validate_sanity(
    runner: ProbeRunner,
    support: SupportSet,
    ranking: RankResult,
    key: str,
) -> SanityResult:
    """Run every supported mechanism together and compare with the ranking."""
    assignments = {mechanism: make_tag(mechanism) for mechanism in support.supported}
    observation = runner.run(assignments, key)

    classification = classify_sanity(observation.value, ranking, support)
    result = SanityResult(
        raw=observation.raw,
        value=observation.value,
        winner=mechanism_from_tag(observation.value, support.supported),
        expected=ranking.top,
        classification=classification,
    )

    if classification == SANITY_MISMATCH:
        logger.warning(
            f"WARNING: Sanity run favored value {observation.value}, "
            f"which doesn't match predicted top: {ranking.top}"
        )
    elif classification == SANITY_UNKNOWN:
        logger.warning(f"Sanity run produced no value for {key}:\n{observation.raw}")
    elif classification == SANITY_OK:
        logger.info(f"Sanity matches predicted top ({ranking.top}).")
    return result
