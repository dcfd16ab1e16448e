"""Pairwise comparison - head-to-head trials between every mechanism pair."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import List, Optional, Sequence

from ..outcome import OUTCOME_UNKNOWN, OUTCOME_UNSUPPORTED, is_definite_outcome
from .detector import SupportSet
from .runner import ProbeRunner, make_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairwiseOutcome:
    """Result of one pair trial; ``outcome`` is a mechanism name or a sentinel."""

    first: str
    second: str
    outcome: str
    raw: Optional[str] = None

    @property
    def pair_name(self) -> str:
        return f"{self.first}_vs_{self.second}"

    @property
    def winner(self) -> Optional[str]:
        return self.outcome if is_definite_outcome(self.outcome) else None

    @property
    def loser(self) -> Optional[str]:
        if self.outcome == self.first:
            return self.second
        if self.outcome == self.second:
            return self.first
        return None

    @property
    def edge(self) -> str:
        """``"W>L"`` for a definite result, else the sentinel itself."""
        if self.outcome == OUTCOME_UNSUPPORTED:
            return OUTCOME_UNSUPPORTED
        if self.winner is None or self.loser is None:
            return OUTCOME_UNKNOWN
        return f"{self.winner}>{self.loser}"


def compare_pair(
    runner: ProbeRunner,
    first: str,
    second: str,
    support: SupportSet,
    key: str,
) -> PairwiseOutcome:
    """Run one head-to-head trial. Argument order never changes who wins."""
    for mechanism in (first, second):
        if not support.is_supported(mechanism):
            return PairwiseOutcome(first, second, OUTCOME_UNSUPPORTED)

    first_tag, second_tag = make_tag(first), make_tag(second)
    observation = runner.run({first: first_tag, second: second_tag}, key)

    if observation.value == first_tag:
        return PairwiseOutcome(first, second, first, observation.raw)
    if observation.value == second_tag:
        return PairwiseOutcome(first, second, second, observation.raw)

    if observation.value is None:
        logger.warning(f"WARN: Could not detect winner for pair {first} vs {second}.\n{observation.raw}")
    else:
        logger.warning(f"WARN: Unexpected value for {key}: {observation.value}\n{observation.raw}")
    return PairwiseOutcome(first, second, OUTCOME_UNKNOWN, observation.raw)


def compare_all_pairs(
    runner: ProbeRunner,
    mechanisms: Sequence[str],
    support: SupportSet,
    key: str,
) -> List[PairwiseOutcome]:
    """Compare every unordered pair of the full mechanism set, in combination order."""
    outcomes = []
    for first, second in combinations(mechanisms, 2):
        outcome = compare_pair(runner, first, second, support, key)
        logger.info(f"{first} vs {second} -> winner: {outcome.outcome}")
        outcomes.append(outcome)
    return outcomes
