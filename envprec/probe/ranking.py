"""Rank resolution - turn a partial tournament of pair results into an order.

The order is primarily by descending win count. Mechanisms with equal win
counts are ordered by the direct edges between them, and by detection order
where no edge exists. The result is ``inconclusive`` when:

* fewer than two mechanisms are supported,
* fewer than n-1 definite edges are known,
* the three supported mechanisms form a rotation (every win count is 1),
* or the produced order contradicts any known edge (a cycle the rotation
  rule does not catch).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .comparator import PairwiseOutcome
from .detector import SupportSet

logger = logging.getLogger(__name__)

Edge = Tuple[str, str]

REASON_TOO_FEW_SUPPORTED = "fewer than two supported mechanisms"
REASON_INSUFFICIENT_EDGES = "insufficient pairwise data"
REASON_ROTATION = "three-way rotation"
REASON_CYCLE = "cycle in pairwise results"


@dataclass(frozen=True)
class RankResult:
    """Total order (highest precedence first) or an inconclusive verdict."""

    order: Optional[Tuple[str, ...]]
    wins: Dict[str, int] = field(default_factory=dict)
    edges: Tuple[Edge, ...] = ()
    reason: Optional[str] = None

    @property
    def inconclusive(self) -> bool:
        return self.order is None

    @property
    def top(self) -> Optional[str]:
        return self.order[0] if self.order else None


def definite_edges(outcomes: Iterable[PairwiseOutcome], supported: Sequence[str]) -> List[Edge]:
    """Winner/loser pairs for definite outcomes between supported mechanisms."""
    allowed = set(supported)
    edges = []
    for outcome in outcomes:
        winner, loser = outcome.winner, outcome.loser
        if winner is None or loser is None:
            continue
        if winner in allowed and loser in allowed:
            edges.append((winner, loser))
    return edges


def count_wins(supported: Sequence[str], edges: Iterable[Edge]) -> Dict[str, int]:
    wins = {mechanism: 0 for mechanism in supported}
    for winner, _ in edges:
        wins[winner] += 1
    return wins


def _order_group(members: List[str], edges: Sequence[Edge]) -> Optional[List[str]]:
    """Topologically order a tie group; detection order picks among free nodes."""
    member_set = set(members)
    local = [(w, l) for w, l in edges if w in member_set and l in member_set]
    indegree = {m: 0 for m in members}
    for _, loser in local:
        indegree[loser] += 1

    ordered: List[str] = []
    remaining = list(members)
    while remaining:
        ready = next((m for m in remaining if indegree[m] == 0), None)
        if ready is None:
            return None
        ordered.append(ready)
        remaining.remove(ready)
        for winner, loser in local:
            if winner == ready:
                indegree[loser] -= 1
    return ordered


def order_by_wins(
    supported: Sequence[str],
    wins: Dict[str, int],
    edges: Sequence[Edge],
) -> Optional[List[str]]:
    """Descending win count; ties resolved by direct edges, then detection order."""
    order: List[str] = []
    for count in sorted(set(wins.values()), reverse=True):
        group = [m for m in supported if wins[m] == count]
        ordered_group = _order_group(group, edges)
        if ordered_group is None:
            return None
        order.extend(ordered_group)
    return order


def resolve_ranking(outcomes: Sequence[PairwiseOutcome], support: SupportSet) -> RankResult:
    """Infer the precedence order among supported mechanisms."""
    supported = list(support.supported)
    edges = definite_edges(outcomes, supported)
    wins = count_wins(supported, edges)
    n = len(supported)

    def _inconclusive(reason: str) -> RankResult:
        logger.info(f"Ranking inconclusive: {reason}")
        return RankResult(order=None, wins=wins, edges=tuple(edges), reason=reason)

    if n < 2:
        return _inconclusive(REASON_TOO_FEW_SUPPORTED)

    if len(edges) < n - 1:
        return _inconclusive(REASON_INSUFFICIENT_EDGES)

    if n == 3 and all(count == 1 for count in wins.values()):
        return _inconclusive(REASON_ROTATION)

    order = order_by_wins(supported, wins, edges)
    if order is None:
        return _inconclusive(REASON_CYCLE)

    position = {mechanism: index for index, mechanism in enumerate(order)}
    if any(position[winner] > position[loser] for winner, loser in edges):
        return _inconclusive(REASON_CYCLE)

    return RankResult(order=tuple(order), wins=wins, edges=tuple(edges))
