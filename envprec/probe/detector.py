"""Support detection - which mechanisms the target honors on their own."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

from .runner import ProbeRunner, make_tag

logger = logging.getLogger(__name__)

PROBE_SUFFIX = "probe"


@dataclass(frozen=True)
class SupportSet:
    """Partition of the mechanism set into supported and unsupported.

    Both tuples keep detection order; ``notes`` carries the observed value
    for every mechanism that was rejected.
    """

    supported: Tuple[str, ...]
    unsupported: Tuple[str, ...]
    notes: Dict[str, str] = field(default_factory=dict)

    def is_supported(self, mechanism: str) -> bool:
        return mechanism in self.supported

    @property
    def mechanisms(self) -> Tuple[str, ...]:
        return self.supported + self.unsupported


def detect_support(runner: ProbeRunner, mechanisms: Sequence[str], key: str) -> SupportSet:
    """Probe every mechanism alone; supported iff its probe tag comes back verbatim."""
    supported = []
    unsupported = []
    notes: Dict[str, str] = {}

    for mechanism in mechanisms:
        tag = make_tag(mechanism, PROBE_SUFFIX)
        observation = runner.run({mechanism: tag}, key)
        if observation.value == tag:
            supported.append(mechanism)
            logger.debug(f"{mechanism} honored")
        else:
            unsupported.append(mechanism)
            notes[mechanism] = f"expected {tag}, observed {observation.value or '(absent)'}"
            logger.warning(f"Note: target ignored {mechanism}; marking unsupported for this run.")

    if len(supported) < 2:
        logger.warning(
            "Warning: Fewer than two supported mechanisms detected; ordering may be inconclusive."
        )

    return SupportSet(supported=tuple(supported), unsupported=tuple(unsupported), notes=notes)
