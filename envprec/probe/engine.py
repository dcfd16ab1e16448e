"""Precedence engine - support detection, pairwise trials, ranking, sanity."""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterator, Mapping, Optional, Sequence, Tuple

from .comparator import PairwiseOutcome, compare_all_pairs
from .detector import SupportSet, detect_support
from .ranking import RankResult, resolve_ranking
from .record import TrialRecord, build_trial_record
from .runner import ProbeRunner, SubprocessProbeRunner
from .sanity import SanityResult, skipped_sanity, validate_sanity
from .targets import (
    SetupError,
    TargetProfile,
    build_target,
    resolve_executable,
    validate_observable_key,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineResult:
    """Everything one run produced; ``record`` is the serializable part."""

    key: str
    support: SupportSet
    outcomes: Tuple[PairwiseOutcome, ...]
    ranking: RankResult
    sanity: SanityResult
    record: TrialRecord
    target_version: Optional[int] = None


def run_trials(
    runner: ProbeRunner,
    mechanisms: Sequence[str],
    key: str,
    *,
    sanity: bool = True,
) -> EngineResult:
    """Run the full inference pipeline against any probe runner."""
    logger.info(f"Testing property key: {key}")

    support = detect_support(runner, mechanisms, key)
    logger.info(f"Supported mechanisms: {' '.join(support.supported) or '(none)'}")
    if support.unsupported:
        logger.info(f"Unsupported mechanisms: {' '.join(support.unsupported)}")

    outcomes = tuple(compare_all_pairs(runner, mechanisms, support, key))
    ranking = resolve_ranking(outcomes, support)
    sanity_result = validate_sanity(runner, support, ranking, key) if sanity else skipped_sanity()

    record = build_trial_record(key, support, outcomes, ranking, sanity_result)
    logger.info(f"Run status: {record.status}")
    return EngineResult(
        key=key,
        support=support,
        outcomes=outcomes,
        ranking=ranking,
        sanity=sanity_result,
        record=record,
    )


@contextmanager
def scratch_workspace(keep: bool = False) -> Iterator[Path]:
    """Temporary directory for the probe program, removed on every exit path."""
    try:
        workdir = Path(tempfile.mkdtemp(prefix="envprec-"))
    except OSError as e:
        raise SetupError(f"Could not create working directory: {e}") from e

    try:
        yield workdir
    finally:
        if keep:
            logger.info(f"Keeping temp dir: {workdir}")
        else:
            shutil.rmtree(workdir, ignore_errors=True)


def run_precedence_probe(
    profile: TargetProfile,
    *,
    key: Optional[str] = None,
    executable: Optional[str] = None,
    sanity: bool = True,
    keep_temp: bool = False,
    baseline_env: Optional[Mapping[str, str]] = None,
) -> EngineResult:
    """Probe a real target executable described by ``profile``.

    Raises:
        SetupError: invalid key, missing executable, unbuildable probe program, or no workspace
    """
    key = validate_observable_key(key or profile.random_key())
    resolved = resolve_executable(profile, executable, baseline_env)
    target = build_target(profile, resolved, baseline_env)
    version = target.detect_version()

    with scratch_workspace(keep=keep_temp) as workdir:
        command = target.prepare(workdir, key)
        runner = SubprocessProbeRunner(
            command,
            profile.mechanisms,
            profile.payload,
            baseline_env=baseline_env,
            cwd=str(workdir),
        )
        result = run_trials(runner, profile.mechanisms, key, sanity=sanity)
        logger.debug(f"{runner.invocations} target invocations")

    return replace(result, target_version=version)
