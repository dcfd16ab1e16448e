"""Probe runner - one target invocation per trial, observable extraction."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from .targets import SetupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeObservation:
    """Captured output of one trial and the observable value parsed from it."""

    raw: str
    value: Optional[str]
    returncode: Optional[int] = None


class ProbeRunner(Protocol):
    """Anything that can run a trial with mechanism payloads active."""

    def run(self, assignments: Mapping[str, str], key: str) -> ProbeObservation:
        ...


def extract_observable(output: str, key: str) -> Optional[str]:
    """Return the value of the first ``<key>=<value>`` line, or None."""
    prefix = f"{key}="
    for line in (output or "").splitlines():
        if line.startswith(prefix):
            value = line[len(prefix):].rstrip("\r")
            return value or None
    return None


def make_tag(mechanism: str, suffix: str = "") -> str:
    """Self-identifying value: ``from-<mechanism>`` plus an optional suffix."""
    tag = f"from-{mechanism}"
    if suffix:
        tag += f"-{suffix}"
    return tag


def mechanism_from_tag(value: Optional[str], mechanisms: Iterable[str]) -> Optional[str]:
    """Map an observed tag back to the mechanism that set it."""
    if not value:
        return None
    for mechanism in mechanisms:
        if value == make_tag(mechanism):
            return mechanism
    return None


class SubprocessProbeRunner:
    """Runs the prepared probe command with a controlled environment."""

    def __init__(
        self,
        command: Sequence[str],
        mechanisms: Sequence[str],
        payload_template: str,
        baseline_env: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
    ):
        self.command: List[str] = list(command)
        self.mechanisms = tuple(mechanisms)
        self.payload_template = payload_template
        self.baseline_env = dict(os.environ if baseline_env is None else baseline_env)
        self.cwd = cwd
        self.invocations = 0

    def build_env(self, assignments: Mapping[str, str], key: str) -> Dict[str, str]:
        """Baseline minus every mechanism, plus the requested payloads."""
        env = dict(self.baseline_env)
        for name in self.mechanisms:
            env.pop(name, None)
        for name, value in assignments.items():
            env[name] = self.payload_template.format(key=key, value=value)
        return env

    def run(self, assignments: Mapping[str, str], key: str) -> ProbeObservation:
        env = self.build_env(assignments, key)
        logger.debug(f"Probe with {', '.join(assignments) or '(no mechanisms)'}: {' '.join(self.command)}")

        try:
            result = subprocess.run(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=env,
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            raise SetupError(f"Target executable not found: {self.command[0]}") from e
        self.invocations += 1

        output = result.stdout or ""
        if result.returncode != 0:
            logger.debug(f"Target exited with return code {result.returncode}")
        return ProbeObservation(
            raw=output,
            value=extract_observable(output, key),
            returncode=result.returncode,
        )
