"""Target profiles - which runtime to probe and how to build its probe program."""

from __future__ import annotations

import logging
import os
import random
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..config_loader import load_target_config

logger = logging.getLogger(__name__)

JAVA_SOURCE_TEMPLATE = """public class Test {{
  public static void main(String[] args) {{
    System.out.println("{key}=" + System.getProperty("{key}"));
  }}
}}
"""

_LEGACY_VERSION_RE = re.compile(r'version "1\.([0-9]+)\.')
_MODERN_VERSION_RE = re.compile(r'version "([0-9]+)')
_BARE_VERSION_RE = re.compile(r"([0-9]+)(\.[0-9]+)*")
_OBSERVABLE_KEY_RE = re.compile(r"[A-Za-z0-9_.-]+")


class SetupError(RuntimeError):
    """Fatal problem preparing a run (missing executable, failed compile, no workspace)."""


@dataclass(frozen=True)
class TargetProfile:
    """Static description of a runtime and its competing injection mechanisms."""

    name: str
    kind: str
    executable: str
    mechanisms: Tuple[str, ...]
    payload: str
    description: str = ""
    compiler: Optional[str] = None
    home_env: Optional[str] = None
    key_prefix: str = "key"
    minimum_version: Optional[int] = None
    source_launch_version: Optional[int] = None
    version_label: str = "Version"
    report_title: str = "Env Var Precedence Report"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TargetProfile":
        return cls(
            name=config["name"],
            kind=config.get("kind") or config["name"],
            executable=config["executable"],
            mechanisms=tuple(config["mechanisms"]),
            payload=config["payload"],
            description=config.get("description", ""),
            compiler=config.get("compiler"),
            home_env=config.get("home_env"),
            key_prefix=config.get("key_prefix", "key"),
            minimum_version=config.get("minimum_version"),
            source_launch_version=config.get("source_launch_version"),
            version_label=config.get("version_label", "Version"),
            report_title=config.get("report_title", "Env Var Precedence Report"),
        )

    def render_payload(self, key: str, value: str) -> str:
        return self.payload.format(key=key, value=value)

    def random_key(self) -> str:
        return f"{self.key_prefix}{random.randint(0, 32767)}"


def load_target_profile(target: Optional[Union[str, Path]] = None) -> TargetProfile:
    """Load a YAML target profile by name or path."""
    return TargetProfile.from_config(load_target_config(target))


def parse_java_major(version_line: str) -> Optional[int]:
    """Extract the Java major version from the first line of ``java -version``.

    >>> parse_java_major('java version "1.8.0_402"')
    8
    >>> parse_java_major('openjdk version "21.0.1" 2023-10-17')
    21
    """
    for pattern in (_LEGACY_VERSION_RE, _MODERN_VERSION_RE, _BARE_VERSION_RE):
        match = pattern.search(version_line or "")
        if match:
            return int(match.group(1))
    return None


def validate_observable_key(key: str) -> str:
    """Reject keys that cannot be embedded verbatim in the probe program and payload."""
    if not _OBSERVABLE_KEY_RE.fullmatch(key or ""):
        raise SetupError(f"Invalid property key {key!r}: use only letters, digits, '_', '.' and '-'")
    return key


def resolve_executable(
    profile: TargetProfile,
    explicit: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Locate the target executable: explicit path, then ``<home_env>/bin``, then PATH."""
    environ = os.environ if environ is None else environ

    if explicit:
        found = shutil.which(explicit)
        if found:
            return found
        raise SetupError(f"{explicit} not found or not executable")

    if profile.home_env and environ.get(profile.home_env):
        candidate = Path(environ[profile.home_env]) / "bin" / profile.executable
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return str(candidate)
        logger.warning(f"{profile.home_env} is set but {candidate} is not executable; falling back to PATH")

    found = shutil.which(profile.executable)
    if not found:
        raise SetupError(f"{profile.executable} not found in PATH")
    return found


class JvmTarget:
    """Builds and launches the single-file Java probe program."""

    def __init__(
        self,
        profile: TargetProfile,
        executable: str,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.profile = profile
        self.executable = executable
        self.environ = environ
        self.major_version: Optional[int] = None

    def detect_version(self) -> Optional[int]:
        """Run ``java -version`` once and record the major version."""
        try:
            result = subprocess.run(
                [self.executable, "-version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=_scrubbed_environ(self.profile.mechanisms, self.environ),
            )
        except OSError as e:
            raise SetupError(f"Could not run {self.executable}: {e}") from e

        first_line = (result.stdout or "").splitlines()[0] if result.stdout else ""
        self.major_version = parse_java_major(first_line)

        if self.major_version is None:
            logger.warning(f"Unable to determine Java major version from: {first_line}")
        elif self.profile.minimum_version and self.major_version < self.profile.minimum_version:
            logger.warning(
                f"Detected Java major version {self.major_version} "
                f"(<{self.profile.minimum_version}). Precedence could differ from newer releases."
            )
        else:
            logger.info(f"Detected Java major version {self.major_version}")
        return self.major_version

    def _needs_compile(self) -> bool:
        launch = self.profile.source_launch_version
        return bool(launch and self.major_version is not None and self.major_version < launch)

    def prepare(self, workdir: Path, key: str) -> List[str]:
        """Write the probe program into ``workdir`` and return the launch command."""
        source = workdir / "Test.java"
        source.write_text(JAVA_SOURCE_TEMPLATE.format(key=key), encoding="utf-8")

        if not self._needs_compile():
            return [self.executable, str(source)]

        compiler = self._compiler_path()
        try:
            result = subprocess.run(
                [compiler, str(source)],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=_scrubbed_environ(self.profile.mechanisms, self.environ),
            )
        except OSError as e:
            raise SetupError(f"Could not run {compiler}: {e}") from e
        if result.returncode != 0:
            raise SetupError(f"javac failed with return code {result.returncode}:\n{result.stdout}")
        return [self.executable, "-cp", str(workdir), "Test"]

    def _compiler_path(self) -> str:
        sibling = Path(self.executable).with_name(self.profile.compiler or "javac")
        if sibling.is_file():
            return str(sibling)
        found = shutil.which(self.profile.compiler or "javac")
        if not found:
            raise SetupError("javac not found (required for Java < 11)")
        return found


TARGET_KINDS = {
    "jvm": JvmTarget,
}


def build_target(
    profile: TargetProfile,
    executable: str,
    environ: Optional[Mapping[str, str]] = None,
) -> JvmTarget:
    """Instantiate the launcher for a profile's ``kind``."""
    target_cls = TARGET_KINDS.get(profile.kind)
    if target_cls is None:
        raise SetupError(f"Unsupported target kind: {profile.kind}")
    return target_cls(profile, executable, environ)


def _scrubbed_environ(
    mechanisms: Tuple[str, ...],
    baseline: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    env = dict(os.environ if baseline is None else baseline)
    for name in mechanisms:
        env.pop(name, None)
    return env
