"""Shared test fixtures and utilities for envprec tests."""

import logging
import os
import stat
import sys
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

import pytest

from envprec.probe.runner import ProbeObservation

JVM_MECHANISMS = ("_JAVA_OPTIONS", "JAVA_TOOL_OPTIONS", "JDK_JAVA_OPTIONS")


class ScriptedProbeRunner:
    """Fake probe runner: the highest-precedence honored mechanism wins.

    ``overrides`` maps a frozenset of active mechanisms to a scripted
    ``(raw, value)`` pair, for ambiguous or contradictory results.
    """

    def __init__(
        self,
        precedence: Sequence[str],
        honored: Optional[Sequence[str]] = None,
        overrides: Optional[Dict[FrozenSet[str], Tuple[str, Optional[str]]]] = None,
    ):
        self.precedence = list(precedence)
        self.honored = set(self.precedence if honored is None else honored)
        self.overrides = overrides or {}
        self.calls: List[Dict[str, str]] = []

    def run(self, assignments: Mapping[str, str], key: str) -> ProbeObservation:
        self.calls.append(dict(assignments))
        scripted = self.overrides.get(frozenset(assignments))
        if scripted is not None:
            raw, value = scripted
            return ProbeObservation(raw=raw, value=value, returncode=0)

        for mechanism in self.precedence:
            if mechanism in assignments and mechanism in self.honored:
                value = assignments[mechanism]
                return ProbeObservation(raw=f"{key}={value}\n", value=value, returncode=0)
        return ProbeObservation(raw=f"{key}=null\n", value="null", returncode=0)


FAKE_JAVA_SOURCE = '''#!__PYTHON__
import os
import re
import sys

HONORED_LOWEST_FIRST = __ORDER__

args = sys.argv[1:]
if args == ["-version"]:
    sys.stderr.write('openjdk version "__VERSION__" 2023-10-17\\n')
    sys.exit(0)

with open(args[-1]) as f:
    key = re.search(r'getProperty\\("([^"]+)"\\)', f.read()).group(1)

value = "null"
for name in HONORED_LOWEST_FIRST:
    options = os.environ.get(name)
    if not options:
        continue
    sys.stderr.write("Picked up %s: %s\\n" % (name, options))
    for token in options.split():
        if token.startswith("-D" + key + "="):
            value = token[len(key) + 3:]
print(key + "=" + value)
'''


def write_fake_java(directory: Path, precedence: Sequence[str], version: str = "21.0.1") -> Path:
    """Write an executable stand-in for ``java`` that honors ``precedence`` (highest first)."""
    script = directory / "java"
    source = (
        FAKE_JAVA_SOURCE.replace("__PYTHON__", sys.executable)
        .replace("__ORDER__", repr(list(reversed(list(precedence)))))
        .replace("__VERSION__", version)
    )
    script.write_text(source)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def fake_java(tmp_path: Path) -> Path:
    """Fake JDK 21: _JAVA_OPTIONS > JDK_JAVA_OPTIONS > JAVA_TOOL_OPTIONS."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    return write_fake_java(bin_dir, ["_JAVA_OPTIONS", "JDK_JAVA_OPTIONS", "JAVA_TOOL_OPTIONS"])


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI commands reconfigure the root logger; drop what they installed."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


posix_only = pytest.mark.skipif(os.name != "posix", reason="fake executables need a shebang")
