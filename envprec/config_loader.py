"""Shared configuration loader for envprec target profiles."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

DEFAULT_TARGET = "jvm"
TARGETS_DIR = Path(__file__).resolve().parent / "configs" / "targets"

REQUIRED_KEYS = ("name", "executable", "mechanisms", "payload")


def list_target_profiles() -> List[str]:
    """Names of the target profiles bundled with the package."""
    if not TARGETS_DIR.exists():
        return []
    return sorted(path.stem for path in TARGETS_DIR.glob("*.yaml"))


def resolve_target_path(target: Optional[Union[str, Path]] = None) -> Path:
    """Resolve a profile argument to a YAML path.

    An existing file wins; otherwise the value is treated as the name of a
    bundled profile. ``ENVPREC_TARGET`` supplies the default name.
    """
    if target is None:
        target = os.environ.get("ENVPREC_TARGET", DEFAULT_TARGET)

    path = Path(target)
    if path.exists():
        return path

    name = path.name
    if name.endswith(".yaml"):
        name = name[: -len(".yaml")]
    return TARGETS_DIR / f"{name}.yaml"


def validate_target_config(config: Dict[str, Any], source: Path) -> Dict[str, Any]:
    """Check the keys every target profile needs."""
    if not isinstance(config, dict):
        raise ValueError(f"Target profile '{source}' must be a mapping")

    missing = [key for key in REQUIRED_KEYS if not config.get(key)]
    if missing:
        raise ValueError(f"Target profile '{source}' is missing: {', '.join(missing)}")

    mechanisms = config["mechanisms"]
    if not isinstance(mechanisms, list) or not all(isinstance(m, str) and m for m in mechanisms):
        raise ValueError(f"Target profile '{source}': mechanisms must be a list of names")
    if len(set(mechanisms)) != len(mechanisms):
        raise ValueError(f"Target profile '{source}': mechanisms must be unique")

    payload = config["payload"]
    if "{key}" not in payload or "{value}" not in payload:
        raise ValueError(
            f"Target profile '{source}': payload must contain {{key}} and {{value}}"
        )

    return config


def load_target_config(target: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load and validate a target profile from YAML."""
    config_path = resolve_target_path(target)

    if not config_path.exists():
        error_msg = f"Target profile '{target}' not found (looked for {config_path})."
        available = list_target_profiles()
        if available:
            error_msg += "\n\nAvailable targets:\n" + "\n".join(f"  - {name}" for name in available)
        raise FileNotFoundError(error_msg)

    with config_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    return validate_target_config(config, config_path)
