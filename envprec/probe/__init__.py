"""envprec probe module - precedence inference between injection mechanisms."""

from .engine import EngineResult, run_precedence_probe, run_trials
from .record import TrialRecord
from .targets import SetupError, TargetProfile, load_target_profile

__all__ = [
    "EngineResult",
    "SetupError",
    "TargetProfile",
    "TrialRecord",
    "load_target_profile",
    "run_precedence_probe",
    "run_trials",
]
