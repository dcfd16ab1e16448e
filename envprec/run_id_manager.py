"""Centralized run ID management for envprec."""

from datetime import datetime
from typing import Optional


def generate_run_id(custom_run_id: Optional[str] = None, prefix: str = "") -> str:
    """
    Generate a run ID for log and output directories.

    Args:
        custom_run_id: Custom run ID provided by user
        prefix: Optional prefix for the run ID

    Returns:
        Generated run ID string
    """
    if custom_run_id:
        return custom_run_id

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}{timestamp}" if prefix else timestamp
