"""Cross-version report aggregation."""

from .aggregator import load_entries, render_report, write_report

__all__ = ["load_entries", "render_report", "write_report"]
