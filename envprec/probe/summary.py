"""Human-readable run summary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..outcome import SANITY_MISMATCH, SANITY_OK
from .engine import EngineResult

RULE = "-" * 40
TABLE_RULE = "-" * 45


@dataclass(frozen=True)
class Palette:
    red: str = ""
    green: str = ""
    yellow: str = ""
    bold: str = ""
    reset: str = ""


PLAIN = Palette()
ANSI = Palette(red="\033[31m", green="\033[32m", yellow="\033[33m", bold="\033[1m", reset="\033[0m")


def choose_palette(color: bool, is_tty: bool) -> Palette:
    return ANSI if color and is_tty else PLAIN


def format_chain(order) -> str:
    return " > ".join(order)


def generate_summary_text(result: EngineResult, payload_hint: str = "", palette: Palette = PLAIN) -> str:
    """Render the run the way an operator reads it at a terminal."""
    p = palette
    record = result.record
    lines: List[str] = []

    lines.append(RULE)
    lines.append(f"Testing property key: {p.bold}{result.key}{p.reset}")
    lines.append(RULE)
    lines.append(f"Supported variables: {' '.join(record.supported) or '(none)'}")
    if record.unsupported:
        lines.append(f"Unsupported variables: {' '.join(record.unsupported)}")
    lines.append("Pairwise tests (two variables at a time):")
    for outcome in result.outcomes:
        lines.append(f"{outcome.first} vs {outcome.second} -> winner: {outcome.outcome}")

    lines.append(RULE)
    lines.append("Edges inferred:")
    lines.extend(record.edges)
    lines.append(RULE)
    lines.append("Final precedence order (highest first):")

    if record.order is None:
        lines.append(f"{p.yellow}Inconclusive ordering (insufficient data, cycle, or limited support).{p.reset}")
    else:
        for index, mechanism in enumerate(record.order, start=1):
            lines.append(f"{index}) {mechanism}")
        if len(record.order) >= 2:
            lines.append(RULE)
            lines.append(f"{p.bold}Precedence chain:{p.reset} {p.green}{format_chain(record.order)}{p.reset}")
            lines.append("")
            hint = payload_hint or result.key
            lines.append(
                f"Meaning: When the same {hint} is supplied via multiple supported env vars, "
                "the leftmost one wins over those to its right."
            )
            lines.append("")
        lines.append("Pairwise outcomes:")
        lines.append(TABLE_RULE)
        for outcome in result.outcomes:
            lines.append(f"{outcome.first + ' vs ' + outcome.second:<38} {outcome.outcome}")
        lines.append(TABLE_RULE)

    sanity = result.sanity
    if sanity.ran:
        lines.append(RULE)
        lines.append("Sanity check with all supported variables set:")
        lines.append((sanity.raw or "").rstrip("\n"))
        if sanity.classification == SANITY_MISMATCH:
            lines.append(
                f"{p.red}WARNING:{p.reset} Sanity run favored value {sanity.value}, "
                f"which doesn't match predicted top: {sanity.expected}"
            )
        elif sanity.classification == SANITY_OK:
            lines.append(f"{p.green}Sanity matches predicted top ({sanity.expected}).{p.reset}")

    lines.append(RULE)
    lines.append(f"Status: {record.status}")
    return "\n".join(lines) + "\n"
