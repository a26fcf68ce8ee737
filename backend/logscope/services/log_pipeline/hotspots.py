# hotspots.py - Finds the slowest stretches of a log: adjacent entries with the largest time gaps between them.

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from .parser import LogEntry


@dataclass(frozen=True)
class Hotspot:
    current: LogEntry
    previous: Optional[LogEntry]
    gap_ms: int


def chronological(entries: Iterable[LogEntry]) -> List[LogEntry]:
    """Entries with a usable timestamp, oldest first. Undated entries take no part in gap analysis."""
    return sorted((e for e in entries if e.timestamp is not None), key=lambda e: e.timestamp)


def compute_gaps(entries: Iterable[LogEntry]) -> Tuple[List[LogEntry], Dict[str, int]]:
    """
    Milliseconds elapsed since the previous entry, keyed by entry id.
    The first entry has a gap of 0.
    """
    ordered = chronological(entries)
    gaps: Dict[str, int] = {}
    for i, entry in enumerate(ordered):
        if i == 0:
            gaps[entry.id] = 0
            continue
        gaps[entry.id] = max(entry.timestamp_ms - ordered[i - 1].timestamp_ms, 0)
    return ordered, gaps


def find_hotspots(entries: Iterable[LogEntry], threshold_seconds: float, limit: int = 5) -> List[Hotspot]:
    """Largest gaps at or above the threshold, biggest first."""
    ordered, gaps = compute_gaps(entries)
    if len(ordered) < 2:
        return []

    threshold_ms = max(threshold_seconds, 0) * 1000
    found: List[Hotspot] = []
    for i in range(1, len(ordered)):
        gap_ms = gaps[ordered[i].id]
        if gap_ms >= threshold_ms and gap_ms > 0:
            found.append(Hotspot(current=ordered[i], previous=ordered[i - 1], gap_ms=gap_ms))

    found.sort(key=lambda h: h.gap_ms, reverse=True)
    return found[:limit]


def format_duration(ms: float) -> str:
    """Human label for a gap: 212ms, 1.5s, 12s, 2m 5s, 3m."""
    if not math.isfinite(ms) or ms < 0:
        return "—"

    if ms >= 60_000:
        minutes = int(ms // 60_000)
        seconds = _round_half_up((ms % 60_000) / 1000)
        if seconds == 60:
            return f"{minutes + 1}m"
        return f"{minutes}m" if seconds == 0 else f"{minutes}m {seconds}s"

    if ms >= 1000:
        seconds = ms / 1000
        return f"{seconds:.0f}s" if seconds >= 10 else f"{seconds:.1f}s"

    return f"{_round_half_up(ms)}ms"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
