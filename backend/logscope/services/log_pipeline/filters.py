# filters.py - Facet counts for the filter panel and the predicates that narrow the visible entries.

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set
from .parser import LogEntry

UNKNOWN_SOURCE = "unknown"


def source_label(entry: LogEntry) -> str:
    return entry.source_file or UNKNOWN_SOURCE


def level_counts(entries: Iterable[LogEntry]) -> Dict[str, int]:
    return dict(Counter(e.level for e in entries))


def source_counts(entries: Iterable[LogEntry]) -> Dict[str, int]:
    return dict(Counter(source_label(e) for e in entries))


def metadata_options(entries: Iterable[LogEntry]) -> Dict[str, List[str]]:
    """Distinct raw values seen for every metadata key, sorted."""
    options: Dict[str, Set[str]] = {}
    for entry in entries:
        for key, value in entry.metadata.items():
            options.setdefault(key, set()).add(value)
    return {key: sorted(values) for key, values in options.items()}


# Empty collections mean "no constraint" for that facet.
@dataclass
class LogFilter:
    levels: Set[str] = field(default_factory=set)
    sources: Set[str] = field(default_factory=set)
    metadata: Dict[str, List[str]] = field(default_factory=dict)
    search: str = ""

    @property
    def is_active(self) -> bool:
        return bool(
            self.levels
            or self.sources
            or any(self.metadata.values())
            or self.search.strip()
        )


def _search_haystack(entry: LogEntry) -> str:
    parts = [entry.message, entry.source_file, entry.raw]
    parts.extend(f"{key}={value}" for key, value in entry.metadata.items())
    return " ".join(parts).lower()


def matches(entry: LogEntry, log_filter: LogFilter) -> bool:
    """True if the entry satisfies every active criterion of the filter."""
    if log_filter.levels and entry.level not in log_filter.levels:
        return False

    if log_filter.sources and source_label(entry) not in log_filter.sources:
        return False

    for key, accepted in log_filter.metadata.items():
        if not accepted:
            continue
        value = entry.metadata.get(key)
        if not value or value not in accepted:
            return False

    search = log_filter.search.strip().lower()
    if search and search not in _search_haystack(entry):
        return False

    return True


def filter_entries(entries: Iterable[LogEntry], log_filter: LogFilter) -> List[LogEntry]:
    return [e for e in entries if matches(e, log_filter)]


def sort_entries(entries: Iterable[LogEntry], direction: str = "desc") -> List[LogEntry]:
    """
    Order entries by timestamp. Entries whose timestamp did not parse are
    kept at the end in their original order.
    """
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction}")

    entries = list(entries)
    dated = [e for e in entries if e.timestamp is not None]
    undated = [e for e in entries if e.timestamp is None]
    dated.sort(key=lambda e: e.timestamp, reverse=(direction == "desc"))
    return dated + undated
