# facets.py - Flattens entries into a table: fixed core columns plus one typed column per metadata key.

from __future__ import annotations
import math
import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional
from .parser import LogEntry


INT_RE = re.compile(r"^[+-]?[0-9]+$")
PREFIXED_INT_RE = re.compile(r"^0[xXoObB][0-9a-fA-F]+$")
NON_IDENT_RE = re.compile(r"[^A-Za-z0-9_]")
UNDERSCORE_RUN_RE = re.compile(r"_{2,}")

NULL_WORDS = {"null", "none"}


@dataclass(frozen=True)
class FacetColumn:
    name: str
    label: str
    source: str
    original_key: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FacetView:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    columns: List[FacetColumn] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


CORE_COLUMNS: List[FacetColumn] = [
    FacetColumn("id", "id", "core", description="Unique log line id (timestamp-index)."),
    FacetColumn("timestamp", "timestamp", "core", description="Original ISO8601 timestamp string."),
    FacetColumn("timestamp_ms", "timestamp_ms", "core", description="Timestamp as milliseconds since epoch."),
    FacetColumn("level", "level", "core", description="Normalized log level (debug/info/etc)."),
    FacetColumn("source_file", "source_file", "core", description="File path inside the brackets."),
    FacetColumn("source_line", "source_line", "core", description="Line number extracted from source block."),
    FacetColumn("message", "message", "core", description="Free-form message text before kwargs."),
    FacetColumn("raw", "raw", "core", description="Entire unparsed log line."),
]


def coerce_value(value: str) -> Any:
    """
    Best-effort typing of a raw metadata value for the tabular view:
    blank/null/none -> None, true/false -> bool, finite numbers -> int or float,
    anything else is returned unchanged.
    """
    trimmed = value.strip()
    lowered = trimmed.lower()
    if not trimmed or lowered in NULL_WORDS:
        return None
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    if INT_RE.match(trimmed):
        try:
            return int(trimmed)
        except ValueError:
            pass
    if PREFIXED_INT_RE.match(trimmed):
        try:
            return int(trimmed, 0)
        except ValueError:
            return value

    # float() would also accept digit separators
    if "_" not in trimmed:
        try:
            number = float(trimmed)
        except ValueError:
            return value
        if math.isfinite(number):
            return number

    return value


def sanitize_key(key: str) -> str:
    """Normalize a metadata key into a lowercase SQL-friendly identifier."""
    cleaned = UNDERSCORE_RUN_RE.sub("_", NON_IDENT_RE.sub("_", key)).strip("_")
    cleaned = cleaned or "field"
    if cleaned[0].isdigit():
        cleaned = f"f_{cleaned}"
    return cleaned.lower()


class _ColumnRegistry:
    """Assigns one column per original metadata key, suffixing names that collide."""

    def __init__(self):
        self.columns: Dict[str, FacetColumn] = {}
        self._by_key: Dict[str, str] = {}

    def column_for(self, original_key: str) -> str:
        if original_key in self._by_key:
            return self._by_key[original_key]

        name = f"meta_{sanitize_key(original_key)}"
        suffix = 2
        candidate = name
        while candidate in self.columns:
            candidate = f"{name}_{suffix}"
            suffix += 1

        self.columns[candidate] = FacetColumn(
            name=candidate,
            label=candidate,
            source="metadata",
            original_key=original_key,
            description=f'Metadata parsed from "{original_key}".',
        )
        self._by_key[original_key] = candidate
        return candidate


def entry_row(entry: LogEntry) -> Dict[str, Any]:
    """Core columns for a single entry."""
    return {
        "id": entry.id,
        "timestamp": entry.timestamp_raw,
        "timestamp_ms": entry.timestamp_ms,
        "level": entry.level,
        "source_file": entry.source_file,
        "source_line": entry.source_line,
        "message": entry.message,
        "raw": entry.raw,
    }


def build_facet_view(entries: Iterable[LogEntry]) -> FacetView:
    registry = _ColumnRegistry()
    rows: List[Dict[str, Any]] = []

    for entry in entries:
        row = entry_row(entry)
        for key, value in entry.metadata.items():
            row[registry.column_for(key)] = coerce_value(value)
        rows.append(row)

    return FacetView(rows=rows, columns=CORE_COLUMNS + list(registry.columns.values()))
