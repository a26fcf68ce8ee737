# parser.py - Turns each raw line into a LogEntry card: timestamp, level, source location, message and metadata.

from __future__ import annotations
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from .payload import split_payload


# Four anchored segments: timestamp, [level], [source], payload.
# A line that ends right after the source block has an empty payload.
LOG_LINE_RE = re.compile(
    r"""
    ^
    (?P<timestamp>[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]+Z)   # 2024-04-12T05:41:11.337Z
    \s+
    \[(?P<level>[^\]]+)\]
    \s+
    \[(?P<location>[^\]]+)\]
    (?:\s+(?P<payload>.*))?
    $
    """,
    re.VERBOSE,
)

TIMESTAMP_PARTS_RE = re.compile(
    r"^([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})\.([0-9]+)Z$"
)

LINE_BREAK_RE = re.compile(r"\r?\n")
NON_DIGIT_RE = re.compile(r"[^0-9]")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MILLISECOND = timedelta(milliseconds=1)


@dataclass(frozen=True)
class LogEntry:
    id: str
    raw: str
    timestamp_raw: str
    timestamp: Optional[datetime]
    level: str
    source_file: str
    source_line: Optional[int]
    message: str
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def timestamp_ms(self) -> Optional[int]:
        """Milliseconds since the epoch, or None when the timestamp did not parse."""
        if self.timestamp is None:
            return None
        return (self.timestamp - EPOCH) // MILLISECOND


@dataclass
class ParseResult:
    entries: List[LogEntry] = field(default_factory=list)
    skipped: int = 0


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Convert a shaped timestamp into an aware UTC datetime.
    Returns None for calendar-invalid values like month 13 or day 99;
    fractional digits beyond microseconds are truncated.
    """
    m = TIMESTAMP_PARTS_RE.match(value)
    if not m:
        return None

    year, month, day, hour, minute, second = (int(part) for part in m.groups()[:6])
    micros = int(m.group(7)[:6].ljust(6, "0"))
    try:
        return datetime(year, month, day, hour, minute, second, micros, tzinfo=timezone.utc)
    except ValueError:
        return None


# The source block reads as path:line, split on the last colon so Windows drives and
# module:function prefixes stay inside the path.
def parse_location(block: str) -> Tuple[str, Optional[int]]:
    colon = block.rfind(":")
    if colon == -1:
        return block.strip(), None

    source_file = block[:colon].strip()
    digits = NON_DIGIT_RE.sub("", block[colon + 1:])
    if not digits:
        return source_file, None
    try:
        return source_file, int(digits)
    except ValueError:
        # longer than the interpreter's int conversion limit
        return source_file, None


def parse_line(line: str, index: int) -> Optional[LogEntry]:
    """Parse one trimmed line. Returns None when the four-segment grammar does not match."""
    m = LOG_LINE_RE.match(line)
    if not m:
        return None

    timestamp_raw = m.group("timestamp")
    source_file, source_line = parse_location(m.group("location"))
    message, metadata = split_payload(m.group("payload") or "")

    return LogEntry(
        id=f"{timestamp_raw}-{index}",
        raw=line,
        timestamp_raw=timestamp_raw,
        timestamp=parse_timestamp(timestamp_raw),
        level=m.group("level").strip().lower(),
        source_file=source_file,
        source_line=source_line,
        message=message,
        metadata=metadata,
    )


# Main reader: blank lines are ignored, lines that do not match are only counted.
def parse_log_text(text: str) -> ParseResult:
    result = ParseResult()
    for index, line in enumerate(LINE_BREAK_RE.split(text)):
        stripped = line.strip()
        if not stripped:
            continue

        entry = parse_line(stripped, index)
        if entry is None:
            result.skipped += 1
        else:
            result.entries.append(entry)
    return result
