# payload.py - Splits the text after the source block into a human message and trailing key=value metadata.

from __future__ import annotations
from typing import Dict, Tuple

KEY_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_.-")

OPENERS = {"(": 0, "[": 1, "{": 2}
CLOSERS = {")": 0, "]": 1, "}": 2}


def _skip_spaces(text: str, index: int) -> int:
    while index < len(text) and text[index] == " ":
        index += 1
    return index


def _scan_key(text: str, index: int) -> int:
    while index < len(text) and text[index] in KEY_CHARS:
        index += 1
    return index


def is_key_ahead(text: str, start: int) -> bool:
    """True if, after any spaces, `start` begins a non-empty key immediately followed by '='."""
    key_start = _skip_spaces(text, start)
    key_end = _scan_key(text, key_start)
    return key_end > key_start and key_end < len(text) and text[key_end] == "="


def find_metadata_start(payload: str) -> int:
    """
    Locate where trailing metadata begins, or -1.

    Precedence:
    1. the payload itself starts with a key
    2. the first run of two or more spaces followed by a key
    3. the first single space followed by a key
    """
    if is_key_ahead(payload, 0):
        return 0

    # Metadata is conventionally separated from the message by a double space.
    for i in range(len(payload) - 1):
        if payload[i] != " " or payload[i + 1] != " ":
            continue
        j = _skip_spaces(payload, i)
        if is_key_ahead(payload, j):
            return j

    for i, char in enumerate(payload):
        if char != " ":
            continue
        j = _skip_spaces(payload, i)
        if is_key_ahead(payload, j):
            return j

    return -1


def read_value(block: str, start: int) -> Tuple[str, int]:
    """
    Read one metadata value starting right after '='.

    The value ends at a space that sits outside every (), [] and {} group and is
    followed by another key. Unbalanced closers are ignored and unclosed openers
    simply run to the end of the block.
    """
    depths = [0, 0, 0]
    index = start

    while index < len(block):
        char = block[index]
        if char in OPENERS:
            depths[OPENERS[char]] += 1
        elif char in CLOSERS and depths[CLOSERS[char]] > 0:
            depths[CLOSERS[char]] -= 1

        if char == " " and not any(depths) and is_key_ahead(block, index + 1):
            break
        index += 1

    return block[start:index].rstrip(), index


def parse_metadata(block: str) -> Dict[str, str]:
    """Parse a run of key=value pairs. Stops silently at the first key without '='."""
    metadata: Dict[str, str] = {}
    index = 0

    while index < len(block):
        key_start = _skip_spaces(block, index)
        key_end = _scan_key(block, key_start)
        if key_end == key_start or key_end >= len(block) or block[key_end] != "=":
            break

        value, index = read_value(block, key_end + 1)
        # Re-inserting keeps first-seen order while the last value wins.
        metadata[block[key_start:key_end]] = value.rstrip()

    return metadata


def split_payload(payload: str) -> Tuple[str, Dict[str, str]]:
    """Return (message, metadata) for the free-text remainder of a log line."""
    if not payload:
        return "", {}

    start = find_metadata_start(payload)
    if start == -1:
        return payload.strip(), {}

    message = payload[:start].rstrip()
    return message, parse_metadata(payload[start:].strip())
