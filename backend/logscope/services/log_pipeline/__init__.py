# Log parsing, faceting and filtering module
from .parser import LogEntry, ParseResult, parse_line, parse_log_text
from .payload import split_payload
from .facets import FacetColumn, FacetView, build_facet_view, coerce_value, sanitize_key
from .filters import LogFilter, filter_entries, level_counts, metadata_options, sort_entries, source_counts
from .hotspots import Hotspot, compute_gaps, find_hotspots, format_duration

__all__ = [
    "LogEntry",
    "ParseResult",
    "parse_line",
    "parse_log_text",
    "split_payload",
    "FacetColumn",
    "FacetView",
    "build_facet_view",
    "coerce_value",
    "sanitize_key",
    "LogFilter",
    "filter_entries",
    "level_counts",
    "metadata_options",
    "sort_entries",
    "source_counts",
    "Hotspot",
    "compute_gaps",
    "find_hotspots",
    "format_duration",
]
