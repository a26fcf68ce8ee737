import time
import uuid
from pathlib import Path
from typing import List, Optional
from logscope.core.config import settings
from logscope.core.errors import EmptyLogError, LogDecodeError, UploadTooLargeError
from logscope.core.logging import get_logger
from logscope.models.schemas import (
    AnalyzeResponse, ExploreRequest, ExploreResponse, FacetColumnOut,
    FilterSpec, HotspotOut, LogEntryOut, QueryRequest, QueryResponse
)
from logscope.services.log_pipeline import (
    LogEntry, LogFilter, build_facet_view, filter_entries,
    find_hotspots, format_duration, level_counts, metadata_options,
    parse_log_text, sort_entries, source_counts
)
from logscope.services.log_pipeline.facets import FacetView
from logscope.services.log_pipeline.parser import LINE_BREAK_RE
from logscope.services.query import run_query

logger = get_logger(__name__)

SAMPLE_LABEL = "sample"


class PipelineTimings:
    """Track timing metrics for pipeline stages."""

    def __init__(self):
        self.start_time = time.time()
        self.decode_ms: float = 0
        self.parse_ms: float = 0
        self.facet_ms: float = 0
        self.total_ms: float = 0

    def log_summary(self, request_id: str):
        self.total_ms = (time.time() - self.start_time) * 1000
        logger.info(
            f"[{request_id}] Pipeline completed - "
            f"decode: {self.decode_ms:.1f}ms, "
            f"parse: {self.parse_ms:.1f}ms, "
            f"facets: {self.facet_ms:.1f}ms, "
            f"total: {self.total_ms:.1f}ms"
        )


def analyze_log_file(file_bytes: bytes, filename: str) -> AnalyzeResponse:
    """
    Analyze an uploaded log file.

    Stages:
    1. Validate size and decode as UTF-8
    2. Parse lines into entries
    3. Build facet counts and the column list of the tabular view
    """
    if len(file_bytes) == 0:
        raise EmptyLogError("Empty file")
    if len(file_bytes) > settings.max_upload_bytes:
        raise UploadTooLargeError(
            f"File is {len(file_bytes)} bytes; the limit is {settings.max_upload_bytes} bytes")

    t0 = time.time()
    text = _decode_file(file_bytes, filename)
    decode_ms = (time.time() - t0) * 1000
    return analyze_text(text, filename, decode_ms=decode_ms)


def analyze_text(text: str, label: str, decode_ms: float = 0) -> AnalyzeResponse:
    """Parse a whole log text and summarize it for the viewer."""
    request_id = uuid.uuid4().hex[:8]
    timings = PipelineTimings()
    timings.decode_ms = decode_ms

    logger.info(f"[{request_id}] Starting analysis for {label}")

    t0 = time.time()
    result = parse_log_text(text)
    timings.parse_ms = (time.time() - t0) * 1000

    num_lines = _count_lines(text)
    logger.info(
        f"[{request_id}] Parsed {len(result.entries)} entries from {num_lines} lines, "
        f"skipped {result.skipped}")

    t0 = time.time()
    view = build_facet_view(result.entries)
    timings.facet_ms = (time.time() - t0) * 1000

    timings.log_summary(request_id)

    return AnalyzeResponse(
        label=label,
        num_lines=num_lines,
        num_entries=len(result.entries),
        skipped=result.skipped,
        entries=[entry_to_schema(e) for e in result.entries],
        level_counts=level_counts(result.entries),
        source_counts=source_counts(result.entries),
        metadata_options=metadata_options(result.entries),
        columns=_columns_to_schema(view),
    )


def analyze_sample() -> AnalyzeResponse:
    """Analyze the bundled sample dataset."""
    return analyze_text(load_sample_text(), SAMPLE_LABEL)


def explore_text(request: ExploreRequest) -> ExploreResponse:
    """Apply filters, ordering and hotspot detection to a log text."""
    result = parse_log_text(request.text)
    log_filter = to_log_filter(request.filters)
    visible = filter_entries(result.entries, log_filter)

    requested = request.gap_threshold_seconds
    threshold = settings.clamp_gap_threshold(
        settings.gap_threshold_seconds if requested is None else requested)
    hotspots = find_hotspots(visible, threshold, limit=settings.hotspot_limit)
    view = build_facet_view(visible)

    logger.info(
        f"Explore {request.label}: {len(visible)}/{len(result.entries)} entries, "
        f"{len(hotspots)} hotspots at {threshold}s")

    return ExploreResponse(
        label=request.label,
        total_count=len(result.entries),
        displayed_count=len(visible),
        skipped=result.skipped,
        filtered=log_filter.is_active,
        entries=[entry_to_schema(e) for e in sort_entries(visible, request.sort_direction)],
        gap_threshold_seconds=threshold,
        hotspots=[
            HotspotOut(
                gap_ms=h.gap_ms,
                gap_label=format_duration(h.gap_ms),
                current=entry_to_schema(h.current),
                previous=entry_to_schema(h.previous) if h.previous else None,
            )
            for h in hotspots
        ],
        columns=_columns_to_schema(view),
        rows=view.rows,
    )


def query_text(request: QueryRequest) -> QueryResponse:
    """Run SQL against the (optionally filtered) tabular view of a log text."""
    result = parse_log_text(request.text)
    visible = filter_entries(result.entries, to_log_filter(request.filters))
    output = run_query(build_facet_view(visible), request.sql, row_limit=settings.query_row_limit)

    return QueryResponse(
        sql=request.sql.strip(),
        columns=output["columns"],
        rows=output["rows"],
        row_count=len(output["rows"]),
        truncated=output["truncated"],
    )


def load_sample_text(path: Optional[str] = None) -> str:
    sample_path = Path(path or settings.sample_log_path)
    return sample_path.read_text(encoding="utf-8")


def to_log_filter(spec: FilterSpec) -> LogFilter:
    return LogFilter(
        levels={level.strip().lower() for level in spec.levels if level.strip()},
        sources=set(spec.sources),
        metadata={key: list(values) for key, values in spec.metadata.items()},
        search=spec.search,
    )


def entry_to_schema(entry: LogEntry) -> LogEntryOut:
    return LogEntryOut(
        id=entry.id,
        raw=entry.raw,
        timestamp_raw=entry.timestamp_raw,
        timestamp=entry.timestamp.isoformat() if entry.timestamp else None,
        timestamp_ms=entry.timestamp_ms,
        level=entry.level,
        source_file=entry.source_file,
        source_line=entry.source_line,
        message=entry.message,
        metadata=dict(entry.metadata),
    )


def _columns_to_schema(view: FacetView) -> List[FacetColumnOut]:
    return [FacetColumnOut(**column.to_dict()) for column in view.columns]


def _count_lines(text: str) -> int:
    lines = LINE_BREAK_RE.split(text)
    if lines[-1] == "":
        lines.pop()
    return len(lines)


def _decode_file(file_bytes: bytes, filename: str) -> str:
    """Decode file bytes as UTF-8, tolerating a byte-order mark."""
    try:
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning(f"Could not decode {filename} as UTF-8: {e}")
        raise LogDecodeError(
            f"{filename} is not UTF-8 text (invalid byte at offset {e.start})") from e
