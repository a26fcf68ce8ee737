from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any, Literal
from datetime import datetime, timezone


# ============================================================================
# Log Entry Models
# ============================================================================

class LogEntryOut(BaseModel):
    """A single parsed log line."""
    id: str
    raw: str
    timestamp_raw: str
    timestamp: Optional[str] = None
    timestamp_ms: Optional[int] = None
    level: str
    source_file: str
    source_line: Optional[int] = None
    message: str
    metadata: Dict[str, str] = Field(default_factory=dict)


class FacetColumnOut(BaseModel):
    """A column of the tabular projection."""
    name: str
    label: str
    source: Literal["core", "metadata"]
    original_key: Optional[str] = None
    description: Optional[str] = None


# ============================================================================
# Filter Models
# ============================================================================

class FilterSpec(BaseModel):
    """Active filters; empty lists mean no constraint."""
    levels: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    metadata: Dict[str, List[str]] = Field(default_factory=dict)
    search: str = ""


class HotspotOut(BaseModel):
    """A pair of chronologically adjacent entries with a large gap."""
    gap_ms: int
    gap_label: str
    current: LogEntryOut
    previous: Optional[LogEntryOut] = None


# ============================================================================
# API Request Models
# ============================================================================

class ExploreRequest(BaseModel):
    """Filter, sort and inspect a log text."""
    text: str
    label: str = "pasted text"
    filters: FilterSpec = Field(default_factory=FilterSpec)
    sort_direction: Literal["asc", "desc"] = "desc"
    gap_threshold_seconds: Optional[float] = None


class QueryRequest(BaseModel):
    """Run SQL over the tabular projection of a log text."""
    text: str
    sql: str
    filters: FilterSpec = Field(default_factory=FilterSpec)


# ============================================================================
# API Response Models
# ============================================================================

class AnalyzeResponse(BaseModel):
    """Response from POST /api/analyze."""
    label: str
    num_lines: int
    num_entries: int
    skipped: int
    entries: List[LogEntryOut]
    level_counts: Dict[str, int] = Field(default_factory=dict)
    source_counts: Dict[str, int] = Field(default_factory=dict)
    metadata_options: Dict[str, List[str]] = Field(default_factory=dict)
    columns: List[FacetColumnOut] = Field(default_factory=list)


class ExploreResponse(BaseModel):
    """Response from POST /api/explore."""
    label: str
    total_count: int
    displayed_count: int
    skipped: int
    filtered: bool
    entries: List[LogEntryOut]
    gap_threshold_seconds: float
    hotspots: List[HotspotOut] = Field(default_factory=list)
    columns: List[FacetColumnOut] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class QueryResponse(BaseModel):
    """Response from POST /api/query."""
    sql: str
    columns: List[str]
    rows: List[Dict[str, Any]]
    row_count: int
    truncated: bool = False


class SampleQuery(BaseModel):
    """A canned query offered by the console."""
    label: str
    sql: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
    request_id: Optional[str] = None
