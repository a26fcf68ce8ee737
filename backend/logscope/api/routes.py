from fastapi import APIRouter, UploadFile, File, HTTPException
from typing import List
from logscope.core.errors import LogScopeError
from logscope.models.schemas import (
    AnalyzeResponse, ExploreRequest, ExploreResponse, QueryRequest,
    QueryResponse, SampleQuery, HealthResponse, ErrorResponse
)
from logscope.services.orchestrator import (
    analyze_log_file, analyze_sample, explore_text, query_text
)
from logscope.services.query import SAMPLE_QUERIES
from logscope.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file"},
        413: {"model": ErrorResponse, "description": "File too large"},
        500: {"model": ErrorResponse, "description": "Processing error"}
    }
)
async def analyze_logs(file: UploadFile = File(...)):
    """
    Upload and parse a log file.

    Accepts multipart file upload and returns every parsed entry, the number
    of skipped lines and the facet counts for the filter panel.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    try:
        file_bytes = await file.read()

        logger.info(
            f"Received file: {file.filename}, size: {len(file_bytes)} bytes")

        return analyze_log_file(file_bytes, file.filename)

    except LogScopeError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Analysis failed: {str(e)}")


@router.get(
    "/sample",
    response_model=AnalyzeResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Sample unavailable"}
    }
)
async def get_sample():
    """Parse the bundled sample log."""
    try:
        return analyze_sample()
    except Exception as e:
        logger.error(f"Failed to load sample: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to load sample: {str(e)}")


@router.post(
    "/explore",
    response_model=ExploreResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Processing error"}
    }
)
async def explore_logs(request: ExploreRequest):
    """
    Filter, sort and look for hotspots in a log text.

    Returns the visible entries, the largest time gaps between them and the
    tabular projection used by the query console.
    """
    try:
        return explore_text(request)
    except Exception as e:
        logger.error(f"Explore failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Explore failed: {str(e)}")


@router.post(
    "/query",
    response_model=QueryResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid SQL"},
        500: {"model": ErrorResponse, "description": "Processing error"}
    }
)
async def run_log_query(request: QueryRequest):
    """Run a SQL statement against the `logs` table built from the text."""
    try:
        return query_text(request)
    except LogScopeError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Query failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Query failed: {str(e)}")


@router.get("/queries", response_model=List[SampleQuery])
async def list_sample_queries():
    """Canned queries for the console."""
    return [SampleQuery(**q) for q in SAMPLE_QUERIES]


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()
