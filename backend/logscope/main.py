from contextlib import asynccontextmanager
from fastapi import FastAPI
from logscope.api.routes import router
from logscope.core.config import settings
from logscope.core.cors import setup_cors
from logscope.core.logging import setup_logging, get_logger

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    # Startup
    logger.info("Starting LogScope API...")
    logger.info(f"Sample dataset: {settings.sample_log_path}")

    yield

    # Shutdown
    logger.info("Shutting down LogScope API...")


# Create FastAPI app
app = FastAPI(
    title="LogScope API",
    description="Structured log viewer: parse, facet, filter and query log files",
    version="1.0.0",
    lifespan=lifespan
)

# Setup CORS
setup_cors(app)

# Include API routes
app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "LogScope API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health"
    }
