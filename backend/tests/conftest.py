import pytest
from fastapi.testclient import TestClient

from logscope.core.config import settings
from logscope.main import app
from logscope.services.orchestrator import load_sample_text


EXAMPLE_LINE = (
    "2024-04-12T05:41:11.337Z [info] [agents/tools.py:71] "
    "tool_call status=ok latency_ms=212"
)


def make_line(
    message: str = "hello",
    ts: str = "2024-04-12T05:41:00.000Z",
    level: str = "info",
    source: str = "app.py:1",
) -> str:
    """Build a well-formed log line."""
    line = f"{ts} [{level}] [{source}]"
    return f"{line} {message}" if message else line


@pytest.fixture
def example_line():
    return EXAMPLE_LINE


@pytest.fixture
def mixed_text():
    """Four entries (one with an invalid date), one garbage line and blank lines."""
    return "\n".join([
        make_line("started  port=8080", ts="2024-04-12T05:41:00.000Z", source="api/app.py:1"),
        "",
        make_line("query failed  table=users code=500", ts="2024-04-12T05:41:10.000Z",
                  level="ERROR", source="api/db.py:9"),
        "not a log line at all",
        make_line("slow query  table=orders", ts="2024-04-12T05:41:05.000Z",
                  level="warn", source="api/db.py:12"),
        "   ",
        make_line("clock skew", ts="2024-99-99T00:00:00.000Z", source=":3"),
    ])


@pytest.fixture
def sample_text():
    return load_sample_text(settings.sample_log_path)


@pytest.fixture
def client():
    """Create test client"""
    with TestClient(app) as test_client:
        yield test_client
