"""
Ad-hoc SQL over the facet projection.
Each query loads the rows into a private in-memory SQLite database as table `logs`.
"""
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from logscope.core.errors import QueryError
from logscope.core.logging import get_logger
from logscope.services.log_pipeline.facets import FacetView

logger = get_logger(__name__)

TABLE_NAME = "logs"

SQLITE_INT_MIN = -(2 ** 63)
SQLITE_INT_MAX = 2 ** 63 - 1

DEFAULT_QUERY = f"""SELECT level, COUNT(*) AS count
FROM {TABLE_NAME}
GROUP BY level
ORDER BY count DESC"""

SAMPLE_QUERIES = [
    {"label": "Top log levels", "sql": DEFAULT_QUERY},
    {
        "label": "Busiest source files",
        "sql": f"""SELECT source_file, COUNT(*) AS hits
FROM {TABLE_NAME}
GROUP BY source_file
ORDER BY hits DESC""",
    },
    {
        "label": "Latest timestamps",
        "sql": f"""SELECT timestamp, level, message
FROM {TABLE_NAME}
WHERE timestamp_ms IS NOT NULL
ORDER BY timestamp_ms DESC
LIMIT 10""",
    },
]


@contextmanager
def get_memory_connection():
    """Context manager for a throwaway in-memory database."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _sql_value(value: Any) -> Any:
    """SQLite integers are 64-bit; wider ints are stored as REAL, or TEXT past float range."""
    if isinstance(value, int) and not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
        try:
            return float(value)
        except OverflowError:
            return str(value)
    return value


def load_view(conn: sqlite3.Connection, view: FacetView) -> None:
    """Create the `logs` table from the projection and fill it."""
    names = view.column_names
    columns_sql = ", ".join(_quote(name) for name in names)
    placeholders = ", ".join("?" for _ in names)

    conn.execute(f"CREATE TABLE {TABLE_NAME} ({columns_sql})")
    conn.executemany(
        f"INSERT INTO {TABLE_NAME} ({columns_sql}) VALUES ({placeholders})",
        ([_sql_value(row.get(name)) for name in names] for row in view.rows),
    )
    conn.commit()


def run_query(view: FacetView, sql: str, row_limit: Optional[int] = None) -> Dict[str, Any]:
    """
    Execute a single read-only statement against the projection.

    Returns {"columns": [...], "rows": [...], "truncated": bool}.
    Raises QueryError for empty statements or anything SQLite rejects.
    """
    statement = sql.strip().rstrip(";").strip()
    if not statement:
        raise QueryError(f"Enter a SQL statement that reads from the `{TABLE_NAME}` table.")

    with get_memory_connection() as conn:
        load_view(conn, view)
        conn.execute("PRAGMA query_only = ON")
        try:
            cursor = conn.execute(statement)
            columns = [d[0] for d in cursor.description] if cursor.description else []
            fetched = cursor.fetchmany(row_limit + 1) if row_limit else cursor.fetchall()
        except (sqlite3.Error, sqlite3.Warning) as e:
            logger.info(f"Rejected query: {e}")
            raise QueryError(str(e)) from e

    truncated = bool(row_limit) and len(fetched) > row_limit
    if truncated:
        fetched = fetched[:row_limit]

    rows: List[Dict[str, Any]] = [dict(zip(columns, tuple(r))) for r in fetched]
    return {"columns": columns, "rows": rows, "truncated": truncated}
