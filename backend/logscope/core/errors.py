"""
Error types raised outside the parsing core.
The parser itself never raises on malformed lines; these cover uploads and queries.
"""


class LogScopeError(Exception):
    """Base class for user-facing errors."""
    status_code: int = 400


class EmptyLogError(LogScopeError):
    """Uploaded file has no content."""


class LogDecodeError(LogScopeError):
    """Uploaded file is not UTF-8 text."""


class UploadTooLargeError(LogScopeError):
    """Uploaded file exceeds the configured size limit."""
    status_code = 413


class QueryError(LogScopeError):
    """SQL statement is empty or was rejected by the query engine."""
