"""Exception hierarchy. Every error here aborts the current run.

A missing authored description is not an error: the composer emits a
placeholder and records it in the missing documentation report.
"""

from __future__ import annotations


class CimRdfsError(Exception):
    """Base exception for cimrdfs errors."""


class IngestionError(CimRdfsError):
    """An instance source could not be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot ingest '{path}': {reason}")
        self.path = path


class QueryError(CimRdfsError):
    """The store failed to answer a query."""


class DescriptionSourceError(CimRdfsError):
    """The authored description source is malformed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"{message}{where}")
        self.line = line


class OutputWriteError(CimRdfsError):
    """The generated document could not be written."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot write '{path}': {reason}")
        self.path = path


class SelectionError(CimRdfsError):
    """The requested input selection does not name any source."""
