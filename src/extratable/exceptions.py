"""Custom exceptions for extratable table operations and diffing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from extratable.diff import DiffSummary
    from extratable.table import Table


class TableError(Exception):
    """Base exception for table-related errors."""

    pass


class StructureError(TableError):
    """Raised when a structural precondition of a table is violated.

    Examples are a wrong column count for rows_hash() or an unknown
    column name passed to map_column() in strict mode.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TableMismatch(TableError):
    """Raised by a diff when the expected and actual tables differ.

    The expected table has already been annotated in place when this is
    raised, so callers can render ``table`` to show the differences.
    """

    def __init__(self, table: Table, summary: DiffSummary) -> None:
        self.table = table
        self.summary = summary
        super().__init__(f"Tables were not identical: {summary.describe()}")
