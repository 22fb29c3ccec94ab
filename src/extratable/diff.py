"""Core diff engine for extratable.

Reconciles an expected table with actual data and annotates the expected
table in place:

1. Column reconciliation builds a column plan, positionally or (with
   coldiff) by header name.
2. Row reconciliation aligns the rows projected through that plan along
   their longest common subsequence.
3. Annotation rebuilds the expected table's rows, reusing its cells for
   matched and removed rows and creating cells for inserted data.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from extratable.exceptions import TableMismatch
from extratable.sequence import align_sequences
from extratable.table import Table
from extratable.types import UNKNOWN_LINE, AlignedPair, Cell, CellStatus, Row

logger = logging.getLogger(__name__)

TableLike = Table | Sequence[Mapping[str, Any]] | Sequence[Sequence[Any]]


class _AnyValue:
    """Placeholder that matches every value during row alignment."""

    def __repr__(self) -> str:
        return "<any>"


ANY_VALUE = _AnyValue()
_ABSENT = object()  # matches nothing


@dataclass(frozen=True)
class DiffOptions:
    """Options controlling a table diff.

    Attributes:
        raise_on_mismatch: Raise TableMismatch when differences are found
        coldiff: Reconcile columns by header instead of by position
    """

    raise_on_mismatch: bool = True
    coldiff: bool = False


@dataclass
class DiffSummary:
    """Counts of the differences recorded on an annotated table."""

    removed_rows: int = 0
    inserted_rows: int = 0
    removed_columns: int = 0
    inserted_columns: int = 0
    changed_cells: int = 0

    def has_changes(self) -> bool:
        """Check if any row or cell was inserted or removed."""
        return bool(
            self.removed_rows
            or self.inserted_rows
            or self.removed_columns
            or self.inserted_columns
            or self.changed_cells
        )

    def describe(self) -> str:
        """Human-readable one-line summary."""
        if not self.has_changes():
            return "no differences"
        parts = []
        for count, noun, verb in [
            (self.removed_rows, "row", "removed"),
            (self.inserted_rows, "row", "inserted"),
            (self.removed_columns, "column", "removed"),
            (self.inserted_columns, "column", "inserted"),
        ]:
            if count:
                parts.append(f"{count} {noun}{'' if count == 1 else 's'} {verb}")
        if self.changed_cells:
            suffix = "" if self.changed_cells == 1 else "s"
            parts.append(f"{self.changed_cells} cell{suffix} changed")
        return ", ".join(parts)


def _keys_match(expected: tuple[Any, ...], actual: tuple[Any, ...]) -> bool:
    return all(
        e is ANY_VALUE or a is ANY_VALUE or e == a
        for e, a in zip(expected, actual, strict=True)
    )


def _stringify(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class TableAligner:
    """Aligns an expected table with actual data and annotates it.

    Both tables must not be mutated by anyone else while a diff runs;
    the aligner reads and rewrites their cells without locking.
    """

    def __init__(self, options: DiffOptions | None = None) -> None:
        self.options = options or DiffOptions()

    def apply(self, expected: Table, actual: TableLike) -> DiffSummary:
        """Annotate ``expected`` in place and summarize the differences."""
        other = self.normalize(expected, actual)
        plan = self.reconcile_columns(expected, other)
        alignment = self.reconcile_rows(expected, other, plan)
        rows, summary = self.annotate(expected, other, plan, alignment)
        expected._replace_rows(rows)
        logger.debug("Table diff: %s", summary.describe())
        return summary

    def normalize(self, expected: Table, actual: TableLike) -> Table:
        """Turn any supported actual input into a Table.

        A list of mappings is laid out using the expected header order,
        followed by keys the expected table does not know, with a header
        row in front. A raw matrix is used as is.
        """
        if isinstance(actual, Table):
            return actual

        entries = list(actual)
        if entries and all(isinstance(entry, Mapping) for entry in entries):
            headers: list[Any] = list(expected.headers())
            for entry in entries:
                for key in entry:
                    if key not in headers:
                        headers.append(key)
            matrix = [[_stringify(header) for header in headers]]
            matrix.extend(
                [_stringify(entry.get(header)) for header in headers]
                for entry in entries
            )
            return Table(matrix)

        return Table([[_stringify(value) for value in entry] for entry in entries])

    def reconcile_columns(self, expected: Table, actual: Table) -> list[AlignedPair]:
        """Build the column plan for the annotated table.

        Without coldiff, columns pair up by position. With coldiff,
        headers are aligned by LCS, leftover expected headers are paired
        by name with unclaimed actual headers, and actual-only columns
        are appended in their original order.
        """
        if not self.options.coldiff:
            return [
                AlignedPair(
                    index if index < expected.width else None,
                    index if index < actual.width else None,
                )
                for index in range(max(expected.width, actual.width))
            ]

        expected_headers = expected.headers()
        actual_headers = actual.headers()

        partners: dict[int, int] = {}
        for pair in align_sequences(expected_headers, actual_headers):
            if pair.is_match:
                assert pair.expected_idx is not None and pair.actual_idx is not None
                partners[pair.expected_idx] = pair.actual_idx
        claimed = set(partners.values())

        for i, header in enumerate(expected_headers):
            if i in partners:
                continue
            for j, other in enumerate(actual_headers):
                if j not in claimed and other == header:
                    partners[i] = j
                    claimed.add(j)
                    break

        plan = [AlignedPair(i, partners.get(i)) for i in range(len(expected_headers))]
        plan.extend(
            AlignedPair(None, j) for j in range(len(actual_headers)) if j not in claimed
        )
        logger.debug(
            "Column plan for %s against %s: %s", expected_headers, actual_headers, plan
        )
        return plan

    def reconcile_rows(
        self, expected: Table, actual: Table, plan: list[AlignedPair]
    ) -> list[AlignedPair]:
        """Align rows of both tables as value tuples laid out by ``plan``."""
        expected_keys = [
            tuple(
                row.cells[pair.expected_idx].value
                if pair.expected_idx is not None
                else ANY_VALUE
                for pair in plan
            )
            for row in expected.cells_rows()
        ]
        # An expected-only column is ignored under coldiff and is an
        # outright mismatch otherwise.
        missing = ANY_VALUE if self.options.coldiff else _ABSENT
        actual_keys = [
            tuple(
                row.cells[pair.actual_idx].value
                if pair.actual_idx is not None
                else missing
                for pair in plan
            )
            for row in actual.cells_rows()
        ]
        return align_sequences(expected_keys, actual_keys, _keys_match)

    def annotate(
        self,
        expected: Table,
        actual: Table,
        plan: list[AlignedPair],
        alignment: list[AlignedPair],
    ) -> tuple[list[Row], DiffSummary]:
        """Build the annotated rows in alignment order."""
        expected_rows = expected.cells_rows()
        actual_rows = actual.cells_rows()
        summary = DiffSummary(
            removed_columns=sum(
                1 for pair in plan if pair.actual_idx is None and self.options.coldiff
            ),
            inserted_columns=sum(1 for pair in plan if pair.expected_idx is None),
        )

        rows: list[Row] = []
        for step in alignment:
            if step.is_match:
                assert step.expected_idx is not None and step.actual_idx is not None
                rows.append(
                    self._matched_row(
                        expected_rows[step.expected_idx],
                        actual_rows[step.actual_idx],
                        plan,
                    )
                )
            elif step.expected_idx is not None:
                rows.append(self._removed_row(expected_rows[step.expected_idx], plan))
                summary.removed_rows += 1
            elif step.actual_idx is not None:
                rows.append(self._inserted_row(actual_rows[step.actual_idx], plan))
                summary.inserted_rows += 1

        summary.changed_cells = sum(
            1 for row in rows for cell in row if cell.status is not CellStatus.UNCHANGED
        )
        return rows, summary

    def _matched_row(self, expected: Row, actual: Row, plan: list[AlignedPair]) -> Row:
        cells: list[Cell] = []
        for pair in plan:
            if pair.expected_idx is None:
                assert pair.actual_idx is not None
                cells.append(Cell(actual.cells[pair.actual_idx].value, CellStatus.INSERTED))
                continue
            cell = expected.cells[pair.expected_idx]
            cell.status = (
                CellStatus.REMOVED if pair.actual_idx is None else CellStatus.UNCHANGED
            )
            cells.append(cell)
        return Row(cells, expected.line)

    def _removed_row(self, expected: Row, plan: list[AlignedPair]) -> Row:
        cells: list[Cell] = []
        for pair in plan:
            if pair.expected_idx is None:
                cells.append(Cell(None, CellStatus.REMOVED))
                continue
            cell = expected.cells[pair.expected_idx]
            cell.status = CellStatus.REMOVED
            cells.append(cell)
        return Row(cells, expected.line)

    def _inserted_row(self, actual: Row, plan: list[AlignedPair]) -> Row:
        cells = [
            Cell(
                actual.cells[pair.actual_idx].value
                if pair.actual_idx is not None
                else None,
                CellStatus.INSERTED,
            )
            for pair in plan
        ]
        return Row(cells, UNKNOWN_LINE)


def diff_tables(
    expected: Table, actual: TableLike, options: DiffOptions | None = None
) -> DiffSummary:
    """Diff ``expected`` against ``actual``, annotating ``expected`` in place.

    Args:
        expected: The table to annotate
        actual: A Table, a list of mappings keyed by header, or a raw matrix
        options: Diff options; defaults raise on mismatch without coldiff

    Returns:
        Summary of the recorded differences

    Raises:
        TableMismatch: If differences exist and options.raise_on_mismatch
    """
    options = options or DiffOptions()
    summary = TableAligner(options).apply(expected, actual)
    if options.raise_on_mismatch and summary.has_changes():
        raise TableMismatch(expected, summary)
    return summary
