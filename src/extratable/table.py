"""Table data model for extratable.

A Table is an ordered list of equally wide rows. The first row is the
header row for the header-keyed operations (hashes, map_column,
map_headers); every other operation treats it like any other row.

Only map_column() and diff() change a table in place. All other
transformations build a new Table and leave the receiver's cells alone.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from extratable.exceptions import StructureError
from extratable.types import UNKNOWN_LINE, Cell, Column, Row

if TYPE_CHECKING:
    from extratable.diff import DiffOptions, DiffSummary, TableLike
    from extratable.serializer import SymbolicTree, TableVisitor

logger = logging.getLogger(__name__)

Conversion = Callable[[Any], Any]
HeaderKey = str | re.Pattern[str]

_NON_WORD = re.compile(r"\W+")


def header_symbol(header: str | None) -> str:
    """Convert a header to its symbolic (identifier-like) form.

    Examples:
        "one" -> one, "First Name" -> first_name, "Qty (kg)" -> qty_kg
    """
    if header is None:
        return ""
    return _NON_WORD.sub("_", str(header).strip()).strip("_").lower()


class RowHash(dict[Any, Any]):
    """A row of a table keyed by header.

    Besides the header itself, a key can be given in its symbolic form,
    so ``row["first_name"]`` finds the value under "First Name". Symbolic
    forms are lower-cased, which makes that fallback case-insensitive:
    ``row["one"]`` also finds "One". ``get`` and ``in`` resolve keys the
    same way.
    """

    def __missing__(self, key: Any) -> Any:
        header = self._symbolic_header(key)
        if header is None:
            raise KeyError(key)
        return dict.__getitem__(self, header)

    def __contains__(self, key: object) -> bool:
        return dict.__contains__(self, key) or self._symbolic_header(key) is not None

    def get(self, key: Any, default: Any = None) -> Any:
        if dict.__contains__(self, key):
            return dict.__getitem__(self, key)
        header = self._symbolic_header(key)
        if header is None:
            return default
        return dict.__getitem__(self, header)

    def _symbolic_header(self, key: object) -> Any:
        if not isinstance(key, str):
            return None
        for header in self.keys():
            if header_symbol(header) == key:
                return header
        return None


class Table:
    """An ordered collection of rows with identity-sharing column views.

    Args:
        raw: Rectangular matrix of cell values (None for a blank cell)
        lines: Optional source line number for each row

    Raises:
        StructureError: If the rows are not all the same length
    """

    def __init__(
        self,
        raw: Sequence[Sequence[str | None]],
        lines: Sequence[int] | None = None,
    ) -> None:
        matrix = [list(values) for values in raw]
        if len({len(values) for values in matrix}) > 1:
            raise StructureError("Table rows must all have the same number of cells")
        if lines is not None and len(lines) != len(matrix):
            raise StructureError(
                f"Expected {len(matrix)} line numbers, got {len(lines)}"
            )

        self._rows: list[Row] = [
            Row(
                [Cell(value) for value in values],
                lines[index] if lines is not None else UNKNOWN_LINE,
            )
            for index, values in enumerate(matrix)
        ]
        self._conversions: dict[str | None, Conversion] = {}

    # --- Views ---

    def cells_rows(self) -> list[Row]:
        """Row-major view of the table."""
        return list(self._rows)

    def columns(self) -> list[Column]:
        """Column-major view of the table.

        Each Column holds the very Cell objects found in the rows, so the
        cell at (col, row) here is the cell at (row, col) in cells_rows().
        """
        return [
            Column([row.cells[index] for row in self._rows])
            for index in range(self.width)
        ]

    @property
    def width(self) -> int:
        """Number of columns."""
        return len(self._rows[0]) if self._rows else 0

    @property
    def line(self) -> int:
        """Source line of the first row."""
        return self._rows[0].line if self._rows else UNKNOWN_LINE

    def raw(self) -> list[list[str | None]]:
        """Cell values of every row, header included."""
        return [row.values() for row in self._rows]

    def headers(self) -> list[str | None]:
        """Values of the header row."""
        return self._rows[0].values() if self._rows else []

    def rows(self) -> list[list[str | None]]:
        """Cell values of every row after the header."""
        return [row.values() for row in self._rows[1:]]

    # --- Hash views ---

    def hashes(self) -> list[RowHash]:
        """Convert the data rows to mappings keyed by header.

        Conversions registered with map_column() are applied to the values.

        Example:
            | a | b |
            | 1 | 2 |   -> [{"a": "1", "b": "2"}]
        """
        headers = self.headers()
        return [
            RowHash(
                (header, self._convert(header, value))
                for header, value in zip(headers, row.values(), strict=True)
            )
            for row in self._rows[1:]
        ]

    def rows_hash(self) -> dict[str | None, str | None]:
        """Map the first column to the second, across all rows.

        Raises:
            StructureError: If the table does not have exactly 2 columns
        """
        self.verify_table_width(2)
        return {row.cells[0].value: row.cells[1].value for row in self._rows}

    def verify_table_width(self, width: int) -> None:
        """Fail unless every row has exactly ``width`` cells."""
        if not self._rows or any(len(row) != width for row in self._rows):
            raise StructureError(f"The table must have exactly {width} columns")

    # --- In-place operations ---

    def map_column(
        self, name: str, conversion: Conversion, strict: bool = True
    ) -> None:
        """Register a conversion applied to a column's values in hashes().

        Args:
            name: Header of the column to convert
            conversion: Function applied to each raw value
            strict: Fail when the column does not exist

        Raises:
            StructureError: If strict and no header is named ``name``
        """
        if name not in self.headers():
            if strict:
                raise StructureError(f'The column named "{name}" does not exist')
            logger.debug("Column %r does not exist, conversion skipped", name)
            return
        self._conversions[name] = conversion

    def diff(
        self,
        other: TableLike,
        *,
        raise_on_mismatch: bool = True,
        coldiff: bool = False,
        options: DiffOptions | None = None,
    ) -> DiffSummary:
        """Annotate this (expected) table with its differences from ``other``.

        ``other`` may be another Table, a list of mappings keyed by header,
        or a raw matrix of values. Rows and cells of this table are tagged
        unchanged/inserted/removed in place. Neither table may be mutated
        concurrently while the diff runs; that is the caller's concern.

        Raises:
            TableMismatch: If differences exist and raise_on_mismatch is set
        """
        from extratable.diff import DiffOptions, diff_tables

        if options is None:
            options = DiffOptions(raise_on_mismatch=raise_on_mismatch, coldiff=coldiff)
        return diff_tables(self, other, options)

    # --- Transformations returning a new table ---

    def transpose(self) -> Table:
        """Return a new table whose rows are this table's columns."""
        return Table([column.values() for column in self.columns()])

    def map_headers(self, renames: Mapping[HeaderKey, str]) -> Table:
        """Return a new table with header cells renamed.

        Keys are either header strings or compiled patterns that must
        match a whole header. Registered conversions follow the rename.
        """
        table = self._copy()
        if table._rows:
            for cell in table._rows[0]:
                cell.value = _renamed(cell.value, renames)
        table._conversions = {
            _renamed(header, renames): conversion
            for header, conversion in self._conversions.items()
        }
        return table

    def arguments_replaced(self, substitutions: Mapping[str, str | None]) -> Table:
        """Return a new table with placeholders substituted.

        A cell equal to a placeholder takes the replacement as its whole
        value (which may be None). A cell that merely contains a placeholder
        has each occurrence replaced; a None replacement blanks that cell.
        """
        table = self._copy()
        for row in table._rows:
            for cell in row:
                cell.value = _replace_arguments(cell.value, substitutions)
        return table

    # --- Queries ---

    def has_text(self, text: str) -> bool:
        """Check whether any cell contains ``text``."""
        return any(
            isinstance(cell.value, str) and text in cell.value
            for row in self._rows
            for cell in row
        )

    # --- Rendering contract ---

    def accept(self, visitor: TableVisitor) -> None:
        """Walk rows and cells in order, passing each cell's column width."""
        widths = [column.width for column in self.columns()]
        visitor.visit_table(self)
        for row in self._rows:
            visitor.visit_row(row)
            for cell, width in zip(row, widths, strict=True):
                visitor.visit_cell(cell, width)
            visitor.end_row(row)
        visitor.end_table(self)

    def to_symbolic_tree(self) -> SymbolicTree:
        """Serialize the (possibly annotated) table to nested tuples."""
        from extratable.serializer import to_symbolic_tree

        return to_symbolic_tree(self)

    # --- Internals ---

    def _replace_rows(self, rows: list[Row]) -> None:
        """Swap in the annotated rows produced by a diff."""
        self._rows = rows

    def _copy(self) -> Table:
        table = Table(self.raw(), [row.line for row in self._rows])
        table._conversions = dict(self._conversions)
        return table

    def _convert(self, header: str | None, value: Any) -> Any:
        conversion = self._conversions.get(header)
        if conversion is None:
            return value
        return conversion(value)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"Table({self.raw()!r})"


def _renamed(header: str | None, renames: Mapping[HeaderKey, str]) -> str | None:
    for key, new_name in renames.items():
        if isinstance(key, re.Pattern):
            if header is not None and key.fullmatch(header):
                return new_name
        elif key == header:
            return new_name
    return header


def _replace_arguments(
    value: str | None, substitutions: Mapping[str, str | None]
) -> str | None:
    if not isinstance(value, str):
        return value
    if value in substitutions:
        return substitutions[value]
    for name, replacement in substitutions.items():
        if name in value:
            if replacement is None:
                return None
            value = value.replace(name, replacement)
    return value
