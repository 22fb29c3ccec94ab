"""Symbolic tree serialization of annotated tables.

The symbolic tree is the canonical, comparable form of a table after a
diff. Renderers that draw tables implement the same TableVisitor contract.

Example:
    ("table",
        ("row", -1, ("cell", "a"), ("cell", "b")),
        ("row", -1, ("plus_cell", "e"), ("plus_cell", "f")))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from extratable.types import Cell, CellStatus, Row

if TYPE_CHECKING:
    from extratable.table import Table

SymbolicTree = tuple[Any, ...]

CELL_TAGS = {
    CellStatus.UNCHANGED: "cell",
    CellStatus.INSERTED: "plus_cell",
    CellStatus.REMOVED: "minus_cell",
}


class TableVisitor(Protocol):
    """Callbacks invoked by Table.accept() in row and cell order."""

    def visit_table(self, table: Table) -> None: ...

    def visit_row(self, row: Row) -> None: ...

    def visit_cell(self, cell: Cell, width: int) -> None: ...

    def end_row(self, row: Row) -> None: ...

    def end_table(self, table: Table) -> None: ...


class SymbolicTreeBuilder:
    """TableVisitor that collects the symbolic tree of a table."""

    def __init__(self) -> None:
        self._rows: list[SymbolicTree] = []
        self._cells: list[SymbolicTree] = []
        self.tree: SymbolicTree | None = None

    def visit_table(self, table: Table) -> None:
        self._rows = []
        self.tree = None

    def visit_row(self, row: Row) -> None:
        self._cells = []

    def visit_cell(self, cell: Cell, width: int) -> None:
        self._cells.append((CELL_TAGS[cell.status], cell.value))

    def end_row(self, row: Row) -> None:
        self._rows.append(("row", row.line, *self._cells))

    def end_table(self, table: Table) -> None:
        self.tree = ("table", *self._rows)


def to_symbolic_tree(table: Table) -> SymbolicTree:
    """Serialize a table, with per-cell diff status, to nested tuples."""
    builder = SymbolicTreeBuilder()
    table.accept(builder)
    assert builder.tree is not None
    return builder.tree
