"""Shared test helpers for extratable.

Provides a tiny pipe-table reader and a plain-text renderer so diff
outcomes can be written the way they read in a report.
"""

from __future__ import annotations

import textwrap

import pytest

from extratable.table import Table
from extratable.types import Cell, CellStatus, Row

ROW_PREFIXES = {
    CellStatus.UNCHANGED: "  ",
    CellStatus.INSERTED: "+ ",
    CellStatus.REMOVED: "- ",
}


def parse_table(text: str) -> Table:
    """Build a Table from ``| a | b |`` lines, recording 1-based line numbers."""
    raw: list[list[str]] = []
    lines: list[int] = []
    for number, line in enumerate(textwrap.dedent(text).splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        raw.append([cell.strip() for cell in line.strip("|").split("|")])
        lines.append(number)
    return Table(raw, lines)


class PlainRenderer:
    """TableVisitor drawing a table as text with -/+ row markers."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self._cells: list[str] = []

    def visit_table(self, table: Table) -> None:
        self.lines = []

    def visit_row(self, row: Row) -> None:
        self._cells = []

    def visit_cell(self, cell: Cell, width: int) -> None:
        value = "" if cell.value is None else str(cell.value)
        self._cells.append(value.ljust(width))

    def end_row(self, row: Row) -> None:
        self.lines.append(f"{ROW_PREFIXES[row.status]}| {' | '.join(self._cells)} |")

    def end_table(self, table: Table) -> None:
        pass


def pretty(table: Table) -> list[str]:
    """Render a table, one string per row."""
    renderer = PlainRenderer()
    table.accept(renderer)
    return renderer.lines


@pytest.fixture
def table() -> Table:
    """A three-column table with a single data row."""
    return Table(
        [
            ["one", "four", "seven"],
            ["4444", "55555", "666666"],
        ]
    )
