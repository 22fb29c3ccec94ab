"""Data types for extratable tables and diffs.

Defines the cell status enum, the Cell/Row/Column containers and the
AlignedPair used by the alignment routines.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

UNKNOWN_LINE = -1

# --- Enums ---


class CellStatus(Enum):
    """Diff annotation carried by every cell."""

    UNCHANGED = "unchanged"
    INSERTED = "inserted"
    REMOVED = "removed"


# --- Table containers ---


class Cell:
    """A single table value with its own diff status.

    Cells are identity objects: the same instance is reachable from a
    table's rows and from its columns, so a status change made through
    one view shows up in the other.
    """

    __slots__ = ("status", "value")

    def __init__(
        self, value: str | None, status: CellStatus = CellStatus.UNCHANGED
    ) -> None:
        self.value = value
        self.status = status

    @property
    def width(self) -> int:
        """Printable length of the value (0 for a blank cell)."""
        if self.value is None:
            return 0
        return len(str(self.value))

    def __repr__(self) -> str:
        return f"Cell({self.value!r}, {self.status.value})"


class Row:
    """An ordered group of cells representing one record.

    Attributes:
        cells: The cells of this row, in column order
        line: Source line of the row, or UNKNOWN_LINE
    """

    def __init__(self, cells: list[Cell], line: int = UNKNOWN_LINE) -> None:
        self.cells = cells
        self.line = line

    @property
    def status(self) -> CellStatus:
        """Status shared by every cell; UNCHANGED when cells disagree."""
        statuses = {cell.status for cell in self.cells}
        if len(statuses) == 1:
            return statuses.pop()
        return CellStatus.UNCHANGED

    def values(self) -> list[str | None]:
        return [cell.value for cell in self.cells]

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def __repr__(self) -> str:
        return f"Row({self.values()!r}, line={self.line})"


class Column:
    """Column-major view over cells owned by a table's rows."""

    def __init__(self, cells: list[Cell]) -> None:
        self.cells = cells

    @property
    def width(self) -> int:
        """Widest printable value in the column."""
        return max((cell.width for cell in self.cells), default=0)

    def values(self) -> list[str | None]:
        return [cell.value for cell in self.cells]

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]


# --- Alignment ---


@dataclass(frozen=True)
class AlignedPair:
    """A pair of aligned indices from the expected and actual sequences.

    - (i, None) means expected[i] was removed
    - (None, j) means actual[j] was inserted
    - (i, j) means expected[i] matches actual[j]
    """

    expected_idx: int | None
    actual_idx: int | None

    @property
    def is_match(self) -> bool:
        return self.expected_idx is not None and self.actual_idx is not None
