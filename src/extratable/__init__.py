"""extratable - Table data model and table diffing.

Compares an expected table against actual data and annotates the expected
table with inserted/removed rows and cells, ready for rendering.
"""

__version__ = "0.1.0"

from extratable.diff import DiffOptions, DiffSummary, TableAligner, diff_tables
from extratable.exceptions import StructureError, TableError, TableMismatch
from extratable.sequence import align_sequences
from extratable.serializer import SymbolicTreeBuilder, TableVisitor, to_symbolic_tree
from extratable.table import RowHash, Table, header_symbol
from extratable.types import (
    UNKNOWN_LINE,
    AlignedPair,
    Cell,
    CellStatus,
    Column,
    Row,
)

__all__ = [
    "UNKNOWN_LINE",
    "AlignedPair",
    "Cell",
    "CellStatus",
    "Column",
    "DiffOptions",
    "DiffSummary",
    "Row",
    "RowHash",
    "StructureError",
    "SymbolicTreeBuilder",
    "Table",
    "TableAligner",
    "TableError",
    "TableMismatch",
    "TableVisitor",
    "__version__",
    "align_sequences",
    "diff_tables",
    "header_symbol",
    "to_symbolic_tree",
]
