from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Hashable, Iterator, List, Optional, Sequence, Tuple

from .styles import HeaderStyle


# ---- Placement ----

@dataclass(frozen=True)
class Anchor:
    """1-based (row, col) position of a table's top-left cell."""
    row: int
    col: int


@dataclass(frozen=True)
class CellCoord:
    row: int
    col: int


Edge = str   # "top" | "bottom" | "left" | "right"
BorderInstruction = Tuple[CellCoord, FrozenSet[Edge]]


# ---- Borders ----

class BorderMode(Enum):
    NONE = "none"
    SURROUNDING = "surrounding"
    ROWS = "rows"
    COLUMNS = "columns"
    ALL = "all"


@dataclass(frozen=True)
class BorderSpec:
    mode: BorderMode = BorderMode.NONE
    colour: str = "000000"          # RRGGBB
    style: str = "thin"             # openpyxl border line style


# ---- Normalized grid ----

@dataclass
class NormalizedTable:
    """
    Uniform rectangular table produced by the input normalizer.
    Every row has exactly col_count cells; header (when present) too.
    """
    rows: List[List[Any]] = field(default_factory=list)
    header: Optional[List[str]] = None
    col_count: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def height(self) -> int:
        return self.row_count + (1 if self.header is not None else 0)

    def grid(self) -> List[List[Any]]:
        """Header (if any) followed by the data rows, ready to write."""
        if self.header is None:
            return [list(r) for r in self.rows]
        return [list(self.header)] + [list(r) for r in self.rows]


@dataclass
class ContingencyTable:
    """
    Cross-tabulated counts with labelled margins.

    Iterating yields long-form (row_label, col_label, count) triples, which is
    what the generic fallback lays out when the dedicated arm is not enabled.
    """
    counts: Sequence[Sequence[Any]]
    row_labels: Sequence[Hashable]
    col_labels: Sequence[Hashable]
    row_var: str = ""
    col_var: str = ""

    def __iter__(self) -> Iterator[Tuple[Hashable, Hashable, Any]]:
        for r_label, row in zip(self.row_labels, self.counts):
            for c_label, value in zip(self.col_labels, row):
                yield (r_label, c_label, value)


# ---- Per-target unit of work ----

@dataclass
class SheetTarget:
    """
    One (input object, destination worksheet, resolved knobs) unit.
    Built by broadcast.build_targets; consumed once by engine.export.
    """
    name: str
    data: Any
    anchor: Anchor = field(default_factory=lambda: Anchor(1, 1))
    as_table: bool = False
    col_names: bool = True
    row_names: bool = False
    header_style: Optional[HeaderStyle] = None
    border: Optional[BorderSpec] = None
    table_style: str = "TableStyleLight9"
    table_name: Optional[str] = None
    with_filter: bool = True
    gridlines: bool = True


# ---- Run reporting ----

@dataclass
class SheetResult:
    sheet_name: str
    rows_written: int
    cols_written: int
    table_name: Optional[str] = None
    message: str = ""


@dataclass
class ExportReport:
    """
    Returned by engine.export/write_xlsx. Tests can assert it.
    """
    path: str
    results: List[SheetResult] = field(default_factory=list)

    @property
    def sheet_names(self) -> List[str]:
        return [r.sheet_name for r in self.results]
