"""
sheetdrop/planner.py — Sheet-plan builder.

Turns each SheetTarget into a SheetPlan without touching any backend:
normalize the input, fix the header for table mode, work out the header span,
the data region and its border instructions, and assign table names.

plan_targets() plans the whole batch up front. If any target fails, the
error propagates before the first worksheet is created.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

from .borders import decorate
from .errors import InvalidParameter, UnsupportedShape
from .models import Anchor, BorderInstruction, NormalizedTable, SheetTarget
from .normalize import normalize
from .parsing import range_ref


@dataclass
class SheetPlan:
    target: SheetTarget
    table: NormalizedTable
    anchor: Anchor
    col_names: bool                 # effective, after normalization
    row_names: bool                 # effective, after normalization
    borders: List[BorderInstruction] = field(default_factory=list)
    table_name: Optional[str] = None

    @property
    def width(self) -> int:
        return self.table.col_count

    @property
    def height(self) -> int:
        return self.table.height

    @property
    def has_header(self) -> bool:
        return self.table.header is not None

    @property
    def grid(self) -> List[List[Any]]:
        return self.table.grid()

    @property
    def header_span(self) -> Optional[Tuple[Tuple[int, int], Tuple[int, int]]]:
        """((row, row), (first_col, last_col)) of the header row, or None."""
        if not self.has_header or self.width == 0:
            return None
        a = self.anchor
        return (a.row, a.row), (a.col, a.col + self.width - 1)

    @property
    def table_ref(self) -> Optional[str]:
        """A1 range of the Excel table (header plus at least one data row)."""
        if self.table_name is None:
            return None
        a = self.anchor
        bottom = a.row + max(self.table.row_count, 1)
        return range_ref(a.row, a.col, bottom, a.col + self.width - 1)


def table_headers(header: Optional[Sequence[str]], width: int) -> List[str]:
    """
    Excel table headers must be non-empty, unique (case-insensitive) strings.
    Blank names become ColumnN; repeats get a numeric suffix.
    """
    names = list(header) if header is not None else [""] * width
    out: List[str] = []
    used: Set[str] = set()
    for i, name in enumerate(names, 1):
        base = name.strip() or f"Column{i}"
        candidate, k = base, 1
        while candidate.lower() in used:
            k += 1
            candidate = f"{base}{k}"
        used.add(candidate.lower())
        out.append(candidate)
    return out


def build_plan(target: SheetTarget, contingency_arm: bool = False) -> SheetPlan:
    """Plan one target. Table names are assigned later by plan_targets."""
    table, col_names, row_names = normalize(
        target.data, target.col_names, target.row_names, contingency_arm
    )

    if target.as_table:
        if table.col_count == 0:
            raise UnsupportedShape(
                f"Cannot write an empty object as a table on sheet {target.name!r}",
                {"field": "data", "value": type(target.data).__name__},
            )
        table.header = table_headers(table.header, table.col_count)

    borders: List[BorderInstruction] = []
    if not target.as_table and target.border is not None:
        borders = decorate(
            target.anchor,
            table.row_count,
            table.col_count,
            target.border.mode,
            header_offset=1 if table.header is not None else 0,
        )

    return SheetPlan(
        target=target,
        table=table,
        anchor=target.anchor,
        col_names=col_names,
        row_names=row_names,
        borders=borders,
    )


def _auto_table_names(taken: Set[str]) -> Iterable[str]:
    i = 0
    while True:
        i += 1
        name = f"Table{i}"
        if name.lower() not in taken:
            yield name


def plan_targets(
    targets: Sequence[SheetTarget],
    contingency_arm: bool = False,
    existing_table_names: Iterable[str] = (),
) -> List[SheetPlan]:
    """
    Plan every target in order and give each table-mode plan a workbook-unique
    table name. Explicit names that collide raise InvalidParameter.
    """
    plans = [build_plan(t, contingency_arm) for t in targets]

    taken = {n.lower() for n in existing_table_names}
    for plan in plans:
        name = plan.target.table_name
        if plan.target.as_table and name is not None:
            if name.lower() in taken:
                raise InvalidParameter(
                    f"Table name already used in this workbook: {name!r}",
                    {"knob": "table_name", "value": name},
                )
            taken.add(name.lower())
            plan.table_name = name

    auto = _auto_table_names(taken)
    for plan in plans:
        if plan.target.as_table and plan.table_name is None:
            plan.table_name = next(auto)
            taken.add(plan.table_name.lower())
    return plans
