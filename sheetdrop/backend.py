"""
sheetdrop/backend.py — Document backend.

The export pipeline only talks to a Backend: create a worksheet, write a grid,
style a range, draw borders, add a table, persist. OpenpyxlBackend keeps one
in-memory openpyxl Workbook and writes it to disk exactly once in persist().

A backend is single-writer: engine.export holds exclusive() for the whole run,
and a second export against the same backend fails instead of interleaving.

Critical rule (same as for any openpyxl grid write): None values are NEVER
written to cells. Writing None via ws.cell(value=None) registers a phantom
cell and inflates ws.max_row / ws.max_column.
"""
from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Protocol, Sequence, Set, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.filters import AutoFilter, FilterColumn
from openpyxl.worksheet.table import Table, TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from .errors import BackendFailure
from .models import Anchor, BorderInstruction
from .styles import HeaderStyle


logger = logging.getLogger(__name__)


class Backend(Protocol):
    """What the export orchestrator needs from a document backend."""

    def exclusive(self) -> Any: ...

    def set_creator(self, creator: str) -> None: ...

    def table_names(self) -> Set[str]: ...

    def sheet_names(self) -> List[str]: ...

    def create_worksheet(self, name: str, gridlines: bool) -> Any: ...

    def write_grid(self, sheet: Any, rows: Sequence[Sequence[Any]], anchor: Anchor) -> int: ...

    def apply_style(
        self,
        sheet: Any,
        style: HeaderStyle,
        rows: Tuple[int, int],
        cols: Tuple[int, int],
    ) -> None: ...

    def draw_border(
        self,
        sheet: Any,
        instructions: List[BorderInstruction],
        colour: str,
        style: str,
    ) -> None: ...

    def add_table(
        self,
        sheet: Any,
        ref: str,
        name: str,
        style: str,
        with_filter: bool,
        n_cols: int,
    ) -> None: ...

    def persist(self, path: str, overwrite: bool = True) -> None: ...


def _openpyxl_style(style: HeaderStyle) -> Tuple[Font, Optional[PatternFill], Alignment]:
    font = Font(
        name=style.font_name,
        size=style.font_size,
        bold=style.bold,
        italic=style.italic,
        underline="single" if style.underline else None,
        color=style.font_colour,
    )
    fill = None
    if style.fill_colour:
        fill = PatternFill(fill_type="solid", start_color=style.fill_colour, end_color=style.fill_colour)
    alignment = Alignment(horizontal=style.halign, wrap_text=style.wrap_text or None)
    return font, fill, alignment


class OpenpyxlBackend:
    """In-memory openpyxl workbook; nothing touches disk until persist()."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._placeholder: Optional[Worksheet] = self.wb.active
        self._lock = threading.Lock()

    @contextmanager
    def exclusive(self) -> Iterator["OpenpyxlBackend"]:
        if not self._lock.acquire(blocking=False):
            raise BackendFailure("Backend is busy with another export", {"reason": "busy"})
        try:
            yield self
        finally:
            self._lock.release()

    def set_creator(self, creator: str) -> None:
        self.wb.properties.creator = creator

    def table_names(self) -> Set[str]:
        names: Set[str] = set()
        for ws in self.wb.worksheets:
            names.update(ws.tables.keys())
        return names

    def sheet_names(self) -> List[str]:
        """Titles already taken in the workbook (the unused default sheet is not counted)."""
        return [ws.title for ws in self.wb.worksheets if ws is not self._placeholder]

    def create_worksheet(self, name: str, gridlines: bool) -> Worksheet:
        """Create a sheet; the blank default sheet of a new Workbook is reused once."""
        try:
            if self._placeholder is not None:
                ws = self._placeholder
                ws.title = name
                self._placeholder = None
            else:
                ws = self.wb.create_sheet(title=name)
        except ValueError as e:
            raise BackendFailure(f"Could not create worksheet {name!r}: {e}", {"sheet": name})
        ws.sheet_view.showGridLines = gridlines
        return ws

    def write_grid(self, sheet: Worksheet, rows: Sequence[Sequence[Any]], anchor: Anchor) -> int:
        """
        Write rows with their top-left cell at anchor.
        Skips None cells. Returns the number of rows written.
        """
        if not rows:
            return 0

        for r_offset, row in enumerate(rows):
            for c_offset, value in enumerate(row):
                if value is None:
                    continue          # empty cell, not written
                cell = sheet.cell(
                    row=anchor.row + r_offset,
                    column=anchor.col + c_offset,
                    value=value,
                )
                if isinstance(value, str):
                    # openpyxl reads a leading "=" as a formula; text stays text.
                    cell.data_type = "s"

        return len(rows)

    def apply_style(
        self,
        sheet: Worksheet,
        style: HeaderStyle,
        rows: Tuple[int, int],
        cols: Tuple[int, int],
    ) -> None:
        font, fill, alignment = _openpyxl_style(style)
        for r in range(rows[0], rows[1] + 1):
            for c in range(cols[0], cols[1] + 1):
                cell = sheet.cell(row=r, column=c)
                cell.font = font
                cell.alignment = alignment
                if fill is not None:
                    cell.fill = fill

    def draw_border(
        self,
        sheet: Worksheet,
        instructions: List[BorderInstruction],
        colour: str,
        style: str,
    ) -> None:
        """Add the requested edges, keeping any edges a cell already has."""
        side = Side(style=style, color=colour)
        for coord, edges in instructions:
            cell = sheet.cell(row=coord.row, column=coord.col)
            old = cell.border
            cell.border = Border(
                left=side if "left" in edges else old.left,
                right=side if "right" in edges else old.right,
                top=side if "top" in edges else old.top,
                bottom=side if "bottom" in edges else old.bottom,
            )

    def add_table(
        self,
        sheet: Worksheet,
        ref: str,
        name: str,
        style: str,
        with_filter: bool,
        n_cols: int,
    ) -> None:
        tab = Table(displayName=name, ref=ref)
        tab.tableStyleInfo = TableStyleInfo(
            name=style,
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        if not with_filter:
            # Excel tables always carry an autofilter; hide every button instead.
            tab.autoFilter = AutoFilter(
                ref=ref,
                filterColumn=[FilterColumn(colId=i, hiddenButton=True) for i in range(n_cols)],
            )
        try:
            sheet.add_table(tab)
        except ValueError as e:
            raise BackendFailure(f"Could not add table {name!r}: {e}", {"table": name})

    def persist(self, path: str, overwrite: bool = True) -> None:
        if not overwrite and os.path.exists(path):
            raise BackendFailure(
                f"File already exists: {path}",
                {"path": path, "reason": "exists"},
            )
        try:
            self.wb.save(path)
        except PermissionError:
            raise BackendFailure(
                f"Destination file is locked: {path}",
                {"path": path, "reason": "locked"},
            )
        except (OSError, ValueError) as e:
            raise BackendFailure(
                f"Could not save workbook: {e}",
                {"path": path},
            )
        logger.info("Saved workbook to %s", path)
