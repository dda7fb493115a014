"""
sheetdrop/writer.py — Applies one validated SheetPlan to a backend.

Order per sheet: create worksheet, write grid, then either the table
(table mode) or the border instructions (plain mode). A header style is applied
to the header row span in both modes.
"""
from __future__ import annotations

from .backend import Backend
from .models import SheetResult
from .planner import SheetPlan


def apply_sheet_plan(backend: Backend, plan: SheetPlan) -> SheetResult:
    """
    Write plan to backend and return what was written.
    rows_written counts the header row when one was written.
    """
    target = plan.target
    sheet = backend.create_worksheet(target.name, target.gridlines)

    rows_written = backend.write_grid(sheet, plan.grid, plan.anchor)

    if plan.table_name is not None:
        backend.add_table(
            sheet,
            plan.table_ref,
            plan.table_name,
            target.table_style,
            target.with_filter,
            plan.width,
        )

    span = plan.header_span
    if target.header_style is not None and span is not None:
        rows, cols = span
        backend.apply_style(sheet, target.header_style, rows, cols)

    if plan.borders:
        backend.draw_border(sheet, plan.borders, target.border.colour, target.border.style)

    return SheetResult(
        sheet_name=target.name,
        rows_written=rows_written,
        cols_written=plan.width,
        table_name=plan.table_name,
        message="OK" if rows_written > 0 else "0 rows written",
    )
