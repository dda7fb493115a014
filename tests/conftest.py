"""
Shared fixtures.

RecordingBackend is a structural recorder for backend calls — no workbook, no
file. Orchestration tests use it to assert call order and arguments; tests that
need a real .xlsx use OpenpyxlBackend and load_workbook instead.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Set, Tuple

import pytest

from sheetdrop.errors import BackendFailure


class RecordingBackend:
    def __init__(self, fail_on: str = "") -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.sheets: List[str] = []
        self.grids: Dict[str, List[List[Any]]] = {}
        self.persisted: List[Tuple[str, bool]] = []
        self.creator = ""
        self.fail_on = fail_on
        self.busy = False

    @contextmanager
    def exclusive(self):
        if self.busy:
            raise BackendFailure("busy", {"reason": "busy"})
        self.busy = True
        try:
            yield self
        finally:
            self.busy = False

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name == self.fail_on:
            raise OSError(f"{name} exploded")

    def set_creator(self, creator: str) -> None:
        self._record("set_creator", creator)
        self.creator = creator

    def table_names(self) -> Set[str]:
        return set()

    def sheet_names(self) -> List[str]:
        return list(self.sheets)

    def create_worksheet(self, name: str, gridlines: bool) -> str:
        self._record("create_worksheet", name, gridlines)
        self.sheets.append(name)
        return name

    def write_grid(self, sheet, rows, anchor) -> int:
        self._record("write_grid", sheet, anchor)
        self.grids[sheet] = [list(r) for r in rows]
        return len(rows)

    def apply_style(self, sheet, style, rows, cols) -> None:
        self._record("apply_style", sheet, style, rows, cols)

    def draw_border(self, sheet, instructions, colour, style) -> None:
        self._record("draw_border", sheet, list(instructions), colour, style)

    def add_table(self, sheet, ref, name, style, with_filter, n_cols) -> None:
        self._record("add_table", sheet, ref, name, style, with_filter, n_cols)

    def persist(self, path: str, overwrite: bool = True) -> None:
        self._record("persist", path, overwrite)
        self.persisted.append((path, overwrite))

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def calls_named(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]


@pytest.fixture
def recorder() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def recorder_factory():
    return RecordingBackend
