"""
sheetdrop/borders.py — Border decorator.

Computes which cell edges receive a drawn line for a rectangular region.
Pure functions over coordinates: no worksheet access here, so every mode is
testable with plain asserts. The backend turns the instructions into
openpyxl Border/Side objects.

Modes:
  none         nothing
  surrounding  outer rectangle only (corner cells carry two edges)
  rows         outer rectangle + a horizontal line between every pair of rows
  columns      outer rectangle + a vertical line between every pair of columns
  all          every edge of every cell
"""
from __future__ import annotations

from typing import Any, FrozenSet, List

from .errors import InvalidBorderMode
from .models import Anchor, BorderInstruction, BorderMode, CellCoord


TOP, BOTTOM, LEFT, RIGHT = "top", "bottom", "left", "right"


def parse_border_mode(value: Any) -> BorderMode:
    """
    Accept a BorderMode, None (= none) or a case-insensitive mode name.
    Unambiguous prefixes are accepted too, so "n" means none.
    """
    if value is None:
        return BorderMode.NONE
    if isinstance(value, BorderMode):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s:
            exact = [m for m in BorderMode if m.value == s]
            if exact:
                return exact[0]
            matches = [m for m in BorderMode if m.value.startswith(s)]
            if len(matches) == 1:
                return matches[0]
    raise InvalidBorderMode(
        f"Invalid border mode: {value!r}",
        {"knob": "borders", "value": value},
    )


def _edges(mode: BorderMode, r: int, c: int, last_r: int, last_c: int) -> FrozenSet[str]:
    if mode is BorderMode.ALL:
        return frozenset((TOP, BOTTOM, LEFT, RIGHT))

    edges = set()
    if r == 0:
        edges.add(TOP)
    if r == last_r:
        edges.add(BOTTOM)
    if c == 0:
        edges.add(LEFT)
    if c == last_c:
        edges.add(RIGHT)

    if mode is BorderMode.ROWS:
        edges.update((TOP, BOTTOM))
    elif mode is BorderMode.COLUMNS:
        edges.update((LEFT, RIGHT))
    return frozenset(edges)


def decorate(
    anchor: Anchor,
    row_count: int,
    col_count: int,
    mode: Any,
    header_offset: int = 0,
) -> List[BorderInstruction]:
    """
    Return (cell, edges) instructions for the region of row_count x col_count
    cells whose top-left is anchor shifted down by header_offset rows.

    Instructions are in row-major order; cells with no edges are omitted.
    """
    mode = parse_border_mode(mode)
    if mode is BorderMode.NONE or row_count <= 0 or col_count <= 0:
        return []

    first_row = anchor.row + header_offset
    last_r, last_c = row_count - 1, col_count - 1
    out: List[BorderInstruction] = []
    for r in range(row_count):
        for c in range(col_count):
            edges = _edges(mode, r, c, last_r, last_c)
            if edges:
                out.append((CellCoord(first_row + r, anchor.col + c), edges))
    return out


def edge_count(instructions: List[BorderInstruction]) -> int:
    return sum(len(edges) for _, edges in instructions)
