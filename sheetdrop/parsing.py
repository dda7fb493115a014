from __future__ import annotations

import re
from typing import Any, Optional, Sequence

from .errors import InvalidCoordinate
from .models import Anchor


_COL_RE = re.compile(r"^[A-Z]+$")
_INT_RE = re.compile(r"^\d+$")


def col_letters_to_index(col: str) -> int:
    """
    Convert Excel column letters to 1-based index (A->1, Z->26, AA->27).
    """
    s = (col or "").strip().upper()
    if not s or not _COL_RE.match(s):
        raise InvalidCoordinate(f"Bad column: {col!r}", {"field": "col", "value": col})
    n = 0
    for ch in s:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n


def col_index_to_letters(n: int) -> str:
    """
    Convert 1-based index to Excel column letters (1->A).
    """
    if n <= 0:
        raise InvalidCoordinate(f"Bad column index: {n}", {"field": "col", "value": n})
    out = []
    x = n
    while x:
        x, rem = divmod(x - 1, 26)
        out.append(chr(ord("A") + rem))
    return "".join(reversed(out))


def _to_col(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidCoordinate(f"Bad column: {value!r}", {"field": "col", "value": value})
    if isinstance(value, int):
        n = value
    elif isinstance(value, str):
        s = value.strip()
        n = int(s) if _INT_RE.match(s) else col_letters_to_index(s)
    else:
        raise InvalidCoordinate(f"Bad column: {value!r}", {"field": "col", "value": value})
    if n < 1:
        raise InvalidCoordinate(f"Column must be >= 1: {value!r}", {"field": "col", "value": value})
    return n


def _to_row(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidCoordinate(f"Bad row: {value!r}", {"field": "row", "value": value})
    if isinstance(value, int):
        n = value
    elif isinstance(value, str) and _INT_RE.match(value.strip()):
        n = int(value.strip())
    else:
        raise InvalidCoordinate(f"Bad row: {value!r}", {"field": "row", "value": value})
    if n < 1:
        raise InvalidCoordinate(f"Row must be >= 1: {value!r}", {"field": "row", "value": value})
    return n


def resolve(col: Any = 1, row: Any = 1, xy: Optional[Sequence[Any]] = None) -> Anchor:
    """
    Resolve a start position into a 1-based Anchor.

    xy, when given, is a [col, row] pair that overrides col/row.
    Columns may be numbers or letter codes ("C", "aa"); rows must be numbers.
    """
    if xy is not None:
        if isinstance(xy, str) or len(xy) != 2:
            raise InvalidCoordinate("xy must have length 2", {"field": "xy", "value": xy})
        col, row = xy[0], xy[1]
    return Anchor(row=_to_row(row), col=_to_col(col))


def range_ref(top: int, left: int, bottom: int, right: int) -> str:
    """A1-style range for a 1-based inclusive rectangle, e.g. (1, 1, 3, 2) -> 'A1:B3'."""
    return f"{col_index_to_letters(left)}{top}:{col_index_to_letters(right)}{bottom}"
