"""
sheetdrop/broadcast.py — Parameter broadcaster.

Expands per-call knobs (scalar or short list) into one value per target,
after validating every value against the knob's domain. Also owns worksheet
naming: synthesis of missing names, de-duplication and the 31-character limit.

Everything here runs before a single worksheet exists, so any error raised
aborts the whole export without side effects.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence

from .borders import parse_border_mode
from .config import DEFAULT_BORDER_COLOUR, DEFAULT_BORDER_STYLE, ExportConfig
from .errors import InvalidParameter, SheetNameTooLong, invalid_knob
from .models import BorderMode, BorderSpec, SheetTarget
from .parsing import resolve
from .styles import HeaderStyle, parse_border_line_style, parse_colour


MAX_SHEET_NAME = 31

_BAD_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
_TABLE_NAME_RE = re.compile(r"^[A-Za-z_\\][A-Za-z0-9_.\\]*$")
_CELL_LIKE_RE = re.compile(r"^([A-Za-z]{1,3}\d+|[RrCc]|[Rr]\d+[Cc]\d+)$")
_COL_LETTERS_RE = re.compile(r"^\s*[A-Za-z]+\s*$")


# ── Broadcasting ──────────────────────────────────────────────────────────────

def _is_vector(value: Any) -> bool:
    """Lists and tuples are per-target vectors; everything else is a scalar."""
    return isinstance(value, (list, tuple))


def broadcast(value: Any, count: int, knob: Optional[str] = None) -> List[Any]:
    """
    Return a list of exactly count values.

    A scalar is repeated; a shorter list is recycled cyclically
    (broadcast([a, b], 5) == [a, b, a, b, a]); a longer list is truncated.
    Strings, mappings and style objects are scalars.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise invalid_knob("count", count, "a non-negative integer")
    if not _is_vector(value):
        return [value] * count
    values = list(value)
    if not values:
        if count == 0:
            return []
        raise invalid_knob(knob or "value", value, "a non-empty value or list")
    return [values[i % len(values)] for i in range(count)]


def _validated(
    knob: str,
    value: Any,
    count: int,
    convert: Callable[[str, Any], Any],
) -> List[Any]:
    items = list(value) if _is_vector(value) else [value]
    converted = [convert(knob, v) for v in items]
    return broadcast(converted if _is_vector(value) else converted[0], count, knob)


# ── Per-knob domain checks (each returns the converted value) ────────────────

def check_bool(knob: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise invalid_knob(knob, value, "True or False")
    return value


def check_start_row(knob: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise invalid_knob(knob, value, "an integer >= 1")
    return value


def check_start_col(knob: str, value: Any) -> Any:
    if isinstance(value, str) and _COL_LETTERS_RE.match(value):
        return value.strip().upper()
    return check_start_row(knob, value)


def check_colour(knob: str, value: Any) -> str:
    hex_value = parse_colour(value)
    if hex_value is None:
        raise invalid_knob(knob, value, "a colour name or hex code")
    return hex_value


def check_border_style(knob: str, value: Any) -> str:
    style = parse_border_line_style(value)
    if style is None:
        raise invalid_knob(knob, value, "an openpyxl border line style (thin, medium, dashed, ...)")
    return style


def check_header_style(knob: str, value: Any) -> Optional[HeaderStyle]:
    if value is not None and not isinstance(value, HeaderStyle):
        raise invalid_knob(knob, value, "a HeaderStyle or None")
    return value


def check_table_style(knob: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise invalid_knob(knob, value, "a table style name")
    return value.strip()


def check_table_name(knob: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    if (
        not isinstance(value, str)
        or len(value) > 255
        or not _TABLE_NAME_RE.match(value)
        or _CELL_LIKE_RE.match(value)
    ):
        raise invalid_knob(knob, value, "a table name (letters, digits, '_' or '.', not a cell reference)")
    return value


def check_border_mode(knob: str, value: Any) -> BorderMode:
    return parse_border_mode(value)


# ── Sheet naming ──────────────────────────────────────────────────────────────

def _dedupe(names: List[str]) -> List[str]:
    """First occurrence keeps its name; later ones get .1, .2, ... (case-insensitive)."""
    used = set()
    out = []
    for name in names:
        candidate, i = name, 0
        while candidate.lower() in used:
            i += 1
            candidate = f"{name}.{i}"
        used.add(candidate.lower())
        out.append(candidate)
    return out


def resolve_sheet_names(names: Optional[Sequence[Any]], count: int) -> List[str]:
    """
    Produce exactly count unique worksheet names.

    Missing or empty names become "Sheet {i}" (1-based position). Duplicates
    are disambiguated. Raises SheetNameTooLong if any final name exceeds 31
    characters and InvalidParameter for characters Excel rejects.
    """
    if names is None:
        names = [None] * count
    if len(names) != count:
        raise InvalidParameter(
            f"Expected {count} sheet names, got {len(names)}",
            {"knob": "sheet_name", "value": list(names)},
        )

    raw = []
    for i, name in enumerate(names, 1):
        if name is None or str(name).strip() == "":
            raw.append(f"Sheet {i}")
        else:
            raw.append(str(name))

    final = _dedupe(raw)
    check_sheet_names(final)
    return final


def check_sheet_names(names: Sequence[str]) -> None:
    """Raise unless every name is legal, unique (case-insensitive) and <= 31 characters."""
    seen = set()
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise invalid_knob("sheet_name", name, "a non-empty string")
        if _BAD_SHEET_CHARS.search(name):
            raise invalid_knob("sheet_name", name, "a name without [ ] : * ? / \\")
        if len(name) > MAX_SHEET_NAME:
            raise SheetNameTooLong(
                f"Sheet name too long ({len(name)} > {MAX_SHEET_NAME} characters)",
                {"knob": "sheet_name", "value": name},
            )
        if name.lower() in seen:
            raise invalid_knob("sheet_name", name, "a name not already used in this workbook")
        seen.add(name.lower())


# ── Target construction ───────────────────────────────────────────────────────

def _xy_vector(xy: Any, count: int) -> List[Optional[Sequence[Any]]]:
    if xy is None:
        return [None] * count
    if _is_vector(xy) and xy and all(_is_vector(p) for p in xy):
        return broadcast(list(xy), count, "xy")
    return [xy] * count


def build_targets(
    inputs: Sequence[Any],
    names: Optional[Sequence[Any]],
    config: ExportConfig,
) -> List[SheetTarget]:
    """
    Validate every knob of config, broadcast each to len(inputs) and return one
    SheetTarget per input. Nothing is written here.
    """
    if isinstance(inputs, Mapping):
        raise invalid_knob("x", type(inputs).__name__, "a sequence of objects")
    n = len(inputs)
    if n == 0:
        raise invalid_knob("x", list(inputs), "at least one object to write")

    gridlines = _validated("gridlines", config.gridlines, n, check_bool)
    with_filter = _validated("with_filter", config.with_filter, n, check_bool)
    col_names = _validated("col_names", config.col_names, n, check_bool)
    row_names = _validated("row_names", config.row_names, n, check_bool)
    as_table = _validated("as_table", config.as_table, n, check_bool)
    check_bool("overwrite", config.overwrite)
    check_bool("contingency_arm", config.contingency_arm)
    if not isinstance(config.creator, str):
        raise invalid_knob("creator", config.creator, "a string")

    start_rows = _validated("start_row", config.start_row, n, check_start_row)
    start_cols = _validated("start_col", config.start_col, n, check_start_col)
    xys = _xy_vector(config.xy, n)

    modes = _validated("borders", config.borders, n, check_border_mode)
    colours = _validated(
        "border_colour",
        DEFAULT_BORDER_COLOUR if config.border_colour is None else config.border_colour,
        n,
        check_colour,
    )
    line_styles = _validated(
        "border_style",
        DEFAULT_BORDER_STYLE if config.border_style is None else config.border_style,
        n,
        check_border_style,
    )
    header_styles = _validated("header_style", config.header_style, n, check_header_style)
    table_styles = _validated("table_style", config.table_style, n, check_table_style)
    table_names = _validated("table_name", config.table_name, n, check_table_name)

    sheet_names = resolve_sheet_names(names, n)

    targets = []
    for i in range(n):
        border = None
        if modes[i] is not BorderMode.NONE:
            border = BorderSpec(mode=modes[i], colour=colours[i], style=line_styles[i])
        targets.append(SheetTarget(
            name=sheet_names[i],
            data=inputs[i],
            anchor=resolve(start_cols[i], start_rows[i], xys[i]),
            as_table=as_table[i],
            col_names=col_names[i],
            row_names=row_names[i],
            header_style=header_styles[i],
            border=border,
            table_style=table_styles[i],
            table_name=table_names[i],
            with_filter=with_filter[i],
            gridlines=gridlines[i],
        ))
    return targets
