from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional, Sequence, Union

from .errors import InvalidParameter
from .models import BorderMode
from .styles import HeaderStyle


logger = logging.getLogger(__name__)

ENV_BORDER_COLOUR = "SHEETDROP_BORDER_COLOUR"
ENV_BORDER_STYLE = "SHEETDROP_BORDER_STYLE"

DEFAULT_BORDER_COLOUR = "black"
DEFAULT_BORDER_STYLE = "thin"
DEFAULT_TABLE_STYLE = "TableStyleLight9"

Knob = Union[Any, Sequence[Any]]


@dataclass
class ExportConfig:
    """
    Every knob of an export. Each may be a scalar (applies to every sheet) or
    a list (one value per sheet, recycled when shorter than the sheet count).

    gridlines        show worksheet grid lines (default True)
    overwrite        replace an existing file on save (default True)
    with_filter      filter buttons on table headers, table mode only (default True)
    col_names        write column names as a header row (default True)
    row_names        write row labels as a leading column (default False)
    as_table         write as an Excel table instead of a plain grid (default False)
    start_row        1-based first row (default 1)
    start_col        1-based first column, number or letters (default 1)
    xy               [col, row] pair overriding start_col/start_row
    header_style     HeaderStyle for the header row, or None
    borders          none / surrounding / rows / columns / all, or None
    border_colour    colour name or hex; None -> resolved default
    border_style     openpyxl line style; None -> resolved default
    table_style      Excel table style name (default "TableStyleLight9")
    table_name       explicit table name; None -> Table1, Table2, ...
    creator          workbook author metadata
    sheet_name       sheet name(s); None -> "Sheet 1", "Sheet 2", ...
    contingency_arm  lay out ContingencyTable inputs as a labelled grid
    """
    gridlines: Knob = True
    overwrite: bool = True
    with_filter: Knob = True
    col_names: Knob = True
    row_names: Knob = False
    as_table: Knob = False
    start_row: Knob = 1
    start_col: Knob = 1
    xy: Optional[Sequence[Any]] = None
    header_style: Optional[Union[HeaderStyle, List[Optional[HeaderStyle]]]] = None
    borders: Knob = None
    border_colour: Knob = None
    border_style: Knob = None
    table_style: Knob = DEFAULT_TABLE_STYLE
    table_name: Knob = None
    creator: str = ""
    sheet_name: Knob = None
    contingency_arm: bool = False

    # ---------- Serialization ----------

    def to_dict(self) -> Dict[str, Any]:
        # asdict already flattens HeaderStyle values into plain dicts.
        data = asdict(self)
        data["borders"] = _mode_to_json(self.borders)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportConfig":
        kwargs = _canonical(data)

        hs = kwargs.get("header_style")
        if isinstance(hs, dict):
            kwargs["header_style"] = HeaderStyle.from_dict(hs)
        elif isinstance(hs, list):
            kwargs["header_style"] = [HeaderStyle.from_dict(h) if h is not None else None for h in hs]
        return cls(**kwargs)

    def with_overrides(self, **overrides: Any) -> "ExportConfig":
        """Copy of this config with keyword overrides (aliases accepted)."""
        return replace(self, **_canonical(overrides))

    # ---------- File IO ----------

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_json(cls, path: str) -> "ExportConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)


# Alternate spellings accepted by from_dict.
_ALIASES = {
    "colNames": "col_names",
    "col.names": "col_names",
    "rowNames": "row_names",
    "row.names": "row_names",
    "gridLines": "gridlines",
    "withFilter": "with_filter",
    "asTable": "as_table",
    "startRow": "start_row",
    "startCol": "start_col",
    "headerStyle": "header_style",
    "borderColour": "border_colour",
    "borderColor": "border_colour",
    "border_color": "border_colour",
    "borderStyle": "border_style",
    "tableStyle": "table_style",
    "tableName": "table_name",
    "sheetName": "sheet_name",
}


def _canonical(data: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(ExportConfig)}
    out: Dict[str, Any] = {}
    for key, value in data.items():
        name = _ALIASES.get(key, key)
        if name not in known:
            raise InvalidParameter(f"Unknown option: {key!r}", {"knob": key, "value": value})
        out[name] = value
    return out


def _mode_to_json(value: Any) -> Any:
    if isinstance(value, BorderMode):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_mode_to_json(v) for v in value]
    return value


def resolve_defaults(config: ExportConfig) -> ExportConfig:
    """Fill border colour/style from the environment.

    Priority:
    1) explicit value on the config
    2) SHEETDROP_BORDER_COLOUR / SHEETDROP_BORDER_STYLE env vars
    3) "black" / "thin"

    Called once by engine.write_xlsx; nothing below it reads the environment.
    """
    updates: Dict[str, Any] = {}
    if config.border_colour is None:
        updates["border_colour"] = os.getenv(ENV_BORDER_COLOUR) or DEFAULT_BORDER_COLOUR
    if config.border_style is None:
        updates["border_style"] = os.getenv(ENV_BORDER_STYLE) or DEFAULT_BORDER_STYLE
    if updates:
        logger.debug("Resolved export defaults: %s", updates)
        return replace(config, **updates)
    return config
