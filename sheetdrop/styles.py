"""
sheetdrop/styles.py — Style values and the colour / line-style vocabulary.

HeaderStyle is the "style reference" a caller attaches to a header row.
It is a plain frozen value; the backend translates it into openpyxl
Font / PatternFill / Alignment objects at write time.

Colours are normalised to openpyxl's RRGGBB hex form. Named colours cover the
common X11/CSS names; anything else must be given as a hex code.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from openpyxl.styles import Side

from .errors import invalid_knob


_HEX_RE = re.compile(r"^#?([0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")

NAMED_COLOURS: Dict[str, str] = {
    "black": "000000",
    "white": "FFFFFF",
    "red": "FF0000",
    "green": "00FF00",
    "blue": "0000FF",
    "yellow": "FFFF00",
    "cyan": "00FFFF",
    "magenta": "FF00FF",
    "orange": "FFA500",
    "purple": "A020F0",
    "pink": "FFC0CB",
    "brown": "A52A2A",
    "gold": "FFD700",
    "navy": "000080",
    "navyblue": "000080",
    "darkblue": "00008B",
    "darkgreen": "006400",
    "darkred": "8B0000",
    "darkorange": "FF8C00",
    "lightblue": "ADD8E6",
    "lightgreen": "90EE90",
    "lightyellow": "FFFFE0",
    "skyblue": "87CEEB",
    "steelblue": "4682B4",
    "royalblue": "4169E1",
    "forestgreen": "228B22",
    "seagreen": "2E8B57",
    "tomato": "FF6347",
    "salmon": "FA8072",
    "maroon": "B03060",
    "violet": "EE82EE",
    "orchid": "DA70D6",
    "turquoise": "40E0D0",
    "khaki": "F0E68C",
    "beige": "F5F5DC",
    "ivory": "FFFFF0",
    "grey": "BEBEBE",
    "gray": "BEBEBE",
    "darkgrey": "A9A9A9",
    "darkgray": "A9A9A9",
    "lightgrey": "D3D3D3",
    "lightgray": "D3D3D3",
    "dimgrey": "696969",
    "dimgray": "696969",
}

BORDER_LINE_STYLES = tuple(sorted(v for v in Side.style.values if v))

HALIGN_VALUES = ("general", "left", "center", "right", "fill", "justify", "centerContinuous", "distributed")


def parse_colour(value: Any) -> Optional[str]:
    """
    Return the RRGGBB (or AARRGGBB) hex for a colour name or hex code,
    or None when the value is not a recognised colour.
    """
    if not isinstance(value, str):
        return None
    s = value.strip()
    m = _HEX_RE.match(s)
    if m:
        return m.group(1).upper()
    key = re.sub(r"[\s_]+", "", s.lower())
    return NAMED_COLOURS.get(key)


def is_valid_colour(value: Any) -> bool:
    return parse_colour(value) is not None


def parse_border_line_style(value: Any) -> Optional[str]:
    """Case-insensitive match against openpyxl line styles; None if unknown."""
    if not isinstance(value, str):
        return None
    s = value.strip().lower()
    for name in BORDER_LINE_STYLES:
        if name.lower() == s:
            return name
    return None


@dataclass(frozen=True)
class HeaderStyle:
    font_name: Optional[str] = None
    font_size: Optional[float] = None
    font_colour: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    fill_colour: Optional[str] = None
    halign: Optional[str] = None
    wrap_text: bool = False

    def __post_init__(self) -> None:
        for attr in ("font_colour", "fill_colour"):
            value = getattr(self, attr)
            if value is not None:
                hex_value = parse_colour(value)
                if hex_value is None:
                    raise invalid_knob(attr, value, "a colour name or hex code")
                object.__setattr__(self, attr, hex_value)
        if self.font_size is not None and (
            isinstance(self.font_size, bool) or not isinstance(self.font_size, (int, float)) or self.font_size <= 0
        ):
            raise invalid_knob("font_size", self.font_size, "a positive number")
        if self.halign is not None and self.halign not in HALIGN_VALUES:
            raise invalid_knob("halign", self.halign, f"one of {', '.join(HALIGN_VALUES)}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeaderStyle":
        return cls(**data)
