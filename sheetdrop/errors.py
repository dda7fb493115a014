from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    """
    User-facing error with a short code and structured details.
    Raise AppError (or one of the typed subclasses below) from sheetdrop modules;
    callers can match on .code or on the subclass.
    """
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


# ── Error codes (keep stable for tests and callers) ───────────────────────────

INVALID_PARAMETER   = "INVALID_PARAMETER"
INVALID_COORDINATE  = "INVALID_COORDINATE"
UNSUPPORTED_SHAPE   = "UNSUPPORTED_SHAPE"
SHEET_NAME_TOO_LONG = "SHEET_NAME_TOO_LONG"
INVALID_BORDER_MODE = "INVALID_BORDER_MODE"
BACKEND_FAILURE     = "BACKEND_FAILURE"


# ── Typed errors (code is fixed per class) ────────────────────────────────────

class InvalidParameter(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(INVALID_PARAMETER, message, details)


class InvalidCoordinate(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(INVALID_COORDINATE, message, details)


class UnsupportedShape(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(UNSUPPORTED_SHAPE, message, details)


class SheetNameTooLong(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(SHEET_NAME_TOO_LONG, message, details)


class InvalidBorderMode(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(INVALID_BORDER_MODE, message, details)


class BackendFailure(AppError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(BACKEND_FAILURE, message, details)


def invalid_knob(knob: str, value: Any, expected: str) -> InvalidParameter:
    """Build the standard InvalidParameter for a knob outside its domain."""
    return InvalidParameter(
        f"{knob} must be {expected} (got {value!r})",
        {"knob": knob, "value": value},
    )


# ── Friendly message lookup ───────────────────────────────────────────────────

def friendly_message(e: AppError) -> str:
    """
    Return a plain-English one-liner suitable for showing to an end user.
    Never exposes raw tracebacks or internal code paths.
    """
    code = e.code
    msg  = e.message or ""
    details = e.details or {}

    if code == BACKEND_FAILURE:
        fname = ""
        if "path" in details:
            fname = f" ({os.path.basename(str(details['path']))})"
        if details.get("reason") == "exists":
            return f"File already exists{fname}. Pass overwrite=True to replace it."
        if details.get("reason") == "busy":
            return "Another export is already running against this workbook."
        if "permission" in msg.lower() or "locked" in msg.lower() or "access" in msg.lower():
            return f"Could not save — file is open in another program{fname}. Close it and try again."
        return f"Could not save the workbook{fname}. Check that the path is valid and the folder exists."

    if code == SHEET_NAME_TOO_LONG:
        name = details.get("value", "")
        return f"Worksheet name is longer than 31 characters: {name!r}. Use a shorter name."

    if code == INVALID_COORDINATE:
        return f"Invalid start position. Use a column like A, B, AA (or a number) and a row of 1 or higher.\n({msg})"

    if code == INVALID_BORDER_MODE:
        return f"Unknown border setting. Use none, surrounding, rows, columns or all.\n({msg})"

    if code == UNSUPPORTED_SHAPE:
        return f"This object cannot be laid out as a table on a worksheet.\n({msg})"

    if code == INVALID_PARAMETER:
        knob = details.get("knob")
        if knob:
            return f"Invalid value for {knob}.\n({msg})"
        return f"Invalid setting — please check your configuration.\n({msg})"

    # First line of the raw message only
    clean = msg.splitlines()[0] if msg else "An unexpected error occurred."
    return clean
