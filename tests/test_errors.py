from sheetdrop.errors import (
    AppError,
    BackendFailure,
    InvalidParameter,
    SheetNameTooLong,
    UnsupportedShape,
    BACKEND_FAILURE,
    INVALID_PARAMETER,
    SHEET_NAME_TOO_LONG,
    friendly_message,
    invalid_knob,
)


def test_app_error_str_includes_code_message():
    e = AppError("X", "Nope")
    assert str(e).startswith("X: Nope")


def test_app_error_str_includes_details_when_present():
    e = AppError("X", "Nope", {"a": 1})
    s = str(e)
    assert "X: Nope" in s
    assert "a" in s


def test_typed_errors_fix_their_code():
    assert InvalidParameter("bad").code == INVALID_PARAMETER
    assert SheetNameTooLong("long").code == SHEET_NAME_TOO_LONG
    assert BackendFailure("io").code == BACKEND_FAILURE
    assert isinstance(UnsupportedShape("3d"), AppError)


def test_invalid_knob_carries_knob_and_value():
    e = invalid_knob("start_row", 0, "an integer >= 1")
    assert isinstance(e, InvalidParameter)
    assert e.details == {"knob": "start_row", "value": 0}
    assert "start_row" in e.message


def test_friendly_message_backend_locked_mentions_file():
    e = BackendFailure("Destination file is locked: /tmp/out.xlsx", {"path": "/tmp/out.xlsx", "reason": "locked"})
    msg = friendly_message(e)
    assert "out.xlsx" in msg
    assert "open in another program" in msg


def test_friendly_message_existing_file():
    e = BackendFailure("exists", {"path": "/tmp/out.xlsx", "reason": "exists"})
    assert "overwrite=True" in friendly_message(e)


def test_friendly_message_knob_and_fallback():
    assert "start_col" in friendly_message(invalid_knob("start_col", -1, "an integer >= 1"))
    assert friendly_message(AppError("OTHER", "first line\nsecond")) == "first line"
    assert friendly_message(AppError("OTHER", "")) == "An unexpected error occurred."
