import pytest

from sheetdrop.errors import AppError, InvalidCoordinate, INVALID_COORDINATE
from sheetdrop.models import Anchor
from sheetdrop.parsing import (
    col_letters_to_index,
    col_index_to_letters,
    resolve,
    range_ref,
)


def test_col_letters_to_index_basic():
    assert col_letters_to_index("A") == 1
    assert col_letters_to_index("Z") == 26
    assert col_letters_to_index("AA") == 27
    assert col_letters_to_index("AZ") == 52
    assert col_letters_to_index("BA") == 53


def test_col_letters_case_and_whitespace():
    assert col_letters_to_index(" aa ") == 27


def test_col_index_to_letters_basic():
    assert col_index_to_letters(1) == "A"
    assert col_index_to_letters(26) == "Z"
    assert col_index_to_letters(27) == "AA"
    assert col_index_to_letters(52) == "AZ"
    assert col_index_to_letters(53) == "BA"


def test_col_roundtrip_property_small():
    for n in range(1, 800):
        assert col_letters_to_index(col_index_to_letters(n)) == n


def test_col_letters_rejects_bad_characters():
    for bad in ("A1", "", "Ä", "A-B", "?"):
        with pytest.raises(InvalidCoordinate) as ei:
            col_letters_to_index(bad)
        assert ei.value.code == INVALID_COORDINATE


def test_col_index_to_letters_rejects_nonpositive():
    with pytest.raises(AppError):
        col_index_to_letters(0)


def test_resolve_numeric_and_letters():
    assert resolve(1, 1) == Anchor(row=1, col=1)
    assert resolve("C", 4) == Anchor(row=4, col=3)
    assert resolve("aa", "2") == Anchor(row=2, col=27)
    assert resolve("5", 1) == Anchor(row=1, col=5)


def test_resolve_xy_overrides_col_and_row():
    assert resolve(1, 1, xy=["B", 7]) == Anchor(row=7, col=2)
    assert resolve("Z", 99, xy=(3, 2)) == Anchor(row=2, col=3)


def test_resolve_rejects_bad_xy_length():
    with pytest.raises(InvalidCoordinate) as ei:
        resolve(xy=[1, 2, 3])
    assert ei.value.details["field"] == "xy"
    with pytest.raises(InvalidCoordinate):
        resolve(xy=[1])


def test_resolve_rejects_row_and_col_below_one():
    with pytest.raises(InvalidCoordinate) as ei:
        resolve(1, 0)
    assert ei.value.details == {"field": "row", "value": 0}
    with pytest.raises(InvalidCoordinate) as ei:
        resolve(0, 1)
    assert ei.value.details["field"] == "col"
    with pytest.raises(InvalidCoordinate):
        resolve(xy=[-1, 3])


def test_resolve_rejects_non_numeric_row_and_bools():
    with pytest.raises(InvalidCoordinate):
        resolve(1, "A")
    with pytest.raises(InvalidCoordinate):
        resolve(True, 1)
    with pytest.raises(InvalidCoordinate):
        resolve(1.5, 1)


def test_range_ref():
    assert range_ref(1, 1, 3, 2) == "A1:B3"
    assert range_ref(5, 27, 9, 28) == "AA5:AB9"
