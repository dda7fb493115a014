"""Tests for sheetdrop.broadcast — cyclic expansion, knob validation, sheet naming, targets."""
import pytest

from sheetdrop.broadcast import (
    broadcast,
    build_targets,
    check_sheet_names,
    resolve_sheet_names,
)
from sheetdrop.config import ExportConfig
from sheetdrop.errors import (
    InvalidBorderMode,
    InvalidCoordinate,
    InvalidParameter,
    SheetNameTooLong,
    INVALID_PARAMETER,
)
from sheetdrop.models import Anchor, BorderMode
from sheetdrop.styles import HeaderStyle


# ---- broadcast ----

def test_scalar_repeats():
    for n in (0, 1, 4):
        out = broadcast("x", n)
        assert len(out) == n
        assert all(v == "x" for v in out)


def test_short_list_cycles():
    assert broadcast(["a", "b"], 5) == ["a", "b", "a", "b", "a"]


def test_long_list_truncates():
    assert broadcast([1, 2, 3], 2) == [1, 2]


def test_strings_mappings_and_styles_are_scalars():
    hs = HeaderStyle(bold=True)
    assert broadcast("abc", 2) == ["abc", "abc"]
    assert broadcast({"k": 1}, 2) == [{"k": 1}, {"k": 1}]
    assert broadcast(hs, 3) == [hs, hs, hs]


def test_style_list_is_one_per_target():
    a, b = HeaderStyle(bold=True), HeaderStyle(italic=True)
    assert broadcast([a, b], 3) == [a, b, a]


def test_bad_count_and_empty_list():
    with pytest.raises(InvalidParameter):
        broadcast(1, -1)
    with pytest.raises(InvalidParameter):
        broadcast([], 2, "start_row")
    assert broadcast([], 0) == []


# ---- sheet names ----

def test_names_synthesized_and_deduplicated():
    names = resolve_sheet_names(["A", "", "A"], 3)
    assert names[1] == "Sheet 2"
    assert names[0] == "A"
    assert names[2] != "A"
    assert len({n.lower() for n in names}) == 3


def test_no_names_means_sheet_n():
    assert resolve_sheet_names(None, 3) == ["Sheet 1", "Sheet 2", "Sheet 3"]


def test_dedupe_is_case_insensitive():
    names = resolve_sheet_names(["Data", "data", "DATA"], 3)
    assert names == ["Data", "data.1", "DATA.2"]


def test_synthesized_name_collision_is_deduped():
    names = resolve_sheet_names(["Sheet 2", None], 2)
    assert names == ["Sheet 2", "Sheet 2.1"]


def test_name_of_31_ok_32_too_long():
    assert resolve_sheet_names(["x" * 31], 1) == ["x" * 31]
    with pytest.raises(SheetNameTooLong) as ei:
        resolve_sheet_names(["ok", "y" * 32], 2)
    assert ei.value.details == {"knob": "sheet_name", "value": "y" * 32}


def test_illegal_characters_rejected():
    with pytest.raises(InvalidParameter):
        resolve_sheet_names(["a/b"], 1)


def test_name_count_mismatch():
    with pytest.raises(InvalidParameter):
        resolve_sheet_names(["a"], 2)


def test_check_sheet_names_rejects_duplicates():
    with pytest.raises(InvalidParameter):
        check_sheet_names(["A", "a"])


# ---- build_targets ----

def test_build_targets_broadcasts_every_knob():
    cfg = ExportConfig(
        start_col=[1, 2, 3],
        start_row=2,
        as_table=[True, False],
        borders="rows",
        border_colour="#4F81BD",
        border_style="medium",
    )
    targets = build_targets(["a", "b", "c"], ["x", "y", "z"], cfg)
    assert [t.name for t in targets] == ["x", "y", "z"]
    assert [t.anchor for t in targets] == [Anchor(2, 1), Anchor(2, 2), Anchor(2, 3)]
    assert [t.as_table for t in targets] == [True, False, True]
    assert all(t.border.mode is BorderMode.ROWS for t in targets)
    assert targets[0].border.colour == "4F81BD"
    assert targets[0].border.style == "medium"
    assert [t.data for t in targets] == ["a", "b", "c"]


def test_build_targets_no_border_when_mode_none():
    targets = build_targets([1, 2], None, ExportConfig(borders=[None, "N"]))
    assert targets[0].border is None
    assert targets[1].border is None


def test_build_targets_border_mode_case_insensitive():
    targets = build_targets([1], None, ExportConfig(borders="SURROUNDING"))
    assert targets[0].border.mode is BorderMode.SURROUNDING


def test_build_targets_default_border_colour_and_style():
    targets = build_targets([1], None, ExportConfig(borders="all"))
    assert targets[0].border.colour == "000000"
    assert targets[0].border.style == "thin"


def test_build_targets_column_letters_and_xy():
    targets = build_targets([1, 2], None, ExportConfig(start_col="c", xy=None))
    assert targets[0].anchor == Anchor(1, 3)
    targets = build_targets([1, 2], None, ExportConfig(xy=["B", 4]))
    assert targets[1].anchor == Anchor(4, 2)
    targets = build_targets([1, 2], None, ExportConfig(xy=[[1, 1], [5, 6]]))
    assert targets[1].anchor == Anchor(6, 5)


def test_build_targets_bad_xy_length():
    with pytest.raises(InvalidCoordinate):
        build_targets([1], None, ExportConfig(xy=[1, 2, 3]))


@pytest.mark.parametrize(
    "knob, value",
    [
        ("gridlines", "yes"),
        ("overwrite", 1),
        ("with_filter", None),
        ("col_names", [True, "no"]),
        ("row_names", 0),
        ("as_table", "TRUE"),
        ("start_row", 0),
        ("start_row", 1.5),
        ("start_col", -2),
        ("start_col", "A1"),
        ("border_colour", "not-a-colour"),
        ("border_style", "wavy"),
        ("header_style", "bold"),
        ("table_style", ""),
        ("table_name", "A1"),
        ("table_name", "has space"),
        ("creator", 5),
    ],
)
def test_build_targets_invalid_knobs(knob, value):
    cfg = ExportConfig(**{knob: value})
    with pytest.raises(InvalidParameter) as ei:
        build_targets([1, 2], None, cfg)
    assert ei.value.code == INVALID_PARAMETER
    assert ei.value.details["knob"] == knob


def test_build_targets_invalid_border_mode():
    with pytest.raises(InvalidBorderMode) as ei:
        build_targets([1], None, ExportConfig(borders="zigzag"))
    assert ei.value.details["value"] == "zigzag"


def test_build_targets_needs_inputs():
    with pytest.raises(InvalidParameter):
        build_targets([], None, ExportConfig())


def test_build_targets_header_style_per_target():
    a, b = HeaderStyle(bold=True), HeaderStyle(fill_colour="yellow")
    targets = build_targets([1, 2, 3], None, ExportConfig(header_style=[a, b]))
    assert [t.header_style for t in targets] == [a, b, a]
