"""
sheetdrop/normalize.py — Input normalizer.

Turns whatever object the caller hands us into a NormalizedTable: an optional
header row plus equal-length rows of plain Python cell values.

Dispatch is a closed set of input kinds (see classify). Each kind has exactly
one arm; FALLBACK is the mandatory default arm.

  DATASET       DataFrame / 2-D ndarray / list of record dicts — passed through.
  LINEAR_MODEL  fit results (params, bse, tvalues, pvalues) — coefficient table.
  GLM           same, when fit.model carries a family.
  ANOVA         DataFrame carrying a "PR(>F)" column (statsmodels anova_lm).
  CONTINGENCY   ContingencyTable — only laid out as a grid when the caller
                enables the arm; otherwise handled by FALLBACK.
  FALLBACK      best-effort coercion, no column or row names.

Kind-specific arms that turn row labels into an ordinary first column force
the effective row-names flag to False so the labels are not written twice.
"""
from __future__ import annotations

import datetime
import decimal
import math
from collections.abc import Mapping
from enum import Enum
from typing import Any, Hashable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import UnsupportedShape
from .models import ContingencyTable, NormalizedTable


class InputKind(Enum):
    DATASET = "dataset"
    LINEAR_MODEL = "lm"
    GLM = "glm"
    ANOVA = "anova"
    CONTINGENCY = "contingency"
    FALLBACK = "fallback"


_FIT_ATTRS = ("params", "bse", "tvalues", "pvalues")
_ANOVA_MARKER = "PR(>F)"


# ── Cells ─────────────────────────────────────────────────────────────────────

def to_cell(value: Any) -> Any:
    """
    Map a raw value onto one of the cell variants:
    str, int, float, bool, date, datetime or None (empty).
    """
    if value is None or value is pd.NaT or value is pd.NA:
        return None
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            value = value.tz_convert(None)
        return value.to_pydatetime()
    if isinstance(value, datetime.datetime) and value.tzinfo is not None:
        # Excel datetimes are naive; aware values are written as UTC.
        return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        return pd.Timestamp(value).to_pydatetime()
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating, decimal.Decimal)):
        f = float(value)
        return f if math.isfinite(f) else None
    if isinstance(value, str):
        return value
    return str(value)


def _label(value: Hashable) -> str:
    if isinstance(value, tuple):
        return ".".join(str(v) for v in value)
    return str(value)


# ── Classification ────────────────────────────────────────────────────────────

def _is_records(data: Any) -> bool:
    return (
        isinstance(data, (list, tuple))
        and len(data) > 0
        and all(isinstance(r, Mapping) for r in data)
    )


def _is_fit(data: Any) -> bool:
    return all(hasattr(data, a) for a in _FIT_ATTRS)


def classify(data: Any) -> InputKind:
    """
    Decide which normalization arm handles data.

    Raises UnsupportedShape for array-likes with more than two dimensions.
    """
    ndim = getattr(data, "ndim", None)
    if isinstance(ndim, int) and ndim > 2:
        raise UnsupportedShape(
            f"Cannot lay out a {ndim}-dimensional object on a worksheet",
            {"field": "data", "value": type(data).__name__, "ndim": ndim},
        )

    if isinstance(data, pd.DataFrame):
        if _ANOVA_MARKER in data.columns:
            return InputKind.ANOVA
        return InputKind.DATASET
    if isinstance(data, np.ndarray) and data.ndim == 2:
        return InputKind.DATASET
    if _is_records(data):
        return InputKind.DATASET
    if _is_fit(data):
        if hasattr(getattr(data, "model", None), "family"):
            return InputKind.GLM
        return InputKind.LINEAR_MODEL
    if isinstance(data, ContingencyTable):
        return InputKind.CONTINGENCY
    return InputKind.FALLBACK


def is_sheet_object(data: Any) -> bool:
    """True for objects with a dedicated (non-fallback) arm; record dicts are not sheets."""
    if isinstance(data, Mapping):
        return False
    return classify(data) is not InputKind.FALLBACK


# ── Frame helpers ─────────────────────────────────────────────────────────────

def _frame_rows(frame: pd.DataFrame) -> List[List[Any]]:
    return [[to_cell(v) for v in rec] for rec in frame.itertuples(index=False, name=None)]


def _prepend_column(rows: List[List[Any]], labels: Sequence[Any]) -> List[List[Any]]:
    return [[label] + row for label, row in zip(labels, rows)]


def _table(header: List[str], rows: List[List[Any]]) -> NormalizedTable:
    return NormalizedTable(rows=rows, header=header, col_count=len(header))


def _from_frame(frame: pd.DataFrame) -> Tuple[NormalizedTable, List[str]]:
    """Table with the frame's column labels as header, plus its row labels."""
    header = [_label(c) for c in frame.columns]
    labels = [_label(i) for i in frame.index]
    return _table(header, _frame_rows(frame)), labels


def _with_label_column(frame: pd.DataFrame) -> NormalizedTable:
    """Frame rows with the index moved into an unlabeled leading column."""
    table, labels = _from_frame(frame)
    return _table([""] + table.header, _prepend_column(table.rows, labels))


# ── Arms ──────────────────────────────────────────────────────────────────────

def _dataset_frame(data: Any) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, np.ndarray):
        return pd.DataFrame(data)
    return pd.DataFrame.from_records(list(data))


def _param_names(fit: Any) -> List[str]:
    params = fit.params
    if isinstance(params, pd.Series):
        return [_label(i) for i in params.index]
    names = getattr(getattr(fit, "model", None), "exog_names", None)
    if names and len(names) == len(params):
        return [str(n) for n in names]
    return [f"x{i}" for i in range(len(params))]


def coefficient_frame(fit: Any, kind: InputKind = InputKind.LINEAR_MODEL) -> pd.DataFrame:
    """
    Coefficient table of a fitted model: Estimate, Std. Error, test statistic
    and p-value per term. The statistic is t or z following fit.use_t.
    """
    use_t = getattr(fit, "use_t", None)
    if use_t is None:
        use_t = kind is InputKind.LINEAR_MODEL
    stat = "t" if use_t else "z"
    return pd.DataFrame(
        {
            "Estimate": np.asarray(fit.params, dtype=float),
            "Std. Error": np.asarray(fit.bse, dtype=float),
            f"{stat} value": np.asarray(fit.tvalues, dtype=float),
            f"Pr(>|{stat}|)": np.asarray(fit.pvalues, dtype=float),
        },
        index=_param_names(fit),
    )


def _contingency_table(data: ContingencyTable) -> NormalizedTable:
    n_rows, n_cols = len(data.row_labels), len(data.col_labels)
    if len(data.counts) != n_rows or any(len(r) != n_cols for r in data.counts):
        raise UnsupportedShape(
            "Contingency counts do not match their labels",
            {"field": "counts", "value": f"{n_rows} row labels x {n_cols} col labels"},
        )
    header = [""] + [_label(c) for c in data.col_labels]
    rows = [[to_cell(v) for v in row] for row in data.counts]
    return _table(header, _prepend_column(rows, [_label(r) for r in data.row_labels]))


def _fallback_frame(data: Any) -> pd.DataFrame:
    """Best-effort coercion of an arbitrary object into a frame."""
    try:
        if isinstance(data, np.ndarray):
            if data.ndim == 0:
                return pd.DataFrame([[data.item()]])
            return pd.DataFrame(data)
        if isinstance(data, pd.Series):
            return data.to_frame()
        if isinstance(data, Mapping):
            try:
                return pd.DataFrame(data)
            except ValueError:
                return pd.DataFrame([dict(data)])
        if data is None or isinstance(data, (str, bytes)) or np.isscalar(data):
            return pd.DataFrame([[data]])
        try:
            items = list(data)
        except TypeError:
            return pd.DataFrame([[data]])
        return pd.DataFrame(items)
    except (TypeError, ValueError) as e:
        raise UnsupportedShape(
            f"Cannot coerce {type(data).__name__} into a grid: {e}",
            {"field": "data", "value": type(data).__name__},
        )


# ── Public API ────────────────────────────────────────────────────────────────

def normalize(
    data: Any,
    col_names: bool = True,
    row_names: bool = False,
    contingency_arm: bool = False,
) -> Tuple[NormalizedTable, bool, bool]:
    """
    Normalize data into a NormalizedTable.

    Returns (table, effective_col_names, effective_row_names). The header is
    present iff effective_col_names is True; when effective_row_names is True
    the row labels have been prepended as an unlabeled first column.
    """
    kind = classify(data)
    if kind is InputKind.CONTINGENCY and not contingency_arm:
        kind = InputKind.FALLBACK

    labels: List[str] = []
    if kind is InputKind.DATASET:
        table, labels = _from_frame(_dataset_frame(data))
    elif kind in (InputKind.LINEAR_MODEL, InputKind.GLM):
        table = _with_label_column(coefficient_frame(data, kind))
        row_names = False
    elif kind is InputKind.ANOVA:
        table = _with_label_column(data)
        row_names = False
    elif kind is InputKind.CONTINGENCY:
        table = _contingency_table(data)
        row_names = False
    else:
        table, labels = _from_frame(_fallback_frame(data))
        col_names = False
        row_names = False

    if row_names:
        table = _table([""] + table.header, _prepend_column(table.rows, labels))

    if not col_names:
        table.header = None
    return table, col_names, row_names
