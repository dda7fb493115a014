"""
sheetdrop/engine.py — Export orchestrator.

export() drives a list of SheetTargets through a backend:

  1. Plan every target (normalize, resolve, decorate). Pure; any error here
     aborts before a worksheet exists.
  2. Under the backend's exclusive lock, apply each plan in list order.
  3. Persist once, after every target succeeded.

write_xlsx() is the one-call entry point: it resolves defaults, broadcasts the
config over the inputs and calls export() with a fresh OpenpyxlBackend.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence

from .backend import Backend, OpenpyxlBackend
from .broadcast import build_targets, check_sheet_names
from .config import ExportConfig, resolve_defaults
from .errors import AppError, BackendFailure
from .models import ExportReport, SheetResult, SheetTarget
from .normalize import is_sheet_object
from .planner import plan_targets
from .writer import apply_sheet_plan


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, Any], None]


def export(
    targets: Sequence[SheetTarget],
    backend: Backend,
    file: str,
    overwrite: bool = True,
    contingency_arm: bool = False,
    creator: str = "",
    on_progress: Optional[ProgressCallback] = None,
) -> ExportReport:
    """
    Write every target to backend in order, then persist to file.

    All-or-nothing: planning for the whole batch happens before the first
    worksheet is created, and persist runs only after every target succeeded.
    Events "start", "result" and "done" are sent to on_progress.
    """
    def _emit(event: str, payload: Any) -> None:
        if on_progress is not None:
            try:
                on_progress(event, payload)
            except Exception:
                logger.warning("Progress callback failed on %r event", event, exc_info=True)

    logger.info("Exporting %d sheet(s) to %s", len(targets), file)
    check_sheet_names(list(backend.sheet_names()) + [t.name for t in targets])
    plans = plan_targets(targets, contingency_arm, backend.table_names())
    for plan in plans:
        logger.debug(
            "Planned %r: %d x %d at %s, header=%s, borders=%d, table=%s",
            plan.target.name, plan.table.row_count, plan.width, plan.anchor,
            plan.has_header, len(plan.borders), plan.table_name,
        )

    results: List[SheetResult] = []
    with backend.exclusive():
        if creator:
            backend.set_creator(creator)

        for plan in plans:
            name = plan.target.name
            _emit("start", {"sheet_name": name})
            try:
                result = apply_sheet_plan(backend, plan)
            except AppError:
                raise
            except Exception as e:
                raise BackendFailure(
                    f"Failed writing sheet {name!r}: {e}",
                    {"sheet": name},
                ) from e
            results.append(result)
            _emit("result", result)

        try:
            backend.persist(file, overwrite)
        except AppError:
            raise
        except Exception as e:
            raise BackendFailure(f"Could not save workbook: {e}", {"path": file}) from e

    report = ExportReport(path=file, results=results)
    _emit("done", report)
    logger.info("Export finished: %s", ", ".join(report.sheet_names))
    return report


def _split_inputs(x: Any, sheet_name: Any):
    """(inputs, names) for the call shapes of write_xlsx."""
    if isinstance(x, Mapping):
        return list(x.values()), ["" if k is None else str(k) for k in x.keys()]
    if isinstance(x, (list, tuple)) and isinstance(sheet_name, (list, tuple)):
        return list(x), list(sheet_name)
    if isinstance(x, (list, tuple)) and x and all(is_sheet_object(item) for item in x):
        # One sheet per frame/fit/table; unnamed ones become "Sheet i".
        names = None if sheet_name is None else [sheet_name] * len(x)
        return list(x), names
    if isinstance(sheet_name, (list, tuple)):
        sheet_name = sheet_name[0] if sheet_name else None
    return [x], [sheet_name]


def write_xlsx(
    x: Any,
    file: str,
    config: Optional[ExportConfig] = None,
    backend: Optional[Backend] = None,
    on_progress: Optional[ProgressCallback] = None,
    **overrides: Any,
) -> ExportReport:
    """
    Write x to an .xlsx file.

    x may be:
      - a mapping {sheet name: object} — one worksheet per entry;
      - a list/tuple of objects together with a list-valued sheet_name;
      - a list/tuple of frames, matrices, fits or tables: one worksheet each,
        named "Sheet 1", "Sheet 2", ... unless sheet_name is given;
      - any single object — one worksheet named by sheet_name ("Sheet 1").

    Keyword overrides are ExportConfig fields (camelCase and dotted aliases
    such as colNames / col.names are accepted). Each knob may be a scalar or a
    per-sheet list.
    """
    config = config or ExportConfig()
    if overrides:
        config = config.with_overrides(**overrides)
    config = resolve_defaults(config)

    inputs, names = _split_inputs(x, config.sheet_name)
    targets = build_targets(inputs, names, config)

    return export(
        targets,
        backend or OpenpyxlBackend(),
        file,
        overwrite=config.overwrite,
        contingency_arm=config.contingency_arm,
        creator=config.creator,
        on_progress=on_progress,
    )
