from sheetdrop.borders import decorate
from sheetdrop.broadcast import broadcast
from sheetdrop.config import ExportConfig
from sheetdrop.engine import export, write_xlsx
from sheetdrop.models import BorderMode, ContingencyTable
from sheetdrop.normalize import normalize
from sheetdrop.parsing import resolve
from sheetdrop.styles import HeaderStyle

__all__ = [
    "decorate",
    "broadcast",
    "ExportConfig",
    "export",
    "write_xlsx",
    "BorderMode",
    "ContingencyTable",
    "normalize",
    "resolve",
    "HeaderStyle",
]
