"""Workbook decoding for vehicle offer imports."""

import io
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .constants import MAX_ROWS

logger = logging.getLogger(__name__)


class SpreadsheetError(ValueError):
    """Raised when an uploaded workbook cannot be decoded into a sheet."""


@dataclass
class SheetData:
    """Decoded sheet: the header row plus data rows of loosely-typed cells."""

    headers: list[Any] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)


def _cell_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _is_blank(values: tuple[Any, ...] | list[Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in values)


def parse_xlsx(file_content: bytes) -> SheetData:
    """Parse XLSX file content into a header row and data rows.

    Uses openpyxl read_only mode and iterates rows lazily. The first
    worksheet holding at least one non-empty row is used; its first row
    is the header. Blank rows between data rows keep their position so
    row numbers line up with the workbook, trailing blank rows are dropped.

    Args:
        file_content: Raw XLSX file bytes.

    Returns:
        SheetData with rows padded to the header width.

    Raises:
        SpreadsheetError: If the file is not a readable workbook or has no
            non-empty sheet.
    """
    try:
        wb = load_workbook(filename=io.BytesIO(file_content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise SpreadsheetError(f"Could not read XLSX file: {e}") from e

    try:
        for ws in wb.worksheets:
            sheet = _read_sheet(ws)
            if sheet is not None:
                return sheet
    finally:
        wb.close()

    raise SpreadsheetError("XLSX file has no non-empty worksheet")


def _read_sheet(ws: Any) -> SheetData | None:
    row_iter = ws.iter_rows(values_only=True)

    headers: list[Any] | None = None
    for raw in row_iter:
        if not _is_blank(raw):
            headers = [_cell_value(v) for v in raw]
            break
    if headers is None:
        return None

    # Trim trailing empty header cells
    while headers and _is_blank([headers[-1]]):
        headers.pop()
    width = len(headers)

    rows: list[list[Any]] = []
    pending_blank: list[list[Any]] = []
    truncated = False
    for raw in row_iter:
        values = [_cell_value(v) for v in raw[:width]]
        values.extend([None] * (width - len(values)))
        if _is_blank(values):
            pending_blank.append(values)
            continue
        if len(rows) + len(pending_blank) >= MAX_ROWS:
            truncated = True
            break
        rows.extend(pending_blank)
        pending_blank = []
        rows.append(values)

    if truncated:
        logger.warning("Worksheet %r exceeds %d data rows; extra rows ignored", ws.title, MAX_ROWS)

    return SheetData(headers=headers, rows=rows)
