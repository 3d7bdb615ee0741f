"""
commscope/parsers/sheet_reader.py
Raw row ingestion for exported extraction-tool spreadsheets.

Sheet layout (first worksheet only):
  row 0   - report title, ignored
  row 1   - header names
  row 2.. - data rows

read_workbook_rows() is the tabular-reader adapter (openpyxl). It is the
only function here that touches the xlsx format; rows_to_mappings() works
on already-decoded cell values and performs no I/O.
"""

import io
import logging
import zipfile
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from commscope.errors import MalformedSheetError, ReadFailure

logger = logging.getLogger(__name__)

HEADER_ROW = 1
FIRST_DATA_ROW = 2

RawRow = Dict[str, Any]


def read_workbook_rows(data: bytes) -> List[List[Any]]:
    """
    Decode xlsx bytes and return every row of the first worksheet as a
    list of cell values. Raises ReadFailure if the bytes are not a workbook.
    """
    try:
        wb = load_workbook(io.BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ReadFailure(f"Unreadable workbook: {e}", cause=e) from e

    try:
        ws = wb.worksheets[0]
        rows = [list(r) for r in ws.iter_rows(min_row=1, values_only=True)]
    finally:
        wb.close()

    logger.debug(f"Read {len(rows)} raw rows from sheet '{ws.title}'")
    return rows


def read_workbook_file(path: Path) -> List[List[Any]]:
    """Read a workbook from disk. Any OS error surfaces as ReadFailure."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ReadFailure(f"File read error {Path(path).name}: {e}", cause=e) from e
    return read_workbook_rows(data)


def rows_to_mappings(sheet_rows: Sequence[Any]) -> List[RawRow]:
    """
    Zip each data row against the header row.

    Short rows leave the missing headers mapped to None; cells past the
    last header are dropped. Rows that are not sequences, or that hold no
    value at all, are discarded.
    """
    headers = _headers(sheet_rows)
    mappings: List[RawRow] = []
    skipped = 0

    for row in sheet_rows[FIRST_DATA_ROW:]:
        if not isinstance(row, (list, tuple)) or _is_blank(row):
            skipped += 1
            continue
        mapping: RawRow = {}
        for idx, header in enumerate(headers):
            if header is None:
                continue
            mapping[header] = row[idx] if idx < len(row) else None
        mappings.append(mapping)

    if skipped:
        logger.debug(f"Discarded {skipped} structurally invalid rows")
    return mappings


def cell_text(value: Any) -> str:
    """
    Render a cell value as the text the export shows. Empty cells become
    ''. Durations and times come back as HH:MM:SS.
    """
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, timedelta):
        total = int(value.total_seconds())
        h, rem = divmod(total, 3600)
        m, s = divmod(rem, 60)
        return f"{h:02d}:{m:02d}:{s:02d}"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime('%Y-%m-%d')
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, time):
        return value.strftime('%H:%M:%S')
    return str(value)


def _headers(sheet_rows: Sequence[Any]) -> List[Optional[str]]:
    if len(sheet_rows) <= HEADER_ROW:
        raise MalformedSheetError("Header row missing: sheet has fewer than 2 rows")

    raw = sheet_rows[HEADER_ROW]
    if not isinstance(raw, (list, tuple)):
        raise MalformedSheetError("Header row is not a sequence")

    headers: List[Optional[str]] = []
    for cell in raw:
        if cell is None:
            headers.append(None)
        elif isinstance(cell, str):
            headers.append(cell.strip() or None)
        else:
            raise MalformedSheetError(f"Header cell is not text: {cell!r}")

    if not any(headers):
        raise MalformedSheetError("Header row is empty")
    return headers


def _is_blank(row: Sequence[Any]) -> bool:
    return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in row)
