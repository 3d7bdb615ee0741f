"""
commscope/processor.py
Public surface of the processing core.

    log      = load(xlsx_bytes, kind='call', source_hint='WhatsApp')
    tallies  = analyze_platforms(log)
    partners = analyze(log)                 # hint from load
    partners = analyze(log, 'Signal')       # or an explicit one
    export_to_excel(partners, 'Appels_WhatsApp.xlsx', kind='call')

load() returns an immutable LoadedLog; every analysis takes it as an
argument. Nothing is cached between calls, so a LoadedLog can be analysed
any number of times in any order.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from commscope.aggregators.partner_aggregator import (
    TOP_N,
    aggregate_calls,
    aggregate_messages,
    filter_by_source,
)
from commscope.aggregators.platform_tally import count_contacts, tally_platforms
from commscope.exporters.excel_exporter import (
    KIND_LABELS,
    STATS_SHEET,
    partners_to_records,
    tallies_to_records,
    write_workbook,
)
from commscope.models.record import RECORD_KINDS, LoadedLog, PlatformCount
from commscope.parsers import call_parser, contact_parser, message_parser
from commscope.parsers.sheet_reader import read_workbook_file, read_workbook_rows, rows_to_mappings

logger = logging.getLogger(__name__)

_ROW_PARSERS: Dict[str, Callable] = {
    'call':    call_parser.parse_call_rows,
    'message': message_parser.parse_message_rows,
    'contact': contact_parser.parse_contact_rows,
}
_TALLY_DEFAULTS = {
    'call':    call_parser.DEFAULT_SOURCE,
    'message': message_parser.DEFAULT_SOURCE,
    'contact': call_parser.DEFAULT_SOURCE,
}


# ── LOAD ─────────────────────────────────────────────────────

def load_rows(
    sheet_rows:  Sequence[Any],
    kind:        str,
    source_hint: Optional[str] = None,
) -> LoadedLog:
    """
    Ingest already-decoded sheet rows (title row, header row, data rows).
    Raises MalformedSheetError when the header row is missing or invalid.
    """
    _check_kind(kind)
    raw_rows = rows_to_mappings(sheet_rows)
    rows = _ROW_PARSERS[kind](raw_rows)
    return LoadedLog(
        kind        = kind,
        rows        = tuple(rows),
        source_hint = source_hint.lower() if source_hint else None,
        stats       = {'raw_rows': len(raw_rows), 'kept_rows': len(rows)},
    )


def load(data: bytes, kind: str, source_hint: Optional[str] = None) -> LoadedLog:
    """Decode xlsx bytes (first sheet) and ingest them. ReadFailure on bad bytes."""
    return load_rows(read_workbook_rows(data), kind, source_hint)


def load_file(path: Path, kind: str, source_hint: Optional[str] = None) -> LoadedLog:
    """Read an xlsx export from disk and ingest it."""
    log = load_rows(read_workbook_file(Path(path)), kind, source_hint)
    logger.info(f"Loaded {log.row_count} {kind} rows from {Path(path).name}")
    return log


# ── ANALYSIS ─────────────────────────────────────────────────

def analyze_platforms(log: LoadedLog) -> List[PlatformCount]:
    """
    Row count per platform over every loaded row. Call and message tallies
    are sorted ascending by count; contact volumes keep first-seen order.
    """
    default = _TALLY_DEFAULTS[log.kind]
    if log.kind == 'contact':
        return count_contacts(log.rows, default)
    return tally_platforms(log.rows, default)


def analyze(
    log:         LoadedLog,
    source_hint: Optional[str] = None,
    limit:       Optional[int] = TOP_N,
) -> list:
    """
    Top partners for one platform (or all rows when no hint is known).

    The hint - explicit, else the one given at load - both filters rows by
    Source (case-insensitive) and selects the identity extraction rules.
    """
    hint = source_hint.lower() if source_hint else log.source_hint
    rows = filter_by_source(log.rows, hint)

    if log.kind == 'call':
        return aggregate_calls(rows, hint, limit=limit)
    if log.kind == 'message':
        return aggregate_messages(rows, hint, limit=limit)
    raise ValueError("Contact lists have no partner analysis - use filter_contacts()")


def filter_contacts(
    log:           LoadedLog,
    name_contains: Optional[str] = None,
    source:        Optional[str] = None,
) -> list:
    """Contact rows whose Entries contain `name_contains` and whose Source is `source`."""
    if log.kind != 'contact':
        raise ValueError(f"filter_contacts() needs a contact log, got '{log.kind}'")
    rows = list(log.rows)
    if name_contains:
        needle = name_contains.lower()
        rows = [r for r in rows if needle in (r.entries or '').lower()]
    if source:
        rows = [r for r in rows if r.source == source]
    return rows


# ── EXPORT ───────────────────────────────────────────────────

def to_records(items: Sequence, kind: str) -> List[Dict[str, Any]]:
    """Flatten partners, contact rows or platform counts into export records."""
    _check_kind(kind)
    items = list(items)
    if items and all(isinstance(i, dict) for i in items):
        return items
    if items and all(isinstance(i, PlatformCount) for i in items):
        return tallies_to_records(items, kind)
    return partners_to_records(items)


def export_to_excel(
    items:    Sequence,
    filename: Path,
    kind:     str = 'call',
) -> bytes:
    """
    Write analysis output to an xlsx file. Partners land in a sheet named
    after the kind (Appels / Conversations / Contacts), tallies in
    'Statistiques'. Returns the workbook bytes.
    """
    items = list(items)
    records = to_records(items, kind)
    is_tally = bool(items) and isinstance(items[0], PlatformCount)
    sheet = STATS_SHEET if is_tally else KIND_LABELS[kind]
    return write_workbook(records, path=Path(filename), sheet_name=sheet)


def _check_kind(kind: str) -> None:
    if kind not in RECORD_KINDS:
        raise ValueError(f"Unknown record kind '{kind}' - expected one of {RECORD_KINDS}")
