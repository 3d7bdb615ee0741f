"""
commscope/parsers/call_parser.py
Filters and normalizes call-log rows from an extraction-tool export.

Rules, in order:
  1. Drop rows whose Source names a pseudo-source (Recents, KnowledgeC...).
  2. Drop duplicate variants - rows whose '#' carries a "(n)" marker.
  3. Default empty Source to 'Natif', empty Parties to ''.
  4. Drop exact repeats of (Parties, Date, Time, Duration, Source),
     keeping the first occurrence.
Surviving rows keep their original relative order.
"""

import logging
import re
from typing import Any, Dict, List, Sequence

from commscope.models.record import CallRow
from commscope.parsers.sheet_reader import cell_text, rows_to_mappings

logger = logging.getLogger(__name__)

EXCLUDED_SOURCES = re.compile(
    r'Recents|InteractionC|KnowledgeC|Native Messages|Threads', re.IGNORECASE
)
DUPLICATE_MARKER = re.compile(r'\(\d+\)')
DEFAULT_SOURCE = 'Natif'


def parse_call_rows(raw_rows: Sequence[Dict[str, Any]]) -> List[CallRow]:
    """Apply the call-log filter/normalize/dedup rules to header-keyed rows."""
    records: List[CallRow] = []
    seen: set = set()
    excluded = duplicates = repeats = 0

    for raw in raw_rows:
        source = cell_text(raw.get('Source'))
        if EXCLUDED_SOURCES.search(source):
            excluded += 1
            continue
        if DUPLICATE_MARKER.search(cell_text(raw.get('#'))):
            duplicates += 1
            continue

        rec = CallRow(
            number     = cell_text(raw.get('#')),
            parties    = cell_text(raw.get('Parties')),
            date       = cell_text(raw.get('Date')),
            time       = cell_text(raw.get('Time')),
            duration   = cell_text(raw.get('Duration')).strip(),
            direction  = cell_text(raw.get('Direction')).strip(),
            source     = source or DEFAULT_SOURCE,
            video_call = cell_text(raw.get('Video call')),
            deleted    = cell_text(raw.get('Deleted')),
        )

        key = (rec.parties, rec.date, rec.time, rec.duration, rec.source)
        if key in seen:
            repeats += 1
            continue
        seen.add(key)
        records.append(rec)

    logger.info(
        f"Calls kept: {len(records)} | excluded sources: {excluded} | "
        f"duplicate markers: {duplicates} | repeated rows: {repeats}"
    )
    return records


def parse_call_sheet(sheet_rows: Sequence[Any]) -> List[CallRow]:
    """Ingest a decoded sheet (title row, header row, data) into CallRows."""
    return parse_call_rows(rows_to_mappings(sheet_rows))
