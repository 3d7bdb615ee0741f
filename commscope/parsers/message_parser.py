"""
commscope/parsers/message_parser.py
Filters and normalizes conversation/message rows.

Unlike calls, 'Native Messages' is a real platform here and is kept.
A row survives only if at least one content column is filled in.
Source is NOT defaulted at load - platform tallies default it later.
"""

import logging
import re
from typing import Any, Dict, List, Sequence

from commscope.models.record import MessageRow
from commscope.parsers.sheet_reader import cell_text, rows_to_mappings

logger = logging.getLogger(__name__)

EXCLUDED_SOURCES = re.compile(r'Recents|InteractionC|KnowledgeC|Threads', re.IGNORECASE)
DEFAULT_SOURCE = 'Native Messages'

CONTENT_FIELDS = [
    'Body',
    'Timestamp: Time',
    'Timestamp: Date',
    'From',
    'To',
    'Participants Timestamps',
    'Attachment #1',
    'Attachment #1 - Details',
]


def parse_message_rows(raw_rows: Sequence[Dict[str, Any]]) -> List[MessageRow]:
    """Apply the message filter/normalize rules to header-keyed rows."""
    records: List[MessageRow] = []
    excluded = empty = 0

    for raw in raw_rows:
        source = cell_text(raw.get('Source'))
        if EXCLUDED_SOURCES.search(source):
            excluded += 1
            continue
        if not _has_content(raw):
            empty += 1
            continue

        records.append(MessageRow(
            number                  = cell_text(raw.get('#')),
            source                  = source,
            participants            = cell_text(raw.get('Participants')),
            time                    = cell_text(raw.get('Timestamp: Time')),
            date                    = cell_text(raw.get('Timestamp: Date')),
            sender                  = cell_text(raw.get('From')),
            recipient               = cell_text(raw.get('To')),
            body                    = cell_text(raw.get('Body')),
            participants_timestamps = cell_text(raw.get('Participants Timestamps')),
            attachment              = cell_text(raw.get('Attachment #1')),
            attachment_details      = cell_text(raw.get('Attachment #1 - Details')),
        ))

    logger.info(
        f"Messages kept: {len(records)} | excluded sources: {excluded} | "
        f"empty rows: {empty}"
    )
    return records


def parse_message_sheet(sheet_rows: Sequence[Any]) -> List[MessageRow]:
    """Ingest a decoded sheet (title row, header row, data) into MessageRows."""
    return parse_message_rows(rows_to_mappings(sheet_rows))


def _has_content(raw: Dict[str, Any]) -> bool:
    return any(cell_text(raw.get(col)).strip() for col in CONTENT_FIELDS)
