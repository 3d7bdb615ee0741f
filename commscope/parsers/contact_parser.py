"""
commscope/parsers/contact_parser.py
Filters and normalizes contact-list rows. Same exclusion and
duplicate-marker rules as call logs; no composite-key dedup.
"""

import logging
from typing import Any, Dict, List, Sequence

from commscope.models.record import ContactRow
from commscope.parsers.call_parser import DEFAULT_SOURCE, DUPLICATE_MARKER, EXCLUDED_SOURCES
from commscope.parsers.sheet_reader import cell_text, rows_to_mappings

logger = logging.getLogger(__name__)


def parse_contact_rows(raw_rows: Sequence[Dict[str, Any]]) -> List[ContactRow]:
    records: List[ContactRow] = []

    for raw in raw_rows:
        source = cell_text(raw.get('Source'))
        if EXCLUDED_SOURCES.search(source):
            continue
        if DUPLICATE_MARKER.search(cell_text(raw.get('#'))):
            continue
        records.append(ContactRow(
            number               = cell_text(raw.get('#')),
            name                 = cell_text(raw.get('Name')),
            entries              = cell_text(raw.get('Entries')),
            source               = source or DEFAULT_SOURCE,
            account              = cell_text(raw.get('Account')),
            interaction_statuses = cell_text(raw.get('Interaction Statuses')),
            deleted              = cell_text(raw.get('Deleted')),
        ))

    logger.info(f"Contacts kept: {len(records)} of {len(raw_rows)}")
    return records


def parse_contact_sheet(sheet_rows: Sequence[Any]) -> List[ContactRow]:
    return parse_contact_rows(rows_to_mappings(sheet_rows))
