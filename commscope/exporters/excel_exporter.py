"""
commscope/exporters/excel_exporter.py
Shapes analysis results into flat records and writes them to a
single-sheet xlsx workbook (openpyxl).

Record keys match the column headings investigators already know from the
dashboard exports (Identifier, Nombre_appels, Plateforme ...).
"""

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from commscope.aggregators.partner_aggregator import format_duration
from commscope.models.record import CallPartner, ContactRow, MessagePartner, PlatformCount

logger = logging.getLogger(__name__)

KIND_LABELS = {
    'call':    'Appels',
    'message': 'Conversations',
    'contact': 'Contacts',
}
COUNT_LABELS = {
    'call':    "Nombre d'appels",
    'message': 'Nombre de messages',
    'contact': 'Volume de contacts',
}
STATS_SHEET = 'Statistiques'
ALL_SOURCES = 'tous'

HEADER_FILL = '4472C4'
HEADER_TEXT = 'FFFFFF'
MAX_COLUMN_WIDTH = 50

Record = Dict[str, Any]


# ── RECORD SHAPING ───────────────────────────────────────────

def call_partner_to_record(p: CallPartner) -> Record:
    return {
        'Identifier':    p.identifier,
        'Name':          p.name,
        'Nombre_appels': p.total_count,
        'Appel_emis':    p.outgoing_count,
        'Appel_recu':    p.incoming_count,
        'Duree_totale':  format_duration(p.total_duration_sec),
    }


def message_partner_to_record(p: MessagePartner) -> Record:
    return {
        'Identifier':      p.identifier,
        'Name':            p.name,
        'Nombre_messages': p.total_count,
    }


def contact_to_record(c: ContactRow) -> Record:
    return {
        '#':                    c.number,
        'Name':                 c.name,
        'Entries':              c.entries,
        'Source':               c.source,
        'Account':              c.account,
        'Interaction Statuses': c.interaction_statuses,
        'Deleted':              c.deleted,
    }


def partners_to_records(partners: Sequence) -> List[Record]:
    """Flatten CallPartner / MessagePartner / ContactRow items."""
    records: List[Record] = []
    for p in partners:
        if isinstance(p, CallPartner):
            records.append(call_partner_to_record(p))
        elif isinstance(p, MessagePartner):
            records.append(message_partner_to_record(p))
        elif isinstance(p, ContactRow):
            records.append(contact_to_record(p))
        else:
            raise TypeError(f"Cannot export {type(p).__name__}")
    return records


def tallies_to_records(tallies: Sequence[PlatformCount], kind: str) -> List[Record]:
    label = COUNT_LABELS[kind]
    return [{'Plateforme': t.platform, label: t.count} for t in tallies]


def build_filename(kind: str, source: Optional[str] = None, ext: str = 'xlsx') -> str:
    """'<Kind>_<source or tous>.<ext>', e.g. Appels_WhatsApp.xlsx."""
    return f"{KIND_LABELS[kind]}_{source or ALL_SOURCES}.{ext}"


# ── WORKBOOK WRITER ──────────────────────────────────────────

def write_workbook(
    records:    Sequence[Record],
    path:       Optional[Path] = None,
    sheet_name: str = 'Sheet1',
) -> bytes:
    """
    Write records to a one-sheet workbook. Columns follow the key order of
    the records (first appearance wins). Returns the xlsx bytes; also
    writes them to `path` when given.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]

    columns = _columns(records)
    if columns:
        ws.append(columns)
        for rec in records:
            ws.append([rec.get(col) for col in columns])
        _format_header(ws)
        _auto_fit_columns(ws)

    buf = io.BytesIO()
    wb.save(buf)
    data = buf.getvalue()

    if path is not None:
        Path(path).write_bytes(data)
        logger.info(f"Exported {len(records)} rows → {path}")
    return data


def _columns(records: Sequence[Record]) -> List[str]:
    columns: List[str] = []
    for rec in records:
        for key in rec:
            if key not in columns:
                columns.append(key)
    return columns


def _format_header(ws: Worksheet) -> None:
    fill = PatternFill(start_color=HEADER_FILL, end_color=HEADER_FILL, fill_type='solid')
    font = Font(bold=True, color=HEADER_TEXT)
    for cell in ws[1]:
        cell.fill = fill
        cell.font = font
        cell.alignment = Alignment(horizontal='center', vertical='center')
    ws.freeze_panes = 'A2'


def _auto_fit_columns(ws: Worksheet) -> None:
    for column in ws.columns:
        longest = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(column[0].column)].width = min(
            longest + 2, MAX_COLUMN_WIDTH
        )
