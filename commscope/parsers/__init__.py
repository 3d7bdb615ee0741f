"""
commscope/parsers - sheet ingestion and per-kind row filtering.
"""

from commscope.parsers.call_parser import parse_call_rows, parse_call_sheet
from commscope.parsers.contact_parser import parse_contact_rows, parse_contact_sheet
from commscope.parsers.message_parser import parse_message_rows, parse_message_sheet

__all__ = [
    "parse_call_rows",
    "parse_call_sheet",
    "parse_contact_rows",
    "parse_contact_sheet",
    "parse_message_rows",
    "parse_message_sheet",
]
