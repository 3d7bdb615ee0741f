"""
commscope/aggregators/partner_aggregator.py
Per-partner aggregation of call and message rows.

For every row the parties/participants cell is run through the identity
extractor; each partner found contributes once to that partner's totals.

Calls:    count, outgoing/incoming split by the row's Direction, duration.
Messages: count only.

NOTE ON ROLE PREFIXES:
  From: / To: / General: are parsed off call lines but do not change the
  incoming/outgoing split - Direction alone decides. Observed behaviour of
  the exports this was calibrated on; revisit if a prefix should invert it.

Result: partners sorted by total count descending (stable on ties),
truncated to TOP_N. Aggregates live for one call only.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Set

from commscope.extractors.identity import extract_identities
from commscope.models.record import CallPartner, CallRow, MessagePartner, MessageRow

logger = logging.getLogger(__name__)

TOP_N = 15

DIRECTION_INCOMING = 'Incoming'
DIRECTION_OUTGOING = 'Outgoing'

NAME_ARTIFACT = re.compile(r'_x000d_', re.IGNORECASE)


# ── DURATION ─────────────────────────────────────────────────

def parse_duration(duration: str) -> int:
    """
    'HH:MM:SS' → seconds. 'MM:SS' is accepted too. Anything else is 0.
    """
    parts = (duration or '').strip().split(':')
    try:
        nums = [int(p) for p in parts]
    except ValueError:
        return 0
    if len(nums) == 3:
        return nums[0] * 3600 + nums[1] * 60 + nums[2]
    if len(nums) == 2:
        return nums[0] * 60 + nums[1]
    return 0


def format_duration(seconds: int) -> str:
    """Seconds → 'HH:MM:SS'. Hours are not wrapped at 24."""
    h, rem = divmod(max(int(seconds), 0), 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def clean_name(name: str) -> str:
    return NAME_ARTIFACT.sub('', name or '').strip()


# ── SOURCE FILTER ────────────────────────────────────────────

def filter_by_source(rows: Sequence, source: Optional[str]) -> List:
    """Keep rows whose Source equals `source`, case-insensitively."""
    if not source:
        return list(rows)
    wanted = source.strip().lower()
    return [r for r in rows if (r.source or '').lower() == wanted]


# ── AGGREGATION ENGINE ───────────────────────────────────────

def aggregate_calls(
    rows:          Sequence[CallRow],
    platform_hint: Optional[str] = None,
    limit:         Optional[int] = TOP_N,
) -> List[CallPartner]:
    """
    Build one CallPartner per identifier found in the rows' Parties.

    Args:
        rows:          Call rows, already filtered to the wanted source.
        platform_hint: Selects the extraction rule set (snapchat/whatsapp/signal/other).
        limit:         Keep only the busiest partners; None keeps all.

    Returns:
        List[CallPartner], sorted descending by total_count.
    """
    partners: Dict[str, CallPartner] = {}
    names:    Dict[str, Set[str]]   = {}

    for row in rows:
        seconds = parse_duration(row.duration)
        for ident in extract_identities(row.parties, platform_hint, with_roles=True):
            p = partners.get(ident.identifier)
            if p is None:
                p = partners[ident.identifier] = CallPartner(identifier=ident.identifier)
                names[ident.identifier] = set()

            p.total_count += 1
            if row.direction == DIRECTION_INCOMING:
                p.incoming_count += 1
            elif row.direction == DIRECTION_OUTGOING:
                p.outgoing_count += 1
            p.total_duration_sec += seconds

            _add_name(names[ident.identifier], ident.display_name)

    result = _finalize(partners, names, limit)
    logger.info(f"Call partners: {len(partners)} found, {len(result)} returned")
    return result


def aggregate_messages(
    rows:          Sequence[MessageRow],
    platform_hint: Optional[str] = None,
    limit:         Optional[int] = TOP_N,
) -> List[MessagePartner]:
    """Build one MessagePartner per identifier found in the rows' Participants."""
    partners: Dict[str, MessagePartner] = {}
    names:    Dict[str, Set[str]]      = {}

    for row in rows:
        for ident in extract_identities(row.participants, platform_hint):
            p = partners.get(ident.identifier)
            if p is None:
                p = partners[ident.identifier] = MessagePartner(identifier=ident.identifier)
                names[ident.identifier] = set()
            p.total_count += 1
            _add_name(names[ident.identifier], ident.display_name)

    result = _finalize(partners, names, limit)
    logger.info(f"Message partners: {len(partners)} found, {len(result)} returned")
    return result


# ── HELPERS ──────────────────────────────────────────────────

def _add_name(bucket: Set[str], display_name: str) -> None:
    cleaned = clean_name(display_name)
    if cleaned:
        bucket.add(cleaned)


def _finalize(partners: Dict, names: Dict[str, Set[str]], limit: Optional[int]) -> List:
    for identifier, p in partners.items():
        p.name = ', '.join(sorted(names.get(identifier, ())))

    # dicts keep insertion order and sort() is stable, so ties stay first-seen
    ranked = sorted(partners.values(), key=lambda p: p.total_count, reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return ranked
