"""
commscope/aggregators/platform_tally.py
Rows per source platform - an overview independent of partner extraction.
"""

import logging
from collections import Counter
from typing import List, Sequence

from commscope.models.record import PlatformCount

logger = logging.getLogger(__name__)


def tally_platforms(rows: Sequence, default_source: str) -> List[PlatformCount]:
    """
    Count rows grouped by Source, empty Source counted as `default_source`.
    Sorted ascending by count; equal counts keep first-seen order.
    """
    counts = Counter((r.source or default_source) for r in rows)
    tallies = [PlatformCount(platform=name, count=n) for name, n in counts.items()]
    tallies.sort(key=lambda t: t.count)
    logger.info(f"Platform tally: {len(tallies)} platforms over {len(rows)} rows")
    return tallies


def count_contacts(rows: Sequence, default_source: str) -> List[PlatformCount]:
    """Contact-list volume per platform, in first-seen order (unsorted)."""
    counts = Counter((r.source or default_source) for r in rows)
    return [PlatformCount(platform=name, count=n) for name, n in counts.items()]
