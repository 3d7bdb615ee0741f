"""
commscope/report.py
Structured analysis report for case files.

Input: a LoadedLog plus the partners and platform tallies computed from it.
Output: Report dataclass, JSON-serializable through report_to_dict().
Only aggregates are carried - no message bodies, no raw rows.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from commscope import __version__
from commscope.models.record import CallPartner, LoadedLog, PlatformCount
from commscope.processor import to_records


@dataclass
class SummaryStats:
    kind:               str
    source:             Optional[str]
    rows_loaded:        int = 0
    partners_reported:  int = 0
    interactions:       int = 0     # sum of total_count over reported partners
    total_duration_sec: int = 0     # calls only


@dataclass
class Report:
    summary:      SummaryStats
    partners:     List[Dict[str, Any]] = field(default_factory=list)
    platforms:    List[Dict[str, Any]] = field(default_factory=list)
    generated_at: str = ''
    tool_version: str = __version__


def build_report(
    log:      LoadedLog,
    partners: Sequence,
    tallies:  Sequence[PlatformCount],
    source:   Optional[str] = None,
) -> Report:
    """Build a Report from one analysis pass. `partners` is the ranked list."""
    summary = SummaryStats(
        kind               = log.kind,
        source             = source or log.source_hint,
        rows_loaded        = log.row_count,
        partners_reported  = len(partners),
        interactions       = sum(getattr(p, 'total_count', 0) for p in partners),
        total_duration_sec = sum(p.total_duration_sec for p in partners if isinstance(p, CallPartner)),
    )

    return Report(
        summary      = summary,
        partners     = to_records(partners, log.kind) if partners else [],
        platforms    = to_records(tallies, log.kind) if tallies else [],
        generated_at = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    )


def report_to_dict(report: Report) -> Dict:
    """Plain JSON-serializable dict of the Report (records are already dicts)."""
    return asdict(report)
