"""
commscope/report_export.py
JSON export of one analysis pass.

The export carries the Report, the scan parameters (kind, source, top_n and
the load counters from LoadedLog.stats) and `records_sha256`: a digest of
the partner and platform records only. Two runs over the same spreadsheet
with the same parameters produce the same digest, whatever their
generated_at timestamps.
"""

import hashlib
import json
import logging
from typing import Any, Dict, List, Optional

from commscope.models.record import LoadedLog
from commscope.report import Report, report_to_dict

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = "1.0"
DIGEST_FIELD = "records_sha256"


def scan_parameters(
    log:    LoadedLog,
    source: Optional[str] = None,
    top_n:  Optional[int] = None,
) -> Dict[str, Any]:
    """What was analysed: record kind, platform, limit and load counters."""
    raw  = log.stats.get('raw_rows', log.row_count)
    kept = log.stats.get('kept_rows', log.row_count)
    return {
        "kind":         log.kind,
        "source":       source or log.source_hint,
        "top_n":        top_n,
        "raw_rows":     raw,
        "kept_rows":    kept,
        "dropped_rows": raw - kept,
    }


def records_digest(partners: List[Dict[str, Any]], platforms: List[Dict[str, Any]]) -> str:
    """SHA-256 over the canonical JSON of the partner and platform records."""
    canonical = json.dumps(
        {"partners": partners, "platforms": platforms},
        sort_keys=True, separators=(",", ":"), ensure_ascii=False,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def export_to_dict(
    report: Report,
    log:    LoadedLog,
    top_n:  Optional[int] = None,
) -> Dict[str, Any]:
    body = report_to_dict(report)
    return {
        "export_format_version": EXPORT_FORMAT_VERSION,
        "report_metadata": {
            "generated_at":    report.generated_at,
            "tool_version":    report.tool_version,
            "scan_parameters": scan_parameters(log, report.summary.source, top_n),
        },
        "report":     body,
        DIGEST_FIELD: records_digest(body["partners"], body["platforms"]),
    }


def export_to_json(
    report: Report,
    log:    LoadedLog,
    top_n:  Optional[int] = None,
    indent: Optional[int] = 2,
) -> str:
    export = export_to_dict(report, log, top_n)
    logger.info(
        f"JSON export | kind={log.kind} | partners={len(export['report']['partners'])} | "
        f"digest={export[DIGEST_FIELD][:12]}"
    )
    return json.dumps(export, indent=indent, ensure_ascii=False)


def verify_records_digest(export: Dict[str, Any]) -> bool:
    """Recompute the records digest of a parsed export. Missing pieces fail."""
    claimed = export.get(DIGEST_FIELD)
    body = export.get("report")
    if not claimed or not isinstance(body, dict):
        return False
    return records_digest(body.get("partners", []), body.get("platforms", [])) == claimed
