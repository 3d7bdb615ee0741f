"""
commscope/api.py
─────────────────────────────────────────────────────────────────────────────
commscope - Dual-mode API layer

TWO USAGE MODES:
  1. Importable module:
         from commscope.api import CommScopeAPI
         api = CommScopeAPI()
         result = api.run_analysis(xlsx_bytes, kind="call", source="WhatsApp")

  2. FastAPI HTTP server (dashboards upload the export via fetch()):
         python -m commscope.api                  # default: port 8765
         python -m commscope.api --port 9000
         uvicorn commscope.api:app --port 8765

ENDPOINTS:
  POST /analyze/{kind}    - multipart `file` + ?source= → top partners
  POST /platforms/{kind}  - multipart `file` → rows per platform
  POST /export/{kind}     - multipart `file` + ?source= → xlsx download
  GET  /health            - liveness

kind is one of: call, message, contact.

The upload read (`await file.read()`) is the only asynchronous step; the
analysis itself runs synchronously on the bytes in memory. Nothing is kept
between requests.

CORS: localhost-only (127.0.0.1 / ::1). Not exposed to network by default.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from commscope import __version__
from commscope.aggregators.partner_aggregator import TOP_N
from commscope.errors import CommScopeError
from commscope.exporters.excel_exporter import KIND_LABELS, build_filename, write_workbook
from commscope.processor import analyze, analyze_platforms, filter_contacts, load, to_records

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# ── OPTIONAL FASTAPI IMPORT ─────────────────────────────────────────────────
# FastAPI is an optional dependency - the CommScopeAPI class works without it.

try:
    from fastapi import FastAPI, File, HTTPException, Query, UploadFile
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import Response
    from pydantic import BaseModel
    _FASTAPI_AVAILABLE = True
except ImportError:  # pragma: no cover
    _FASTAPI_AVAILABLE = False
    FastAPI = None          # type: ignore
    HTTPException = None    # type: ignore
    BaseModel = object      # type: ignore


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS
# ═══════════════════════════════════════════════════════════════════════════

class CommScopeAPI:
    """
    Pure-Python wrapper around the processing core.
    No HTTP layer required - import and call directly.

    Usage:
        api = CommScopeAPI(top_n=15)
        summary   = api.run_analysis(data, kind="call", source="Signal")
        platforms = api.run_platforms(data, kind="message")
        filename, xlsx = api.export_workbook(data, kind="call", source="Signal")
    """

    def __init__(self, top_n: int = TOP_N):
        self.top_n = top_n

    def run_analysis(
        self,
        data: bytes,
        kind: str = "call",
        source: Optional[str] = None,
        name_contains: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Load the export and return a summary dict:
        kind, source, rows_loaded, platforms (records), partners (records).
        Contact lists return filtered contact rows as `partners`.
        """
        log = load(data, kind, source)
        if kind == "contact":
            results = filter_contacts(log, name_contains=name_contains, source=source)
        else:
            results = analyze(log, limit=self.top_n)

        summary = {
            "kind":        kind,
            "source":      source,
            "rows_loaded": log.row_count,
            "platforms":   to_records(analyze_platforms(log), kind),
            "partners":    to_records(results, kind),
        }
        logger.info(
            f"Analysis complete | kind={kind} | rows={log.row_count} | "
            f"partners={len(summary['partners'])}"
        )
        return summary

    def run_platforms(self, data: bytes, kind: str = "call") -> list:
        log = load(data, kind)
        return to_records(analyze_platforms(log), kind)

    def export_workbook(
        self,
        data: bytes,
        kind: str = "call",
        source: Optional[str] = None,
    ) -> Tuple[str, bytes]:
        """Return (download filename, xlsx bytes) for the partner analysis."""
        summary = self.run_analysis(data, kind, source)
        content = write_workbook(summary["partners"], sheet_name=KIND_LABELS[kind])
        return build_filename(kind, source), content


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# Only constructed when FastAPI is available
# ═══════════════════════════════════════════════════════════════════════════

def _build_app(top_n: int = TOP_N) -> "FastAPI":  # type: ignore
    """Build and return the FastAPI application instance."""
    if not _FASTAPI_AVAILABLE:
        raise ImportError(
            "FastAPI is not installed. Run: pip install fastapi uvicorn python-multipart"
        )

    _api = CommScopeAPI(top_n=top_n)

    _app = FastAPI(
        title       = "commscope API",
        description = "Partner analysis for extraction-tool spreadsheet exports",
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:8765",
            "http://127.0.0.1",
            "http://127.0.0.1:8765",
            "null",   # file:// origin
        ],
        allow_methods     = ["GET", "POST", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    async def _read_upload(file: UploadFile) -> bytes:
        try:
            return await file.read()
        finally:
            await file.close()

    # ── RESPONSE MODELS ─────────────────────────────────────────────────

    class AnalysisResponse(BaseModel):
        kind:        str
        source:      Optional[str] = None
        rows_loaded: int
        platforms:   List[Dict[str, Any]]
        partners:    List[Dict[str, Any]]

    class PlatformsResponse(BaseModel):
        count:     int
        platforms: List[Dict[str, Any]]

    class HealthResponse(BaseModel):
        status:  str
        version: str

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.post("/analyze/{kind}", summary="Top partners for one platform",
               response_model=AnalysisResponse)
    async def analyze_endpoint(
        kind:          str,
        file:          UploadFile    = File(...),
        source:        Optional[str] = Query(None, description="Platform, e.g. WhatsApp"),
        name_contains: Optional[str] = Query(None, description="Contact kind only"),
    ):
        data = await _read_upload(file)
        try:
            return _api.run_analysis(data, kind, source, name_contains)
        except (CommScopeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @_app.post("/platforms/{kind}", summary="Rows per platform",
               response_model=PlatformsResponse)
    async def platforms_endpoint(kind: str, file: UploadFile = File(...)):
        data = await _read_upload(file)
        try:
            platforms = _api.run_platforms(data, kind)
        except (CommScopeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {"count": len(platforms), "platforms": platforms}

    @_app.post("/export/{kind}", summary="Download partner analysis as xlsx")
    async def export_endpoint(
        kind:   str,
        file:   UploadFile    = File(...),
        source: Optional[str] = Query(None),
    ):
        data = await _read_upload(file)
        try:
            filename, content = _api.export_workbook(data, kind, source)
        except (CommScopeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return Response(
            content    = content,
            media_type = XLSX_MEDIA_TYPE,
            headers    = {"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @_app.get("/health", summary="Health check", response_model=HealthResponse)
    def health():
        return {"status": "ok", "version": __version__}

    return _app


# Module-level app instance - used by uvicorn commscope.api:app
if _FASTAPI_AVAILABLE:
    app = _build_app()
else:
    app = None  # type: ignore


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT - python -m commscope.api
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import argparse
    import sys

    from commscope.config import load_config

    config = load_config()
    parser = argparse.ArgumentParser(
        prog        = "commscope.api",
        description = "commscope API server - serves dashboards on localhost",
    )
    parser.add_argument("--port", type=int, default=config["api_port"],
                        help="Port to bind (default: 8765)")
    parser.add_argument("--host", type=str, default=config["api_host"],
                        help="Host to bind - DO NOT change to 0.0.0.0 on shared networks")
    parser.add_argument("--top", type=int, default=config["top_n"],
                        help="Partners returned per analysis (default: 15)")
    args = parser.parse_args()

    if not _FASTAPI_AVAILABLE:
        print("ERROR: FastAPI not installed.\nRun:  pip install fastapi uvicorn python-multipart", file=sys.stderr)
        sys.exit(1)

    import uvicorn

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )
    uvicorn.run(_build_app(top_n=args.top), host=args.host, port=args.port, log_level="info")
