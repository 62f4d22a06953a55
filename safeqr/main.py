# main.py

from __future__ import annotations

from typing import Optional

import os
import time
import json
import secrets
import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from safeqr.history import DateFilter, ScanHistory, ScanThrottle
from safeqr.models import (
    HistoryDeleteRequest,
    HistoryExportRequest,
    SanitizeRequest,
    ScanRequest,
    UrlAnalyzeRequest,
    UrlAnalyzeResponse,
    WifiRequest,
    WifiResponse,
)
from safeqr.qr_scanner.qr_engine import process_payload
from safeqr.qr_scanner.qr_utils import ParsedScan, ScanKind
from safeqr.qr_scanner.wifi import parse_wifi
from safeqr.url_sanitizer import sanitize_url
from safeqr.url_scanner import analyze_url
from safeqr.utils.reason_cleaner import clean_reasons


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


AGGRESSIVE_RISK_ANALYSIS = _env_flag("AGGRESSIVE_RISK_ANALYSIS", True)
SAVE_TO_HISTORY = _env_flag("SAVE_TO_HISTORY", True)
SCAN_DEDUPE_SECONDS = float(os.getenv("SCAN_DEDUPE_SECONDS", "3.0"))
HISTORY_MAX_RECORDS = int(os.getenv("HISTORY_MAX_RECORDS", "500"))
MAX_PAYLOAD_CHARS = int(os.getenv("MAX_PAYLOAD_CHARS", "10000"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")
SENTRY_DSN = os.getenv("SENTRY_DSN", "")

# Init Sentry if configured
if SENTRY_DSN:
    sentry_sdk.init(dsn=SENTRY_DSN, traces_sample_rate=0.2)

# ---------------------------------------------------------
# FastAPI + state
# ---------------------------------------------------------
logger = logging.getLogger("safeqr")
logging.basicConfig(level=logging.INFO, format="%(message)s")

app = FastAPI(title="SafeQR API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

HISTORY = ScanHistory(max_records=HISTORY_MAX_RECORDS)
THROTTLE = ScanThrottle(window_seconds=SCAN_DEDUPE_SECONDS)


# Return JSON for unexpected errors/validation failures to avoid empty/HTML responses
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(json.dumps({"event": "error", "path": str(request.url), "error": str(exc)}))
    return JSONResponse({"error": "Internal server error."}, status_code=500)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Invalid request.", "detail": exc.errors()}, status_code=422)


# Global headers middleware for security headers + request id
@app.middleware("http")
async def security_headers(request: Request, call_next):
    request_id = secrets.token_hex(8)
    request.state.request_id = request_id
    start_time = time.time()
    response = await call_next(request)
    duration = round((time.time() - start_time) * 1000, 2)
    log_payload = {
        "event": "request",
        "request_id": request_id,
        "path": request.url.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration,
    }
    logger.info(json.dumps(log_payload))
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------
def _aggressive(requested: Optional[bool]) -> bool:
    return AGGRESSIVE_RISK_ANALYSIS if requested is None else requested


def _too_large(text: str) -> Optional[JSONResponse]:
    if len(text) > MAX_PAYLOAD_CHARS:
        return JSONResponse(
            {"error": f"Input too large. Max {MAX_PAYLOAD_CHARS:,} characters."},
            status_code=413,
        )
    return None


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/scan")
def scan(body: ScanRequest):
    content = body.content.strip()
    if not content:
        return JSONResponse({"error": "content is empty"}, status_code=400)
    too_large = _too_large(content)
    if too_large:
        return too_large

    if not THROTTLE.should_accept(content):
        logger.info(json.dumps({"event": "duplicate_scan", "preview": content[:40]}))
        return JSONResponse(
            {"error": "Duplicate scan ignored.", "duplicate": True},
            status_code=409,
        )

    result = process_payload(content, aggressive=_aggressive(body.aggressive))

    record_id = None
    if SAVE_TO_HISTORY:
        parsed = ParsedScan(raw=result["raw"], kind=ScanKind(result["kind"]),
                            normalized_url=result["normalized_url"])
        record = HISTORY.add(parsed, symbology=body.symbology)
        record_id = record.id

    logger.info(json.dumps({
        "event": "scan",
        "kind": result["kind"],
        "level": (result["risk"] or {}).get("level"),
        "saved": record_id is not None,
    }))
    result["history_id"] = record_id
    return result


@app.post("/analyze-url", response_model=UrlAnalyzeResponse)
def analyze_url_endpoint(body: UrlAnalyzeRequest):
    raw = body.raw if body.raw is not None else body.url
    too_large = _too_large(raw)
    if too_large:
        return too_large

    report = analyze_url(body.url, raw, aggressive=_aggressive(body.aggressive))
    return {
        "flags": list(report.flags),
        "level": report.level.value,
        "explanations": clean_reasons(report.flags),
    }


@app.post("/wifi", response_model=WifiResponse)
def wifi(body: WifiRequest):
    credential = parse_wifi(body.content.strip())
    if credential is None:
        return {"wifi": None, "join_available": False}
    return {"wifi": credential.to_dict(), "join_available": True}


@app.post("/sanitize")
def sanitize(body: SanitizeRequest):
    sanitized = sanitize_url(body.url)
    return {"url": body.url, "sanitized": sanitized, "changed": sanitized != body.url}


@app.get("/scan-history")
def scan_history(
    kind: Optional[str] = None,
    favorites_only: bool = False,
    date_filter: DateFilter = DateFilter.ALL,
    q: str = "",
    limit: int = 100,
):
    records = HISTORY.filter(
        kind=kind,
        favorites_only=favorites_only,
        date_filter=date_filter,
        query=q,
    )
    return {
        "records": [r.to_dict() for r in records[: max(limit, 0)]],
        "kinds": HISTORY.kind_options(),
    }


@app.post("/scan-history/{record_id}/favorite")
def toggle_favorite(record_id: str):
    try:
        record = HISTORY.toggle_favorite(record_id)
    except KeyError:
        return JSONResponse({"error": "Scan not found."}, status_code=404)
    return record.to_dict()


@app.post("/scan-history/delete")
def delete_history(body: HistoryDeleteRequest):
    if body.all:
        return {"deleted": HISTORY.clear()}
    return {"deleted": HISTORY.delete(body.ids)}


@app.post("/scan-history/export")
def export_history(body: HistoryExportRequest):
    return {"text": HISTORY.export_text(body.ids)}
