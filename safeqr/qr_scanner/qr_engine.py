# safeqr/qr_scanner/qr_engine.py

import json
import logging
from typing import Any, Dict
from urllib.parse import urlsplit

import idna
import tldextract

from ..url_scanner import analyze_url, is_high_risk_flag
from ..url_sanitizer import sanitize_url
from ..utils.reason_cleaner import clean_reasons
from .qr_utils import ParsedScan, ScanKind, parse_scan
from .wifi import parse_wifi

logger = logging.getLogger("safeqr")

# Bundled public-suffix snapshot only; never fetches over the network.
_tld_extract = tldextract.TLDExtract(suffix_list_urls=())

PREVIEW_CHARS = 140


# ---------------------------------------------------------
# HOST DISPLAY
# ---------------------------------------------------------
def display_host(host: str) -> str:
    """Unicode form of a punycode host, so look-alikes are visible to the user."""
    if not host:
        return host
    try:
        return idna.decode(host)
    except (idna.IDNAError, UnicodeError):
        return host


def extract_root(host: str) -> str:
    ext = _tld_extract(host)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}".lower()
    return host


# ---------------------------------------------------------
# URL PREVIEW
# ---------------------------------------------------------
def build_url_preview(url: str, raw: str, aggressive: bool = True) -> Dict[str, Any]:
    report = analyze_url(url, raw, aggressive=aggressive)

    try:
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
        scheme = parts.scheme.lower()
    except ValueError:
        host, scheme = "", ""

    return {
        "flags": list(report.flags),
        "level": report.level.value,
        "explanations": clean_reasons(report.flags),
        "high_risk_flags": [f for f in report.flags if is_high_risk_flag(f)],
        "host": host,
        "display_host": display_host(host),
        "root_domain": extract_root(host) if host else "",
        "scheme": scheme,
        "sanitized_url": sanitize_url(url),
    }


# ---------------------------------------------------------
# MAIN ENTRY
# ---------------------------------------------------------
def process_payload(raw: str, aggressive: bool = True) -> Dict[str, Any]:
    """
    Classify a decoded payload and attach whatever the result screen needs:
    a risk preview for URLs, decoded credentials for Wi-Fi.
    """
    parsed: ParsedScan = parse_scan(raw)

    result: Dict[str, Any] = parsed.to_dict()
    result["risk"] = None
    result["wifi"] = None
    result["join_available"] = False

    if parsed.kind is ScanKind.URL and parsed.normalized_url:
        result["risk"] = build_url_preview(parsed.normalized_url, parsed.raw, aggressive)

    elif parsed.kind is ScanKind.WIFI:
        credential = parse_wifi(parsed.raw)
        if credential is not None:
            result["wifi"] = credential.to_dict()
            result["join_available"] = True

    meta = {
        "kind": parsed.kind.value,
        "aggressive": aggressive,
        "level": (result["risk"] or {}).get("level"),
        "flag_count": len((result["risk"] or {}).get("flags", [])),
        "content_preview": parsed.raw[:PREVIEW_CHARS],
    }
    logger.info("[scan_classification] %s", json.dumps(meta))

    return result
