# safeqr/qr_scanner/qr_utils.py

"""
Helpers for classifying decoded QR / barcode payloads.

    parse_scan(input: str) -> ParsedScan

Every string maps to some ParsedScan; the worst case is kind "text".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit


class ScanKind(str, Enum):
    URL = "url"
    WIFI = "wifi"
    EMAIL = "email"
    PHONE = "phone"
    SMS = "sms"
    GEO = "geo"
    VCARD = "vcard"
    TEXT = "text"


@dataclass(frozen=True)
class ParsedScan:
    raw: str
    kind: ScanKind
    normalized_url: Optional[str] = None   # only set for kind == url

    def __post_init__(self) -> None:
        if (self.kind is ScanKind.URL) != (self.normalized_url is not None):
            raise ValueError("normalized_url must be set if and only if kind is url")

    def to_dict(self) -> dict:
        return {
            "raw": self.raw,
            "kind": self.kind.value,
            "normalized_url": self.normalized_url,
        }


# -------------------------------------------------------------------
# HEURISTICS
# -------------------------------------------------------------------

PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 16

# characters people actually type into a dialable number
_DIAL_CHARS = frozenset("0123456789+-()")


def _has_whitespace(text: str) -> bool:
    return any(c.isspace() for c in text)


def _looks_like_email(raw: str) -> bool:
    return "@" in raw and "." in raw and not _has_whitespace(raw)


def _looks_like_phone(raw: str) -> bool:
    if not raw or any(c not in _DIAL_CHARS for c in raw):
        return False
    stripped = [c for c in raw if c.isdigit() or c == "+"]
    return PHONE_MIN_DIGITS <= len(stripped) <= PHONE_MAX_DIGITS


def _has_scheme(raw: str) -> bool:
    try:
        return bool(urlsplit(raw).scheme)
    except ValueError:
        return False


def normalize_url(raw: str) -> Optional[str]:
    """
    Turn a URL-like string into a fully-qualified URL.

    Returns None when the string is not URL-like. Strings with a scheme are
    returned untouched; "www." hosts and bare dotted strings such as
    "example.com/path" get "https://" prepended.
    """
    if not raw or _has_whitespace(raw):
        return None

    if _has_scheme(raw):
        return raw

    if raw.lower().startswith("www."):
        return "https://" + raw

    if "." in raw:
        return "https://" + raw

    return None


# -------------------------------------------------------------------
# CLASSIFICATION
# -------------------------------------------------------------------

def parse_scan(input: str) -> ParsedScan:
    """
    Classify a decoded payload. First match wins, so the order below matters.
    """
    raw = input.strip()
    lower = raw.lower()

    if lower.startswith("wifi:"):
        return ParsedScan(raw=raw, kind=ScanKind.WIFI)

    if lower.startswith("begin:vcard"):
        return ParsedScan(raw=raw, kind=ScanKind.VCARD)

    if lower.startswith("mailto:") or _looks_like_email(raw):
        return ParsedScan(raw=raw, kind=ScanKind.EMAIL)

    if lower.startswith("tel:") or _looks_like_phone(raw):
        return ParsedScan(raw=raw, kind=ScanKind.PHONE)

    if lower.startswith(("sms:", "smsto:")):
        return ParsedScan(raw=raw, kind=ScanKind.SMS)

    if lower.startswith("geo:"):
        return ParsedScan(raw=raw, kind=ScanKind.GEO)

    url = normalize_url(raw)
    if url is not None:
        return ParsedScan(raw=raw, kind=ScanKind.URL, normalized_url=url)

    return ParsedScan(raw=raw, kind=ScanKind.TEXT)
