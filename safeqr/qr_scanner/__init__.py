# safeqr/qr_scanner/__init__.py

"""
QR payload interpreter package.

Exposes:

    parse_scan(input: str) -> ParsedScan
    parse_wifi(raw: str) -> WifiCredential | None
    process_payload(raw: str, aggressive: bool = True) -> dict

which:
- Classifies a decoded payload (url, wifi, email, phone, sms, geo, vcard, text)
- Normalizes URL-like payloads to a fully-qualified URL
- Decodes Wi-Fi credentials
- Runs URLs through the rule-based URL risk analyzer
"""

from .qr_engine import process_payload
from .qr_utils import ParsedScan, ScanKind, normalize_url, parse_scan
from .wifi import WifiCredential, parse_wifi
