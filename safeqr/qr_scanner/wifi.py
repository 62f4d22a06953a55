# safeqr/qr_scanner/wifi.py

"""
Decoder for the Wi-Fi QR micro-format:

    WIFI:T:<WPA|WEP|nopass>;S:<ssid>;P:<password>;H:<true|false>;;

Special characters inside values are backslash-escaped (\\; \\: \\, \\\\).
Splitting is done with a single-pass scanner instead of a regex so that long
runs of backslashes cannot cause backtracking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

WIFI_PREFIX = "wifi:"


@dataclass(frozen=True)
class WifiCredential:
    ssid: str
    passphrase: Optional[str]
    is_wep: bool
    is_open: bool
    hidden: bool

    def to_dict(self) -> dict:
        return {
            "ssid": self.ssid,
            "passphrase": self.passphrase,
            "is_wep": self.is_wep,
            "is_open": self.is_open,
            "hidden": self.hidden,
        }


def _split_segments(body: str, sep: str = ";") -> List[str]:
    """Split on unescaped `sep`, keeping escape sequences intact."""
    segments: List[str] = []
    current: List[str] = []
    escaping = False

    for ch in body:
        if escaping:
            current.append(ch)
            escaping = False
        elif ch == "\\":
            current.append(ch)
            escaping = True
        elif ch == sep:
            segments.append("".join(current))
            current = []
        else:
            current.append(ch)

    if current:
        segments.append("".join(current))
    return segments


def _unescape(value: str) -> str:
    out: List[str] = []
    escaping = False

    for ch in value:
        if escaping:
            out.append(ch)
            escaping = False
        elif ch == "\\":
            escaping = True
        else:
            out.append(ch)

    # dangling backslash is kept as-is
    if escaping:
        out.append("\\")
    return "".join(out)


def parse_wifi(raw: str) -> Optional[WifiCredential]:
    """
    Parse a Wi-Fi payload into a WifiCredential.

    Returns None when the payload is not a Wi-Fi descriptor or carries no
    usable SSID. Callers should read None as "no join action", not as an error.
    """
    if raw[: len(WIFI_PREFIX)].lower() != WIFI_PREFIX:
        return None

    body = raw[len(WIFI_PREFIX):]

    ssid: Optional[str] = None
    security = ""
    passphrase: Optional[str] = None
    hidden = False

    for segment in _split_segments(body):
        key, sep, value = segment.partition(":")
        if not sep:
            continue

        value = _unescape(value)
        key = key.upper()

        if key == "S":
            ssid = value
        elif key == "T":
            security = value.upper()
        elif key == "P":
            passphrase = value
        elif key == "H":
            hidden = value.lower() == "true" or value == "1"

    if not ssid:
        return None

    is_open = security == "NOPASS" or not passphrase

    return WifiCredential(
        ssid=ssid,
        passphrase=None if is_open else passphrase,
        is_wep=security == "WEP",
        is_open=is_open,
        hidden=hidden,
    )
