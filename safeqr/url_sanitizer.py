# safeqr/url_sanitizer.py

"""
Strip analytics / ad tracking parameters from a URL before it is copied or shared.

Only the query string is rewritten; scheme, host, port, path and fragment
are kept byte for byte. Anything that cannot be decomposed is returned as-is.
"""

from __future__ import annotations

from typing import List
from urllib.parse import unquote_plus, urlsplit

TRACKING_PREFIXES = ("utm_",)

TRACKING_PARAMS = frozenset({
    "fbclid", "gclid", "dclid", "igshid", "msclkid", "mc_cid", "mc_eid"
})


def is_tracking_param(name: str) -> bool:
    key = unquote_plus(name).lower()
    return key.startswith(TRACKING_PREFIXES) or key in TRACKING_PARAMS


def sanitize_url(url: str) -> str:
    try:
        urlsplit(url)
    except ValueError:
        return url

    # the fragment may itself contain '?', so cut it off first
    head, hash_sep, fragment = url.partition("#")
    base, query_sep, query = head.partition("?")
    if not query_sep or not query:
        return url

    kept: List[str] = [
        item for item in query.split("&")
        if not is_tracking_param(item.partition("=")[0])
    ]

    if kept:
        head = f"{base}?{'&'.join(kept)}"
    else:
        head = base
    return head + hash_sep + fragment
