# safeqr/utils/reason_cleaner.py

"""
Plain-English translator for URL risk flags.
Turns the terse analyzer flags into sentences a regular user can understand.
"""

import re

FRIENDLY_MAP = [

    # ------------------ transport / host ------------------
    (r"Not HTTPS", lambda m:
        "The link does not use secure HTTPS encryption."
    ),
    (r"Contains user info \(@ in URL\)", lambda m:
        "The link hides extra text before the real website name, a trick used to disguise where it goes."
    ),
    (r"Punycode domain \(possible look-alike\)", lambda m:
        "The website name uses special encoded letters that can imitate a trusted site."
    ),
    (r"IP address host", lambda m:
        "The link points to a bare number address instead of a website name."
    ),
    (r"Link shortener", lambda m:
        "The link uses a URL shortener, which hides the real destination."
    ),
    (r"Non-standard port :(\d+)", lambda m:
        f"The link connects on an unusual port ({m.group(1)})."
    ),
    (r"Suspicious TLD \((\w+)\)", lambda m:
        f"The website ends with '.{m.group(1)}', an ending commonly used by scammers."
    ),
    (r"Many subdomains", lambda m:
        "The website name is stacked with extra parts, a trick used to mimic trusted sites."
    ),

    # ------------------ length / encoding ------------------
    (r"Very long URL", lambda m:
        "The link is unusually long."
    ),
    (r"Extremely long URL", lambda m:
        "The link is extremely long, which can hide where it really goes."
    ),
    (r"Long path", lambda m:
        "The part after the website name is unusually long."
    ),
    (r"Long query", lambda m:
        "The link carries a very long list of extra parameters."
    ),
    (r"Heavily percent-encoded", lambda m:
        "The link is full of encoded characters that make it hard to read."
    ),
    (r"Non-ASCII characters", lambda m:
        "The link contains unusual characters that can imitate normal letters."
    ),

    # ------------------ content ------------------
    (r"@ in path or query", lambda m:
        "The link contains an '@' sign, which can be used to disguise the destination."
    ),
    (r"Suspicious file type \(\.(\w+)\)", lambda m:
        f"The link downloads a '.{m.group(1)}' file, which can install software on your device."
    ),
    (r"Path traversal sequences", lambda m:
        "The link tries to reach files it should not have access to."
    ),
    (r"Phishing keywords", lambda m:
        "The link uses words like 'login' or 'verify' that are common in phishing pages."
    ),
]


def clean_reason(reason: str) -> str:
    """Return a human-friendly explanation for a single raw flag."""
    for pattern, handler in FRIENDLY_MAP:
        match = re.fullmatch(pattern, reason)
        if match:
            return handler(match)

    # fallback: return unchanged if no pattern matches
    return reason


def clean_reasons(reasons):
    """Clean entire list of flags."""
    return [clean_reason(r) for r in reasons]
