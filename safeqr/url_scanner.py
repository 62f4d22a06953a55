# ---------------------------------------------------------
# URL Risk Analyzer (rule-based)
# ---------------------------------------------------------

import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Tuple
from urllib.parse import urlsplit


# ---------------------------------------------------------
# WATCH LISTS
# ---------------------------------------------------------

URL_SHORTENERS = frozenset({
    "bit.ly", "t.co", "tinyurl.com", "goo.gl",
    "is.gd", "buff.ly", "ow.ly", "rebrand.ly"
})

SUSPICIOUS_TLDS = frozenset({"zip", "mov", "gq", "tk", "ml", "cf"})

SUSPICIOUS_EXTENSIONS = frozenset({
    "exe", "apk", "scr", "bat", "cmd", "jar", "dmg", "pkg", "appx", "iso"
})

# tuple, not set: checked in this order
PHISHING_KEYWORDS = ("login", "verify", "account", "update", "secure", "bank")

TRAVERSAL_SEQUENCES = ("../", "..%2f", "%2e%2e")


# ---------------------------------------------------------
# THRESHOLDS
# (MVP values with no derivation behind them; override via RiskPolicy)
# ---------------------------------------------------------

VERY_LONG_URL = 140          # raw length >= this
EXTREMELY_LONG_URL = 2048    # raw length > this
LONG_PATH = 80
LONG_QUERY = 120
MAX_PERCENT_SIGNS = 10
MIN_EXTRA_SUBDOMAINS = 3     # labels beyond the base domain
MEDIUM_FLAG_COUNT = 2
STANDARD_PORT = 443


# ---------------------------------------------------------
# FLAGS
# ---------------------------------------------------------

FLAG_NOT_HTTPS = "Not HTTPS"
FLAG_USER_INFO = "Contains user info (@ in URL)"
FLAG_PUNYCODE = "Punycode domain (possible look-alike)"
FLAG_IP_HOST = "IP address host"
FLAG_SHORTENER = "Link shortener"
FLAG_VERY_LONG = "Very long URL"
FLAG_MANY_SUBDOMAINS = "Many subdomains"
FLAG_LONG_PATH = "Long path"
FLAG_LONG_QUERY = "Long query"
FLAG_AT_IN_PATH = "@ in path or query"
FLAG_PATH_TRAVERSAL = "Path traversal sequences"
FLAG_PERCENT_ENCODED = "Heavily percent-encoded"
FLAG_NON_ASCII = "Non-ASCII characters"
FLAG_PHISHING_KEYWORDS = "Phishing keywords"
FLAG_EXTREMELY_LONG = "Extremely long URL"
FILE_TYPE_FLAG_PREFIX = "Suspicious file type"

HIGH_RISK_FLAGS = frozenset({FLAG_PUNYCODE, FLAG_IP_HOST, FLAG_PATH_TRAVERSAL})


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def severity(self) -> int:
        """Display ordering only."""
        return _SEVERITY[self.value]


_SEVERITY = {"low": 0, "medium": 1, "high": 2}


@dataclass(frozen=True)
class RiskPolicy:
    """Every tunable constant the rules read. Use dataclasses.replace() to override."""
    shorteners: FrozenSet[str] = URL_SHORTENERS
    suspicious_tlds: FrozenSet[str] = SUSPICIOUS_TLDS
    suspicious_extensions: FrozenSet[str] = SUSPICIOUS_EXTENSIONS
    phishing_keywords: Tuple[str, ...] = PHISHING_KEYWORDS
    very_long_url: int = VERY_LONG_URL
    extremely_long_url: int = EXTREMELY_LONG_URL
    long_path: int = LONG_PATH
    long_query: int = LONG_QUERY
    max_percent_signs: int = MAX_PERCENT_SIGNS
    min_extra_subdomains: int = MIN_EXTRA_SUBDOMAINS
    medium_flag_count: int = MEDIUM_FLAG_COUNT


DEFAULT_POLICY = RiskPolicy()


@dataclass(frozen=True)
class UrlRiskReport:
    flags: Tuple[str, ...]
    level: RiskLevel

    def to_dict(self) -> dict:
        return {"flags": list(self.flags), "level": self.level.value}


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def _is_ip(labels: List[str]) -> bool:
    # labels drop empty pieces, so "1.2.3.4." still counts; "0192" is 192
    if len(labels) != 4:
        return False
    if not all(part.isascii() and part.isdigit() for part in labels):
        return False
    return all(0 <= int(part) <= 255 for part in labels)


def is_high_risk_flag(flag: str) -> bool:
    return flag in HIGH_RISK_FLAGS or flag.startswith(FILE_TYPE_FLAG_PREFIX)


@dataclass(frozen=True)
class _UrlFacts:
    """Components of the URL, decomposed once and shared by every rule."""
    raw: str
    scheme: str = ""
    has_user_info: bool = False
    host: str = ""
    port: Optional[int] = None
    path: str = ""
    query: str = ""
    policy: RiskPolicy = DEFAULT_POLICY

    @property
    def labels(self) -> List[str]:
        return [label for label in self.host.split(".") if label]


def _explicit_port(parts) -> Optional[int]:
    try:
        return parts.port
    except ValueError:
        # out-of-range ports are still ports for our purposes
        hostport = parts.netloc.rpartition("@")[2]
        _, sep, port = hostport.rpartition(":")
        if sep and port.isascii() and port.isdigit():
            return int(port)
        return None


def _collect_facts(url: str, raw: str, policy: RiskPolicy) -> _UrlFacts:
    try:
        parts = urlsplit(url)
    except ValueError:
        return _UrlFacts(raw=raw, policy=policy)

    return _UrlFacts(
        raw=raw,
        scheme=parts.scheme.lower(),
        has_user_info=parts.username is not None,
        host=(parts.hostname or "").lower(),
        port=_explicit_port(parts),
        path=parts.path,
        query=parts.query,
        policy=policy,
    )


# ---------------------------------------------------------
# RULES
# Each rule returns at most one flag. List order = report order.
# ---------------------------------------------------------

Rule = Callable[[_UrlFacts], Optional[str]]


def _not_https(f: _UrlFacts) -> Optional[str]:
    return FLAG_NOT_HTTPS if f.scheme != "https" else None


def _user_info(f: _UrlFacts) -> Optional[str]:
    return FLAG_USER_INFO if f.has_user_info else None


def _punycode(f: _UrlFacts) -> Optional[str]:
    return FLAG_PUNYCODE if "xn--" in f.host else None


def _ip_host(f: _UrlFacts) -> Optional[str]:
    return FLAG_IP_HOST if _is_ip(f.labels) else None


def _shortener(f: _UrlFacts) -> Optional[str]:
    return FLAG_SHORTENER if f.host in f.policy.shorteners else None


def _very_long(f: _UrlFacts) -> Optional[str]:
    return FLAG_VERY_LONG if len(f.raw) >= f.policy.very_long_url else None


def _non_standard_port(f: _UrlFacts) -> Optional[str]:
    if f.port is not None and f.port != STANDARD_PORT:
        return f"Non-standard port :{f.port}"
    return None


def _suspicious_tld(f: _UrlFacts) -> Optional[str]:
    labels = f.labels
    if labels and labels[-1] in f.policy.suspicious_tlds:
        return f"Suspicious TLD ({labels[-1]})"
    return None


def _many_subdomains(f: _UrlFacts) -> Optional[str]:
    if len(f.labels) - 2 >= f.policy.min_extra_subdomains:
        return FLAG_MANY_SUBDOMAINS
    return None


def _long_path(f: _UrlFacts) -> Optional[str]:
    return FLAG_LONG_PATH if len(f.path) > f.policy.long_path else None


def _long_query(f: _UrlFacts) -> Optional[str]:
    return FLAG_LONG_QUERY if len(f.query) > f.policy.long_query else None


def _at_in_path(f: _UrlFacts) -> Optional[str]:
    return FLAG_AT_IN_PATH if "@" in f.raw and "@" not in f.host else None


def _suspicious_file_type(f: _UrlFacts) -> Optional[str]:
    name = posixpath.basename(f.path.rstrip("/"))
    ext = posixpath.splitext(name)[1].lstrip(".").lower()
    if ext and ext in f.policy.suspicious_extensions:
        return f"{FILE_TYPE_FLAG_PREFIX} (.{ext})"
    return None


def _path_traversal(f: _UrlFacts) -> Optional[str]:
    lower = f.raw.lower()
    if any(seq in lower for seq in TRAVERSAL_SEQUENCES):
        return FLAG_PATH_TRAVERSAL
    return None


def _percent_encoded(f: _UrlFacts) -> Optional[str]:
    return FLAG_PERCENT_ENCODED if f.raw.count("%") > f.policy.max_percent_signs else None


def _non_ascii(f: _UrlFacts) -> Optional[str]:
    return FLAG_NON_ASCII if not f.raw.isascii() else None


def _phishing_keywords(f: _UrlFacts) -> Optional[str]:
    haystacks = (f.host, f.path.lower())
    for kw in f.policy.phishing_keywords:
        if any(kw in h for h in haystacks):
            return FLAG_PHISHING_KEYWORDS
    return None


def _extremely_long(f: _UrlFacts) -> Optional[str]:
    return FLAG_EXTREMELY_LONG if len(f.raw) > f.policy.extremely_long_url else None


BASELINE_RULES: Tuple[Rule, ...] = (
    _not_https,
    _user_info,
    _punycode,
    _ip_host,
    _shortener,
    _very_long,
)

AGGRESSIVE_RULES: Tuple[Rule, ...] = (
    _non_standard_port,
    _suspicious_tld,
    _many_subdomains,
    _long_path,
    _long_query,
    _at_in_path,
    _suspicious_file_type,
    _path_traversal,
    _percent_encoded,
    _non_ascii,
    _phishing_keywords,
    _extremely_long,
)


# ---------------------------------------------------------
# MAIN ENGINE
# ---------------------------------------------------------

def derive_level(flags, policy: RiskPolicy = DEFAULT_POLICY) -> RiskLevel:
    if any(is_high_risk_flag(f) for f in flags):
        return RiskLevel.HIGH
    if len(flags) >= policy.medium_flag_count:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def analyze_url(
    url: str,
    raw: str,
    aggressive: bool = True,
    policy: RiskPolicy = DEFAULT_POLICY,
) -> UrlRiskReport:
    """
    Score a normalized URL for phishing / malware indicators.

    `url` is the normalized URL, `raw` the payload it came from (length,
    encoding and '@' checks look at the raw text). Extended heuristics only
    run when `aggressive` is true.
    """
    facts = _collect_facts(url, raw, policy)

    rules = BASELINE_RULES + AGGRESSIVE_RULES if aggressive else BASELINE_RULES

    flags: List[str] = []
    for rule in rules:
        flag = rule(facts)
        if flag is not None:
            flags.append(flag)

    return UrlRiskReport(flags=tuple(flags), level=derive_level(flags, policy))
