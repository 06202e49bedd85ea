"""
Heuristic patterns: every keyword class and regex the engine matches
against free-text comments, kept as data next to the pure functions that
apply them.

Adding a keyword class means adding a row here; no aggregator control flow
changes. None of these functions raise: a miss is always a default value.
"""

from __future__ import annotations

import math
import re
from typing import NamedTuple, Optional


class KeywordClass(NamedTuple):
    name: str
    keywords: tuple[str, ...]


# ---------------------------------------------------------------------------
# Keyword classes (case-insensitive substring match)
# ---------------------------------------------------------------------------

ANOMALY_KEYWORDS: tuple[str, ...] = (
    "anomaly score",
    "anomalous",
    "unusual",
    "suspicious",
)

# Spotlight candidates must mention one of these network behaviours.
SPOTLIGHT_KEYWORDS: tuple[str, ...] = (
    "anomaly score",
    "icmp",
    "dns",
    "tunneling",
    "proxy",
)

# The four compliance classes are independent and not mutually exclusive.
COMPLIANCE_CLASSES: tuple[KeywordClass, ...] = (
    KeywordClass(
        "ignored_alerts",
        ("action was 'ignored'", "action taken was 'ignored'", "ignored"),
    ),
    KeywordClass(
        "proxy_bypass",
        ("direct connection", "bypassing proxy", "without proxy"),
    ),
    KeywordClass(
        "missing_firewall_logs",
        ("firewall logs are missing", "no log entry", "missing entries"),
    ),
    KeywordClass(
        "outdated_systems",
        ("outdated browser", "windows 98", "ios 10.3.4", "outdated"),
    ),
)


# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_DOTTED_QUAD = r"(?<!\d)(\d{1,3}(?:\.\d{1,3}){3})(?!\d)"

# "source IP 10.0.0.5", "source IP: 10.0.0.5", "source IP address (10.0.0.5)"
SOURCE_IP_PATTERN = re.compile(r"source\s+ip\b\D{0,32}?" + _DOTTED_QUAD, re.IGNORECASE)

# Fallback for source IPs only: first dotted quad anywhere.
ANY_IP_PATTERN = re.compile(_DOTTED_QUAD)

DEST_IP_PATTERN = re.compile(
    r"destination\s+(?:ip|system)\b\D{0,32}?" + _DOTTED_QUAD, re.IGNORECASE
)

# "in Germany", "from United States"; the capitalised run is the capture.
GEO_PATTERN = re.compile(r"\b(?:in|from)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)")

# "anomaly score (82/100)", "anomaly score 82/100", "anomaly score of 82.5/100"
ANOMALY_SCORE_PATTERN = re.compile(
    r"anomaly\s+score\D{0,16}?\(?\s*(\d{1,3}(?:\.\d+)?)\s*/\s*100",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = (text or "").lower()
    return any(k.lower() in lowered for k in keywords)


def compliance_classes(text: str) -> list[str]:
    """Return the names of every compliance class *text* matches."""
    return [cls.name for cls in COMPLIANCE_CLASSES if contains_any(text, cls.keywords)]


def extract_source_ip(text: str) -> Optional[str]:
    match = SOURCE_IP_PATTERN.search(text or "") or ANY_IP_PATTERN.search(text or "")
    return match.group(1) if match else None


def extract_dest_ip(text: str) -> Optional[str]:
    match = DEST_IP_PATTERN.search(text or "")
    return match.group(1) if match else None


def extract_geo(text: str) -> Optional[str]:
    match = GEO_PATTERN.search(text or "")
    return match.group(1) if match else None


def extract_anomaly_score(text: str) -> int:
    """Anomaly score out of 100 mentioned in *text*, or 0 when absent."""
    match = ANOMALY_SCORE_PATTERN.search(text or "")
    if not match:
        return 0
    return round_half_up(float(match.group(1)))


def round_half_up(value: float) -> int:
    # Built-in round() is banker's rounding; display percentages round .5 up.
    return int(math.floor(value + 0.5))
