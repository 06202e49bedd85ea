"""
Indicator extractor: ranked source IPs, destination IPs and geographies
recovered from free-text comments.

IP tables weight each occurrence by the record's severity; the display
severity of an IP comes from the accumulated weight, not from any single
record. Geography counts are unweighted. Each record contributes at most
one value per table: the first matching IP or place name in its comments.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from soc_wall.models.aggregates import GeoCount, RankedIndicator
from soc_wall.models.record import Severity, ThreatRecord
from soc_wall.utils.patterns import extract_dest_ip, extract_geo, extract_source_ip

DEFAULT_LIMIT = 5

SEVERITY_WEIGHTS: Mapping[Severity, int] = MappingProxyType({
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
})

_HIGH_THRESHOLD = 6
_MEDIUM_THRESHOLD = 3


def display_severity(severity_score: int) -> Severity:
    if severity_score >= _HIGH_THRESHOLD:
        return Severity.HIGH
    if severity_score >= _MEDIUM_THRESHOLD:
        return Severity.MEDIUM
    return Severity.LOW


def _rank_ips(
    records: Sequence[ThreatRecord],
    extract: Callable[[str], Optional[str]],
    limit: int,
) -> list[RankedIndicator]:
    counts: dict[str, int] = {}
    scores: dict[str, int] = {}
    for record in records:
        ip = extract(record.comments)
        if ip is None:
            continue
        counts[ip] = counts.get(ip, 0) + 1
        scores[ip] = scores.get(ip, 0) + SEVERITY_WEIGHTS.get(record.severity, 0)

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [
        RankedIndicator(
            value=ip,
            count=count,
            severity_score=scores[ip],
            severity=display_severity(scores[ip]),
        )
        for ip, count in ranked
    ]


def top_sources(records: Sequence[ThreatRecord], limit: int = DEFAULT_LIMIT) -> list[RankedIndicator]:
    return _rank_ips(records, extract_source_ip, limit)


def top_destinations(
    records: Sequence[ThreatRecord], limit: int = DEFAULT_LIMIT
) -> list[RankedIndicator]:
    return _rank_ips(records, extract_dest_ip, limit)


def geo_distribution(records: Sequence[ThreatRecord], limit: int = DEFAULT_LIMIT) -> list[GeoCount]:
    counts: dict[str, int] = {}
    for record in records:
        place = extract_geo(record.comments)
        if place is not None:
            counts[place] = counts.get(place, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [GeoCount(name=place, count=count) for place, count in ranked]
