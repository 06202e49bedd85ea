"""
Anomaly ranker: HIGH/MEDIUM records with network-behaviour mentions,
ordered by the anomaly score quoted in their comments.
"""

from __future__ import annotations

from typing import Sequence

from soc_wall.models.aggregates import AnomalyEntry
from soc_wall.models.record import Severity, ThreatRecord
from soc_wall.utils.patterns import SPOTLIGHT_KEYWORDS, contains_any, extract_anomaly_score

DEFAULT_SPOTLIGHT_SIZE = 5

_SPOTLIGHT_SEVERITIES = frozenset({Severity.HIGH, Severity.MEDIUM})


def is_spotlight_candidate(record: ThreatRecord) -> bool:
    return record.severity in _SPOTLIGHT_SEVERITIES and contains_any(
        record.comments, SPOTLIGHT_KEYWORDS
    )


def anomaly_spotlight(
    records: Sequence[ThreatRecord], limit: int = DEFAULT_SPOTLIGHT_SIZE
) -> list[AnomalyEntry]:
    entries = [
        AnomalyEntry(
            position=position,
            score=extract_anomaly_score(record.comments),
            severity=record.severity,
            confidence=record.confidence,
            comments=record.comments,
            mitre_tactics=record.mitre_tactics,
        )
        for position, record in enumerate(records)
        if is_spotlight_candidate(record)
    ]
    # sorted() is stable: equal scores keep input order
    return sorted(entries, key=lambda entry: entry.score, reverse=True)[:limit]
