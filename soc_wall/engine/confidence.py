"""Confidence aggregator: record count per Title case confidence label."""

from __future__ import annotations

from typing import Sequence

from soc_wall.models.aggregates import ConfidenceCount
from soc_wall.models.record import ThreatRecord
from soc_wall.utils.patterns import round_half_up


def confidence_label(raw: str) -> str:
    """Title case a raw label: first letter upper, rest lower."""
    return raw[:1].upper() + raw[1:].lower()


def compute_confidence(records: Sequence[ThreatRecord]) -> list[ConfidenceCount]:
    counts: dict[str, int] = {}
    for record in records:
        label = confidence_label(record.confidence.value)
        counts[label] = counts.get(label, 0) + 1

    total = max(sum(counts.values()), 1)
    return [
        ConfidenceCount(name=name, value=value, percent=round_half_up(value / total * 100))
        for name, value in counts.items()
    ]
