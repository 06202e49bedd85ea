"""
Detection browser: searchable, filterable, paginated list of non-INFO
detections for the wall's drill-down table.

Entry point: def browse_detections(records, query) -> DetectionPage
"""

from __future__ import annotations

import math
from typing import Sequence

from soc_wall.models.aggregates import DetectionEntry, DetectionPage
from soc_wall.models.engine_io import DetectionQuery
from soc_wall.models.record import Severity, ThreatRecord


def matches_query(record: ThreatRecord, query: DetectionQuery) -> bool:
    if query.severity is not None and record.severity != query.severity:
        return False
    if query.confidence is not None and record.confidence != query.confidence:
        return False
    needle = query.search.lower()
    if not needle:
        return True
    if needle in record.comments.lower():
        return True
    return any(needle in tactic.lower() for tactic in record.mitre_tactics)


def _entry(position: int, record: ThreatRecord) -> DetectionEntry:
    context = record.context
    return DetectionEntry(
        position=position,
        severity=record.severity,
        confidence=record.confidence,
        comments=record.comments,
        recommended_action=record.recommended_action,
        mitre_tactics=record.mitre_tactics,
        source_ip=context.source_ip if context else None,
        dest_ip=context.dest_ip if context else None,
        context=context,
    )


def browse_detections(records: Sequence[ThreatRecord], query: DetectionQuery) -> DetectionPage:
    matched = [
        (position, record)
        for position, record in enumerate(records)
        if record.severity != Severity.INFO and matches_query(record, query)
    ]
    start = (query.page - 1) * query.page_size
    window = matched[start:start + query.page_size]

    return DetectionPage(
        items=[_entry(position, record) for position, record in window],
        total=len(matched),
        page=query.page,
        page_size=query.page_size,
        total_pages=math.ceil(len(matched) / query.page_size),
    )
