"""
Severity timeline: per-day severity counts for the trend panel.

Only records whose context carries a parseable timestamp take part.
Accepted forms: ISO-8601, basic or extended (trailing "Z" allowed), and
Unix epoch seconds when the text is not an ISO date.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from soc_wall.models.aggregates import TimelineBucket
from soc_wall.models.record import Severity, ThreatRecord

_FIELD_FOR_SEVERITY: dict[Severity, str] = {
    Severity.CRITICAL: "critical",
    Severity.HIGH: "high",
    Severity.MEDIUM: "medium",
    Severity.LOW: "low",
    Severity.INFO: "info",
}


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    raw = raw.strip()
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        try:
            return datetime.fromtimestamp(float(raw), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed


def severity_timeline(records: Sequence[ThreatRecord]) -> list[TimelineBucket]:
    buckets: dict[str, dict[str, int]] = {}
    for record in records:
        if record.context is None:
            continue
        moment = parse_timestamp(record.context.timestamp)
        if moment is None:
            continue
        bucket = buckets.setdefault(moment.date().isoformat(), {})
        field = _FIELD_FOR_SEVERITY[record.severity]
        bucket[field] = bucket.get(field, 0) + 1

    return [TimelineBucket(date=day, **counts) for day, counts in sorted(buckets.items())]
