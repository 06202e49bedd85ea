"""
Metrics aggregator: severity counts, anomaly count and compliance score.

Entry point: def compute_metrics(records) -> MetricsSummary

The compliance score is a coarse hygiene signal, not a probability: the four
keyword classes are independent, so a single record matching several of
them counts once per class and can push the score below the share of clean
records.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from soc_wall.models.aggregates import MetricsSummary
from soc_wall.models.record import Severity, ThreatRecord
from soc_wall.utils.patterns import (
    ANOMALY_KEYWORDS,
    compliance_classes,
    contains_any,
    round_half_up,
)


def compliance_score(issues: int, total: int) -> int:
    if total == 0:
        return 100
    return min(100, max(0, round_half_up(100 - (issues / total) * 100)))


def compute_metrics(records: Sequence[ThreatRecord]) -> MetricsSummary:
    severities = Counter(r.severity for r in records)
    total = len(records)

    compliance = Counter()
    anomalies = 0
    for record in records:
        if contains_any(record.comments, ANOMALY_KEYWORDS):
            anomalies += 1
        compliance.update(compliance_classes(record.comments))

    issues = sum(compliance.values())
    threats = severities[Severity.HIGH] + severities[Severity.MEDIUM]

    return MetricsSummary(
        critical=severities[Severity.CRITICAL],
        high=severities[Severity.HIGH],
        medium=severities[Severity.MEDIUM],
        low=severities[Severity.LOW],
        info=severities[Severity.INFO],
        total_records=total,
        threats_detected=threats,
        threats_detected_pct=round_half_up(threats / max(total, 1) * 100),
        clean_traffic=severities[Severity.INFO] + severities[Severity.LOW],
        anomalies=anomalies,
        ignored_alerts=compliance["ignored_alerts"],
        proxy_bypass=compliance["proxy_bypass"],
        missing_firewall_logs=compliance["missing_firewall_logs"],
        outdated_systems=compliance["outdated_systems"],
        compliance_issues=issues,
        compliance_score=compliance_score(issues, total),
    )
