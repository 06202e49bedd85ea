"""Tests for soc_wall/engine/metrics.py."""

import pytest

from soc_wall.engine.metrics import compliance_score, compute_metrics
from soc_wall.models.record import Severity, ThreatRecord


def make_record(severity: Severity = Severity.INFO, comments: str = "") -> ThreatRecord:
    return ThreatRecord(severity=severity, comments=comments)


class TestSeverityCounts:
    def test_counts_per_severity(self):
        records = [
            make_record(Severity.CRITICAL),
            make_record(Severity.HIGH),
            make_record(Severity.HIGH),
            make_record(Severity.MEDIUM),
            make_record(Severity.LOW),
            make_record(Severity.INFO),
            make_record(Severity.INFO),
        ]
        m = compute_metrics(records)
        assert (m.critical, m.high, m.medium, m.low, m.info) == (1, 2, 1, 1, 2)
        assert m.total_records == 7
        assert m.critical + m.high + m.medium + m.low + m.info == m.total_records

    def test_threats_detected_is_high_plus_medium(self):
        records = [make_record(Severity.CRITICAL), make_record(Severity.HIGH), make_record(Severity.MEDIUM)]
        m = compute_metrics(records)
        assert m.threats_detected == 2
        assert m.threats_detected_pct == 67

    def test_clean_traffic_is_info_plus_low(self):
        records = [make_record(Severity.INFO), make_record(Severity.LOW), make_record(Severity.HIGH)]
        assert compute_metrics(records).clean_traffic == 2


class TestAnomalies:
    @pytest.mark.parametrize("comments", [
        "Anomaly Score (71/100) on outbound flow",
        "Anomalous beaconing interval",
        "UNUSUAL login hour",
        "suspicious user agent",
    ])
    def test_keyword_counts_record(self, comments):
        assert compute_metrics([make_record(comments=comments)]).anomalies == 1

    def test_record_counted_once_for_many_keywords(self):
        record = make_record(comments="unusual and suspicious anomalous traffic")
        assert compute_metrics([record]).anomalies == 1

    def test_no_keyword(self):
        assert compute_metrics([make_record(comments="routine backup job")]).anomalies == 0


class TestCompliance:
    def test_each_class_detected(self):
        records = [
            make_record(comments="The action taken was 'ignored' by the analyst."),
            make_record(comments="Direct connection to the internet observed."),
            make_record(comments="Firewall logs are missing for this window."),
            make_record(comments="Client runs an outdated browser."),
        ]
        m = compute_metrics(records)
        assert m.ignored_alerts == 1
        assert m.proxy_bypass == 1
        assert m.missing_firewall_logs == 1
        assert m.outdated_systems == 1
        assert m.compliance_issues == 4
        assert m.compliance_score == 0

    def test_one_record_can_hit_several_classes(self):
        record = make_record(comments="Alert ignored; host on Windows 98 bypassing proxy.")
        m = compute_metrics([record, make_record(), make_record(), make_record()])
        assert m.compliance_issues == 3
        assert m.compliance_score == 25

    def test_score_rounds_half_up(self):
        records = [make_record(comments="outdated")] + [make_record() for _ in range(7)]
        # 100 - 12.5 = 87.5
        assert compute_metrics(records).compliance_score == 88

    def test_score_clamped_at_zero(self):
        record = make_record(comments="ignored, without proxy, no log entry, outdated")
        m = compute_metrics([record])
        assert m.compliance_issues == 4
        assert m.compliance_score == 0

    def test_no_issues_scores_100(self):
        assert compute_metrics([make_record(comments="clean")]).compliance_score == 100


class TestComplianceScore:
    def test_empty_total_is_100(self):
        assert compliance_score(0, 0) == 100

    def test_range(self):
        for issues in range(0, 30):
            assert 0 <= compliance_score(issues, 10) <= 100

    def test_half_up(self):
        assert compliance_score(3, 8) == 63   # 62.5


class TestEmptyInput:
    def test_all_zero(self):
        m = compute_metrics([])
        assert m.total_records == 0
        assert m.threats_detected == 0
        assert m.threats_detected_pct == 0
        assert m.anomalies == 0
        assert m.compliance_issues == 0
        assert m.compliance_score == 100
