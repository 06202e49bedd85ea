"""
Aggregate models: the views computed over one refresh cycle's records.

Every aggregate is recomputed from scratch on each refresh and owned by the
caller that asked for it. None of them are persisted.

Import hierarchy (no circular dependencies):
  record.py       <- no internal imports
  aggregates.py   <- record.py
  engine_io.py    <- record.py, aggregates.py
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from soc_wall.models.record import Confidence, RecordContext, Severity


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class MetricsSummary(_Frozen):
    """Top KPI bar: severity counts plus the keyword-driven hygiene signals."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    total_records: int = 0
    threats_detected: int = 0       # HIGH + MEDIUM
    threats_detected_pct: int = 0
    clean_traffic: int = 0          # INFO + LOW
    anomalies: int = 0

    # Compliance classes are independent; one record can count in several.
    ignored_alerts: int = 0
    proxy_bypass: int = 0
    missing_firewall_logs: int = 0
    outdated_systems: int = 0
    compliance_issues: int = 0
    compliance_score: int = Field(default=100, ge=0, le=100)


class PhaseCount(_Frozen):
    name: str
    value: int
    share: float = 0.0   # percent of all tactic occurrences, one decimal
    relative: int = 0    # percent of the largest bucket


class ConfidenceCount(_Frozen):
    name: str
    value: int
    percent: int = 0


class FlowNode(_Frozen):
    name: str
    color: str


class FlowLink(_Frozen):
    source: int   # index into FlowGraph.nodes
    target: int
    value: int


class FlowGraph(_Frozen):
    nodes: list[FlowNode] = Field(default_factory=list)
    links: list[FlowLink] = Field(default_factory=list)

    @property
    def total_weight(self) -> int:
        return sum(link.value for link in self.links)


class RankedIndicator(_Frozen):
    value: str                 # IP literal
    count: int
    severity_score: int
    severity: Severity         # derived display severity: HIGH / MEDIUM / LOW


class GeoCount(_Frozen):
    name: str
    count: int


class AnomalyEntry(_Frozen):
    position: int              # index of the record in the input list
    score: int
    severity: Severity
    confidence: Confidence
    comments: str
    mitre_tactics: tuple[str, ...] = ()


class TimelineBucket(_Frozen):
    date: str                  # YYYY-MM-DD
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0


class AggregateView(_Frozen):
    """Everything the monitoring wall renders for one refresh."""

    metrics: MetricsSummary = Field(default_factory=MetricsSummary)
    kill_chain: list[PhaseCount] = Field(default_factory=list)
    confidence: list[ConfidenceCount] = Field(default_factory=list)
    flow_graph: FlowGraph = Field(default_factory=FlowGraph)
    top_sources: list[RankedIndicator] = Field(default_factory=list)
    top_destinations: list[RankedIndicator] = Field(default_factory=list)
    geo_distribution: list[GeoCount] = Field(default_factory=list)
    anomaly_spotlight: list[AnomalyEntry] = Field(default_factory=list)
    timeline: list[TimelineBucket] = Field(default_factory=list)


class DetectionEntry(_Frozen):
    position: int
    severity: Severity
    confidence: Confidence
    comments: str
    recommended_action: str
    mitre_tactics: tuple[str, ...] = ()
    source_ip: Optional[str] = None
    dest_ip: Optional[str] = None
    context: Optional[RecordContext] = None   # detail view


class DetectionPage(_Frozen):
    items: list[DetectionEntry] = Field(default_factory=list)
    total: int = 0             # matches across all pages
    page: int = 1
    page_size: int = 10
    total_pages: int = 0
