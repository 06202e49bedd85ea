"""
Aggregate: one refresh cycle: normalized records → every wall view.

Entry points:
  def aggregate(records, ...) -> AggregateView    pure, no side effects
  def run(payload, settings=None) -> AggregateRun normalize, then aggregate

Each view is an independent pure function of the same record list; none
reads another's output, so repeated calls with the same input are
idempotent.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from soc_wall.config import Settings, get_settings
from soc_wall.engine import normalize
from soc_wall.engine.anomaly import DEFAULT_SPOTLIGHT_SIZE, anomaly_spotlight
from soc_wall.engine.confidence import compute_confidence
from soc_wall.engine.flow import build_flow_graph
from soc_wall.engine.indicators import (
    DEFAULT_LIMIT,
    geo_distribution,
    top_destinations,
    top_sources,
)
from soc_wall.engine.killchain import compute_kill_chain
from soc_wall.engine.metrics import compute_metrics
from soc_wall.engine.timeline import severity_timeline
from soc_wall.models.aggregates import AggregateView
from soc_wall.models.engine_io import AggregateRun, NormalizeInput
from soc_wall.models.record import ThreatRecord

logger = logging.getLogger(__name__)


def aggregate(
    records: Sequence[ThreatRecord],
    *,
    indicator_limit: int = DEFAULT_LIMIT,
    spotlight_limit: int = DEFAULT_SPOTLIGHT_SIZE,
) -> AggregateView:
    """Compute every aggregate view over *records*.

    An empty list is not an error: counts are zero, the compliance score is
    100, and the graph and ranked lists are empty.
    """
    return AggregateView(
        metrics=compute_metrics(records),
        kill_chain=compute_kill_chain(records),
        confidence=compute_confidence(records),
        flow_graph=build_flow_graph(records),
        top_sources=top_sources(records, indicator_limit),
        top_destinations=top_destinations(records, indicator_limit),
        geo_distribution=geo_distribution(records, indicator_limit),
        anomaly_spotlight=anomaly_spotlight(records, spotlight_limit),
        timeline=severity_timeline(records),
    )


def run(payload: Any, settings: Optional[Settings] = None) -> AggregateRun:
    """Normalize a raw upstream payload and aggregate it.

    Raises:
        MalformedBatchError: If the payload is not array-like. No partial
                             aggregates are produced; the caller decides
                             whether to keep its previous view.
    """
    settings = settings or get_settings()

    normalized = normalize.run(NormalizeInput(raw_payload=payload))
    view = aggregate(
        normalized.records,
        indicator_limit=settings.indicator_limit,
        spotlight_limit=settings.spotlight_limit,
    )

    logger.info(
        "aggregate.complete",
        extra={
            "records": len(normalized.records),
            "dropped": normalized.dropped,
            "compliance_score": view.metrics.compliance_score,
            "threats_detected": view.metrics.threats_detected,
        },
    )
    return AggregateRun(
        view=view,
        records_parsed=len(normalized.records),
        records_dropped=normalized.dropped,
        parse_warnings=normalized.parse_warnings,
    )
