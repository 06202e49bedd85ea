"""
Flow graph builder: bipartite severity → confidence graph (Sankey input).

Severity nodes come first, then confidence nodes; links reference nodes by
index. Link weight is the number of records sharing that (severity,
confidence) pair, so the weights sum to the number of records whose both
ends resolved to a node.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from soc_wall.engine.confidence import confidence_label
from soc_wall.models.aggregates import FlowGraph, FlowLink, FlowNode
from soc_wall.models.record import ThreatRecord

SEVERITY_COLORS: Mapping[str, str] = MappingProxyType({
    "CRITICAL": "#dc2626",
    "HIGH": "#ea580c",
    "MEDIUM": "#f59e0b",
    "LOW": "#3b82f6",
    "INFO": "#10b981",
})
SEVERITY_FALLBACK_COLOR = "#6b7280"

CONFIDENCE_COLORS: Mapping[str, str] = MappingProxyType({
    "High": "#8b5cf6",
    "Medium": "#6366f1",
    "Low": "#ec4899",
})
CONFIDENCE_FALLBACK_COLOR = "#9ca3af"


def build_flow_graph(
    records: Sequence[ThreatRecord],
    severity_colors: Mapping[str, str] = SEVERITY_COLORS,
    confidence_colors: Mapping[str, str] = CONFIDENCE_COLORS,
) -> FlowGraph:
    # severity → confidence label → co-occurrence count, in first-seen order
    pairs: dict[str, dict[str, int]] = {}
    for record in records:
        by_confidence = pairs.setdefault(record.severity.value, {})
        label = confidence_label(record.confidence.value)
        by_confidence[label] = by_confidence.get(label, 0) + 1

    confidences: dict[str, None] = {}
    for by_confidence in pairs.values():
        confidences.update(dict.fromkeys(by_confidence))

    nodes = [
        FlowNode(name=severity, color=severity_colors.get(severity, SEVERITY_FALLBACK_COLOR))
        for severity in pairs
    ] + [
        FlowNode(name=label, color=confidence_colors.get(label, CONFIDENCE_FALLBACK_COLOR))
        for label in confidences
    ]

    index: dict[str, int] = {}
    for i, node in enumerate(nodes):
        index.setdefault(node.name, i)

    links: list[FlowLink] = []
    for severity, by_confidence in pairs.items():
        source = index.get(severity)
        for label, count in by_confidence.items():
            target = index.get(label)
            if source is None or target is None:
                continue
            links.append(FlowLink(source=source, target=target, value=count))

    return FlowGraph(nodes=nodes, links=links)
