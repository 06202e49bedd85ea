"""Tests for soc_wall/models/aggregates.py and soc_wall/models/engine_io.py."""

import pytest
from pydantic import ValidationError

from soc_wall.models.aggregates import (
    AggregateView,
    FlowGraph,
    FlowLink,
    FlowNode,
    MetricsSummary,
)
from soc_wall.models.engine_io import AggregateRun, NormalizeOutput


class TestMetricsSummary:
    def test_defaults_describe_empty_input(self):
        m = MetricsSummary()
        assert m.total_records == 0
        assert m.compliance_score == 100

    @pytest.mark.parametrize("score", [-1, 101])
    def test_score_bounds(self, score):
        with pytest.raises(ValidationError):
            MetricsSummary(compliance_score=score)


class TestFlowGraph:
    def test_total_weight(self):
        graph = FlowGraph(
            nodes=[FlowNode(name="HIGH", color="#ea580c"), FlowNode(name="High", color="#8b5cf6")],
            links=[FlowLink(source=0, target=1, value=4)],
        )
        assert graph.total_weight == 4


class TestAggregateView:
    def test_empty_view_serializes(self):
        dumped = AggregateView().model_dump(mode="json")
        assert dumped["flow_graph"] == {"nodes": [], "links": []}
        assert dumped["anomaly_spotlight"] == []
        assert dumped["metrics"]["compliance_score"] == 100

    def test_run_wraps_view(self):
        run = AggregateRun(view=AggregateView())
        assert run.records_parsed == 0
        assert run.parse_warnings == []


class TestNormalizeOutput:
    def test_defaults(self):
        out = NormalizeOutput()
        assert out.records == []
        assert out.dropped == 0
