"""
Engine I/O contracts: typed inputs and outputs crossing component seams.

Raw payloads only ever enter through NormalizeInput; everything downstream
of the normalizer receives validated ThreatRecord lists.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from soc_wall.models.aggregates import AggregateView
from soc_wall.models.record import Confidence, Severity, ThreatRecord


# ---------------------------------------------------------------------------
# Normalizer: raw upstream payload → list[ThreatRecord]
# ---------------------------------------------------------------------------

class NormalizeInput(BaseModel):
    raw_payload: Any = None


class NormalizeOutput(BaseModel):
    records: list[ThreatRecord] = Field(default_factory=list)
    parse_warnings: list[str] = Field(default_factory=list)
    dropped: int = 0   # elements that decoded under no known shape


# ---------------------------------------------------------------------------
# Entry point: raw payload → normalized records → AggregateView
# ---------------------------------------------------------------------------

class AggregateRun(BaseModel):
    view: AggregateView
    records_parsed: int = 0
    records_dropped: int = 0
    parse_warnings: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Detection browser: filter + paginate non-INFO records
# ---------------------------------------------------------------------------

class DetectionQuery(BaseModel):
    search: str = ""
    severity: Optional[Severity] = None      # None == all severities
    confidence: Optional[Confidence] = None  # None == all confidence levels
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_filter(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            return None if value in ("", "ALL") else value
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_filter(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().capitalize()
            return None if value in ("", "All") else value
        return value
