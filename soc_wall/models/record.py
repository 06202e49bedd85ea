"""
Record models: normalized representation of a single detection.

ThreatRecord is the canonical internal format. The normalizer translates
every known upstream payload shape into this schema; aggregators only ever
read it.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"


class Confidence(str, Enum):
    # Values are the Title case display keys used by every aggregate.
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class GeoInfo(BaseModel):
    """Geolocation block attached upstream to the source host."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None        # ISO code, e.g. "DE"
    country_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    asn: Optional[str] = None
    org: Optional[str] = None


class ThreatIntelInfo(BaseModel):
    """Reputation lookup result attached upstream."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    reputation: Optional[float] = None
    indicator: Optional[str] = None
    asn: Optional[str] = None
    whois: Optional[str] = None


class RecordContext(BaseModel):
    """Extended attributes carried through verbatim for the detail view.

    Upstream collectors emit camelCase keys; both spellings are accepted.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    source_ip: Optional[str] = Field(default=None, alias="sourceIP")
    dest_ip: Optional[str] = Field(default=None, alias="destIP")
    source_port: Optional[str] = Field(default=None, alias="sourcePort")
    dest_port: Optional[str] = Field(default=None, alias="destPort")
    protocol: Optional[str] = None
    timestamp: Optional[str] = None
    traffic_type: Optional[str] = Field(default=None, alias="trafficType")
    packet_length: Optional[str] = Field(default=None, alias="packetLength")
    geo: Optional[GeoInfo] = None
    threat: Optional[ThreatIntelInfo] = None
    attack_type: Optional[str] = Field(default=None, alias="attackType")
    attack_signature: Optional[str] = Field(default=None, alias="attackSignature")
    severity_level: Optional[str] = Field(default=None, alias="severityLevel")
    malware_indicators: Optional[str] = Field(default=None, alias="malwareIndicators")
    anomaly_score: Optional[str] = Field(default=None, alias="anomalyScore")
    static_risk_score: Optional[float] = Field(default=None, alias="staticRiskScore")
    risk_classification: Optional[str] = Field(default=None, alias="riskClassification")
    action_taken: Optional[str] = Field(default=None, alias="actionTaken")
    user_info: Optional[str] = Field(default=None, alias="userInfo")
    device_info: Optional[str] = Field(default=None, alias="deviceInfo")
    network_segment: Optional[str] = Field(default=None, alias="networkSegment")
    payload_data: Optional[str] = Field(default=None, alias="payloadData")
    # Multi-model consensus fields from the model output block
    model_agreement: Optional[str] = None
    consensus_reasoning: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class ThreatRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity = Severity.INFO
    confidence: Confidence = Confidence.LOW
    comments: str = ""
    recommended_action: str = "none"
    mitre_tactics: tuple[str, ...] = ()   # raw names, duplicates kept
    context: Optional[RecordContext] = None
