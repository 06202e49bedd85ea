"""
Kill-chain aggregator: raw MITRE ATT&CK tactic names → consolidated phases.

The wall shows nine coarse phases instead of the fourteen enterprise
tactics. Lookup is exact; anything outside the table lands in "Other".
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from soc_wall.models.aggregates import PhaseCount
from soc_wall.models.record import ThreatRecord
from soc_wall.utils.patterns import round_half_up

OTHER_PHASE = "Other"

# Tactic name → consolidated phase
MITRE_PHASE_MAP: Mapping[str, str] = MappingProxyType({
    "Reconnaissance": "Recon",
    "Discovery": "Recon",
    "Resource Development": "Resource Development",
    "Initial Access": "Initial Access",
    "Execution": "Execution",
    "Persistence": "Execution",
    "Privilege Escalation": "Privilege Escalation",
    "Credential Access": "Privilege Escalation",
    "Lateral Movement": "Privilege Escalation",
    "Defense Evasion": "Defense Evasion",
    "Command and Control": "Command & Control",
    "Command & Control": "Command & Control",
    "Collection": "Exfiltration",
    "Exfiltration": "Exfiltration",
    "Impact": "Impact",
})


def phase_for(tactic: str, phase_map: Mapping[str, str] = MITRE_PHASE_MAP) -> str:
    return phase_map.get(tactic, OTHER_PHASE)


def compute_kill_chain(
    records: Sequence[ThreatRecord],
    phase_map: Mapping[str, str] = MITRE_PHASE_MAP,
) -> list[PhaseCount]:
    """Histogram of tactic occurrences per phase, largest first.

    A record listing N tactics contributes N increments. Ties keep the
    order in which the phase was first seen.
    """
    counts: dict[str, int] = {}
    for record in records:
        for tactic in record.mitre_tactics:
            phase = phase_for(tactic, phase_map)
            counts[phase] = counts.get(phase, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    total = sum(counts.values())
    largest = ranked[0][1] if ranked else 1

    return [
        PhaseCount(
            name=name,
            value=value,
            share=round_half_up(value / total * 1000) / 10,
            relative=round_half_up(value / largest * 100),
        )
        for name, value in ranked
    ]
