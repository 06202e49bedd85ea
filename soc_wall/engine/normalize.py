"""
Normalizer: raw upstream payload → ordered list[ThreatRecord].

Upstream collectors are known to emit these element shapes, tried in order
(first one present wins):
  - choices[0].message.content   chat-completion style, JSON in a string,
                                 often wrapped in a fenced code block
  - content.parts[0].text        the same, generative-content style
  - output                       canonical record already decoded
  - the element itself           bare canonical objects

The batch itself is either a bare list or an object exposing the list under
"data", "threats" or "results". Anything else is a MalformedBatchError.

Entry point: def run(input: NormalizeInput) -> NormalizeOutput

A bad element is dropped and recorded in parse_warnings; it never aborts
the batch. No I/O happens here.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Optional

from pydantic import ValidationError

from soc_wall.errors import MalformedBatchError, UnparsableElementError
from soc_wall.models.engine_io import NormalizeInput, NormalizeOutput
from soc_wall.models.record import Confidence, RecordContext, Severity, ThreatRecord

logger = logging.getLogger(__name__)

_BATCH_KEYS: tuple[str, ...] = ("data", "threats", "results")

_CANONICAL_KEYS: tuple[str, ...] = (
    "flag",
    "comments",
    "confidence",
    "recommended_action",
    "mitre_tactics",
)

# Keys of the model output block that belong on RecordContext, not the record.
_OUTPUT_CONTEXT_KEYS: tuple[str, ...] = ("model_agreement", "consensus_reasoning")

# Canonical severity mapping, case-insensitive across producers
_SEVERITY_MAP: dict[str, Severity] = {
    "critical": Severity.CRITICAL,
    "high": Severity.HIGH,
    "medium": Severity.MEDIUM,
    "low": Severity.LOW,
    "info": Severity.INFO,
    "informational": Severity.INFO,
}

_CONFIDENCE_MAP: dict[str, Confidence] = {
    "high": Confidence.HIGH,
    "medium": Confidence.MEDIUM,
    "low": Confidence.LOW,
}

_FENCE_OPEN = re.compile(r"^\s*```[\w+-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```\s*$")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def strip_code_fence(text: str) -> str:
    """Remove a leading ```lang and trailing ``` delimiter, if present."""
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text)).strip()


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _get(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


def _decode_content(raw: Any, where: str) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        raise UnparsableElementError(
            f"{where} is {type(raw).__name__}, expected a JSON string"
        )
    try:
        parsed = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise UnparsableElementError(f"{where} is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise UnparsableElementError(
            f"{where} decoded to {type(parsed).__name__}, expected an object"
        )
    return parsed


def _normalize_severity(raw: Any, warnings: list[str], position: int) -> Severity:
    if raw is None or raw == "":
        return Severity.INFO
    if isinstance(raw, str) and raw.strip().lower() in _SEVERITY_MAP:
        return _SEVERITY_MAP[raw.strip().lower()]
    warnings.append(f"element {position}: unknown flag {raw!r}, defaulting to INFO")
    return Severity.INFO


def _normalize_confidence(raw: Any, warnings: list[str], position: int) -> Confidence:
    if raw is None or raw == "":
        return Confidence.LOW
    if isinstance(raw, str) and raw.strip().lower() in _CONFIDENCE_MAP:
        return _CONFIDENCE_MAP[raw.strip().lower()]
    warnings.append(f"element {position}: unknown confidence {raw!r}, defaulting to Low")
    return Confidence.LOW


def _as_text(raw: Any, default: str) -> str:
    if raw is None or raw == "":
        return default
    return raw if isinstance(raw, str) else str(raw)


def _normalize_tactics(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        return (raw,) if raw else ()
    if not isinstance(raw, list):
        return ()
    return tuple(t for t in raw if isinstance(t, str) and t)


# ---------------------------------------------------------------------------
# Shape decoders
#
# Each returns None when its shape is absent, the decoded field dict when it
# is present, and raises UnparsableElementError when it is present but
# cannot be decoded.
# ---------------------------------------------------------------------------

def _from_choices(element: dict[str, Any]) -> Optional[dict[str, Any]]:
    content = _get(_get(_first(element.get("choices")), "message"), "content")
    if not content:
        return None
    return _decode_content(content, "choices[0].message.content")


def _from_parts(element: dict[str, Any]) -> Optional[dict[str, Any]]:
    text = _get(_first(_get(element.get("content"), "parts")), "text")
    if not text:
        return None
    return _decode_content(text, "content.parts[0].text")


def _from_output(element: dict[str, Any]) -> Optional[dict[str, Any]]:
    output = element.get("output")
    if not output:
        return None
    return _decode_content(output, "output")


def _from_canonical(element: dict[str, Any]) -> Optional[dict[str, Any]]:
    if any(key in element for key in _CANONICAL_KEYS):
        return element
    return None


_DECODERS: tuple[Callable[[dict[str, Any]], Optional[dict[str, Any]]], ...] = (
    _from_choices,
    _from_parts,
    _from_output,
    _from_canonical,
)


def _decode_element(element: Any) -> dict[str, Any]:
    if not isinstance(element, dict):
        raise UnparsableElementError(
            f"element is {type(element).__name__}, expected an object"
        )
    for decoder in _DECODERS:
        fields = decoder(element)
        if fields is not None:
            return fields
    raise UnparsableElementError("element matches no known payload shape")


# ---------------------------------------------------------------------------
# Record construction
# ---------------------------------------------------------------------------

def _extract_context(
    element: dict[str, Any],
    fields: dict[str, Any],
    warnings: list[str],
    position: int,
) -> Optional[RecordContext]:
    data = dict(element)
    for key in _OUTPUT_CONTEXT_KEYS:
        if key in fields:
            data[key] = fields[key]
    try:
        context = RecordContext.model_validate(data)
    except ValidationError as e:
        warnings.append(
            f"element {position}: extended attributes rejected ({e.error_count()} errors), "
            "record kept without context"
        )
        return None
    return None if context.is_empty() else context


def _build_record(
    element: dict[str, Any],
    fields: dict[str, Any],
    warnings: list[str],
    position: int,
) -> ThreatRecord:
    return ThreatRecord(
        severity=_normalize_severity(fields.get("flag"), warnings, position),
        confidence=_normalize_confidence(fields.get("confidence"), warnings, position),
        comments=_as_text(fields.get("comments"), ""),
        recommended_action=_as_text(fields.get("recommended_action"), "none"),
        mitre_tactics=_normalize_tactics(fields.get("mitre_tactics")),
        context=_extract_context(element, fields, warnings, position),
    )


def resolve_elements(payload: Any) -> list[Any]:
    """Return the element list of a batch, or raise MalformedBatchError."""
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedBatchError(f"Normalizer: batch is not UTF-8 text: {e}") from e
    if isinstance(payload, str):
        try:
            payload = json.loads(strip_code_fence(payload))
        except json.JSONDecodeError as e:
            raise MalformedBatchError(f"Normalizer: batch is not valid JSON: {e}") from e

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _BATCH_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
        raise MalformedBatchError(
            "Normalizer: batch object has no list under "
            f"{', '.join(repr(k) for k in _BATCH_KEYS)}; keys present: "
            f"{', '.join(sorted(map(str, payload.keys()))) or 'none'}"
        )
    raise MalformedBatchError(
        f"Normalizer: batch is {type(payload).__name__}, expected a list or an object"
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(input: NormalizeInput) -> NormalizeOutput:
    """Normalize one upstream response into ThreatRecords.

    Args:
        input: NormalizeInput wrapping the deserialized response body.

    Returns:
        NormalizeOutput with the surviving records in input order, the
        number of dropped elements, and any parse_warnings.

    Raises:
        MalformedBatchError: If the payload is not array-like under any
                             recognised batch shape.
    """
    elements = resolve_elements(input.raw_payload)
    logger.info("normalizer.start", extra={"elements": len(elements)})

    warnings: list[str] = []
    records: list[ThreatRecord] = []
    dropped = 0

    for position, element in enumerate(elements):
        try:
            fields = _decode_element(element)
        except UnparsableElementError as e:
            dropped += 1
            warnings.append(f"element {position}: dropped, {e}")
            logger.warning(
                "normalizer.element_dropped",
                extra={"position": position, "reason": str(e)},
            )
            continue
        records.append(_build_record(element, fields, warnings, position))

    if warnings:
        logger.warning("normalizer.warnings", extra={"count": len(warnings)})

    logger.info(
        "normalizer.complete",
        extra={"records": len(records), "dropped": dropped},
    )
    return NormalizeOutput(records=records, parse_warnings=warnings, dropped=dropped)
