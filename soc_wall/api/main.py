"""
SOC Wall - Aggregation API Server

FastAPI application exposing the aggregation engine to the monitoring wall.
The wall's fetch layer posts the collector's raw response here on every
refresh and renders whatever comes back.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from soc_wall.config import get_settings
from soc_wall.engine import aggregate, normalize
from soc_wall.engine.detections import browse_detections
from soc_wall.errors import MalformedBatchError
from soc_wall.models.aggregates import DetectionPage
from soc_wall.models.engine_io import AggregateRun, DetectionQuery, NormalizeInput

settings = get_settings()
settings.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.service_name} API",
    description="Threat signal aggregation for SOC monitoring walls",
    version=settings.service_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Request Models
# ============================================================================

class DetectionsRequest(BaseModel):
    """Raw collector payload plus the drill-down table's filter state."""
    payload: Any = None
    search: str = ""
    severity: Optional[str] = None      # "ALL" or a severity flag
    confidence: Optional[str] = None    # "ALL" or a confidence level
    page: int = Field(default=1, ge=1)


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/health")
async def health_check():
    """Liveness check."""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": settings.service_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/api/v1/aggregate", response_model=AggregateRun)
async def aggregate_payload(payload: Any = Body(default=None)):
    """
    Aggregate one raw collector response into every wall view.

    Elements that decode under no known shape are dropped and reported in
    parse_warnings. A payload that is not array-like is rejected with 422.
    """
    try:
        return aggregate.run(payload, settings)
    except MalformedBatchError as e:
        logger.warning("api.malformed_batch", extra={"reason": str(e)})
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/v1/detections", response_model=DetectionPage)
async def list_detections(request: DetectionsRequest):
    """Filter and paginate the non-INFO detections of one raw payload."""
    try:
        normalized = normalize.run(NormalizeInput(raw_payload=request.payload))
    except MalformedBatchError as e:
        logger.warning("api.malformed_batch", extra={"reason": str(e)})
        raise HTTPException(status_code=422, detail=str(e))

    try:
        query = DetectionQuery(
            search=request.search,
            severity=request.severity,
            confidence=request.confidence,
            page=request.page,
            page_size=settings.detections_page_size,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid filter: {e}")

    return browse_detections(normalized.records, query)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
