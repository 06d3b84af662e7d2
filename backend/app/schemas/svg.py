"""
SVG Holder Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the wire contract between API and clients.
How:   FastAPI validates request bodies and serializes responses through these
       models; the Python client parses responses back through the same
       models, so a malformed payload fails at the boundary.

Wire Conventions:
    - Field names are camelCase on the wire (fileSize, originalName, createdAt)
    - Every response is wrapped in an envelope:
        {"success": bool, "data": ..., "message": str, "error": str}
      Keys that carry no value are omitted.
"""

import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


# ══════════════════════════════════════════════════════════════════════════
# Record Models
# ══════════════════════════════════════════════════════════════════════════


class SvgResponse(BaseModel):
    """
    What:  Full representation of a stored SVG record.
    Who:   Returned by every endpoint that yields records; parsed by SvgApiClient.
    """
    id: uuid.UUID = Field(description="Unique record identifier (UUID)")
    name: str = Field(description="Display name")
    description: str = Field(description="Free-text description")
    content: str = Field(description="SVG markup exactly as uploaded")
    file_size: int = Field(ge=0, description="Size of the original upload in bytes")
    original_name: str = Field(default="", description="Filename at upload time")
    created_at: datetime = Field(description="Creation timestamp (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last metadata change (UTC ISO 8601)")

    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class SvgUpdateRequest(BaseModel):
    """
    What:  JSON body of PUT /api/svgs/{id}.
    Both fields are optional here so that missing values reach the
    validation layer and produce its message instead of a schema error.
    """
    name: Optional[str] = Field(default=None, description="New display name")
    description: Optional[str] = Field(default=None, description="New description")


# ══════════════════════════════════════════════════════════════════════════
# Envelopes
# ══════════════════════════════════════════════════════════════════════════


class StatusEnvelope(BaseModel):
    """
    What:  Envelope without a payload.
    Who:   DELETE confirmations and every failure response.

    Example:
        {"success": false, "message": "SVG not found"}
    """
    success: bool = Field(description="Whether the operation succeeded")
    message: Optional[str] = Field(default=None, description="Human-readable status")
    error: Optional[str] = Field(
        default=None,
        description="Underlying error detail (only outside production)",
    )


class Envelope(StatusEnvelope, Generic[DataT]):
    """Envelope carrying a result payload in `data`."""
    data: Optional[DataT] = Field(default=None, description="Operation result")


SvgEnvelope = Envelope[SvgResponse]
SvgListEnvelope = Envelope[List[SvgResponse]]


# ══════════════════════════════════════════════════════════════════════════
# Health
# ══════════════════════════════════════════════════════════════════════════


class HealthStatus(BaseModel):
    """Liveness payload returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    timestamp: datetime = Field(description="Server time (UTC)")
    uptime_seconds: float = Field(description="Seconds since service started")

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


HealthEnvelope = Envelope[HealthStatus]
