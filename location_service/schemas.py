"""Pydantic schemas shared across the API handlers and store clients."""
from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LocationPayload(BaseModel):
    """Raw wire shape of a location request, before business rules run."""

    vehicle_id: Optional[str] = Field(None, alias="camionId")
    latitude: float = Field(0.0, alias="latitud")
    longitude: float = Field(0.0, alias="longitud")
    name: Optional[str] = Field(None, alias="nombre")

    model_config = ConfigDict(populate_by_name=True, strict=True, extra="ignore")


class LocationReport(BaseModel):
    """Validated location report for one vehicle."""

    vehicle_id: str = Field(..., alias="camionId")
    latitude: float = Field(..., alias="latitud")
    longitude: float = Field(..., alias="longitud")
    name: Optional[str] = Field(None, alias="nombre")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class LocationRegisteredResponse(BaseModel):
    """Response returned once the primary store accepted the location."""

    success: bool = True
    message: str = "location registered successfully"
    vehicle_id: str = Field(..., alias="camionId")
    timestamp: datetime

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error body shared by every failing response."""

    error: str
    errors: Optional[List[str]] = None
    details: Optional[str] = None


class OverallStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ServiceHealthStatus(BaseModel):
    """Result of probing one backing store."""

    healthy: bool
    message: str
    response_time: timedelta = Field(timedelta(0), alias="responseTime")

    model_config = ConfigDict(populate_by_name=True)


class HealthReport(BaseModel):
    """Aggregate health of all backing stores."""

    status: OverallStatus
    timestamp: datetime
    services: Dict[str, ServiceHealthStatus]
    total_duration: timedelta = Field(..., alias="totalDuration")

    model_config = ConfigDict(populate_by_name=True)
