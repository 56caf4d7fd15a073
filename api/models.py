"""Pydantic models for API request/response schemas."""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from telesto.grid.config import (
    CompatibilityReport,
    FaultSystem,
    GridBounds,
    GridParameters,
    GridProvenance,
    Horizon,
    MergeDirection,
)
from telesto.grid.wells import WellIntersection, WellPath, WellStatistics


# --- Grid Schemas ---


class GridGenerateRequest(BaseModel):
    """Schema for grid generation request."""

    horizons: List[Horizon] = Field(..., min_length=2)
    fault_systems: List[FaultSystem] = []
    parameters: Optional[GridParameters] = None
    name: Optional[str] = Field(None, max_length=255)


class GridSummaryResponse(BaseModel):
    """Schema for grid metadata without cells."""

    id: str
    name: str
    layer_count: int
    point_count: int
    total_volume: float
    bounds: GridBounds
    provenance: GridProvenance
    created_at: Optional[datetime] = None


class GridGenerateResponse(GridSummaryResponse):
    """Schema for grid generation response."""

    warnings: List[str] = []


class GridListResponse(BaseModel):
    """Schema for list of grids."""

    grids: List[GridSummaryResponse]
    total: int


# --- Combination Schemas ---


class CompatibilityRequest(BaseModel):
    """Schema for compatibility check request."""

    grid_ids: List[str] = Field(..., min_length=1)


class CompatibilityResponse(CompatibilityReport):
    """Schema for compatibility check response."""

    grid_ids: List[str]


class MergeRequest(BaseModel):
    """Schema for grid merge request."""

    grid_ids: List[str] = Field(..., min_length=2)
    direction: MergeDirection = MergeDirection.VERTICAL
    name: Optional[str] = Field(None, max_length=255)


# --- Well Schemas ---


class WellIntersectionRequest(BaseModel):
    """Schema for intersecting a well path with a stored grid."""

    well: WellPath
    max_distance: float = Field(100.0, gt=0)


class WellIntersectionResponse(BaseModel):
    """Schema for well intersection results."""

    grid_id: str
    well_id: str
    intersections: List[WellIntersection]
    statistics: Optional[WellStatistics] = None


# --- Sample Data Schemas ---


class SampleDataResponse(BaseModel):
    """Schema for synthetic sample data."""

    horizons: List[Horizon]
    fault_systems: List[FaultSystem]


# --- Health Check ---


class HealthResponse(BaseModel):
    """Schema for health check response."""

    status: str
    version: str
    database: str
