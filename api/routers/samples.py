"""Synthetic sample data API routes."""

from typing import Optional

from fastapi import APIRouter, Query

from telesto.grid import SampleDataGenerator, WellPath, WellType, generate_sample_well_path
from api.models import SampleDataResponse

router = APIRouter(prefix="/samples", tags=["samples"])


@router.get("", response_model=SampleDataResponse)
async def get_sample_data(
    seed: Optional[int] = None,
    nodes: int = Query(21, ge=2, le=101),
    spacing: float = Query(50.0, gt=0),
):
    """Synthetic top/base horizons and fault systems."""
    generator = SampleDataGenerator(nodes=nodes, spacing=spacing, seed=seed)
    return SampleDataResponse(
        horizons=generator.generate_horizons(),
        fault_systems=generator.generate_faults(),
    )


@router.get("/well", response_model=WellPath)
async def get_sample_well(
    well_type: Optional[WellType] = None,
    seed: Optional[int] = None,
    surface_elevation: float = 0.0,
    x: float = 0.0,
    y: float = 0.0,
):
    """Synthetic vertical, deviated or horizontal well path."""
    return generate_sample_well_path(
        well_type=well_type,
        origin=(x, y),
        surface_elevation=surface_elevation,
        seed=seed,
    )
