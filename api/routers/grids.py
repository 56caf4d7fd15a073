"""Grid generation, inspection and combination API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from telesto.config import settings
from telesto.exceptions import DatabaseError, NotFoundError
from telesto.graphs import generate_grid
from telesto.grid import (
    GeologicalGrid,
    GridCompatibilityChecker,
    GridError,
    GridExporter,
    GridPersistenceService,
    IncompatibleGridsError,
    StructuralAnalysis,
    ThicknessMap,
    VolumeStatistics,
    calculate_well_intersections,
    calculate_well_statistics,
    grid_structural_analysis,
    merge_grids,
    thickness_map,
    volume_statistics,
)
from api.models import (
    CompatibilityRequest,
    CompatibilityResponse,
    GridGenerateRequest,
    GridGenerateResponse,
    GridListResponse,
    GridSummaryResponse,
    MergeRequest,
    WellIntersectionRequest,
    WellIntersectionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grids", tags=["grids"])

_persistence = GridPersistenceService()


async def _load_or_404(grid_id: str) -> GeologicalGrid:
    try:
        return await _persistence.get_grid(grid_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/generate", response_model=GridGenerateResponse, status_code=status.HTTP_201_CREATED
)
async def create_grid(request: GridGenerateRequest):
    """Generate and store a grid from horizons and faults."""
    result = await generate_grid(
        horizons=request.horizons,
        fault_systems=request.fault_systems,
        parameters=request.parameters or settings.default_parameters(),
        grid_name=request.name,
    )

    if result["status"] != "completed":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Grid generation failed",
                "errors": result.get("errors", []),
                "warnings": result.get("warnings", []),
            },
        )

    summary = await _persistence.get_grid_summary(result["grid_id"])
    return GridGenerateResponse(**summary, warnings=result.get("warnings", []))


@router.get("", response_model=GridListResponse)
async def list_grids():
    """List all stored grids."""
    summaries = await _persistence.list_grids()
    return GridListResponse(
        grids=[GridSummaryResponse(**s) for s in summaries],
        total=len(summaries),
    )


@router.get("/{grid_id}", response_model=GridSummaryResponse)
async def get_grid(grid_id: str):
    """Get a grid's metadata by ID."""
    summary = await _persistence.get_grid_summary(grid_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Grid {grid_id} not found",
        )
    return GridSummaryResponse(**summary)


@router.get("/{grid_id}/export")
async def export_grid(grid_id: str):
    """Export a grid's cells as CSV."""
    grid = await _load_or_404(grid_id)
    try:
        content = GridExporter().to_csv(grid)
    except GridError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="grid_{grid_id}.csv"'},
    )


@router.get("/{grid_id}/volumetrics", response_model=VolumeStatistics)
async def get_volumetrics(grid_id: str, porosity_cutoff: float = 0.05):
    """Bulk, pore and net volumes of a grid."""
    grid = await _load_or_404(grid_id)
    return volume_statistics(grid, porosity_cutoff=porosity_cutoff)


@router.get("/{grid_id}/thickness", response_model=ThicknessMap)
async def get_thickness(grid_id: str):
    """Column thickness map and distribution of a grid."""
    grid = await _load_or_404(grid_id)
    try:
        return thickness_map(grid)
    except GridError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{grid_id}/structure", response_model=StructuralAnalysis)
async def get_structure(grid_id: str, layer_index: Optional[int] = Query(None, ge=0)):
    """Dip and strike of one layer (the top layer by default)."""
    grid = await _load_or_404(grid_id)
    try:
        return grid_structural_analysis(grid, layer_index)
    except GridError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{grid_id}/wells/intersections", response_model=WellIntersectionResponse)
async def intersect_well(grid_id: str, request: WellIntersectionRequest):
    """Grid properties along a well path."""
    grid = await _load_or_404(grid_id)
    intersections = calculate_well_intersections(
        request.well, grid, max_distance=request.max_distance
    )
    return WellIntersectionResponse(
        grid_id=grid_id,
        well_id=request.well.id,
        intersections=intersections,
        statistics=calculate_well_statistics(request.well),
    )


@router.post("/check"
, response_model=CompatibilityResponse)
async def check_grids(request: CompatibilityRequest):
    """Check whether stored grids may be combined."""
    grids = [await _load_or_404(grid_id) for grid_id in request.grid_ids]
    report = GridCompatibilityChecker().check(grids)
    return CompatibilityResponse(**report.model_dump(), grid_ids=request.grid_ids)


@router.post("/merge", response_model=GridSummaryResponse, status_code=status.HTTP_201_CREATED)
async def merge_stored_grids(request: MergeRequest):
    """Merge compatible stored grids and store the result."""
    grids = [await _load_or_404(grid_id) for grid_id in request.grid_ids]

    try:
        merged = merge_grids(
            grids,
            request.direction,
            vertical_separation=settings.vertical_separation,
            name=request.name,
        )
    except IncompatibleGridsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": e.args[0], "reasons": e.reasons},
        )

    try:
        await _persistence.save_grid(merged)
    except DatabaseError as e:
        logger.exception("Storing merged grid %s failed", merged.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to store merged grid", "error": str(e)},
        )
    logger.info("Merged %d grids into %s", len(grids), merged.id)

    summary = await _persistence.get_grid_summary(merged.id)
    return GridSummaryResponse(**summary)


@router.delete("/{grid_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_grid(grid_id: str):
    """Delete a grid."""
    if not await _persistence.delete_grid(grid_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Grid {grid_id} not found",
        )
