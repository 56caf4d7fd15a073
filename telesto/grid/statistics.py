"""Aggregate statistics over grid cells: volumes, thickness and structure."""

import math
from typing import Sequence

import numpy as np
from pydantic import BaseModel, Field

from .config import GeologicalGrid, GridCell, MergeStatistics, _HasCoordinates
from .errors import InsufficientInputError

DEFAULT_POROSITY_CUTOFF = 0.05
THICKNESS_BINS = 5
COMPASS_OCTANTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


class LayerVolume(BaseModel):
    """Bulk volume carried by one layer index."""

    layer_index: int
    volume: float


class VolumeStatistics(BaseModel):
    """Volumetrics of a grid."""

    total_volume: float
    pore_volume: float
    net_volume: float
    net_to_gross: float = Field(ge=0, le=1)
    average_porosity: float
    cell_count: int
    net_cell_count: int
    layer_volumes: list[LayerVolume]


def cell_statistics(cells: Sequence[GridCell]) -> MergeStatistics:
    """Mean porosity/permeability and fault/well cell fractions."""
    if not cells:
        return MergeStatistics(
            avg_porosity=0.0, avg_permeability=0.0, fault_density=0.0, well_density=0.0
        )

    porosity = np.array([c.porosity for c in cells], dtype=float)
    permeability = np.array([c.permeability for c in cells], dtype=float)
    faulted = np.array([c.fault_flag != 0 for c in cells], dtype=bool)
    wells = np.array([c.well_flag for c in cells], dtype=bool)

    return MergeStatistics(
        avg_porosity=round(float(porosity.mean()), 4),
        avg_permeability=round(float(permeability.mean()), 2),
        fault_density=round(float(faulted.mean()), 4),
        well_density=round(float(wells.mean()), 4),
    )


def volume_statistics(
    grid: GeologicalGrid, porosity_cutoff: float = DEFAULT_POROSITY_CUTOFF
) -> VolumeStatistics:
    """Bulk, pore and net volumes of a grid.

    Net cells are those whose porosity exceeds porosity_cutoff; layer
    volumes are listed in ascending layer order.
    """
    if not grid.cells:
        return VolumeStatistics(
            total_volume=0.0,
            pore_volume=0.0,
            net_volume=0.0,
            net_to_gross=0.0,
            average_porosity=0.0,
            cell_count=0,
            net_cell_count=0,
            layer_volumes=[],
        )

    volume = np.array([c.bulk_volume for c in grid.cells], dtype=float)
    porosity = np.array([c.porosity for c in grid.cells], dtype=float)
    layers = np.array([c.layer_index for c in grid.cells], dtype=int)
    net = porosity > porosity_cutoff

    total = float(volume.sum())
    net_volume = float(volume[net].sum())

    layer_volumes = [
        LayerVolume(layer_index=int(layer), volume=round(float(volume[layers == layer].sum()), 2))
        for layer in np.unique(layers)
    ]

    return VolumeStatistics(
        total_volume=round(total, 2),
        pore_volume=round(float((volume * porosity).sum()), 2),
        net_volume=round(net_volume, 2),
        net_to_gross=round(net_volume / total, 4) if total > 0 else 0.0,
        average_porosity=round(float(porosity.mean()), 4),
        cell_count=len(grid.cells),
        net_cell_count=int(net.sum()),
        layer_volumes=layer_volumes,
    )


# --- Thickness ---


class ThicknessPoint(BaseModel):
    """Column thickness at one planar position."""

    x: float
    y: float
    thickness: float
    layers: int


class ThicknessRange(BaseModel):
    """One bin of the thickness distribution."""

    min: float
    max: float
    label: str
    count: int
    percentage: float


class ThicknessMap(BaseModel):
    """Isopach summary of a grid."""

    average_thickness: float
    max_thickness: float
    min_thickness: float
    points: list[ThicknessPoint]
    ranges: list[ThicknessRange]
    total_positions: int


def thickness_map(grid: GeologicalGrid, bins: int = THICKNESS_BINS) -> ThicknessMap:
    """Column thickness (highest minus lowest cell) per planar position.

    Cells are grouped by position rounded to whole units; positions with
    a single cell carry no thickness. The distribution splits [0, max]
    into equal bins, the last one closed so the thickest column counts.

    Raises:
        InsufficientInputError: If the grid has no cells, fewer than two
            layers, or no position with at least two cells
    """
    if not grid.cells:
        raise InsufficientInputError("No grid cells available for thickness analysis")
    if len({c.layer_index for c in grid.cells}) < 2:
        raise InsufficientInputError("At least two layers are required for thickness analysis")

    columns: dict[tuple[int, int], list[GridCell]] = {}
    for cell in grid.cells:
        columns.setdefault((round(cell.x), round(cell.y)), []).append(cell)

    points = []
    for cells in columns.values():
        if len(cells) < 2:
            continue
        elevations = [c.z for c in cells]
        points.append(
            ThicknessPoint(
                x=cells[0].x,
                y=cells[0].y,
                thickness=round(max(elevations) - min(elevations), 2),
                layers=len(cells),
            )
        )

    if not points:
        raise InsufficientInputError("No grid position has more than one cell")

    values = np.array([p.thickness for p in points], dtype=float)
    max_thickness = float(values.max())
    edges = np.linspace(0.0, max_thickness, bins + 1)

    ranges = []
    for i in range(bins):
        lo, hi = float(edges[i]), float(edges[i + 1])
        last = i == bins - 1
        inside = (values >= lo) & ((values <= hi) if last else (values < hi))
        count = int(inside.sum())
        ranges.append(
            ThicknessRange(
                min=round(lo, 2),
                max=round(hi, 2),
                label=f"{lo:.0f}-{hi:.0f}m",
                count=count,
                percentage=round(count / len(values) * 100, 2),
            )
        )

    return ThicknessMap(
        average_thickness=round(float(values.mean()), 2),
        max_thickness=max_thickness,
        min_thickness=float(values.min()),
        points=points,
        ranges=ranges,
        total_positions=len(points),
    )


# --- Structure ---


class StructuralTrend(BaseModel):
    """Share of plane orientations falling in one compass octant."""

    direction: str
    strength: float
    count: int


class DipDistribution(BaseModel):
    gentle: int
    moderate: int
    steep: int


class StructuralAnalysis(BaseModel):
    """Dip and strike summary of a surface."""

    average_dip: float
    max_dip: float
    dominant_strike: float | None
    structural_trends: list[StructuralTrend]
    dip_distribution: DipDistribution
    total_measurements: int


def plane_orientation(
    p1: _HasCoordinates, p2: _HasCoordinates, p3: _HasCoordinates
) -> tuple[float, float] | None:
    """Dip and strike azimuth (degrees) of the plane through three points.

    The normal is taken upward so the azimuth is stable under point order.
    Returns None for collinear or coincident points.
    """
    v1 = np.array([p2.x - p1.x, p2.y - p1.y, p2.z - p1.z], dtype=float)
    v2 = np.array([p3.x - p1.x, p3.y - p1.y, p3.z - p1.z], dtype=float)
    normal = np.cross(v1, v2)
    length = float(np.linalg.norm(normal))
    if length == 0:
        return None

    normal /= length
    if normal[2] < 0:
        normal = -normal

    dip = math.degrees(math.acos(min(abs(float(normal[2])), 1.0)))
    strike = math.degrees(math.atan2(float(normal[0]), float(normal[1])))
    if strike < 0:
        strike += 360.0
    return dip, strike % 360.0


def structural_analysis(points: Sequence[_HasCoordinates]) -> StructuralAnalysis:
    """Dip and strike from every run of three consecutive points.

    Raises:
        InsufficientInputError: If fewer than three points are given
    """
    if len(points) < 3:
        raise InsufficientInputError(
            f"At least three points are required for structural analysis, got {len(points)}"
        )

    orientations = [
        plane_orientation(points[i], points[i + 1], points[i + 2])
        for i in range(len(points) - 2)
    ]
    return _summarize_orientations([o for o in orientations if o is not None])


def grid_structural_analysis(
    grid: GeologicalGrid, layer_index: int | None = None
) -> StructuralAnalysis:
    """Dip and strike over the lattice triangles of one layer.

    Each position with neighbours at the next x and the next y sampled
    positions contributes one triangle. The top layer is used by default.

    Raises:
        InsufficientInputError: If the layer has no complete triangle
    """
    if not grid.cells:
        raise InsufficientInputError("No grid cells available for structural analysis")
    if layer_index is None:
        layer_index = max(c.layer_index for c in grid.cells)

    layer = {(c.x, c.y): c for c in grid.cells if c.layer_index == layer_index}
    xs = sorted({x for x, _ in layer})
    ys = sorted({y for _, y in layer})

    orientations = []
    for x0, x1 in zip(xs, xs[1:]):
        for y0, y1 in zip(ys, ys[1:]):
            corner = layer.get((x0, y0))
            east = layer.get((x1, y0))
            north = layer.get((x0, y1))
            if corner is None or east is None or north is None:
                continue
            orientation = plane_orientation(corner, east, north)
            if orientation is not None:
                orientations.append(orientation)

    if not orientations:
        raise InsufficientInputError(
            f"Layer {layer_index} does not span any lattice triangle"
        )
    return _summarize_orientations(orientations)


def _summarize_orientations(orientations: list[tuple[float, float]]) -> StructuralAnalysis:
    dips = np.array([d for d, _ in orientations], dtype=float)
    strikes = np.array([s for _, s in orientations], dtype=float)

    if not len(dips):
        return StructuralAnalysis(
            average_dip=0.0,
            max_dip=0.0,
            dominant_strike=None,
            structural_trends=[],
            dip_distribution=DipDistribution(gentle=0, moderate=0, steep=0),
            total_measurements=0,
        )

    # 10 degree bins; the dominant strike is the centre of the fullest one
    strike_bins = np.bincount((strikes // 10).astype(int), minlength=36)
    dominant = int(np.argmax(strike_bins)) * 10 + 5

    trends = []
    for i, direction in enumerate(COMPASS_OCTANTS):
        count = int(((strikes >= i * 45) & (strikes < (i + 1) * 45)).sum())
        if count:
            trends.append(
                StructuralTrend(
                    direction=direction, strength=round(count / len(strikes), 4), count=count
                )
            )
    trends.sort(key=lambda t: t.strength, reverse=True)

    return StructuralAnalysis(
        average_dip=round(float(dips.mean()), 3),
        max_dip=round(float(dips.max()), 3),
        dominant_strike=float(dominant),
        structural_trends=trends[:3],
        dip_distribution=DipDistribution(
            gentle=int((dips < 10).sum()),
            moderate=int(((dips >= 10) & (dips < 30)).sum()),
            steep=int((dips >= 30).sum()),
        ),
        total_measurements=len(dips),
    )
