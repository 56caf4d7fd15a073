"""Well paths and their intersections with grids.

Well stations use the same elevation convention as grid cells: z grows
upward, so a well descends through decreasing z. True vertical depth (TVD)
is measured down from the first station and measured depth (MD) is the
cumulative 3D length along the path.
"""

import logging
import math
import random
import uuid
from enum import Enum
from typing import Iterable

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .config import GeologicalGrid

logger = logging.getLogger(__name__)

DEFAULT_INTERSECTION_DISTANCE = 100.0

# Inclination limits (degrees) separating vertical, deviated and horizontal sections
VERTICAL_LIMIT = 10.0
HORIZONTAL_LIMIT = 80.0


class WellType(str, Enum):
    """Trajectory shapes produced by the sample well generator."""

    VERTICAL = "vertical"
    DEVIATED = "deviated"
    HORIZONTAL = "horizontal"


class WellStation(BaseModel):
    """A survey station along a well path."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float = Field(description="Elevation")
    md: float = Field(ge=0, description="Measured depth along the path")
    tvd: float = Field(description="True vertical depth below the first station")


class WellPath(BaseModel):
    """An ordered sequence of survey stations."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    well_type: WellType | None = None
    points: tuple[WellStation, ...] = ()

    @property
    def total_depth(self) -> float:
        return self.points[-1].md if self.points else 0.0

    @classmethod
    def from_coordinates(
        cls, name: str, coordinates: Iterable[tuple[float, float, float]], **kwargs
    ) -> "WellPath":
        """Build a path from (x, y, z) stations, deriving MD and TVD."""
        stations: list[WellStation] = []
        md = 0.0
        for x, y, z in coordinates:
            if stations:
                prev = stations[-1]
                md += math.dist((prev.x, prev.y, prev.z), (x, y, z))
            head_z = stations[0].z if stations else z
            stations.append(
                WellStation(x=x, y=y, z=z, md=round(md, 2), tvd=round(head_z - z, 2))
            )
        return cls(name=name, points=tuple(stations), **kwargs)


class WellIntersection(BaseModel):
    """A well station matched to its nearest grid cell."""

    station_index: int
    x: float
    y: float
    z: float
    md: float
    tvd: float
    layer_index: int
    porosity: float
    permeability: float
    distance: float


class WellStatistics(BaseModel):
    """Trajectory summary of a well path."""

    total_points: int
    total_depth: float
    max_tvd: float
    avg_deviation: float
    max_deviation: float
    vertical_section: float
    deviated_section: float
    horizontal_section: float


def generate_sample_well_path(
    well_type: WellType | None = None,
    origin: tuple[float, float] = (0.0, 0.0),
    surface_elevation: float = 0.0,
    stations: int = 101,
    interval: float = 20.0,
    seed: int | None = None,
) -> WellPath:
    """A synthetic vertical, deviated or horizontal well.

    The wellhead is placed at a random offset of up to 1000 from origin.
    Deviated wells build angle below 500 along a 30 degree azimuth at half
    the drilled depth; horizontal wells turn flat below 1000 along a 45
    degree azimuth and keep dropping by a tenth of the lateral length.

    Args:
        well_type: Trajectory shape (random if not given)
        origin: Planar origin of the wellhead offset
        surface_elevation: Elevation of the wellhead
        stations: Number of survey stations
        interval: Drilled depth between stations
        seed: Optional random seed for reproducibility
    """
    rng = random.Random(seed)
    if well_type is None:
        well_type = rng.choice(list(WellType))

    start_x = origin[0] + rng.random() * 1000
    start_y = origin[1] + rng.random() * 1000

    coordinates = []
    for i in range(stations):
        depth = i * interval
        x, y, drop = start_x, start_y, depth

        if well_type is WellType.DEVIATED and depth > 500:
            offset = (depth - 500) * 0.5
            x = start_x + offset * math.cos(math.pi / 6)
            y = start_y + offset * math.sin(math.pi / 6)
        elif well_type is WellType.HORIZONTAL and depth >= 1000:
            lateral = depth - 1000
            x = start_x + lateral * math.cos(math.pi / 4)
            y = start_y + lateral * math.sin(math.pi / 4)
            drop = 1000 + lateral * 0.1

        coordinates.append((x, y, surface_elevation - drop))

    return WellPath.from_coordinates(
        f"Sample {well_type.value.capitalize()} Well", coordinates, well_type=well_type
    )


def calculate_well_intersections(
    well: WellPath,
    grid: GeologicalGrid,
    max_distance: float = DEFAULT_INTERSECTION_DISTANCE,
) -> list[WellIntersection]:
    """Nearest grid cell for every station closer than max_distance.

    Returns:
        Intersections ordered by measured depth
    """
    if not well.points or not grid.cells:
        return []

    cells = grid.cells
    xyz = np.array([(c.x, c.y, c.z) for c in cells], dtype=float)

    intersections = []
    for index, station in enumerate(well.points):
        distances = np.sqrt(((xyz - (station.x, station.y, station.z)) ** 2).sum(axis=1))
        nearest = int(np.argmin(distances))
        distance = float(distances[nearest])
        if distance >= max_distance:
            continue

        cell = cells[nearest]
        intersections.append(
            WellIntersection(
                station_index=index,
                x=station.x,
                y=station.y,
                z=station.z,
                md=station.md,
                tvd=station.tvd,
                layer_index=cell.layer_index,
                porosity=cell.porosity,
                permeability=cell.permeability,
                distance=round(distance, 2),
            )
        )

    intersections.sort(key=lambda i: i.md)
    logger.debug(
        "Well %s: %d of %d stations intersect grid %s",
        well.name,
        len(intersections),
        len(well.points),
        grid.id,
    )
    return intersections


def calculate_well_statistics(well: WellPath) -> WellStatistics | None:
    """Inclination summary and section lengths, or None for an empty path."""
    points = well.points
    if not points:
        return None

    inclinations = []
    sections = {"vertical": 0.0, "deviated": 0.0, "horizontal": 0.0}

    for prev, current in zip(points, points[1:]):
        horizontal = math.hypot(current.x - prev.x, current.y - prev.y)
        inclination = math.degrees(math.atan2(horizontal, abs(current.z - prev.z)))
        inclinations.append(inclination)

        length = current.md - prev.md
        if inclination < VERTICAL_LIMIT:
            sections["vertical"] += length
        elif inclination > HORIZONTAL_LIMIT:
            sections["horizontal"] += length
        else:
            sections["deviated"] += length

    return WellStatistics(
        total_points=len(points),
        total_depth=well.total_depth,
        max_tvd=max(p.tvd for p in points),
        avg_deviation=sum(inclinations) / len(inclinations) if inclinations else 0.0,
        max_deviation=max(inclinations, default=0.0),
        vertical_section=round(sections["vertical"], 2),
        deviated_section=round(sections["deviated"], 2),
        horizontal_section=round(sections["horizontal"], 2),
    )
