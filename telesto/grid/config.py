"""Pydantic models for grid generation inputs, parameters and results.

Horizons and fault systems are the sparse inputs; GeologicalGrid is the
dense, property-bearing output consumed by export, persistence and
rendering collaborators. Grid-side models are frozen so a grid cannot be
changed after the builder or the merge engine hands it out.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Protocol

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MergeDirection(str, Enum):
    """How merged grids are laid out relative to each other."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class _HasCoordinates(Protocol):
    x: float
    y: float
    z: float


class SurfacePoint(BaseModel):
    """A sampled point on a horizon surface."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float = Field(description="Elevation")


class Horizon(BaseModel):
    """A named, sparsely sampled geological surface.

    By convention the first horizon handed to the builder is the top of the
    layer package and the second is its base.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    points: tuple[SurfacePoint, ...] = ()


class FaultTracePoint(BaseModel):
    """A point on a fault trace.

    Segment id 0 is reserved for unfaulted cells, so traces start at 1.
    """

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float
    segment_id: int = Field(default=1, ge=1, description="Fault segment this point belongs to")


class FaultSystem(BaseModel):
    """A named collection of fault trace points grouped by segment."""

    model_config = ConfigDict(frozen=True)

    name: str
    points: tuple[FaultTracePoint, ...] = ()

    @property
    def segment_ids(self) -> list[int]:
        """Distinct segment ids in trace order."""
        return list(dict.fromkeys(p.segment_id for p in self.points))


class GridBounds(BaseModel):
    """Axis-aligned envelope of a point set."""

    model_config = ConfigDict(frozen=True)

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    z_min: float
    z_max: float

    @model_validator(mode="after")
    def validate_min_max(self) -> "GridBounds":
        """Ensure min <= max for all dimensions."""
        for axis in ("x", "y", "z"):
            lo = getattr(self, f"{axis}_min")
            hi = getattr(self, f"{axis}_max")
            if lo > hi:
                raise ValueError(f"{axis}_min ({lo}) must not exceed {axis}_max ({hi})")
        return self

    @classmethod
    def from_points(cls, points: Iterable[_HasCoordinates]) -> "GridBounds | None":
        """Envelope of anything carrying x/y/z; None for an empty input."""
        xs: list[float] = []
        ys: list[float] = []
        zs: list[float] = []
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
            zs.append(p.z)

        if not xs:
            return None

        return cls(
            x_min=min(xs),
            x_max=max(xs),
            y_min=min(ys),
            y_max=max(ys),
            z_min=min(zs),
            z_max=max(zs),
        )

    @property
    def x_range(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_range(self) -> float:
        return self.y_max - self.y_min

    @property
    def z_range(self) -> float:
        return self.z_max - self.z_min


class GridCell(BaseModel):
    """One cell of a geological grid.

    Numeric fields are stored at export precision: 2 decimals for
    coordinates and volume, 3 for porosity, 2 for permeability and 1 for
    structural dip.
    """

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float
    layer_index: int = Field(ge=0)
    bulk_volume: float = Field(gt=0)
    fault_flag: int = Field(default=0, ge=0, description="Dominant fault segment, 0 if unfaulted")
    well_flag: bool = False
    porosity: float = Field(ge=0, le=1)
    permeability: float = Field(gt=0, description="Millidarcies")
    structural_dip: float = 0.0
    source_grid_index: int | None = Field(
        default=None, ge=0, description="Position of the source grid in a merge"
    )


class MergeStatistics(BaseModel):
    """Aggregate cell statistics recorded on merged grids."""

    model_config = ConfigDict(frozen=True)

    avg_porosity: float
    avg_permeability: float
    fault_density: float = Field(ge=0, le=1)
    well_density: float = Field(ge=0, le=1)


class GridProvenance(BaseModel):
    """Where a grid came from."""

    model_config = ConfigDict(frozen=True)

    horizons: tuple[str, ...] = ()
    faults: tuple[str, ...] = ()
    seed: int | None = None
    source_grid_ids: tuple[str, ...] = ()
    merge_direction: MergeDirection | None = None
    merge_statistics: MergeStatistics | None = None


def _new_grid_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeologicalGrid(BaseModel):
    """A generated (or merged) volumetric grid.

    Created once by the layer stack builder or the merge engine and
    immutable thereafter; regeneration produces a new grid with a new id.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_grid_id)
    name: str
    cells: tuple[GridCell, ...]
    bounds: GridBounds
    layer_count: int = Field(ge=1)
    point_count: int = Field(ge=0)
    total_volume: float = Field(ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
    provenance: GridProvenance = Field(default_factory=GridProvenance)

    @model_validator(mode="after")
    def validate_cells(self) -> "GeologicalGrid":
        """Check the counters agree with the cell set."""
        if self.point_count != len(self.cells):
            raise ValueError(
                f"point_count ({self.point_count}) does not match "
                f"number of cells ({len(self.cells)})"
            )
        for cell in self.cells:
            if cell.layer_index >= self.layer_count:
                raise ValueError(
                    f"Cell layer_index {cell.layer_index} outside "
                    f"layer_count {self.layer_count}"
                )
        return self


class GridParameters(BaseModel):
    """Knobs for the layer stack builder.

    samples_per_axis controls the planar spacing
    (min(x_range, y_range) / samples_per_axis) and therefore the
    performance/quality trade-off: cell count grows with its square.
    """

    num_layers: int = Field(default=5, ge=1, le=50, description="Interior layers between top and base")
    samples_per_axis: int = Field(default=50, ge=10, le=200)
    influence_radius: float = Field(default=100.0, gt=0)
    structural_amplitude: float = Field(default=10.0, ge=0)
    structural_frequency: float = Field(default=0.001, ge=0)
    displacement_scale: float = Field(default=50.0, ge=0)
    porosity_min: float = Field(default=0.12, ge=0, le=1)
    porosity_max: float = Field(default=0.30, ge=0, le=1)
    permeability_min: float = Field(default=0.03, gt=0)
    permeability_max: float = Field(default=3000.0, gt=0)
    well_probability: float = Field(default=0.02, ge=0, le=1)
    well_zone_fraction: float = Field(
        default=0.7, ge=0, le=1, description="Wells are only flagged above this fraction of the column"
    )
    seed: int | None = None

    @model_validator(mode="after")
    def validate_ranges(self) -> "GridParameters":
        """Ensure property ranges are ordered."""
        if self.porosity_min > self.porosity_max:
            raise ValueError(
                f"porosity_min ({self.porosity_min}) must not exceed porosity_max ({self.porosity_max})"
            )
        if self.permeability_min > self.permeability_max:
            raise ValueError(
                f"permeability_min ({self.permeability_min}) must not exceed "
                f"permeability_max ({self.permeability_max})"
            )
        return self

    @property
    def layer_count(self) -> int:
        return self.num_layers + 2


class FaultInfluence(BaseModel):
    """Fault proximity at a single location."""

    model_config = ConfigDict(frozen=True)

    influence: float = Field(ge=0, le=1)
    fault_flag: int = Field(ge=0)
    displacement: float


class CompatibilityReport(BaseModel):
    """Outcome of a grid compatibility check."""

    can_combine: bool
    reasons: list[str] = Field(default_factory=list)
    score: int = Field(ge=0, le=100)
