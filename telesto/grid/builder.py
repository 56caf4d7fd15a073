"""Layer stack grid construction from horizon and fault inputs.

This module walks a regular planar sampling lattice between a top and a
base horizon and emits a proportional vertical stack of cells at every
position where the top lies above the base.
"""

import asyncio
import logging
import math
import random
from typing import Callable, Sequence

from telesto.config import settings

from .config import (
    FaultSystem,
    GeologicalGrid,
    GridBounds,
    GridCell,
    GridParameters,
    GridProvenance,
    Horizon,
)
from .errors import GenerationCancelledError, GridBuildError, InsufficientInputError
from .faults import FaultInfluenceEstimator
from .interpolation import HorizonInterpolator
from .spatial import lattice_axis

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

# Smallest permeability representable at 2 decimals
MIN_PERMEABILITY = 0.01


class CancellationToken:
    """Cooperative cancellation flag checked by the builder at yield points."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise GenerationCancelledError("Grid generation was cancelled")


class LayerStackBuilder:
    """Builds a GeologicalGrid from two horizons and optional faults.

    The builder:
    1. Bounds the union of the top and base horizon points
    2. Derives a square sampling spacing from the smaller planar range
    3. Interpolates top and base elevations at every lattice position,
       skipping positions where the top does not lie above the base
    4. Stacks num_layers + 2 cells between base and top, perturbed by a
       smooth structural dip and fault displacement, with stochastic
       porosity, permeability and well flags
    5. Yields to the event loop every yield_interval positions, checking
       the cancellation token and reporting progress
    """

    def __init__(
        self,
        parameters: GridParameters | None = None,
        yield_interval: int | None = None,
    ):
        """Initialize the builder.

        Args:
            parameters: Generation parameters (defaults from settings)
            yield_interval: Lattice positions processed between cooperative yields
        """
        self.parameters = parameters or settings.default_parameters()
        self.yield_interval = max(1, yield_interval or settings.yield_interval)

    async def build(
        self,
        horizons: Sequence[Horizon],
        fault_systems: Sequence[FaultSystem] = (),
        num_layers: int | None = None,
        *,
        name: str | None = None,
        token: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> GeologicalGrid:
        """Build a grid from the first two horizons.

        Args:
            horizons: At least two horizons; the first is the top, the second the base
            fault_systems: Fault traces influencing displacement and fault flags
            num_layers: Interior layer count (defaults to parameters.num_layers)
            name: Grid name (defaults to "<top> - <base>")
            token: Optional cancellation token checked at every yield
            progress: Optional callback receiving percent complete

        Returns:
            A new immutable GeologicalGrid

        Raises:
            InsufficientInputError: If fewer than two horizons are supplied or
                either the top or the base has no points
            GenerationCancelledError: If the token is cancelled mid-build
            GridBuildError: If grid assembly fails unexpectedly
        """
        if len(horizons) < 2:
            raise InsufficientInputError(
                f"At least two horizons (top and base) are required, got {len(horizons)}"
            )

        params = self.parameters
        if num_layers is not None:
            params = GridParameters.model_validate(
                {**params.model_dump(), "num_layers": num_layers}
            )

        top, base = horizons[0], horizons[1]
        empty = [h.name for h in (top, base) if not h.points]
        if empty:
            # An empty horizon interpolates to 0.0 everywhere, which is not a surface
            raise InsufficientInputError(
                f"Horizon(s) without points: {', '.join(repr(n) for n in empty)}"
            )
        bounds = GridBounds.from_points([*top.points, *base.points])

        spacing = self._sampling_spacing(bounds, params.samples_per_axis)
        token = token or CancellationToken()
        token.raise_if_cancelled()

        logger.info(
            "Building grid from '%s' / '%s': spacing=%.3f, layers=%d, faults=%d",
            top.name,
            base.name,
            spacing,
            params.layer_count,
            len(fault_systems),
        )

        try:
            cells = await self._sample_lattice(
                top, base, fault_systems, bounds, spacing, params, token, progress
            )
        except (GenerationCancelledError, InsufficientInputError):
            raise
        except Exception as e:
            raise GridBuildError(
                f"Failed to build grid: {e}",
                details={"top": top.name, "base": base.name},
            )

        total_volume = round(math.fsum(c.bulk_volume for c in cells), 2)
        grid_bounds = GridBounds.from_points(cells) or bounds

        grid = GeologicalGrid(
            name=name or f"{top.name} - {base.name}",
            cells=tuple(cells),
            bounds=grid_bounds,
            layer_count=params.layer_count,
            point_count=len(cells),
            total_volume=total_volume,
            provenance=GridProvenance(
                horizons=(top.name, base.name),
                faults=tuple(f.name for f in fault_systems),
                seed=params.seed,
            ),
        )

        if progress is not None:
            progress(100.0)

        logger.info(
            "Grid %s built: %d cells, total volume %.2f", grid.id, grid.point_count, total_volume
        )
        return grid

    def _sampling_spacing(self, bounds: GridBounds, samples_per_axis: int) -> float:
        """Square lattice spacing from the smaller non-zero planar range."""
        ranges = [r for r in (bounds.x_range, bounds.y_range) if r > 0]
        if not ranges:
            raise InsufficientInputError(
                "Horizon points do not span any planar area; cannot derive a sampling spacing"
            )
        return min(ranges) / samples_per_axis

    async def _sample_lattice(
        self,
        top: Horizon,
        base: Horizon,
        fault_systems: Sequence[FaultSystem],
        bounds: GridBounds,
        spacing: float,
        params: GridParameters,
        token: CancellationToken,
        progress: ProgressCallback | None,
    ) -> list[GridCell]:
        """Walk the lattice and collect cells, yielding cooperatively."""
        top_surface = HorizonInterpolator(top.points)
        base_surface = HorizonInterpolator(base.points)
        estimator = FaultInfluenceEstimator(
            fault_systems,
            radius=params.influence_radius,
            displacement_scale=params.displacement_scale,
        )
        rng = random.Random(params.seed)

        xs = lattice_axis(bounds.x_min, bounds.x_max, spacing)
        ys = lattice_axis(bounds.y_min, bounds.y_max, spacing)
        total_steps = len(xs) * len(ys)

        cells: list[GridCell] = []
        skipped = 0
        step = 0

        for x in xs:
            for y in ys:
                step += 1
                if step % self.yield_interval == 0:
                    token.raise_if_cancelled()
                    if progress is not None:
                        progress(step / total_steps * 100)
                    await asyncio.sleep(0)

                top_z = top_surface.elevation_at(x, y)
                bottom_z = base_surface.elevation_at(x, y)

                # Locally inverted or pinched-out geology is skipped, not an error
                if top_z <= bottom_z:
                    skipped += 1
                    continue

                column = self._stack_column(x, y, top_z, bottom_z, spacing, params, estimator, rng)
                if not column:
                    skipped += 1
                    continue
                cells.extend(column)

        logger.debug(
            "Sampled %d lattice positions (%d x %d), skipped %d",
            total_steps,
            len(xs),
            len(ys),
            skipped,
        )
        return cells

    def _stack_column(
        self,
        x: float,
        y: float,
        top_z: float,
        bottom_z: float,
        spacing: float,
        params: GridParameters,
        estimator: FaultInfluenceEstimator,
        rng: random.Random,
    ) -> list[GridCell]:
        """Proportional cell stack for one lattice position."""
        thickness = top_z - bottom_z
        intervals = params.num_layers + 1
        bulk_volume = round(spacing * spacing * thickness / intervals, 2)
        if bulk_volume <= 0:
            return []

        structural_dip = (
            math.sin(x * params.structural_frequency)
            * math.cos(y * params.structural_frequency)
            * params.structural_amplitude
        )
        well_floor = bottom_z + thickness * params.well_zone_fraction
        log_k_min = math.log10(params.permeability_min)
        log_k_max = math.log10(params.permeability_max)

        column = []
        for layer_index in range(params.layer_count):
            ratio = layer_index / intervals
            z = bottom_z + ratio * thickness + structural_dip * ratio

            fault = estimator.influence_at(x, y, z, rng)
            z += fault.displacement

            porosity = rng.uniform(params.porosity_min, params.porosity_max)
            permeability = 10 ** rng.uniform(log_k_min, log_k_max)
            is_well = rng.random() < params.well_probability and z > well_floor

            column.append(
                GridCell(
                    x=round(x, 2),
                    y=round(y, 2),
                    z=round(z, 2),
                    layer_index=layer_index,
                    bulk_volume=bulk_volume,
                    fault_flag=fault.fault_flag,
                    well_flag=is_well,
                    porosity=round(porosity, 3),
                    permeability=max(round(permeability, 2), MIN_PERMEABILITY),
                    structural_dip=round(structural_dip, 1),
                )
            )

        return column


def build_grid(
    horizons: Sequence[Horizon],
    fault_systems: Sequence[FaultSystem] = (),
    num_layers: int | None = None,
    parameters: GridParameters | None = None,
    name: str | None = None,
) -> GeologicalGrid:
    """Convenience function to build a grid outside an event loop.

    Args:
        horizons: Top and base horizons
        fault_systems: Optional fault traces
        num_layers: Interior layer count override
        parameters: Generation parameters

    Returns:
        The generated GeologicalGrid
    """
    builder = LayerStackBuilder(parameters)
    return asyncio.run(builder.build(horizons, fault_systems, num_layers, name=name))
