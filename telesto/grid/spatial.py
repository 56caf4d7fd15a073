"""Synthetic horizon and fault data for demos and tests.

This module generates a realistic-looking top/base horizon pair over an
anticlinal structure and two fault systems (a listric main fault and a
secondary normal fault), reproducibly from a seed.
"""

import math
import random

from .config import FaultSystem, FaultTracePoint, Horizon, SurfacePoint


class SampleDataGenerator:
    """Generates sample horizons and faults.

    Generation rules:
    - Horizons are sampled on a regular (nodes x nodes) lattice
    - The top surface is an anticline around base_elevation with noise
    - The base surface sits roughly `separation` below the top with its
      own undulation, so the package thickens and thins across the area
    - The main fault is listric (dip varies with depth); the secondary
      fault is a gently curved near-vertical plane
    """

    def __init__(
        self,
        nodes: int = 21,
        spacing: float = 50.0,
        base_elevation: float = 2000.0,
        separation: float = 400.0,
        seed: int | None = None,
    ):
        """Initialize the sample generator.

        Args:
            nodes: Lattice nodes per axis for each horizon
            spacing: Distance between lattice nodes
            base_elevation: Mean elevation of the top horizon
            separation: Mean vertical distance between top and base
            seed: Optional random seed for reproducibility
        """
        self.nodes = nodes
        self.spacing = spacing
        self.base_elevation = base_elevation
        self.separation = separation
        self._rng = random.Random(seed)

    @property
    def extent(self) -> float:
        return (self.nodes - 1) * self.spacing

    def generate_horizons(self) -> list[Horizon]:
        """Top and base horizons, top first."""
        top: list[SurfacePoint] = []
        base: list[SurfacePoint] = []

        for i in range(self.nodes):
            for j in range(self.nodes):
                x = i * self.spacing
                y = j * self.spacing

                top_z = (
                    self.base_elevation
                    + math.sin(i * 0.2) * 150
                    + math.cos(j * 0.15) * 100
                    + math.sin(i * 0.1) * math.cos(j * 0.1) * 80
                    + self._rng.uniform(-10, 10)
                )
                base_z = (
                    top_z
                    - self.separation
                    - math.sin(i * 0.25) * 120
                    - math.cos(j * 0.18) * 80
                    - math.sin(i * 0.12) * math.sin(j * 0.08) * 60
                    + self._rng.uniform(-15, 15)
                )

                top.append(SurfacePoint(x=round(x, 2), y=round(y, 2), z=round(top_z, 2)))
                base.append(SurfacePoint(x=round(x, 2), y=round(y, 2), z=round(base_z, 2)))

        return [
            Horizon(name="Top Formation", points=tuple(top)),
            Horizon(name="Base Formation", points=tuple(base)),
        ]

    def generate_faults(self) -> list[FaultSystem]:
        """Main (segment 1) and secondary (segment 2) fault systems."""
        extent = self.extent
        z_top = self.base_elevation + 200
        z_bottom = self.base_elevation - 600
        z_step = 40.0

        main: list[FaultTracePoint] = []
        for y in lattice_axis(0.0, extent, self.spacing):
            for z in lattice_axis(z_bottom, z_top, z_step):
                # Dip varies with depth
                dip = 70 + math.sin(z * 0.002) * 15
                x = extent / 2 + (z - z_bottom) / math.tan(math.radians(dip))
                main.append(FaultTracePoint(x=round(x, 2), y=round(y, 2), z=round(z, 2), segment_id=1))

        secondary: list[FaultTracePoint] = []
        for x in lattice_axis(extent * 0.2, extent * 0.8, self.spacing):
            for z in lattice_axis(z_bottom + 100, z_top - 100, z_step):
                y = extent * 0.6 + math.sin(x * 0.01) * 50
                secondary.append(
                    FaultTracePoint(x=round(x, 2), y=round(y, 2), z=round(z, 2), segment_id=2)
                )

        return [
            FaultSystem(name="Main Fault", points=tuple(main)),
            FaultSystem(name="Secondary Fault", points=tuple(secondary)),
        ]


def lattice_axis(lo: float, hi: float, spacing: float) -> list[float]:
    """Regular coordinates lo, lo + spacing, ... up to hi inclusive.

    A small tolerance keeps hi itself when (hi - lo) is a whole number of
    spacings up to floating point error.
    """
    if spacing <= 0:
        raise ValueError(f"spacing must be positive, got {spacing}")
    count = int(math.floor((hi - lo) / spacing + 1e-9)) + 1
    return [lo + k * spacing for k in range(max(count, 0))]
