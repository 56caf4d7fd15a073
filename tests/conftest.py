"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from telesto.database.connection import DatabaseConnection, init_db  # noqa: E402
from telesto.grid import (  # noqa: E402
    FaultSystem,
    FaultTracePoint,
    GeologicalGrid,
    GridBounds,
    GridCell,
    GridParameters,
    Horizon,
    SurfacePoint,
)


def flat_horizon(name: str, z: float, nodes: int = 10, spacing: float = 100.0) -> Horizon:
    """A flat horizon sampled on a regular nodes x nodes lattice."""
    points = tuple(
        SurfacePoint(x=i * spacing, y=j * spacing, z=z)
        for i in range(nodes)
        for j in range(nodes)
    )
    return Horizon(name=name, points=points)


def make_grid(
    name: str = "Grid",
    x_min: float = 0.0,
    x_max: float = 1000.0,
    layer_count: int = 5,
    columns: int = 20,
    thickness: float = 100.0,
) -> GeologicalGrid:
    """A small hand-built grid with `columns` stacks of layer_count cells along x."""
    step = (x_max - x_min) / max(columns - 1, 1)
    cells = []
    for c in range(columns):
        x = x_min + c * step
        for layer in range(layer_count):
            cells.append(
                GridCell(
                    x=round(x, 2),
                    y=500.0,
                    z=round(900.0 + layer * thickness / (layer_count - 1), 2),
                    layer_index=layer,
                    bulk_volume=125.5,
                    fault_flag=1 if c == 0 else 0,
                    well_flag=layer == layer_count - 1 and c % 5 == 0,
                    porosity=0.2,
                    permeability=100.0,
                    structural_dip=0.0,
                )
            )

    return GeologicalGrid(
        name=name,
        cells=tuple(cells),
        bounds=GridBounds.from_points(cells),
        layer_count=layer_count,
        point_count=len(cells),
        total_volume=round(125.5 * len(cells), 2),
    )


@pytest.fixture
def flat_slab():
    """Flat top at z=1000 over base at z=900, 10 x 10 samples at spacing 100."""
    return [flat_horizon("Top", 1000.0), flat_horizon("Base", 900.0)]


@pytest.fixture
def fault_system():
    """A single vertical fault plane at x=450 spanning the slab."""
    points = tuple(
        FaultTracePoint(x=450.0, y=y, z=z, segment_id=1)
        for y in range(0, 1000, 50)
        for z in (900.0, 950.0, 1000.0)
    )
    return FaultSystem(name="Test Fault", points=points)


@pytest.fixture
def quiet_parameters():
    """Parameters with no structural or fault perturbation."""
    return GridParameters(
        num_layers=3,
        samples_per_axis=10,
        structural_amplitude=0.0,
        displacement_scale=0.0,
        seed=7,
    )


@pytest.fixture
def grid_factory():
    """Factory for hand-built grids."""
    return make_grid


@pytest.fixture
async def db():
    """Fresh in-memory database for each test."""
    await DatabaseConnection.close()
    DatabaseConnection.set_db_path(":memory:")
    await init_db()
    yield
    await DatabaseConnection.close()
