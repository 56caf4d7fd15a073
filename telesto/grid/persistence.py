"""Database persistence for generated grids.

Grids are stored as a summary row plus a JSON cell payload, so every cell
field comes back at the precision it was generated with.
"""

import json
import logging
import sqlite3
from typing import Optional

from pydantic import TypeAdapter

from telesto.database.connection import get_db
from telesto.database.repository import repo_delete, repo_get, repo_list
from telesto.exceptions import DatabaseError, NotFoundError
from .config import GeologicalGrid, GridBounds, GridCell, GridProvenance

logger = logging.getLogger(__name__)

_cells_adapter = TypeAdapter(tuple[GridCell, ...])

SUMMARY_COLUMNS = [
    "id",
    "name",
    "layer_count",
    "point_count",
    "total_volume",
    "bounds_json",
    "provenance_json",
    "created_at",
]


class GridPersistenceService:
    """Persists grids to the database."""

    async def save_grid(self, grid: GeologicalGrid) -> str:
        """Save a grid and its cells in one transaction.

        Args:
            grid: The grid to store

        Returns:
            The grid id

        Raises:
            DatabaseError: If the grid cannot be written; nothing is stored
        """
        try:
            await self._insert(grid)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to save grid {grid.id}: {e}") from e

        logger.debug("Saved grid %s (%d cells)", grid.id, grid.point_count)
        return grid.id

    async def _insert(self, grid: GeologicalGrid) -> None:
        async with get_db() as conn:
            await conn.execute(
                "INSERT INTO grids (id, name, layer_count, point_count, total_volume, "
                "bounds_json, provenance_json, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    grid.id,
                    grid.name,
                    grid.layer_count,
                    grid.point_count,
                    grid.total_volume,
                    grid.bounds.model_dump_json(),
                    grid.provenance.model_dump_json(),
                    grid.created_at.isoformat(),
                ),
            )
            await conn.execute(
                "INSERT INTO grid_cells (grid_id, cells_json) VALUES (?, ?)",
                (grid.id, _cells_adapter.dump_json(grid.cells).decode("utf-8")),
            )

    async def load_grid(self, grid_id: str) -> Optional[GeologicalGrid]:
        """Load a grid with all of its cells, or None if not found."""
        record = await repo_get("grids", "id", grid_id)
        if not record:
            return None

        payload = await repo_get("grid_cells", "grid_id", grid_id)
        cells = _cells_adapter.validate_json(payload["cells_json"]) if payload else ()

        return GeologicalGrid(
            id=record["id"],
            name=record["name"],
            cells=cells,
            bounds=GridBounds.model_validate_json(record["bounds_json"]),
            layer_count=record["layer_count"],
            point_count=record["point_count"],
            total_volume=record["total_volume"],
            created_at=record["created_at"],
            provenance=GridProvenance.model_validate_json(record["provenance_json"]),
        )

    async def get_grid(self, grid_id: str) -> GeologicalGrid:
        """Load a grid.

        Raises:
            NotFoundError: If no grid has this id
        """
        grid = await self.load_grid(grid_id)
        if grid is None:
            raise NotFoundError(f"Grid {grid_id} not found")
        return grid

    async def get_grid_summary(self, grid_id: str) -> Optional[dict]:
        """Grid metadata without cells, or None if not found."""
        record = await repo_get("grids", "id", grid_id)
        if not record:
            return None
        return self._summary(record)

    async def list_grids(self) -> list[dict]:
        """Summaries of all stored grids, newest first."""
        records = await repo_list("grids", columns=SUMMARY_COLUMNS, order_by="created_at DESC")
        return [self._summary(r) for r in records]

    async def delete_grid(self, grid_id: str) -> bool:
        """Delete a grid; its cells cascade."""
        return await repo_delete("grids", "id", grid_id)

    def _summary(self, record: dict) -> dict:
        return {
            "id": record["id"],
            "name": record["name"],
            "layer_count": record["layer_count"],
            "point_count": record["point_count"],
            "total_volume": record["total_volume"],
            "bounds": json.loads(record["bounds_json"]),
            "provenance": json.loads(record["provenance_json"]),
            "created_at": record["created_at"],
        }
