"""SQLite database connection management."""

import os
from contextlib import asynccontextmanager
from typing import Optional

import aiosqlite

from telesto.config import settings


class DatabaseConnection:
    """Manages the shared SQLite connection."""

    _connection: Optional[aiosqlite.Connection] = None
    _db_path: Optional[str] = None

    @classmethod
    def set_db_path(cls, path: str):
        cls._db_path = path

    @classmethod
    def get_db_path(cls) -> str:
        if cls._db_path:
            return cls._db_path
        return settings.database_path

    @classmethod
    async def get_connection(cls) -> aiosqlite.Connection:
        """Get or create the database connection."""
        if cls._connection is None:
            db_path = cls.get_db_path()
            if db_path != ":memory:":
                os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
            cls._connection = await aiosqlite.connect(db_path)
            cls._connection.row_factory = aiosqlite.Row
            await cls._connection.execute("PRAGMA foreign_keys = ON")
        return cls._connection

    @classmethod
    async def close(cls):
        """Close the database connection."""
        if cls._connection:
            await cls._connection.close()
            cls._connection = None


@asynccontextmanager
async def get_db():
    """Connection context that commits on success and rolls back on error."""
    conn = await DatabaseConnection.get_connection()
    try:
        yield conn
    except Exception:
        await conn.rollback()
        raise
    else:
        await conn.commit()


async def init_db():
    """Initialize the database with schema."""
    async with get_db() as conn:
        await conn.executescript(SCHEMA)


SCHEMA = """
-- Generated and merged grids
CREATE TABLE IF NOT EXISTS grids (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    layer_count INTEGER NOT NULL,
    point_count INTEGER NOT NULL,
    total_volume REAL NOT NULL,
    bounds_json TEXT NOT NULL,
    provenance_json TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL
);

-- Cell payload, one row per grid
CREATE TABLE IF NOT EXISTS grid_cells (
    grid_id TEXT PRIMARY KEY,
    cells_json TEXT NOT NULL,
    FOREIGN KEY (grid_id) REFERENCES grids(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_grids_created_at ON grids(created_at);
"""
