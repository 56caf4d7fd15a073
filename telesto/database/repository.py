"""Row-level helpers over the SQLite connection."""

from typing import Any, Dict, List, Optional

from .connection import get_db


async def repo_get(table: str, key: str, value: Any) -> Optional[Dict[str, Any]]:
    """Fetch the single row where key = value."""
    async with get_db() as conn:
        cursor = await conn.execute(f"SELECT * FROM {table} WHERE {key} = ?", (value,))
        row = await cursor.fetchone()
        return dict(row) if row else None


async def repo_list(
    table: str,
    columns: Optional[List[str]] = None,
    order_by: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """All rows of a table, optionally restricted to some columns."""
    query = f"SELECT {', '.join(columns) if columns else '*'} FROM {table}"
    if order_by:
        query += f" ORDER BY {order_by}"

    async with get_db() as conn:
        cursor = await conn.execute(query)
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]


async def repo_delete(table: str, key: str, value: Any) -> bool:
    """Delete rows where key = value; True if anything was removed."""
    async with get_db() as conn:
        cursor = await conn.execute(f"DELETE FROM {table} WHERE {key} = ?", (value,))
        return cursor.rowcount > 0
