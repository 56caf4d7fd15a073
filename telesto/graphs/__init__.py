"""LangGraph workflows for grid generation."""

from .grid import (
    GridBuildState,
    compile_grid_workflow,
    create_grid_workflow,
    generate_grid,
)

__all__ = [
    "GridBuildState",
    "create_grid_workflow",
    "compile_grid_workflow",
    "generate_grid",
]
