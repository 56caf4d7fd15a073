"""LangGraph workflow for grid generation.

Horizons + Faults → Validate Inputs → Build Grid → Save Grid
"""

import logging
from operator import add
from typing import Annotated, Any, TypedDict

from langgraph.graph import END, START, StateGraph

from telesto.exceptions import DatabaseError
from telesto.grid.builder import LayerStackBuilder
from telesto.grid.config import FaultSystem, GeologicalGrid, GridParameters, Horizon
from telesto.grid.errors import GridError
from telesto.grid.persistence import GridPersistenceService
from telesto.grid.validator import validate_inputs

logger = logging.getLogger(__name__)


# --- State Definition ---


class GridBuildState(TypedDict):
    """State for the grid generation workflow."""

    # Input (serialized as dicts for state management)
    horizons: list[dict]
    fault_systems: list[dict]
    parameters: dict | None
    grid_name: str | None
    persist: bool

    # Intermediate data
    grid: dict | None

    # Output
    grid_id: str | None

    # Error tracking
    errors: Annotated[list[str], add]
    warnings: Annotated[list[str], add]

    # pending, validated, built, completed, failed
    status: str


# --- Node Functions ---


async def validate_inputs_node(state: GridBuildState) -> dict:
    """Validate horizon and fault inputs."""
    try:
        horizons = [Horizon.model_validate(h) for h in state.get("horizons") or []]
        faults = [FaultSystem.model_validate(f) for f in state.get("fault_systems") or []]
    except ValueError as e:
        return {"errors": [f"Invalid input data: {e}"], "status": "failed"}

    result = validate_inputs(horizons, faults)
    if not result.is_valid:
        return {
            "errors": result.errors,
            "warnings": result.warnings,
            "status": "failed",
        }

    return {"warnings": result.warnings, "status": "validated"}


async def build_grid_node(state: GridBuildState) -> dict:
    """Run the layer stack builder."""
    try:
        horizons = [Horizon.model_validate(h) for h in state["horizons"]]
        faults = [FaultSystem.model_validate(f) for f in state.get("fault_systems") or []]
        parameters = (
            GridParameters.model_validate(state["parameters"])
            if state.get("parameters")
            else None
        )

        builder = LayerStackBuilder(parameters)
        grid = await builder.build(horizons, faults, name=state.get("grid_name"))
    except (GridError, ValueError) as e:
        return {"errors": [f"Grid generation failed: {e}"], "status": "failed"}

    warnings = []
    if grid.point_count == 0:
        warnings.append("Top horizon lies on or below the base everywhere; grid has no cells")

    return {
        "grid": grid.model_dump(mode="json"),
        "grid_id": grid.id,
        "warnings": warnings,
        "status": "built",
    }


async def save_grid_node(state: GridBuildState) -> dict:
    """Persist the built grid."""
    if not state.get("persist", True):
        return {"status": "completed"}

    grid_data = state.get("grid")
    if not grid_data:
        return {"errors": ["No grid available to save"], "status": "failed"}

    try:
        grid = GeologicalGrid.model_validate(grid_data)
        await GridPersistenceService().save_grid(grid)
    except DatabaseError as e:
        logger.exception("Saving grid failed")
        return {"errors": [f"Saving grid failed: {e}"], "status": "failed"}

    return {"status": "completed"}


# --- Routing Functions ---


def check_status(state: GridBuildState) -> str:
    """Check if we should continue or stop."""
    if state.get("status") == "failed":
        return END
    return "continue"


# --- Workflow Definition ---


def create_grid_workflow() -> StateGraph:
    """Create and return the grid generation workflow."""
    workflow = StateGraph(GridBuildState)

    workflow.add_node("validate_inputs", validate_inputs_node)
    workflow.add_node("build_grid", build_grid_node)
    workflow.add_node("save_grid", save_grid_node)

    workflow.add_edge(START, "validate_inputs")
    workflow.add_conditional_edges(
        "validate_inputs",
        check_status,
        {"continue": "build_grid", END: END},
    )
    workflow.add_conditional_edges(
        "build_grid",
        check_status,
        {"continue": "save_grid", END: END},
    )
    workflow.add_edge("save_grid", END)

    return workflow


def compile_grid_workflow():
    """Compile the grid generation workflow."""
    return create_grid_workflow().compile()


# --- Convenience Functions ---


async def generate_grid(
    horizons: list[Horizon],
    fault_systems: list[FaultSystem] | None = None,
    parameters: GridParameters | None = None,
    grid_name: str | None = None,
    persist: bool = True,
) -> GridBuildState:
    """Validate, build and (optionally) store a grid.

    Args:
        horizons: Top and base horizons
        fault_systems: Optional fault systems
        parameters: Generation parameters
        grid_name: Optional grid name
        persist: Whether to save the grid to the database

    Returns:
        Final workflow state
    """
    app = compile_grid_workflow()

    initial_state: GridBuildState = {
        "horizons": [h.model_dump() for h in horizons],
        "fault_systems": [f.model_dump() for f in fault_systems or []],
        "parameters": parameters.model_dump() if parameters else None,
        "grid_name": grid_name,
        "persist": persist,
        "grid": None,
        "grid_id": None,
        "errors": [],
        "warnings": [],
        "status": "pending",
    }

    final_state: Any = await app.ainvoke(initial_state)
    return final_state
