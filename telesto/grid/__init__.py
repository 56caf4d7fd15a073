"""Grid generation pipeline for telesto.

This package turns sparse horizon and fault samples into a dense,
property-bearing cell lattice, and combines compatible grids.

Main components:
- interpolation: Horizon elevation estimates (local IDW)
- faults: Fault proximity influence and displacement
- builder: Layer stack grid construction
- compatibility: Whether grids may be combined
- merge: Vertical / horizontal grid merging
- statistics, wells: volumetrics, thickness, structure and well paths
- validator, spatial, exporter, persistence: input checks, sample data,
  export and storage collaborators
"""

from .config import (
    CompatibilityReport,
    FaultInfluence,
    FaultSystem,
    FaultTracePoint,
    GeologicalGrid,
    GridBounds,
    GridCell,
    GridParameters,
    GridProvenance,
    Horizon,
    MergeDirection,
    MergeStatistics,
    SurfacePoint,
)
from .errors import (
    EmptyInterpolationSetWarning,
    GenerationCancelledError,
    GridBuildError,
    GridError,
    IncompatibleGridsError,
    InsufficientInputError,
)
from .interpolation import HorizonInterpolator, elevation_at
from .faults import FaultInfluenceEstimator, influence_at
from .builder import CancellationToken, LayerStackBuilder, build_grid
from .compatibility import GridCompatibilityChecker, check_compatibility
from .merge import GridMergeEngine, merge_grids
from .statistics import (
    StructuralAnalysis,
    ThicknessMap,
    VolumeStatistics,
    cell_statistics,
    grid_structural_analysis,
    structural_analysis,
    thickness_map,
    volume_statistics,
)
from .wells import (
    WellIntersection,
    WellPath,
    WellStation,
    WellStatistics,
    WellType,
    calculate_well_intersections,
    calculate_well_statistics,
    generate_sample_well_path,
)
from .validator import FaultValidator, HorizonValidator, ValidationResult, validate_inputs
from .spatial import SampleDataGenerator
from .exporter import EXPORT_FIELDS, GridExporter, export_grid_csv
from .persistence import GridPersistenceService

__all__ = [
    # Data model
    "CompatibilityReport",
    "FaultInfluence",
    "FaultSystem",
    "FaultTracePoint",
    "GeologicalGrid",
    "GridBounds",
    "GridCell",
    "GridParameters",
    "GridProvenance",
    "Horizon",
    "MergeDirection",
    "MergeStatistics",
    "SurfacePoint",
    # Errors
    "EmptyInterpolationSetWarning",
    "GenerationCancelledError",
    "GridBuildError",
    "GridError",
    "IncompatibleGridsError",
    "InsufficientInputError",
    # Core pipeline
    "HorizonInterpolator",
    "elevation_at",
    "FaultInfluenceEstimator",
    "influence_at",
    "CancellationToken",
    "LayerStackBuilder",
    "build_grid",
    "GridCompatibilityChecker",
    "check_compatibility",
    "GridMergeEngine",
    "merge_grids",
    # Collaborators
    "StructuralAnalysis",
    "ThicknessMap",
    "VolumeStatistics",
    "cell_statistics",
    "grid_structural_analysis",
    "structural_analysis",
    "thickness_map",
    "volume_statistics",
    "WellIntersection",
    "WellPath",
    "WellStation",
    "WellStatistics",
    "WellType",
    "calculate_well_intersections",
    "calculate_well_statistics",
    "generate_sample_well_path",
    "FaultValidator",
    "HorizonValidator",
    "ValidationResult",
    "validate_inputs",
    "SampleDataGenerator",
    "EXPORT_FIELDS",
    "GridExporter",
    "export_grid_csv",
    "GridPersistenceService",
]
