"""
telesto: volumetric geological grids from sparse surface samples.

This package provides tools for:
- Interpolating horizon surfaces from scattered points
- Estimating fault proximity influence
- Building proportional layer-stack grids with reservoir properties
- Checking compatibility of generated grids and merging them
"""

__version__ = "1.0.0"
