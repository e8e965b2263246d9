"""
Nearest scoring-target selection for robots on a symmetric competition field.
Targets are authored once, in the blue alliance's frame, and resolved from either side of the field.
"""

__all__ = [
    "u",
    "Field",
    "FieldSymmetry",
    "ScoringTarget",
    "TargetCatalog",
    "resolve_nearest",
    "TargetResolutionError",
    "EmptyCatalogError",
    "InvalidQueryPointError",
    "NearestTargetSelector",
]

# fmt: off

# Initialize the unit registry before importing anything that relies on it
from pint import UnitRegistry
u = UnitRegistry()

from .field import Field, FieldSymmetry
from .targets import (
    ScoringTarget,
    TargetCatalog,
    resolve_nearest,
    TargetResolutionError,
    EmptyCatalogError,
    InvalidQueryPointError,
)
from .selector import NearestTargetSelector
