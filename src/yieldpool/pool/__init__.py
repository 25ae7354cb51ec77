"""Pool core, share accounting and placement policies."""

from .placement import (
    ExplicitTargetPlacement,
    FirstActivePlacement,
    Placement,
    ProportionalPlacement,
    build_placement,
)
from .shares import ShareLedger
from .vault import Pool

__all__ = [
    "ExplicitTargetPlacement",
    "FirstActivePlacement",
    "Placement",
    "Pool",
    "ProportionalPlacement",
    "ShareLedger",
    "build_placement",
]
