"""Domain models and event types."""

from .events import PoolEvent
from .models import (
    MAX_UINT256,
    Address,
    Allocation,
    PlacementPolicy,
    PoolSnapshot,
    ReserveData,
    StrategyEntry,
    StrategyView,
)

__all__ = [
    "MAX_UINT256",
    "Address",
    "Allocation",
    "PlacementPolicy",
    "PoolEvent",
    "PoolSnapshot",
    "ReserveData",
    "StrategyEntry",
    "StrategyView",
]
