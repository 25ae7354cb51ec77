"""External market contracts and in-memory implementations."""

from .aggregator_vault import SimulatedAggregatorVault
from .base import AggregatorVault, LendingMarket
from .lending_pool import SimulatedLendingPool

__all__ = [
    "AggregatorVault",
    "LendingMarket",
    "SimulatedAggregatorVault",
    "SimulatedLendingPool",
]
