"""Strategy adapters, adapter discovery and the strategy registry."""

from .aggregator_vault import AggregatorVaultAdapter
from .base import StrategyAdapter
from .catalog import available_adapter_ids, create_adapter
from .lending_pool import LendingPoolAdapter
from .registry import StrategyRegistry

__all__ = [
    "AggregatorVaultAdapter",
    "LendingPoolAdapter",
    "StrategyAdapter",
    "StrategyRegistry",
    "available_adapter_ids",
    "create_adapter",
]
