"""Core pool domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yieldpool.strategies.base import StrategyAdapter

Address = str

MAX_UINT256 = 2**256 - 1


class PlacementPolicy(StrEnum):
    """Supported deposit placement policies."""

    FIRST_ACTIVE = "first_active"
    PROPORTIONAL = "proportional"
    EXPLICIT_TARGET = "explicit_target"


@dataclass
class StrategyEntry:
    """Registry slot for one adapter; never removed, only deactivated."""

    adapter: StrategyAdapter
    active: bool = True
    stranded_assets: int | None = 0

    @property
    def address(self) -> Address:
        return self.adapter.address


@dataclass(frozen=True)
class Allocation:
    """Amount a placement policy routes to one registry index."""

    index: int
    amount: int


@dataclass(frozen=True)
class ReserveData:
    """Subset of lending-market reserve data used by adapters."""

    asset: Address
    receipt_token: Address


@dataclass(frozen=True)
class StrategyView:
    """Reported state of a registry entry."""

    index: int
    adapter_id: str
    address: Address
    active: bool
    total_assets: int


@dataclass(frozen=True)
class PoolSnapshot:
    """Point-in-time pool accounting view."""

    idle_balance: int
    total_assets: int
    total_shares: int
    strategies: tuple[StrategyView, ...] = ()

    @property
    def deployed_assets(self) -> int:
        return sum(view.total_assets for view in self.strategies if view.active)

    @property
    def share_price(self) -> float:
        """Assets per share; 1.0 for an empty pool."""
        if self.total_shares == 0:
            return 1.0
        return self.total_assets / self.total_shares
