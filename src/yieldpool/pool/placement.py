"""Deposit placement policies."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from yieldpool.domain.models import Allocation, PlacementPolicy, StrategyEntry
from yieldpool.errors import ConfigurationError, InactiveStrategy, NoActiveStrategy

ActiveEntries = Sequence[tuple[int, StrategyEntry]]


class Placement(Protocol):
    """Maps a deposit onto active registry entries."""

    policy: PlacementPolicy

    def allocate(self, amount: int, active: ActiveEntries) -> list[Allocation]:
        """Return allocations summing to `amount`."""


def _require_active(active: ActiveEntries) -> None:
    if not active:
        raise NoActiveStrategy("no active strategy can accept the deposit")


@dataclass(frozen=True)
class FirstActivePlacement:
    """Route the whole deposit to the lowest active index."""

    policy: PlacementPolicy = PlacementPolicy.FIRST_ACTIVE

    def allocate(self, amount: int, active: ActiveEntries) -> list[Allocation]:
        _require_active(active)
        index, _ = active[0]
        return [Allocation(index=index, amount=amount)]


@dataclass(frozen=True)
class ProportionalPlacement:
    """Split the deposit pro rata to each active strategy's reported assets.

    With no deployed assets the split is equal. Rounding dust goes to the
    largest holder (the first entry on an equal split).
    """

    policy: PlacementPolicy = PlacementPolicy.PROPORTIONAL

    def allocate(self, amount: int, active: ActiveEntries) -> list[Allocation]:
        _require_active(active)
        weights = [entry.adapter.total_assets() for _, entry in active]
        total_weight = sum(weights)
        if total_weight == 0:
            weights = [1] * len(active)
            total_weight = len(active)
        shares = [amount * weight // total_weight for weight in weights]
        largest = max(range(len(weights)), key=lambda position: weights[position])
        shares[largest] += amount - sum(shares)
        return [
            Allocation(index=index, amount=share)
            for (index, _), share in zip(active, shares, strict=True)
            if share > 0
        ]


@dataclass(frozen=True)
class ExplicitTargetPlacement:
    """Route the whole deposit to one configured index."""

    target_index: int
    policy: PlacementPolicy = PlacementPolicy.EXPLICIT_TARGET

    def allocate(self, amount: int, active: ActiveEntries) -> list[Allocation]:
        _require_active(active)
        for index, _ in active:
            if index == self.target_index:
                return [Allocation(index=index, amount=amount)]
        raise InactiveStrategy(f"placement target {self.target_index} is not an active strategy")


_PLACEMENTS: dict[PlacementPolicy, Callable[[int | None], Placement]] = {
    PlacementPolicy.FIRST_ACTIVE: lambda _: FirstActivePlacement(),
    PlacementPolicy.PROPORTIONAL: lambda _: ProportionalPlacement(),
}


def build_placement(policy: PlacementPolicy | str, target_index: int | None = None) -> Placement:
    """Build a placement policy from its stable name."""
    try:
        resolved = PlacementPolicy(str(policy).strip().lower().replace("-", "_"))
    except ValueError as exc:
        supported = ", ".join(item.value for item in PlacementPolicy)
        raise ConfigurationError(f"Unknown placement policy '{policy}'. Supported: {supported}") from exc
    if resolved is PlacementPolicy.EXPLICIT_TARGET:
        if target_index is None or target_index < 0:
            raise ConfigurationError("explicit_target placement requires a non-negative target index")
        return ExplicitTargetPlacement(target_index=target_index)
    return _PLACEMENTS[resolved](target_index)
