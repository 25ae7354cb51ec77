"""Append-only registry of strategy adapters owned by a pool."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from yieldpool.domain.models import MAX_UINT256, Address, StrategyEntry
from yieldpool.errors import ExternalError, InactiveStrategy, IndexOutOfRange
from yieldpool.strategies.base import StrategyAdapter
from yieldpool.tokens.base import Token


class StrategyRegistry:
    """Indexed strategy slots; indices are never shifted or reused.

    Active adapters hold an unlimited allowance over the pool's asset
    custody; deactivation revokes it.
    """

    def __init__(self, pool: Address, token: Token) -> None:
        self.pool = pool
        self.token = token
        self._entries: list[StrategyEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StrategyEntry]:
        return iter(self._entries)

    def count(self) -> int:
        """Number of entries ever added, active or not."""
        return len(self._entries)

    def entry(self, index: int) -> StrategyEntry:
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexOutOfRange(f"strategy index must be an integer, got {index!r}")
        if index < 0 or index >= len(self._entries):
            raise IndexOutOfRange(
                f"strategy index {index} out of range (0..{len(self._entries) - 1})"
            )
        return self._entries[index]

    def get(self, index: int) -> StrategyAdapter:
        return self.entry(index).adapter

    def active_entry(self, index: int) -> StrategyEntry:
        entry = self.entry(index)
        if not entry.active:
            raise InactiveStrategy(f"strategy {index} is not active")
        return entry

    def active(self) -> list[tuple[int, StrategyEntry]]:
        return [(index, entry) for index, entry in enumerate(self._entries) if entry.active]

    def add(self, adapter: StrategyAdapter, config: Mapping[str, Any] | None = None) -> int:
        """Connect `adapter`, append it as active and authorize it over pool custody."""
        adapter.connect({**dict(config or {}), "pool": self.pool})
        try:
            self.token.approve(self.pool, adapter.address, MAX_UINT256)
        except Exception:
            adapter.disconnect(force=True)
            raise
        self._entries.append(StrategyEntry(adapter=adapter))
        return len(self._entries) - 1

    def deactivate(self, index: int, force: bool = False) -> int | None:
        """Disconnect and deactivate a slot; return the value left stranded.

        Returns None when a forced disconnect could not value the position.
        """
        entry = self.active_entry(index)
        stranded: int | None = 0
        if force:
            stranded = self._reported_value(entry.adapter)
        entry.adapter.disconnect(force=force)
        entry.active = False
        entry.stranded_assets = stranded
        self.token.approve(self.pool, entry.adapter.address, 0)
        return stranded

    @staticmethod
    def _reported_value(adapter: StrategyAdapter) -> int | None:
        try:
            return adapter.total_assets()
        except ExternalError:
            return None
