"""Strategy adapter contract shared by every wrapped market."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from yieldpool.domain.models import Address
from yieldpool.errors import (
    AlreadyConnected,
    ConfigurationError,
    HasOutstandingAssets,
    InsufficientPosition,
    NotConnected,
    Unauthorized,
    ZeroAmount,
)
from yieldpool.tokens.base import Token


class StrategyAdapter(ABC):
    """Base adapter translating pool deposits and withdrawals into market calls.

    The base class owns the connection lifecycle and argument guards so that
    every variant fails the same way; variants implement the market-specific
    hooks. Only the connected pool may move funds through an adapter. The pool
    transfers the asset to the adapter before calling `deposit`, and
    `withdraw` pays the asset straight back to the pool.
    """

    adapter_id: str

    def __init__(self, address: Address, token: Token) -> None:
        self.address = address
        self.token = token
        self._pool: Address | None = None

    @property
    def connected(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> Address | None:
        return self._pool

    def connect(self, config: Mapping[str, Any] | None = None) -> None:
        """Bind the adapter to a pool; `config["pool"]` names the pool."""
        if self._pool is not None:
            raise AlreadyConnected(f"{self.adapter_id} adapter {self.address} is already connected")
        options = dict(config or {})
        pool = options.pop("pool", None)
        if not isinstance(pool, str) or not pool.strip():
            raise ConfigurationError("connect requires a pool address")
        self._on_connect(options)
        self._pool = pool

    def disconnect(self, force: bool = False) -> None:
        """Unbind from the pool.

        A forced disconnect never touches the market, so any remaining
        position is left stranded there.
        """
        if self._pool is None:
            if force:
                return
            raise NotConnected(f"{self.adapter_id} adapter {self.address} is not connected")
        if not force:
            outstanding = self.total_assets()
            if outstanding > 0:
                raise HasOutstandingAssets(
                    f"{self.adapter_id} adapter {self.address} still manages {outstanding}"
                )
        self._pool = None

    def deposit(self, caller: Address, amount: int) -> int:
        """Place `amount` already held by the adapter into the market."""
        self._require_pool(caller)
        if amount <= 0:
            raise ZeroAmount("deposit amount must be positive")
        self._deposit(amount)
        return amount

    def withdraw(self, caller: Address, amount: int) -> int:
        """Redeem `amount` from the market and pay it to the pool."""
        self._require_pool(caller)
        if amount <= 0:
            raise ZeroAmount("withdraw amount must be positive")
        available = self.max_withdraw(caller)
        if available < amount:
            raise InsufficientPosition(
                f"{self.adapter_id} adapter {self.address} can return {available}, "
                f"requested {amount}"
            )
        return self._withdraw(amount, caller)

    def release(self, caller: Address, amount: int) -> None:
        """Hand back `amount` of undeployed asset held by the adapter to the pool."""
        self._require_pool(caller)
        if amount > 0:
            self.token.transfer(self.address, caller, amount)

    def total_assets(self) -> int:
        """Asset units the adapter could return right now."""
        if self._pool is None:
            return 0
        return self._position_value()

    def max_withdraw(self, caller: Address) -> int:
        _ = caller
        return self.total_assets()

    @abstractmethod
    def max_deposit(self, caller: Address) -> int:
        """Asset units the adapter accepts from `caller` right now."""

    @abstractmethod
    def asset_of(self) -> Address:
        """Underlying asset identity as understood by the wrapped market."""

    def describe(self) -> dict[str, Any]:
        return {
            "adapter_id": self.adapter_id,
            "address": self.address,
            "connected": self.connected,
        }

    def _on_connect(self, options: dict[str, Any]) -> None:
        """Validate variant-specific connect options."""
        if options:
            unknown = ", ".join(sorted(options))
            raise ConfigurationError(f"{self.adapter_id} adapter has no options: {unknown}")

    @abstractmethod
    def _position_value(self) -> int:
        """Current redeemable value of the market position."""

    @abstractmethod
    def _deposit(self, amount: int) -> None:
        """Move `amount` from the adapter into the market."""

    @abstractmethod
    def _withdraw(self, amount: int, to: Address) -> int:
        """Redeem `amount` from the market to `to`."""

    def _require_pool(self, caller: Address) -> None:
        if self._pool is None:
            raise NotConnected(f"{self.adapter_id} adapter {self.address} is not connected")
        if caller != self._pool:
            raise Unauthorized(f"{caller} is not the pool of adapter {self.address}")
