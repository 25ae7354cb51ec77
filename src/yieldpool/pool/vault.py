"""Pool core: share accounting and capital routing across strategies."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping, Sequence
from functools import partial
from typing import Any

from yieldpool.domain.events import PoolEvent
from yieldpool.domain.models import (
    Address,
    Allocation,
    PoolSnapshot,
    StrategyEntry,
    StrategyView,
)
from yieldpool.errors import (
    AssetMismatch,
    ConfigurationError,
    InsufficientLiquidity,
    RollbackFailed,
    Unauthorized,
    ZeroAmount,
)
from yieldpool.logging.event_sink import EventSink, NullEventSink
from yieldpool.logging.logger import PoolLogger
from yieldpool.pool.placement import FirstActivePlacement, Placement
from yieldpool.pool.shares import (
    ShareLedger,
    assets_for_shares,
    shares_for_deposit,
    shares_for_withdraw,
)
from yieldpool.strategies.base import StrategyAdapter
from yieldpool.strategies.registry import StrategyRegistry
from yieldpool.tokens.base import Token


class Pool:
    """Single-asset pool issuing shares and deploying capital into strategies.

    `total_assets()` is the idle balance plus what every active strategy
    reports; that total over `total_supply()` is the exchange rate for
    minting and burning. Every public call holds one pool-wide lock, and a
    failing mutation is rolled back before the error propagates.
    """

    def __init__(
        self,
        address: Address,
        token: Token,
        owner: Address,
        placement: Placement | None = None,
        allow_idle_deposits: bool = False,
        event_sink: EventSink | None = None,
        logger: PoolLogger | None = None,
        name: str = "Yield Pool Share",
        symbol: str = "ypS",
    ) -> None:
        self.address = address
        self.token = token
        self.owner = owner
        self.placement: Placement = placement or FirstActivePlacement()
        self.allow_idle_deposits = allow_idle_deposits
        self.name = name
        self.symbol = symbol
        self.registry = StrategyRegistry(address, token)
        self._shares = ShareLedger(symbol=symbol)
        self._event_sink: EventSink = event_sink or NullEventSink()
        self._logger = logger or PoolLogger(decimals=token.decimals)
        self._lock = threading.RLock()

    @property
    def asset(self) -> Address:
        return self.token.address

    @property
    def decimals(self) -> int:
        return self.token.decimals

    # Share token surface

    def total_supply(self) -> int:
        with self._lock:
            return self._shares.total_supply

    def balance_of(self, who: Address) -> int:
        with self._lock:
            return self._shares.balance_of(who)

    def allowance(self, owner: Address, spender: Address) -> int:
        with self._lock:
            return self._shares.allowance(owner, spender)

    def approve(self, owner: Address, spender: Address, shares: int) -> None:
        with self._lock:
            self._shares.approve(owner, spender, shares)

    def transfer(self, sender: Address, to: Address, shares: int) -> None:
        with self._lock:
            self._shares.transfer(sender, to, shares)

    def transfer_from(self, spender: Address, owner: Address, to: Address, shares: int) -> None:
        with self._lock:
            self._shares.transfer_from(spender, owner, to, shares)

    # Accounting

    def idle_balance(self) -> int:
        with self._lock:
            return self.token.balance_of(self.address)

    def total_assets(self) -> int:
        with self._lock:
            deployed = sum(entry.adapter.total_assets() for _, entry in self.registry.active())
            return self.idle_balance() + deployed

    def convert_to_shares(self, assets: int) -> int:
        with self._lock:
            return shares_for_deposit(assets, self._shares.total_supply, self.total_assets())

    def convert_to_assets(self, shares: int) -> int:
        with self._lock:
            return assets_for_shares(shares, self._shares.total_supply, self.total_assets())

    def preview_deposit(self, assets: int) -> int:
        return self.convert_to_shares(assets)

    def preview_withdraw(self, assets: int) -> int:
        with self._lock:
            return shares_for_withdraw(assets, self._shares.total_supply, self.total_assets())

    def preview_redeem(self, shares: int) -> int:
        return self.convert_to_assets(shares)

    def available_liquidity(self) -> int:
        """Idle balance plus what active strategies can return right now."""
        with self._lock:
            pullable = sum(
                entry.adapter.max_withdraw(self.address) for _, entry in self.registry.active()
            )
            return self.idle_balance() + pullable

    def max_withdraw(self, owner: Address) -> int:
        with self._lock:
            return min(self.convert_to_assets(self.balance_of(owner)), self.available_liquidity())

    def max_redeem(self, owner: Address) -> int:
        with self._lock:
            balance = self.balance_of(owner)
            if self._shares.total_supply == 0:
                return balance
            if self.total_assets() == 0:
                return 0
            return min(balance, self.convert_to_shares(self.available_liquidity()))

    # User operations

    def deposit(self, caller: Address, amount: int, receiver: Address) -> int:
        """Take `amount` from `caller`, deploy it, and mint shares to `receiver`."""
        with self._lock:
            if amount <= 0:
                raise ZeroAmount("deposit amount must be positive")
            shares = shares_for_deposit(amount, self._shares.total_supply, self.total_assets())
            if shares == 0:
                raise ZeroAmount(f"deposit of {amount} would mint zero shares")
            active = self.registry.active()
            if active or not self.allow_idle_deposits:
                allocations = self.placement.allocate(amount, active)
            else:
                allocations = []

            idle_before = self.idle_balance()
            self.token.transfer_from(self.address, caller, self.address, amount)
            try:
                self._deploy(allocations)
            except Exception:
                refund = min(amount, self.idle_balance() - idle_before)
                if refund > 0:
                    self.token.transfer(self.address, caller, refund)
                raise

            self._shares.mint(receiver, shares)
            self._record(
                "deposit",
                announce=[
                    partial(self._logger.deposit, caller, receiver, amount, shares),
                    partial(
                        self._logger.placement,
                        {item.index: item.amount for item in allocations},
                    ),
                ],
                caller=caller,
                receiver=receiver,
                assets=amount,
                shares=shares,
                allocations={str(item.index): item.amount for item in allocations},
            )
            return shares

    def withdraw(self, caller: Address, amount: int, receiver: Address, owner: Address) -> int:
        """Pay exactly `amount` to `receiver`, burning the implied shares of `owner`."""
        with self._lock:
            if amount <= 0:
                raise ZeroAmount("withdraw amount must be positive")
            total_assets = self.total_assets()
            if total_assets == 0:
                raise InsufficientLiquidity(f"pool holds no assets to cover {amount}")
            shares = shares_for_withdraw(amount, self._shares.total_supply, total_assets)
            self._exit(caller, receiver, owner, amount, shares, "withdraw")
            return shares

    def redeem(self, caller: Address, shares: int, receiver: Address, owner: Address) -> int:
        """Burn exactly `shares` of `owner`, paying the assets they convert to."""
        with self._lock:
            if shares <= 0:
                raise ZeroAmount("redeem shares must be positive")
            assets = assets_for_shares(shares, self._shares.total_supply, self.total_assets())
            if assets == 0:
                raise ZeroAmount(f"redeeming {shares} shares would return zero assets")
            self._exit(caller, receiver, owner, assets, shares, "redeem")
            return assets

    # Controlling-authority operations

    def add_strategy(
        self,
        caller: Address,
        adapter: StrategyAdapter,
        config: Mapping[str, Any] | None = None,
    ) -> int:
        with self._lock:
            self._require_owner(caller)
            adapter_asset = adapter.asset_of()
            if adapter_asset != self.asset:
                raise AssetMismatch(
                    f"adapter {adapter.address} wraps {adapter_asset}, pool asset is {self.asset}"
                )
            index = self.registry.add(adapter, config)
            details = adapter.describe()
            self._record(
                "strategy_added",
                announce=[partial(self._logger.strategy_added, index, details)],
                index=index,
                **details,
            )
            return index

    def remove_strategy(self, caller: Address, index: int, force: bool = False) -> None:
        with self._lock:
            self._require_owner(caller)
            stranded = self.registry.deactivate(index, force=force)
            self._record(
                "strategy_removed",
                announce=[partial(self._logger.strategy_removed, index, force, stranded)],
                index=index,
                forced=force,
                stranded=stranded,
            )

    def rebalance(self, caller: Address, from_index: int, to_index: int, amount: int) -> None:
        """Move `amount` from one active strategy to another; shares are untouched."""
        with self._lock:
            self._require_owner(caller)
            source = self.registry.entry(from_index)
            self.registry.entry(to_index)
            self.registry.active_entry(from_index)
            self.registry.active_entry(to_index)
            if from_index == to_index:
                raise ConfigurationError("rebalance source and target must differ")
            if amount <= 0:
                raise ZeroAmount("rebalance amount must be positive")

            source.adapter.withdraw(self.address, amount)
            try:
                self._push(to_index, amount)
            except Exception as exc:
                self._rollback(exc, [partial(self._push, from_index, amount)])
                raise
            self._record(
                "rebalance",
                announce=[partial(self._logger.rebalance, from_index, to_index, amount)],
                from_index=from_index,
                to_index=to_index,
                amount=amount,
            )

    def transfer_ownership(self, caller: Address, new_owner: Address) -> None:
        with self._lock:
            self._require_owner(caller)
            if not new_owner:
                raise ConfigurationError("new owner must be a non-empty address")
            previous = self.owner
            self.owner = new_owner
            self._record("ownership_transferred", previous=previous, owner=new_owner)

    # Registry views

    def num_strategies(self) -> int:
        with self._lock:
            return self.registry.count()

    def strategy(self, index: int) -> StrategyEntry:
        with self._lock:
            return self.registry.entry(index)

    def strategies(self) -> list[StrategyView]:
        with self._lock:
            return [self._view(index, entry) for index, entry in enumerate(self.registry)]

    def snapshot(self) -> PoolSnapshot:
        with self._lock:
            views = tuple(self.strategies())
            idle = self.idle_balance()
            deployed = sum(view.total_assets for view in views if view.active)
            return PoolSnapshot(
                idle_balance=idle,
                total_assets=idle + deployed,
                total_shares=self._shares.total_supply,
                strategies=views,
            )

    # Internals

    def _exit(
        self,
        caller: Address,
        receiver: Address,
        owner: Address,
        assets: int,
        shares: int,
        event_type: str,
    ) -> None:
        self._shares.check_spend(caller, owner, shares)
        pulled = self._gather(assets)
        try:
            self.token.transfer(self.address, receiver, assets)
        except Exception as exc:
            self._rollback(
                exc,
                [partial(self._push, index, amount) for index, amount in reversed(pulled.items())],
            )
            raise
        self._shares.burn(caller, owner, shares)
        self._record(
            event_type,
            announce=[partial(self._logger.withdraw, owner, receiver, assets, shares, pulled)],
            caller=caller,
            receiver=receiver,
            owner=owner,
            assets=assets,
            shares=shares,
            pulled={str(index): amount for index, amount in pulled.items()},
        )

    def _gather(self, amount: int) -> dict[int, int]:
        """Pull the shortfall over the idle balance from strategies in index order."""
        shortfall = amount - self.idle_balance()
        if shortfall <= 0:
            return {}
        plan: dict[int, int] = {}
        for index, entry in self.registry.active():
            if shortfall <= 0:
                break
            take = min(entry.adapter.max_withdraw(self.address), shortfall)
            if take > 0:
                plan[index] = take
                shortfall -= take
        if shortfall > 0:
            raise InsufficientLiquidity(
                f"cannot cover {amount}: {self.available_liquidity()} available"
            )

        pulled: dict[int, int] = {}
        try:
            for index, take in plan.items():
                self.registry.get(index).withdraw(self.address, take)
                pulled[index] = take
        except Exception as exc:
            self._rollback(
                exc,
                [partial(self._push, index, take) for index, take in reversed(pulled.items())],
            )
            raise
        return pulled

    def _deploy(self, allocations: Sequence[Allocation]) -> None:
        placed: list[Allocation] = []
        try:
            for allocation in allocations:
                self._push(allocation.index, allocation.amount)
                placed.append(allocation)
        except Exception as exc:
            self._rollback(exc, [partial(self._pull_back, item) for item in reversed(placed)])
            raise

    def _push(self, index: int, amount: int) -> None:
        adapter = self.registry.get(index)
        self.token.transfer(self.address, adapter.address, amount)
        try:
            adapter.deposit(self.address, amount)
        except Exception:
            adapter.release(self.address, amount)
            raise

    def _pull_back(self, allocation: Allocation) -> None:
        adapter = self.registry.get(allocation.index)
        amount = min(allocation.amount, adapter.max_withdraw(self.address))
        if amount > 0:
            adapter.withdraw(self.address, amount)

    def _rollback(self, error: Exception, steps: Sequence[Callable[[], None]]) -> None:
        for step in steps:
            try:
                step()
            except Exception as undo_error:
                self._logger.error(f"rollback failed after {error!r}: {undo_error!r}")
                raise RollbackFailed(
                    f"could not undo after {type(error).__name__}: {undo_error}; "
                    "recovered funds remain idle in the pool"
                ) from error

    def _require_owner(self, caller: Address) -> None:
        if caller != self.owner:
            raise Unauthorized(f"{caller} is not the pool owner")

    def _view(self, index: int, entry: StrategyEntry) -> StrategyView:
        return StrategyView(
            index=index,
            adapter_id=entry.adapter.adapter_id,
            address=entry.adapter.address,
            active=entry.active,
            total_assets=entry.adapter.total_assets() if entry.active else 0,
        )

    def _record(
        self,
        event_type: str,
        announce: Sequence[Callable[[], None]] = (),
        **payload: Any,
    ) -> None:
        """Log and emit a committed change.

        The change has already happened, so a failing logger, valuation or
        sink is reported through the error log instead of reaching the caller.
        """
        try:
            for line in announce:
                line()
            idle = self.idle_balance()
            total_assets = self.total_assets()
            total_shares = self._shares.total_supply
            self._logger.totals(idle, total_assets, total_shares)
            self._event_sink.emit(
                PoolEvent(
                    pool=self.address,
                    event_type=event_type,
                    payload={
                        **payload,
                        "idle_balance": idle,
                        "total_assets": total_assets,
                        "total_shares": total_shares,
                    },
                )
            )
        except Exception as exc:
            self._logger.error(f"{event_type} committed but not recorded: {exc!r}")
