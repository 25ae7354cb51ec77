"""External market contracts wrapped by strategy adapters."""

from __future__ import annotations

from typing import Protocol

from yieldpool.domain.models import Address, ReserveData


class LendingMarket(Protocol):
    """Lending pool issuing an asset-denominated receipt token per reserve."""

    address: Address

    def supply(
        self,
        caller: Address,
        asset: Address,
        amount: int,
        on_behalf_of: Address,
        referral_code: int,
    ) -> None:
        """Pull `amount` of `asset` from `caller` and credit receipts to `on_behalf_of`."""

    def withdraw(self, caller: Address, asset: Address, amount: int, to: Address) -> int:
        """Burn `caller`'s receipts and send the asset to `to`; return the amount withdrawn."""

    def get_reserve_data(self, asset: Address) -> ReserveData:
        """Return reserve data, including the receipt token identity."""


class AggregatorVault(Protocol):
    """Share-issuing vault whose shares convert to assets at a moving rate."""

    address: Address

    def asset(self) -> Address:
        """Return the underlying asset identity."""

    def balance_of(self, who: Address) -> int:
        """Return vault shares held by `who`."""

    def deposit(self, caller: Address, assets: int, receiver: Address) -> int:
        """Deposit `assets` from `caller`, minting shares to `receiver`."""

    def withdraw(self, caller: Address, assets: int, receiver: Address, owner: Address) -> int:
        """Send exactly `assets` to `receiver`, burning `owner`'s shares."""

    def redeem(self, caller: Address, shares: int, receiver: Address, owner: Address) -> int:
        """Burn exactly `shares` of `owner`, sending the assets to `receiver`."""

    def preview_redeem(self, shares: int) -> int:
        """Return the assets `shares` would redeem for right now."""

    def preview_withdraw(self, assets: int) -> int:
        """Return the shares needed to withdraw `assets` right now."""

    def max_withdraw(self, owner: Address) -> int:
        """Return the assets `owner` can withdraw right now."""
