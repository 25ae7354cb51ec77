"""Asset transfer primitive contract."""

from __future__ import annotations

from typing import Protocol

from yieldpool.domain.models import Address


class Token(Protocol):
    """Fungible token consumed by the pool, adapters and markets.

    Every failing call raises `TransferFailed` and changes nothing.
    """

    address: Address
    symbol: str
    decimals: int

    def balance_of(self, who: Address) -> int:
        """Return the balance held by `who`."""

    def allowance(self, owner: Address, spender: Address) -> int:
        """Return how much `spender` may move on behalf of `owner`."""

    def transfer(self, sender: Address, to: Address, amount: int) -> None:
        """Move `amount` from `sender` to `to`."""

    def transfer_from(self, spender: Address, owner: Address, to: Address, amount: int) -> None:
        """Move `amount` from `owner` to `to` using `spender`'s allowance."""

    def approve(self, owner: Address, spender: Address, amount: int) -> None:
        """Set `spender`'s allowance over `owner`'s balance."""
