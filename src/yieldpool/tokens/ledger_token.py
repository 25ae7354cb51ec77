"""Deterministic in-memory fungible token."""

from __future__ import annotations

from dataclasses import dataclass, field

from yieldpool.domain.models import MAX_UINT256, Address
from yieldpool.errors import TransferFailed


@dataclass
class LedgerToken:
    """Token backed by plain balance and allowance dictionaries."""

    address: Address
    symbol: str = "TKN"
    decimals: int = 18
    balances: dict[Address, int] = field(default_factory=dict)
    allowances: dict[tuple[Address, Address], int] = field(default_factory=dict)

    def total_supply(self) -> int:
        return sum(self.balances.values())

    def balance_of(self, who: Address) -> int:
        return self.balances.get(who, 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self.allowances.get((owner, spender), 0)

    def transfer(self, sender: Address, to: Address, amount: int) -> None:
        self._move(sender, to, amount)

    def transfer_from(self, spender: Address, owner: Address, to: Address, amount: int) -> None:
        current = self.allowance(owner, spender)
        if current < amount:
            raise TransferFailed(
                f"{self.symbol}: allowance {current} of {spender} over {owner} "
                f"is below {amount}"
            )
        self._move(owner, to, amount)
        if current != MAX_UINT256:
            self.allowances[(owner, spender)] = current - amount

    def approve(self, owner: Address, spender: Address, amount: int) -> None:
        if amount < 0:
            raise TransferFailed(f"{self.symbol}: negative approval {amount}")
        self.allowances[(owner, spender)] = amount

    def mint(self, to: Address, amount: int) -> None:
        """Create `amount` new units for `to`."""
        if amount < 0:
            raise TransferFailed(f"{self.symbol}: negative mint {amount}")
        self.balances[to] = self.balance_of(to) + amount

    def burn(self, who: Address, amount: int) -> None:
        """Destroy `amount` units held by `who`."""
        balance = self.balance_of(who)
        if amount < 0 or balance < amount:
            raise TransferFailed(f"{self.symbol}: cannot burn {amount} from {who} (balance {balance})")
        self.balances[who] = balance - amount

    def _move(self, sender: Address, to: Address, amount: int) -> None:
        if amount < 0:
            raise TransferFailed(f"{self.symbol}: negative transfer {amount}")
        balance = self.balance_of(sender)
        if balance < amount:
            raise TransferFailed(
                f"{self.symbol}: balance {balance} of {sender} is below {amount}"
            )
        self.balances[sender] = balance - amount
        self.balances[to] = self.balance_of(to) + amount
