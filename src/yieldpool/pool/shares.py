"""Share balances and share/asset conversion."""

from __future__ import annotations

from dataclasses import dataclass, field

from yieldpool.domain.amounts import mul_div
from yieldpool.domain.models import MAX_UINT256, Address
from yieldpool.errors import InsufficientShares, ZeroTotalAssets


def shares_for_deposit(assets: int, total_shares: int, total_assets: int) -> int:
    """Shares minted for `assets`, rounded down in favor of existing holders."""
    if total_shares == 0:
        return assets
    if total_assets == 0:
        raise ZeroTotalAssets(
            f"{total_shares} shares are outstanding against zero total assets"
        )
    return mul_div(assets, total_shares, total_assets)


def shares_for_withdraw(assets: int, total_shares: int, total_assets: int) -> int:
    """Shares burned to release `assets`, rounded up in favor of remaining holders."""
    if total_shares == 0:
        return assets
    if total_assets == 0:
        raise ZeroTotalAssets(
            f"{total_shares} shares are outstanding against zero total assets"
        )
    return mul_div(assets, total_shares, total_assets, round_up=True)


def assets_for_shares(shares: int, total_shares: int, total_assets: int) -> int:
    """Assets released for `shares`, rounded down."""
    if total_shares == 0:
        return shares
    return mul_div(shares, total_assets, total_shares)


@dataclass
class ShareLedger:
    """Fungible share balances with owner-to-spender allowances."""

    symbol: str = "SHARE"
    balances: dict[Address, int] = field(default_factory=dict)
    allowances: dict[tuple[Address, Address], int] = field(default_factory=dict)
    total_supply: int = 0

    def balance_of(self, who: Address) -> int:
        return self.balances.get(who, 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self.allowances.get((owner, spender), 0)

    def approve(self, owner: Address, spender: Address, amount: int) -> None:
        if amount < 0:
            raise InsufficientShares(f"{self.symbol}: negative approval {amount}")
        self.allowances[(owner, spender)] = amount

    def check_spend(self, spender: Address, owner: Address, shares: int) -> None:
        """Raise unless `spender` may burn or move `shares` of `owner`."""
        balance = self.balance_of(owner)
        if balance < shares:
            raise InsufficientShares(f"{self.symbol}: {owner} holds {balance}, needs {shares}")
        if spender == owner:
            return
        allowance = self.allowance(owner, spender)
        if allowance < shares:
            raise InsufficientShares(
                f"{self.symbol}: allowance {allowance} of {spender} over {owner} "
                f"is below {shares}"
            )

    def spend_allowance(self, spender: Address, owner: Address, shares: int) -> None:
        if spender == owner:
            return
        allowance = self.allowance(owner, spender)
        if allowance == MAX_UINT256:
            return
        if allowance < shares:
            raise InsufficientShares(
                f"{self.symbol}: allowance {allowance} of {spender} over {owner} "
                f"is below {shares}"
            )
        self.allowances[(owner, spender)] = allowance - shares

    def transfer(self, sender: Address, to: Address, shares: int) -> None:
        if shares < 0:
            raise InsufficientShares(f"{self.symbol}: negative transfer {shares}")
        self.check_spend(sender, sender, shares)
        self.balances[sender] = self.balance_of(sender) - shares
        self.balances[to] = self.balance_of(to) + shares

    def transfer_from(self, spender: Address, owner: Address, to: Address, shares: int) -> None:
        self.check_spend(spender, owner, shares)
        self.spend_allowance(spender, owner, shares)
        self.transfer(owner, to, shares)

    def mint(self, to: Address, shares: int) -> None:
        self.balances[to] = self.balance_of(to) + shares
        self.total_supply += shares

    def burn(self, spender: Address, owner: Address, shares: int) -> None:
        self.check_spend(spender, owner, shares)
        self.spend_allowance(spender, owner, shares)
        self.balances[owner] = self.balance_of(owner) - shares
        self.total_supply -= shares
