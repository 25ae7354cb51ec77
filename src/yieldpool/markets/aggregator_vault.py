"""Deterministic in-memory share-issuing vault."""

from __future__ import annotations

from dataclasses import dataclass, field

from yieldpool.domain.amounts import mul_div
from yieldpool.domain.models import Address
from yieldpool.errors import MarketError
from yieldpool.tokens.ledger_token import LedgerToken


@dataclass
class SimulatedAggregatorVault:
    """Vault whose share price moves with reported yield and losses."""

    address: Address
    token: LedgerToken
    shares: dict[Address, int] = field(default_factory=dict)
    total_supply: int = 0
    paused: bool = False

    def asset(self) -> Address:
        return self.token.address

    def total_assets(self) -> int:
        return self.token.balance_of(self.address)

    def balance_of(self, who: Address) -> int:
        return self.shares.get(who, 0)

    def convert_to_shares(self, assets: int, round_up: bool = False) -> int:
        if self.total_supply == 0:
            return assets
        return mul_div(assets, self.total_supply, self.total_assets(), round_up=round_up)

    def convert_to_assets(self, shares: int, round_up: bool = False) -> int:
        if self.total_supply == 0:
            return shares
        return mul_div(shares, self.total_assets(), self.total_supply, round_up=round_up)

    def preview_deposit(self, assets: int) -> int:
        return self.convert_to_shares(assets)

    def preview_withdraw(self, assets: int) -> int:
        return self.convert_to_shares(assets, round_up=True)

    def preview_redeem(self, shares: int) -> int:
        return self.convert_to_assets(shares)

    def max_withdraw(self, owner: Address) -> int:
        return self.preview_redeem(self.balance_of(owner))

    def deposit(self, caller: Address, assets: int, receiver: Address) -> int:
        self._ensure_live()
        if self.total_supply > 0 and self.total_assets() == 0:
            raise MarketError("vault has shares outstanding but no assets")
        shares = self.preview_deposit(assets)
        if shares <= 0:
            raise MarketError("deposit would mint zero shares")
        self.token.transfer_from(self.address, caller, self.address, assets)
        self._mint(receiver, shares)
        return shares

    def withdraw(self, caller: Address, assets: int, receiver: Address, owner: Address) -> int:
        self._ensure_live()
        if assets <= 0:
            raise MarketError("withdraw amount must be positive")
        shares = self.preview_withdraw(assets)
        self._redeem_shares(caller, owner, receiver, shares, assets)
        return shares

    def redeem(self, caller: Address, shares: int, receiver: Address, owner: Address) -> int:
        self._ensure_live()
        assets = self.preview_redeem(shares)
        if assets <= 0:
            raise MarketError("redeem would return zero assets")
        self._redeem_shares(caller, owner, receiver, shares, assets)
        return assets

    def report_yield(self, amount: int) -> None:
        """Simulate strategy profit accruing to every shareholder."""
        self.token.mint(self.address, amount)

    def report_loss(self, amount: int) -> None:
        """Simulate a loss borne by every shareholder."""
        self.token.burn(self.address, amount)

    def set_paused(self, paused: bool) -> None:
        self.paused = paused

    def _redeem_shares(
        self,
        caller: Address,
        owner: Address,
        receiver: Address,
        shares: int,
        assets: int,
    ) -> None:
        if caller != owner:
            raise MarketError(f"{caller} may not redeem shares of {owner}")
        held = self.balance_of(owner)
        if held < shares:
            raise MarketError(f"share balance {held} is below {shares}")
        self.token.transfer(self.address, receiver, assets)
        self.shares[owner] = held - shares
        self.total_supply -= shares

    def _mint(self, receiver: Address, shares: int) -> None:
        self.shares[receiver] = self.balance_of(receiver) + shares
        self.total_supply += shares

    def _ensure_live(self) -> None:
        if self.paused:
            raise MarketError(f"aggregator vault {self.address} is paused")
