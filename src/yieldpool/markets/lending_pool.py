"""Deterministic in-memory lending market."""

from __future__ import annotations

from dataclasses import dataclass, field

from yieldpool.domain.models import MAX_UINT256, Address, ReserveData
from yieldpool.errors import MarketError
from yieldpool.tokens.ledger_token import LedgerToken


@dataclass
class SimulatedLendingPool:
    """Lending market that mints receipts 1:1 against supplied assets."""

    address: Address
    reserves: dict[Address, tuple[LedgerToken, LedgerToken]] = field(default_factory=dict)
    paused: bool = False

    def list_reserve(self, token: LedgerToken) -> LedgerToken:
        """Open a reserve for `token` and return its receipt token."""
        if token.address in self.reserves:
            raise MarketError(f"reserve already listed: {token.address}")
        receipt = LedgerToken(
            address=f"{self.address}:receipt:{token.address}",
            symbol=f"r{token.symbol}",
            decimals=token.decimals,
        )
        self.reserves[token.address] = (token, receipt)
        return receipt

    def get_reserve_data(self, asset: Address) -> ReserveData:
        _, receipt = self._reserve(asset)
        return ReserveData(asset=asset, receipt_token=receipt.address)

    def receipt_token(self, asset: Address) -> LedgerToken:
        _, receipt = self._reserve(asset)
        return receipt

    def supply(
        self,
        caller: Address,
        asset: Address,
        amount: int,
        on_behalf_of: Address,
        referral_code: int,
    ) -> None:
        _ = referral_code
        self._ensure_live()
        token, receipt = self._reserve(asset)
        if amount <= 0:
            raise MarketError("supply amount must be positive")
        token.transfer_from(self.address, caller, self.address, amount)
        receipt.mint(on_behalf_of, amount)

    def withdraw(self, caller: Address, asset: Address, amount: int, to: Address) -> int:
        self._ensure_live()
        token, receipt = self._reserve(asset)
        position = receipt.balance_of(caller)
        requested = position if amount == MAX_UINT256 else amount
        if requested <= 0:
            raise MarketError("withdraw amount must be positive")
        if position < requested:
            raise MarketError(f"receipt balance {position} is below {requested}")
        liquidity = token.balance_of(self.address)
        if liquidity < requested:
            raise MarketError(f"reserve liquidity {liquidity} is below {requested}")
        receipt.burn(caller, requested)
        token.transfer(self.address, to, requested)
        return requested

    def accrue_interest(self, asset: Address, holder: Address, amount: int) -> None:
        """Credit `holder` with `amount` of newly earned, fully backed receipts."""
        token, receipt = self._reserve(asset)
        token.mint(self.address, amount)
        receipt.mint(holder, amount)

    def set_paused(self, paused: bool) -> None:
        self.paused = paused

    def _reserve(self, asset: Address) -> tuple[LedgerToken, LedgerToken]:
        reserve = self.reserves.get(asset)
        if reserve is None:
            raise MarketError(f"reserve not listed: {asset}")
        return reserve

    def _ensure_live(self) -> None:
        if self.paused:
            raise MarketError(f"lending market {self.address} is paused")
