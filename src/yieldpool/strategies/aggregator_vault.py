"""Adapter for share-issuing aggregator vaults."""

from __future__ import annotations

from typing import Any

from yieldpool.domain.models import Address
from yieldpool.markets.base import AggregatorVault
from yieldpool.strategies.base import StrategyAdapter
from yieldpool.tokens.base import Token


class AggregatorVaultAdapter(StrategyAdapter):
    """Holds vault shares and values them through the vault's own rate."""

    adapter_id = "aggregator_vault"

    def __init__(self, address: Address, token: Token, vault: AggregatorVault) -> None:
        super().__init__(address, token)
        self.vault = vault

    def asset_of(self) -> Address:
        return self.vault.asset()

    def max_deposit(self, caller: Address) -> int:
        if not self.connected:
            return 0
        return self.token.balance_of(caller)

    def vault_shares(self) -> int:
        return self.vault.balance_of(self.address)

    def describe(self) -> dict[str, Any]:
        details = super().describe()
        details["vault"] = self.vault.address
        return details

    def _position_value(self) -> int:
        shares = self.vault_shares()
        if shares == 0:
            return 0
        return self.vault.preview_redeem(shares)

    def _deposit(self, amount: int) -> None:
        self.token.approve(self.address, self.vault.address, amount)
        try:
            self.vault.deposit(self.address, amount, self.address)
        except Exception:
            self.token.approve(self.address, self.vault.address, 0)
            raise

    def _withdraw(self, amount: int, to: Address) -> int:
        self.vault.withdraw(self.address, amount, to, self.address)
        return amount
