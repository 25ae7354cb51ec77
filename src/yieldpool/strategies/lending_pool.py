"""Adapter for lending markets that issue 1:1 receipt tokens."""

from __future__ import annotations

from typing import Any

from yieldpool.domain.models import MAX_UINT256, Address
from yieldpool.errors import AssetMismatch, ConfigurationError
from yieldpool.markets.base import LendingMarket
from yieldpool.strategies.base import StrategyAdapter
from yieldpool.tokens.base import Token

MAX_REFERRAL_CODE = 65_535


def validate_referral_code(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"referral_code must be an integer, got {value!r}")
    if value < 0 or value > MAX_REFERRAL_CODE:
        raise ConfigurationError(f"referral_code must be between 0 and {MAX_REFERRAL_CODE}")
    return value


class LendingPoolAdapter(StrategyAdapter):
    """Supplies the asset to a lending market and holds its receipt token.

    Receipts are asset-denominated, so the receipt balance is the position.
    Deposit capacity is unlimited; withdraw capacity is the position.
    """

    adapter_id = "lending_pool"

    def __init__(
        self,
        address: Address,
        token: Token,
        market: LendingMarket,
        receipt_token: Token,
        referral_code: int = 0,
    ) -> None:
        super().__init__(address, token)
        self.market = market
        reserve = market.get_reserve_data(token.address)
        if reserve.receipt_token != receipt_token.address:
            raise AssetMismatch(
                f"receipt token {receipt_token.address} does not match reserve "
                f"receipt {reserve.receipt_token}"
            )
        self.reserve_asset = reserve.asset
        self.receipt_token = receipt_token
        self.referral_code = validate_referral_code(referral_code)

    def asset_of(self) -> Address:
        return self.reserve_asset

    def max_deposit(self, caller: Address) -> int:
        _ = caller
        return MAX_UINT256 if self.connected else 0

    def describe(self) -> dict[str, Any]:
        details = super().describe()
        details["market"] = self.market.address
        details["receipt_token"] = self.receipt_token.address
        return details

    def _on_connect(self, options: dict[str, Any]) -> None:
        referral_code = self.referral_code
        if "referral_code" in options:
            referral_code = validate_referral_code(options.pop("referral_code"))
        super()._on_connect(options)
        self.referral_code = referral_code

    def _position_value(self) -> int:
        return self.receipt_token.balance_of(self.address)

    def _deposit(self, amount: int) -> None:
        self.token.approve(self.address, self.market.address, amount)
        try:
            self.market.supply(
                self.address,
                self.token.address,
                amount,
                self.address,
                self.referral_code,
            )
        except Exception:
            self.token.approve(self.address, self.market.address, 0)
            raise

    def _withdraw(self, amount: int, to: Address) -> int:
        return self.market.withdraw(self.address, self.token.address, amount, to)
