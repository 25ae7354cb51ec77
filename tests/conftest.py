from __future__ import annotations

from dataclasses import dataclass

import pytest

from yieldpool.logging.logger import PoolLogger
from yieldpool.markets.aggregator_vault import SimulatedAggregatorVault
from yieldpool.markets.lending_pool import SimulatedLendingPool
from yieldpool.pool.vault import Pool
from yieldpool.strategies.aggregator_vault import AggregatorVaultAdapter
from yieldpool.strategies.lending_pool import LendingPoolAdapter
from yieldpool.tokens.ledger_token import LedgerToken

OWNER = "0xowner"
ALICE = "0xalice"
BOB = "0xbob"
POOL = "0xpool"


@dataclass
class World:
    """Token, markets and pool wired together for a test."""

    token: LedgerToken
    lending: SimulatedLendingPool
    vault: SimulatedAggregatorVault
    pool: Pool

    def lending_adapter(self, address: str = "0xlending-adapter") -> LendingPoolAdapter:
        return LendingPoolAdapter(
            address,
            self.token,
            self.lending,
            self.lending.receipt_token(self.token.address),
        )

    def vault_adapter(
        self,
        address: str = "0xvault-adapter",
        vault: SimulatedAggregatorVault | None = None,
    ) -> AggregatorVaultAdapter:
        return AggregatorVaultAdapter(address, self.token, vault or self.vault)

    def new_vault(self, address: str) -> SimulatedAggregatorVault:
        return SimulatedAggregatorVault(address=address, token=self.token)

    def fund(self, who: str, amount: int) -> None:
        self.token.mint(who, amount)
        self.token.approve(who, self.pool.address, self.token.allowance(who, self.pool.address) + amount)


def build_world(**pool_kwargs: object) -> World:
    token = LedgerToken(address="0xusdc", symbol="USDC", decimals=6)
    lending = SimulatedLendingPool(address="0xlending")
    lending.list_reserve(token)
    vault = SimulatedAggregatorVault(address="0xvault", token=token)
    pool = Pool(
        address=POOL,
        token=token,
        owner=OWNER,
        logger=PoolLogger(level="WARNING"),
        **pool_kwargs,
    )
    return World(token=token, lending=lending, vault=vault, pool=pool)


@pytest.fixture
def world() -> World:
    return build_world()
