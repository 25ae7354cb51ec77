from __future__ import annotations

import pytest

from conftest import ALICE, BOB, OWNER, World
from yieldpool.errors import AssetMismatch, HasOutstandingAssets, Unauthorized
from yieldpool.markets.aggregator_vault import SimulatedAggregatorVault
from yieldpool.strategies.aggregator_vault import AggregatorVaultAdapter
from yieldpool.tokens.ledger_token import LedgerToken


def test_add_strategy_is_owner_only(world: World) -> None:
    with pytest.raises(Unauthorized):
        world.pool.add_strategy(ALICE, world.vault_adapter())
    assert world.pool.num_strategies() == 0


def test_add_strategy_rejects_asset_mismatch(world: World) -> None:
    other = LedgerToken(address="0xdai", symbol="DAI")
    foreign_vault = SimulatedAggregatorVault(address="0xdai-vault", token=other)
    adapter = AggregatorVaultAdapter("0xdai-adapter", world.token, foreign_vault)

    with pytest.raises(AssetMismatch):
        world.pool.add_strategy(OWNER, adapter)
    assert not adapter.connected


def test_num_strategies_only_increases(world: World) -> None:
    counts = []
    world.pool.add_strategy(OWNER, world.vault_adapter("0xa"))
    counts.append(world.pool.num_strategies())
    world.pool.add_strategy(OWNER, world.lending_adapter("0xb"))
    counts.append(world.pool.num_strategies())
    world.pool.remove_strategy(OWNER, 0)
    counts.append(world.pool.num_strategies())
    world.pool.add_strategy(OWNER, world.vault_adapter("0xc"))
    counts.append(world.pool.num_strategies())

    assert counts == [1, 2, 2, 3]
    assert [view.active for view in world.pool.strategies()] == [False, True, True]


def test_remove_strategy_with_assets_requires_force(world: World) -> None:
    adapter = world.vault_adapter()
    world.pool.add_strategy(OWNER, adapter)
    world.fund(ALICE, 1_000)
    world.pool.deposit(ALICE, 1_000, ALICE)

    with pytest.raises(HasOutstandingAssets):
        world.pool.remove_strategy(OWNER, 0, force=False)
    assert world.pool.strategy(0).active
    assert world.pool.total_assets() == 1_000

    world.pool.remove_strategy(OWNER, 0, force=True)

    assert not world.pool.strategy(0).active
    assert world.pool.strategy(0).stranded_assets == 1_000
    assert world.pool.total_assets() == 0
    assert world.vault.balance_of(adapter.address) == 1_000


def test_remove_strategy_is_owner_only(world: World) -> None:
    world.pool.add_strategy(OWNER, world.vault_adapter())

    with pytest.raises(Unauthorized):
        world.pool.remove_strategy(BOB, 0)


def test_transfer_ownership_moves_authority(world: World) -> None:
    world.pool.transfer_ownership(OWNER, BOB)

    with pytest.raises(Unauthorized):
        world.pool.add_strategy(OWNER, world.vault_adapter())
    assert world.pool.add_strategy(BOB, world.vault_adapter()) == 0


def test_snapshot_reports_each_entry(world: World) -> None:
    world.pool.add_strategy(OWNER, world.lending_adapter())
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.fund(ALICE, 800)
    world.pool.deposit(ALICE, 800, ALICE)
    world.pool.rebalance(OWNER, 0, 1, 300)

    snapshot = world.pool.snapshot()

    assert snapshot.total_assets == 800
    assert snapshot.total_shares == 800
    assert snapshot.deployed_assets == 800
    assert snapshot.share_price == 1.0
    assert [(view.adapter_id, view.total_assets) for view in snapshot.strategies] == [
        ("lending_pool", 500),
        ("aggregator_vault", 300),
    ]
