from __future__ import annotations

import pytest

from conftest import ALICE, BOB, OWNER, World, build_world
from yieldpool.errors import (
    InsufficientLiquidity,
    InsufficientShares,
    NoActiveStrategy,
    TransferFailed,
    ZeroAmount,
    ZeroTotalAssets,
)


def _assert_accounting(world: World) -> None:
    pool = world.pool
    deployed = sum(entry.adapter.total_assets() for _, entry in pool.registry.active())
    assert pool.total_assets() == pool.idle_balance() + deployed


def test_first_deposit_mints_one_to_one_and_deploys(world: World) -> None:
    adapter = world.vault_adapter()
    world.pool.add_strategy(OWNER, adapter)
    world.fund(ALICE, 1_000)

    minted = world.pool.deposit(ALICE, 1_000, ALICE)

    assert minted == 1_000
    assert world.pool.total_supply() == 1_000
    assert world.pool.balance_of(ALICE) == 1_000
    assert adapter.total_assets() == 1_000
    assert world.pool.idle_balance() == 0
    _assert_accounting(world)


def test_deposit_mints_against_exchange_rate_rounding_down(world: World) -> None:
    adapter = world.vault_adapter()
    world.pool.add_strategy(OWNER, adapter)
    world.fund(ALICE, 1_000)
    world.fund(BOB, 100)
    world.pool.deposit(ALICE, 1_000, ALICE)
    world.vault.report_yield(500)

    minted = world.pool.deposit(BOB, 100, BOB)

    assert minted == 66
    assert world.pool.total_supply() == 1_066
    _assert_accounting(world)


def test_deposit_routes_to_first_active_strategy(world: World) -> None:
    first = world.lending_adapter()
    second = world.vault_adapter()
    world.pool.add_strategy(OWNER, first)
    world.pool.add_strategy(OWNER, second)
    world.pool.remove_strategy(OWNER, 0)
    world.fund(ALICE, 300)

    world.pool.deposit(ALICE, 300, BOB)

    assert second.total_assets() == 300
    assert first.total_assets() == 0
    assert world.pool.balance_of(BOB) == 300


def test_deposit_without_active_strategy_is_rejected(world: World) -> None:
    world.fund(ALICE, 100)

    with pytest.raises(NoActiveStrategy):
        world.pool.deposit(ALICE, 100, ALICE)

    assert world.token.balance_of(ALICE) == 100
    assert world.pool.total_supply() == 0


def test_deposit_can_stay_idle_when_configured() -> None:
    world = build_world(allow_idle_deposits=True)
    world.fund(ALICE, 100)

    minted = world.pool.deposit(ALICE, 100, ALICE)

    assert minted == 100
    assert world.pool.idle_balance() == 100
    assert world.pool.total_assets() == 100


def test_deposit_rejects_zero_amount_and_missing_approval(world: World) -> None:
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.token.mint(ALICE, 100)

    with pytest.raises(ZeroAmount):
        world.pool.deposit(ALICE, 0, ALICE)
    with pytest.raises(TransferFailed):
        world.pool.deposit(ALICE, 100, ALICE)
    assert world.pool.total_supply() == 0


def test_withdraw_pulls_shortfall_from_strategy(world: World) -> None:
    adapter = world.lending_adapter()
    world.pool.add_strategy(OWNER, adapter)
    world.fund(ALICE, 1_000)
    world.pool.deposit(ALICE, 1_000, ALICE)

    burned = world.pool.withdraw(ALICE, 500, BOB, ALICE)

    assert burned == 500
    assert world.token.balance_of(BOB) == 500
    assert adapter.total_assets() == 500
    assert world.pool.total_supply() == 500
    assert world.pool.idle_balance() == 0
    _assert_accounting(world)


def test_withdraw_pulls_in_index_order_across_strategies(world: World) -> None:
    first = world.lending_adapter()
    second = world.vault_adapter()
    world.pool.add_strategy(OWNER, first)
    world.pool.add_strategy(OWNER, second)
    world.fund(ALICE, 1_000)
    world.pool.deposit(ALICE, 1_000, ALICE)
    world.pool.rebalance(OWNER, 0, 1, 700)

    world.pool.withdraw(ALICE, 500, ALICE, ALICE)

    assert first.total_assets() == 0
    assert second.total_assets() == 500
    _assert_accounting(world)


def test_withdraw_uses_idle_balance_first() -> None:
    world = build_world(allow_idle_deposits=True)
    world.fund(ALICE, 400)
    world.pool.deposit(ALICE, 400, ALICE)
    adapter = world.vault_adapter()
    world.pool.add_strategy(OWNER, adapter)
    world.fund(BOB, 600)
    world.pool.deposit(BOB, 600, BOB)

    world.pool.withdraw(ALICE, 300, ALICE, ALICE)

    assert world.pool.idle_balance() == 100
    assert adapter.total_assets() == 600


def test_withdraw_rounds_shares_up(world: World) -> None:
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.fund(ALICE, 1_000)
    world.pool.deposit(ALICE, 1_000, ALICE)
    world.vault.report_yield(500)

    burned = world.pool.withdraw(ALICE, 100, ALICE, ALICE)

    assert burned == 67
    assert world.pool.total_supply() == 933


def test_withdraw_requires_shares(world: World) -> None:
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.fund(ALICE, 100)
    world.pool.deposit(ALICE, 100, ALICE)

    with pytest.raises(InsufficientShares):
        world.pool.withdraw(BOB, 10, BOB, BOB)
    with pytest.raises(InsufficientShares):
        world.pool.withdraw(ALICE, 101, ALICE, ALICE)
    with pytest.raises(ZeroAmount):
        world.pool.withdraw(ALICE, 0, ALICE, ALICE)


def test_withdraw_on_behalf_requires_and_spends_allowance(world: World) -> None:
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.fund(ALICE, 100)
    world.pool.deposit(ALICE, 100, ALICE)

    with pytest.raises(InsufficientShares, match="allowance"):
        world.pool.withdraw(BOB, 40, BOB, ALICE)

    world.pool.approve(ALICE, BOB, 50)
    world.pool.withdraw(BOB, 40, BOB, ALICE)

    assert world.pool.allowance(ALICE, BOB) == 10
    assert world.pool.balance_of(ALICE) == 60
    assert world.token.balance_of(BOB) == 40


def test_withdraw_reports_insufficient_liquidity(world: World) -> None:
    adapter = world.vault_adapter()
    world.pool.add_strategy(OWNER, adapter)
    world.fund(ALICE, 100)
    world.pool.deposit(ALICE, 100, ALICE)
    world.vault.report_loss(30)

    with pytest.raises(InsufficientShares):
        world.pool.withdraw(ALICE, 80, ALICE, ALICE)

    world.pool.remove_strategy(OWNER, 0, force=True)

    with pytest.raises(InsufficientLiquidity):
        world.pool.withdraw(ALICE, 1, ALICE, ALICE)


def test_deposit_then_full_redeem_never_gains(world: World) -> None:
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.fund(BOB, 997)
    world.pool.deposit(BOB, 997, BOB)
    world.vault.report_yield(3)
    world.fund(ALICE, 1_234)

    shares = world.pool.deposit(ALICE, 1_234, ALICE)
    returned = world.pool.redeem(ALICE, shares, ALICE, ALICE)

    assert returned <= 1_234
    assert 1_234 - returned <= 2
    assert world.pool.balance_of(ALICE) == 0
    _assert_accounting(world)


def test_redeem_burns_exact_shares(world: World) -> None:
    world.pool.add_strategy(OWNER, world.lending_adapter())
    world.fund(ALICE, 500)
    world.pool.deposit(ALICE, 500, ALICE)

    assets = world.pool.redeem(ALICE, 200, BOB, ALICE)

    assert assets == 200
    assert world.pool.balance_of(ALICE) == 300
    assert world.token.balance_of(BOB) == 200


def test_deposit_refused_when_all_value_is_stranded(world: World) -> None:
    world.pool.add_strategy(OWNER, world.lending_adapter())
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.fund(ALICE, 100)
    world.pool.deposit(ALICE, 100, ALICE)
    world.pool.remove_strategy(OWNER, 0, force=True)
    world.fund(BOB, 100)

    assert world.pool.total_assets() == 0
    with pytest.raises(ZeroTotalAssets):
        world.pool.deposit(BOB, 100, BOB)


def test_capacity_queries_report_zero_when_all_value_is_stranded(world: World) -> None:
    world.pool.add_strategy(OWNER, world.lending_adapter())
    world.fund(ALICE, 1_000)
    world.pool.deposit(ALICE, 1_000, ALICE)
    world.pool.remove_strategy(OWNER, 0, force=True)

    assert world.pool.balance_of(ALICE) == 1_000
    assert world.pool.max_redeem(ALICE) == 0
    assert world.pool.max_withdraw(ALICE) == 0


def test_accounting_holds_across_sequence(world: World) -> None:
    world.pool.add_strategy(OWNER, world.lending_adapter())
    world.pool.add_strategy(OWNER, world.vault_adapter())
    world.fund(ALICE, 10_000)
    world.fund(BOB, 10_000)

    steps = [
        ("deposit", ALICE, 1_500),
        ("deposit", BOB, 700),
        ("withdraw", ALICE, 300),
        ("deposit", ALICE, 45),
        ("withdraw", BOB, 699),
        ("withdraw", ALICE, 1_000),
    ]
    for action, who, amount in steps:
        if action == "deposit":
            world.pool.deposit(who, amount, who)
        else:
            world.pool.withdraw(who, amount, who, who)
        _assert_accounting(world)

    assert world.pool.total_assets() == 1_500 + 700 - 300 + 45 - 699 - 1_000
