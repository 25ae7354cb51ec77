from __future__ import annotations

import pytest

from yieldpool.domain.models import MAX_UINT256
from yieldpool.errors import TransferFailed
from yieldpool.tokens.ledger_token import LedgerToken


def test_transfer_moves_balance() -> None:
    token = LedgerToken(address="0xusdc")
    token.mint("a", 100)

    token.transfer("a", "b", 40)

    assert token.balance_of("a") == 60
    assert token.balance_of("b") == 40
    assert token.total_supply() == 100


def test_transfer_rejects_insufficient_balance_without_side_effects() -> None:
    token = LedgerToken(address="0xusdc")
    token.mint("a", 10)

    with pytest.raises(TransferFailed, match="balance 10"):
        token.transfer("a", "b", 11)

    assert token.balance_of("a") == 10
    assert token.balance_of("b") == 0


def test_transfer_from_spends_allowance() -> None:
    token = LedgerToken(address="0xusdc")
    token.mint("a", 100)
    token.approve("a", "spender", 60)

    token.transfer_from("spender", "a", "b", 50)

    assert token.allowance("a", "spender") == 10
    assert token.balance_of("b") == 50
    with pytest.raises(TransferFailed, match="allowance"):
        token.transfer_from("spender", "a", "b", 11)


def test_infinite_allowance_is_not_decremented() -> None:
    token = LedgerToken(address="0xusdc")
    token.mint("a", 100)
    token.approve("a", "spender", MAX_UINT256)

    token.transfer_from("spender", "a", "b", 100)

    assert token.allowance("a", "spender") == MAX_UINT256


def test_burn_requires_balance() -> None:
    token = LedgerToken(address="0xusdc")
    token.mint("a", 5)

    with pytest.raises(TransferFailed):
        token.burn("a", 6)
    token.burn("a", 5)

    assert token.balance_of("a") == 0
