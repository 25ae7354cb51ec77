"""Asset transfer primitive and implementations."""

from .base import Token
from .ledger_token import LedgerToken

__all__ = ["LedgerToken", "Token"]
