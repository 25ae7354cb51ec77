"""Integer amount arithmetic."""

from __future__ import annotations


def mul_div(value: int, numerator: int, denominator: int, round_up: bool = False) -> int:
    """Return `value * numerator / denominator` rounded toward zero or up."""
    if denominator <= 0:
        raise ZeroDivisionError("denominator must be positive")
    if value < 0 or numerator < 0:
        raise ValueError("amounts must be non-negative")
    quotient, remainder = divmod(value * numerator, denominator)
    if round_up and remainder:
        quotient += 1
    return quotient
