"""Fixed-point helpers with explicit rounding direction.

Every division in the engine states which way it rounds. The rule is to
round in the pool's favor: amounts paid out by the pool round down, amounts
owed to the pool round up.

Each token carries a precision multiplier that lifts its native amount to
the pool's common precision before any invariant math.
"""

from __future__ import annotations

from enum import Enum

from stableswap.safe_int import S, SafeInt

__all__ = [
    "Rounding",
    "div",
    "mul_div",
    "scale_up",
    "scale_down",
    "scale_balances",
]


class Rounding(Enum):
    """Rounding direction for integer division."""

    DOWN = "down"
    UP = "up"


def div(a: SafeInt | int, b: SafeInt | int, rounding: Rounding) -> SafeInt:
    """Divide a by b with the given rounding.

    Raises:
        DivisionByZero: If b is zero
    """
    if rounding is Rounding.UP:
        return S(a).ceiling_div(b)
    return S(a) // b


def mul_div(
    a: SafeInt | int,
    b: SafeInt | int,
    c: SafeInt | int,
    rounding: Rounding,
) -> SafeInt:
    """Compute a * b / c with the given rounding.

    The product is overflow-checked before the division.

    Raises:
        Overflow: If a * b exceeds 2^256-1
        DivisionByZero: If c is zero
    """
    return div(S(a) * b, c, rounding)


def scale_up(amount: int, multiplier: int) -> int:
    """Scale a native token amount to the common precision.

    Args:
        amount: Amount in the token's native units
        multiplier: Precision multiplier (>= 1)

    Returns:
        Amount in common precision
    """
    return (S(amount) * multiplier).value


def scale_down(amount: int, multiplier: int, rounding: Rounding = Rounding.DOWN) -> int:
    """Scale a common-precision amount back to native token units.

    Args:
        amount: Amount in common precision
        multiplier: Precision multiplier (>= 1)
        rounding: DOWN for amounts paid out, UP for amounts owed to the pool

    Returns:
        Amount in the token's native units
    """
    return div(amount, multiplier, rounding).value


def scale_balances(balances: tuple[int, ...], multipliers: tuple[int, ...]) -> list[int]:
    """Scale every native balance to the common precision (xp)."""
    return [scale_up(b, m) for b, m in zip(balances, multipliers, strict=True)]
