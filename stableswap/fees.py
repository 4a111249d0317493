"""Trade, imbalance and admin fee calculations.

All functions are pure: they return the fee split and leave crediting the
admin share to the caller. Fees round in the pool's favor, so the fee
portion rounds up and the admin share of a fee rounds down (the remainder
stays in the reserve for liquidity providers).
"""

from __future__ import annotations

from dataclasses import dataclass

from stableswap.constants import FEE_DENOMINATOR
from stableswap.errors import InvalidFee
from stableswap.math.fixed_point import Rounding, mul_div
from stableswap.safe_int import S


@dataclass(frozen=True)
class FeeSplit:
    """Result of charging a fee on an amount.

    Attributes:
        net_amount: Amount left after the fee
        fee_amount: Fee charged; net_amount + fee_amount == the input amount
    """

    net_amount: int
    fee_amount: int


def validate_fee_bps(fee_bps: int) -> int:
    """Validate a basis-point fee.

    Raises:
        InvalidFee: If fee_bps is not in range [0, 10000)
    """
    if fee_bps < 0 or fee_bps >= FEE_DENOMINATOR:
        raise InvalidFee(f"Fee must be in range [0, {FEE_DENOMINATOR}) bps, got {fee_bps}")
    return fee_bps


def apply_fee(amount: int, fee_bps: int) -> FeeSplit:
    """Charge fee_bps on amount.

    fee = ceil(amount * fee_bps / 10000), net = amount - fee.

    Raises:
        InvalidFee: If fee_bps is not in range [0, 10000)
    """
    validate_fee_bps(fee_bps)
    fee = mul_div(amount, fee_bps, FEE_DENOMINATOR, Rounding.UP)
    net = S(amount) - fee
    return FeeSplit(net_amount=net.value, fee_amount=fee.value)


def admin_fee(fee_amount: int, admin_fee_bps: int) -> int:
    """Admin share of a collected fee, rounded down."""
    validate_fee_bps(admin_fee_bps)
    return mul_div(fee_amount, admin_fee_bps, FEE_DENOMINATOR, Rounding.DOWN).value


def imbalance_fee(deviation: int, fee_bps: int, n_coins: int) -> int:
    """Fee charged on an asset's deviation from a proportional change.

    Deposits and single-asset withdrawals that move the pool away from
    parity pay the trade fee scaled by n / (4 * (n - 1)) on each asset's
    deviation, matching what an equivalent set of swaps would have cost.

    Args:
        deviation: |ideal balance - actual balance| for one asset
        fee_bps: Trade fee in basis points
        n_coins: Number of assets in the pool

    Returns:
        Fee amount, rounded up
    """
    validate_fee_bps(fee_bps)
    numerator = S(fee_bps) * n_coins
    denominator = S(FEE_DENOMINATOR) * (4 * (n_coins - 1))
    return mul_div(deviation, numerator, denominator, Rounding.UP).value
