"""LP token accounting for deposits and withdrawals.

Deposits mint LP tokens in proportion to the invariant growth they cause.
An imbalanced deposit pays the imbalance fee on each asset's deviation from
the proportional ideal, and only the fee-adjusted invariant counts towards
minting, so moving the pool away from parity is never rewarded.

Proportional withdrawals pay out an exact share of every reserve without
touching the invariant solver and without a fee. Single-asset withdrawals
solve the balance consistent with the reduced invariant and pay the same
imbalance fee as an equivalent deposit.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from stableswap.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from stableswap.errors import (
    AddLiquidityDisabled,
    ExceededSlippage,
    InsufficientLiquidity,
    InsufficientLpSupply,
    InvalidIndex,
    InvalidInitialDeposit,
    ZeroAmount,
)
from stableswap.fees import admin_fee, imbalance_fee
from stableswap.math.fixed_point import Rounding, mul_div, scale_balances, scale_down
from stableswap.math.invariant import calculate_invariant, get_y
from stableswap.pool import PoolState
from stableswap.results import DepositResult, WithdrawResult
from stableswap.safe_int import S

logger = structlog.get_logger()


# =============================================================================
# Deposit
# =============================================================================


def deposit(
    state: PoolState,
    amounts: Sequence[int],
    *,
    min_mint_amount: int = 0,
    config: EngineConfig | None = None,
) -> DepositResult:
    """Deposit amounts (one per asset) and mint LP tokens.

    The first deposit into an empty pool mints exactly the resulting
    invariant D and must fund every asset. Later deposits mint
    lp_supply * (D_adjusted - D_before) / D_before, rounded down, where
    D_adjusted is computed from the balances net of imbalance fees.

    Args:
        state: Current pool state (not modified)
        amounts: Deposit amount per asset, in native units (zeros allowed)
        min_mint_amount: Smallest acceptable mint
        config: Engine configuration. Uses DEFAULT_ENGINE_CONFIG if not provided.

    Returns:
        DepositResult with the minted amount, fees and successor state

    Raises:
        AddLiquidityDisabled: If deposits are disabled for the pool
        InvalidIndex: If len(amounts) does not match the pool size
        ZeroAmount: If nothing is deposited or nothing would be minted
        InvalidInitialDeposit: If the first deposit leaves an asset unfunded
        InsufficientLiquidity: If the pool has an empty reserve, or the
            imbalance fee would exceed an asset's balance
        ExceededSlippage: If the mint is below min_mint_amount
        ConvergenceError: If a solver doesn't converge (fatal)
    """
    config = config or DEFAULT_ENGINE_CONFIG
    if not state.admin_settings.add_liquidity_enabled:
        raise AddLiquidityDisabled("Deposits are disabled for this pool")

    n_coins = state.n_coins
    if len(amounts) != n_coins:
        raise InvalidIndex(f"Expected {n_coins} deposit amounts, got {len(amounts)}")
    if any(a < 0 for a in amounts):
        raise ZeroAmount(f"Deposit amounts must be non-negative, got {list(amounts)}")
    if all(a == 0 for a in amounts):
        raise ZeroAmount("Deposit must include at least one positive amount")

    amp = state.amplification_coefficient
    fees = state.fee_config
    multipliers = state.precision_multipliers
    old_balances = state.balances
    lp_supply = state.lp_supply

    if lp_supply == 0 and any(a == 0 for a in amounts):
        raise InvalidInitialDeposit("Initial deposit must fund every asset")

    d0 = calculate_invariant(amp, state.xp(), config.max_iterations)
    if lp_supply > 0 and d0 == 0:
        raise InsufficientLiquidity("Pool has an empty reserve")

    new_balances = [(S(b) + a).to_uint64() for b, a in zip(old_balances, amounts, strict=True)]
    xp_new = scale_balances(tuple(new_balances), multipliers)
    d1 = calculate_invariant(amp, xp_new, config.max_iterations)
    if d1 <= d0:
        raise ZeroAmount("Deposit does not increase the invariant")

    fee_amounts = [0] * n_coins
    admin_amounts = [0] * n_coins

    if lp_supply == 0:
        reserves = new_balances
        mint = S(d1)
    else:
        reserves = []
        adjusted = []
        for i in range(n_coins):
            ideal = mul_div(d1, old_balances[i], d0, Rounding.DOWN)
            deviation = ideal.abs_diff(new_balances[i])
            fee_amounts[i] = imbalance_fee(deviation.value, fees.trade_fee_bps, n_coins)
            if fee_amounts[i] >= new_balances[i]:
                raise InsufficientLiquidity(
                    f"Imbalance fee {fee_amounts[i]} exceeds balance of asset {i}"
                )
            admin_amounts[i] = admin_fee(fee_amounts[i], fees.admin_fee_bps)
            adjusted.append(new_balances[i] - fee_amounts[i])
            reserves.append(new_balances[i] - admin_amounts[i])

        xp_adjusted = scale_balances(tuple(adjusted), multipliers)
        d2 = calculate_invariant(amp, xp_adjusted, config.max_iterations)
        if d2 <= d0:
            raise ZeroAmount("Deposit does not increase the fee-adjusted invariant")
        mint = mul_div(lp_supply, S(d2) - d0, d0, Rounding.DOWN)

    if mint == 0:
        raise ZeroAmount("Deposit mints zero LP tokens")
    if mint < min_mint_amount:
        raise ExceededSlippage(f"Mint {mint.value} below minimum {min_mint_amount}")

    admin_fee_balances = tuple(
        (S(b) + a).to_uint64() for b, a in zip(state.admin_fee_balances, admin_amounts, strict=True)
    )
    new_state = state.with_updates(
        balances=tuple(reserves),
        lp_supply=(S(lp_supply) + mint).to_uint64(),
        admin_fee_balances=admin_fee_balances,
    )

    logger.debug(
        "stable_deposit",
        amounts=list(amounts),
        mint_amount=mint.value,
        fee_amounts=fee_amounts,
        initial=lp_supply == 0,
    )

    return DepositResult(
        mint_amount=mint.value,
        fee_amounts=tuple(fee_amounts),
        admin_fee_amounts=tuple(admin_amounts),
        state=new_state,
    )


# =============================================================================
# Withdraw
# =============================================================================


def _check_burn(state: PoolState, burn_amount: int) -> None:
    if burn_amount <= 0:
        raise ZeroAmount(f"Burn amount must be positive, got {burn_amount}")
    if burn_amount > state.lp_supply:
        raise InsufficientLpSupply(
            f"Burn amount {burn_amount} exceeds LP supply {state.lp_supply}"
        )


def withdraw(
    state: PoolState,
    burn_amount: int,
    *,
    minimum_amounts: Sequence[int] | None = None,
    config: EngineConfig | None = None,
) -> WithdrawResult:
    """Burn LP tokens for a proportional share of every reserve.

    amount_i = balance_i * burn_amount / lp_supply, rounded down. No fee is
    charged and the invariant is not solved.

    Raises:
        ZeroAmount: If burn_amount is not positive or every payout is zero
        InsufficientLpSupply: If burn_amount exceeds the LP supply
        InvalidIndex: If minimum_amounts does not match the pool size
        ExceededSlippage: If any payout is below its minimum
    """
    _check_burn(state, burn_amount)
    n_coins = state.n_coins
    if minimum_amounts is not None and len(minimum_amounts) != n_coins:
        raise InvalidIndex(f"Expected {n_coins} minimum amounts, got {len(minimum_amounts)}")

    lp_supply = state.lp_supply
    amounts = tuple(
        mul_div(balance, burn_amount, lp_supply, Rounding.DOWN).value for balance in state.balances
    )
    if all(a == 0 for a in amounts):
        raise ZeroAmount("Burn amount too small to withdraw anything")
    if minimum_amounts is not None:
        for i, (amount, minimum) in enumerate(zip(amounts, minimum_amounts, strict=True)):
            if amount < minimum:
                raise ExceededSlippage(f"Withdrawal of asset {i}: {amount} below minimum {minimum}")

    new_state = state.with_updates(
        balances=tuple((S(b) - a).value for b, a in zip(state.balances, amounts, strict=True)),
        lp_supply=(S(lp_supply) - burn_amount).value,
    )

    logger.debug("stable_withdraw", burn_amount=burn_amount, amounts=list(amounts))

    zeros = (0,) * n_coins
    return WithdrawResult(
        burn_amount=burn_amount,
        amounts=amounts,
        fee_amounts=zeros,
        admin_fee_amounts=zeros,
        state=new_state,
    )


def calc_withdraw_one(
    state: PoolState,
    burn_amount: int,
    out_index: int,
    config: EngineConfig | None = None,
) -> tuple[int, int]:
    """Preview a single-asset withdrawal.

    Algorithm:
        1. D1 = D0 - burn_amount * D0 / lp_supply
        2. new_y = get_y(D1) for out_index, other balances unchanged
        3. Each asset's deviation from the proportional reduction pays the
           imbalance fee; solve y again on the fee-reduced balances
        4. Output = fee-reduced balance - y - 1, scaled down

    Returns:
        Tuple of (out_amount, fee_amount) in native units of out_index

    Raises:
        ZeroAmount: If burn_amount is not positive
        InsufficientLpSupply: If burn_amount exceeds the LP supply
        InsufficientLiquidity: If burn_amount is the entire supply or the
            pool has an empty reserve
        InvalidIndex: If out_index is out of range
        ConvergenceError: If a solver doesn't converge (fatal)
    """
    config = config or DEFAULT_ENGINE_CONFIG
    _check_burn(state, burn_amount)
    state.check_index(out_index, "output")
    if burn_amount == state.lp_supply:
        raise InsufficientLiquidity(
            "Cannot withdraw the entire LP supply as a single asset; withdraw proportionally"
        )

    amp = state.amplification_coefficient
    n_coins = state.n_coins
    fee_bps = state.fee_config.trade_fee_bps
    xp = state.xp()

    d0 = calculate_invariant(amp, xp, config.max_iterations)
    if d0 == 0:
        raise InsufficientLiquidity("Pool has an empty reserve")
    d1 = (S(d0) - mul_div(burn_amount, d0, state.lp_supply, Rounding.DOWN)).value

    new_y = get_y(amp, xp, d1, out_index, config.max_iterations)

    xp_reduced = []
    for j, x in enumerate(xp):
        ideal = mul_div(x, d1, d0, Rounding.DOWN)
        actual = new_y if j == out_index else x
        fee = imbalance_fee(ideal.abs_diff(actual).value, fee_bps, n_coins)
        xp_reduced.append((S(x) - fee).value)

    y = get_y(amp, xp_reduced, d1, out_index, config.max_iterations)
    reduced_out = xp_reduced[out_index]
    dy_xp = reduced_out - y - 1 if reduced_out > y + 1 else 0
    dy0_xp = xp[out_index] - new_y if xp[out_index] > new_y else 0

    multiplier = state.precision_multipliers[out_index]
    dy = scale_down(dy_xp, multiplier, Rounding.DOWN)
    dy0 = scale_down(dy0_xp, multiplier, Rounding.DOWN)
    fee_amount = dy0 - dy if dy0 > dy else 0
    return dy, fee_amount


def withdraw_one(
    state: PoolState,
    burn_amount: int,
    out_index: int,
    *,
    minimum_out_amount: int = 0,
    config: EngineConfig | None = None,
) -> WithdrawResult:
    """Burn LP tokens for a single asset.

    Raises:
        ZeroAmount: If burn_amount is not positive or the output is zero
        InsufficientLpSupply: If burn_amount exceeds the LP supply
        InsufficientLiquidity: If the reserve cannot cover the payout
        InvalidIndex: If out_index is out of range
        ExceededSlippage: If the output is below minimum_out_amount
        ConvergenceError: If a solver doesn't converge (fatal)
    """
    out_amount, fee_amount = calc_withdraw_one(state, burn_amount, out_index, config)
    if out_amount == 0:
        raise ZeroAmount("Single-asset withdrawal rounds to zero")
    if out_amount < minimum_out_amount:
        raise ExceededSlippage(f"Output {out_amount} below minimum {minimum_out_amount}")

    admin_amount = admin_fee(fee_amount, state.fee_config.admin_fee_bps)
    balance_out = state.balances[out_index]
    if S(out_amount) + admin_amount >= balance_out:
        raise InsufficientLiquidity(
            f"Output {out_amount} exceeds available balance {balance_out} at index {out_index}"
        )

    balances = list(state.balances)
    balances[out_index] = balance_out - out_amount - admin_amount
    admin_fee_balances = list(state.admin_fee_balances)
    admin_fee_balances[out_index] = (S(admin_fee_balances[out_index]) + admin_amount).to_uint64()

    new_state = state.with_updates(
        balances=tuple(balances),
        lp_supply=state.lp_supply - burn_amount,
        admin_fee_balances=tuple(admin_fee_balances),
    )

    logger.debug(
        "stable_withdraw_one",
        burn_amount=burn_amount,
        out_index=out_index,
        out_amount=out_amount,
        fee_amount=fee_amount,
        admin_fee_amount=admin_amount,
    )

    amounts = [0] * state.n_coins
    fees = [0] * state.n_coins
    admin_fees = [0] * state.n_coins
    amounts[out_index] = out_amount
    fees[out_index] = fee_amount
    admin_fees[out_index] = admin_amount
    return WithdrawResult(
        burn_amount=burn_amount,
        amounts=tuple(amounts),
        fee_amounts=tuple(fees),
        admin_fee_amounts=tuple(admin_fees),
        state=new_state,
    )


# =============================================================================
# Virtual price
# =============================================================================


def virtual_price(state: PoolState, config: EngineConfig | None = None) -> int:
    """Value of one LP token in common-precision units: D * 1e18 / lp_supply.

    Raises:
        InsufficientLpSupply: If the pool has no LP supply
    """
    config = config or DEFAULT_ENGINE_CONFIG
    if state.lp_supply == 0:
        raise InsufficientLpSupply("Empty pool has no virtual price")
    d = calculate_invariant(
        state.amplification_coefficient, state.xp(), config.max_iterations
    )
    return mul_div(d, config.virtual_price_precision, state.lp_supply, Rounding.DOWN).value
