"""Swap quoting for stable-swap pools.

The trade fee is charged after the invariant solve, on the quoted output:

    1. D from the current balances
    2. balance_in += amount_in
    3. solve balance_out for D + 1, one unit above the computed invariant
    4. raw output = old balance_out - new balance_out - 1 (rounding protection)
    5. fee = ceil(raw * fee_bps / 10000), user receives raw - fee
    6. the admin share of the fee leaves the reserve; the rest stays for LPs
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from stableswap.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from stableswap.constants import MAX_ITERATIONS
from stableswap.errors import (
    ExceededSlippage,
    InsufficientLiquidity,
    InvalidIndex,
    InvariantViolation,
    SwapDisabled,
    ZeroAmount,
)
from stableswap.fees import admin_fee, apply_fee
from stableswap.math.fixed_point import Rounding, scale_down, scale_up
from stableswap.math.invariant import calculate_invariant, get_y
from stableswap.pool import PoolState
from stableswap.results import SwapResult
from stableswap.safe_int import S

logger = structlog.get_logger()


def _output_for_invariant(
    amp: int,
    balances: Sequence[int],
    token_index_in: int,
    token_index_out: int,
    amount_in: int,
    invariant: int,
    max_iterations: int,
) -> int:
    """Raw output that leaves the pool at or above the given invariant.

    D is only known to within one unit, so y is solved for invariant + 1.
    On a pool with a near-empty reserve one unit of D is worth many tokens.
    """
    new_balances = list(balances)
    new_balances[token_index_in] = (S(balances[token_index_in]) + amount_in).value

    target = (S(invariant) + 1).value
    new_balance_out = get_y(amp, new_balances, target, token_index_out, max_iterations)

    # Ensure we don't underflow
    old_balance_out = balances[token_index_out]
    if new_balance_out + 1 >= old_balance_out:
        return 0
    return old_balance_out - new_balance_out - 1


def calc_out_given_in(
    amp: int,
    balances: Sequence[int],
    token_index_in: int,
    token_index_out: int,
    amount_in: int,
    max_iterations: int = MAX_ITERATIONS,
) -> int:
    """Calculate the pre-fee output amount for a given input.

    Works on balances already scaled to the common precision.

    Args:
        amp: Amplification coefficient A
        balances: Scaled token balances
        token_index_in: Index of input token
        token_index_out: Index of output token
        amount_in: Scaled input amount

    Returns:
        Scaled output amount, before the trade fee

    Raises:
        InvalidIndex: If an index is out of range or both indices are equal
        ConvergenceError: If a solver doesn't converge
    """
    n_coins = len(balances)
    if not 0 <= token_index_in < n_coins:
        raise InvalidIndex(f"token_index_in {token_index_in} out of range for {n_coins} tokens")
    if not 0 <= token_index_out < n_coins:
        raise InvalidIndex(f"token_index_out {token_index_out} out of range for {n_coins} tokens")
    if token_index_in == token_index_out:
        raise InvalidIndex("Cannot swap token with itself")

    invariant = calculate_invariant(amp, balances, max_iterations)
    return _output_for_invariant(
        amp, balances, token_index_in, token_index_out, amount_in, invariant, max_iterations
    )


def quote_swap(
    state: PoolState,
    in_index: int,
    out_index: int,
    in_amount: int,
    *,
    minimum_out_amount: int = 0,
    config: EngineConfig | None = None,
) -> SwapResult:
    """Quote a swap of in_amount of asset in_index for asset out_index.

    Args:
        state: Current pool state (not modified)
        in_index: Index of the asset paid in
        out_index: Index of the asset paid out
        in_amount: Input amount in native units of in_index
        minimum_out_amount: Smallest acceptable output after fees
        config: Engine configuration. Uses DEFAULT_ENGINE_CONFIG if not provided.

    Returns:
        SwapResult with the output, the fee split and the successor state

    Raises:
        InvalidIndex: If an index is out of range or both indices are equal
        ZeroAmount: If in_amount is not positive or the output rounds to zero
        SwapDisabled: If swaps are disabled for the pool
        InsufficientLiquidity: If the pool cannot pay out the output
        ExceededSlippage: If the output is below minimum_out_amount
        ConvergenceError: If a solver doesn't converge (fatal)
        InvariantViolation: If the swap would decrease D (fatal)
    """
    config = config or DEFAULT_ENGINE_CONFIG
    state.check_index(in_index, "input")
    state.check_index(out_index, "output")
    if in_index == out_index:
        raise InvalidIndex("Cannot swap token with itself")
    if in_amount <= 0:
        raise ZeroAmount(f"Swap input must be positive, got {in_amount}")
    if not state.admin_settings.swap_enabled:
        raise SwapDisabled("Swaps are disabled for this pool")

    amp = state.amplification_coefficient
    fees = state.fee_config
    xp = state.xp()

    d_before = calculate_invariant(amp, xp, config.max_iterations)
    if d_before == 0:
        raise InsufficientLiquidity("Pool has an empty reserve")

    dx = scale_up(in_amount, state.precision_multipliers[in_index])
    dy = _output_for_invariant(amp, xp, in_index, out_index, dx, d_before, config.max_iterations)
    raw_out = scale_down(dy, state.precision_multipliers[out_index], Rounding.DOWN)
    if raw_out == 0:
        raise ZeroAmount("Swap output rounds to zero")

    balance_out = state.balances[out_index]
    if raw_out >= balance_out:
        raise InsufficientLiquidity(
            f"Output {raw_out} exceeds available balance {balance_out} at index {out_index}"
        )

    split = apply_fee(raw_out, fees.trade_fee_bps)
    admin_amount = admin_fee(split.fee_amount, fees.admin_fee_bps)
    out_amount = split.net_amount
    if out_amount == 0:
        raise ZeroAmount("Swap output after fees rounds to zero")
    if out_amount < minimum_out_amount:
        raise ExceededSlippage(f"Output {out_amount} below minimum {minimum_out_amount}")

    balances = list(state.balances)
    balances[in_index] = (S(balances[in_index]) + in_amount).to_uint64()
    balances[out_index] = (S(balances[out_index]) - out_amount - admin_amount).value
    admin_fee_balances = list(state.admin_fee_balances)
    admin_fee_balances[out_index] = (S(admin_fee_balances[out_index]) + admin_amount).to_uint64()

    new_state = state.with_updates(
        balances=tuple(balances),
        admin_fee_balances=tuple(admin_fee_balances),
    )

    if config.check_invariant:
        d_after = calculate_invariant(amp, new_state.xp(), config.max_iterations)
        # Both values carry the solver's 1-unit convergence tolerance
        if d_after + 1 < d_before:
            logger.error(
                "stable_swap_invariant_decreased",
                d_before=d_before,
                d_after=d_after,
                in_index=in_index,
                out_index=out_index,
                in_amount=in_amount,
            )
            raise InvariantViolation(f"Swap would decrease invariant: {d_before} -> {d_after}")

    logger.debug(
        "stable_swap_quoted",
        in_index=in_index,
        out_index=out_index,
        in_amount=in_amount,
        out_amount=out_amount,
        fee_amount=split.fee_amount,
        admin_fee_amount=admin_amount,
    )

    return SwapResult(
        out_amount=out_amount,
        fee_amount=split.fee_amount,
        admin_fee_amount=admin_amount,
        state=new_state,
    )
