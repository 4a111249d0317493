"""Stable-swap invariant math.

Core math functions for StableSwap (Curve-style) pools, parameterized as

    A * n^n * sum(x) + D = A * n^n * D + D^(n+1) / (n^n * prod(x))

Both the invariant D and a single unknown balance y are found with
Newton-Raphson iteration under a hard iteration cap. Failure to converge is
fatal: callers must abort rather than continue with an unconverged value.

All arithmetic goes through SafeInt for overflow and division checks.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from stableswap.constants import MAX_ITERATIONS
from stableswap.errors import GetBalanceDidNotConverge, InvalidIndex, InvariantDidNotConverge
from stableswap.safe_int import S, SafeInt

logger = structlog.get_logger()


def amp_times_n_pow_n(amp: int, n_coins: int) -> SafeInt:
    """Ann = A * n^n."""
    return S(amp) * S(n_coins**n_coins)


def _converged(new: SafeInt, prev: SafeInt) -> bool:
    """|new - prev| <= 1."""
    return new.abs_diff(prev) <= 1


def calculate_invariant(
    amp: int,
    balances: Sequence[int],
    max_iterations: int = MAX_ITERATIONS,
) -> int:
    """Calculate the StableSwap invariant D using Newton-Raphson iteration.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. D_P = D^(n+1) / (n^n * prod(balances)), built one balance at a time
        3. D = (Ann * S + n * D_P) * D / ((Ann - 1) * D + (n + 1) * D_P)
        4. Stop when |D_new - D_old| <= 1

    Args:
        amp: Amplification coefficient A (unscaled)
        balances: Token balances in common precision
        max_iterations: Iteration cap

    Returns:
        The invariant D. Zero if any balance is zero (empty pool).

    Raises:
        InvariantDidNotConverge: If iteration doesn't converge
        SafeIntError: On overflow or division by zero
    """
    n_coins = len(balances)
    if n_coins == 0 or any(b == 0 for b in balances):
        return 0

    sum_balances = S(0)
    for b in balances:
        sum_balances = sum_balances + b

    ann = amp_times_n_pow_n(amp, n_coins)
    d = sum_balances

    for iteration in range(max_iterations):
        d_p = d
        for b in balances:
            d_p = (d_p * d) // (S(b) * n_coins)

        d_prev = d
        numerator = (ann * sum_balances + d_p * n_coins) * d
        denominator = (ann - 1) * d + d_p * (n_coins + 1)
        d = numerator // denominator

        if _converged(d, d_prev):
            logger.debug(
                "stable_invariant_converged",
                n_coins=n_coins,
                iterations=iteration + 1,
                invariant=d.value,
            )
            return d.value

    logger.error(
        "stable_invariant_did_not_converge",
        amp=amp,
        balances=list(balances),
        max_iterations=max_iterations,
    )
    raise InvariantDidNotConverge(
        f"Stable invariant did not converge after {max_iterations} iterations"
    )


def get_y(
    amp: int,
    balances: Sequence[int],
    invariant: int,
    token_index: int,
    max_iterations: int = MAX_ITERATIONS,
) -> int:
    """Solve for balances[token_index] given D and all other balances.

    Rearranging the invariant for one balance y gives the quadratic

        y^2 + (b - D) * y = c
        c = D^(n+1) / (n^n * prod(x_k for k != j) * Ann)
        b = sum(x_k for k != j) + D / Ann

    iterated as y = (y^2 + c) / (2y + b - D) from y = D. c and every
    division in the loop round up and b rounds down, keeping y at or above
    the exact root so the pool never pays out more than the curve allows.

    Args:
        amp: Amplification coefficient A (unscaled)
        balances: Token balances in common precision; the entry at
            token_index is ignored
        invariant: The invariant D to preserve
        token_index: Index of the balance to solve for
        max_iterations: Iteration cap

    Returns:
        The balance y

    Raises:
        InvalidIndex: If token_index is out of range
        GetBalanceDidNotConverge: If iteration doesn't converge
        SafeIntError: On overflow or division by zero
    """
    n_coins = len(balances)
    if token_index < 0 or token_index >= n_coins:
        raise InvalidIndex(f"token_index {token_index} out of range for {n_coins} tokens")

    d = S(invariant)
    ann = amp_times_n_pow_n(amp, n_coins)

    c = d
    sum_others = S(0)
    for k, x in enumerate(balances):
        if k == token_index:
            continue
        sum_others = sum_others + x
        c = (c * d).ceiling_div(S(x) * n_coins)
    c = (c * d).ceiling_div(ann * n_coins)

    b = sum_others + d // ann

    y = d
    for iteration in range(max_iterations):
        y_prev = y
        # 2y + b - D, checked before the subtraction
        denominator_base = y * 2 + b
        if denominator_base <= d:
            logger.error(
                "stable_get_y_non_positive_denominator",
                token_index=token_index,
                invariant=invariant,
            )
            raise GetBalanceDidNotConverge("Denominator became non-positive")
        y = (y * y + c).ceiling_div(denominator_base - d)

        if _converged(y, y_prev):
            logger.debug(
                "stable_get_y_converged",
                token_index=token_index,
                iterations=iteration + 1,
                balance=y.value,
            )
            return y.value

    logger.error(
        "stable_get_y_did_not_converge",
        amp=amp,
        token_index=token_index,
        invariant=invariant,
        max_iterations=max_iterations,
    )
    raise GetBalanceDidNotConverge(
        f"Stable get_y did not converge after {max_iterations} iterations"
    )
