"""Stable-swap error classes.

Input errors are recoverable: the caller may retry with corrected input.
Solver and invariant failures are fatal and must abort the operation.
Arithmetic failures are raised as SafeIntError (an ArithmeticError) from
stableswap.safe_int.
"""

from typing import ClassVar


class StableSwapError(Exception):
    """Base error for stable-swap operations."""

    recoverable: ClassVar[bool] = True


class InvalidPoolState(ValueError):
    """Pool state fields are malformed or mutually inconsistent."""

    pass


# --- Fatal errors ---


class ConvergenceError(StableSwapError):
    """Newton-Raphson iteration did not converge within the iteration cap."""

    recoverable = False


class InvariantDidNotConverge(ConvergenceError):
    """Newton-Raphson iteration for the invariant D did not converge."""

    pass


class GetBalanceDidNotConverge(ConvergenceError):
    """Newton-Raphson iteration for a single balance y did not converge."""

    pass


class InvariantViolation(StableSwapError):
    """An operation would decrease the pool invariant."""

    recoverable = False


# --- Recoverable input errors ---


class InsufficientLiquidity(StableSwapError):
    """The pool cannot pay out the requested amount."""

    pass


class InsufficientLpSupply(StableSwapError):
    """Burn amount exceeds the outstanding LP supply."""

    pass


class ZeroAmount(StableSwapError):
    """Requested or resulting amount is zero."""

    pass


class InvalidIndex(StableSwapError):
    """Token index is out of range, or input and output index are equal."""

    pass


class ExceededSlippage(StableSwapError):
    """Result is worse than the caller's minimum."""

    pass


class SwapDisabled(StableSwapError):
    """Swaps are disabled by the pool's admin settings."""

    pass


class AddLiquidityDisabled(StableSwapError):
    """Deposits are disabled by the pool's admin settings."""

    pass


class InvalidInitialDeposit(StableSwapError):
    """The first deposit into an empty pool must fund every asset."""

    pass


class InvalidFee(StableSwapError):
    """Fee must be in range [0, 10000) basis points."""

    pass
