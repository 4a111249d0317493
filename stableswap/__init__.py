"""Stable-swap invariant engine - Python Implementation."""

from stableswap.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from stableswap.liquidity import calc_withdraw_one, deposit, virtual_price, withdraw, withdraw_one
from stableswap.pool import AdminSettings, FeeConfig, PoolState, invariant
from stableswap.results import DepositResult, SwapResult, WithdrawResult
from stableswap.swap import calc_out_given_in, quote_swap

__version__ = "0.1.0"
__all__ = [
    # State
    "PoolState",
    "FeeConfig",
    "AdminSettings",
    # Operations
    "invariant",
    "quote_swap",
    "calc_out_given_in",
    "deposit",
    "withdraw",
    "withdraw_one",
    "calc_withdraw_one",
    "virtual_price",
    # Results
    "SwapResult",
    "DepositResult",
    "WithdrawResult",
    # Config
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "__version__",
]
