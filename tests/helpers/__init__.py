"""Test helpers module for shared test utilities.

- constants: Pool parameters and common amounts
- factories: Pool factory functions
"""

from tests.helpers.constants import (
    DEFAULT_ADMIN_FEE_BPS,
    DEFAULT_AMP,
    DEFAULT_TRADE_FEE_BPS,
    MILLION,
    SIX_DECIMAL_MULTIPLIER,
)
from tests.helpers.factories import make_funded_pool, make_pool

__all__ = [
    # Constants
    "DEFAULT_AMP",
    "DEFAULT_TRADE_FEE_BPS",
    "DEFAULT_ADMIN_FEE_BPS",
    "MILLION",
    "SIX_DECIMAL_MULTIPLIER",
    # Factories
    "make_pool",
    "make_funded_pool",
]
