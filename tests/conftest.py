"""Pytest configuration and fixtures."""

import pytest

from stableswap import PoolState
from tests.helpers import DEFAULT_ADMIN_FEE_BPS, MILLION, make_funded_pool, make_pool


@pytest.fixture
def balanced_pool() -> PoolState:
    """Two-asset 1M / 1M pool, A=100, 4 bps trade fee, no admin fee."""
    return make_pool(balances=[MILLION, MILLION])


@pytest.fixture
def zero_fee_pool() -> PoolState:
    """Two-asset 1M / 1M pool without fees."""
    return make_pool(balances=[MILLION, MILLION], trade_fee_bps=0)


@pytest.fixture
def admin_fee_pool() -> PoolState:
    """Two-asset pool whose admin takes half of every fee."""
    return make_pool(balances=[MILLION, MILLION], admin_fee_bps=DEFAULT_ADMIN_FEE_BPS)


@pytest.fixture
def three_coin_pool() -> PoolState:
    """Three-asset pool funded through an initial deposit."""
    return make_funded_pool(amounts=[MILLION, MILLION, MILLION])


@pytest.fixture
def empty_pool() -> PoolState:
    """Initialized two-asset pool with no liquidity."""
    return PoolState.empty(n_coins=2, amplification_coefficient=100)
