"""Pydantic models for pool snapshots exchanged with the ledger layer.

The ledger supplies pool accounts as JSON-like mappings with camelCase keys
and amounts as integers or decimal strings. PoolSnapshot validates that
input and converts it to the engine's PoolState (and back).
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from stableswap.constants import FEE_DENOMINATOR, MAX_N_COINS, MIN_N_COINS, UINT64_MAX
from stableswap.pool import AdminSettings, FeeConfig, PoolState


def validate_uint64(value: Any) -> int:
    """Validate that a value is a u64, given as int or decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint64 must be int or decimal string, got bool")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint64 must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"Uint64 must be string or int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Uint64 cannot be negative: {value}")
    if value > UINT64_MAX:
        raise ValueError(f"Uint64 overflow: {value} > 2^64-1")
    return value


# 64-bit unsigned ledger amount (int or decimal string)
Uint64 = Annotated[
    int,
    BeforeValidator(validate_uint64),
    Field(description="64-bit unsigned integer"),
]

BasisPoints = Annotated[int, Field(ge=0, lt=FEE_DENOMINATOR)]


class FeeConfigModel(BaseModel):
    """Fee parameters in basis points."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    trade_fee_bps: BasisPoints = Field(alias="tradeFeeBps")
    admin_fee_bps: BasisPoints = Field(default=0, alias="adminFeeBps")


class AdminSettingsModel(BaseModel):
    """Admin switches."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    swap_enabled: bool = Field(default=True, alias="swapEnabled")
    add_liquidity_enabled: bool = Field(default=True, alias="addLiquidityEnabled")


class PoolSnapshot(BaseModel):
    """Ledger view of a stable-swap pool."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    balances: list[Uint64] = Field(min_length=MIN_N_COINS, max_length=MAX_N_COINS)
    amplification_coefficient: int = Field(gt=0, alias="amplificationCoefficient")
    lp_supply: Uint64 = Field(alias="lpSupply")
    fee_config: FeeConfigModel = Field(alias="feeConfig")
    admin_fee_balances: list[Uint64] | None = Field(default=None, alias="adminFeeBalances")
    precision_multipliers: list[Annotated[int, Field(gt=0)]] | None = Field(
        default=None, alias="precisionMultipliers"
    )
    admin_settings: AdminSettingsModel = Field(
        default_factory=AdminSettingsModel, alias="adminSettings"
    )

    @model_validator(mode="after")
    def check_lengths(self) -> PoolSnapshot:
        n_coins = len(self.balances)
        for name, values in (
            ("adminFeeBalances", self.admin_fee_balances),
            ("precisionMultipliers", self.precision_multipliers),
        ):
            if values is not None and len(values) != n_coins:
                raise ValueError(f"{name} must have {n_coins} entries, got {len(values)}")
        return self

    def to_pool_state(self) -> PoolState:
        """Convert to the engine's PoolState.

        Raises:
            InvalidPoolState: If the snapshot violates a pool invariant
        """
        return PoolState(
            balances=tuple(self.balances),
            amplification_coefficient=self.amplification_coefficient,
            lp_supply=self.lp_supply,
            fee_config=FeeConfig(
                trade_fee_bps=self.fee_config.trade_fee_bps,
                admin_fee_bps=self.fee_config.admin_fee_bps,
            ),
            admin_fee_balances=tuple(self.admin_fee_balances or ()),
            precision_multipliers=tuple(self.precision_multipliers or ()),
            admin_settings=AdminSettings(
                swap_enabled=self.admin_settings.swap_enabled,
                add_liquidity_enabled=self.admin_settings.add_liquidity_enabled,
            ),
        )

    @classmethod
    def from_pool_state(cls, state: PoolState) -> PoolSnapshot:
        """Build a snapshot from a PoolState, for handing back to the ledger."""
        return cls(
            balances=list(state.balances),
            amplification_coefficient=state.amplification_coefficient,
            lp_supply=state.lp_supply,
            fee_config=FeeConfigModel(
                trade_fee_bps=state.fee_config.trade_fee_bps,
                admin_fee_bps=state.fee_config.admin_fee_bps,
            ),
            admin_fee_balances=list(state.admin_fee_balances),
            precision_multipliers=list(state.precision_multipliers),
            admin_settings=AdminSettingsModel(
                swap_enabled=state.admin_settings.swap_enabled,
                add_liquidity_enabled=state.admin_settings.add_liquidity_enabled,
            ),
        )
