"""Pool state dataclasses.

PoolState is an immutable snapshot: every operation reads one snapshot and
returns a new one, leaving the caller's copy untouched. Persistence and
per-pool serialization belong to the host ledger.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from stableswap.constants import MAX_ITERATIONS, MAX_N_COINS, MIN_N_COINS, UINT64_MAX
from stableswap.errors import InvalidIndex, InvalidPoolState
from stableswap.fees import validate_fee_bps
from stableswap.math.fixed_point import scale_balances
from stableswap.math.invariant import calculate_invariant


@dataclass(frozen=True)
class FeeConfig:
    """Basis-point fee parameters.

    Attributes:
        trade_fee_bps: Fee charged on swap output and on imbalance
        admin_fee_bps: Share of every collected fee owed to administrators
    """

    trade_fee_bps: int = 0
    admin_fee_bps: int = 0

    def __post_init__(self) -> None:
        validate_fee_bps(self.trade_fee_bps)
        validate_fee_bps(self.admin_fee_bps)


@dataclass(frozen=True)
class AdminSettings:
    """Switches an administrator can use to pause parts of the pool."""

    swap_enabled: bool = True
    add_liquidity_enabled: bool = True


@dataclass(frozen=True)
class PoolState:
    """Stable-swap pool state.

    Construction checks widths and shape only. The invariant is computed
    with 256-bit intermediates, so a state whose scaled balances are
    extremely unequal (for example one reserve of 10 beside one of 10^18
    in a 4-asset pool) is accepted here, but every operation that solves
    for D raises Overflow. Proportional withdrawal never solves for D and
    still lets LPs exit such a pool.

    Attributes:
        balances: Reserve per asset, in native token units
        amplification_coefficient: Curve flatness parameter A (> 0)
        lp_supply: Total LP tokens outstanding
        fee_config: Trade and admin fee rates
        admin_fee_balances: Accrued admin fees per asset (defaults to zeros)
        precision_multipliers: Per-asset factor lifting native amounts to the
            common precision (defaults to ones)
        admin_settings: Swap / deposit switches
    """

    balances: tuple[int, ...]
    amplification_coefficient: int
    lp_supply: int
    fee_config: FeeConfig = field(default_factory=FeeConfig)
    admin_fee_balances: tuple[int, ...] = ()
    precision_multipliers: tuple[int, ...] = ()
    admin_settings: AdminSettings = field(default_factory=AdminSettings)

    def __post_init__(self) -> None:
        n_coins = len(self.balances)
        object.__setattr__(self, "balances", tuple(self.balances))
        if not self.admin_fee_balances:
            object.__setattr__(self, "admin_fee_balances", (0,) * n_coins)
        else:
            object.__setattr__(self, "admin_fee_balances", tuple(self.admin_fee_balances))
        if not self.precision_multipliers:
            object.__setattr__(self, "precision_multipliers", (1,) * n_coins)
        else:
            object.__setattr__(self, "precision_multipliers", tuple(self.precision_multipliers))
        self._validate()

    def _validate(self) -> None:
        n_coins = len(self.balances)
        if not MIN_N_COINS <= n_coins <= MAX_N_COINS:
            raise InvalidPoolState(
                f"Pool must hold {MIN_N_COINS}..{MAX_N_COINS} assets, got {n_coins}"
            )
        if len(self.admin_fee_balances) != n_coins:
            raise InvalidPoolState("admin_fee_balances length must match balances")
        if len(self.precision_multipliers) != n_coins:
            raise InvalidPoolState("precision_multipliers length must match balances")
        if self.amplification_coefficient <= 0:
            raise InvalidPoolState(
                f"Amplification coefficient must be positive, got {self.amplification_coefficient}"
            )
        for name, values in (
            ("balances", self.balances),
            ("admin_fee_balances", self.admin_fee_balances),
        ):
            for i, value in enumerate(values):
                if not 0 <= value <= UINT64_MAX:
                    raise InvalidPoolState(f"{name}[{i}] out of u64 range: {value}")
        if not 0 <= self.lp_supply <= UINT64_MAX:
            raise InvalidPoolState(f"lp_supply out of u64 range: {self.lp_supply}")
        for i, multiplier in enumerate(self.precision_multipliers):
            if multiplier <= 0:
                raise InvalidPoolState(f"precision_multipliers[{i}] must be positive")
        if (self.lp_supply == 0) != self.is_empty:
            raise InvalidPoolState(
                "lp_supply must be zero exactly when every balance is zero "
                f"(lp_supply={self.lp_supply}, balances={self.balances})"
            )

    @classmethod
    def empty(
        cls,
        n_coins: int,
        amplification_coefficient: int,
        fee_config: FeeConfig | None = None,
        precision_multipliers: tuple[int, ...] | None = None,
        admin_settings: AdminSettings | None = None,
    ) -> PoolState:
        """Create an initialized pool with no liquidity."""
        return cls(
            balances=(0,) * n_coins,
            amplification_coefficient=amplification_coefficient,
            lp_supply=0,
            fee_config=fee_config or FeeConfig(),
            precision_multipliers=precision_multipliers or (),
            admin_settings=admin_settings or AdminSettings(),
        )

    @property
    def n_coins(self) -> int:
        return len(self.balances)

    @property
    def is_empty(self) -> bool:
        """True if every balance is zero."""
        return all(b == 0 for b in self.balances)

    def xp(self) -> list[int]:
        """Balances scaled to the common precision."""
        return scale_balances(self.balances, self.precision_multipliers)

    def check_index(self, index: int, role: str = "token") -> int:
        """Validate a token index.

        Raises:
            InvalidIndex: If index is out of range
        """
        if isinstance(index, bool) or not 0 <= index < self.n_coins:
            raise InvalidIndex(f"{role} index {index} out of range for {self.n_coins} tokens")
        return index

    def with_updates(self, **changes: Any) -> PoolState:
        """Return a successor state; validation runs again on the result."""
        return dataclasses.replace(self, **changes)


def invariant(state: PoolState, max_iterations: int = MAX_ITERATIONS) -> int:
    """Read-only invariant D of a pool state (0 for an empty pool)."""
    return calculate_invariant(state.amplification_coefficient, state.xp(), max_iterations)
