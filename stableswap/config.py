"""Engine configuration."""

import os
from dataclasses import dataclass

from stableswap.constants import MAX_ITERATIONS, VIRTUAL_PRICE_PRECISION


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for the stable-swap engine.

    Holds solver limits and behavior flags so tests can run with different
    configurations while every operation reads one consistent set.

    Attributes:
        max_iterations: Newton-Raphson iteration cap (default: 255)
        check_invariant: If True, swaps recompute D after the mutation and
            raise InvariantViolation if it decreased.
        virtual_price_precision: Scale of the LP virtual price (default: 1e18)
    """

    max_iterations: int = MAX_ITERATIONS
    check_invariant: bool = True
    virtual_price_precision: int = VIRTUAL_PRICE_PRECISION

    def __post_init__(self) -> None:
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.virtual_price_precision <= 0:
            raise ValueError(
                f"virtual_price_precision must be positive, got {self.virtual_price_precision}"
            )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a configuration from environment variables.

        - STABLESWAP_MAX_ITERATIONS: iteration cap (default: 255)
        - STABLESWAP_CHECK_INVARIANT: post-swap invariant check (default: true)
        """
        return cls(
            max_iterations=int(os.environ.get("STABLESWAP_MAX_ITERATIONS", str(MAX_ITERATIONS))),
            check_invariant=os.environ.get("STABLESWAP_CHECK_INVARIANT", "true").lower()
            in ("true", "1", "yes"),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
