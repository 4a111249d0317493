"""Mathematical utilities for the stable-swap engine.

This package provides the numerical core:
- fixed_point: division and scaling with explicit rounding direction
- invariant: Newton-Raphson solvers for the invariant D and a single balance
"""

from stableswap.math.fixed_point import Rounding, div, mul_div, scale_down, scale_up
from stableswap.math.invariant import calculate_invariant, get_y

__all__ = [
    "Rounding",
    "div",
    "mul_div",
    "scale_up",
    "scale_down",
    "calculate_invariant",
    "get_y",
]
