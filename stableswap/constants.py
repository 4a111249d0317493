"""Protocol constants for the stable-swap engine.

Centralizes pool limits and arithmetic widths shared by every module.
"""

# Pool size limits
MIN_N_COINS = 2
MAX_N_COINS = 4

# Fees are expressed in basis points
FEE_DENOMINATOR = 10_000

# Newton-Raphson iteration cap for the invariant and balance solvers
MAX_ITERATIONS = 255

# Ledger amounts are unsigned 64-bit; intermediates are bounded to 256 bits
UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

# LP token virtual price is reported with 18 decimals
VIRTUAL_PRICE_PRECISION = 10**18
