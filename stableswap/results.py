"""Operation result types.

Each mutating operation returns the amounts it computed together with the
successor PoolState. The caller commits the new state atomically, or
discards it.
"""

from dataclasses import dataclass

from stableswap.pool import PoolState


@dataclass(frozen=True)
class SwapResult:
    """Result of quoting a swap.

    Attributes:
        out_amount: Amount paid to the user, after the trade fee
        fee_amount: Trade fee charged on the raw output
        admin_fee_amount: Part of fee_amount credited to admin fee balances
        state: Pool state after the swap
    """

    out_amount: int
    fee_amount: int
    admin_fee_amount: int
    state: PoolState


@dataclass(frozen=True)
class DepositResult:
    """Result of a deposit.

    Attributes:
        mint_amount: LP tokens minted to the depositor
        fee_amounts: Imbalance fee charged per asset
        admin_fee_amounts: Part of each fee credited to admin fee balances
        state: Pool state after the deposit
    """

    mint_amount: int
    fee_amounts: tuple[int, ...]
    admin_fee_amounts: tuple[int, ...]
    state: PoolState


@dataclass(frozen=True)
class WithdrawResult:
    """Result of a withdrawal.

    For proportional withdrawals every asset may be paid out and the fee
    tuples are all zero. Single-asset withdrawals pay out only one asset.

    Attributes:
        burn_amount: LP tokens burned
        amounts: Amount paid out per asset
        fee_amounts: Withdrawal fee charged per asset
        admin_fee_amounts: Part of each fee credited to admin fee balances
        state: Pool state after the withdrawal
    """

    burn_amount: int
    amounts: tuple[int, ...]
    fee_amounts: tuple[int, ...]
    admin_fee_amounts: tuple[int, ...]
    state: PoolState
