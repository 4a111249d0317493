"""Tests for the stable-swap invariant and balance solvers."""

from fractions import Fraction

import pytest
from structlog.testing import capture_logs

from stableswap.errors import (
    ConvergenceError,
    GetBalanceDidNotConverge,
    InvalidIndex,
    InvariantDidNotConverge,
)
from stableswap.math.invariant import amp_times_n_pow_n, calculate_invariant, get_y
from tests.helpers import MILLION


class TestAmpTimesNPowN:
    """Tests for Ann = A * n^n."""

    @pytest.mark.parametrize(
        ("amp", "n_coins", "expected"),
        [(100, 2, 400), (100, 3, 2_700), (1, 4, 256)],
    )
    def test_ann(self, amp: int, n_coins: int, expected: int) -> None:
        """Ann scales with n^n."""
        assert amp_times_n_pow_n(amp, n_coins) == expected


class TestCalculateInvariant:
    """Tests for calculate_invariant."""

    def test_balanced_two_coin_equals_sum(self) -> None:
        """For equal balances D is exactly the sum."""
        assert calculate_invariant(100, [MILLION, MILLION]) == 2 * MILLION

    def test_balanced_three_coin_equals_sum(self) -> None:
        """Holds for any pool size."""
        assert calculate_invariant(100, [MILLION] * 3) == 3 * MILLION

    def test_empty_pool_is_zero(self) -> None:
        """An all-zero pool has D = 0."""
        assert calculate_invariant(100, [0, 0]) == 0

    def test_any_zero_balance_is_zero(self) -> None:
        """A single empty reserve yields D = 0."""
        assert calculate_invariant(100, [MILLION, 0]) == 0

    def test_imbalanced_pool_bounds(self) -> None:
        """D lies between the constant-product and constant-sum values."""
        d = calculate_invariant(100, [MILLION, MILLION // 2])
        assert 1_414_213 < d < 1_500_000

    def test_higher_amp_approaches_sum(self) -> None:
        """A flatter curve brings D closer to the plain sum."""
        balances = [MILLION, MILLION // 2]
        assert calculate_invariant(10, balances) < calculate_invariant(1_000, balances)

    def test_deterministic(self) -> None:
        """Identical inputs give identical outputs."""
        balances = [123_456_789, 987_654_321, 555_555_555]
        assert calculate_invariant(85, balances) == calculate_invariant(85, balances)

    def test_large_balances(self) -> None:
        """u64-scale balances lifted to 18 decimals stay within 256 bits."""
        balances = [10**18 * 10**9, 10**18 * 10**9]
        assert calculate_invariant(2_000, balances) == 2 * 10**27

    def test_non_convergence_raises(self) -> None:
        """Hitting the iteration cap is a fatal convergence error."""
        with pytest.raises(InvariantDidNotConverge) as exc_info:
            calculate_invariant(100, [MILLION, 1], max_iterations=1)
        assert isinstance(exc_info.value, ConvergenceError)
        assert exc_info.value.recoverable is False

    def test_non_convergence_is_logged(self) -> None:
        """Solver failure is logged before raising."""
        with capture_logs() as logs, pytest.raises(InvariantDidNotConverge):
            calculate_invariant(100, [MILLION, 1], max_iterations=1)
        events = [entry["event"] for entry in logs]
        assert "stable_invariant_did_not_converge" in events


def _exact_residual(amp: int, balances: list[int], d: int) -> Fraction:
    """Ann*D + D^(n+1)/(n^n*prod) - Ann*S - D; increasing in D, zero at the root."""
    n_coins = len(balances)
    ann = amp * n_coins**n_coins
    prod = 1
    for b in balances:
        prod *= b
    d_p = Fraction(d ** (n_coins + 1), n_coins**n_coins * prod)
    return ann * d + d_p - ann * sum(balances) - d


class TestInvariantAccuracy:
    """calculate_invariant against the exact rational root."""

    @pytest.mark.parametrize(
        ("amp", "balances"),
        [
            (100, [MILLION, MILLION // 2]),
            (100, [MILLION, 1]),
            (85, [123_456_789, 987_654_321, 555_555_555]),
            (1_000, [39, 8_922_050_072_748, 46_910_530_302_509]),
            (100, [4_076, 53_877_029_746_287_122, 63_895_295_032_038_853]),
            (10, [1_000, 50_000, 2_000_000, 900_000_000]),
            (2_000, [7, 10**9, 3 * 10**12, 10**15]),
        ],
    )
    def test_within_one_unit_of_root(self, amp: int, balances: list[int]) -> None:
        """The exact root lies in [D - 1, D + 1]."""
        d = calculate_invariant(amp, balances)
        assert _exact_residual(amp, balances, d - 1) <= 0
        assert _exact_residual(amp, balances, d + 1) >= 0


class TestGetY:
    """Tests for get_y."""

    def test_balanced_pool_recovers_balance(self) -> None:
        """Solving a balanced pool returns its own balance (rounded up)."""
        d = calculate_invariant(100, [MILLION, MILLION])
        y = get_y(100, [MILLION, MILLION], d, 1)
        assert MILLION <= y <= MILLION + 2

    def test_more_input_means_less_output_balance(self) -> None:
        """Raising one balance lowers the solved balance."""
        d = calculate_invariant(100, [MILLION, MILLION])
        y = get_y(100, [MILLION + 100_000, MILLION], d, 1)
        assert y < MILLION

    def test_solution_preserves_invariant(self) -> None:
        """Plugging y back in keeps D (within the solver tolerance)."""
        balances = [MILLION + 100_000, MILLION, MILLION]
        d = calculate_invariant(100, [MILLION] * 3)
        y = get_y(100, balances, d, 2)
        balances[2] = y
        assert calculate_invariant(100, balances) >= d - 1

    def test_target_balance_is_ignored(self) -> None:
        """The entry being solved for does not affect the result."""
        d = calculate_invariant(100, [MILLION, MILLION])
        assert get_y(100, [MILLION, 1], d, 1) == get_y(100, [MILLION, 999_999_999], d, 1)

    @pytest.mark.parametrize("index", [-1, 2, 5])
    def test_invalid_index_raises(self, index: int) -> None:
        """Indices outside the pool are rejected."""
        with pytest.raises(InvalidIndex):
            get_y(100, [MILLION, MILLION], 2 * MILLION, index)

    def test_non_convergence_raises(self) -> None:
        """Hitting the iteration cap is a fatal convergence error."""
        with pytest.raises(GetBalanceDidNotConverge):
            get_y(100, [MILLION, MILLION], 2 * MILLION, 0, max_iterations=1)
