"""Checked integer arithmetic for pool amounts.

Every value the engine computes is a non-negative integer no wider than
256 bits. SafeInt enforces both bounds on every operation:
- a zero divisor raises DivisionByZero
- a result below zero raises Underflow
- a sum or product above 2^256-1 raises Overflow, detected from the
  operands before the result is formed

Amounts that are stored back on the ledger must also fit 64 bits; use
to_uint64() when leaving the arithmetic layer.

Usage pattern:
    from stableswap.safe_int import S

    def share(balance: int, burn: int, supply: int) -> int:
        # Checked from here on
        return (S(balance) * burn // supply).to_uint64()
"""

from __future__ import annotations

from stableswap.constants import UINT64_MAX, UINT256_MAX


class SafeIntError(ArithmeticError):
    """Arithmetic on pool amounts left the valid range."""

    pass


class DivisionByZero(SafeIntError):
    """Divisor was zero."""

    pass


class Underflow(SafeIntError):
    """Result would be negative."""

    pass


class Overflow(SafeIntError):
    """Result would not fit the target width."""

    pass


def _operand(x: SafeInt | int) -> int:
    """Raw value of an operand; plain ints are range-checked like SafeInts."""
    if isinstance(x, SafeInt):
        return x._value
    return SafeInt(x)._value


def _nonzero_divisor(divisor: int, dividend: int, op: str) -> int:
    if divisor == 0:
        raise DivisionByZero(f"{op} by zero: {dividend} {op} 0")
    return divisor


class SafeInt:
    """Unsigned 256-bit integer with checked operators.

    Supports +, -, *, //, % and comparisons against SafeInt or int. True
    division is rejected so that no float ever enters pool math.

    Attributes:
        value: The wrapped integer (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Wrap value.

        Raises:
            TypeError: If value is not an int (bools are rejected)
            Underflow: If value is negative
            Overflow: If value exceeds 2^256-1
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"Negative amount: {value}")
        if value > UINT256_MAX:
            raise Overflow(f"Amount exceeds uint256: {value}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        rhs = _operand(other)
        if self._value > UINT256_MAX - rhs:
            raise Overflow(f"Overflow: {self._value} + {rhs}")
        return SafeInt(self._value + rhs)

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        rhs = _operand(other)
        if rhs > self._value:
            raise Underflow(f"Underflow: {self._value} - {rhs}")
        return SafeInt(self._value - rhs)

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(other) - self

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        rhs = _operand(other)
        if rhs and self._value > UINT256_MAX // rhs:
            raise Overflow(f"Overflow: {self._value} * {rhs}")
        return SafeInt(self._value * rhs)

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        rhs = _nonzero_divisor(_operand(other), self._value, "//")
        return SafeInt(self._value // rhs)

    def __rfloordiv__(self, other: int) -> SafeInt:
        return SafeInt(other) // self

    def __mod__(self, other: SafeInt | int) -> SafeInt:
        rhs = _nonzero_divisor(_operand(other), self._value, "%")
        return SafeInt(self._value % rhs)

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("true division is not allowed on pool amounts; use floor division (//)")

    __rtruediv__ = __truediv__

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _operand(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _operand(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _operand(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _operand(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __bool__(self) -> bool:
        return self._value != 0

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounded up.

        Raises:
            DivisionByZero: If other is zero
        """
        rhs = _nonzero_divisor(_operand(other), self._value, "ceil//")
        quotient, remainder = divmod(self._value, rhs)
        return SafeInt(quotient + 1 if remainder else quotient)

    def abs_diff(self, other: SafeInt | int) -> SafeInt:
        """|self - other|, never underflows."""
        return SafeInt(abs(self._value - _operand(other)))

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _operand(other)))

    def max(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(max(self._value, _operand(other)))

    def to_uint64(self) -> int:
        """Unwrap for storage in a 64-bit ledger field.

        Raises:
            Overflow: If the value exceeds 2^64-1
        """
        if self._value > UINT64_MAX:
            raise Overflow(f"Amount exceeds uint64: {self._value}")
        return self._value

    def to_uint256(self) -> int:
        """Unwrap; always in range by construction."""
        return self._value

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)

    @classmethod
    def from_str(cls, s: str) -> SafeInt:
        """Parse a decimal string.

        Raises:
            ValueError: If s is not an integer literal
        """
        return cls(int(s))


# Short alias used throughout the math modules
S = SafeInt
