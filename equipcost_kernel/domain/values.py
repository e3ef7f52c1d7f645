"""
Values -- Decimal arithmetic core and boundary parsing.

Responsibility:
    Provides the numeric foundation for every cost computation: an explicit,
    immutable ``DecimalPolicy`` (precision + rounding), a ``DecimalArithmetic``
    bound to that policy at construction, and the boundary parse functions
    that turn caller input into ``Decimal``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module and by all engines.

Invariants enforced:
    - Decimal-only arithmetic: native floats are rejected at the boundary,
      never converted.
    - No global state: the thread-local ``decimal`` context is never read
      for arithmetic and never mutated. Each ``DecimalArithmetic`` keeps a
      private ``decimal.Context`` per thread.
    - Safe ratios: ``ratio()`` returns zero when the divisor is zero or
      negative, so reports for projects without logged hours still render.
    - One text form per number: ``decimal_text`` renders equal values
      identically, whatever exponent the arithmetic left on them.

Failure modes:
    - FloatNotAllowedError when a float is passed to ``to_decimal``.
    - InvalidNumberError for non-numeric strings, None, bools, NaN, Infinity.
    - NegativeValueError / OutOfRangeError from the constrained parsers.
    - InvalidDecimalPolicyError for precision below 28 or unknown rounding.
"""

from __future__ import annotations

import decimal
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from equipcost_kernel.exceptions import (
    FloatNotAllowedError,
    InvalidDecimalPolicyError,
    InvalidNumberError,
    NegativeValueError,
    OutOfRangeError,
)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

MIN_PRECISION = 28

_ROUNDING_MODES: frozenset[str] = frozenset({
    decimal.ROUND_UP,
    decimal.ROUND_DOWN,
    decimal.ROUND_CEILING,
    decimal.ROUND_FLOOR,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_05UP,
})


@dataclass(frozen=True, slots=True)
class DecimalPolicy:
    """
    Precision and rounding applied to every engine computation.

    Contract:
        Immutable settings value. Bound into a ``DecimalArithmetic`` at
        construction; never installed into the global decimal context.

    Guarantees:
        - precision >= 28 significant digits
        - rounding is one of the ``decimal`` module rounding constants
    """

    precision: int = MIN_PRECISION
    rounding: str = ROUND_HALF_UP

    def __post_init__(self) -> None:
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise InvalidDecimalPolicyError(
                self.precision, self.rounding, "precision must be an integer"
            )
        if self.precision < MIN_PRECISION:
            raise InvalidDecimalPolicyError(
                self.precision,
                self.rounding,
                f"precision must be at least {MIN_PRECISION}",
            )
        if self.rounding not in _ROUNDING_MODES:
            raise InvalidDecimalPolicyError(
                self.precision, self.rounding, "unknown rounding mode"
            )

    def new_context(self) -> decimal.Context:
        """Build a fresh ``decimal.Context`` carrying this policy."""
        return decimal.Context(prec=self.precision, rounding=self.rounding)


class DecimalArithmetic:
    """
    Decimal operations bound to a single ``DecimalPolicy``.

    Contract:
        Operations run in a private context built from the policy, one per
        thread, since every operation records its signal flags on the context
        it uses. Instances may therefore be shared between threads.

    Non-goals:
        - Does NOT parse caller input; use ``to_decimal`` first.
        - Does NOT round results to currency places; use ``quantize``.
    """

    __slots__ = ("_policy", "_local")

    def __init__(self, policy: DecimalPolicy | None = None):
        self._policy = policy or DecimalPolicy()
        self._local = threading.local()

    @property
    def _context(self) -> decimal.Context:
        context = getattr(self._local, "context", None)
        if context is None:
            context = self._local.context = self._policy.new_context()
        return context

    @property
    def policy(self) -> DecimalPolicy:
        return self._policy

    def add(self, a: Decimal, b: Decimal) -> Decimal:
        return self._context.add(a, b)

    def subtract(self, a: Decimal, b: Decimal) -> Decimal:
        return self._context.subtract(a, b)

    def multiply(self, a: Decimal, b: Decimal) -> Decimal:
        return self._context.multiply(a, b)

    def divide(self, a: Decimal, b: Decimal) -> Decimal:
        """Plain division. Raises ``decimal.DivisionByZero`` on a zero divisor."""
        return self._context.divide(a, b)

    def total(self, values: Iterable[Decimal]) -> Decimal:
        """Sum an iterable of decimals; an empty iterable sums to zero."""
        result = ZERO
        for value in values:
            result = self._context.add(result, value)
        return result

    def ratio(self, numerator: Decimal, denominator: Decimal) -> Decimal:
        """
        Divide, returning zero when the denominator is zero or negative.

        Used wherever the domain asks for a rate (cost per hour, share of
        hours, cost per member): an empty project is a valid state, not an
        error.
        """
        if denominator <= ZERO:
            return ZERO
        return self._context.divide(numerator, denominator)

    def percent_of(self, amount: Decimal, percent: Decimal) -> Decimal:
        """``amount * percent / 100``."""
        return self._context.divide(self._context.multiply(amount, percent), HUNDRED)

    def quantize(self, value: Decimal, places: int = 2) -> Decimal:
        """Round to a fixed number of decimal places with the policy rounding."""
        return self._context.quantize(value, self._context.scaleb(ONE, -places))

    def clamp(self, value: Decimal, low: Decimal, high: Decimal) -> Decimal:
        if value < low:
            return low
        if value > high:
            return high
        return value

    def __repr__(self) -> str:
        return (
            f"DecimalArithmetic(precision={self._policy.precision}, "
            f"rounding={self._policy.rounding!r})"
        )


DEFAULT_POLICY = DecimalPolicy()
DEFAULT_ARITHMETIC = DecimalArithmetic(DEFAULT_POLICY)


# ---------------------------------------------------------------------------
# Boundary parsing
# ---------------------------------------------------------------------------


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """
    Parse a caller-supplied value into a finite ``Decimal``.

    Preconditions:
        - value is a Decimal, an int, or a canonical decimal string
          (surrounding whitespace is ignored).

    Postconditions:
        - Returns a finite Decimal equal to the input.

    Raises:
        FloatNotAllowedError: value is a native float.
        InvalidNumberError: value is None, a bool, an unparseable string,
            an unsupported type, NaN or Infinity.
    """
    if isinstance(value, bool):
        raise InvalidNumberError(field_name, value)
    if isinstance(value, float):
        raise FloatNotAllowedError(field_name, value)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except (InvalidOperation, ValueError):
            raise InvalidNumberError(field_name, value) from None
    else:
        raise InvalidNumberError(field_name, value)

    if not result.is_finite():
        raise InvalidNumberError(field_name, value)
    return result


def to_non_negative(value: Any, field_name: str = "value") -> Decimal:
    """``to_decimal`` that also rejects negative values."""
    result = to_decimal(value, field_name)
    if result < ZERO:
        raise NegativeValueError(field_name, value)
    return result


def to_percentage(value: Any, field_name: str = "value") -> Decimal:
    """``to_non_negative`` that also rejects values above 100."""
    result = to_non_negative(value, field_name)
    if result > HUNDRED:
        raise OutOfRangeError(field_name, value, ZERO, HUNDRED)
    return result


def to_optional_non_negative(value: Any, field_name: str = "value") -> Decimal | None:
    if value is None:
        return None
    return to_non_negative(value, field_name)


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------


def decimal_text(value: Decimal) -> str:
    """
    Plain text for a Decimal: no exponent, no trailing fractional zeros.

    ``Decimal("212000.00")``, ``Decimal("212000")`` and ``Decimal("2.12E+5")``
    all render as ``"212000"``. Used by every ``to_dict`` and engine log so
    serialised figures do not depend on how they were computed.
    """
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
