"""Currency -- display symbols and amount formatting for report renderers.

The engines are currency-agnostic: a project carries a three-letter code
that is forwarded untouched. This module only decides how a decimal amount
and that code are rendered as text.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, ClassVar

from equipcost_kernel.domain.values import ZERO, DecimalArithmetic, DecimalPolicy, to_decimal

# Display rounding is fixed and independent of the engine DecimalPolicy.
_DISPLAY = DecimalArithmetic(DecimalPolicy(precision=40, rounding=ROUND_HALF_UP))

_THOUSAND = Decimal("1000")
_MILLION = Decimal("1000000")
_BILLION = Decimal("1000000000")


@dataclass(frozen=True)
class CurrencyInfo:
    """Display information about a single currency."""

    code: str
    symbol: str
    name: str


class CurrencyRegistry:
    """Registry of currency display symbols."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "USD": CurrencyInfo("USD", "$", "US Dollar"),
        "EUR": CurrencyInfo("EUR", "€", "Euro"),
        "GBP": CurrencyInfo("GBP", "£", "Pound Sterling"),
        "RUB": CurrencyInfo("RUB", "₽", "Russian Ruble"),
        "JPY": CurrencyInfo("JPY", "¥", "Japanese Yen"),
        "CNY": CurrencyInfo("CNY", "¥", "Chinese Yuan"),
    }

    @classmethod
    def is_known(cls, code: str) -> bool:
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def symbol_for(cls, code: str, overrides: Mapping[str, str] | None = None) -> str:
        """
        Display symbol for a code.

        Codes are matched case-insensitively. ``overrides`` (typically from
        engine settings) win over the built-in table. Unknown codes fall back
        to the upper-cased code itself.
        """
        normalized = code.upper().strip()
        if overrides:
            for key, symbol in overrides.items():
                if key.upper().strip() == normalized:
                    return symbol
        info = cls.get_info(normalized)
        return info.symbol if info else normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES.keys())


def _round(value: Decimal, places: int) -> Decimal:
    return _DISPLAY.quantize(value, places)


def format_number(value: Any, places: int = 2) -> str:
    """Round half-up to ``places`` and group thousands with commas."""
    amount = _round(to_decimal(value, "value"), places)
    return f"{amount:,.{places}f}"


def format_currency(
    value: Any,
    currency: str = "USD",
    show_symbol: bool = True,
    symbols: Mapping[str, str] | None = None,
) -> str:
    """
    Render an amount as ``<symbol><grouped digits>`` with two decimals.

    Negative amounts put the sign before the symbol (``-$1,234.50``).
    Unknown currency codes are used as their own symbol.
    """
    amount = _round(to_decimal(value, "value"), 2)
    sign = "-" if amount < ZERO else ""
    digits = f"{abs(amount):,.2f}"
    if not show_symbol:
        return f"{sign}{digits}"
    return f"{sign}{CurrencyRegistry.symbol_for(currency, symbols)}{digits}"


def format_percentage(value: Any) -> str:
    """One decimal place followed by ``%``."""
    return f"{_round(to_decimal(value, 'value'), 1):.1f}%"


def format_compact_number(value: Any) -> str:
    """Abbreviate large magnitudes with K / M / B suffixes."""
    amount = to_decimal(value, "value")
    for threshold, suffix in ((_BILLION, "B"), (_MILLION, "M"), (_THOUSAND, "K")):
        if amount >= threshold:
            scaled = _DISPLAY.divide(amount, threshold)
            return f"{_round(scaled, 1):.1f}{suffix}"
    return f"{_round(amount, 0):.0f}"
