"""
Engine settings schema.

``EngineSettings`` is the runtime artifact produced from a YAML settings
file by the loader. It is frozen and carries the checksum of the source
data so a report can be tied back to the exact settings that produced it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from equipcost_engines.costs import DEFAULT_RESERVE_PERCENTAGE
from equipcost_kernel.domain.values import DecimalArithmetic, DecimalPolicy, decimal_text

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class EngineSettings:
    """Validated engine settings."""

    decimal_policy: DecimalPolicy = field(default_factory=DecimalPolicy)
    reserve_percentage: Decimal = DEFAULT_RESERVE_PERCENTAGE
    default_currency: str = DEFAULT_CURRENCY
    currency_symbols: MappingProxyType = field(
        default_factory=lambda: MappingProxyType({})
    )
    version: int = 1
    checksum: str = ""

    def arithmetic(self) -> DecimalArithmetic:
        """A ``DecimalArithmetic`` bound to this settings' decimal policy."""
        return DecimalArithmetic(self.decimal_policy)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "decimal": {
                "precision": self.decimal_policy.precision,
                "rounding": self.decimal_policy.rounding,
            },
            "reserve": {"percentage": decimal_text(self.reserve_percentage)},
            "display": {
                "default_currency": self.default_currency,
                "currency_symbols": dict(self.currency_symbols),
            },
        }
