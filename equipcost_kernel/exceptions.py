"""
Typed Exception Hierarchy for the Equipment Cost Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The engines favour defined degenerate results over exceptions: dividing by
zero hours, zero members or a zero variable rate yields ``Decimal("0")``.
What remains are genuine input errors at the boundary (non-numeric strings,
floats, negative quantities, out-of-range percentages) and configuration
errors. Callers catch these by type and read structured attributes rather
than parsing messages:

    try:
        params = OperatingParameters(operating_hours_per_month=raw_hours)
    except ValidationError as e:
        api_response(code=e.code, field=e.field_name)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    EquipCostError (base)
    |
    +-- ValidationError
    |   +-- InvalidNumberError
    |   +-- FloatNotAllowedError
    |   +-- NegativeValueError
    |   +-- OutOfRangeError
    |   +-- UnknownAllocationPolicyError
    |
    +-- ConfigurationError
        +-- InvalidDecimalPolicyError
        +-- ConfigFileError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_NUMBER              | Value is not a finite decimal
                | FLOAT_NOT_ALLOWED           | Native float passed for a decimal field
                | NEGATIVE_VALUE              | Negative value where domain forbids it
                | OUT_OF_RANGE                | Value outside [minimum, maximum]
                | UNKNOWN_ALLOCATION_POLICY   | Policy tag is not a known policy
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_DECIMAL_POLICY      | Precision too low / unknown rounding
                | CONFIG_FILE_ERROR           | Settings file unreadable or malformed
"""

from typing import Any


class EquipCostError(Exception):
    """
    Base exception for all equipment cost errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "EQUIPCOST_ERROR"


# Validation exceptions


class ValidationError(EquipCostError):
    """Malformed input at the engine boundary, naming the offending field."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field_name: str, value: Any, reason: str | None = None):
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Invalid value for {field_name}: {value!r}"
            + (f" ({reason})" if reason else "")
        )


class InvalidNumberError(ValidationError):
    """Value cannot be parsed as a finite decimal."""

    code: str = "INVALID_NUMBER"

    def __init__(self, field_name: str, value: Any):
        super().__init__(field_name, value, "not a finite decimal number")


class FloatNotAllowedError(ValidationError):
    """
    Native float passed where a decimal is required.

    Floats cannot represent most decimal fractions exactly, so they are
    refused rather than converted. Pass a string such as ``"0.10"`` instead.
    """

    code: str = "FLOAT_NOT_ALLOWED"

    def __init__(self, field_name: str, value: Any):
        super().__init__(
            field_name, value, "floats are not accepted, pass a decimal string"
        )


class NegativeValueError(ValidationError):
    """Negative value where the domain requires zero or more."""

    code: str = "NEGATIVE_VALUE"

    def __init__(self, field_name: str, value: Any):
        super().__init__(field_name, value, "must not be negative")


class OutOfRangeError(ValidationError):
    """Value falls outside an inclusive range."""

    code: str = "OUT_OF_RANGE"

    def __init__(self, field_name: str, value: Any, minimum: Any, maximum: Any):
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            field_name, value, f"must be between {minimum} and {maximum}"
        )


class UnknownAllocationPolicyError(ValidationError):
    """Allocation policy tag does not name a known policy."""

    code: str = "UNKNOWN_ALLOCATION_POLICY"

    def __init__(self, value: Any):
        super().__init__("allocation_policy", value, "unknown allocation policy")


# Configuration exceptions


class ConfigurationError(EquipCostError):
    """Base exception for engine settings errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidDecimalPolicyError(ConfigurationError):
    """Decimal precision or rounding mode is not acceptable."""

    code: str = "INVALID_DECIMAL_POLICY"

    def __init__(self, precision: Any, rounding: Any, reason: str):
        self.precision = precision
        self.rounding = rounding
        super().__init__(
            f"Invalid decimal policy (precision={precision!r}, "
            f"rounding={rounding!r}): {reason}"
        )


class ConfigFileError(ConfigurationError):
    """Settings file is missing, unreadable or structurally malformed."""

    code: str = "CONFIG_FILE_ERROR"

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot load engine settings from {path}: {reason}")
