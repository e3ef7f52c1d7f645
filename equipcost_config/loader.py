"""
Settings Loader (``equipcost_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a frozen
``EngineSettings``.  Callers should go through
``equipcost_config.get_engine_settings()`` rather than calling this
module directly.

Invariants enforced
-------------------
* Missing sections fall back to the documented defaults.
* Present-but-malformed values raise ``ConfigurationError`` subclasses;
  nothing is silently coerced from a wrong type.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed data for identity and change detection.

Failure modes
-------------
* Missing or unreadable file  -> ``ConfigFileError``.
* Malformed YAML or a non-mapping document  -> ``ConfigFileError``.
* Bad precision / rounding  -> ``InvalidDecimalPolicyError``.
* Bad reserve percentage or currency table  -> ``ConfigFileError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from equipcost_config.schema import DEFAULT_CURRENCY, EngineSettings
from equipcost_engines.costs import DEFAULT_RESERVE_PERCENTAGE
from equipcost_kernel.domain.values import MIN_PRECISION, DecimalPolicy, to_percentage
from equipcost_kernel.exceptions import ConfigFileError, ValidationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (empty if the YAML document is empty).
    Raises:
        ConfigFileError: if the file cannot be read, is not valid YAML,
            or its top level is not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigFileError(str(path), exc.strerror or str(exc)) from exc
    except yaml.YAMLError as exc:
        raise ConfigFileError(str(path), f"invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(str(path), "top level must be a mapping")
    return data


def _section(data: dict[str, Any], name: str, source: str) -> dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigFileError(source, f"section {name!r} must be a mapping")
    return value


def parse_decimal_policy(data: dict[str, Any]) -> DecimalPolicy:
    """Parse the ``decimal`` section; ``DecimalPolicy`` validates the values."""
    return DecimalPolicy(
        precision=data.get("precision", MIN_PRECISION),
        rounding=data.get("rounding", ROUND_HALF_UP),
    )


def parse_reserve_percentage(data: dict[str, Any], source: str) -> Decimal:
    raw = data.get("percentage", DEFAULT_RESERVE_PERCENTAGE)
    # YAML reads 15 as int and "15" as str; both are accepted, floats are not
    try:
        return to_percentage(raw, "reserve.percentage")
    except ValidationError as exc:
        raise ConfigFileError(source, str(exc)) from exc


def parse_display(data: dict[str, Any], source: str) -> tuple[str, MappingProxyType]:
    currency = data.get("default_currency", DEFAULT_CURRENCY)
    if not isinstance(currency, str) or not currency.strip():
        raise ConfigFileError(source, "display.default_currency must be a non-empty string")

    symbols = data.get("currency_symbols") or {}
    if not isinstance(symbols, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in symbols.items()
    ):
        raise ConfigFileError(source, "display.currency_symbols must map codes to strings")
    overrides = MappingProxyType({k.strip().upper(): v for k, v in symbols.items()})
    return currency.strip().upper(), overrides


def parse_settings(data: dict[str, Any], source: str = "<memory>") -> EngineSettings:
    """
    Parse a settings mapping into ``EngineSettings``.

    Postconditions:
        - ``checksum`` is the SHA-256 of the canonical parsed settings,
          so equivalent files produce the same checksum.
    """
    policy = parse_decimal_policy(_section(data, "decimal", source))
    reserve = parse_reserve_percentage(_section(data, "reserve", source), source)
    currency, symbols = parse_display(_section(data, "display", source), source)
    version = data.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ConfigFileError(source, "version must be an integer")

    settings = EngineSettings(
        decimal_policy=policy,
        reserve_percentage=reserve,
        default_currency=currency,
        currency_symbols=symbols,
        version=version,
    )
    return replace(settings, checksum=compute_checksum(settings.to_dict()))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Returns a hex-encoded SHA-256 hash string.
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
