"""
equipcost_config -- single public entrypoint for engine settings.

Responsibility:
    Provides the way to obtain engine settings at runtime through
    ``get_engine_settings()``: decimal precision and rounding, the
    monthly reserve percentage and currency display defaults.  Returns a
    frozen ``EngineSettings``.

Architecture position:
    Configuration -- YAML-driven settings, validated at load time.
    This package sits above ``equipcost_kernel`` and ``equipcost_engines``;
    neither of them imports from ``equipcost_config``.  Engines receive
    the bound ``DecimalArithmetic`` from ``EngineSettings.arithmetic()``.

Invariants enforced:
    - Health-score weights and benchmarks are NOT configurable; they are
      constants in ``equipcost_engines.health``.
    - Deterministic checksum: equivalent settings always produce the same
      ``EngineSettings.checksum``.

Failure modes:
    - ``ConfigFileError`` -- settings file missing, unreadable, not valid
      YAML, or structurally malformed.
    - ``InvalidDecimalPolicyError`` -- precision below 28 or an unknown
      rounding mode.

Audit relevance:
    Every successful ``get_engine_settings()`` call emits an
    ``EQUIPCOST_CONFIG_TRACE`` log entry with the source path, version,
    checksum and decimal policy.
"""

from __future__ import annotations

import logging
from pathlib import Path

from equipcost_config.loader import load_yaml_file, parse_settings
from equipcost_config.schema import EngineSettings
from equipcost_kernel.domain.values import decimal_text

_logger = logging.getLogger("equipcost.config")

# Default settings file shipped with the package
_DEFAULT_SETTINGS_FILE = Path(__file__).parent / "sets" / "default.yaml"


def get_engine_settings(config_path: Path | str | None = None) -> EngineSettings:
    """Load and validate engine settings.

    Args:
        config_path: Override path to a settings YAML file.
            Defaults to equipcost_config/sets/default.yaml.

    Returns:
        EngineSettings -- frozen, validated, with a source checksum.

    Raises:
        ConfigFileError: If the file cannot be loaded or is malformed.
        InvalidDecimalPolicyError: If the decimal section is invalid.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_SETTINGS_FILE
    settings = parse_settings(load_yaml_file(path), source=str(path))

    _logger.info(
        "EQUIPCOST_CONFIG_TRACE",
        extra={
            "trace_type": "EQUIPCOST_CONFIG_TRACE",
            "config_path": str(path),
            "config_version": settings.version,
            "checksum": settings.checksum,
            "decimal_precision": settings.decimal_policy.precision,
            "decimal_rounding": settings.decimal_policy.rounding,
            "reserve_percentage": decimal_text(settings.reserve_percentage),
            "default_currency": settings.default_currency,
        },
    )
    return settings


__all__ = ["EngineSettings", "get_engine_settings"]
