"""
Settings Loader (``fabric_config.loader``).

Responsibility
--------------
Read a YAML settings file into the frozen ``Settings`` dataclass.  Every key
is optional; a missing file yields the defaults.

Failure modes
-------------
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* A value of the wrong shape (negative VAT, unknown valuation method,
  unknown log level, non-mapping document)  -> ``ConfigurationError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from fabric_engines.valuation import ValuationMethod
from fabric_kernel.exceptions import ConfigurationError
from fabric_kernel.logging_config import get_logger

logger = get_logger("config.loader")

CONFIG_ENV_VAR = "FABRIC_ERP_CONFIG"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Runtime settings.  ``access_secret`` is read by the UI gate only."""

    database_url: str = "sqlite:///fabric_erp.db"
    default_vat_rate: Decimal = Decimal("24")
    valuation_method: ValuationMethod = ValuationMethod.FABRIC_AVERAGE
    log_level: str = "INFO"
    access_secret: str | None = None
    currency_symbol: str = "€"

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML file and return its top-level mapping.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), type(data).__name__, "expected a mapping")
    return data


def parse_settings(data: dict[str, Any]) -> Settings:
    """Build Settings from a parsed document, validating each present key."""
    defaults = Settings()

    vat = data.get("default_vat_rate", defaults.default_vat_rate)
    try:
        vat = Decimal(str(vat))
    except InvalidOperation:
        raise ConfigurationError("default_vat_rate", vat, "not a number") from None
    if not vat.is_finite() or vat < 0:
        raise ConfigurationError("default_vat_rate", vat, "must be a non-negative number")

    method = data.get("valuation_method", defaults.valuation_method.value)
    try:
        method = ValuationMethod(method)
    except ValueError:
        allowed = ", ".join(m.value for m in ValuationMethod)
        raise ConfigurationError("valuation_method", method, f"expected one of {allowed}") from None

    level = str(data.get("log_level", defaults.log_level)).upper()
    if level not in _LOG_LEVELS:
        raise ConfigurationError("log_level", level, "unknown log level")

    database_url = data.get("database_url", defaults.database_url)
    if not isinstance(database_url, str) or not database_url:
        raise ConfigurationError("database_url", database_url, "must be a non-empty string")

    secret = data.get("access_secret")
    return Settings(
        database_url=database_url,
        default_vat_rate=vat,
        valuation_method=method,
        log_level=level,
        access_secret=None if secret is None else str(secret),
        currency_symbol=str(data.get("currency_symbol", defaults.currency_symbol)),
    )


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load settings from ``path``, else from ``$FABRIC_ERP_CONFIG``.

    Returns the defaults when neither names an existing file.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return Settings()

    path = Path(path)
    if not path.exists():
        logger.info("settings_file_missing", extra={"path": str(path)})
        return Settings()

    settings = parse_settings(load_yaml_file(path))
    logger.info(
        "settings_loaded",
        extra={
            "path": str(path),
            "valuation_method": settings.valuation_method.value,
            "default_vat_rate": settings.default_vat_rate,
        },
    )
    return settings
