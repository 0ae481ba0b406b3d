"""
Configuration loader module.

Loads application configuration from YAML files and environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment variables that override the configured defaults
ENV_FX_RATE = "IMPORTCOST_FX_RATE"
ENV_ICMS_RATE = "IMPORTCOST_ICMS_RATE"


@dataclass
class PathsConfig:
    """File path configuration."""

    output_dir: str = "data/output"


@dataclass
class GoogleFXConfig:
    """Google Finance FX configuration."""

    base_currency: str = "CNY"
    quote_currency: str = "BRL"
    pair_symbol: str = "CNY-BRL"
    timeout_seconds: int = 10
    min_rate: float = 0.3
    max_rate: float = 2.0


@dataclass
class FXConfig:
    """FX conversion configuration."""

    mode: str = "manual"  # "google" or "manual"
    default_rate: float = 0.0  # 0 = unknown, calculator runs in degraded mode
    google: GoogleFXConfig = field(default_factory=GoogleFXConfig)


@dataclass
class TaxConfig:
    """Tax configuration."""

    default_icms_rate: float = 18.0


@dataclass
class DisplayConfig:
    """Currency display configuration."""

    source_symbol: str = "¥"
    target_symbol: str = "R$"
    thousands_separator: str = "."
    decimal_separator: str = ","


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"
    file: str | None = None


@dataclass
class AppConfig:
    """
    Main application configuration.

    Aggregates all configuration sections into a single object.
    """

    paths: PathsConfig = field(default_factory=PathsConfig)
    fx: FXConfig = field(default_factory=FXConfig)
    tax: TaxConfig = field(default_factory=TaxConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_env(env_file: Path = Path(".env")) -> None:
    """
    Load environment variables from .env file.

    Args:
        env_file: Path to .env file.
    """
    if env_file.exists():
        load_dotenv(env_file)
        logger.debug(f"Loaded environment from: {env_file}")
    else:
        logger.debug(f"No .env file found at: {env_file}")


def load_config(config_file: Path = Path("config/config.yaml")) -> AppConfig:
    """
    Load application configuration from YAML file.

    Environment overrides (IMPORTCOST_FX_RATE, IMPORTCOST_ICMS_RATE) are
    applied on top of the file, or on top of the defaults when the file
    is missing.

    Args:
        config_file: Path to configuration YAML file.

    Returns:
        AppConfig: Loaded configuration object.

    Raises:
        yaml.YAMLError: If config file is invalid.
    """
    config_file = Path(config_file)
    if not config_file.exists():
        logger.warning(f"Config file not found: {config_file}. Using defaults.")
        return _apply_env_overrides(AppConfig())

    with open(config_file, encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        return _apply_env_overrides(AppConfig())

    config = _parse_config(raw_config)
    logger.info(f"Loaded configuration from: {config_file}")
    return _apply_env_overrides(config)


def _parse_config(raw: dict[str, Any]) -> AppConfig:
    """
    Parse raw YAML dict into AppConfig dataclass.

    Args:
        raw: Raw dictionary from YAML file.

    Returns:
        AppConfig: Parsed configuration object.
    """
    paths_raw = raw.get("paths", {}) or {}
    paths = PathsConfig(
        output_dir=paths_raw.get("output_dir", "data/output"),
    )

    fx_raw = raw.get("fx", {}) or {}
    google_raw = fx_raw.get("google", {}) or {}
    google_config = GoogleFXConfig(
        base_currency=google_raw.get("base_currency", "CNY"),
        quote_currency=google_raw.get("quote_currency", "BRL"),
        pair_symbol=google_raw.get("pair_symbol", "CNY-BRL"),
        timeout_seconds=int(google_raw.get("timeout_seconds", 10)),
        min_rate=float(google_raw.get("min_rate", 0.3)),
        max_rate=float(google_raw.get("max_rate", 2.0)),
    )
    fx = FXConfig(
        mode=fx_raw.get("mode", "manual"),
        default_rate=float(fx_raw.get("default_rate", 0.0) or 0.0),
        google=google_config,
    )

    tax_raw = raw.get("tax", {}) or {}
    tax = TaxConfig(
        default_icms_rate=float(tax_raw.get("default_icms_rate", 18.0)),
    )

    display_raw = raw.get("display", {}) or {}
    display = DisplayConfig(
        source_symbol=display_raw.get("source_symbol", "¥"),
        target_symbol=display_raw.get("target_symbol", "R$"),
        thousands_separator=display_raw.get("thousands_separator", "."),
        decimal_separator=display_raw.get("decimal_separator", ","),
    )

    logging_raw = raw.get("logging", {}) or {}
    logging_config = LoggingConfig(
        level=logging_raw.get("level", "INFO"),
        format=logging_raw.get("format", "text"),
        file=logging_raw.get("file"),
    )

    return AppConfig(
        paths=paths,
        fx=fx,
        tax=tax,
        display=display,
        logging=logging_config,
    )


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply IMPORTCOST_* environment overrides to a loaded config."""
    fx_rate = get_env_var(ENV_FX_RATE)
    if fx_rate:
        try:
            config.fx.default_rate = float(fx_rate)
        except ValueError:
            logger.warning(f"Ignoring invalid {ENV_FX_RATE}={fx_rate!r}")

    icms_rate = get_env_var(ENV_ICMS_RATE)
    if icms_rate:
        try:
            config.tax.default_icms_rate = float(icms_rate)
        except ValueError:
            logger.warning(f"Ignoring invalid {ENV_ICMS_RATE}={icms_rate!r}")

    return config


def get_env_var(key: str, default: str | None = None) -> str | None:
    """
    Get an environment variable with optional default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        Environment variable value or default.
    """
    return os.environ.get(key, default)
