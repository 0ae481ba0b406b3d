"""
FX rate provider module.

Retrieves the source → target exchange rate (CNY → BRL by default) from
manual input, Google Finance, or the configured default. A rate of 0 means
"unknown" and puts the calculator in degraded mode.
"""

import logging
import re
from decimal import Decimal
from typing import Optional, Tuple

import requests

from importcost.utils.config_loader import AppConfig

logger = logging.getLogger(__name__)

GOOGLE_FINANCE_URL = "https://www.google.com/finance/quote/{pair}"

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# Candidate patterns, most specific first
RATE_PATTERNS = [
    r'data-last-price="([0-9]+\.?[0-9]*)"',
    r'data-value="([0-9]+\.?[0-9]*)"',
    r'class="YMlKec fxKbKc"[^>]*>([0-9]+\.?[0-9]*)',
    r'class="fxKbKc"[^>]*>([0-9]+\.?[0-9]*)',
    r'([0-9]\.[0-9]{4})',
]


class FXProvider:
    """
    Provider for the source → target exchange rate.

    Supports:
    - Manual rate input
    - Fallback to the configured default rate (0 = unknown)

    Attributes:
        config: Application configuration.
        current_rate: Manually set rate, if any.
        source: Source of the current rate (manual_override/default).
    """

    def __init__(self, config: AppConfig) -> None:
        """
        Initialize the FX provider.

        Args:
            config: Application configuration with FX settings.
        """
        self.config = config
        self.current_rate: Optional[Decimal] = None
        self.source: str = "default"

    def get_default_rate(self) -> Decimal:
        """
        Get the default FX rate from configuration.

        Returns:
            Decimal: Default rate (0 when not configured).
        """
        default_rate = getattr(self.config.fx, "default_rate", 0.0) or 0.0
        return Decimal(str(default_rate))

    def set_manual_rate(self, rate: float) -> None:
        """
        Set a manual FX rate.

        Args:
            rate: Source to target exchange rate.

        Raises:
            ValueError: If rate is invalid (<=0).
        """
        if rate <= 0:
            raise ValueError(f"Invalid FX rate: {rate}. Must be positive.")

        self.current_rate = Decimal(str(rate))
        self.source = "manual_override"
        logger.info(f"Manual FX rate set: {self.current_rate}")

    def clear_manual_rate(self) -> None:
        """Drop the manual rate and fall back to the default."""
        self.current_rate = None
        self.source = "default"

    def get_rate(self) -> Decimal:
        """
        Get the current FX rate.

        Returns:
            Decimal: Manual rate if set, otherwise the default rate.
        """
        if self.current_rate is not None:
            return self.current_rate

        return self.get_default_rate()

    def validate_rate(self, rate: float) -> bool:
        """
        Validate that a rate is within the configured plausibility bounds.

        Args:
            rate: Rate to validate.

        Returns:
            bool: True if rate is plausible.
        """
        return is_plausible_rate(rate, self.config)

    def get_rate_info(self) -> dict:
        """
        Get information about the current rate.

        Returns:
            dict: Rate value, source, and whether it is usable.
        """
        rate = self.get_rate()
        return {
            "rate": float(rate),
            "source": self.source,
            "is_default": self.current_rate is None,
            "available": rate > 0,
        }


def is_plausible_rate(rate: float, config: AppConfig) -> bool:
    """True when a rate lies inside the configured min/max bounds."""
    google = config.fx.google
    return google.min_rate <= rate <= google.max_rate


def fetch_google_fx_rate(config: AppConfig) -> Tuple[Optional[float], str]:
    """
    Fetch live FX rate from Google Finance.

    Args:
        config: Application configuration with google FX settings.

    Returns:
        Tuple of (rate, source):
            - (float, "google") if successful
            - (None, error_message) if failed
    """
    google_config = config.fx.google
    pair_symbol = google_config.pair_symbol
    timeout = google_config.timeout_seconds

    url = GOOGLE_FINANCE_URL.format(pair=pair_symbol)
    logger.info(f"Fetching live FX rate from Google Finance: {url}")

    try:
        response = requests.get(url, headers=REQUEST_HEADERS, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout:
        error_msg = f"Google Finance request timed out after {timeout}s"
        logger.warning(error_msg)
        return None, error_msg
    except requests.exceptions.ConnectionError as e:
        error_msg = f"Connection error fetching Google Finance: {e}"
        logger.warning(error_msg)
        return None, error_msg
    except requests.exceptions.HTTPError as e:
        error_msg = f"HTTP error from Google Finance: {e}"
        logger.warning(error_msg)
        return None, error_msg
    except requests.exceptions.RequestException as e:
        error_msg = f"Unexpected error fetching Google FX rate: {e}"
        logger.warning(error_msg)
        return None, error_msg

    html = response.text
    for pattern in RATE_PATTERNS:
        for match in re.findall(pattern, html):
            try:
                rate = float(match)
            except ValueError:
                continue
            if is_plausible_rate(rate, config):
                logger.info(f"Successfully fetched Google FX rate for {pair_symbol}: {rate}")
                return rate, "google"

    logger.warning("Could not parse FX rate from Google Finance response")
    return None, "Failed to parse rate from HTML"


def get_fx_rate(config: AppConfig, manual_override: Optional[float] = None) -> Tuple[float, str]:
    """
    Get FX rate based on config mode and optional manual override.

    Priority:
    1. manual_override (if provided and positive)
    2. Google Finance (if mode == "google")
    3. default_rate (fallback, 0 when unknown)

    Args:
        config: Application configuration.
        manual_override: Optional manual rate override.

    Returns:
        Tuple of (rate, source) where source is one of:
            - "manual_override"
            - "google"
            - "default" / "default (google failed)"
    """
    default_rate = config.fx.default_rate or 0.0
    mode = config.fx.mode or "manual"

    if manual_override is not None:
        if manual_override <= 0:
            logger.warning(f"Invalid manual override {manual_override}, using default")
            return default_rate, "default"
        logger.info(f"Using manual FX rate override: {manual_override}")
        return manual_override, "manual_override"

    if mode.lower() == "google":
        rate, source = fetch_google_fx_rate(config)
        if rate is not None:
            return rate, source
        logger.warning(f"Google FX fetch failed ({source}), falling back to default rate: {default_rate}")
        return default_rate, "default (google failed)"

    logger.info(f"Using default FX rate: {default_rate}")
    return default_rate, "default"
