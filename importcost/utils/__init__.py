"""
Utility modules.

Common helpers for logging and configuration loading.
"""

from importcost.utils.config_loader import AppConfig, load_config, load_env
from importcost.utils.logging_setup import setup_logging

__all__ = [
    "load_config",
    "load_env",
    "AppConfig",
    "setup_logging",
]
