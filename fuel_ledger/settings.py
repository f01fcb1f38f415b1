"""
Fuel Ledger Settings
Centralized configuration from environment variables

Values come from the environment (a local .env file is loaded first).
The fuel tables themselves live in YAML; these settings only say where to
find them, how strictly to match names, and how to log.
"""

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .config import MatchingConfig

# Load environment variables
load_dotenv()


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable."""
    return os.getenv(key, default)


def _get_env_optional_int(key: str) -> Optional[int]:
    """Get integer environment variable, None when unset."""
    value = os.getenv(key)
    return int(value) if value not in (None, "") else None


def _get_env_optional_float(key: str) -> Optional[float]:
    """Get float environment variable, None when unset."""
    value = os.getenv(key)
    return float(value) if value not in (None, "") else None


# =============================================================================
# MATCHING SETTINGS
# =============================================================================
@dataclass
class MatchingSettings:
    """
    Destination / truck-suffix matching thresholds.

    Each value is None unless its env var is set; unset values leave the
    YAML `matching:` section (or the built-in default) in charge.
    """

    fuzzy_threshold: Optional[float] = field(
        default_factory=lambda: _get_env_optional_float("FUZZY_MATCH_THRESHOLD")
    )
    suggestion_threshold: Optional[float] = field(
        default_factory=lambda: _get_env_optional_float("SUGGESTION_THRESHOLD")
    )
    max_suggestions: Optional[int] = field(
        default_factory=lambda: _get_env_optional_int("MAX_ROUTE_SUGGESTIONS")
    )
    min_substring_length: Optional[int] = field(
        default_factory=lambda: _get_env_optional_int("MIN_SUBSTRING_LENGTH")
    )
    default_total_liters: Optional[float] = field(
        default_factory=lambda: _get_env_optional_float("DEFAULT_TOTAL_LITERS")
    )
    default_extra_liters: Optional[float] = field(
        default_factory=lambda: _get_env_optional_float("DEFAULT_EXTRA_LITERS")
    )

    def overrides(self) -> Dict[str, Any]:
        """Only the values that were explicitly set"""
        return {key: value for key, value in asdict(self).items() if value is not None}

    def to_config(self) -> MatchingConfig:
        """Set values on top of the built-in defaults (ignores any YAML)"""
        return MatchingConfig(**self.overrides())


# =============================================================================
# LOGGING SETTINGS
# =============================================================================
@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO").upper())
    format: str = field(default_factory=lambda: _get_env("LOG_FORMAT", "console").lower())
    file: Optional[str] = field(default_factory=lambda: _get_env("LOG_FILE") or None)


# =============================================================================
# MAIN SETTINGS CLASS
# =============================================================================
@dataclass
class Settings:
    """Main settings container."""

    # YAML file with routes, batches and allocations; None = packaged default
    config_path: Optional[str] = field(
        default_factory=lambda: _get_env("FUEL_CONFIG_PATH") or None
    )
    matching: MatchingSettings = field(default_factory=MatchingSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()


__all__ = [
    "MatchingSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
