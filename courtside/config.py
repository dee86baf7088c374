"""
Centralized configuration with environment variable overrides.

Equipment prices, money precision and Backend connection settings are
configurable here. Nothing is hardcoded in pricing or transport logic.
"""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

from courtside.logging_context import AttemptIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] [%(attempt_id)s] %(levelname)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_decimal(env_var: str, default: str) -> Decimal:
    """Parse a decimal amount from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        raise ValueError(
            f"Invalid decimal for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class PricingConfig:
    """Equipment add-on prices and money formatting."""

    paddle_unit_price: Decimal = _safe_decimal("PADDLE_UNIT_PRICE", "5")
    ball_set_price: Decimal = _safe_decimal("BALL_SET_PRICE", "12")
    currency: str = os.getenv("CURRENCY", "RM")
    money_places: int = _safe_int("MONEY_PLACES", "2")


@dataclass(frozen=True)
class BackendConfig:
    """Booking Backend connection settings."""

    base_url: str = os.getenv("BACKEND_BASE_URL", "http://localhost:8081/api")
    api_token: str = os.getenv("BACKEND_API_TOKEN", "")
    connect_timeout_sec: float = _safe_float("BACKEND_CONNECT_TIMEOUT", "10.0")
    read_timeout_sec: float = _safe_float("BACKEND_READ_TIMEOUT", "30.0")
    session_window_days: int = _safe_int("SESSION_WINDOW_DAYS", "365")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    pricing: PricingConfig = field(default_factory=PricingConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "courtside")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.pricing.paddle_unit_price < 0:
        raise ValueError(
            f"PADDLE_UNIT_PRICE must be >= 0, got {config.pricing.paddle_unit_price}"
        )
    if config.pricing.ball_set_price < 0:
        raise ValueError(
            f"BALL_SET_PRICE must be >= 0, got {config.pricing.ball_set_price}"
        )
    if not 0 <= config.pricing.money_places <= 4:
        raise ValueError(
            f"MONEY_PLACES must be between 0 and 4, got {config.pricing.money_places}"
        )
    if not config.backend.base_url:
        raise ValueError("BACKEND_BASE_URL must not be empty")

    for name, value in [
        ("BACKEND_CONNECT_TIMEOUT", config.backend.connect_timeout_sec),
        ("BACKEND_READ_TIMEOUT", config.backend.read_timeout_sec),
    ]:
        if value <= 0:
            raise ValueError(f"{name} must be > 0, got {value}")

    if config.backend.session_window_days < 1:
        raise ValueError(
            f"SESSION_WINDOW_DAYS must be >= 1, got {config.backend.session_window_days}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Records from third-party loggers need attempt_id too
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, AttemptIdFilter) for f in handler.filters):
            handler.addFilter(AttemptIdFilter())
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
