"""
Booking engine settings, read once from the environment (and `.env`).

Fee percentages, tier lengths, the booking horizon and default operating
hours live here so resolver and checkout code never hardcodes them.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s %(listing_id)s] %(levelname)s: %(message)s"


def _parse_env(env_var: str, default: str, cast: Callable[[str], T], kind: str) -> T:
    raw = os.getenv(env_var, default)
    try:
        return cast(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid {kind} for {env_var}: {raw!r}") from None


def _safe_int(env_var: str, default: str) -> int:
    return _parse_env(env_var, default, int, "integer")


def _safe_float(env_var: str, default: str) -> float:
    return _parse_env(env_var, default, float, "float")


@dataclass(frozen=True)
class PricingConfig:
    """Platform commission rates and billing tier lengths."""

    renter_fee_percent: float = _safe_float("RENTAL_RENTER_FEE_PERCENT", "12.9")
    host_fee_percent: float = _safe_float("RENTAL_HOST_FEE_PERCENT", "12.9")
    days_per_month: int = _safe_int("DAYS_PER_MONTH", "30")
    days_per_week: int = _safe_int("DAYS_PER_WEEK", "7")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "$")


@dataclass(frozen=True)
class CalendarConfig:
    """Calendar horizon and hourly defaults."""

    booking_horizon_days: int = _safe_int("BOOKING_HORIZON_DAYS", "365")
    default_open_hour: int = _safe_int("DEFAULT_OPEN_HOUR", "6")
    default_close_hour: int = _safe_int("DEFAULT_CLOSE_HOUR", "22")
    slot_label_prefix: str = os.getenv("SLOT_LABEL_PREFIX", "Spot")


@dataclass(frozen=True)
class CheckoutConfig:
    """Checkout submission settings."""

    checkout_base_url: str = os.getenv("CHECKOUT_BASE_URL", "https://checkout.example.com/session")
    max_message_length: int = _safe_int("MAX_MESSAGE_LENGTH", "2000")


@dataclass(frozen=True)
class AppConfig:
    """Everything the engine reads from the environment."""

    pricing: PricingConfig = field(default_factory=PricingConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    checkout: CheckoutConfig = field(default_factory=CheckoutConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Range-check settings; raise ValueError naming the offending variable."""
    for rate_name, rate_value in [
        ("RENTAL_RENTER_FEE_PERCENT", config.pricing.renter_fee_percent),
        ("RENTAL_HOST_FEE_PERCENT", config.pricing.host_fee_percent),
    ]:
        if not 0.0 <= rate_value < 100.0:
            raise ValueError(f"{rate_name} must be between 0 and 100, got {rate_value}")

    if config.pricing.days_per_week < 1:
        raise ValueError(
            f"DAYS_PER_WEEK must be >= 1, got {config.pricing.days_per_week}"
        )
    if config.pricing.days_per_month <= config.pricing.days_per_week:
        raise ValueError(
            "DAYS_PER_MONTH must be greater than DAYS_PER_WEEK, "
            f"got {config.pricing.days_per_month}"
        )
    if config.calendar.booking_horizon_days < 1:
        raise ValueError(
            f"BOOKING_HORIZON_DAYS must be >= 1, got {config.calendar.booking_horizon_days}"
        )
    if not 0 <= config.calendar.default_open_hour < config.calendar.default_close_hour <= 24:
        raise ValueError(
            "DEFAULT_OPEN_HOUR/DEFAULT_CLOSE_HOUR must satisfy 0 <= open < close <= 24, "
            f"got {config.calendar.default_open_hour}-{config.calendar.default_close_hour}"
        )
    if config.checkout.max_message_length < 1:
        raise ValueError(
            f"MAX_MESSAGE_LENGTH must be >= 1, got {config.checkout.max_message_length}"
        )


def _log_handler() -> logging.Handler:
    """Stream handler whose lines show the checkout session, when one is bound."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        defaults={"session_id": "-", "listing_id": "-"},
    ))
    return handler


def load_config() -> AppConfig:
    """Validate the environment-derived config and set up root logging."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[_log_handler()],
    )
    logger.info(
        "Configuration loaded (renter fee %.1f%%, horizon %d days)",
        config.pricing.renter_fee_percent,
        config.calendar.booking_horizon_days,
    )
    return config


# Loaded on first import
settings = load_config()
