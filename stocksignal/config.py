"""StockSignal — application configuration.

Loads .env variables into a typed config object.
Validates values on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

_VALID_INTERVALS = ("d", "w", "m")


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    stooq_base_url: str
    default_symbols: tuple[str, ...]
    price_interval: str  # "d" daily, "w" weekly, "m" monthly
    sr_lookback: int
    http_timeout: float
    log_level: str


def _parse_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _parse_float(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` naming the offending variable when a value is
    malformed.
    """
    load_dotenv(dotenv_path=env_path)

    interval = os.environ.get("PRICE_INTERVAL", "d").lower()
    if interval not in _VALID_INTERVALS:
        raise ValueError(
            f"PRICE_INTERVAL must be one of {', '.join(_VALID_INTERVALS)}, "
            f"got {interval!r}"
        )

    symbols = tuple(
        s.strip().lower()
        for s in os.environ.get("DEFAULT_SYMBOLS", "ale,cdr,ndq").split(",")
        if s.strip()
    )
    if not symbols:
        raise ValueError("DEFAULT_SYMBOLS must name at least one symbol")

    return Config(
        stooq_base_url=os.environ.get("STOOQ_BASE_URL", "https://stooq.com").rstrip("/"),
        default_symbols=symbols,
        price_interval=interval,
        sr_lookback=_parse_int("SR_LOOKBACK", "30"),
        http_timeout=_parse_float("HTTP_TIMEOUT", "30.0"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
