"""Stooq daily price feed async client.

Fetches the CSV export for a symbol with retry, and parses it into bars.
"""

import asyncio
import logging
from typing import Optional

import httpx

from stocksignal.analysis.models import Bar
from stocksignal.config import Config
from stocksignal.data.parser import parse_stooq_csv
from stocksignal.errors import EmptySeriesError

logger = logging.getLogger("stocksignal.stooq")

# Stooq CSV downloads are requested with a browser-like User-Agent.
_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}

AVAILABLE_SYMBOLS: dict[str, str] = {
    "ale": "Allegro.eu S.A. (Warsaw Stock Exchange)",
    "cdr": "CD Projekt S.A. (Warsaw Stock Exchange)",
    "ndq": "NASDAQ Composite (NASDAQ)",
}

# Index symbols are addressed with a caret on Stooq.
SYMBOL_ALIASES: dict[str, str] = {
    "ndq": "^ndq",
}


def resolve_symbol(symbol: str) -> str:
    """Map a catalog symbol to the identifier Stooq expects."""
    key = symbol.strip().lower()
    return SYMBOL_ALIASES.get(key, key)


class StooqClient:
    """Async client for the Stooq CSV download endpoint."""

    def __init__(self, config: Config, retry_base_delay: float = _RETRY_BASE_DELAY) -> None:
        self._config = config
        self._base_url = config.stooq_base_url
        self._retry_base_delay = retry_base_delay
        self._headers = {
            "User-Agent": _USER_AGENT,
            "Accept": "text/csv,application/csv",
        }

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _get_with_retry(self, url: str, params: dict) -> httpx.Response:
        """GET with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504) and rate-limits
        (429).  Non-retryable errors are raised immediately.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            delay = self._retry_base_delay * (2 ** attempt)
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(
                        url,
                        headers=self._headers,
                        params=params,
                        timeout=self._config.http_timeout,
                    )

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    logger.warning(
                        "Stooq GET %s returned %d — retry %d/%d in %.1fs",
                        url, resp.status_code, attempt + 1, _MAX_RETRIES, delay,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    await asyncio.sleep(delay)
                    continue

                resp.raise_for_status()
                return resp

            except httpx.TransportError as exc:
                logger.warning(
                    "Stooq GET %s transport error (%s) — retry %d/%d in %.1fs",
                    url, exc, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        # All retries exhausted: raise the last error
        raise last_exc  # type: ignore[misc]

    # ── Price data ───────────────────────────────────────────────────────

    async def fetch_csv(self, symbol: str, interval: Optional[str] = None) -> str:
        """Download the raw CSV export for *symbol*.

        Args:
            symbol: Catalog symbol, e.g. ``"ale"`` or ``"ndq"``.
            interval: ``"d"``, ``"w"`` or ``"m"``; defaults to the configured
                interval.
        """
        params = {
            "s": resolve_symbol(symbol),
            "i": interval or self._config.price_interval,
        }
        resp = await self._get_with_retry(f"{self._base_url}/q/d/l/", params)
        return resp.text

    async def fetch_bars(self, symbol: str, interval: Optional[str] = None) -> list[Bar]:
        """Download and parse bars for *symbol*, oldest first.

        Raises ``EmptySeriesError`` if the response holds no valid bars.
        """
        text = await self.fetch_csv(symbol, interval)
        bars = parse_stooq_csv(text)
        if not bars:
            raise EmptySeriesError(f"No data received for {symbol}")
        logger.info("Fetched %d bars for %s", len(bars), symbol)
        return bars
