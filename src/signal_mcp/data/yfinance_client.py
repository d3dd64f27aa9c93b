"""Async yfinance client with bounded concurrency and retry logic."""

import asyncio
import logging
import os
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, TypeVar

import pandas as pd
import pytz
import yfinance as yf
from requests.exceptions import HTTPError

from signal_mcp.utils.validators import ScoreRequest

logger = logging.getLogger(__name__)

# Bounded concurrency for yfinance calls
_max_workers = int(os.environ.get("YF_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)
_fetch_semaphore = asyncio.Semaphore(_max_workers)

# Retry configuration
_max_retries = int(os.environ.get("YF_MAX_RETRIES", "3"))
_base_delay = float(os.environ.get("YF_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("YF_MAX_DELAY", "30.0"))  # seconds

shutdown_event = asyncio.Event()

T = TypeVar("T")

# Ticker attributes the scorer reads; anything else is rejected
TICKER_FIELDS = frozenset({
    "news",
    "recommendations",
    "upgrades_downgrades",
    "analyst_price_targets",
    "earnings_history",
    "insider_transactions",
})


class ServerShuttingDownError(Exception):
    """Raised when server is shutting down."""


class YFinanceRetryError(Exception):
    """Raised when yfinance fails after all retries."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


def _is_retryable_error(error: Exception) -> bool:
    """Transient errors: rate limits, 5xx, and connection/timeouts."""
    if isinstance(error, HTTPError) and error.response is not None:
        status_code = error.response.status_code
        return status_code == 429 or 500 <= status_code < 600

    error_str = str(error).lower()
    retryable_patterns = (
        "rate limit",
        "too many requests",
        "connection",
        "timeout",
        "temporary",
    )
    return any(pattern in error_str for pattern in retryable_patterns)


def _calculate_backoff(attempt: int) -> float:
    """Exponential backoff with +-25% jitter, capped at the max delay."""
    delay = _base_delay * (2**attempt)
    delay += delay * 0.25 * (2 * random.random() - 1)
    return min(delay, _max_delay)


async def _retry_with_backoff(
    operation_name: str,
    sync_func: Callable[[], T],
    max_retries: int = _max_retries,
) -> T:
    """
    Run a blocking yfinance call in the executor, retrying transient failures.

    Raises:
        YFinanceRetryError: If all retries exhausted
        ServerShuttingDownError: If server is shutting down
    """
    last_error: Exception | None = None

    for attempt in range(max_retries + 1):
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")

        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(_executor, sync_func)
        except Exception as e:
            last_error = e
            if not _is_retryable_error(e):
                raise

            if attempt >= max_retries:
                logger.warning(
                    f"{operation_name}: Failed after {attempt + 1} attempts. Last error: {e}"
                )
                raise YFinanceRetryError(
                    f"Failed after {attempt + 1} attempts: {e}",
                    last_error=last_error,
                ) from e

            delay = _calculate_backoff(attempt)
            logger.info(
                f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    raise YFinanceRetryError(
        f"Failed after {max_retries + 1} attempts",
        last_error=last_error,
    )


async def fetch_history(request: ScoreRequest) -> pd.DataFrame:
    """
    Fetch daily price history.

    Raises:
        ValueError: If no data is returned for the symbol
        YFinanceRetryError: If all retries exhausted for retryable errors
    """

    def _fetch() -> pd.DataFrame:
        df = yf.download(**request.to_yf_kwargs())
        if df is None or df.empty:
            raise ValueError(f"No data returned for {request.symbol}")
        return df

    async with _fetch_semaphore:
        return await _retry_with_backoff(f"fetch_history({request.symbol})", _fetch)


async def fetch_info(symbol: str) -> dict[str, Any]:
    """
    Fetch quote and fundamentals info dict.

    Raises:
        ValueError: If symbol is invalid
        YFinanceRetryError: If all retries exhausted for retryable errors
    """
    normalized_symbol = symbol.upper().strip()

    def _fetch() -> dict[str, Any]:
        info = yf.Ticker(normalized_symbol).info
        if not info:
            raise ValueError(f"Invalid symbol: {symbol}")
        return info

    async with _fetch_semaphore:
        return await _retry_with_backoff(f"fetch_info({normalized_symbol})", _fetch)


async def fetch_ticker_field(symbol: str, field: str) -> Any:
    """
    Read one lazily-fetched Ticker attribute (news, recommendations, ...).

    Raises:
        ValueError: If field is not one the scorer consumes
        YFinanceRetryError: If all retries exhausted for retryable errors
    """
    if field not in TICKER_FIELDS:
        raise ValueError(f"Unsupported ticker field '{field}'")

    normalized_symbol = symbol.upper().strip()

    def _fetch() -> Any:
        return getattr(yf.Ticker(normalized_symbol), field)

    async with _fetch_semaphore:
        return await _retry_with_backoff(f"fetch_{field}({normalized_symbol})", _fetch)


def get_market_state(tz: str = "America/New_York") -> dict[str, str]:
    """
    Determine market state. Clock-based only (no holiday calendar).

    Args:
        tz: Timezone (default: America/New_York)

    Returns:
        Dict with state, label, method, and checked_at timestamp
    """
    eastern = pytz.timezone(tz)
    now = datetime.now(eastern)

    if now.weekday() >= 5:
        state, label = "closed", "Weekend"
    else:
        time_minutes = now.hour * 60 + now.minute
        if time_minutes < 4 * 60:
            state, label = "closed", "Closed"
        elif time_minutes < 9 * 60 + 30:
            state, label = "pre_market", "Pre-Market"
        elif time_minutes < 16 * 60:
            state, label = "regular", "Open"
        elif time_minutes < 20 * 60:
            state, label = "after_hours", "After-Hours"
        else:
            state, label = "closed", "Closed"

    return {
        "state": state,
        "label": label,
        "method": "clock_only_no_holidays",
        "checked_at": now.isoformat(),
    }


async def shutdown_executor() -> None:
    """Cleanup on server shutdown."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
