"""Score a symbol end to end: fetch inputs in parallel, map, score."""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from signal_mcp.data.inputs import (
    candles_from_frame,
    consensus_from_frame,
    earnings_from_frame,
    insider_trades_from_frame,
    macd_state_from_closes,
    metrics_from_info,
    news_from_items,
    price_target_from_dict,
    quote_from_info,
    rating_changes_from_frame,
    smart_money_from_trades,
)
from signal_mcp.data.yfinance_client import (
    ServerShuttingDownError,
    fetch_history,
    fetch_info,
    fetch_ticker_field,
    get_market_state,
)
from signal_mcp.engine import Extras, score
from signal_mcp.utils.normalize import build_signal_snapshot
from signal_mcp.utils.provenance import build_coverage, build_error_response, build_meta
from signal_mcp.utils.validators import ScoreRequest

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 20.0
SOURCE = "yfinance"


async def _run_with_timeout(name: str, coro: Awaitable[Any]) -> tuple[str, Any]:
    """Await one fetch; failures come back as the exception instead of raising."""
    try:
        return name, await asyncio.wait_for(coro, timeout=TIMEOUT_SECONDS)
    except TimeoutError:
        return name, TimeoutError(f"exceeded {TIMEOUT_SECONDS}s")
    except ServerShuttingDownError:
        raise
    except Exception as e:
        return name, e


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    empty = getattr(value, "empty", None)
    if isinstance(empty, bool):
        return empty
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


async def score_symbol(
    symbol: str,
    news_days: int = 7,
    include_smart_money: bool = True,
) -> dict[str, Any]:
    """
    Fetch every scoring input for a symbol and run the signal engine.

    Only the quote is required. Other inputs that fail to load are listed
    in coverage and warnings, and the engine skips their terms.

    Args:
        symbol: Stock ticker symbol
        news_days: News lookback window in days (1-30)
        include_smart_money: Fetch insider transactions and score the smart-money factor

    Returns:
        Dict with result, snapshot, coverage, market_state, warnings and meta
    """
    start_time = perf_counter()

    try:
        request = ScoreRequest(
            symbol=symbol,
            news_days=news_days,
            include_smart_money=include_smart_money,
        )
    except ValueError as e:
        return build_error_response("invalid_request", str(e), symbol=symbol)

    sym = request.symbol
    fetch_specs: list[tuple[str, Awaitable[Any]]] = [
        ("info", fetch_info(sym)),
        ("history", fetch_history(request)),
        ("news", fetch_ticker_field(sym, "news")),
        ("recommendations", fetch_ticker_field(sym, "recommendations")),
        ("upgrades_downgrades", fetch_ticker_field(sym, "upgrades_downgrades")),
        ("analyst_price_targets", fetch_ticker_field(sym, "analyst_price_targets")),
        ("earnings_history", fetch_ticker_field(sym, "earnings_history")),
    ]
    if request.include_smart_money:
        fetch_specs.append(("insider_transactions", fetch_ticker_field(sym, "insider_transactions")))

    try:
        results = await asyncio.gather(
            *[_run_with_timeout(name, coro) for name, coro in fetch_specs]
        )
    except ServerShuttingDownError as e:
        return build_error_response("server_shutting_down", str(e), symbol=sym)

    raw: dict[str, Any] = {}
    failed: set[str] = set()
    coverage: dict[str, dict[str, Any]] = {}
    warnings: list[str] = []
    for name, value in results:
        if isinstance(value, Exception):
            logger.info(f"score_symbol({sym}): {name} unavailable: {value}")
            coverage[name] = build_coverage(SOURCE, False, f"{type(value).__name__}: {value}")
            failed.add(name)
            raw[name] = None
        elif _is_empty(value):
            coverage[name] = build_coverage(SOURCE, False, "empty")
            raw[name] = None
        else:
            coverage[name] = build_coverage(SOURCE, True)
            raw[name] = value

    info_error = next((v for n, v in results if n == "info" and isinstance(v, Exception)), None)
    if isinstance(info_error, ValueError):
        return build_error_response("invalid_symbol", str(info_error), symbol=sym)

    quote = quote_from_info(raw["info"])
    if quote is None:
        return build_error_response(
            "data_unavailable",
            f"No current price available for {sym}",
            symbol=sym,
        )

    candles = candles_from_frame(raw["history"])
    if candles is None:
        warnings.append("Price history unavailable: momentum and trend terms skipped")
    elif len(candles) < 200:
        warnings.append(f"Only {len(candles)} sessions of history: 200-day average unavailable")

    as_of = candles.last_date() if candles is not None else None
    if as_of is None:
        as_of = datetime.now(timezone.utc).date()

    news = news_from_items(raw["news"], days=request.news_days)
    earnings = earnings_from_frame(raw["earnings_history"])

    # No insider rows at all means the six-factor table, same as a failed fetch
    smart_money = None
    if request.include_smart_money:
        if "insider_transactions" in failed:
            warnings.append("Insider transactions unavailable: smart-money factor skipped")
        elif raw["insider_transactions"] is None:
            warnings.append("No insider transactions reported: smart-money factor skipped")
        else:
            trades = insider_trades_from_frame(raw["insider_transactions"])
            smart_money = smart_money_from_trades(trades, as_of)

    extras = Extras(
        price_target=price_target_from_dict(raw["analyst_price_targets"]),
        rating_changes=rating_changes_from_frame(raw["upgrades_downgrades"]),
        macd_state=macd_state_from_closes(candles.closes) if candles is not None else None,
        as_of=as_of,
    )

    result = score(
        quote,
        candles=candles,
        metrics=metrics_from_info(raw["info"]),
        news=news,
        consensus=consensus_from_frame(raw["recommendations"]),
        earnings=earnings,
        smart_money=smart_money,
        extras=extras,
    )

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "symbol": sym,
        "as_of": as_of.isoformat(),
        "result": result.to_dict(),
        "snapshot": build_signal_snapshot(result, sym, quote.price),
        "coverage": coverage,
        "market_state": get_market_state(),
        "warnings": warnings,
        "meta": build_meta("score_symbol", duration_ms),
    }
