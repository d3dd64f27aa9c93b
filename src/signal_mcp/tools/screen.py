"""Multi-symbol screener: score a watchlist, rank by pct, filter."""

import asyncio
import logging
from time import perf_counter
from typing import Any

from signal_mcp.engine.types import Verdict
from signal_mcp.tools.score import score_symbol
from signal_mcp.utils.provenance import build_error_response, build_meta

logger = logging.getLogger(__name__)

MAX_SCREEN_SYMBOLS = 25
# Symbols scored at once; each one already fans out into ~8 fetches
SCREEN_CONCURRENCY = 5


def screen_row(symbol: str, scored: dict[str, Any]) -> dict[str, Any]:
    """Compact ranking row from a score_symbol response."""
    result = scored["result"]
    return {
        "symbol": symbol,
        "verdict": result["verdict"],
        "pct": result["pct"],
        "conviction": result["conviction"],
        "price": scored["snapshot"]["price"],
        "pe": result["pe"],
        "upside_pct": result["upside_pct"],
        "regime": result["regime"],
        "scores": result["scores"],
    }


def _normalize_symbols(symbols: list[str]) -> list[str]:
    """Uppercase, strip and dedupe, keeping first-seen order."""
    seen: dict[str, None] = {}
    for symbol in symbols:
        normalized = (symbol or "").upper().strip()
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


async def screen_symbols(
    symbols: list[str],
    verdicts: list[str] | None = None,
    pe_max: float | None = None,
    include_smart_money: bool = True,
) -> dict[str, Any]:
    """
    Score every symbol and rank them by pct, highest first.

    Filters apply after ranking. A symbol without a positive P/E passes
    the pe_max filter. Symbols that fail to score are listed under errors
    and do not stop the scan.

    Args:
        symbols: Ticker symbols to scan (deduplicated, at most 25)
        verdicts: Verdicts to keep (default: all)
        pe_max: Drop symbols whose trailing P/E exceeds this
        include_smart_money: Score insider activity for each symbol

    Returns:
        Dict with ranked results, errors, summary counts and meta
    """
    start_time = perf_counter()

    tickers = _normalize_symbols(symbols or [])
    if not tickers:
        return build_error_response("invalid_request", "symbols list cannot be empty")
    if len(tickers) > MAX_SCREEN_SYMBOLS:
        return build_error_response(
            "invalid_request",
            f"Too many symbols ({len(tickers)}). Maximum is {MAX_SCREEN_SYMBOLS}",
        )

    valid_verdicts = {v.value for v in Verdict}
    keep = {v.upper().strip() for v in verdicts} if verdicts else set(valid_verdicts)
    unknown = keep - valid_verdicts
    if unknown:
        return build_error_response(
            "invalid_request",
            f"Invalid verdicts {sorted(unknown)}. Must be among: {sorted(valid_verdicts)}",
        )
    if pe_max is not None and pe_max <= 0:
        return build_error_response("invalid_request", f"pe_max must be positive, got {pe_max}")

    semaphore = asyncio.Semaphore(SCREEN_CONCURRENCY)

    async def _score(symbol: str) -> tuple[str, dict[str, Any]]:
        async with semaphore:
            return symbol, await score_symbol(symbol, include_smart_money=include_smart_money)

    scored = await asyncio.gather(*[_score(t) for t in tickers])

    ranked: list[dict[str, Any]] = []
    errors: list[dict[str, Any]] = []
    for symbol, response in scored:
        if response.get("error"):
            logger.info(f"screen_symbols: {symbol} skipped: {response.get('message')}")
            errors.append({
                "symbol": symbol,
                "error_type": response.get("error_type"),
                "message": response.get("message"),
            })
            continue
        ranked.append(screen_row(symbol, response))

    ranked.sort(key=lambda r: (-r["pct"], r["symbol"]))

    shown = [
        r for r in ranked
        if r["verdict"] in keep
        and not (pe_max is not None and r["pe"] is not None and r["pe"] > pe_max)
    ]
    for rank, row in enumerate(shown, start=1):
        row["rank"] = rank

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "results": shown,
        "errors": errors,
        "summary": {
            "requested": len(tickers),
            "scanned": len(ranked),
            "shown": len(shown),
            "buy_count": sum(1 for r in ranked if r["verdict"] == Verdict.BUY.value),
            "top": shown[0]["symbol"] if shown else None,
        },
        "filters": {
            "verdicts": sorted(keep),
            "pe_max": pe_max,
        },
        "meta": build_meta("screen_symbols", duration_ms),
    }
