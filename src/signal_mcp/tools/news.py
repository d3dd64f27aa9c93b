"""Credibility-weighted news sentiment tool."""

from dataclasses import asdict
from time import perf_counter
from typing import Any

from signal_mcp.data.inputs import news_from_items
from signal_mcp.data.yfinance_client import fetch_ticker_field
from signal_mcp.engine.config import DEFAULT_CONFIG
from signal_mcp.engine.scorer import news_flags
from signal_mcp.engine.sentiment import credibility_sentiment, score_sentiment
from signal_mcp.utils.provenance import build_coverage, build_error_response, build_meta
from signal_mcp.utils.validators import MAX_NEWS_DAYS


async def news_sentiment(symbol: str, days: int = 7) -> dict[str, Any]:
    """
    Score recent news for a stock with source-credibility weighting.

    Args:
        symbol: Stock ticker symbol
        days: Number of days to look back (default: 7)

    Returns:
        Dict with per-article scores, aggregate sentiment, factor score and flags
    """
    start_time = perf_counter()
    normalized_symbol = symbol.upper().strip()

    if not normalized_symbol:
        return build_error_response("invalid_request", "Symbol must not be empty", symbol=symbol)
    if not 1 <= days <= MAX_NEWS_DAYS:
        return build_error_response(
            "invalid_request",
            f"Invalid days {days}. Must be between 1 and {MAX_NEWS_DAYS}",
            symbol=normalized_symbol,
        )

    try:
        items = await fetch_ticker_field(normalized_symbol, "news")
    except Exception as e:
        return build_error_response(
            error_type="data_unavailable",
            message=f"Failed to fetch news: {e}",
            symbol=normalized_symbol,
        )

    # Empty news is valid: the factor scores 0 with a reason
    articles = news_from_items(items, days=days)
    avg_sent, scored = credibility_sentiment(
        articles, DEFAULT_CONFIG.source_tiers, DEFAULT_CONFIG.lexicon
    )
    factor, reasons = score_sentiment(avg_sent, len(articles))

    rows = []
    for article, annotated in zip(articles, scored):
        row = asdict(annotated)
        row["published_at"] = article.timestamp
        rows.append(row)

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "symbol": normalized_symbol,
        "days": days,
        "articles": rows,
        "count": len(rows),
        "avg_sent": avg_sent,
        "score": factor,
        "reasons": reasons,
        "flags": news_flags(scored, None, None),
        "coverage": build_coverage("yfinance", bool(rows), None if rows else "no articles in window"),
        "meta": build_meta("news_sentiment", duration_ms),
    }
