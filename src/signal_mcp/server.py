"""Stock Signal MCP Server using FastMCP."""

import json
import logging
import os

from fastmcp import FastMCP

from signal_mcp import SCHEMA_VERSION, SERVER_VERSION
from signal_mcp.tools import compare_symbols, news_sentiment, score_symbol, screen_symbols

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="stock-signal",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_signal_score(
    symbol: str,
    news_days: int = 7,
    include_smart_money: bool = True,
) -> str:
    """
    Score a stock into a BUY / HOLD / AVOID signal.

    Combines momentum, trend, valuation, news sentiment, analyst consensus,
    earnings history and (optionally) insider activity into one weighted
    score, then applies contradiction penalties and verdict gates.

    Args:
        symbol: Stock ticker symbol (e.g., AAPL, GOOGL, MSFT)
        news_days: News lookback window in days, 1-30 (default: 7)
        include_smart_money: Score insider buying/selling as a seventh factor (default: True)

    Returns:
        JSON with verdict, pct, conviction, per-factor scores and reasons,
        contradictions, gates, uncertainty flags, input coverage and a
        hashable snapshot for history tracking
    """
    result = await score_symbol(
        symbol=symbol,
        news_days=news_days,
        include_smart_money=include_smart_money,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_news_sentiment(symbol: str, days: int = 7) -> str:
    """
    Get credibility-weighted sentiment for recent news about a stock.

    Each article is scored with a financial keyword lexicon and weighted by
    source tier (regulatory filings highest, unverified blogs lowest).

    Args:
        symbol: Stock ticker symbol
        days: Number of days to look back, 1-30 (default: 7)

    Returns:
        JSON with per-article scores, aggregate sentiment, factor score and
        coverage flags
    """
    result = await news_sentiment(symbol=symbol, days=days)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def screen_stocks(
    symbols: list[str],
    verdicts: list[str] | None = None,
    pe_max: float | None = None,
    include_smart_money: bool = True,
) -> str:
    """
    Score a watchlist and rank it by signal strength.

    Args:
        symbols: Ticker symbols to scan, up to 25 (e.g., ["AAPL", "MSFT", "NVDA"])
        verdicts: Keep only these verdicts, any of BUY, HOLD, AVOID (default: all)
        pe_max: Drop symbols with trailing P/E above this (symbols without P/E are kept)
        include_smart_money: Score insider activity as a seventh factor (default: True)

    Returns:
        JSON with ranked rows (verdict, pct, conviction, price, P/E, factor scores),
        symbols that failed to score, and summary counts
    """
    result = await screen_symbols(
        symbols=symbols,
        verdicts=verdicts,
        pe_max=pe_max,
        include_smart_money=include_smart_money,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def compare_stocks(symbol_a: str, symbol_b: str, include_smart_money: bool = True) -> str:
    """
    Score two stocks side by side.

    Args:
        symbol_a: First ticker symbol
        symbol_b: Second ticker symbol
        include_smart_money: Score insider activity as a seventh factor (default: True)

    Returns:
        JSON with both signals, the leader, the pct gap and which side leads each factor
    """
    result = await compare_symbols(
        symbol_a=symbol_a,
        symbol_b=symbol_b,
        include_smart_money=include_smart_money,
    )
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Stock Signal MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    mcp.run()


if __name__ == "__main__":
    main()
