"""Data layer for fetching yfinance payloads and mapping them to engine inputs."""

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
    YFinanceRetryError,
    fetch_history,
    fetch_info,
    fetch_ticker_field,
    get_market_state,
    shutdown_executor,
)

__all__ = [
    # Adapters
    "candles_from_frame",
    "consensus_from_frame",
    "earnings_from_frame",
    "insider_trades_from_frame",
    "macd_state_from_closes",
    "metrics_from_info",
    "news_from_items",
    "price_target_from_dict",
    "quote_from_info",
    "rating_changes_from_frame",
    "smart_money_from_trades",
    # yfinance
    "ServerShuttingDownError",
    "YFinanceRetryError",
    "fetch_history",
    "fetch_info",
    "fetch_ticker_field",
    "get_market_state",
    "shutdown_executor",
]
