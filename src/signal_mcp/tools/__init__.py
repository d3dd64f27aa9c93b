"""Signal scoring tools."""

from signal_mcp.tools.compare import compare_symbols
from signal_mcp.tools.news import news_sentiment
from signal_mcp.tools.score import score_symbol
from signal_mcp.tools.screen import screen_symbols

__all__ = [
    "compare_symbols",
    "news_sentiment",
    "score_symbol",
    "screen_symbols",
]
