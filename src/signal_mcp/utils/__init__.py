"""Utility modules."""

from signal_mcp.utils.indicators import (
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    latest_sma,
    pct_change_from,
    volume_ratio,
)
from signal_mcp.utils.provenance import build_coverage, build_error_response, build_meta
from signal_mcp.utils.sanitize import sanitize_text
from signal_mcp.utils.validators import ScoreRequest

__all__ = [
    "calculate_ema",
    "calculate_macd",
    "calculate_rsi",
    "calculate_sma",
    "latest_sma",
    "pct_change_from",
    "volume_ratio",
    "build_coverage",
    "build_error_response",
    "build_meta",
    "sanitize_text",
    "ScoreRequest",
]
