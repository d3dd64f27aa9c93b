"""Technical indicator calculations."""

import numpy as np
import pandas as pd


def calculate_sma(prices: pd.Series, period: int) -> pd.Series:
    """
    Calculate Simple Moving Average.

    Args:
        prices: Price series (typically close prices)
        period: Number of periods for the average

    Returns:
        SMA series
    """
    return prices.rolling(window=period, min_periods=period).mean()


def latest_sma(prices: pd.Series, period: int) -> float | None:
    """Last SMA value, or None when the series is shorter than period."""
    if len(prices) < period:
        return None
    value = calculate_sma(prices, period).iloc[-1]
    if pd.isna(value):
        return None
    return float(value)


def calculate_ema(prices: pd.Series, period: int) -> pd.Series:
    """
    Calculate Exponential Moving Average.

    Args:
        prices: Price series (typically close prices)
        period: Number of periods for the average

    Returns:
        EMA series
    """
    return prices.ewm(span=period, adjust=False, min_periods=period).mean()


def calculate_rsi(prices: pd.Series, period: int = 14) -> float | None:
    """
    Calculate the latest Relative Strength Index.

    Averages gains and losses over the trailing `period` price changes
    (needs period + 1 prices). When there are no losses RS is pinned at 100.

    Args:
        prices: Price series, oldest first
        period: RSI period (default: 14)

    Returns:
        RSI on a 0-100 scale rounded to 1 decimal, or None if insufficient data
    """
    if len(prices) < period + 1:
        return None

    delta = prices.iloc[-(period + 1):].diff().dropna()
    if len(delta) < period:
        return None

    avg_gain = float(delta.where(delta > 0, 0.0).mean())
    avg_loss = float((-delta).where(delta < 0, 0.0).mean())

    rs = avg_gain / avg_loss if avg_loss > 0 else 100.0
    rsi = 100 - 100 / (1 + rs)
    return round(rsi, 1)


def calculate_macd(
    prices: pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> dict[str, pd.Series]:
    """
    Calculate MACD (Moving Average Convergence Divergence).

    Args:
        prices: Price series (typically close prices)
        fast: Fast EMA period (default: 12)
        slow: Slow EMA period (default: 26)
        signal: Signal line period (default: 9)

    Returns:
        Dict with 'macd_line', 'signal_line', 'histogram' series
    """
    ema_fast = calculate_ema(prices, fast)
    ema_slow = calculate_ema(prices, slow)

    macd_line = ema_fast - ema_slow
    signal_line = calculate_ema(macd_line, signal)

    return {
        "macd_line": macd_line,
        "signal_line": signal_line,
        "histogram": macd_line - signal_line,
    }


def pct_change_from(prices: pd.Series, price: float, sessions_back: int) -> float | None:
    """
    Percent change of `price` versus the close `sessions_back` bars from the end.

    prices.iloc[-sessions_back] is the reference close, so 20 means the close
    twenty rows before the end including the newest row.

    Returns:
        Percent change rounded to 2 decimals, or None if insufficient data
    """
    if len(prices) < sessions_back:
        return None

    past = prices.iloc[-sessions_back]
    if pd.isna(past) or past <= 0:
        return None

    return round((price / float(past) - 1) * 100, 2)


def volume_ratio(volumes: pd.Series, lookback: int = 19) -> float | None:
    """
    Latest volume relative to the average of the preceding `lookback` sessions.

    Returns:
        Ratio rounded to 2 decimals, or None if insufficient data or zero average
    """
    if len(volumes) < lookback + 1:
        return None

    latest = volumes.iloc[-1]
    baseline = volumes.iloc[-(lookback + 1):-1].mean()

    if pd.isna(latest) or pd.isna(baseline) or baseline <= 0:
        return None

    ratio = float(latest) / float(baseline)
    if not np.isfinite(ratio):
        return None
    return round(ratio, 2)
