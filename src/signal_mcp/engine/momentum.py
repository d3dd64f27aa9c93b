"""Price momentum extraction and the momentum factor."""

from signal_mcp.engine.types import CandleSeries, MacdState, Quote, finite_or_none
from signal_mcp.utils.indicators import calculate_rsi, pct_change_from, volume_ratio

RSI_PERIOD = 14
ONE_MONTH_SESSIONS = 20
THREE_MONTH_SESSIONS = 60
VOLUME_LOOKBACK = 19

RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70
# 3-month decline (percent) at which an oversold RSI reads as a falling knife
FALLING_KNIFE_3M = -15.0


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


def _signed(value: float) -> str:
    return f"+{value}" if value > 0 else f"{value}"


def extract_momentum(quote: Quote | None, candles: CandleSeries | None) -> dict[str, float]:
    """
    Build the momentum map from the quote and candle history.

    Keys are only present when the data supports them:
    1d, 1m, 3m (percent), rsi, volume_ratio, pct_from_high, pct_from_low.
    """
    mom: dict[str, float] = {}
    if quote is None:
        return mom

    price = finite_or_none(quote.price)
    if not price or price <= 0:
        return mom

    day = quote.day_change_pct()
    mom["1d"] = day if day is not None else 0.0

    high = finite_or_none(quote.high_52w)
    low = finite_or_none(quote.low_52w)
    if high and high > 0:
        mom["pct_from_high"] = round((high - price) / high * 100, 2)
    if low and low > 0:
        mom["pct_from_low"] = round((price - low) / low * 100, 2)

    if candles is None or len(candles) == 0:
        return mom

    closes = candles.close_series()
    one_month = pct_change_from(closes, price, ONE_MONTH_SESSIONS)
    if one_month is not None:
        mom["1m"] = one_month
    three_month = pct_change_from(closes, price, THREE_MONTH_SESSIONS)
    if three_month is not None:
        mom["3m"] = three_month

    rsi = calculate_rsi(closes, RSI_PERIOD)
    if rsi is not None:
        mom["rsi"] = rsi

    if candles.volumes:
        ratio = volume_ratio(candles.volume_series(), VOLUME_LOOKBACK)
        if ratio is not None:
            mom["volume_ratio"] = ratio

    return mom


def score_momentum(
    mom: dict[str, float],
    macd: MacdState | None = None,
) -> tuple[float, list[str]]:
    """
    Momentum factor from the momentum map and an optional MACD state.

    Returns:
        Tuple of (score in [-1, 1], reasons)
    """
    score = 0.0
    reasons: list[str] = []

    if not mom:
        return 0.0, ["No price data for momentum"]

    if "1d" in mom:
        score += _clamp(mom["1d"] / 5, 0.3)
        reasons.append(f"1-day {_signed(mom['1d'])}%")
    if "1m" in mom:
        score += _clamp(mom["1m"] / 15, 0.4)
        reasons.append(f"1-month {_signed(mom['1m'])}%")
    if "3m" in mom:
        score += _clamp(mom["3m"] / 20, 0.3)
        reasons.append(f"3-month {_signed(mom['3m'])}%")

    rsi = mom.get("rsi")
    if rsi is not None:
        if rsi < RSI_OVERSOLD:
            if mom.get("3m", 0.0) <= FALLING_KNIFE_3M:
                score -= 0.1
                reasons.append(f"RSI {rsi} oversold inside a deep decline (falling knife)")
            else:
                score += 0.3
                reasons.append(f"RSI {rsi} oversold, bounce potential")
        elif rsi > RSI_OVERBOUGHT:
            score -= 0.2
            reasons.append(f"RSI {rsi} overbought, pullback risk")
        else:
            reasons.append(f"RSI {rsi} neutral")
    else:
        reasons.append("RSI unavailable (need 15+ closes)")

    ratio = mom.get("volume_ratio")
    if ratio is not None:
        direction = 1 if mom.get("1d", 0.0) > 0 else -1 if mom.get("1d", 0.0) < 0 else 0
        word = "buying" if direction > 0 else "selling"
        if ratio >= 2.5 and direction:
            score += 0.3 * direction
            reasons.append(f"Volume {ratio}x average confirms {word}")
        elif ratio >= 1.5 and direction:
            score += 0.15 * direction
            reasons.append(f"Volume {ratio}x average supports {word}")
        elif ratio < 0.5:
            score -= 0.1
            reasons.append(f"Volume {ratio}x average, move lacks participation")

    if macd is not None:
        if macd.bullish_cross:
            score += 0.25
            reasons.append("MACD bullish crossover")
        elif macd.bearish_cross:
            score -= 0.25
            reasons.append("MACD bearish crossover")
        elif macd.trend == "bullish":
            score += 0.1
            reasons.append("MACD above zero")
        elif macd.trend == "bearish":
            score -= 0.1
            reasons.append("MACD below zero")

    from_high = mom.get("pct_from_high")
    from_low = mom.get("pct_from_low")
    if from_high is not None and from_high <= 5:
        score += 0.2
        reasons.append(f"Within {from_high}% of 52-week high")
    elif from_high is not None and from_high <= 15:
        score += 0.05
        reasons.append(f"{from_high}% below 52-week high")
    elif from_low is not None and from_low <= 10:
        score -= 0.15
        reasons.append(f"Within {from_low}% of 52-week low")

    return max(-1.0, min(1.0, score)), reasons
