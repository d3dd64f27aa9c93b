"""Moving-average trend factor."""

from signal_mcp.engine.types import finite_or_none


def ma_distance_pct(price: float, ma: float) -> float:
    return (price - ma) / ma * 100


def score_trend(
    price: float | None,
    ma50: float | None,
    ma200: float | None = None,
) -> tuple[float, list[str]]:
    """
    Trend factor from price distance to the 50- and 200-day moving averages.

    Args:
        price: Current price
        ma50: 50-day simple moving average
        ma200: 200-day simple moving average (optional)

    Returns:
        Tuple of (score in [-1, 1], reasons)
    """
    price = finite_or_none(price)
    ma50 = finite_or_none(ma50)
    ma200 = finite_or_none(ma200)

    if not price or not ma50 or ma50 <= 0:
        return 0.0, ["50-day moving average unavailable"]

    score = 0.0
    reasons: list[str] = []

    pct50 = ma_distance_pct(price, ma50)
    score += max(-0.7, min(0.7, pct50 / 10))
    side50 = "above" if pct50 >= 0 else "below"
    reasons.append(f"Price {abs(pct50):.1f}% {side50} 50-day MA (${ma50:.2f})")

    if ma200 and ma200 > 0:
        pct200 = ma_distance_pct(price, ma200)
        score += max(-0.3, min(0.3, pct200 / 15))
        side200 = "above" if pct200 >= 0 else "below"
        reasons.append(f"Price {abs(pct200):.1f}% {side200} 200-day MA (${ma200:.2f})")

        if pct50 >= 0 and pct200 >= 0:
            reasons.append("Above both moving averages")
        elif pct50 < 0 and pct200 < 0:
            reasons.append("Below both moving averages")

        if ma50 > ma200:
            reasons.append("Golden cross (50-day above 200-day)")
        elif ma50 < ma200:
            reasons.append("Death cross (50-day below 200-day)")

    return max(-1.0, min(1.0, score)), reasons
