"""Earnings-surprise momentum factor."""

from collections.abc import Sequence

from signal_mcp.engine.types import EarningsQuarter


def surprise_series(quarters: Sequence[EarningsQuarter]) -> list[float]:
    """EPS surprises (percent), most recent first, skipping incomplete quarters."""
    surprises = []
    for quarter in quarters:
        surprise = quarter.surprise_pct()
        if surprise is not None:
            surprises.append(surprise)
    return surprises


def beat_streak(surprises: Sequence[float]) -> int:
    """Consecutive beats counted from the most recent quarter."""
    streak = 0
    for surprise in surprises:
        if surprise <= 0:
            break
        streak += 1
    return streak


def score_earnings(quarters: Sequence[EarningsQuarter] | None) -> tuple[float, list[str]]:
    """
    Earnings factor.

    Args:
        quarters: Reported quarters, most recent first

    Returns:
        Tuple of (score in [-1, 1], reasons)
    """
    if not quarters:
        return 0.0, ["No earnings data"]

    surprises = surprise_series(quarters)
    if not surprises:
        return 0.0, ["No usable EPS estimates"]

    score = 0.0
    reasons: list[str] = []

    recent = surprises[:4]
    beats = sum(1 for s in recent if s > 0)
    avg_surprise = sum(recent) / len(recent)
    score += (beats / len(recent) - 0.5) * 1.2
    score += max(-0.3, min(0.3, avg_surprise / 20))
    sign = "+" if avg_surprise > 0 else ""
    reasons.append(
        f"Beat estimates {beats}/{len(recent)} qtrs, avg {sign}{avg_surprise:.1f}%"
    )

    streak = beat_streak(surprises)
    if streak >= 6:
        score += 0.5
    elif streak >= 4:
        score += 0.3
    elif streak >= 2:
        score += 0.15
    if streak >= 2:
        reasons.append(f"{streak} consecutive beats")

    # By reported quarter, not position in the filtered surprise list
    latest = quarters[0].surprise_pct()
    two_back = quarters[2].surprise_pct() if len(quarters) >= 3 else None
    if latest is not None and two_back is not None:
        acceleration = latest - two_back
        if acceleration > 5:
            score += 0.2
            reasons.append(f"Beats accelerating (+{acceleration:.1f}pp vs two quarters ago)")
        elif acceleration < -5:
            score -= 0.15
            reasons.append(f"Beats decelerating ({acceleration:.1f}pp vs two quarters ago)")

    revenue = [b for b in (q.revenue_beat() for q in quarters[:4]) if b is not None]
    if revenue:
        rate = sum(1 for b in revenue if b) / len(revenue)
        if rate >= 0.75:
            score += 0.2
            reasons.append(f"Revenue beat {sum(revenue)}/{len(revenue)} qtrs")
        elif rate < 0.4:
            score -= 0.15
            reasons.append(f"Revenue missed {len(revenue) - sum(revenue)}/{len(revenue)} qtrs")

    return max(-1.0, min(1.0, score)), reasons
