"""Analyst consensus factor."""

from collections.abc import Sequence
from datetime import date, timedelta

from signal_mcp.engine.types import AnalystConsensus, RatingChange, finite_or_none

RATING_WINDOW_DAYS = 30
DRIFT_THRESHOLD = 0.08


def price_target_upside(price: float | None, target: float | None) -> float | None:
    """Upside to the consensus target in percent, rounded to 1 decimal."""
    price = finite_or_none(price)
    target = finite_or_none(target)
    if not price or price <= 0 or target is None or target <= 0:
        return None
    return round((target - price) / price * 100, 1)


def count_rating_changes(
    changes: Sequence[RatingChange],
    as_of: date | None,
    window_days: int = RATING_WINDOW_DAYS,
) -> tuple[int, int]:
    """
    Count upgrades and downgrades inside the trailing window.

    Without an as_of anchor every event is counted.
    """
    cutoff = as_of - timedelta(days=window_days) if as_of is not None else None
    upgrades = downgrades = 0
    for change in changes:
        if cutoff is not None and (change.on < cutoff or change.on > as_of):
            continue
        action = change.action.lower()
        if action == "upgrade":
            upgrades += 1
        elif action == "downgrade":
            downgrades += 1
    return upgrades, downgrades


def score_analyst(
    consensus: AnalystConsensus | None,
    upside_pct: float | None = None,
    rating_changes: Sequence[RatingChange] = (),
    as_of: date | None = None,
) -> tuple[float, list[str]]:
    """
    Analyst factor from rating distribution, target upside, recent rating
    changes and month-over-month drift of the bullish share.

    Returns:
        Tuple of (score in [-1, 1], reasons)
    """
    score = 0.0
    reasons: list[str] = []

    current = consensus.current if consensus is not None else None
    if current is None or current.total <= 0:
        reasons.append("No analyst coverage")
    else:
        total = current.total
        bull = (current.strong_buy + current.buy * 0.5) / total
        bear = (current.strong_sell + current.sell * 0.5) / total
        score += max(-1.0, min(1.0, (bull - bear) * 2))
        reasons.append(
            f"Wall St: {current.strong_buy} Strong Buy, {current.buy} Buy, "
            f"{current.hold} Hold, {current.sell} Sell, {current.strong_sell} Strong Sell"
        )

    if upside_pct is not None:
        if upside_pct > 20:
            score += 0.3
            reasons.append(f"Price target implies {upside_pct}% upside")
        elif upside_pct > 10:
            score += 0.15
            reasons.append(f"Price target implies {upside_pct}% upside")
        elif upside_pct < -10:
            score -= 0.2
            reasons.append(f"Price target {abs(upside_pct)}% below current price")

    if rating_changes:
        upgrades, downgrades = count_rating_changes(rating_changes, as_of)
        net = upgrades - downgrades
        if net > 1:
            score += 0.25
            reasons.append(f"{upgrades} upgrades vs {downgrades} downgrades in 30 days")
        elif net < 0:
            score -= 0.25
            reasons.append(f"{downgrades} downgrades vs {upgrades} upgrades in 30 days")

    if consensus is not None and len(consensus.history) >= 2:
        latest = consensus.history[0].bullish_share()
        prior = consensus.history[1].bullish_share()
        if latest is not None and prior is not None:
            drift = latest - prior
            if drift > DRIFT_THRESHOLD:
                score += 0.15
                reasons.append(f"Consensus turning bullish (+{drift * 100:.0f}pp month over month)")
            elif drift < -DRIFT_THRESHOLD:
                score -= 0.15
                reasons.append(f"Consensus turning bearish ({drift * 100:.0f}pp month over month)")

    return max(-1.0, min(1.0, score)), reasons
