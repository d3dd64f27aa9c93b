"""Insider and legislator trading factor."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from signal_mcp.engine.types import SmartMoneySignal

CLUSTER_WINDOW_DAYS = 30


@dataclass(frozen=True)
class InsiderTrade:
    on: date
    is_buy: bool
    name: str | None = None


def cluster_signal(
    trades: Sequence[InsiderTrade],
    as_of: date,
    window_days: int = CLUSTER_WINDOW_DAYS,
) -> tuple[str | None, str | None]:
    """
    Classify insider buying clustered inside the trailing window.

    Returns:
        Tuple of (level, label): strong for 3+ buyers, moderate for 2,
        weak for 1, (None, None) otherwise
    """
    cutoff = as_of - timedelta(days=window_days)
    count = sum(1 for t in trades if t.is_buy and cutoff < t.on <= as_of)
    if count >= 3:
        return "strong", f"Cluster buy: {count} insiders bought in {window_days} days"
    if count == 2:
        return "moderate", f"2 insiders bought in {window_days} days"
    if count == 1:
        return "weak", "1 insider bought recently"
    return None, None


def score_smart_money(signal: SmartMoneySignal) -> tuple[float, list[str]]:
    """
    Smart-money factor. Only called when a signal was supplied.

    Returns:
        Tuple of (score in [-1, 1], reasons)
    """
    score = 0.0
    reasons: list[str] = []

    buys = max(signal.insider_buys, 0)
    sells = max(signal.insider_sells, 0)
    legislators = max(signal.legislator_buys, 0)

    if signal.cluster_level == "strong":
        score += 0.8
        reasons.append(signal.cluster_label or "Insider cluster buy")
    elif signal.cluster_level == "moderate":
        score += 0.5
        reasons.append(signal.cluster_label or "Multiple insiders buying")
    elif buys >= 1:
        score += 0.3
        reasons.append(f"{buys} insider buy{'s' if buys > 1 else ''}")

    if sells > buys:
        score -= 0.35
        reasons.append(f"Insiders net sellers ({sells} sells vs {buys} buys)")
    elif sells >= 3:
        score -= 0.2
        reasons.append(f"{sells} insider sells")

    if legislators >= 3:
        score += 0.4
        reasons.append(f"{legislators} congressional purchases")
    elif legislators >= 1:
        score += 0.2
        reasons.append(f"{legislators} congressional purchase{'s' if legislators > 1 else ''}")

    if score == 0:
        reasons.append("No smart money activity")

    return max(-1.0, min(1.0, score)), reasons
