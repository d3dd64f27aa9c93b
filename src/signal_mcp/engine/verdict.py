"""Verdict thresholds, percentage mapping and conviction."""

from collections.abc import Mapping

from signal_mcp.engine.rules import count_negative, count_positive
from signal_mcp.engine.types import Verdict

CONSISTENCY_BONUS = 15.0
# Penalty at which the consistency bonus reaches zero: all four default contradictions
MAX_CONTRADICTION_PENALTY = 0.25


def classify_total(total: float, buy_threshold: float = 0.30, hold_threshold: float = 0.05) -> Verdict:
    """Raw verdict before gating."""
    if total >= buy_threshold:
        return Verdict.BUY
    if total >= hold_threshold:
        return Verdict.HOLD
    return Verdict.AVOID


def to_pct(total: float) -> float:
    """Map a weighted total in [-1, 1] onto 0-100, one decimal, clamped."""
    pct = round((total + 1) / 2 * 100, 1)
    return max(0.0, min(100.0, pct))


def consistency_bonus(penalty: float) -> float:
    """Full bonus without contradictions, shrinking linearly with the penalty."""
    if penalty <= 0:
        return CONSISTENCY_BONUS
    return max(0.0, CONSISTENCY_BONUS * (1 - penalty / MAX_CONTRADICTION_PENALTY))


def compute_conviction(scores: Mapping[str, float], penalty: float) -> float:
    """
    Conviction from factor breadth and signal magnitude.

    Deliberately independent of the percentage: two results with the same
    weighted total but different breadth or agreement get different values.

    Returns:
        Conviction on 0-100, one decimal
    """
    if not scores:
        return 0.0

    n = len(scores)
    breadth = (count_positive(scores) - count_negative(scores)) / n
    agreement = sum(abs(v) for v in scores.values()) / n

    conviction = (breadth * 0.5 + 0.5) * 60 + agreement * 25 + consistency_bonus(penalty)
    return round(max(0.0, min(100.0, conviction)), 1)
