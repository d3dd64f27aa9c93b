"""
Contradiction penalties and verdict gates as ordered rule lists.

Each rule is a (predicate -> action) pair that can be tested on its own.
Contradiction rules accumulate an additive penalty (unbounded, so several
contradictions compound). Gate rules downgrade a verdict one class; the
first matching gate for the current verdict wins, then gates for the new
verdict are evaluated in turn.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from signal_mcp.engine.types import Verdict

logger = logging.getLogger(__name__)

Scores = Mapping[str, float]

# A factor counts towards breadth when it clears this magnitude
BREADTH_THRESHOLD = 0.1


def count_positive(scores: Scores) -> int:
    return sum(1 for v in scores.values() if v > BREADTH_THRESHOLD)


def count_negative(scores: Scores) -> int:
    return sum(1 for v in scores.values() if v < -BREADTH_THRESHOLD)


@dataclass(frozen=True)
class ContradictionRule:
    name: str
    predicate: Callable[[Scores], bool]
    penalty: float
    message: str


@dataclass(frozen=True)
class GateContext:
    scores: Scores
    total: float

    @property
    def positives(self) -> int:
        return count_positive(self.scores)

    @property
    def negatives(self) -> int:
        return count_negative(self.scores)


@dataclass(frozen=True)
class GateRule:
    name: str
    applies_to: Verdict
    predicate: Callable[[GateContext], bool]
    downgrade_to: Verdict
    message: str


def _score(scores: Scores, name: str) -> float:
    return scores.get(name, 0.0)


DEFAULT_CONTRADICTION_RULES: tuple[ContradictionRule, ...] = (
    ContradictionRule(
        name="trend_vs_analyst",
        predicate=lambda s: _score(s, "trend") < -0.3 and _score(s, "analyst") > 0.5,
        penalty=0.08,
        message="Analysts bullish while price trend is clearly negative",
    ),
    ContradictionRule(
        name="momentum_vs_earnings",
        predicate=lambda s: _score(s, "momentum") < -0.3 and _score(s, "earnings") > 0.4,
        penalty=0.06,
        message="Strong earnings record but the market is selling the stock",
    ),
    ContradictionRule(
        name="sentiment_vs_analyst",
        predicate=lambda s: _score(s, "sentiment") < -0.3 and _score(s, "analyst") > 0.3,
        penalty=0.05,
        message="Negative news flow contradicts positive analyst consensus",
    ),
    ContradictionRule(
        name="trend_vs_valuation",
        predicate=lambda s: _score(s, "trend") < -0.5 and _score(s, "valuation") > 0.4,
        penalty=0.06,
        message="Looks cheap but is in a steep downtrend (possible value trap)",
    ),
)

DEFAULT_GATE_RULES: tuple[GateRule, ...] = (
    GateRule(
        name="insufficient_breadth",
        applies_to=Verdict.BUY,
        predicate=lambda ctx: ctx.positives < 3,
        downgrade_to=Verdict.HOLD,
        message="BUY downgraded to HOLD: fewer than 3 factors positive",
    ),
    GateRule(
        name="no_directional_confirmation",
        applies_to=Verdict.BUY,
        predicate=lambda ctx: not (
            _score(ctx.scores, "trend") > 0 or _score(ctx.scores, "momentum") > 0
        ),
        downgrade_to=Verdict.HOLD,
        message="BUY downgraded to HOLD: neither trend nor momentum confirms direction",
    ),
    GateRule(
        name="too_many_red_flags",
        applies_to=Verdict.BUY,
        predicate=lambda ctx: ctx.negatives >= 4,
        downgrade_to=Verdict.HOLD,
        message="BUY downgraded to HOLD: 4 or more factors negative",
    ),
    GateRule(
        name="hold_below_floor",
        applies_to=Verdict.HOLD,
        predicate=lambda ctx: ctx.total < -0.15,
        downgrade_to=Verdict.AVOID,
        message="HOLD downgraded to AVOID: penalized total below -0.15",
    ),
)


def evaluate_contradictions(
    scores: Scores,
    rules: tuple[ContradictionRule, ...] = DEFAULT_CONTRADICTION_RULES,
) -> tuple[float, list[str]]:
    """
    Apply contradiction rules in order.

    Returns:
        Tuple of (total_penalty, messages) where penalty is positive and is
        subtracted from the weighted total by the caller
    """
    penalty = 0.0
    messages: list[str] = []
    for rule in rules:
        if rule.predicate(scores):
            penalty += rule.penalty
            messages.append(f"{rule.message} (-{rule.penalty:.2f})")
            logger.debug(f"Contradiction {rule.name}: -{rule.penalty}")
    return round(penalty, 4), messages


def apply_gates(
    verdict: Verdict,
    ctx: GateContext,
    rules: tuple[GateRule, ...] = DEFAULT_GATE_RULES,
) -> tuple[Verdict, list[str]]:
    """
    Downgrade a raw verdict through the gate rules.

    Returns:
        Tuple of (final_verdict, messages for every gate that fired)
    """
    messages: list[str] = []
    for rule in rules:
        if rule.applies_to is not verdict:
            continue
        if rule.predicate(ctx):
            logger.debug(f"Gate {rule.name}: {verdict.value} -> {rule.downgrade_to.value}")
            messages.append(rule.message)
            verdict = rule.downgrade_to
    return verdict, messages
