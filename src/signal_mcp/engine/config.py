"""
Static configuration consumed by the scoring engine.

Everything here is immutable and injectable: callers that want a different
source-tier table, word list or weight table build their own EngineConfig
and pass it to score(). DEFAULT_CONFIG is used otherwise.
"""

from dataclasses import dataclass, field

from signal_mcp.engine.rules import (
    DEFAULT_CONTRADICTION_RULES,
    DEFAULT_GATE_RULES,
    ContradictionRule,
    GateRule,
)
from signal_mcp.engine.types import FACTORS, SMART_MONEY


@dataclass(frozen=True)
class SourceTier:
    tier: int
    label: str
    weight: float
    sources: tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceTierTable:
    """Ordered (tier, matchers, weight) table; first substring hit wins."""

    tiers: tuple[SourceTier, ...]
    default: SourceTier

    def classify(self, source: str | None) -> SourceTier:
        src = (source or "").lower()
        if not src:
            return self.default
        for tier in self.tiers:
            if any(s in src for s in tier.sources):
                return tier
        return self.default


DEFAULT_SOURCE_TIERS = SourceTierTable(
    tiers=(
        SourceTier(
            1, "Primary / regulatory", 1.0,
            ("sec.gov", "sec filing", "edgar", "federal reserve", "fda.gov",
             "businesswire", "business wire", "pr newswire", "globenewswire",
             "investor relations"),
        ),
        SourceTier(
            2, "Wire service", 0.85,
            ("reuters", "bloomberg", "associated press", "ap news", "dow jones"),
        ),
        SourceTier(
            3, "Financial media", 0.65,
            ("wall street journal", "wsj", "financial times", "cnbc", "marketwatch",
             "barron", "yahoo", "forbes", "fortune", "business insider",
             "the economist", "investor's business daily"),
        ),
    ),
    default=SourceTier(4, "Unverified", 0.35),
)


@dataclass(frozen=True)
class SentimentLexicon:
    positive: frozenset[str]
    negative: frozenset[str]


DEFAULT_LEXICON = SentimentLexicon(
    positive=frozenset({
        "beat", "beats", "surge", "surged", "soar", "soared", "rally", "rallied",
        "profit", "profits", "gain", "gains", "growth", "grew", "strong", "record",
        "upgrade", "upgraded", "buy", "outperform", "raised", "raise", "exceeds",
        "exceeded", "positive", "bullish", "recovery", "recovered", "expand",
        "expanding", "revenue", "solid", "robust", "better", "improved", "improvement",
        "boost", "boosted", "higher", "rise", "rose", "increase", "increased", "top",
        "topped", "above", "ahead",
    }),
    negative=frozenset({
        "miss", "misses", "missed", "fall", "falls", "fell", "drop", "dropped",
        "decline", "declined", "loss", "losses", "weak", "weaker", "cut", "cuts",
        "downgrade", "downgraded", "sell", "underperform", "lower", "below", "warning",
        "concern", "risk", "risks", "disappointing", "disappointed", "reduce", "reduced",
        "layoff", "layoffs", "restructure", "debt", "lawsuit", "investigation", "fraud",
        "recall", "suspended", "suspension", "bankruptcy", "negative", "bearish",
        "shortage", "supply", "demand",
    }),
)


@dataclass(frozen=True)
class WeightTable:
    """Factor weights; smartmoney is zero in the six-factor variants."""

    momentum: float
    trend: float
    valuation: float
    sentiment: float
    analyst: float
    earnings: float
    smartmoney: float = 0.0

    def as_dict(self) -> dict[str, float]:
        weights = {name: getattr(self, name) for name in FACTORS}
        if self.smartmoney > 0:
            weights[SMART_MONEY] = self.smartmoney
        return weights


NORMAL_WEIGHTS = WeightTable(
    momentum=0.20, trend=0.15, valuation=0.20, sentiment=0.15, analyst=0.20, earnings=0.10,
)
NORMAL_WEIGHTS_SMART_MONEY = WeightTable(
    momentum=0.18, trend=0.14, valuation=0.18, sentiment=0.12, analyst=0.18, earnings=0.10,
    smartmoney=0.10,
)
# Downtrend tables: momentum and trend dominate so a cheap multiple cannot mask the slide.
BEAR_WEIGHTS = WeightTable(
    momentum=0.28, trend=0.25, valuation=0.12, sentiment=0.08, analyst=0.17, earnings=0.10,
)
BEAR_WEIGHTS_SMART_MONEY = WeightTable(
    momentum=0.27, trend=0.25, valuation=0.11, sentiment=0.07, analyst=0.16, earnings=0.09,
    smartmoney=0.05,
)


@dataclass(frozen=True)
class EngineConfig:
    source_tiers: SourceTierTable = DEFAULT_SOURCE_TIERS
    lexicon: SentimentLexicon = DEFAULT_LEXICON
    normal_weights: WeightTable = NORMAL_WEIGHTS
    normal_weights_smart_money: WeightTable = NORMAL_WEIGHTS_SMART_MONEY
    bear_weights: WeightTable = BEAR_WEIGHTS
    bear_weights_smart_money: WeightTable = BEAR_WEIGHTS_SMART_MONEY
    # Own 3-month return (percent) below which a negative trend flips the regime
    bear_momentum_threshold: float = -15.0
    buy_threshold: float = 0.30
    hold_threshold: float = 0.05
    contradiction_rules: tuple[ContradictionRule, ...] = field(
        default=DEFAULT_CONTRADICTION_RULES
    )
    gate_rules: tuple[GateRule, ...] = field(default=DEFAULT_GATE_RULES)


DEFAULT_CONFIG = EngineConfig()
