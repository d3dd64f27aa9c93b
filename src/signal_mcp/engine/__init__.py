"""Signal scoring engine."""

from signal_mcp.engine.config import DEFAULT_CONFIG, EngineConfig, WeightTable
from signal_mcp.engine.regime import Regime, RegimeStrategy, select_strategy
from signal_mcp.engine.scorer import score, validate_result_invariants
from signal_mcp.engine.types import (
    AnalystConsensus,
    AnalystPeriod,
    ArticleScore,
    CandleSeries,
    EarningsQuarter,
    Extras,
    MacdState,
    Metrics,
    NewsArticle,
    Quote,
    RatingChange,
    ScoreResult,
    SmartMoneySignal,
    Verdict,
)

__all__ = [
    "DEFAULT_CONFIG",
    "EngineConfig",
    "WeightTable",
    "Regime",
    "RegimeStrategy",
    "select_strategy",
    "score",
    "validate_result_invariants",
    # Types
    "AnalystConsensus",
    "AnalystPeriod",
    "ArticleScore",
    "CandleSeries",
    "EarningsQuarter",
    "Extras",
    "MacdState",
    "Metrics",
    "NewsArticle",
    "Quote",
    "RatingChange",
    "ScoreResult",
    "SmartMoneySignal",
    "Verdict",
]
