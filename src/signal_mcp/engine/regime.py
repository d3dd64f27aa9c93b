"""Regime detection: pick one of two static weight tables per call."""

import logging
from dataclasses import dataclass
from enum import Enum

from signal_mcp.engine.config import DEFAULT_CONFIG, EngineConfig, WeightTable

logger = logging.getLogger(__name__)


class Regime(str, Enum):
    NORMAL = "normal"
    BEAR = "bear"


@dataclass(frozen=True)
class RegimeStrategy:
    regime: Regime
    weights: WeightTable

    @property
    def is_bear(self) -> bool:
        return self.regime is Regime.BEAR


def detect_regime(
    three_month_pct: float | None,
    trend_score: float,
    threshold: float = DEFAULT_CONFIG.bear_momentum_threshold,
) -> Regime:
    """Bear when the asset's own 3-month return is below threshold and its trend is negative."""
    if three_month_pct is not None and three_month_pct < threshold and trend_score < 0:
        return Regime.BEAR
    return Regime.NORMAL


def select_strategy(
    three_month_pct: float | None,
    trend_score: float,
    with_smart_money: bool,
    config: EngineConfig = DEFAULT_CONFIG,
) -> RegimeStrategy:
    regime = detect_regime(three_month_pct, trend_score, config.bear_momentum_threshold)
    if regime is Regime.BEAR:
        weights = config.bear_weights_smart_money if with_smart_money else config.bear_weights
    else:
        weights = config.normal_weights_smart_money if with_smart_money else config.normal_weights
    logger.debug(
        f"Regime {regime.value} (3m={three_month_pct}, trend={trend_score:.3f}, "
        f"smart_money={with_smart_money})"
    )
    return RegimeStrategy(regime=regime, weights=weights)
