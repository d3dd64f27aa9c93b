"""Signal scoring entry point: inputs snapshot -> ScoreResult."""

import logging
from collections.abc import Sequence

from signal_mcp.engine.analyst import price_target_upside, score_analyst
from signal_mcp.engine.config import DEFAULT_CONFIG, EngineConfig
from signal_mcp.engine.earnings import score_earnings
from signal_mcp.engine.momentum import extract_momentum, score_momentum
from signal_mcp.engine.regime import select_strategy
from signal_mcp.engine.rules import (
    GateContext,
    apply_gates,
    count_negative,
    count_positive,
    evaluate_contradictions,
)
from signal_mcp.engine.sentiment import credibility_sentiment, score_sentiment
from signal_mcp.engine.smart_money import score_smart_money
from signal_mcp.engine.trend import score_trend
from signal_mcp.engine.types import (
    SMART_MONEY,
    VERDICT_COLORS,
    AnalystConsensus,
    ArticleScore,
    CandleSeries,
    EarningsQuarter,
    Extras,
    Metrics,
    NewsArticle,
    Quote,
    ScoreResult,
    SmartMoneySignal,
    Verdict,
    finite_or_none,
)
from signal_mcp.engine.valuation import positive_pe, score_valuation
from signal_mcp.engine.verdict import classify_total, compute_conviction, to_pct
from signal_mcp.utils.indicators import latest_sma

logger = logging.getLogger(__name__)

LOW_PRICE = 20.0
UNVERIFIED_TIER = 4


def _resolve_moving_averages(
    ma50: float | None,
    candles: CandleSeries | None,
) -> tuple[float | None, float | None]:
    """Explicit ma50 wins, then the candle summary, then SMAs computed from closes."""
    ma50_value = finite_or_none(ma50)
    ma200_value = None
    if candles is not None:
        if ma50_value is None:
            ma50_value = finite_or_none(candles.ma50)
        ma200_value = finite_or_none(candles.ma200)
        if ma50_value is None or ma200_value is None:
            closes = candles.close_series()
            if ma50_value is None:
                ma50_value = latest_sma(closes, 50)
            if ma200_value is None:
                ma200_value = latest_sma(closes, 200)
    return ma50_value, ma200_value


def _uncertainty_flags(
    scores: dict[str, float],
    pe: float | None,
    article_count: int,
) -> list[str]:
    flags: list[str] = []
    if pe is not None and pe > 35:
        flags.append("High P/E leaves little margin for error")
    if scores["sentiment"] < 0 and scores["analyst"] > 0:
        flags.append("News and analyst signals diverge")
    if scores["momentum"] < -0.2:
        flags.append("Price momentum is weak")
    if article_count < 3:
        flags.append("Limited news coverage")
    return flags


def news_flags(
    scored_news: Sequence[ArticleScore],
    smart_money: SmartMoneySignal | None,
    price: float | None,
) -> list[str]:
    """Coverage patterns associated with promotional or manipulated news."""
    flags: list[str] = []
    if not scored_news:
        return flags

    unverified = sum(1 for s in scored_news if s.tier == UNVERIFIED_TIER)
    if unverified >= 4:
        flags.append(
            f"Unverified source concentration: {unverified}/{len(scored_news)} articles "
            f"from unverified sources"
        )

    avg_raw = sum(s.score for s in scored_news) / len(scored_news)
    if (
        smart_money is not None
        and avg_raw > 0.2
        and smart_money.insider_sells > smart_money.insider_buys + 2
    ):
        flags.append("Bullish news while insiders are net selling (distribution pattern)")

    if price is not None and price < LOW_PRICE and avg_raw > 0.3:
        flags.append(f"Strong positive coverage on a sub-${LOW_PRICE:.0f} stock")

    return flags


def score(
    quote: Quote | None,
    candles: CandleSeries | None = None,
    ma50: float | None = None,
    metrics: Metrics | None = None,
    news: Sequence[NewsArticle] | None = None,
    consensus: AnalystConsensus | None = None,
    earnings: Sequence[EarningsQuarter] | None = None,
    smart_money: SmartMoneySignal | None = None,
    extras: Extras | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> ScoreResult:
    """
    Reduce one security's input snapshot to a scored verdict.

    Pure and synchronous: missing inputs skip the affected sub-terms (with a
    reason string) instead of raising, so the same snapshot always yields
    the same result.

    Args:
        quote: Current quote (required for price-based terms)
        candles: Daily bars, oldest first
        ma50: 50-day moving average; falls back to candles.ma50 or closes
        metrics: Fundamental ratios
        news: Recent articles
        consensus: Analyst rating distribution and history
        earnings: Reported quarters, most recent first
        smart_money: Insider/legislator signal; enables the seventh factor
        extras: Price target, rating changes, MACD state and as-of date
        config: Static tables and thresholds

    Returns:
        ScoreResult
    """
    extras = extras or Extras()
    price = finite_or_none(quote.price) if quote is not None else None
    article_count = len(news) if news else 0

    avg_sent, scored_news = credibility_sentiment(news, config.source_tiers, config.lexicon)
    mom = extract_momentum(quote, candles)
    ma50_value, ma200_value = _resolve_moving_averages(ma50, candles)
    upside = price_target_upside(price, extras.price_target)
    as_of = extras.as_of or (candles.last_date() if candles is not None else None)

    scores: dict[str, float] = {}
    reasons: dict[str, list[str]] = {}
    scores["momentum"], reasons["momentum"] = score_momentum(mom, extras.macd_state)
    scores["trend"], reasons["trend"] = score_trend(price, ma50_value, ma200_value)
    scores["valuation"], reasons["valuation"] = score_valuation(metrics)
    scores["sentiment"], reasons["sentiment"] = score_sentiment(avg_sent, article_count)
    scores["analyst"], reasons["analyst"] = score_analyst(
        consensus, upside, extras.rating_changes, as_of
    )
    scores["earnings"], reasons["earnings"] = score_earnings(earnings)
    if smart_money is not None:
        scores[SMART_MONEY], reasons[SMART_MONEY] = score_smart_money(smart_money)

    strategy = select_strategy(mom.get("3m"), scores["trend"], smart_money is not None, config)
    weights = strategy.weights.as_dict()

    raw_total = sum(scores.get(name, 0.0) * weight for name, weight in weights.items())
    penalty, contradictions = evaluate_contradictions(scores, config.contradiction_rules)
    total = raw_total - penalty

    raw_verdict = classify_total(total, config.buy_threshold, config.hold_threshold)
    verdict, gates = apply_gates(raw_verdict, GateContext(scores, total), config.gate_rules)

    pe = positive_pe(metrics)
    uncertainty = _uncertainty_flags(scores, pe, article_count)
    if strategy.is_bear:
        uncertainty.append(
            f"Bear regime: 3-month {mom.get('3m')}% with negative trend, "
            f"weights shifted to momentum and trend"
        )
    uncertainty.extend(gates)

    result = ScoreResult(
        scores=scores,
        reasons=reasons,
        weights=weights,
        raw_total=round(raw_total, 4),
        contradiction_penalty=penalty,
        total=round(total, 4),
        pct=to_pct(total),
        verdict=verdict,
        color=VERDICT_COLORS[verdict],
        conviction=compute_conviction(scores, penalty),
        factors_agree=count_positive(scores),
        factors_disagree=count_negative(scores),
        contradictions=contradictions,
        gates=gates,
        uncertainty=uncertainty,
        flags=news_flags(scored_news, smart_money, price),
        regime=strategy.regime.value,
        bear_regime=strategy.is_bear,
        mom=mom,
        avg_sent=avg_sent,
        scored_news=scored_news,
        pe=pe,
        upside_pct=upside,
    )

    logger.debug(
        f"Scored: total={result.total} pct={result.pct} verdict={verdict.value} "
        f"(raw {raw_verdict.value}) regime={result.regime} conviction={result.conviction}"
    )
    validate_result_invariants(result)
    return result


def validate_result_invariants(result: ScoreResult) -> None:
    """
    Check internal consistency of a result.

    Invariants checked:
    1. Every factor score is within [-1, 1]
    2. pct is within [0, 100] and conviction within [0, 100]
    3. Weights cover only scored factors and sum to 1.0
    4. A BUY verdict has at least 3 positive factors and trend or momentum positive

    Logs warnings for violations rather than raising (production-safe).
    """
    violations: list[str] = []

    for name, value in result.scores.items():
        if not -1.0 <= value <= 1.0:
            violations.append(f"scores.{name}={value} outside [-1, 1]")

    if not 0.0 <= result.pct <= 100.0:
        violations.append(f"pct={result.pct} outside [0, 100]")
    if not 0.0 <= result.conviction <= 100.0:
        violations.append(f"conviction={result.conviction} outside [0, 100]")

    for name in result.weights:
        if name not in result.scores:
            violations.append(f"weights.{name} present but {name} not scored")
    weight_sum = sum(result.weights.values())
    if result.weights and abs(weight_sum - 1.0) > 0.0001:
        violations.append(f"sum(weights)={weight_sum} but expected 1.0")

    if result.verdict is Verdict.BUY:
        if result.factors_agree < 3:
            violations.append(f"verdict=BUY but factors_agree={result.factors_agree}")
        if not (result.scores.get("trend", 0) > 0 or result.scores.get("momentum", 0) > 0):
            violations.append("verdict=BUY without trend or momentum confirmation")

    for v in violations:
        logger.warning(f"Score invariant violation: {v}")
