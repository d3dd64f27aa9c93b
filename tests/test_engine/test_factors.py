"""Tests for the momentum, trend, valuation, analyst, earnings and smart-money factors."""

from datetime import date

import pytest

from signal_mcp.engine import (
    AnalystConsensus,
    AnalystPeriod,
    CandleSeries,
    EarningsQuarter,
    MacdState,
    Metrics,
    Quote,
    RatingChange,
    SmartMoneySignal,
)
from signal_mcp.engine.analyst import count_rating_changes, price_target_upside, score_analyst
from signal_mcp.engine.earnings import beat_streak, score_earnings, surprise_series
from signal_mcp.engine.momentum import extract_momentum, score_momentum
from signal_mcp.engine.smart_money import InsiderTrade, cluster_signal, score_smart_money
from signal_mcp.engine.trend import score_trend
from signal_mcp.engine.valuation import positive_pe, score_valuation


class TestExtractMomentum:
    """Tests for the momentum map."""

    def test_no_quote(self) -> None:
        """Without a quote the map is empty."""
        assert extract_momentum(None, None) == {}

    def test_quote_only(self) -> None:
        """A bare quote yields the day change and 52-week distances."""
        mom = extract_momentum(Quote(price=95.0, previous_close=100.0, high_52w=100.0, low_52w=50.0), None)
        assert mom == {"1d": -5.0, "pct_from_high": 5.0, "pct_from_low": 90.0}

    def test_from_candles(self, uptrend_quote: Quote, uptrend_candles: CandleSeries) -> None:
        """Returns use the close 20 and 60 rows from the end."""
        mom = extract_momentum(uptrend_quote, uptrend_candles)
        assert mom["1m"] == 3.49
        assert mom["3m"] == 10.51
        assert mom["rsi"] == 66.7
        assert mom["volume_ratio"] == 1.0

    def test_short_history(self, uptrend_quote: Quote) -> None:
        """Fewer than 15 closes leaves RSI out."""
        candles = CandleSeries(closes=tuple(float(100 + i) for i in range(10)))
        mom = extract_momentum(uptrend_quote, candles)
        assert "rsi" not in mom
        assert "1m" not in mom


class TestScoreMomentum:
    """Tests for the momentum factor."""

    def test_empty(self) -> None:
        """No price data yields 0 with a reason."""
        assert score_momentum({}) == (0.0, ["No price data for momentum"])

    def test_day_change_clamped(self) -> None:
        """The 1-day term is capped at 0.3."""
        score, reasons = score_momentum({"1d": 10.0})
        assert score == pytest.approx(0.3)
        assert "RSI unavailable (need 15+ closes)" in reasons

    def test_oversold_bounce(self) -> None:
        """Oversold RSI after a mild decline adds bounce potential."""
        score, _ = score_momentum({"3m": -5.0, "rsi": 25.0})
        assert score == pytest.approx(0.05)

    def test_falling_knife(self) -> None:
        """Oversold RSI inside a deep decline is penalized instead."""
        score, reasons = score_momentum({"3m": -20.0, "rsi": 25.0})
        assert score == pytest.approx(-0.4)
        assert any("falling knife" in r for r in reasons)

    def test_overbought(self) -> None:
        """Overbought RSI subtracts 0.2."""
        score, _ = score_momentum({"rsi": 80.0})
        assert score == pytest.approx(-0.2)

    def test_volume_confirms_direction(self) -> None:
        """Heavy volume follows the sign of the day move."""
        up, _ = score_momentum({"1d": 1.0, "volume_ratio": 3.0, "rsi": 50.0})
        down, _ = score_momentum({"1d": -1.0, "volume_ratio": 3.0, "rsi": 50.0})
        assert up == pytest.approx(0.5)
        assert down == pytest.approx(-0.5)

    def test_volume_skipped_on_flat_day(self) -> None:
        """A flat day has no direction to confirm."""
        score, _ = score_momentum({"1d": 0.0, "volume_ratio": 3.0, "rsi": 50.0})
        assert score == 0.0

    def test_thin_volume(self) -> None:
        """Very light volume subtracts 0.1 regardless of direction."""
        score, _ = score_momentum({"1d": 0.0, "volume_ratio": 0.3, "rsi": 50.0})
        assert score == pytest.approx(-0.1)

    @pytest.mark.parametrize(
        "macd,expected",
        [
            (MacdState(bullish_cross=True, trend="bullish"), 0.25),
            (MacdState(bearish_cross=True, trend="bearish"), -0.25),
            (MacdState(trend="bullish"), 0.1),
            (MacdState(trend="bearish"), -0.1),
        ],
    )
    def test_macd(self, macd: MacdState, expected: float) -> None:
        """Crosses outweigh the plain MACD trend."""
        score, _ = score_momentum({"1d": 0.0, "rsi": 50.0}, macd)
        assert score == pytest.approx(expected)

    def test_near_high_takes_precedence(self) -> None:
        """Only the first matching 52-week band applies."""
        score, _ = score_momentum({"pct_from_high": 3.0, "pct_from_low": 5.0, "rsi": 50.0})
        assert score == pytest.approx(0.2)

    def test_near_low(self) -> None:
        """Near the 52-week low subtracts 0.15."""
        score, _ = score_momentum({"pct_from_high": 40.0, "pct_from_low": 5.0, "rsi": 50.0})
        assert score == pytest.approx(-0.15)

    def test_bounded(self) -> None:
        """Stacked positive terms clamp at 1.0."""
        score, _ = score_momentum(
            {"1d": 5.0, "1m": 20.0, "3m": 30.0, "rsi": 50.0, "volume_ratio": 3.0, "pct_from_high": 1.0},
            MacdState(bullish_cross=True),
        )
        assert score == 1.0


class TestScoreTrend:
    """Tests for the moving-average trend factor."""

    def test_missing_ma50(self) -> None:
        """Without a 50-day average the factor is 0."""
        assert score_trend(100.0, None) == (0.0, ["50-day moving average unavailable"])

    def test_ma50_term_clamped(self) -> None:
        """Distance to the 50-day average caps at 0.7."""
        score, _ = score_trend(110.0, 100.0)
        assert score == pytest.approx(0.7)

    def test_small_distance(self) -> None:
        """2% above the 50-day average scores 0.2."""
        score, reasons = score_trend(102.0, 100.0)
        assert score == pytest.approx(0.2)
        assert reasons == ["Price 2.0% above 50-day MA ($100.00)"]

    def test_below_both_with_death_cross(self) -> None:
        """Both terms negative and saturated."""
        score, reasons = score_trend(90.0, 100.0, 120.0)
        assert score == pytest.approx(-1.0)
        assert "Below both moving averages" in reasons
        assert "Death cross (50-day below 200-day)" in reasons

    def test_golden_cross(self) -> None:
        """50-day above 200-day is reported as a golden cross."""
        _, reasons = score_trend(105.0, 100.0, 90.0)
        assert "Above both moving averages" in reasons
        assert "Golden cross (50-day above 200-day)" in reasons


class TestScoreValuation:
    """Tests for the valuation factor."""

    def test_no_metrics(self) -> None:
        """Missing fundamentals yield 0 with a reason."""
        assert score_valuation(None) == (0.0, ["Fundamentals unavailable"])

    def test_empty_metrics(self) -> None:
        """Metrics with every field missing score 0."""
        assert score_valuation(Metrics()) == (0.0, ["P/E unavailable"])

    def test_strong_fundamentals(self, strong_metrics: Metrics) -> None:
        """PEG, ROE, FCF, leverage and liquidity all contribute."""
        score, _ = score_valuation(strong_metrics)
        assert score == pytest.approx(0.9)

    def test_peg_preferred_over_pe(self) -> None:
        """A cheap PEG wins over an expensive P/E."""
        score, reasons = score_valuation(Metrics(pe_ttm=50.0, peg=0.7))
        assert score == pytest.approx(0.6)
        assert not any("P/E" in r for r in reasons)

    def test_non_positive_peg_falls_back_to_pe(self) -> None:
        """A negative PEG is ignored."""
        score, _ = score_valuation(Metrics(pe_ttm=10.0, peg=-1.0))
        assert score == pytest.approx(0.6)

    def test_high_pe_with_growth(self) -> None:
        """High P/E backed by revenue growth is penalized less."""
        with_growth, _ = score_valuation(Metrics(pe_ttm=40.0, revenue_growth_yoy=25.0))
        without, _ = score_valuation(Metrics(pe_ttm=40.0))
        assert with_growth == pytest.approx(-0.15)
        assert without == pytest.approx(-0.55)

    def test_dividend_ignored_for_fair_peg(self) -> None:
        """Dividends only count when PEG is absent or above 1.5."""
        fair, _ = score_valuation(Metrics(peg=1.0, dividend_yield=5.0))
        rich, _ = score_valuation(Metrics(peg=1.8, dividend_yield=5.0))
        assert fair == pytest.approx(0.3)
        assert rich == pytest.approx(0.05)

    @pytest.mark.parametrize(
        "de,expected",
        [(0.3, 0.15), (0.7, 0.05), (1.5, -0.15), (3.0, -0.35)],
    )
    def test_debt_bands(self, de: float, expected: float) -> None:
        """Debt/equity contributes one band term."""
        score, _ = score_valuation(Metrics(debt_to_equity=de))
        assert score == pytest.approx(expected)

    def test_positive_pe(self) -> None:
        """Negative earnings have no meaningful P/E."""
        assert positive_pe(Metrics(pe_ttm=-12.0)) is None
        assert positive_pe(Metrics(pe_ttm=22.0)) == 22.0
        assert positive_pe(None) is None


class TestScoreAnalyst:
    """Tests for the analyst factor."""

    def test_no_coverage(self) -> None:
        """No consensus yields 0 with a reason."""
        assert score_analyst(None) == (0.0, ["No analyst coverage"])

    def test_distribution(self) -> None:
        """Buy-heavy distribution scores (bull - bear) * 2."""
        consensus = AnalystConsensus(current=AnalystPeriod(strong_buy=2, buy=4, hold=4))
        score, reasons = score_analyst(consensus)
        assert score == pytest.approx(0.8)
        assert reasons[0].startswith("Wall St: 2 Strong Buy, 4 Buy, 4 Hold")

    def test_price_target_upside(self) -> None:
        """Upside is rounded to one decimal."""
        assert price_target_upside(100.0, 125.0) == 25.0
        assert price_target_upside(None, 125.0) is None
        assert price_target_upside(100.0, None) is None

    @pytest.mark.parametrize("upside,expected", [(25.0, 0.3), (15.0, 0.15), (5.0, 0.0), (-15.0, -0.2)])
    def test_upside_terms(self, upside: float, expected: float) -> None:
        """Upside bands add or subtract a fixed term."""
        score, _ = score_analyst(None, upside_pct=upside)
        assert score == pytest.approx(expected)

    def test_rating_window(self) -> None:
        """Only changes in the trailing 30 days count."""
        as_of = date(2024, 6, 30)
        changes = (
            RatingChange("upgrade", date(2024, 6, 20)),
            RatingChange("upgrade", date(2024, 6, 25)),
            RatingChange("downgrade", date(2024, 1, 2)),
            RatingChange("initiated", date(2024, 6, 26)),
        )
        assert count_rating_changes(changes, as_of) == (2, 0)
        score, reasons = score_analyst(None, rating_changes=changes, as_of=as_of)
        assert score == pytest.approx(0.25)
        assert "2 upgrades vs 0 downgrades in 30 days" in reasons

    def test_single_net_upgrade_not_enough(self) -> None:
        """Net upgrades must exceed one."""
        changes = (RatingChange("upgrade", date(2024, 6, 20)),)
        score, _ = score_analyst(None, rating_changes=changes, as_of=date(2024, 6, 30))
        assert score == 0.0

    def test_net_downgrades(self) -> None:
        """Any net downgrade subtracts 0.25."""
        changes = (RatingChange("downgrade", date(2024, 6, 20)),)
        score, _ = score_analyst(None, rating_changes=changes, as_of=date(2024, 6, 30))
        assert score == pytest.approx(-0.25)

    def test_without_anchor_every_event_counts(self) -> None:
        """No as_of date means no window."""
        changes = (
            RatingChange("upgrade", date(2020, 1, 1)),
            RatingChange("upgrade", date(2021, 1, 1)),
        )
        assert count_rating_changes(changes, None) == (2, 0)

    def test_consensus_drift(self) -> None:
        """Bullish share rising more than 8pp month over month adds 0.15."""
        consensus = AnalystConsensus(
            current=AnalystPeriod(),
            history=(AnalystPeriod(strong_buy=7, hold=3), AnalystPeriod(strong_buy=5, hold=5)),
        )
        score, reasons = score_analyst(consensus)
        assert score == pytest.approx(0.15)
        assert any("turning bullish" in r for r in reasons)


class TestScoreEarnings:
    """Tests for the earnings factor."""

    def test_no_data(self) -> None:
        """No quarters yields 0 with a reason."""
        assert score_earnings([]) == (0.0, ["No earnings data"])
        assert score_earnings(None) == (0.0, ["No earnings data"])

    def test_no_estimates(self) -> None:
        """Quarters without usable estimates yield 0."""
        quarters = [EarningsQuarter(eps_actual=1.0), EarningsQuarter(eps_estimate=0.0, eps_actual=1.0)]
        assert score_earnings(quarters) == (0.0, ["No usable EPS estimates"])

    def test_surprise_series(self) -> None:
        """Surprise is relative to the absolute estimate."""
        quarters = [EarningsQuarter(eps_estimate=-0.5, eps_actual=-0.4), EarningsQuarter()]
        assert surprise_series(quarters) == [pytest.approx(20.0)]

    def test_beat_streak(self) -> None:
        """Streak stops at the first miss or inline quarter."""
        assert beat_streak([5.0, 3.0, -1.0, 4.0]) == 2
        assert beat_streak([0.0, 3.0]) == 0

    def test_consistent_beats(self, beat_quarters: list[EarningsQuarter]) -> None:
        """Four 10% beats saturate the factor."""
        score, reasons = score_earnings(beat_quarters)
        assert score == 1.0
        assert "4 consecutive beats" in reasons

    def test_consistent_misses(self) -> None:
        """Four 10% misses score -0.9."""
        quarters = [EarningsQuarter(eps_estimate=1.0, eps_actual=0.9) for _ in range(4)]
        score, _ = score_earnings(quarters)
        assert score == pytest.approx(-0.9)

    def test_acceleration(self) -> None:
        """Latest surprise well above two quarters ago adds 0.2."""
        quarters = [
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.2),
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.1),
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.0),
        ]
        _, reasons = score_earnings(quarters)
        assert any("accelerating" in r for r in reasons)

    def test_acceleration_needs_both_quarters(self) -> None:
        """A quarter without an estimate two back means no acceleration term."""
        quarters = [
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.2),
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.1),
            EarningsQuarter(eps_estimate=None, eps_actual=1.05),
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.0),
        ]
        _, reasons = score_earnings(quarters)
        assert not any("accelerating" in r or "decelerating" in r for r in reasons)

    def test_acceleration_skips_missing_latest(self) -> None:
        """No surprise for the latest quarter means no acceleration term."""
        quarters = [
            EarningsQuarter(eps_estimate=None, eps_actual=1.5),
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.3),
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.1),
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.0),
        ]
        _, reasons = score_earnings(quarters)
        assert not any("accelerating" in r or "decelerating" in r for r in reasons)

    def test_revenue_misses(self) -> None:
        """Low revenue beat rate subtracts 0.15."""
        quarters = [
            EarningsQuarter(eps_estimate=1.0, eps_actual=1.0, revenue_estimate=100.0, revenue_actual=90.0)
            for _ in range(4)
        ]
        score, reasons = score_earnings(quarters)
        assert score == pytest.approx(-0.75)
        assert "Revenue missed 4/4 qtrs" in reasons


class TestSmartMoney:
    """Tests for insider clustering and the smart-money factor."""

    def test_cluster_levels(self) -> None:
        """Buyers inside the 30-day window set the cluster level."""
        as_of = date(2024, 6, 30)
        buys = [InsiderTrade(on=date(2024, 6, d), is_buy=True) for d in (5, 10, 20)]
        assert cluster_signal(buys, as_of)[0] == "strong"
        assert cluster_signal(buys[:2], as_of)[0] == "moderate"
        assert cluster_signal(buys[:1], as_of)[0] == "weak"
        assert cluster_signal([], as_of) == (None, None)

    def test_cluster_ignores_old_and_sells(self) -> None:
        """Sells and buys outside the window do not count."""
        as_of = date(2024, 6, 30)
        trades = [
            InsiderTrade(on=date(2024, 3, 1), is_buy=True),
            InsiderTrade(on=date(2024, 6, 20), is_buy=False),
        ]
        assert cluster_signal(trades, as_of) == (None, None)

    def test_no_activity(self) -> None:
        """An empty signal scores 0 with a reason."""
        assert score_smart_money(SmartMoneySignal()) == (0.0, ["No smart money activity"])

    def test_strong_cluster_with_legislators(self) -> None:
        """Strong cluster plus congressional buying clamps at 1.0."""
        signal = SmartMoneySignal(insider_buys=3, legislator_buys=3, cluster_level="strong")
        score, _ = score_smart_money(signal)
        assert score == 1.0

    def test_net_selling(self) -> None:
        """More sells than buys subtracts 0.35."""
        score, reasons = score_smart_money(SmartMoneySignal(insider_buys=1, insider_sells=4))
        assert score == pytest.approx(-0.05)
        assert any("net sellers" in r for r in reasons)
