"""Pytest configuration and fixtures."""

from datetime import date

import pandas as pd
import pytest

from signal_mcp.engine import (
    AnalystConsensus,
    AnalystPeriod,
    CandleSeries,
    EarningsQuarter,
    Metrics,
    NewsArticle,
    Quote,
)

# 2024-01-01 00:00 UTC
EPOCH_START = 1704067200
DAY = 86400


def _candles(closes: list[float]) -> CandleSeries:
    return CandleSeries(
        closes=tuple(closes),
        volumes=tuple(1_000_000.0 for _ in closes),
        timestamps=tuple(EPOCH_START + i * DAY for i in range(len(closes))),
    )


@pytest.fixture
def sample_ohlcv_df() -> pd.DataFrame:
    """Sample OHLCV DataFrame shaped like yf.download output."""
    return pd.DataFrame(
        {
            "Date": pd.date_range("2024-01-01", periods=10, freq="D"),
            "Open": [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5],
            "High": [101.0, 102.5, 103.0, 102.5, 104.5, 105.5, 105.0, 106.5, 107.0, 106.5],
            "Low": [99.5, 100.5, 101.0, 100.5, 102.0, 103.0, 102.5, 104.0, 105.0, 104.5],
            "Close": [100.5, 102.0, 101.5, 102.0, 104.0, 103.5, 104.5, 106.0, 105.5, 106.0],
            "Volume": [1000000] * 10,
        }
    ).set_index("Date")


@pytest.fixture
def sample_price_series() -> pd.Series:
    """Sample price series for indicator testing."""
    return pd.Series(
        [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5,
         107.0, 108.0, 107.5, 109.0, 110.0, 109.5, 111.0, 112.0, 111.5, 113.0,
         114.0, 113.5, 115.0, 116.0, 115.5, 117.0, 118.0, 117.5, 119.0, 120.0]
    )


@pytest.fixture
def uptrend_candles() -> CandleSeries:
    """250 sessions rising in a +1.0 / -0.5 zigzag (RSI ~67), last close 163.0."""
    return _candles([100 + 0.25 * i + (0.75 if i % 2 else 0.0) for i in range(250)])


@pytest.fixture
def uptrend_quote() -> Quote:
    return Quote(price=163.0, change_pct=0.62, high_52w=165.0, low_52w=110.0)


@pytest.fixture
def downtrend_candles() -> CandleSeries:
    """250 sessions falling in a +0.2 / -1.0 zigzag (RSI ~17), last close 101.0."""
    return _candles([200 - 0.4 * i + (0.6 if i % 2 else 0.0) for i in range(250)])


@pytest.fixture
def downtrend_quote() -> Quote:
    return Quote(price=101.0, high_52w=205.0, low_52w=99.0)


@pytest.fixture
def strong_metrics() -> Metrics:
    """PEG 1.0, ROE 25%, FCF $6/share, low leverage: valuation 0.9."""
    return Metrics(
        pe_ttm=18.0,
        peg=1.0,
        roe=25.0,
        fcf_per_share=6.0,
        debt_to_equity=0.4,
        current_ratio=2.5,
    )


@pytest.fixture
def bullish_news() -> list[NewsArticle]:
    """Eight wire-service headlines with three positive keywords each."""
    return [
        NewsArticle(
            title=f"Company beats estimates on record growth ({i})",
            source="Reuters",
            timestamp=EPOCH_START + 240 * DAY + i * 3600,
        )
        for i in range(8)
    ]


@pytest.fixture
def bullish_consensus() -> AnalystConsensus:
    return AnalystConsensus(
        current=AnalystPeriod(strong_buy=10, buy=10, hold=5, period="0m"),
        history=(
            AnalystPeriod(strong_buy=10, buy=10, hold=5, period="0m"),
            AnalystPeriod(strong_buy=10, buy=10, hold=5, period="-1m"),
            AnalystPeriod(strong_buy=10, buy=9, hold=6, period="-2m"),
        ),
    )


@pytest.fixture
def beat_quarters() -> list[EarningsQuarter]:
    """Four straight 10% EPS beats, most recent first."""
    return [
        EarningsQuarter(period=f"2024Q{4 - i}", eps_estimate=1.0, eps_actual=1.1)
        for i in range(4)
    ]


@pytest.fixture
def as_of() -> date:
    return date(2024, 9, 6)
