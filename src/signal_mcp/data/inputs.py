"""Map raw yfinance payloads onto engine input snapshots.

Every adapter is pure and tolerant: missing or malformed payloads produce
None (or an empty sequence) so the engine can skip the affected terms.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pandas as pd

from signal_mcp.engine.smart_money import InsiderTrade, cluster_signal
from signal_mcp.engine.types import (
    AnalystConsensus,
    AnalystPeriod,
    CandleSeries,
    EarningsQuarter,
    MacdState,
    Metrics,
    NewsArticle,
    Quote,
    RatingChange,
    SmartMoneySignal,
    finite_or_none,
)
from signal_mcp.utils.indicators import calculate_macd, latest_sma
from signal_mcp.utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

MACD_MIN_POINTS = 30

# yfinance upgrades_downgrades "Action" codes
_RATING_ACTIONS = {
    "up": "upgrade",
    "down": "downgrade",
    "init": "initiated",
}


def _first_number(info: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = finite_or_none(info.get(key))
        if value is not None:
            return value
    return None


def _scaled(value: float | None, factor: float) -> float | None:
    return None if value is None else value * factor


def _to_date(value: Any) -> date | None:
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def quote_from_info(info: dict[str, Any] | None) -> Quote | None:
    """Build a Quote from Ticker.info; None when no usable price exists."""
    if not info:
        return None

    price = _first_number(info, "currentPrice", "regularMarketPrice")
    if price is None or price <= 0:
        return None

    return Quote(
        price=price,
        previous_close=_first_number(info, "regularMarketPreviousClose", "previousClose"),
        change_pct=_first_number(info, "regularMarketChangePercent"),
        high_52w=_first_number(info, "fiftyTwoWeekHigh"),
        low_52w=_first_number(info, "fiftyTwoWeekLow"),
    )


def candles_from_frame(df: pd.DataFrame | None) -> CandleSeries | None:
    """
    Build a CandleSeries from yf.download output (oldest row first).

    Handles the MultiIndex columns yf.download returns for a single ticker
    and drops rows without a close.
    """
    if df is None or df.empty:
        return None

    df = df.copy()
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)
    df.columns = [str(c).lower() for c in df.columns]

    if "close" not in df.columns:
        logger.warning("Price history has no close column")
        return None

    df = df[df["close"].notna()].sort_index()
    if df.empty:
        return None

    def _column(name: str) -> tuple[float, ...]:
        if name not in df.columns:
            return ()
        return tuple(float(v) for v in df[name].fillna(0.0))

    index = pd.DatetimeIndex(df.index)
    if index.tz is None:
        index = index.tz_localize("UTC")
    timestamps = tuple(int(ts.timestamp()) for ts in index)

    closes = df["close"].astype("float64")
    return CandleSeries(
        closes=tuple(float(v) for v in closes),
        volumes=_column("volume"),
        timestamps=timestamps,
        opens=_column("open"),
        highs=_column("high"),
        lows=_column("low"),
        ma50=latest_sma(closes, 50),
        ma200=latest_sma(closes, 200),
    )


def metrics_from_info(info: dict[str, Any] | None) -> Metrics | None:
    """
    Build Metrics from Ticker.info, converting to engine units.

    yfinance reports returnOnEquity, revenueGrowth and
    trailingAnnualDividendYield as fractions and debtToEquity in percent.
    dividendYield is already in percent.
    """
    if not info:
        return None

    dividend_yield = _scaled(_first_number(info, "trailingAnnualDividendYield"), 100)
    if not dividend_yield:
        dividend_yield = _first_number(info, "dividendYield")

    fcf_per_share = None
    fcf = _first_number(info, "freeCashflow")
    shares = _first_number(info, "sharesOutstanding")
    if fcf is not None and shares:
        fcf_per_share = round(fcf / shares, 4)

    metrics = Metrics(
        pe_ttm=_first_number(info, "trailingPE"),
        pb=_first_number(info, "priceToBook"),
        roe=_scaled(_first_number(info, "returnOnEquity"), 100),
        peg=_first_number(info, "pegRatio", "trailingPegRatio"),
        fcf_per_share=fcf_per_share,
        revenue_growth_yoy=_scaled(_first_number(info, "revenueGrowth"), 100),
        debt_to_equity=_scaled(_first_number(info, "debtToEquity"), 0.01),
        current_ratio=_first_number(info, "currentRatio"),
        dividend_yield=dividend_yield,
    )
    if metrics == Metrics():
        return None
    return metrics


def news_from_items(
    items: Iterable[dict[str, Any]] | None,
    days: int = 7,
    now: datetime | None = None,
) -> list[NewsArticle]:
    """Convert Ticker.news items published within `days` into NewsArticles, newest first."""
    if not items:
        return []

    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)
    articles: list[NewsArticle] = []

    for item in items:
        content = item.get("content") or {}
        pub_date_str = content.get("pubDate")
        if not pub_date_str:
            continue

        try:
            pub_date = datetime.fromisoformat(pub_date_str.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            continue
        if pub_date.tzinfo is None:
            pub_date = pub_date.replace(tzinfo=timezone.utc)

        if pub_date < cutoff:
            continue

        provider = (content.get("provider") or {}).get("displayName")
        articles.append(NewsArticle(
            title=sanitize_text(content.get("title") or "", max_length=200) or "",
            body=sanitize_text(content.get("summary") or "", max_length=500) or "",
            source=sanitize_text(provider or "", max_length=50) or "",
            timestamp=int(pub_date.timestamp()),
        ))

    articles.sort(key=lambda a: a.timestamp or 0, reverse=True)
    return articles


def consensus_from_frame(df: pd.DataFrame | None) -> AnalystConsensus | None:
    """
    Build AnalystConsensus from Ticker.recommendations.

    Rows are periods "0m", "-1m", ...; the first row is the current period
    and also heads the history, so drift compares this month with last.
    """
    if df is None or df.empty:
        return None

    periods: list[AnalystPeriod] = []
    for _, row in df.iterrows():
        def _count(key: str) -> int:
            value = finite_or_none(row.get(key))
            return int(value) if value is not None else 0

        periods.append(AnalystPeriod(
            strong_buy=_count("strongBuy"),
            buy=_count("buy"),
            hold=_count("hold"),
            sell=_count("sell"),
            strong_sell=_count("strongSell"),
            period=str(row.get("period")) if row.get("period") is not None else None,
        ))

    return AnalystConsensus(current=periods[0], history=tuple(periods))


def rating_changes_from_frame(
    df: pd.DataFrame | None,
    since: date | None = None,
) -> tuple[RatingChange, ...]:
    """Upgrades, downgrades and initiations from Ticker.upgrades_downgrades."""
    if df is None or df.empty:
        return ()

    changes: list[RatingChange] = []
    for when, row in df.iterrows():
        action = _RATING_ACTIONS.get(str(row.get("Action", "")).lower())
        on = _to_date(when)
        if action is None or on is None:
            continue
        if since is not None and on < since:
            continue
        firm = row.get("Firm")
        changes.append(RatingChange(action=action, on=on, firm=str(firm) if firm else None))

    return tuple(changes)


def price_target_from_dict(targets: dict[str, Any] | None) -> float | None:
    """Consensus price target (mean, then median) from Ticker.analyst_price_targets."""
    if not targets:
        return None
    target = _first_number(targets, "mean", "median")
    if target is None or target <= 0:
        return None
    return target


def earnings_from_frame(df: pd.DataFrame | None) -> list[EarningsQuarter]:
    """Quarters from Ticker.earnings_history, most recent first."""
    if df is None or df.empty:
        return []

    quarters: list[EarningsQuarter] = []
    for when, row in df.sort_index(ascending=False).iterrows():
        on = _to_date(when)
        quarters.append(EarningsQuarter(
            period=on.isoformat() if on is not None else str(when),
            eps_estimate=finite_or_none(row.get("epsEstimate")),
            eps_actual=finite_or_none(row.get("epsActual")),
        ))
    return quarters


def insider_trades_from_frame(df: pd.DataFrame | None) -> list[InsiderTrade]:
    """
    Open-market purchases and sales from Ticker.insider_transactions.

    Awards, gifts and option exercises are neither and are skipped.
    """
    if df is None or df.empty:
        return []

    trades: list[InsiderTrade] = []
    for _, row in df.iterrows():
        text = f"{row.get('Transaction') or ''} {row.get('Text') or ''}".lower()
        if "purchase" in text or "buy" in text:
            is_buy = True
        elif "sale" in text or "sell" in text:
            is_buy = False
        else:
            continue

        on = _to_date(row.get("Start Date"))
        if on is None:
            continue
        insider = row.get("Insider")
        trades.append(InsiderTrade(on=on, is_buy=is_buy, name=str(insider) if insider else None))

    return trades


def smart_money_from_trades(
    trades: Sequence[InsiderTrade],
    as_of: date,
    window_days: int = 90,
) -> SmartMoneySignal:
    """
    Summarize insider trades in the trailing window.

    Legislator disclosures have no yfinance source, so legislator_buys is 0.
    """
    cutoff = as_of - timedelta(days=window_days)
    recent = [t for t in trades if cutoff < t.on <= as_of]
    level, label = cluster_signal(recent, as_of)
    return SmartMoneySignal(
        insider_buys=sum(1 for t in recent if t.is_buy),
        insider_sells=sum(1 for t in recent if not t.is_buy),
        legislator_buys=0,
        cluster_level=level,
        cluster_label=label,
    )


def macd_state_from_closes(
    closes: Sequence[float],
    min_points: int = MACD_MIN_POINTS,
) -> MacdState | None:
    """
    MACD line (EMA12 - EMA26) zero-line cross on the latest bar plus its sign.

    Returns:
        MacdState, or None with fewer than min_points closes
    """
    if len(closes) < min_points:
        return None

    macd_line = calculate_macd(pd.Series(closes, dtype="float64"))["macd_line"]
    cur = float(macd_line.iloc[-1])
    prev = float(macd_line.iloc[-2])

    return MacdState(
        bullish_cross=prev <= 0 < cur,
        bearish_cross=cur < 0 <= prev,
        trend="bullish" if cur > 0 else "bearish",
    )
