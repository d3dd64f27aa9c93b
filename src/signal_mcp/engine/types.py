"""Input snapshots and the scoring result record."""

import math
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any

import pandas as pd

FACTORS: tuple[str, ...] = (
    "momentum",
    "trend",
    "valuation",
    "sentiment",
    "analyst",
    "earnings",
)
SMART_MONEY = "smartmoney"


def finite_or_none(value: Any) -> float | None:
    """Coerce to float, mapping None/NaN/inf/non-numeric to None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


class Verdict(str, Enum):
    """Discrete recommendation class."""

    BUY = "BUY"
    HOLD = "HOLD"
    AVOID = "AVOID"


VERDICT_COLORS: dict[Verdict, str] = {
    Verdict.BUY: "#00C805",
    Verdict.HOLD: "#FFD700",
    Verdict.AVOID: "#FF5000",
}


@dataclass(frozen=True)
class Quote:
    """Current price snapshot."""

    price: float
    previous_close: float | None = None
    change_pct: float | None = None
    high_52w: float | None = None
    low_52w: float | None = None

    def day_change_pct(self) -> float | None:
        """Day change in percent, derived from previous close when not supplied."""
        change = finite_or_none(self.change_pct)
        if change is not None:
            return change
        price = finite_or_none(self.price)
        prev = finite_or_none(self.previous_close)
        if price is None or not prev:
            return None
        return round((price / prev - 1) * 100, 2)


@dataclass(frozen=True)
class CandleSeries:
    """Daily OHLCV bars, oldest first."""

    closes: tuple[float, ...]
    volumes: tuple[float, ...] = ()
    timestamps: tuple[int, ...] = ()
    opens: tuple[float, ...] = ()
    highs: tuple[float, ...] = ()
    lows: tuple[float, ...] = ()
    ma50: float | None = None
    ma200: float | None = None

    def __len__(self) -> int:
        return len(self.closes)

    def close_series(self) -> pd.Series:
        return pd.Series(self.closes, dtype="float64")

    def volume_series(self) -> pd.Series:
        return pd.Series(self.volumes, dtype="float64")

    def last_date(self) -> date | None:
        """Calendar date of the newest bar (UTC), if timestamps are present."""
        if not self.timestamps:
            return None
        return pd.Timestamp(self.timestamps[-1], unit="s", tz="UTC").date()


@dataclass(frozen=True)
class Metrics:
    """
    Fundamental ratios. Every field is optional.

    Percent-denominated fields (roe, revenue_growth_yoy, dividend_yield) use
    percent units, e.g. 18.5 means 18.5%. debt_to_equity is a plain ratio.
    """

    pe_ttm: float | None = None
    pb: float | None = None
    roe: float | None = None
    peg: float | None = None
    fcf_per_share: float | None = None
    revenue_growth_yoy: float | None = None
    debt_to_equity: float | None = None
    current_ratio: float | None = None
    dividend_yield: float | None = None


@dataclass(frozen=True)
class NewsArticle:
    title: str = ""
    body: str = ""
    source: str = ""
    timestamp: int | None = None


@dataclass(frozen=True)
class AnalystPeriod:
    """Rating counts for one reporting period."""

    strong_buy: int = 0
    buy: int = 0
    hold: int = 0
    sell: int = 0
    strong_sell: int = 0
    period: str | None = None

    @property
    def total(self) -> int:
        return self.strong_buy + self.buy + self.hold + self.sell + self.strong_sell

    def bullish_share(self) -> float | None:
        """Share of strong-buy + buy ratings, or None without coverage."""
        if self.total <= 0:
            return None
        return (self.strong_buy + self.buy) / self.total


@dataclass(frozen=True)
class RatingChange:
    """A single broker rating event: upgrade, downgrade or initiated."""

    action: str
    on: date
    firm: str | None = None


@dataclass(frozen=True)
class AnalystConsensus:
    """Current rating distribution plus reported periods, most recent first.

    history[0] is the current period; drift compares history[0] with history[1].
    """

    current: AnalystPeriod
    history: tuple[AnalystPeriod, ...] = ()


@dataclass(frozen=True)
class EarningsQuarter:
    period: str | None = None
    eps_estimate: float | None = None
    eps_actual: float | None = None
    revenue_estimate: float | None = None
    revenue_actual: float | None = None

    def surprise_pct(self) -> float | None:
        """EPS surprise in percent of the absolute estimate."""
        estimate = finite_or_none(self.eps_estimate)
        actual = finite_or_none(self.eps_actual)
        if estimate is None or actual is None or estimate == 0:
            return None
        return (actual - estimate) / abs(estimate) * 100

    def revenue_beat(self) -> bool | None:
        estimate = finite_or_none(self.revenue_estimate)
        actual = finite_or_none(self.revenue_actual)
        if estimate is None or actual is None:
            return None
        return actual > estimate


@dataclass(frozen=True)
class SmartMoneySignal:
    insider_buys: int = 0
    insider_sells: int = 0
    legislator_buys: int = 0
    cluster_level: str | None = None
    cluster_label: str | None = None


@dataclass(frozen=True)
class MacdState:
    """Precomputed MACD condition supplied by the caller."""

    bullish_cross: bool = False
    bearish_cross: bool = False
    trend: str | None = None


@dataclass(frozen=True)
class Extras:
    price_target: float | None = None
    rating_changes: tuple[RatingChange, ...] = ()
    macd_state: MacdState | None = None
    as_of: date | None = None


@dataclass(frozen=True)
class ArticleScore:
    """Per-article sentiment annotation."""

    title: str
    source: str
    score: float
    tier: int
    weight: float
    weighted: float


@dataclass(frozen=True)
class ScoreResult:
    scores: dict[str, float]
    reasons: dict[str, list[str]]
    weights: dict[str, float]
    raw_total: float
    contradiction_penalty: float
    total: float
    pct: float
    verdict: Verdict
    color: str
    conviction: float
    factors_agree: int
    factors_disagree: int
    contradictions: list[str]
    gates: list[str]
    uncertainty: list[str]
    flags: list[str]
    regime: str
    bear_regime: bool
    mom: dict[str, float]
    avg_sent: float
    scored_news: list[ArticleScore] = field(default_factory=list)
    pe: float | None = None
    upside_pct: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-ready dict (verdict as its string value)."""
        out = asdict(self)
        out["verdict"] = self.verdict.value
        return out
