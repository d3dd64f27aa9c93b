"""Request validation."""

from dataclasses import dataclass
from typing import Any

# One year of daily bars covers the 200-day average and the 52-week range
HISTORY_PERIOD = "1y"
MAX_NEWS_DAYS = 30


@dataclass(frozen=True)
class ScoreRequest:
    """Immutable scoring request. Used for fetching and provenance."""

    symbol: str
    news_days: int = 7
    include_smart_money: bool = True

    def __post_init__(self) -> None:
        symbol = (self.symbol or "").upper().strip()
        if not symbol:
            raise ValueError("Symbol must not be empty")
        object.__setattr__(self, "symbol", symbol)

        if not 1 <= self.news_days <= MAX_NEWS_DAYS:
            raise ValueError(
                f"Invalid news_days {self.news_days}. Must be between 1 and {MAX_NEWS_DAYS}"
            )

    def to_yf_kwargs(self) -> dict[str, Any]:
        """Kwargs for yf.download()."""
        return {
            "tickers": self.symbol,
            "period": HISTORY_PERIOD,
            "interval": "1d",
            "auto_adjust": True,
            "progress": False,
        }
