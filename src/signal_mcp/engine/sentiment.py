"""Lexicon sentiment, source credibility weighting and news aggregation."""

import re
from collections.abc import Sequence

from signal_mcp.engine.config import (
    DEFAULT_LEXICON,
    DEFAULT_SOURCE_TIERS,
    SentimentLexicon,
    SourceTierTable,
)
from signal_mcp.engine.types import ArticleScore, NewsArticle

_TOKEN_SPLIT = re.compile(r"\W+")

# Minimum denominator so a single keyword cannot saturate the score
_MIN_MATCHES = 3
# Outlier trimming kicks in at this many articles
_TRIM_MIN_ARTICLES = 6


def lexicon_sentiment(text: str | None, lexicon: SentimentLexicon = DEFAULT_LEXICON) -> float:
    """
    Score free text into [-1, 1] by counting polarity words.

    Args:
        text: Title and body, any case
        lexicon: Positive/negative word sets

    Returns:
        (pos - neg) / max(matches, 3), clamped; 0.0 when nothing matches
    """
    if not text:
        return 0.0

    pos = neg = 0
    for token in _TOKEN_SPLIT.split(text.lower()):
        if not token:
            continue
        if token in lexicon.positive:
            pos += 1
        if token in lexicon.negative:
            neg += 1

    matches = pos + neg
    if matches == 0:
        return 0.0
    return max(-1.0, min(1.0, (pos - neg) / max(matches, _MIN_MATCHES)))


def credibility_weight(
    source: str | None,
    tiers: SourceTierTable = DEFAULT_SOURCE_TIERS,
) -> tuple[int, float]:
    """Map a source name to (tier, weight); unknown sources land in the default tier."""
    tier = tiers.classify(source)
    return tier.tier, tier.weight


def credibility_sentiment(
    articles: Sequence[NewsArticle] | None,
    tiers: SourceTierTable = DEFAULT_SOURCE_TIERS,
    lexicon: SentimentLexicon = DEFAULT_LEXICON,
) -> tuple[float, list[ArticleScore]]:
    """
    Aggregate credibility-weighted sentiment over a batch of articles.

    With 6 or more articles the single lowest and single highest weighted
    scores are dropped before averaging.

    Returns:
        Tuple of (aggregate rounded to 3 decimals, per-article annotations)
    """
    if not articles:
        return 0.0, []

    scored: list[ArticleScore] = []
    for article in articles:
        raw = lexicon_sentiment(f"{article.title or ''} {article.body or ''}", lexicon)
        tier, weight = credibility_weight(article.source, tiers)
        scored.append(
            ArticleScore(
                title=article.title or "",
                source=article.source or "",
                score=round(raw, 4),
                tier=tier,
                weight=weight,
                weighted=round(raw * weight, 4),
            )
        )

    values = sorted(s.weighted for s in scored)
    if len(values) >= _TRIM_MIN_ARTICLES:
        values = values[1:-1]

    avg = sum(values) / len(values) if values else 0.0
    return round(max(-1.0, min(1.0, avg)), 3), scored


def score_sentiment(avg_sent: float, article_count: int) -> tuple[float, list[str]]:
    """
    Sentiment factor: aggregate scaled by coverage depth.

    Coverage weight grows with article count (8 articles = 1.0, capped at 1.5)
    so a single glowing headline cannot move the factor much.
    """
    coverage = min(article_count / 8, 1.5)
    score = max(-1.0, min(1.0, avg_sent * 1.5 * coverage))

    if avg_sent > 0.08:
        label = "Bullish"
    elif avg_sent < -0.08:
        label = "Bearish"
    else:
        label = "Neutral"

    if article_count == 0:
        return 0.0, ["No recent news coverage"]

    sign = "+" if avg_sent > 0 else ""
    return score, [
        f"Credibility-weighted {sign}{avg_sent} ({label}) from {article_count} articles"
    ]
