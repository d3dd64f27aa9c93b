"""Fundamental valuation factor."""

from signal_mcp.engine.types import Metrics, finite_or_none


def _peg_term(peg: float) -> tuple[float, str]:
    if peg < 0.8:
        return 0.6, f"PEG {peg:.2f}, growth at a discount"
    if peg < 1.2:
        return 0.3, f"PEG {peg:.2f}, fairly priced for growth"
    if peg < 2.0:
        return -0.15, f"PEG {peg:.2f}, paying up for growth"
    return -0.4, f"PEG {peg:.2f}, expensive relative to growth"


def _pe_term(pe: float, revenue_growth: float | None) -> tuple[float, str]:
    if pe < 12:
        return 0.6, f"P/E {pe:.1f}x, deep value"
    if pe < 20:
        return 0.3, f"P/E {pe:.1f}x, fair value"
    if pe < 35:
        return -0.2, f"P/E {pe:.1f}x, growth premium"
    if revenue_growth is not None and revenue_growth > 20:
        return -0.15, f"P/E {pe:.1f}x, high but backed by {revenue_growth:.0f}% revenue growth"
    return -0.55, f"P/E {pe:.1f}x, expensive and miss-prone"


def _debt_term(de: float) -> tuple[float, str]:
    if de < 0.5:
        return 0.15, f"Low leverage (D/E {de:.2f})"
    if de < 1.0:
        return 0.05, f"Moderate leverage (D/E {de:.2f})"
    if de < 2.0:
        return -0.15, f"Elevated leverage (D/E {de:.2f})"
    return -0.35, f"Heavy leverage (D/E {de:.2f})"


def positive_pe(metrics: Metrics | None) -> float | None:
    """Trailing P/E when meaningful (positive earnings)."""
    if metrics is None:
        return None
    pe = finite_or_none(metrics.pe_ttm)
    return pe if pe is not None and pe > 0 else None


def score_valuation(metrics: Metrics | None) -> tuple[float, list[str]]:
    """
    Valuation factor.

    PEG is preferred over raw P/E when available. Dividend yield only counts
    when PEG is absent or above 1.5, so growth names are not penalized twice.

    Returns:
        Tuple of (score in [-1, 1], reasons)
    """
    if metrics is None:
        return 0.0, ["Fundamentals unavailable"]

    score = 0.0
    reasons: list[str] = []

    peg = finite_or_none(metrics.peg)
    if peg is not None and peg <= 0:
        peg = None
    pe = positive_pe(metrics)
    revenue_growth = finite_or_none(metrics.revenue_growth_yoy)

    if peg is not None:
        term, reason = _peg_term(peg)
        score += term
        reasons.append(reason)
    elif pe is not None:
        term, reason = _pe_term(pe, revenue_growth)
        score += term
        reasons.append(reason)
    else:
        reasons.append("P/E unavailable")

    pb = finite_or_none(metrics.pb)
    if pb is not None and pb > 0:
        if pb < 2:
            score += 0.15
            reasons.append(f"P/B {pb:.1f}")
        elif pb > 10:
            score -= 0.15
            reasons.append(f"P/B {pb:.1f}, rich book multiple")

    roe = finite_or_none(metrics.roe)
    if roe is not None and roe > 15:
        score += 0.15
        reasons.append(f"ROE {roe:.1f}%")

    fcf = finite_or_none(metrics.fcf_per_share)
    if fcf is not None:
        if fcf > 5:
            score += 0.2
            reasons.append(f"Strong free cash flow (${fcf:.2f}/share)")
        elif fcf > 0:
            score += 0.1
            reasons.append(f"Positive free cash flow (${fcf:.2f}/share)")
        else:
            score -= 0.2
            reasons.append(f"Negative free cash flow (${fcf:.2f}/share)")

    de = finite_or_none(metrics.debt_to_equity)
    if de is not None and de >= 0:
        term, reason = _debt_term(de)
        score += term
        reasons.append(reason)

    current_ratio = finite_or_none(metrics.current_ratio)
    if current_ratio is not None:
        if current_ratio < 1.0:
            score -= 0.2
            reasons.append(f"Current ratio {current_ratio:.2f}, tight liquidity")
        elif current_ratio >= 2.0:
            score += 0.1
            reasons.append(f"Current ratio {current_ratio:.2f}")

    dividend_yield = finite_or_none(metrics.dividend_yield)
    if dividend_yield is not None and (peg is None or peg > 1.5):
        if dividend_yield > 4:
            score += 0.2
            reasons.append(f"Dividend yield {dividend_yield:.1f}%")
        elif dividend_yield > 2:
            score += 0.1
            reasons.append(f"Dividend yield {dividend_yield:.1f}%")

    return max(-1.0, min(1.0, score)), reasons
