"""Score two symbols side by side."""

import asyncio
from time import perf_counter
from typing import Any

from signal_mcp.tools.score import score_symbol
from signal_mcp.tools.screen import screen_row
from signal_mcp.utils.provenance import build_error_response, build_meta

# Factor score gap below which neither side has the edge
EDGE_THRESHOLD = 0.05


async def compare_symbols(
    symbol_a: str,
    symbol_b: str,
    include_smart_money: bool = True,
) -> dict[str, Any]:
    """
    Score two symbols and report which leads, overall and per factor.

    Args:
        symbol_a: First ticker symbol
        symbol_b: Second ticker symbol
        include_smart_money: Score insider activity for both symbols

    Returns:
        Dict with both rows, leader, pct gap, per-factor edges and meta
    """
    start_time = perf_counter()

    a = (symbol_a or "").upper().strip()
    b = (symbol_b or "").upper().strip()
    if not a or not b:
        return build_error_response("invalid_request", "Two symbols are required")
    if a == b:
        return build_error_response("invalid_request", "Symbols must be different", symbol=a)

    scored_a, scored_b = await asyncio.gather(
        score_symbol(a, include_smart_money=include_smart_money),
        score_symbol(b, include_smart_money=include_smart_money),
    )
    for symbol, response in ((a, scored_a), (b, scored_b)):
        if response.get("error"):
            return build_error_response(
                response.get("error_type", "data_unavailable"),
                f"Could not score {symbol}: {response.get('message')}",
                symbol=symbol,
            )

    row_a = screen_row(a, scored_a)
    row_b = screen_row(b, scored_b)
    row_a["mom"] = scored_a["result"]["mom"]
    row_b["mom"] = scored_b["result"]["mom"]

    leader = a if row_a["pct"] >= row_b["pct"] else b

    edges: dict[str, str] = {}
    for factor, score_a in row_a["scores"].items():
        score_b = row_b["scores"].get(factor)
        if score_b is None:
            continue
        diff = score_a - score_b
        if diff > EDGE_THRESHOLD:
            edges[factor] = a
        elif diff < -EDGE_THRESHOLD:
            edges[factor] = b
        else:
            edges[factor] = "even"

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "symbols": [a, b],
        "results": {a: row_a, b: row_b},
        "leader": leader,
        "gap": round(abs(row_a["pct"] - row_b["pct"]), 1),
        "factor_edges": edges,
        "warnings": {a: scored_a["warnings"], b: scored_b["warnings"]},
        "meta": build_meta("compare_symbols", duration_ms),
    }
