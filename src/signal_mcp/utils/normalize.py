"""Diff-stable signal snapshots for history tracking.

A history collaborator stores {verdict, pct, price, scores, reasons} per
call and later compares them with outcomes. Snapshots are canonicalized so
that two calls on identical inputs hash identically:
1. Key ordering: sorted at every level
2. NaN/inf replaced with null, -0.0 with 0.0
3. Factor scores rounded to 4 decimals
"""

import hashlib
import json
import math
from typing import Any

from signal_mcp.engine.types import ScoreResult

# Snapshot format version - bump when snapshot fields change
SNAPSHOT_VERSION = "1.0.0"


def canonical_dumps(obj: Any) -> str:
    """Produce canonical JSON string with sorted keys and minimal separators.

    Uses allow_nan=False to fail fast if NaN/inf values slip through
    sanitization.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def sanitize_nan_inf(obj: Any) -> Any:
    """Recursively replace NaN/inf with None and -0.0 with 0.0."""
    if isinstance(obj, dict):
        return {k: sanitize_nan_inf(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_nan_inf(item) for item in obj]
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        if obj == 0.0:
            return 0.0
    return obj


def build_signal_snapshot(
    result: ScoreResult,
    symbol: str,
    price: float | None,
) -> dict[str, Any]:
    """
    Build a compact, hashable record of one scoring call.

    Args:
        result: Engine output
        symbol: Ticker the result belongs to
        price: Price at scoring time (for later outcome evaluation)

    Returns:
        Snapshot dict with snapshot_version and snapshot_hash
    """
    snapshot_data = sanitize_nan_inf({
        "snapshot_version": SNAPSHOT_VERSION,
        "symbol": symbol.upper().strip(),
        "price": price,
        "verdict": result.verdict.value,
        "pct": result.pct,
        "conviction": result.conviction,
        "regime": result.regime,
        "scores": {k: round(v, 4) for k, v in result.scores.items()},
        "reasons": {k: list(v) for k, v in result.reasons.items()},
    })

    # Hash includes snapshot_version so version bumps change the hash
    canonical_json = canonical_dumps(snapshot_data)
    snapshot_hash = hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()[:16]

    return {
        **snapshot_data,
        "snapshot_hash": snapshot_hash,
    }
