"""Tests for canonical JSON and signal snapshots."""

import pytest

from signal_mcp.engine import Quote, score
from signal_mcp.utils.normalize import (
    SNAPSHOT_VERSION,
    build_signal_snapshot,
    canonical_dumps,
    sanitize_nan_inf,
)


class TestCanonicalDumps:
    """Tests for canonical_dumps function."""

    def test_sorted_keys(self):
        """Keys should be sorted at every level."""
        obj = {"z": 1, "a": 2, "m": {"z": 3, "a": 4}}
        assert canonical_dumps(obj) == '{"a":2,"m":{"a":4,"z":3},"z":1}'

    def test_minimal_separators(self):
        """Output should use minimal separators (no spaces)."""
        assert canonical_dumps({"a": [1, 2, 3]}) == '{"a":[1,2,3]}'

    def test_rejects_nan(self):
        """Should raise ValueError for NaN (allow_nan=False)."""
        with pytest.raises(ValueError, match="Out of range float values"):
            canonical_dumps({"value": float("nan")})


class TestSanitizeNanInf:
    """Tests for sanitize_nan_inf function."""

    def test_nested(self):
        """NaN and inf become None at any depth, tuples become lists."""
        raw = {"a": float("nan"), "b": [1.0, float("inf")], "c": {"d": (float("-inf"), 2)}}
        assert sanitize_nan_inf(raw) == {"a": None, "b": [1.0, None], "c": {"d": [None, 2]}}

    def test_negative_zero(self):
        """-0.0 is normalized to 0.0."""
        assert str(sanitize_nan_inf(-0.0)) == "0.0"


class TestSignalSnapshot:
    """Tests for build_signal_snapshot function."""

    def test_fields(self):
        """Snapshot carries what a history tracker needs."""
        result = score(Quote(price=42.0))
        snapshot = build_signal_snapshot(result, " aapl ", 42.0)
        assert snapshot["snapshot_version"] == SNAPSHOT_VERSION
        assert snapshot["symbol"] == "AAPL"
        assert snapshot["price"] == 42.0
        assert snapshot["verdict"] == result.verdict.value
        assert snapshot["pct"] == result.pct
        assert set(snapshot["scores"]) == set(result.scores)
        assert len(snapshot["snapshot_hash"]) == 16

    def test_hash_stable(self):
        """Identical inputs hash identically."""
        first = build_signal_snapshot(score(Quote(price=42.0)), "AAPL", 42.0)
        second = build_signal_snapshot(score(Quote(price=42.0)), "AAPL", 42.0)
        assert first["snapshot_hash"] == second["snapshot_hash"]

    def test_hash_changes_with_price(self):
        """Different price changes the hash."""
        result = score(Quote(price=42.0))
        first = build_signal_snapshot(result, "AAPL", 42.0)
        second = build_signal_snapshot(result, "AAPL", 43.0)
        assert first["snapshot_hash"] != second["snapshot_hash"]

    def test_nan_price(self):
        """A NaN price is stored as null instead of breaking the hash."""
        snapshot = build_signal_snapshot(score(Quote(price=42.0)), "AAPL", float("nan"))
        assert snapshot["price"] is None
