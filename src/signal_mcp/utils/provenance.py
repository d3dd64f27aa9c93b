"""Response metadata, input coverage and error envelopes."""

from datetime import datetime
from typing import Any

from signal_mcp import SCHEMA_VERSION, SERVER_VERSION


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build standard metadata block for responses.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_coverage(
    source: str,
    fetched: bool,
    reason_missing: str | None = None,
    as_of: datetime | str | None = None,
) -> dict[str, Any]:
    """
    Describe one engine input: where it came from and whether it arrived.

    Missing inputs are not errors; the engine skips the affected terms.

    Args:
        source: Data source name (e.g., "yfinance")
        fetched: Whether usable data was obtained
        reason_missing: Short reason when fetched is False
        as_of: Timestamp of data freshness

    Returns:
        Coverage dict for this input
    """
    entry: dict[str, Any] = {"source": source, "fetched": fetched}
    if as_of is not None:
        entry["as_of"] = as_of.isoformat() if isinstance(as_of, datetime) else as_of
    if not fetched:
        entry["reason_missing"] = reason_missing or "unavailable"
    return entry


def build_error_response(
    error_type: str,
    message: str,
    symbol: str | None = None,
) -> dict[str, Any]:
    """
    Build standardized error response.

    Args:
        error_type: Type of error (invalid_request, invalid_symbol, data_unavailable)
        message: Human-readable error message
        symbol: Symbol that caused the error (if applicable)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta("error"),
    }
    if symbol is not None:
        response["symbol"] = symbol
    return response
