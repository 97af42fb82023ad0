"""
Core utility functions for common operations.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi.responses import JSONResponse


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        ISO format timestamp string (e.g., "2024-01-01T12:00:00+00:00")
    """
    return datetime.now(timezone.utc).isoformat()


def add_cors_headers(response: JSONResponse) -> JSONResponse:
    """
    Add CORS headers to a JSONResponse.

    Note: CORS middleware should handle this automatically, but this ensures
    headers are present in exception handlers where middleware might not apply.
    """
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "*"
    return response


def add_timestamps(data: Dict[str, Any], include_created: bool = True, include_updated: bool = True) -> Dict[str, Any]:
    """
    Add created_at and/or updated_at timestamps to a dictionary.

    Existing values are kept so a caller can pin both to one instant.
    """
    timestamp = get_current_timestamp()
    if include_created:
        data.setdefault("created_at", timestamp)
    if include_updated:
        data.setdefault("updated_at", timestamp)
    return data


def strip_private_fields(record: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a user record without credential material."""
    return {k: v for k, v in record.items() if k not in ("password_hash", "hashed_password")}
