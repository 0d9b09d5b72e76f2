"""Helpers shared by endpoint modules."""

from __future__ import annotations

from typing import Any

from pyinfinitive.exceptions import InfinitiveRequestError


def require_object(body: Any, endpoint: str) -> dict[str, Any]:
    """Return *body* if it is a JSON object, else raise."""
    if not isinstance(body, dict):
        raise InfinitiveRequestError(
            f"Expected a JSON object from {endpoint}, got {type(body).__name__}",
            endpoint=endpoint,
        )
    return body
