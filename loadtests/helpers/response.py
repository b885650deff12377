"""Response error extraction for load test observability.

Parses marketplace API error responses into human-readable messages. Every
error body looks like ``{"success": false, "message": "...", "errors": {...}}``
where ``errors`` is only present for validation failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON, return raw text truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    errors = body.get("errors")
    if isinstance(errors, dict) and errors:
        return " | ".join(f"{field}: {', '.join(map(str, messages))}" for field, messages in errors.items())

    if "message" in body:
        return str(body["message"])

    # Unknown shape
    return str(body)[:300]
