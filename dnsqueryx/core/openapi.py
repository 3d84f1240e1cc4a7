"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- Rate-limit response headers on every operation that can answer 429

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_RATE_LIMIT_HEADERS: Dict[str, Any] = {
    "Retry-After": {
        "description": "Seconds until the client's next token is available.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-After": {
        "description": "Same as Retry-After.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Limit": {
        "description": "Bucket capacity (burst size).",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Remaining": {
        "description": "Whole tokens left for this client.",
        "schema": {"type": "integer"},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and rate-limit headers."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "DNS",
                "description": "Address-record lookups, rate limited per client.",
            },
            {
                "name": "Health",
                "description": "Liveness checks.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for methods in schema.get("paths", {}).values():
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                throttled = method_obj.get("responses", {}).get("429")
                if throttled is not None:
                    throttled.setdefault("headers", dict(_RATE_LIMIT_HEADERS))

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
