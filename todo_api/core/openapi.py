"""OpenAPI customization utilities.

Enriches the generated schema with:
- Tags metadata
- A shared ``RateLimitExceeded`` response documented on every throttled
  operation (everything except the exempt paths)
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

from fastapi import FastAPI

_RATE_LIMIT_EXCEEDED = {
    "description": "Rate limit exceeded for this client.",
    "headers": {
        "Retry-After": {
            "description": "Seconds to wait before retrying.",
            "schema": {"type": "integer"},
        },
        "X-RateLimit-Limit": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "integer"}},
        "X-RateLimit-Reset": {
            "description": "UNIX epoch seconds.",
            "schema": {"type": "integer"},
        },
    },
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {
                    "error": {"type": "string"},
                    "message": {"type": "string"},
                    "limit": {"type": "integer"},
                    "wait_minutes": {"type": "integer"},
                },
            }
        }
    },
}


def apply_openapi_customizations(
    app: FastAPI,
    *,
    throttled: bool = True,
    exempt_paths: Iterable[str] = (),
) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and the 429 response."""

    original_openapi = app.openapi
    exempt = set(exempt_paths)

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Tasks", "description": "Create, read, update and delete tasks."},
            {"name": "Health", "description": "Liveness checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        if not throttled:
            return schema

        components = schema.setdefault("components", {})
        components.setdefault("responses", {})["RateLimitExceeded"] = _RATE_LIMIT_EXCEEDED

        for path, methods in schema.get("paths", {}).items():
            if path in exempt:
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj.setdefault("responses", {})["429"] = {
                        "$ref": "#/components/responses/RateLimitExceeded"
                    }

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
