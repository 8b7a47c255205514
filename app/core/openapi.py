"""OpenAPI customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- A cookie security scheme for the session cookie, attached to the
  operations that need an authenticated user
- Documentation of the 429 response on rate limited operations

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

SESSION_SCHEME = "SessionCookie"

# Operations that resolve the current user from the session cookie
_AUTHENTICATED_PATHS = ("/api/auth/me", "/api/admin/stats")

# Operations that are not behind any limiter
_UNLIMITED_PATHS = ("/api/health",)

_TOO_MANY_REQUESTS = {
    "description": "Rate limit exceeded.",
    "headers": {
        "Retry-After": {"schema": {"type": "integer"}, "description": "Seconds until reset."},
        "X-RateLimit-Limit": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "integer"}},
        "X-RateLimit-Reset": {
            "schema": {"type": "integer"},
            "description": "Window reset time as UNIX epoch milliseconds.",
        },
    },
    "content": {
        "application/json": {
            "example": {
                "error": "Too Many Requests",
                "message": "Rate limit exceeded. Please try again later.",
                "retryAfter": 42,
            }
        }
    },
}


def apply_openapi_customizations(app: FastAPI, *, cookie_name: str = "auth_session") -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            SESSION_SCHEME,
            {
                "type": "apiKey",
                "in": "cookie",
                "name": cookie_name,
                "description": "Session cookie set by POST /api/auth/login.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Auth", "description": "Login, logout and current user."},
            {"name": "Admin", "description": "Operator endpoints (admin role)."},
            {"name": "Health", "description": "Liveness and uptime checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                if path in _AUTHENTICATED_PATHS:
                    method_obj["security"] = [{SESSION_SCHEME: []}]
                if path not in _UNLIMITED_PATHS:
                    method_obj.setdefault("responses", {}).setdefault("429", _TOO_MANY_REQUESTS)

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
