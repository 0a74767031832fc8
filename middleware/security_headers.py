"""Security Headers Middleware

Adds security headers to HTTP responses. Mostly relevant when the API is
reached directly from browsers; enable with SECURITY_HEADERS_ENABLED.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

import config


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all HTTP responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"

        # Only meaningful when served over HTTPS
        if config.HSTS_ENABLED:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        response.headers["Referrer-Policy"] = "no-referrer-when-downgrade"

        # The customizer needs no device features; payment runs in the provider's iframe
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=(), usb=(), magnetometer=(), gyroscope=()"
        )

        return response
