"""Security helpers for Flask responses."""

from __future__ import annotations

from flask import Flask

_API_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
}


def set_security_headers(app: Flask) -> None:
    """Register an ``after_request`` hook that injects security headers."""

    @app.after_request  # type: ignore[misc]
    def _headers(resp):
        for name, value in _API_HEADERS.items():
            resp.headers.setdefault(name, value)
        # Respuestas con datos de alquileres/cuotas no deben cachearse
        if resp.mimetype in {"application/json", "text/csv", "application/pdf"}:
            resp.headers.setdefault("Cache-Control", "no-store")
        return resp
