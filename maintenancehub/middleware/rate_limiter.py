"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in maintenancehub/__init__.py with no default
limits; this module applies limits per route category.

Usage:
    from maintenancehub.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

from flask import request as flask_request

logger = logging.getLogger(__name__)

_WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def _tenant_or_ip_key():
    """Rate limit key: tenant_id when the request names one, else remote IP."""
    tenant_id = flask_request.args.get("tenant_id")
    if not tenant_id:
        body = flask_request.get_json(silent=True) or {}
        if isinstance(body, dict):
            tenant_id = body.get("tenant_id")
    if tenant_id:
        return f"tenant:{tenant_id}"
    return flask_request.remote_addr or "unknown"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits:
        - Excellence writes: EXCELLENCE_RATE_LIMIT per tenant (checklist
          toggles are one request per click, so the default is generous)
        - Health check:      exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    write_limit = app.config.get("EXCELLENCE_RATE_LIMIT", "120/minute")
    bp = app.blueprints.get("excellence")
    if bp:
        limiter.limit(
            write_limit,
            key_func=_tenant_or_ip_key,
            exempt_when=lambda: flask_request.method not in _WRITE_METHODS,
        )(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured — excellence writes: %s", write_limit)
