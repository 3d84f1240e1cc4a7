from __future__ import annotations

"""Application factory for the FastAPI app.

Builds the app and the components it owns (rate limiter, resolver, lookup
service) so every collaborator is explicit and can be swapped in tests.
"""

from fastapi import FastAPI

from dnsqueryx.adapters.dns.base import AbstractResolver
from dnsqueryx.adapters.dns.factory import create_resolver
from dnsqueryx.adapters.rate_limit.base import AbstractRateLimiter
from dnsqueryx.api.routes import dns_router, health_router
from dnsqueryx.core.config import Settings, settings
from dnsqueryx.core.exception_handlers import setup_exception_handlers
from dnsqueryx.core.logging import configure_logging
from dnsqueryx.core.middleware import request_id_middleware
from dnsqueryx.core.openapi import apply_openapi_customizations
from dnsqueryx.core.rate_limit import build_rate_limiter
from dnsqueryx.services.lookup_service import DnsLookupService

_UNSET = object()


def create_app(
    app_settings: Settings | None = None,
    *,
    resolver: AbstractResolver | None = None,
    rate_limiter: AbstractRateLimiter | None | object = _UNSET,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to build from; defaults to the global settings.
        resolver: Resolver to use instead of the configured dnspython one.
        rate_limiter: Limiter to use instead of the configured one; pass None
            to disable admission control.
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = app_settings or settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    app = FastAPI(
        title="DNSQueryX",
        description=(
            "Resolves a domain name to its IPv4/IPv6 addresses. Every response "
            "uses the code/msg/data envelope; clients are rate limited per "
            "source address with a token bucket."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.state.settings = cfg
    app.state.rate_limiter = (
        build_rate_limiter(cfg.rate_limit) if rate_limiter is _UNSET else rate_limiter
    )
    app.state.lookup_service = DnsLookupService(resolver or create_resolver(cfg.dns))

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(dns_router)
    app.include_router(health_router)

    # OpenAPI customizations (tags, rate-limit headers)
    apply_openapi_customizations(app)

    return app
