from __future__ import annotations

from dnsqueryx.api.routes.dns import router as dns_router
from dnsqueryx.api.routes.health import router as health_router

__all__ = ["dns_router", "health_router"]
