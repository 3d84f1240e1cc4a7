"""Entry point for running the service directly."""

import logging

import uvicorn

from dnsqueryx.core.config import settings
from dnsqueryx.core.logging import configure_logging

logger = logging.getLogger(__name__)


def main():
    """Run the application on the configured bind address."""
    configure_logging(settings.log)
    host, port = settings.server.host, settings.server.port
    logger.info(
        "server.starting",
        extra={
            "address": settings.server.address,
            "per_second": settings.rate_limit.per_second,
            "burst_size": settings.rate_limit.burst_size,
            "rate_limit_enabled": settings.rate_limit.enabled,
        },
    )
    uvicorn.run(
        "dnsqueryx.main:app",
        host=host,
        port=port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
