"""DNS lookup service orchestrating the resolver call and result construction.

The route validates input and renders the envelope; this service owns the
resolution step itself:
- Logging the lookup before suspending on the resolver
- Awaiting the resolver (no retry; the first failure is final)
- Building the immutable result in resolver order
"""

import logging

from dnsqueryx.adapters.dns.base import AbstractResolver
from dnsqueryx.core.errors import ResolutionAppError
from dnsqueryx.schemas.dns import ResolutionResult

logger = logging.getLogger(__name__)


class DnsLookupService:
    """Resolve domains through an injected resolver."""

    def __init__(self, resolver: AbstractResolver) -> None:
        self.resolver = resolver

    async def lookup(self, domain: str) -> ResolutionResult:
        """Resolve ``domain`` to its addresses.

        Args:
            domain: Name to resolve, used verbatim (no normalization).

        Returns:
            ResolutionResult echoing ``domain`` with the resolver's addresses,
            order preserved, duplicates kept.

        Raises:
            ResolutionAppError: If the resolver reports a failure.
        """
        logger.info("dns_lookup.started", extra={"domain": domain})

        try:
            addresses = await self.resolver.lookup_ip(domain)
        except ResolutionAppError as exc:
            logger.error(
                "dns_lookup.failed",
                extra={
                    "domain": domain,
                    "error_message": exc.message,
                    "error_type": (exc.details or {}).get("error_type"),
                },
            )
            raise

        result = ResolutionResult(domain=domain, addresses=addresses)
        logger.info(
            "dns_lookup.succeeded",
            extra={
                "domain": domain,
                "addresses": [str(a) for a in result.addresses],
            },
        )
        return result
