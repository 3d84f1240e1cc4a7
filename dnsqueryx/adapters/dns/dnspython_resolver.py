"""dnspython resolver adapter."""

import asyncio
import ipaddress
from typing import Sequence

import dns.asyncresolver
import dns.exception
import dns.resolver

from dnsqueryx.adapters.dns.base import AbstractResolver
from dnsqueryx.core.errors import CODE_RESOLUTION_FAILED, ResolutionAppError

# Families tried, in order, for each lookup strategy
_STRATEGY_RDTYPES = {
    "ipv4_only": ("A",),
    "ipv6_only": ("AAAA",),
    "ipv4_then_ipv6": ("A", "AAAA"),
    "ipv6_then_ipv4": ("AAAA", "A"),
    "ipv4_and_ipv6": ("A", "AAAA"),
}

# Failures a resolver may report for a lookup; anything else is a bug
RESOLUTION_ERRORS = (dns.exception.DNSException, OSError)


def _ip_literal(domain: str) -> str | None:
    """Return the normalized address when ``domain`` is an IP literal."""
    try:
        return str(ipaddress.ip_address(domain))
    except ValueError:
        return None


class DnsPythonResolver(AbstractResolver):
    """Resolve address records with ``dns.asyncresolver``.

    One instance is shared by all requests; dnspython's async resolver keeps
    no per-query state on the instance.
    """

    def __init__(
        self,
        *,
        strategy: str = "ipv4_then_ipv6",
        nameservers: Sequence[str] | None = None,
        timeout_seconds: float | None = None,
        lifetime_seconds: float | None = None,
        resolver: dns.asyncresolver.Resolver | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            strategy: Lookup strategy name (see ``_STRATEGY_RDTYPES``).
            nameservers: Nameserver IPs replacing the system configuration.
            timeout_seconds: Per-nameserver timeout; dnspython default if None.
            lifetime_seconds: Whole-lookup deadline; dnspython default if None.
            resolver: Preconfigured resolver (mainly for tests).

        Raises:
            ValueError: If the strategy is unknown.
        """
        if strategy not in _STRATEGY_RDTYPES:
            raise ValueError(f"unknown lookup strategy: {strategy!r}")

        if resolver is None:
            # Skip reading the system configuration when it is fully overridden
            resolver = dns.asyncresolver.Resolver(configure=not nameservers)
        if nameservers:
            resolver.nameservers = list(nameservers)
        if timeout_seconds is not None:
            resolver.timeout = timeout_seconds
        if lifetime_seconds is not None:
            resolver.lifetime = lifetime_seconds

        self.strategy = strategy
        self.resolver = resolver

    async def _query(self, domain: str, rdtype: str) -> list[str]:
        answer = await self.resolver.resolve(domain, rdtype)
        return [rdata.address for rdata in answer]

    async def _query_sequential(self, domain: str, rdtypes: Sequence[str]) -> list[str]:
        """Query families in order, moving on only when a family has no records."""
        first, *rest = rdtypes
        try:
            return await self._query(domain, first)
        except dns.resolver.NoAnswer:
            if not rest:
                raise
        return await self._query_sequential(domain, rest)

    async def _query_parallel(self, domain: str, rdtypes: Sequence[str]) -> list[str]:
        """Query all families at once; fail only when every family failed."""
        results = await asyncio.gather(
            *(self._query(domain, rdtype) for rdtype in rdtypes),
            return_exceptions=True,
        )

        addresses: list[str] = []
        errors: list[BaseException] = []
        for res in results:
            if isinstance(res, BaseException):
                if not isinstance(res, RESOLUTION_ERRORS):
                    raise res
                errors.append(res)
                continue
            addresses.extend(res)

        if errors and len(errors) == len(results):
            raise errors[0]
        return addresses

    async def lookup_ip(self, domain: str) -> list[str]:
        """Resolve ``domain`` according to the configured strategy.

        An IP literal is returned as is, without querying any nameserver.

        Raises:
            ResolutionAppError: On any resolver failure, with the resolver's
                own error text as the message.
        """
        literal = _ip_literal(domain)
        if literal is not None:
            return [literal]

        rdtypes = _STRATEGY_RDTYPES[self.strategy]
        try:
            if self.strategy == "ipv4_and_ipv6":
                addresses = await self._query_parallel(domain, rdtypes)
            else:
                addresses = await self._query_sequential(domain, rdtypes)
        except RESOLUTION_ERRORS as exc:
            raise ResolutionAppError(
                code=CODE_RESOLUTION_FAILED,
                message=str(exc) or type(exc).__name__,
                details={
                    "domain": domain,
                    "error_type": type(exc).__name__,
                    "strategy": self.strategy,
                },
            ) from exc

        if not addresses:
            raise ResolutionAppError(
                code=CODE_RESOLUTION_FAILED,
                message=f"no record found for {domain}",
                details={"domain": domain, "strategy": self.strategy},
            )

        return addresses
