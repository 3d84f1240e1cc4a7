"""Factory for creating the resolver used by the lookup endpoint."""

from dnsqueryx.adapters.dns.base import AbstractResolver
from dnsqueryx.adapters.dns.dnspython_resolver import DnsPythonResolver
from dnsqueryx.core.config import DnsSettings, settings


def create_resolver(dns_settings: DnsSettings | None = None) -> AbstractResolver:
    """Build the resolver from configuration.

    Unset options keep the system nameserver configuration and dnspython's
    default resolver options.

    Args:
        dns_settings: Resolver settings; defaults to the global settings.

    Returns:
        AbstractResolver: Configured resolver instance.
    """
    cfg = dns_settings or settings.dns

    return DnsPythonResolver(
        strategy=cfg.lookup_strategy,
        nameservers=cfg.nameserver_list or None,
        timeout_seconds=cfg.timeout_seconds,
        lifetime_seconds=cfg.lifetime_seconds,
    )
