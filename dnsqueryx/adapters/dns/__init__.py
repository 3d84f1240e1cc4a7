"""DNS adapter layer - abstracts over resolver implementations."""

from dnsqueryx.adapters.dns.base import AbstractResolver
from dnsqueryx.adapters.dns.dnspython_resolver import DnsPythonResolver
from dnsqueryx.adapters.dns.factory import create_resolver

__all__ = [
    "AbstractResolver",
    "DnsPythonResolver",
    "create_resolver",
]
