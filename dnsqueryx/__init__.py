"""DNSQueryX: rate-limited DNS address lookup over HTTP."""

__version__ = "0.1.0"
