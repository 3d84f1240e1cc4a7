"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment defaults are set before any application import so the global
settings are built for the testing environment.
"""

import os
from dataclasses import dataclass, field
from typing import Callable

import pytest
from fastapi.testclient import TestClient

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_FORMAT", "plain")

from dnsqueryx.adapters.dns.base import AbstractResolver  # noqa: E402
from dnsqueryx.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter  # noqa: E402
from dnsqueryx.core.app_factory import create_app  # noqa: E402
from dnsqueryx.core.config import Settings  # noqa: E402
from dnsqueryx.core.errors import CODE_RESOLUTION_FAILED, ResolutionAppError  # noqa: E402


@dataclass
class StubResolver(AbstractResolver):
    """Resolver returning canned answers and recording every lookup."""

    records: dict[str, list[str]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def lookup_ip(self, domain: str) -> list[str]:
        self.calls.append(domain)
        if self.error is not None:
            raise self.error
        if domain in self.records:
            return list(self.records[domain])
        raise ResolutionAppError(
            code=CODE_RESOLUTION_FAILED,
            message=f"The DNS query name does not exist: {domain}.",
        )


@pytest.fixture
def stub_resolver() -> StubResolver:
    """Resolver knowing example.com only."""
    return StubResolver(records={"example.com": ["93.184.216.34"]})


@pytest.fixture
def make_client(stub_resolver: StubResolver) -> Callable[..., TestClient]:
    """Build a TestClient around a fresh app.

    Keyword arguments are forwarded to ``create_app``; the stub resolver is
    used unless another resolver is given.
    """

    def _make(**kwargs) -> TestClient:
        kwargs.setdefault("resolver", stub_resolver)
        kwargs.setdefault("configure_logs", False)
        raise_server_exceptions = kwargs.pop("raise_server_exceptions", True)
        app = create_app(Settings(), **kwargs)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    """Client with admission control disabled."""
    return make_client(rate_limiter=None)


@pytest.fixture
def fixed_clock_limiter() -> Callable[..., InMemoryTokenBucketRateLimiter]:
    """Build a limiter whose clock never advances."""

    def _make(per_second: int = 3, burst_size: int = 10) -> InMemoryTokenBucketRateLimiter:
        return InMemoryTokenBucketRateLimiter(
            per_second=per_second,
            burst_size=burst_size,
            clock=lambda: 1000.0,
        )

    return _make
