"""Pydantic schemas for DNS lookups."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress


class ResolutionRequest(BaseModel):
    """Lookup input taken from the query string."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field(..., description="Name to resolve, used verbatim.")


class ResolutionResult(BaseModel):
    """Addresses a domain resolved to."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field(..., description="The requested domain, echoed verbatim.")
    addresses: List[IPvAnyAddress] = Field(
        ...,
        description="IPv4/IPv6 addresses in the order the resolver returned them.",
    )
