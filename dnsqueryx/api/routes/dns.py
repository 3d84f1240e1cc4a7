import logging

from fastapi import APIRouter, Depends, Query, Request

from dnsqueryx.core.errors import CODE_MISSING_DOMAIN, ValidationAppError
from dnsqueryx.core.rate_limit import enforce_rate_limit
from dnsqueryx.schemas.dns import ResolutionRequest, ResolutionResult
from dnsqueryx.schemas.envelope import ApiResponse
from dnsqueryx.services.lookup_service import DnsLookupService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["DNS"])


def get_lookup_service(request: Request) -> DnsLookupService:
    """Return the lookup service owned by the running application."""
    return request.app.state.lookup_service


def get_resolution_request(
    domain: str | None = Query(
        None,
        description="Domain name to resolve. Used verbatim.",
    ),
) -> ResolutionRequest:
    """Build the lookup input from the query string.

    Raises:
        ValidationAppError: If the ``domain`` parameter is absent.
    """
    if domain is None:
        logger.error("dns_lookup.missing_domain")
        raise ValidationAppError(
            code=CODE_MISSING_DOMAIN,
            message="Missing domain parameter",
        )
    return ResolutionRequest(domain=domain)


@router.get(
    "/dns-lookup",
    response_model=ApiResponse[ResolutionResult],
    dependencies=[Depends(enforce_rate_limit)],
    responses={
        400: {"model": ApiResponse[None], "description": "Missing domain parameter"},
        429: {"description": "Too many requests from this client"},
        502: {"model": ApiResponse[None], "description": "Resolution failed"},
    },
)
async def dns_lookup(
    lookup: ResolutionRequest = Depends(get_resolution_request),
    service: DnsLookupService = Depends(get_lookup_service),
) -> ApiResponse[ResolutionResult]:
    """Resolve a domain to its IP addresses.

    Admission control runs first; a rejected client never reaches this
    handler. Validation and resolution failures are raised as domain errors
    and rendered by the exception handlers.

    Args:
        lookup: Parsed lookup input.
        service: Lookup service from application state.

    Returns:
        ApiResponse[ResolutionResult]: Success envelope with the addresses.
    """
    logger.info("dns_lookup.received", extra={"domain": lookup.domain})

    result = await service.lookup(lookup.domain)
    return ApiResponse[ResolutionResult].ok(result)
