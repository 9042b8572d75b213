"""
Terminology server gateway.

Issues single GET requests against the FHIR terminology server and turns
failures into GatewayError subclasses. No retries are made here; retry
policy belongs to callers.
"""

import json
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from terminology_search.config.logging import get_logger
from terminology_search.config.settings import get_settings
from terminology_search.errors import ParseError, StructuredServerError, TransportError
from terminology_search.models.search import QueryRequest, ResourceEntry, ResourceKind
from terminology_search.utils import extract_bundle_entries, extract_expansion, fhir_request_headers

logger = get_logger(__name__)

EXPAND_OPERATION = "ValueSet/$expand"

_RESOURCE_TYPES = frozenset({ResourceKind.CODE_SYSTEM.value, ResourceKind.VALUE_SET.value})


@dataclass(frozen=True)
class ExpansionPage:
    """One page of a ValueSet expansion."""

    entries: tuple[ResourceEntry, ...]
    offset: int | None = None
    total: int | None = None


class TerminologyGateway:
    """Async client for a FHIR terminology server."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: FHIR base URL of the terminology server
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (used by tests)
        """
        self.base_url = base_url.rstrip("/") + "/"
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers=fhir_request_headers(),
        )

    async def fetch_resource(self, operation: str, params: Mapping[str, str] | None = None) -> Any:
        """
        GET an operation and return the parsed JSON body.

        Args:
            operation: Path relative to the base URL (e.g. 'CodeSystem')
            params: Query parameters

        Returns:
            The parsed JSON response

        Raises:
            StructuredServerError: Server returned an error with a JSON body
            TransportError: Server returned an error without a JSON body,
                or no response was received
            ParseError: A successful response did not contain JSON
        """
        url = self.base_url + operation.lstrip("/")
        logger.debug("Querying terminology server", operation=operation, params=dict(params or {}))

        try:
            response = await self._client.get(
                url,
                params=dict(params or {}),
                headers=fhir_request_headers(),
            )
        except httpx.TimeoutException:
            logger.error("Timeout querying terminology server", operation=operation)
            raise TransportError(operation=operation, reason="Timeout") from None
        except httpx.HTTPError as e:
            logger.error("Terminology server unreachable", operation=operation, error=str(e))
            raise TransportError(operation=operation, reason=str(e)) from None

        if response.is_error:
            text = response.text
            try:
                body = json.loads(text)
            except ValueError:
                logger.warning(
                    "Terminology server error", operation=operation, status=response.status_code
                )
                raise TransportError(status=response.status_code, operation=operation) from None

            logger.warning(
                "Terminology server returned error body",
                operation=operation,
                status=response.status_code,
            )
            raise StructuredServerError(response.status_code, body, text, operation=operation)

        try:
            return response.json()
        except ValueError:
            logger.error("Invalid JSON from terminology server", operation=operation)
            raise ParseError(response.status_code, response.text, operation=operation) from None

    async def search_entries(self, request: QueryRequest) -> list[ResourceEntry]:
        """
        Run a resource search and wrap its Bundle entries.

        Args:
            request: Search operation (e.g. 'CodeSystem') and parameters

        Returns:
            Entries in server order; an empty list when the Bundle has none
        """
        bundle = await self.fetch_resource(request.operation, request.params)
        entries = []
        for entry in extract_bundle_entries(bundle):
            resource_type = entry["resource"].get("resourceType", request.operation)
            # Skip OperationOutcome entries (search.mode == "outcome")
            if resource_type not in _RESOURCE_TYPES:
                continue
            entries.append(ResourceEntry.from_bundle_entry(entry, kind=ResourceKind(resource_type)))
        logger.debug("Search returned entries", operation=request.operation, count=len(entries))
        return entries

    async def expand(self, params: Mapping[str, str]) -> ExpansionPage:
        """
        Run ValueSet/$expand and wrap the expansion's concepts.

        Args:
            params: Expansion parameters (url, filter, offset, count, ...)

        Returns:
            ExpansionPage with the concepts and the server's offset/total
        """
        body = await self.fetch_resource(EXPAND_OPERATION, params)
        contains, offset, total = extract_expansion(body)
        return ExpansionPage(
            entries=tuple(ResourceEntry.from_expansion_item(item) for item in contains),
            offset=offset,
            total=total,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()


_gateway: TerminologyGateway | None = None


def get_gateway() -> TerminologyGateway:
    """
    Get the process-wide gateway for the configured terminology server.

    Returns:
        TerminologyGateway instance (created on first use)
    """
    global _gateway
    if _gateway is None:
        settings = get_settings()
        _gateway = TerminologyGateway(settings.base_url, timeout=settings.request_timeout)
        logger.info("Created terminology gateway", base_url=settings.base_url)
    return _gateway


async def close_gateway() -> None:
    """Close and drop the process-wide gateway."""
    global _gateway
    if _gateway is not None:
        await _gateway.aclose()
        _gateway = None
