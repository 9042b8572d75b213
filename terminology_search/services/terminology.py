"""
Terminology query builders.

Translates each search surface into terminology server requests:
- Code Systems and Value Sets: one search per field, merged
- Concepts: free-text filtered ValueSet/$expand
- ECL: ValueSet/$expand of the "?fhir_vs=ecl/<expression>" implicit value set

NOTE: FHIR treats $ , | \\ as special characters in search values
(https://www.hl7.org/fhir/search.html#escaping); values are sent as typed.
"""

from terminology_search.config.defaults import SEARCH_PARAMS
from terminology_search.config.logging import get_logger
from terminology_search.config.settings import Settings, get_settings
from terminology_search.models.search import QueryPage, QueryRequest, ResourceKind
from terminology_search.services.gateway import TerminologyGateway
from terminology_search.services.merged_query import merged_query

logger = get_logger(__name__)


def _field_requests(resource_type: str, value: str) -> list[QueryRequest]:
    return [
        QueryRequest(resource_type, {field: value})
        for field in SEARCH_PARAMS.RESOURCE_SEARCH_FIELDS
    ]


def code_system_requests(value: str) -> list[QueryRequest]:
    """CodeSystem searches by name, description and url, in that order."""
    return _field_requests(ResourceKind.CODE_SYSTEM.value, value)


def value_set_requests(value: str) -> list[QueryRequest]:
    """ValueSet searches by name, description and url, in that order."""
    return _field_requests(ResourceKind.VALUE_SET.value, value)


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


def _expansion_params(
    url: str,
    offset: int,
    count: int,
    settings: Settings,
) -> dict[str, str]:
    return {
        "url": url,
        "offset": str(offset),
        "count": str(count),
        "activeOnly": _bool_param(settings.active_only),
        "includeDesignations": _bool_param(settings.include_designations),
    }


def concept_expansion_params(
    value_set_url: str,
    value: str,
    offset: int = 0,
    count: int = 100,
    settings: Settings | None = None,
) -> dict[str, str]:
    """
    Parameters of a free-text concept search within a value set.

    Args:
        value_set_url: Canonical URL of the value set to expand
        value: Text filter
        offset: Index of the first concept to return
        count: Page size
        settings: Settings providing the activeOnly/includeDesignations flags

    Returns:
        ValueSet/$expand query parameters
    """
    settings = settings or get_settings()
    params = _expansion_params(value_set_url, offset, count, settings)
    params["filter"] = value
    return params


def ecl_value_set_url(value_set_url: str, ecl: str) -> str:
    """
    Build the implicit value set URL for an ECL expression.

    The "?fhir_vs" suffix is appended when the base URL lacks it.
    """
    url = value_set_url
    if not url.endswith(SEARCH_PARAMS.VALUE_SET_SUFFIX):
        logger.warning(
            "Value set URL does not end with ?fhir_vs, it was added automatically",
            value_set_url=value_set_url,
        )
        url += SEARCH_PARAMS.VALUE_SET_SUFFIX
    return f"{url}{SEARCH_PARAMS.ECL_PREFIX}{ecl}"


def ecl_expansion_params(
    value_set_url: str,
    ecl: str,
    offset: int = 0,
    count: int = 100,
    settings: Settings | None = None,
) -> dict[str, str]:
    """Parameters of an ECL-filtered expansion."""
    settings = settings or get_settings()
    return _expansion_params(ecl_value_set_url(value_set_url, ecl), offset, count, settings)


async def search_code_systems(gateway: TerminologyGateway, value: str) -> QueryPage:
    """Merged Code System search (unpaginated)."""
    return QueryPage(entries=await merged_query(gateway, code_system_requests(value)))


async def search_value_sets(gateway: TerminologyGateway, value: str) -> QueryPage:
    """Merged Value Set search (unpaginated)."""
    return QueryPage(entries=await merged_query(gateway, value_set_requests(value)))


async def search_concepts(
    gateway: TerminologyGateway,
    value_set_url: str,
    value: str,
    offset: int = 0,
    count: int = 100,
    settings: Settings | None = None,
) -> QueryPage:
    """One page of concepts of a value set matching a text filter."""
    expansion = await gateway.expand(
        concept_expansion_params(value_set_url, value, offset, count, settings)
    )
    return QueryPage(
        entries=expansion.entries,
        offset=expansion.offset if expansion.offset is not None else offset,
        total=expansion.total,
        page_size=count,
    )


async def search_ecl(
    gateway: TerminologyGateway,
    value_set_url: str,
    ecl: str,
    offset: int = 0,
    count: int = 100,
    settings: Settings | None = None,
) -> QueryPage:
    """One page of concepts matching an ECL expression."""
    expansion = await gateway.expand(
        ecl_expansion_params(value_set_url, ecl, offset, count, settings)
    )
    return QueryPage(
        entries=expansion.entries,
        offset=expansion.offset if expansion.offset is not None else offset,
        total=expansion.total,
        page_size=count,
    )
