"""
Merged resource queries.

The terminology server only searches one field per query (`_text` and
`_content` are not implemented), so a multi-field "contains" search is run
as one query per field and the results are unioned.
"""

import asyncio
from collections.abc import Iterable, Sequence

from terminology_search.config.logging import get_logger
from terminology_search.models.search import QueryRequest, ResourceEntry
from terminology_search.services.gateway import TerminologyGateway

logger = get_logger(__name__)


def merge_entries(result_lists: Iterable[Iterable[ResourceEntry]]) -> tuple[ResourceEntry, ...]:
    """
    Union entry lists, keeping the first entry seen for each identifier.

    Args:
        result_lists: Entry lists in the order they must be processed

    Returns:
        Entries in first-seen order with unique identifiers
    """
    seen: set[str] = set()
    merged: list[ResourceEntry] = []
    for results in result_lists:
        for entry in results:
            if entry.identifier in seen:
                continue
            seen.add(entry.identifier)
            merged.append(entry)
    return tuple(merged)


async def merged_query(
    gateway: TerminologyGateway,
    requests: Sequence[QueryRequest],
) -> tuple[ResourceEntry, ...]:
    """
    Run resource searches concurrently and merge their entries.

    All requests are fired together. If any fails, the first error raised
    propagates and the other results are discarded (in-flight requests are
    not cancelled). Results are merged in request order.

    Args:
        gateway: Terminology gateway
        requests: Searches to run

    Returns:
        MergedResultSet as a tuple of unique entries

    Raises:
        GatewayError: If any of the searches fails
    """
    results = await asyncio.gather(*(gateway.search_entries(request) for request in requests))
    merged = merge_entries(results)
    logger.debug(
        "Merged resource queries",
        queries=len(requests),
        received=sum(len(r) for r in results),
        unique=len(merged),
    )
    return merged
