"""
Service layer for Terminology Search.

Contains the terminology gateway and the search orchestration logic.
"""

from terminology_search.services.ecl import EclExpressionBuilder
from terminology_search.services.gateway import (
    TerminologyGateway,
    close_gateway,
    get_gateway,
)
from terminology_search.services.guard import StaleResultGuard
from terminology_search.services.merged_query import merge_entries, merged_query
from terminology_search.services.pagination import PaginatedSearchController
from terminology_search.services.session import SearchSession
from terminology_search.services.subscription import FieldEvent, SearchFieldSubscription

__all__ = [
    "EclExpressionBuilder",
    "TerminologyGateway",
    "close_gateway",
    "get_gateway",
    "StaleResultGuard",
    "merge_entries",
    "merged_query",
    "PaginatedSearchController",
    "SearchSession",
    "FieldEvent",
    "SearchFieldSubscription",
]
