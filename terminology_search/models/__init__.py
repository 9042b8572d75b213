"""
Models for Terminology Search.

This module contains models for:
- search surfaces, tokens, requests and results
- ECL filter rows and rendered expressions
"""

from terminology_search.models.ecl import (
    EclExpression,
    EclExpressionResponse,
    EclOperatorInfo,
    EclRenderRequest,
    FilterRow,
    FilterRowInput,
)
from terminology_search.models.search import (
    ErrorPayload,
    PageDescriptor,
    QueryPage,
    QueryRequest,
    ResourceEntry,
    ResourceKind,
    SearchFailure,
    SearchResult,
    SearchToken,
    Surface,
)

__all__ = [
    "EclExpression",
    "EclExpressionResponse",
    "EclOperatorInfo",
    "EclRenderRequest",
    "FilterRow",
    "FilterRowInput",
    "ErrorPayload",
    "PageDescriptor",
    "QueryPage",
    "QueryRequest",
    "ResourceEntry",
    "ResourceKind",
    "SearchFailure",
    "SearchResult",
    "SearchToken",
    "Surface",
]
