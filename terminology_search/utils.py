"""
FHIR utility functions for request headers, response unwrapping and error display.
"""

import json
from typing import Any

from terminology_search.errors import GatewayError, StructuredServerError, TerminologySearchError
from terminology_search.models.search import ErrorPayload

# Standard FHIR media type for JSON format
FHIR_JSON_CONTENT_TYPE = "application/fhir+json"

# Ontoserver answers either media type
TERMINOLOGY_ACCEPT = f"{FHIR_JSON_CONTENT_TYPE}, application/json"


def fhir_request_headers(
    accept: str = TERMINOLOGY_ACCEPT,
    content_type: str | None = None,
) -> dict[str, str]:
    """
    Build HTTP headers for terminology server requests.

    Args:
        accept: Accept header value for response format
        content_type: Content-Type header for request body (None to omit)

    Returns:
        Dictionary of HTTP headers
    """
    headers = {"Accept": accept}
    if content_type:
        headers["Content-Type"] = content_type
    return headers


def extract_bundle_entries(bundle: dict[str, Any] | None) -> list[dict[str, Any]]:
    """
    Return the `entry` list of a searchset Bundle.

    A Bundle without entries is an empty result, not an error.
    """
    entries = bundle.get("entry") if isinstance(bundle, dict) else None
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, dict) and entry.get("resource")]


def extract_expansion(body: dict[str, Any] | None) -> tuple[list[dict[str, Any]], int | None, int | None]:
    """
    Unwrap a ValueSet/$expand response.

    Returns:
        Tuple of (contains, offset, total); contains is empty when absent
    """
    expansion = body.get("expansion") if isinstance(body, dict) else None
    if not isinstance(expansion, dict):
        return [], None, None

    contains = expansion.get("contains")
    if not isinstance(contains, list):
        contains = []

    return contains, expansion.get("offset"), expansion.get("total")


def pretty_error_message(text: str) -> tuple[str, bool]:
    """
    Pretty-print an error text if it is JSON.

    Returns:
        Tuple of (message, structured) where structured tells whether the
        text parsed as JSON
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return text, False
    if not isinstance(parsed, (dict, list)):
        return text, False
    return json.dumps(parsed, indent=2), True


def normalize_error(error: Exception) -> ErrorPayload:
    """
    Normalize a search failure for the display layer.

    The error message is parsed as JSON: on success it is pretty-printed,
    otherwise it is shown verbatim.

    Args:
        error: The exception raised by a surface query

    Returns:
        ErrorPayload ready to be serialized
    """
    if isinstance(error, StructuredServerError) and error.body is not None:
        return ErrorPayload(
            message=json.dumps(error.body, indent=2),
            status=error.status,
            structured=True,
            error=error.__class__.__name__,
        )

    if isinstance(error, TerminologySearchError):
        message = error.message
    else:
        message = str(error)

    text, structured = pretty_error_message(message)
    status = error.status if isinstance(error, GatewayError) else None
    return ErrorPayload(
        message=text,
        status=status,
        structured=structured,
        error=error.__class__.__name__,
    )
