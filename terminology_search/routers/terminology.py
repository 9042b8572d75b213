"""
Terminology search REST endpoints.

Stateless, one-shot versions of the search surfaces:
- GET /api/terminology/code-systems - Merged Code System search
- GET /api/terminology/value-sets - Merged Value Set search
- GET /api/terminology/concepts - Concepts of a value set matching a text filter
- GET /api/terminology/ecl - Concepts matching an ECL expression
- POST /api/terminology/ecl/render - Render filter rows into ECL
- GET /api/terminology/ecl/operators - Supported ECL operators
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from terminology_search.config.logging import get_logger
from terminology_search.config.settings import get_settings
from terminology_search.errors import EclBuilderError, GatewayError
from terminology_search.models.ecl import (
    EclExpressionResponse,
    EclOperatorInfo,
    EclRenderRequest,
)
from terminology_search.models.search import QueryPage
from terminology_search.services.ecl import EclExpressionBuilder, operator_catalogue
from terminology_search.services.gateway import get_gateway
from terminology_search.services.pagination import PageState, offset_for_page
from terminology_search.services.terminology import (
    search_code_systems,
    search_concepts,
    search_ecl,
    search_value_sets,
)
from terminology_search.utils import normalize_error

logger = get_logger(__name__)

router = APIRouter(prefix="/api/terminology", tags=["terminology"])


def validate_search_value(value: str, min_length: int) -> None:
    """Apply the minimum-length gate of interactive fields."""
    if len(value.strip()) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Search value must be at least {min_length} characters long",
        )


def handle_gateway_error(e: GatewayError) -> None:
    """Convert terminology server failures to HTTP exceptions."""
    payload = normalize_error(e)
    logger.warning(
        "Terminology server request failed",
        operation=e.operation,
        status=e.status,
        error=payload.error,
    )
    raise HTTPException(status_code=502, detail=payload.model_dump())


def page_response(page: QueryPage) -> dict[str, Any]:
    """Serialize a query page with its page descriptor."""
    descriptor = None
    if page.offset is not None:
        state = PageState(
            offset=page.offset,
            page_size=page.page_size or get_settings().page_size,
            total=page.total,
        )
        descriptor = state.describe(len(page.entries)).model_dump()
    return {
        "entries": [entry.to_dict() for entry in page.entries],
        "page": descriptor,
    }


@router.get("/code-systems")
async def code_systems(
    q: str = Query(..., description="Text matched against name, description and url"),
) -> dict[str, Any]:
    """Search Code Systems by name, description and url."""
    validate_search_value(q, get_settings().min_length)
    try:
        return page_response(await search_code_systems(get_gateway(), q))
    except GatewayError as e:
        handle_gateway_error(e)


@router.get("/value-sets")
async def value_sets(
    q: str = Query(..., description="Text matched against name, description and url"),
) -> dict[str, Any]:
    """Search Value Sets by name, description and url."""
    validate_search_value(q, get_settings().min_length)
    try:
        return page_response(await search_value_sets(get_gateway(), q))
    except GatewayError as e:
        handle_gateway_error(e)


@router.get("/concepts")
async def concepts(
    q: str = Query(..., description="Text filter"),
    value_set: str | None = Query(None, description="Value set URL to expand"),
    page: int = Query(1, ge=1, description="1-based page number"),
) -> dict[str, Any]:
    """Search the concepts of a value set."""
    settings = get_settings()
    validate_search_value(q, settings.min_length)
    offset = offset_for_page(page, settings.page_size)
    try:
        result = await search_concepts(
            get_gateway(),
            value_set or settings.default_value_set_url,
            q,
            offset,
            settings.page_size,
            settings,
        )
    except GatewayError as e:
        handle_gateway_error(e)
    return page_response(result)


@router.get("/ecl")
async def ecl(
    expression: str = Query(..., description="ECL expression (short form)"),
    value_set: str | None = Query(None, description="Base value set URL"),
    page: int = Query(1, ge=1, description="1-based page number"),
) -> dict[str, Any]:
    """Search concepts matching an ECL expression."""
    settings = get_settings()
    validate_search_value(expression, settings.ecl_min_length)
    offset = offset_for_page(page, settings.page_size)
    try:
        result = await search_ecl(
            get_gateway(),
            value_set or settings.default_value_set_url,
            expression,
            offset,
            settings.page_size,
            settings,
        )
    except GatewayError as e:
        handle_gateway_error(e)
    return page_response(result)


@router.post("/ecl/render")
async def render_ecl(body: EclRenderRequest) -> EclExpressionResponse:
    """Render filter rows into short and long form ECL."""
    builder = EclExpressionBuilder()
    try:
        builder.replace_all(body.rows)
    except EclBuilderError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())

    expression = builder.render()
    return EclExpressionResponse(
        short_form=expression.short_form,
        long_form=expression.long_form,
        rows=[
            {"operator": row.operator_long, "code": row.code, "label": row.label}
            for row in builder.rows
        ],
    )


@router.get("/ecl/operators")
async def ecl_operators() -> list[EclOperatorInfo]:
    """List the supported ECL operators."""
    return [EclOperatorInfo(**op) for op in operator_catalogue()]
