"""
Paginated search controller.

Drives one search surface through repeated queries as the user searches
or changes page, keeps the surface's page state, and hands accepted
results or normalized errors to a listener.
"""

import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from terminology_search.config.logging import bind_search, get_logger
from terminology_search.errors import GatewayError, InvalidPageError
from terminology_search.models.search import (
    ErrorPayload,
    PageDescriptor,
    QueryPage,
    SearchFailure,
    SearchResult,
    SearchToken,
    Surface,
)
from terminology_search.services.guard import StaleResultGuard
from terminology_search.utils import normalize_error

logger = get_logger(__name__)

SurfaceQuery = Callable[[str, int, int], Awaitable[QueryPage]]


class SearchListener(Protocol):
    """Consumer of search outcomes (the display layer)."""

    async def on_loading(self, surface: Surface, active: bool) -> None: ...

    async def on_result(self, surface: Surface, result: SearchResult) -> None: ...

    async def on_error(self, surface: Surface, error: ErrorPayload) -> None: ...


def offset_for_page(page: int, page_size: int) -> int:
    """Offset of the first result of a 1-based page."""
    return page_size * (page - 1)


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed to show `total` results."""
    return math.ceil(total / page_size)


def current_page(offset: int, page_size: int) -> int:
    """1-based page containing `offset`."""
    return offset // page_size + 1


@dataclass
class PageState:
    """Pagination state of one surface."""

    offset: int = 0
    page_size: int = 100
    total: int | None = None
    paginated: bool = False
    value: str = ""
    token: SearchToken | None = None

    def describe(self, returned: int) -> PageDescriptor:
        """Build the page descriptor for `returned` results at the current offset."""
        return PageDescriptor(
            offset=self.offset,
            total=self.total,
            page_size=self.page_size,
            page_count=page_count(self.total, self.page_size) if self.total is not None else None,
            current_page=current_page(self.offset, self.page_size),
            first=self.offset + 1 if returned else 0,
            last=self.offset + returned,
        )


class PaginatedSearchController:
    """Runs the searches of a single surface."""

    def __init__(
        self,
        surface: Surface,
        guard: StaleResultGuard,
        query: SurfaceQuery,
        listener: SearchListener,
        page_size: int = 100,
        surface_stale_errors: bool = True,
    ):
        """
        Initialize the controller.

        Args:
            surface: The surface this controller owns
            guard: Guard holding the surface's latest token
            query: Callable (value, offset, page_size) -> QueryPage
            listener: Receives loading state, results and errors
            page_size: Results requested per page
            surface_stale_errors: Report errors even for superseded searches
        """
        self.surface = surface
        self.guard = guard
        self.query = query
        self.listener = listener
        self.surface_stale_errors = surface_stale_errors
        self.state = PageState(page_size=page_size)

    async def search(self, token: SearchToken, value: str) -> SearchResult | SearchFailure | None:
        """
        Start a new top-level search (offset reset to 0).

        Args:
            token: Token minted for this search
            value: Field value to search for

        Returns:
            The accepted result, the failure, or None if the result was stale
        """
        self.state = PageState(page_size=self.state.page_size, value=value, token=token)
        return await self._run(token, 0)

    async def change_page(self, page: int) -> SearchResult | SearchFailure | None:
        """
        Re-run the current search for another page.

        Page changes reuse the token of the search being paged; they are not
        new user searches, so a newer search on the surface makes them stale.

        Raises:
            InvalidPageError: No paginated search is active or the page is out of range
        """
        self.validate_page(page)
        return await self._run(self.state.token, offset_for_page(page, self.state.page_size))

    def validate_page(self, page: int) -> None:
        """
        Check that a page can be requested.

        Raises:
            InvalidPageError: No paginated search is active or the page is out of range
        """
        state = self.state
        if state.token is None or not state.paginated:
            raise InvalidPageError(page)

        count = page_count(state.total, state.page_size) if state.total is not None else None
        if page < 1 or (count is not None and page > count):
            raise InvalidPageError(page, count)

    async def _run(self, token: SearchToken, offset: int) -> SearchResult | SearchFailure | None:
        # PageState only changes once a page is accepted
        bind_search(self.surface.value, token.serial)
        log = logger.bind(offset=offset)
        state = self.state

        await self.listener.on_loading(self.surface, True)
        try:
            page = await self.query(state.value, offset, state.page_size)
        except GatewayError as e:
            stale = not self.guard.is_current(self.surface, token)
            failure = SearchFailure(self.surface, token, normalize_error(e), stale=stale)
            log.warning("Search failed", error=e.message, status=e.status, stale=stale)
            if stale and not self.surface_stale_errors:
                return failure
            await self.listener.on_loading(self.surface, False)
            await self.listener.on_error(self.surface, failure.error)
            return failure

        if not self.guard.is_current(self.surface, token):
            log.debug("Discarding stale search results")
            return None

        descriptor = None
        if page.offset is not None:
            state.offset = page.offset
            state.total = page.total
            state.page_size = page.page_size or state.page_size
            state.paginated = True
            descriptor = state.describe(len(page.entries))
        else:
            state.offset = offset
            state.paginated = False
            state.total = None

        result = SearchResult(self.surface, token, page.entries, descriptor)
        log.info("Search completed", results=len(page.entries), total=state.total)
        await self.listener.on_loading(self.surface, False)
        await self.listener.on_result(self.surface, result)
        return result
