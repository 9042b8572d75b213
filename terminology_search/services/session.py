"""
Interactive search session.

Wires the four search surfaces of one client together: a shared guard and
field subscription, one paginated controller per surface and the ECL
filter builder. Each session owns its own state; nothing is shared between
sessions except the gateway.
"""

import asyncio
from collections.abc import Sequence
from typing import Protocol

from terminology_search.config.logging import get_logger
from terminology_search.config.settings import Settings, get_settings
from terminology_search.models.ecl import EclExpression, FilterRow, FilterRowInput
from terminology_search.models.search import (
    QueryPage,
    ResourceEntry,
    SearchFailure,
    SearchResult,
    SearchToken,
    Surface,
)
from terminology_search.services.ecl import EclExpressionBuilder
from terminology_search.services.gateway import TerminologyGateway
from terminology_search.services.guard import StaleResultGuard
from terminology_search.services.pagination import (
    PaginatedSearchController,
    SearchListener,
    SurfaceQuery,
)
from terminology_search.services.subscription import (
    FieldEvent,
    FieldEventKind,
    SearchFieldSubscription,
)
from terminology_search.services.terminology import (
    search_code_systems,
    search_concepts,
    search_ecl,
    search_value_sets,
)

logger = get_logger(__name__)


class SessionListener(SearchListener, Protocol):
    """Search listener that is also told about ECL filter changes."""

    async def on_ecl_changed(self, expression: EclExpression, rows: Sequence[FilterRow]) -> None: ...


class SearchSession:
    """State and orchestration of one interactive search client."""

    def __init__(
        self,
        gateway: TerminologyGateway,
        listener: SessionListener,
        settings: Settings | None = None,
    ):
        self.gateway = gateway
        self.listener = listener
        self.settings = settings or get_settings()

        self.guard = StaleResultGuard()
        self.subscription = SearchFieldSubscription(self.guard)
        self.ecl = EclExpressionBuilder()

        self.code_system: ResourceEntry | None = None
        self.value_set: ResourceEntry | None = None
        self._value_set_url: str | None = None
        self._tasks: set[asyncio.Task] = set()
        self.results: dict[Surface, tuple[ResourceEntry, ...]] = {}

        self.controllers: dict[Surface, PaginatedSearchController] = {
            Surface.CODE_SYSTEM: self._controller(Surface.CODE_SYSTEM, self._query_code_systems),
            Surface.VALUE_SET: self._controller(Surface.VALUE_SET, self._query_value_sets),
            Surface.CONCEPT: self._controller(Surface.CONCEPT, self._query_concepts),
            Surface.ECL: self._controller(Surface.ECL, self._query_ecl),
        }

        for surface in (Surface.CODE_SYSTEM, Surface.VALUE_SET, Surface.CONCEPT):
            self.subscription.subscribe(surface, self._on_trigger, self.settings.min_length)
        self.subscription.subscribe(Surface.ECL, self._on_trigger, self.settings.ecl_min_length)

    def _controller(self, surface: Surface, query: SurfaceQuery) -> PaginatedSearchController:
        return PaginatedSearchController(
            surface,
            self.guard,
            query,
            self.listener,
            page_size=self.settings.page_size,
            surface_stale_errors=self.settings.surface_stale_errors,
        )

    # Surface queries

    async def _query_code_systems(self, value: str, offset: int, page_size: int) -> QueryPage:
        return await search_code_systems(self.gateway, value)

    async def _query_value_sets(self, value: str, offset: int, page_size: int) -> QueryPage:
        return await search_value_sets(self.gateway, value)

    async def _query_concepts(self, value: str, offset: int, page_size: int) -> QueryPage:
        return await search_concepts(
            self.gateway, self.value_set_url, value, offset, page_size, self.settings
        )

    async def _query_ecl(self, value: str, offset: int, page_size: int) -> QueryPage:
        return await search_ecl(
            self.gateway, self.value_set_url, value, offset, page_size, self.settings
        )

    # Field events and paging

    def _on_trigger(self, surface: Surface, value: str, token: SearchToken) -> asyncio.Task:
        return self._spawn(self._record(self.controllers[surface].search(token, value)))

    async def _record(self, search) -> SearchResult | SearchFailure | None:
        outcome = await search
        if isinstance(outcome, SearchResult):
            self.results[outcome.surface] = outcome.entries
        return outcome

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Search task failed", error=str(task.exception()))

    def handle_event(self, event: FieldEvent) -> asyncio.Task | None:
        """
        Feed a raw field event into the session.

        Returns:
            The spawned search task, or None if the event did not trigger
        """
        return self.subscription.dispatch(event)

    async def change_page(self, surface: Surface, page: int) -> SearchResult | SearchFailure | None:
        """
        Show another page of the current search of a surface.

        Raises:
            InvalidPageError: If the surface has no paginated search or the page is out of range
        """
        return await self._record(self.controllers[surface].change_page(page))

    def request_page(self, surface: Surface, page: int) -> asyncio.Task:
        """
        Validate a page request and run it in the background.

        Raises:
            InvalidPageError: If the surface has no paginated search or the page is out of range
        """
        self.controllers[surface].validate_page(page)
        return self._spawn(self.change_page(surface, page))

    def find_entry(self, surface: Surface, identifier: str) -> ResourceEntry | None:
        """Look up an entry of the latest accepted results of a surface."""
        for entry in self.results.get(surface, ()):
            if entry.identifier == identifier:
                return entry
        return None

    # Selections

    @property
    def value_set_url(self) -> str:
        """Value set used by concept and ECL searches."""
        return self._value_set_url or self.settings.default_value_set_url

    def set_value_set_url(self, url: str | None) -> None:
        self._value_set_url = url.strip() if url else None
        logger.debug("Value set URL changed", value_set_url=self.value_set_url)

    def select_code_system(self, entry: ResourceEntry) -> None:
        """Select a Code System and seed the value set from its implicit value set."""
        self.code_system = entry
        if entry.value_set:
            self.set_value_set_url(entry.value_set)

    def select_value_set(self, entry: ResourceEntry) -> None:
        self.value_set = entry
        self.set_value_set_url(entry.url)

    # ECL filter rows

    async def append_ecl_row(
        self, operator: str | None = None, code: str = "", label: str = ""
    ) -> asyncio.Task | None:
        self.ecl.append_row(operator, code, label)
        return await self._ecl_changed()

    async def update_ecl_row(
        self,
        index: int,
        operator: str | None = None,
        code: str | None = None,
        label: str | None = None,
    ) -> asyncio.Task | None:
        self.ecl.update_row(index, operator, code, label)
        return await self._ecl_changed()

    async def remove_ecl_row(self, index: int) -> asyncio.Task | None:
        self.ecl.remove_row(index)
        return await self._ecl_changed()

    async def replace_ecl_rows(
        self, rows: Sequence[FilterRow | FilterRowInput]
    ) -> asyncio.Task | None:
        self.ecl.replace_all(rows)
        return await self._ecl_changed()

    async def children_of(self, code: str, label: str = "") -> asyncio.Task | None:
        self.ecl.children_of(code, label)
        return await self._ecl_changed()

    async def parents_of(self, code: str, label: str = "") -> asyncio.Task | None:
        self.ecl.parents_of(code, label)
        return await self._ecl_changed()

    async def _ecl_changed(self) -> asyncio.Task | None:
        """Publish the re-rendered expression and search it as a committed ECL field value."""
        expression = self.ecl.render()
        logger.debug("ECL expression changed", short=expression.short_form, long=expression.long_form)
        await self.listener.on_ecl_changed(expression, self.ecl.rows)
        return self.handle_event(
            FieldEvent(Surface.ECL, FieldEventKind.CHANGE, expression.short_form)
        )

    # Lifecycle

    async def wait(self) -> None:
        """Wait for every outstanding search task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel outstanding searches."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
