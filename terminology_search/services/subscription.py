"""
Search field subscriptions.

Turns raw field events into search invocations. A field triggers when its
value is committed (change) or when Enter is pressed, and only if the
trimmed value is long enough. This is the only place search tokens are
minted, so the two trigger paths cannot race each other.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from terminology_search.config.logging import get_logger
from terminology_search.models.search import SearchToken, Surface
from terminology_search.services.guard import StaleResultGuard

logger = get_logger(__name__)

CONFIRM_KEY = "Enter"
DEFAULT_MIN_LENGTH = 2

TriggerHandler = Callable[[Surface, str, SearchToken], Any]


class FieldEventKind(str, Enum):
    """Raw events a search field emits."""

    CHANGE = "change"
    KEYPRESS = "keypress"


@dataclass(frozen=True)
class FieldEvent:
    """A raw event on a search field."""

    surface: Surface
    kind: FieldEventKind
    value: str
    key: str | None = None


@dataclass(frozen=True)
class _Subscription:
    handler: TriggerHandler
    min_length: int


class SearchFieldSubscription:
    """Dispatches field events to the handler subscribed for their surface."""

    def __init__(self, guard: StaleResultGuard):
        self.guard = guard
        self._subscriptions: dict[Surface, _Subscription] = {}

    def subscribe(
        self,
        surface: Surface,
        on_trigger: TriggerHandler,
        min_length: int = DEFAULT_MIN_LENGTH,
    ) -> None:
        """
        Bind a handler to a surface's trigger events.

        Args:
            surface: The search surface
            on_trigger: Called with (surface, value, token) when the field triggers
            min_length: Minimum trimmed value length that triggers a search
        """
        self._subscriptions[surface] = _Subscription(on_trigger, min_length)

    def is_trigger(self, event: FieldEvent) -> bool:
        """Whether an event passes the confirm-key and minimum-length gates."""
        subscription = self._subscriptions.get(event.surface)
        if subscription is None:
            return False
        if event.kind == FieldEventKind.KEYPRESS and event.key != CONFIRM_KEY:
            return False
        return len(event.value.strip()) >= subscription.min_length

    def dispatch(self, event: FieldEvent) -> Any:
        """
        Handle a field event.

        Args:
            event: The raw field event

        Returns:
            The handler's return value, or None if the event did not trigger
        """
        if not self.is_trigger(event):
            return None

        token = self.guard.issue(event.surface)
        logger.debug(
            "Search triggered",
            surface=event.surface.value,
            token=token.serial,
            trigger=event.kind.value,
        )
        return self._subscriptions[event.surface].handler(event.surface, event.value, token)
