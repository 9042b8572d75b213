"""
Stale-result guard.

Every search is tagged with a token when it starts. A response is only
applied if its token is still the latest one issued for its surface, so
out-of-order completions never overwrite the results of newer input.
In-flight requests are not cancelled; late responses are just ignored.
"""

import itertools

from terminology_search.config.logging import get_logger
from terminology_search.models.search import SearchToken, Surface

logger = get_logger(__name__)


class StaleResultGuard:
    """Tracks the latest search token of each surface."""

    def __init__(self):
        self._serials = itertools.count(1)
        self._latest: dict[Surface, SearchToken] = {}

    def issue(self, surface: Surface) -> SearchToken:
        """
        Mint a new token for a surface, superseding the previous one.

        Args:
            surface: The search surface

        Returns:
            The new current token
        """
        token = SearchToken(serial=next(self._serials), surface=surface)
        self._latest[surface] = token
        logger.debug("Issued search token", surface=surface.value, token=token.serial)
        return token

    def current(self, surface: Surface) -> SearchToken | None:
        """Get the latest token issued for a surface, if any."""
        return self._latest.get(surface)

    def is_current(self, surface: Surface, token: SearchToken) -> bool:
        """
        Check whether a token is still the latest for its surface.

        Args:
            surface: The search surface
            token: Token the response was issued with

        Returns:
            True if the response may be applied
        """
        return self._latest.get(surface) == token
