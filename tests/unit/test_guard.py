"""
Tests for the stale-result guard.
"""

from terminology_search.models.search import SearchToken, Surface
from terminology_search.services.guard import StaleResultGuard


class TestStaleResultGuard:
    """Tests for StaleResultGuard."""

    def test_issue_is_current(self):
        guard = StaleResultGuard()
        token = guard.issue(Surface.CONCEPT)
        assert guard.is_current(Surface.CONCEPT, token)
        assert guard.current(Surface.CONCEPT) == token

    def test_newer_token_supersedes(self):
        guard = StaleResultGuard()
        t1 = guard.issue(Surface.CONCEPT)
        t2 = guard.issue(Surface.CONCEPT)

        assert t1 < t2
        assert not guard.is_current(Surface.CONCEPT, t1)
        assert guard.is_current(Surface.CONCEPT, t2)

    def test_surfaces_are_independent(self):
        guard = StaleResultGuard()
        concept = guard.issue(Surface.CONCEPT)
        guard.issue(Surface.ECL)

        assert guard.is_current(Surface.CONCEPT, concept)

    def test_serials_never_reused(self):
        guard = StaleResultGuard()
        serials = [guard.issue(surface).serial for surface in Surface for _ in range(3)]
        assert len(set(serials)) == len(serials)

    def test_no_token_issued(self):
        guard = StaleResultGuard()
        assert guard.current(Surface.VALUE_SET) is None
        assert not guard.is_current(Surface.VALUE_SET, SearchToken(1, Surface.VALUE_SET))

    def test_token_of_another_guard_is_stale(self):
        guard = StaleResultGuard()
        guard.issue(Surface.CONCEPT)
        assert not guard.is_current(Surface.CONCEPT, SearchToken(99, Surface.CONCEPT))
