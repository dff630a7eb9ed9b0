"""
Unit tests for naming authority queries in social.graze.hdlproxy.resolve.authority
"""

import pytest

from social.graze.hdlproxy.errors import RemoteResolutionError
from social.graze.hdlproxy.registry.prefixes import PrefixRegistry
from social.graze.hdlproxy.resolve.authority import (
    authority_exists,
    authority_prefix,
    list_handles,
)
from social.graze.hdlproxy.resolve.handle import ResolutionStatus, resolve_handle


class TestAuthorityPrefix:
    """Test suite for authority_prefix."""

    def test_strips_na_marker(self):
        assert authority_prefix("0.NA/10673") == "10673"

    def test_bare_prefix_unchanged(self):
        assert authority_prefix("10673") == "10673"

    def test_marker_only_stripped_once(self):
        assert authority_prefix("0.NA/0.NA/10673") == "0.NA/10673"


class TestAuthorityExists:
    """Test suite for authority_exists."""

    def test_registered_authority(self):
        registry = PrefixRegistry({"10673": "http://repo1/x"})
        assert authority_exists(registry, "0.NA/10673") is True
        assert authority_exists(registry, "10673") is True

    def test_unknown_authority(self):
        registry = PrefixRegistry({"10673": "http://repo1/x"})
        assert authority_exists(registry, "0.NA/99999") is False
        assert authority_exists(registry, "0.NA/") is False


class TestListHandles:
    """Test suite for list_handles."""

    @pytest.mark.asyncio
    async def test_lists_in_repository_order(self, http_session, repo1, repo1_registry):
        handles = await list_handles(http_session, repo1_registry, "0.NA/10673")

        assert handles == ["10673/1", "10673/2"]
        assert repo1.requests == ["/x/listhandles/10673"]

    @pytest.mark.asyncio
    async def test_bare_prefix(self, http_session, repo1, repo1_registry):
        assert await list_handles(http_session, repo1_registry, "10673") == [
            "10673/1",
            "10673/2",
        ]

    @pytest.mark.asyncio
    async def test_unknown_authority_makes_no_request(
        self, http_session, repo1, repo1_registry
    ):
        assert await list_handles(http_session, repo1_registry, "0.NA/99999") == []
        assert repo1.requests == []

    @pytest.mark.asyncio
    async def test_empty_answers(self, http_session, repository_factory):
        repo = await repository_factory(["1", "2", "3"], handles={"1": [], "2": "", "3": None})
        registry = PrefixRegistry({"1": repo.endpoint, "2": repo.endpoint, "3": repo.endpoint})

        assert await list_handles(http_session, registry, "1") == []
        assert await list_handles(http_session, registry, "2") == []
        assert await list_handles(http_session, registry, "3") == []

    @pytest.mark.asyncio
    async def test_listing_is_restartable(self, http_session, repo1, repo1_registry):
        """The result is a list that can be enumerated any number of times."""
        handles = await list_handles(http_session, repo1_registry, "10673")
        assert list(handles) == list(handles)

    @pytest.mark.asyncio
    async def test_failure_is_not_an_empty_list(self, http_session, refused_endpoint):
        """An unreachable repository raises instead of claiming the authority is empty."""
        registry = PrefixRegistry({"10673": refused_endpoint})

        with pytest.raises(RemoteResolutionError) as exc_info:
            await list_handles(http_session, registry, "0.NA/10673")

        assert exc_info.value.target == "10673"

    @pytest.mark.asyncio
    async def test_malformed_answer_raises(self, http_session, repository_factory):
        repo = await repository_factory(["10673"], handles={"10673": "not json"})
        registry = PrefixRegistry({"10673": repo.endpoint})

        with pytest.raises(RemoteResolutionError):
            await list_handles(http_session, registry, "10673")

    @pytest.mark.asyncio
    async def test_listed_handles_resolve(self, http_session, repo1, repo1_registry):
        """Every listed handle resolves against a repository that knows it."""
        handles = await list_handles(http_session, repo1_registry, "0.NA/10673")

        for handle in handles:
            outcome = await resolve_handle(http_session, repo1_registry, handle)
            assert outcome.status == ResolutionStatus.found
