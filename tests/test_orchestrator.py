"""
Tests for the search orchestrator state machine.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from ycb.clients.auth import TokenProvider
from ycb.clients.images import ImageResolver
from ycb.clients.lexical import MeiliSearchClient
from ycb.clients.semantic import SemanticSearchClient
from ycb.core.errors import AuthError, LexicalSearchError, SemanticSearchError
from ycb.core.orchestrator import NotificationLevel, SearchOrchestrator
from ycb.models import Entry

from tests.conftest import BACKEND, MEILI


def entries(*ids, similarity=None):
    return [Entry(i, data=f"data {i}", similarity=similarity) for i in ids]


@pytest.fixture
def lexical():
    client = MagicMock()
    client.search = AsyncMock(return_value=entries("l1", "l2"))
    return client


@pytest.fixture
def semantic():
    client = MagicMock()
    client.search = AsyncMock(return_value=entries("s1", similarity=0.9))
    return client


@pytest.fixture
def notify():
    return MagicMock()


@pytest.fixture
def orchestrator(lexical, semantic, notify):
    return SearchOrchestrator(lexical, semantic, notify=notify)


class TestQueryUpdates:
    def test_initial_state(self, orchestrator):
        assert orchestrator.session.show_onboarding
        assert orchestrator.lexical_results == []
        assert orchestrator.semantic_results == []
        assert not orchestrator.can_trigger_semantic

    @pytest.mark.asyncio
    async def test_update_query_applies_results(self, orchestrator, lexical):
        applied = await orchestrator.update_query("rust")

        assert applied
        assert [e.id for e in orchestrator.lexical_results] == ["l1", "l2"]
        lexical.search.assert_awaited_once_with("rust")
        assert not orchestrator.session.is_loading

    @pytest.mark.asyncio
    async def test_blank_query_clears_without_search(self, orchestrator, lexical):
        await orchestrator.update_query("rust")
        lexical.search.reset_mock()

        applied = await orchestrator.update_query("   ")

        assert not applied
        assert orchestrator.lexical_results == []
        lexical.search.assert_not_awaited()
        assert not orchestrator.session.lexical_loading

    @pytest.mark.asyncio
    async def test_typing_clears_semantic_before_lexical_resolves(self, orchestrator):
        await orchestrator.update_query("rust")
        await orchestrator.trigger_semantic()
        assert orchestrator.semantic_results

        generation = orchestrator.set_query("rust o")

        assert orchestrator.semantic_results == []
        assert orchestrator.session.lexical_loading
        await orchestrator.run_lexical(generation)
        assert orchestrator.lexical_results

    @pytest.mark.asyncio
    async def test_stale_lexical_response_discarded(self, orchestrator, lexical):
        slow_started = asyncio.Event()
        release_slow = asyncio.Event()

        async def search(query):
            if query == "ru":
                slow_started.set()
                await release_slow.wait()
                return entries("stale")
            return entries("fresh")
        lexical.search = AsyncMock(side_effect=search)

        first = orchestrator.set_query("ru")
        slow = asyncio.create_task(orchestrator.run_lexical(first))
        await slow_started.wait()

        second = orchestrator.set_query("rust")
        assert await orchestrator.run_lexical(second)

        release_slow.set()
        assert not await slow

        assert [e.id for e in orchestrator.lexical_results] == ["fresh"]

    @pytest.mark.asyncio
    async def test_superseded_generation_not_dispatched(self, orchestrator, lexical):
        first = orchestrator.set_query("ru")
        orchestrator.set_query("rust")

        assert not await orchestrator.run_lexical(first)
        lexical.search.assert_not_awaited()


class TestSemantic:
    @pytest.mark.asyncio
    async def test_trigger_keeps_lexical(self, orchestrator, semantic):
        await orchestrator.update_query("rust ownership")

        assert await orchestrator.trigger_semantic()

        semantic.search.assert_awaited_once_with("rust ownership")
        assert [e.id for e in orchestrator.semantic_results] == ["s1"]
        assert [e.id for e in orchestrator.lexical_results] == ["l1", "l2"]

    @pytest.mark.asyncio
    async def test_blank_query_does_not_trigger(self, orchestrator, semantic):
        assert not await orchestrator.trigger_semantic()
        semantic.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_notifies_and_clears(self, orchestrator, semantic, notify):
        await orchestrator.update_query("rust")
        await orchestrator.trigger_semantic()

        semantic.search = AsyncMock(side_effect=SemanticSearchError("401"))
        await orchestrator.trigger_semantic()

        assert orchestrator.semantic_results == []
        assert [e.id for e in orchestrator.lexical_results] == ["l1", "l2"]
        notify.assert_called_once_with(
            NotificationLevel.ERROR, "Search Error", "Failed to perform semantic search"
        )

    @pytest.mark.asyncio
    async def test_response_after_typing_discarded(self, orchestrator, semantic):
        await orchestrator.update_query("rust")
        generation = orchestrator.begin_semantic()

        orchestrator.set_query("rust ownership")

        assert not await orchestrator.run_semantic(generation)
        assert orchestrator.semantic_results == []


class TestErrorPolicy:
    @pytest.mark.asyncio
    async def test_index_error_is_silent(self, orchestrator, lexical, notify):
        lexical.search = AsyncMock(side_effect=LexicalSearchError("bad query"))

        await orchestrator.update_query("rust")

        assert orchestrator.lexical_results == []
        notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_error_is_visible(self, orchestrator, lexical, notify):
        lexical.search = AsyncMock(side_effect=LexicalSearchError("down", transport=True))

        await orchestrator.update_query("rust")

        assert orchestrator.lexical_results == []
        notify.assert_called_once()
        assert notify.call_args.args[0] == NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_initialize_reports_bad_key(self, lexical, semantic, notify):
        tokens = MagicMock()
        tokens.get_token = AsyncMock(side_effect=AuthError("Invalid API key"))
        orchestrator = SearchOrchestrator(lexical, semantic, notify=notify, tokens=tokens)

        assert not await orchestrator.initialize()
        notify.assert_called_once_with(
            NotificationLevel.ERROR,
            "Search Error",
            "Failed to initialize search. Check your API key.",
        )

    @pytest.mark.asyncio
    async def test_initialize_without_tokens(self, orchestrator):
        assert await orchestrator.initialize()


class TestAuthFailure:
    """Real clients over a mock transport whose token endpoint rejects the key."""

    @pytest.fixture
    def backend(self, recorder, http):
        recorder.routes["/backend/token"] = lambda r: httpx.Response(
            200, json={"error": "Invalid API key"}
        )
        tokens = TokenProvider(http, BACKEND, "bad-key")
        images = ImageResolver(http, BACKEND, "bad-key")
        lexical = MeiliSearchClient(http, MEILI, tokens, images)
        semantic = SemanticSearchClient(http, BACKEND, "bad-key", images)
        return tokens, lexical, semantic

    @pytest.mark.asyncio
    async def test_bad_key_stops_lexical_search(self, recorder, backend, notify):
        tokens, lexical, semantic = backend
        orchestrator = SearchOrchestrator(lexical, semantic, notify=notify, tokens=tokens)

        assert not await orchestrator.initialize()
        await orchestrator.update_query("r")
        await orchestrator.update_query("ru")

        assert len(recorder.calls("/backend/token")) == 1
        assert recorder.calls("/indexes/ycb_fts_staging/search") == []
        notify.assert_called_once_with(
            NotificationLevel.ERROR,
            "Search Error",
            "Failed to initialize search. Check your API key.",
        )
        assert not orchestrator.session.lexical_loading
        assert orchestrator.session.show_no_results

    @pytest.mark.asyncio
    async def test_auth_failure_during_search_reported_once(self, recorder, backend, notify):
        tokens, lexical, semantic = backend
        orchestrator = SearchOrchestrator(lexical, semantic, notify=notify)

        await orchestrator.update_query("r")
        await orchestrator.update_query("ru")

        assert len(recorder.calls("/backend/token")) == 1
        notify.assert_called_once()
        assert notify.call_args.args[2] == "Failed to initialize search. Check your API key."
