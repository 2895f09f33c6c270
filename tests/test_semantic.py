"""
Tests for the semantic search client.
"""

import httpx
import pytest

from ycb.clients.images import ImageResolver
from ycb.clients.semantic import SemanticSearchClient
from ycb.core.errors import SemanticSearchError

from tests.conftest import BACKEND, image_route

SEARCH = "/backend/search"
IMAGES = "/backend/fetchImagesByIDs"


def make_client(http):
    images = ImageResolver(http, BACKEND, "secret-key")
    return SemanticSearchClient(http, BACKEND, "secret-key", images)


class TestSemanticSearchClient:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_blank_query_makes_no_request(self, recorder, http, query):
        assert await make_client(http).search(query) == []
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_request_body_and_results(self, recorder, http, sample_semantic):
        recorder.routes[SEARCH] = lambda r: httpx.Response(200, json=sample_semantic)
        recorder.routes[IMAGES] = image_route({"s2": "https://img.test/crab.png"})

        results = await make_client(http).search("rust ownership")

        request = recorder.calls(SEARCH)[0]
        assert request.headers["Authorization"] == "Bearer secret-key"
        assert recorder.bodies(SEARCH) == [
            {"text": "rust ownership", "matchLimit": 5, "matchThreshold": 0.35}
        ]
        assert [e.id for e in results] == ["s1", "s2"]
        assert all(0 <= e.similarity <= 1 for e in results)
        assert results[0].image is None
        assert results[1].image == "https://img.test/crab.png"
        assert recorder.bodies(IMAGES) == [{"ids": ["s2"]}]

    @pytest.mark.asyncio
    async def test_overrides(self, recorder, http):
        recorder.routes[SEARCH] = lambda r: httpx.Response(200, json=[])

        await make_client(http).search("x", match_limit=10, match_threshold=0.5)

        assert recorder.bodies(SEARCH)[0]["matchLimit"] == 10
        assert recorder.bodies(SEARCH)[0]["matchThreshold"] == 0.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
    async def test_non_2xx_is_error(self, recorder, http, status):
        recorder.routes[SEARCH] = lambda r: httpx.Response(status, json={"error": "nope"})

        with pytest.raises(SemanticSearchError):
            await make_client(http).search("rust")

    @pytest.mark.asyncio
    async def test_network_failure(self, recorder, http):
        def fail(request):
            raise httpx.ReadTimeout("slow", request=request)
        recorder.routes[SEARCH] = fail

        with pytest.raises(SemanticSearchError):
            await make_client(http).search("rust")

    @pytest.mark.asyncio
    async def test_non_list_body_is_error(self, recorder, http):
        recorder.routes[SEARCH] = lambda r: httpx.Response(200, json={"results": []})

        with pytest.raises(SemanticSearchError):
            await make_client(http).search("rust")
