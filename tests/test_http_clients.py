"""Tests for HTTP-based adapters."""

import asyncio

import httpx
import pytest

from protein_ledger.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient


def test_openfoodfacts_client_get_product() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v0/product/3017620422003.json"
        return httpx.Response(
            200,
            json={"status": 1, "product": {"product_name": "Greek Yogurt"}},
        )

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test", http_client=async_client
    )

    payload = asyncio.run(client.get_product("3017620422003"))

    assert payload["status"] == 1


def test_openfoodfacts_client_search_sends_fixed_params() -> None:
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json={"count": 0, "products": []})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test", http_client=async_client
    )

    result = asyncio.run(client.search_products({"search_terms": "tofu", "page": 2}))

    assert result == {"count": 0, "products": []}
    url = seen[0]
    assert url.path == "/cgi/search.pl"
    assert url.params["action"] == "process"
    assert url.params["json"] == "1"
    assert url.params["search_terms"] == "tofu"
    assert url.params["page"] == "2"
    assert "nutriments" in url.params["fields"]


def test_openfoodfacts_client_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "down"})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test", http_client=async_client
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_product("123"))


def test_openfoodfacts_client_create_sets_user_agent() -> None:
    client = HttpxOpenFoodFactsClient.create(
        "https://off.test/", user_agent="protein-ledger-tests/1.0"
    )

    assert client.base_url == "https://off.test"
    assert client.http_client.headers["User-Agent"] == "protein-ledger-tests/1.0"
    asyncio.run(client.close())
