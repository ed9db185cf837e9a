"""Tests for the Spoonacular API client."""

import asyncio

import httpx
import pytest

from grocery_prices.api import SpoonacularAPI, SpoonacularAPIError


class TestApiInitialization:
    """Tests for API client initialization."""

    def test_has_api_key(self, api_client):
        assert api_client.has_api_key

    def test_missing_api_key(self, keyless_api):
        assert not keyless_api.has_api_key

    def test_empty_api_key(self):
        assert not SpoonacularAPI("").has_api_key

    def test_strips_trailing_slash(self):
        api = SpoonacularAPI("key", base_url="https://example.com/")
        assert api.base_url == "https://example.com"

    def test_requests_without_key_raise(self, keyless_api):
        with pytest.raises(SpoonacularAPIError):
            asyncio.run(keyless_api.search_products("tofu"))


class TestProductSearch:
    """Tests for product lookups."""

    def test_search_products_sends_api_key(self, mock_httpx, api_client):
        route = mock_httpx.get(path="/food/products/search").respond(
            json={"products": [{"id": 1, "title": "Tofu"}]}
        )

        products = asyncio.run(api_client.search_products("tofu", number=2))

        assert products == [{"id": 1, "title": "Tofu"}]
        request = route.calls.last.request
        assert request.url.params["apiKey"] == api_client.api_key
        assert request.url.params["query"] == "tofu"
        assert request.url.params["number"] == "2"

    def test_search_products_handles_missing_list(self, mock_httpx, api_client):
        mock_httpx.get(path="/food/products/search").respond(json={"totalProducts": 0})

        assert asyncio.run(api_client.search_products("nothing")) == []

    def test_find_product_fetches_details(self, mock_product_search, api_client, mock_product):
        product = asyncio.run(api_client.find_product("chickpeas"))

        assert product == mock_product

    def test_find_product_no_results(self, mock_httpx, api_client):
        mock_httpx.get(path="/food/products/search").respond(json={"products": []})

        assert asyncio.run(api_client.find_product("unobtainium")) is None

    def test_find_product_without_id(self, mock_httpx, api_client):
        mock_httpx.get(path="/food/products/search").respond(json={"products": [{"title": "?"}]})

        assert asyncio.run(api_client.find_product("mystery")) is None


class TestErrors:
    """Tests for error wrapping."""

    def test_http_error_status(self, mock_httpx, api_client):
        mock_httpx.get(path="/food/products/search").respond(status_code=402, json={})

        with pytest.raises(SpoonacularAPIError) as exc_info:
            asyncio.run(api_client.search_products("tofu"))

        assert "402" in str(exc_info.value)

    def test_network_error(self, mock_httpx, api_client):
        mock_httpx.get(path="/food/products/search").mock(
            side_effect=httpx.ConnectError("Network unreachable")
        )

        with pytest.raises(SpoonacularAPIError) as exc_info:
            asyncio.run(api_client.search_products("tofu"))

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_invalid_json(self, mock_httpx, api_client):
        mock_httpx.get(path="/food/products/search").respond(text="<html>oops</html>")

        with pytest.raises(SpoonacularAPIError):
            asyncio.run(api_client.search_products("tofu"))


class TestIngredients:
    """Tests for ingredient and recipe endpoints."""

    def test_search_ingredients(self, mock_ingredient_price, api_client):
        results = asyncio.run(api_client.search_ingredients("pineapple"))
        assert results[0]["id"] == 9266

    def test_ingredient_information(self, mock_ingredient_price, api_client):
        info = asyncio.run(api_client.get_ingredient_information(9266))

        assert info["estimatedCost"]["value"] == 250.0
        request = mock_ingredient_price.calls.last.request
        assert request.url.params["amount"] == "1"
        assert request.url.params["unit"] == "piece"

    def test_recipe_price_breakdown(self, mock_httpx, api_client):
        mock_httpx.get(path="/recipes/1003464/priceBreakdownWidget.json").respond(
            json={"ingredients": [], "totalCost": 123.4, "totalCostPerServing": 30.85}
        )

        breakdown = asyncio.run(api_client.get_recipe_price_breakdown(1003464))

        assert breakdown["totalCost"] == 123.4


class TestLifecycle:
    """Tests for client cleanup."""

    def test_async_context_manager_closes_client(self):
        async def use_client():
            async with SpoonacularAPI("key") as api:
                pass
            return api

        api = asyncio.run(use_client())
        assert api.client.is_closed
