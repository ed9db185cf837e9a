"""Shared fixtures for grocery-prices tests."""

import pytest
import respx

from grocery_prices.api import SpoonacularAPI
from grocery_prices.cache import DurableCache
from grocery_prices.packages import PackageResolver
from grocery_prices.prices import IngredientPriceService
from grocery_prices.service import GroceryPrices

TEST_BASE_URL = "https://api.spoonacular.test"
TEST_API_KEY = "test-key-1234567890"

DAY_MS = 24 * 60 * 60 * 1000


class FakeClock:
    """Controllable epoch-milliseconds clock for cache tests."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_httpx():
    """Activate respx mock for HTTP requests."""
    with respx.mock(assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def api_client():
    """Spoonacular client with a test key, pointed at the mocked base URL."""
    return SpoonacularAPI(TEST_API_KEY, base_url=TEST_BASE_URL)


@pytest.fixture
def keyless_api():
    """Spoonacular client without an API key."""
    return SpoonacularAPI(None, base_url=TEST_BASE_URL)


@pytest.fixture
def package_cache(clock):
    """In-memory package cache with a 30 day TTL."""
    return DurableCache(None, ttl=30 * DAY_MS, clock=clock)


@pytest.fixture
def price_cache(clock):
    """In-memory price cache with a 24 hour TTL."""
    return DurableCache(None, ttl=DAY_MS, clock=clock)


@pytest.fixture
def price_service(api_client, price_cache):
    return IngredientPriceService(api_client, price_cache)


@pytest.fixture
def resolver(package_cache, api_client, price_service):
    return PackageResolver(package_cache, api=api_client, price_service=price_service)


@pytest.fixture
def offline_resolver(package_cache):
    """Resolver with no remote tier."""
    return PackageResolver(package_cache)


@pytest.fixture
def offline_service():
    """Service with in-memory caches and no API client."""
    return GroceryPrices.in_memory()


@pytest.fixture
def mock_product():
    """Grocery product details as returned by /food/products/{id}."""
    return {
        "id": 22347,
        "title": "Organic Chickpeas",
        "price": 1.79,
        "packageWeight": "425g",
        "servings": 3.5,
        "serving_size": "130 g",
    }


@pytest.fixture
def mock_product_search(mock_httpx, mock_product):
    """Product search and details endpoints returning mock_product."""
    mock_httpx.get(path="/food/products/search").respond(
        json={"products": [{"id": mock_product["id"], "title": mock_product["title"]}]}
    )
    mock_httpx.get(path=f"/food/products/{mock_product['id']}").respond(json=mock_product)
    return mock_httpx


@pytest.fixture
def mock_ingredient_price(mock_httpx):
    """Ingredient search and information endpoints with a 2.50 estimated cost."""
    mock_httpx.get(path="/food/ingredients/search").respond(
        json={"results": [{"id": 9266, "name": "pineapple"}], "totalResults": 1}
    )
    mock_httpx.get(path="/food/ingredients/9266/information").respond(
        json={
            "id": 9266,
            "name": "pineapple",
            "unit": "piece",
            "estimatedCost": {"value": 250.0, "unit": "US Cents"},
        }
    )
    return mock_httpx
