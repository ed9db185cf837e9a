"""Tests for the GroceryPrices service wiring."""

import asyncio
import json
import logging

import pytest

from grocery_prices.packages import Provenance
from grocery_prices.service import GroceryPrices


@pytest.fixture
def cache_files(tmp_path):
    return tmp_path / "packages.json", tmp_path / "prices.json"


class TestFromConfig:
    """Tests for building the service from configuration."""

    def test_explicit_key(self, cache_files, caplog):
        package_file, price_file = cache_files

        with caplog.at_level(logging.INFO, logger="grocery_prices.service"):
            service = GroceryPrices.from_config(
                api_key="abcdef1234567890",
                package_cache_file=package_file,
                price_cache_file=price_file,
            )

        assert service.api.has_api_key
        assert "abcde...7890" in caplog.text
        assert "abcdef1234567890" not in caplog.text
        asyncio.run(service.aclose())

    def test_key_from_environment(self, cache_files, monkeypatch):
        monkeypatch.setenv("SPOONACULAR_API_KEY", "env-key-0987654321")
        package_file, price_file = cache_files

        service = GroceryPrices.from_config(package_cache_file=package_file, price_cache_file=price_file)

        assert service.api.api_key == "env-key-0987654321"
        asyncio.run(service.aclose())

    def test_no_key_warns(self, cache_files, monkeypatch, caplog):
        monkeypatch.delenv("SPOONACULAR_API_KEY", raising=False)
        package_file, price_file = cache_files

        service = GroceryPrices.from_config(package_cache_file=package_file, price_cache_file=price_file)

        assert not service.api.has_api_key
        assert "No Spoonacular API key found" in caplog.text
        asyncio.run(service.aclose())

    def test_estimates_persist_across_instances(self, cache_files, monkeypatch):
        monkeypatch.delenv("SPOONACULAR_API_KEY", raising=False)
        package_file, price_file = cache_files

        async def resolve_twice():
            async with GroceryPrices.from_config(
                package_cache_file=package_file, price_cache_file=price_file
            ) as first:
                await first.resolve_package("saffron")
            async with GroceryPrices.from_config(
                package_cache_file=package_file, price_cache_file=price_file
            ) as second:
                return await second.resolve_package("saffron")

        result = asyncio.run(resolve_twice())

        assert result.source == Provenance.CACHE
        assert "saffron" in json.loads(package_file.read_text())


class TestOperations:
    """Tests for the service facade."""

    def test_compute_shopping_cost(self, offline_service):
        summary = asyncio.run(
            offline_service.compute_shopping_cost(
                [
                    {"name": "chicken breast", "quantity": "250g"},
                    {"name": "rice", "quantity": "1kg"},
                ]
            )
        )

        assert summary.total_package_price == pytest.approx(5.99 + 2.99)
        assert summary.total_recipe_cost == pytest.approx(2.995 + 2.99)

    def test_resolve_package(self, offline_service):
        result = asyncio.run(offline_service.resolve_package("Olive Oil"))
        assert result.to_dict() == {"size": "500ml", "price": 6.99, "source": "hardcoded"}

    def test_list_known_packages_includes_resolved(self, offline_service):
        asyncio.run(offline_service.resolve_package("saffron"))
        assert offline_service.list_known_packages()["saffron"].source == Provenance.CACHE

    def test_price_without_api(self, offline_service):
        result = asyncio.run(offline_service.get_ingredient_price("rice"))
        assert result.price is None

    def test_recipe_cost_without_api(self, offline_service):
        result = asyncio.run(
            offline_service.calculate_recipe_cost([{"name": "rice", "quantity": "100g"}])
        )
        assert result.total_cost == 0

    def test_breakdown_without_api(self, offline_service):
        assert asyncio.run(offline_service.get_recipe_price_breakdown(1)) is None

    def test_clear_caches(self, offline_service):
        asyncio.run(offline_service.resolve_package("saffron"))
        offline_service.price_cache.set("rice", {"price": 1.0, "unit": "kg"})

        offline_service.clear_caches()

        assert len(offline_service.package_cache) == 0
        assert len(offline_service.price_cache) == 0
        assert "saffron" not in offline_service.list_known_packages()

    def test_uses_api_when_given(self, mock_ingredient_price, api_client):
        service = GroceryPrices.in_memory(api=api_client)

        cost = asyncio.run(
            service.calculate_ingredient_cost({"name": "pineapple", "quantity": "2 piece"})
        )

        assert cost.total == pytest.approx(5.0)
