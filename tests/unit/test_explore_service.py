"""
Unit tests for explore page orchestration.

Tests cover:
- Keyword derivation from weather and preferences
- Skipping the style search when no styles are chosen
- Keyword table selection
- Failure propagation
"""

import pytest
from prometheus_client import CollectorRegistry

from fashion_api.exceptions import CityNotFoundError, UpstreamServiceError
from fashion_api.services.explore_service import ExploreService
from fashion_api.services.keywords import OUTFIT_KEYWORDS
from fashion_shared.metrics import ForecastMetrics


class TestExploreService:
    """Tests for ExploreService.explore."""

    @pytest.mark.asyncio
    async def test_builds_page(self, weather_client, photo_client):
        service = ExploreService(weather_client, photo_client)

        page = await service.explore("toronto", "Woman", ["casual", "formal"])

        assert page.title == "Explore"
        assert page.weather.city_name == "Toronto"
        assert page.style_keywords == ["Woman casual", "Woman formal"]
        assert page.accessory_keywords == ["Woman", "umbrella", "raincoat"]
        assert photo_client.searches == [
            ["Woman casual", "Woman formal"],
            ["Woman", "umbrella", "raincoat"],
        ]
        assert page.style_photos.query == "Woman casual, Woman formal"
        assert page.accessory_photos.query == "Woman, umbrella, raincoat"

    @pytest.mark.asyncio
    async def test_no_styles_skips_style_search(self, weather_client, photo_client):
        service = ExploreService(weather_client, photo_client)

        page = await service.explore("toronto", "Man", [])

        assert page.style_keywords == []
        assert page.style_photos.photos == []
        assert photo_client.searches == [["Man", "umbrella", "raincoat"]]

    @pytest.mark.asyncio
    async def test_outfit_table(self, weather_client, photo_client):
        weather_client.description = "snow"
        service = ExploreService(weather_client, photo_client, keyword_table=OUTFIT_KEYWORDS)

        page = await service.explore("paris", "Woman", [])

        assert page.accessory_keywords == ["Woman", "beanie", "coat", "sweater"]

    @pytest.mark.asyncio
    async def test_unknown_description_counts_fallback(self, weather_client, photo_client):
        registry = CollectorRegistry()
        weather_client.description = "freezing drizzle"
        service = ExploreService(weather_client, photo_client, metrics=ForecastMetrics(registry=registry))

        page = await service.explore("toronto", "Woman", [])

        assert page.accessory_keywords == ["Woman", "freezing drizzle", "accessory", "clothing"]
        assert registry.get_sample_value("fashion_keyword_fallbacks_total") == 1.0

    @pytest.mark.asyncio
    async def test_unknown_city_stops_before_photo_search(self, weather_client, photo_client):
        service = ExploreService(weather_client, photo_client)

        with pytest.raises(CityNotFoundError):
            await service.explore("atlantis", "Woman", ["casual"])

        assert photo_client.searches == []

    @pytest.mark.asyncio
    async def test_photo_failure_aborts(self, weather_client, photo_client):
        photo_client.error = UpstreamServiceError("photos", "unexpected status 500", status=500)
        service = ExploreService(weather_client, photo_client)

        with pytest.raises(UpstreamServiceError):
            await service.explore("toronto", "Woman", ["casual"])
