"""
Explore page orchestration.

Fetches the weather for a city, then runs two photo searches one after
the other: one for the visitor's styles and one for accessories suited to
the weather. Any failure aborts the whole page.
"""

import structlog
from typing import Optional, Sequence

from fashion_api.clients.photos import PhotoSearchClient
from fashion_api.clients.weather import WeatherClient
from fashion_api.models.explore import ExplorePage, PhotoSearchResult
from fashion_api.services.keywords import (
    ACCESSORY_KEYWORDS,
    WeatherKeywordTable,
    derive_accessory_keywords,
    derive_style_keywords,
)
from fashion_shared.metrics import ForecastMetrics

logger = structlog.get_logger(__name__)


class ExploreService:
    """Builds explore pages from weather and photo search results."""

    def __init__(
        self,
        weather_client: WeatherClient,
        photo_client: PhotoSearchClient,
        keyword_table: WeatherKeywordTable = ACCESSORY_KEYWORDS,
        metrics: Optional[ForecastMetrics] = None,
    ):
        self.weather_client = weather_client
        self.photo_client = photo_client
        self.keyword_table = keyword_table
        self.metrics = metrics

    async def explore(self, city: str, gender: Optional[str], styles: Sequence[str]) -> ExplorePage:
        """
        Build the explore page.

        Args:
            city: City to fetch weather for
            gender: Gender keyword
            styles: Chosen style names

        Returns:
            Explore page

        Raises:
            CityNotFoundError: If the weather service does not know the city
            UpstreamServiceError: If any external call fails
        """
        weather = await self.weather_client.get_current_weather(city)

        style_keywords = derive_style_keywords(gender, styles)
        if style_keywords:
            style_photos = await self.photo_client.search(style_keywords)
        else:
            logger.debug("style_search_skipped", city=city)
            style_photos = PhotoSearchResult.empty()

        if weather.description not in self.keyword_table and self.metrics is not None:
            self.metrics.keyword_fallbacks.inc()

        accessory_keywords = derive_accessory_keywords(
            weather.description, gender, self.keyword_table
        )
        accessory_photos = await self.photo_client.search(accessory_keywords)

        logger.info(
            "explore_page_built",
            city=weather.city_name,
            weather=weather.description,
            style_keywords=style_keywords,
            accessory_keywords=accessory_keywords,
        )

        return ExplorePage(
            weather=weather,
            style_keywords=style_keywords,
            accessory_keywords=accessory_keywords,
            style_photos=style_photos,
            accessory_photos=accessory_photos,
        )
