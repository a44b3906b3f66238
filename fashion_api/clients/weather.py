"""
OpenWeatherMap client.

Fetches the current weather for a city name and reduces the response to a
``WeatherObservation``.
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
import structlog

from fashion_api.exceptions import CityNotFoundError, UpstreamServiceError
from fashion_api.models.explore import WeatherObservation
from fashion_shared.metrics import ForecastMetrics

logger = structlog.get_logger(__name__)

SERVICE_NAME = "weather"


def parse_weather(city: str, data: Dict[str, Any]) -> WeatherObservation:
    """
    Convert an OpenWeatherMap current-weather payload.

    Args:
        city: City name that was requested
        data: Decoded JSON body

    Returns:
        Weather observation

    Raises:
        CityNotFoundError: If the payload names no city
        UpstreamServiceError: If the payload carries no weather entry
    """
    if not data.get("name"):
        raise CityNotFoundError(city)

    try:
        condition = data["weather"][0]
        description = condition["description"]
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamServiceError(SERVICE_NAME, f"malformed response: {e!r}") from e

    temperature = (data.get("main") or {}).get("temp")

    return WeatherObservation(
        city_name=data["name"],
        description=description,
        icon_code=condition.get("icon"),
        temperature=temperature,
    )


class WeatherClient:
    """Client for the OpenWeatherMap current weather endpoint."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        base_url: str = "https://api.openweathermap.org/data/2.5/weather",
        units: str = "metric",
        timeout_seconds: float = 30.0,
        metrics: Optional[ForecastMetrics] = None,
    ):
        """
        Initialize weather client.

        Args:
            session: Shared aiohttp session
            api_key: OpenWeatherMap API key
            base_url: Current weather endpoint
            units: Units system for temperatures
            timeout_seconds: Total timeout per request
            metrics: Metrics to record outbound calls on
        """
        self.session = session
        self.api_key = api_key
        self.base_url = base_url
        self.units = units
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.metrics = metrics

    async def get_current_weather(self, city: str) -> WeatherObservation:
        """
        Fetch current weather for a city.

        Args:
            city: City name

        Returns:
            Weather observation

        Raises:
            CityNotFoundError: If the service does not know the city
            UpstreamServiceError: On transport errors or unexpected responses
        """
        params = {"q": city, "appid": self.api_key, "units": self.units}

        if self.metrics is None:
            data = await self._fetch(city, params)
        else:
            with self.metrics.track_external_call(SERVICE_NAME):
                data = await self._fetch(city, params)

        observation = parse_weather(city, data)
        logger.info(
            "weather_fetched",
            city=observation.city_name,
            description=observation.description,
        )
        return observation

    async def _fetch(self, city: str, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            async with self.session.get(
                self.base_url, params=params, timeout=self.timeout
            ) as response:
                if response.status == 404:
                    logger.warning("weather_city_not_found", city=city)
                    raise CityNotFoundError(city)

                if response.status >= 400:
                    body = await response.text()
                    logger.error(
                        "weather_request_failed",
                        city=city,
                        status=response.status,
                        body=body[:500],
                    )
                    raise UpstreamServiceError(
                        SERVICE_NAME,
                        f"unexpected status {response.status}",
                        status=response.status,
                    )

                data = await response.json()

        except (CityNotFoundError, UpstreamServiceError):
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("weather_request_error", city=city, error=str(e))
            raise UpstreamServiceError(SERVICE_NAME, str(e) or type(e).__name__) from e

        if not isinstance(data, dict):
            raise UpstreamServiceError(SERVICE_NAME, "response body is not an object")
        return data
