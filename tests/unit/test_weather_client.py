"""
Unit tests for the OpenWeatherMap client.

Tests cover:
- Request parameters
- Payload parsing
- Unknown cities
- Error statuses, transport errors and malformed bodies
- Outbound call metrics
"""

import asyncio
import pytest
import aiohttp
from typing import Any, Dict, List, Optional

from prometheus_client import CollectorRegistry

from fashion_api.clients.weather import WeatherClient, parse_weather
from fashion_api.exceptions import CityNotFoundError, UpstreamServiceError
from fashion_shared.metrics import ForecastMetrics


# ============================================================================
# AIOHTTP TEST DOUBLES
# ============================================================================


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status: int = 200, payload: Any = None, text: str = ""):
        self.status = status
        self._payload = payload
        self._text = text

    async def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class FakeSession:
    """Records GET requests and replays a canned response."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


TORONTO_PAYLOAD = {
    "name": "Toronto",
    "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
    "main": {"temp": 11.2, "humidity": 80},
}


def make_client(session: FakeSession, metrics: Optional[ForecastMetrics] = None) -> WeatherClient:
    return WeatherClient(
        session,
        api_key="test-key",
        base_url="https://weather.test/data/2.5/weather",
        units="metric",
        timeout_seconds=5,
        metrics=metrics,
    )


# ============================================================================
# PARSING
# ============================================================================


class TestParseWeather:
    """Tests for parse_weather."""

    def test_parses_payload(self):
        observation = parse_weather("toronto", TORONTO_PAYLOAD)

        assert observation.city_name == "Toronto"
        assert observation.description == "light rain"
        assert observation.icon_code == "10d"
        assert observation.temperature == 11.2
        assert observation.icon_url == "https://openweathermap.org/img/wn/10d@2x.png"

    def test_missing_name_means_unknown_city(self):
        with pytest.raises(CityNotFoundError):
            parse_weather("atlantis", {"cod": "404", "message": "city not found"})

    def test_missing_weather_entry(self):
        with pytest.raises(UpstreamServiceError):
            parse_weather("toronto", {"name": "Toronto", "weather": []})

    def test_optional_fields(self):
        observation = parse_weather("toronto", {"name": "Toronto", "weather": [{"description": "mist"}]})

        assert observation.temperature is None
        assert observation.icon_url is None

    def test_icon_url_is_serialized(self):
        observation = parse_weather("toronto", TORONTO_PAYLOAD)

        assert observation.model_dump()["icon_url"] == "https://openweathermap.org/img/wn/10d@2x.png"


# ============================================================================
# CLIENT
# ============================================================================


class TestWeatherClient:
    """Tests for WeatherClient.get_current_weather."""

    @pytest.mark.asyncio
    async def test_sends_city_key_and_units(self):
        session = FakeSession(FakeResponse(payload=TORONTO_PAYLOAD))

        observation = await make_client(session).get_current_weather("toronto")

        assert observation.description == "light rain"
        request = session.requests[0]
        assert request["url"] == "https://weather.test/data/2.5/weather"
        assert request["params"] == {"q": "toronto", "appid": "test-key", "units": "metric"}
        assert isinstance(request["timeout"], aiohttp.ClientTimeout)

    @pytest.mark.asyncio
    async def test_404_raises_city_not_found(self):
        session = FakeSession(FakeResponse(status=404, payload={"cod": "404"}))

        with pytest.raises(CityNotFoundError) as exc_info:
            await make_client(session).get_current_weather("atlantis")

        assert exc_info.value.city == "atlantis"

    @pytest.mark.asyncio
    async def test_server_error_raises_upstream_error(self):
        session = FakeSession(FakeResponse(status=401, text='{"message": "Invalid API key"}'))

        with pytest.raises(UpstreamServiceError) as exc_info:
            await make_client(session).get_current_weather("toronto")

        assert exc_info.value.service == "weather"
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_connection_error_raises_upstream_error(self):
        session = FakeSession(error=aiohttp.ClientConnectionError("connection refused"))

        with pytest.raises(UpstreamServiceError):
            await make_client(session).get_current_weather("toronto")

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_error(self):
        session = FakeSession(error=asyncio.TimeoutError())

        with pytest.raises(UpstreamServiceError):
            await make_client(session).get_current_weather("toronto")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_upstream_error(self):
        session = FakeSession(FakeResponse(payload=ValueError("Expecting value")))

        with pytest.raises(UpstreamServiceError):
            await make_client(session).get_current_weather("toronto")

    @pytest.mark.asyncio
    async def test_non_object_body_raises_upstream_error(self):
        session = FakeSession(FakeResponse(payload=["not", "an", "object"]))

        with pytest.raises(UpstreamServiceError):
            await make_client(session).get_current_weather("toronto")


# ============================================================================
# METRICS
# ============================================================================


class TestWeatherClientMetrics:
    """Tests for outbound call metrics."""

    @pytest.mark.asyncio
    async def test_success_and_error_are_counted(self):
        registry = CollectorRegistry()
        metrics = ForecastMetrics(registry=registry)

        await make_client(FakeSession(FakeResponse(payload=TORONTO_PAYLOAD)), metrics).get_current_weather("toronto")
        with pytest.raises(UpstreamServiceError):
            await make_client(FakeSession(FakeResponse(status=500)), metrics).get_current_weather("toronto")

        assert registry.get_sample_value(
            "fashion_external_requests_total", {"service": "weather", "outcome": "success"}
        ) == 1.0
        assert registry.get_sample_value(
            "fashion_external_requests_total", {"service": "weather", "outcome": "error"}
        ) == 1.0
        assert registry.get_sample_value(
            "fashion_external_request_duration_seconds_count", {"service": "weather"}
        ) == 2.0
