"""HTTP clients for the external weather and photo-search services."""

from fashion_api.clients.photos import PhotoSearchClient
from fashion_api.clients.weather import WeatherClient

__all__ = ["PhotoSearchClient", "WeatherClient"]
