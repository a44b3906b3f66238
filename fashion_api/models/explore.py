"""
Explore page models.

Covers the weather observation fetched for a city, the photo search
results returned by the photo service and the page document combining
them.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class WeatherObservation(BaseModel):
    """Current weather for a city. Fetched per request, never stored."""
    city_name: str
    description: str
    icon_code: Optional[str] = None
    temperature: Optional[float] = None

    @computed_field
    @property
    def icon_url(self) -> Optional[str]:
        """OpenWeatherMap icon image for the observation."""
        if not self.icon_code:
            return None
        return f"https://openweathermap.org/img/wn/{self.icon_code}@2x.png"


class Photo(BaseModel):
    """A single stock photo."""
    id: int
    url: str = Field(..., description="Photo page on the provider's site")
    photographer: Optional[str] = None
    alt: Optional[str] = None
    image_url: Optional[str] = Field(None, description="Direct image link")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Photo":
        """Build a photo from one entry of a Pexels search response."""
        src = payload.get("src") or {}
        return cls(
            id=payload["id"],
            url=payload["url"],
            photographer=payload.get("photographer"),
            alt=payload.get("alt"),
            image_url=src.get("medium") or src.get("original"),
        )


class PhotoSearchResult(BaseModel):
    """Photos returned for one keyword query."""
    query: str
    total_results: int = 0
    photos: List[Photo] = Field(default_factory=list)

    @classmethod
    def empty(cls, query: str = "") -> "PhotoSearchResult":
        """Result used when no search was issued."""
        return cls(query=query)


class ExplorePage(BaseModel):
    """Weather for a city with photos matched to styles and weather."""
    title: str = "Explore"
    weather: WeatherObservation
    style_keywords: List[str]
    accessory_keywords: List[str]
    style_photos: PhotoSearchResult
    accessory_photos: PhotoSearchResult
