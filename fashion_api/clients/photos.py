"""
Pexels photo search client.

Keyword lists are sent as a single comma separated query.
"""

import asyncio
from typing import Any, Dict, Optional, Sequence

import aiohttp
import structlog

from fashion_api.exceptions import UpstreamServiceError
from fashion_api.models.explore import Photo, PhotoSearchResult
from fashion_shared.metrics import ForecastMetrics

logger = structlog.get_logger(__name__)

SERVICE_NAME = "photos"


def build_query(keywords: Sequence[str]) -> str:
    """Join keywords into a single search query."""
    return ", ".join(keywords)


def parse_search_result(query: str, data: Dict[str, Any]) -> PhotoSearchResult:
    """
    Convert a Pexels search payload.

    Raises:
        UpstreamServiceError: If the payload is not a search response
    """
    try:
        photos = [Photo.from_payload(item) for item in data.get("photos", [])]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise UpstreamServiceError(SERVICE_NAME, f"malformed response: {e!r}") from e

    return PhotoSearchResult(
        query=query,
        total_results=data.get("total_results", len(photos)),
        photos=photos,
    )


class PhotoSearchClient:
    """Client for the Pexels search endpoint."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        base_url: str = "https://api.pexels.com/v1/search",
        per_page: int = 5,
        timeout_seconds: float = 30.0,
        metrics: Optional[ForecastMetrics] = None,
    ):
        self.session = session
        self.api_key = api_key
        self.base_url = base_url
        self.per_page = per_page
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.metrics = metrics

    async def search(self, keywords: Sequence[str], per_page: Optional[int] = None) -> PhotoSearchResult:
        """
        Search photos matching a keyword list.

        Args:
            keywords: Keywords, joined into one query
            per_page: Page size override

        Returns:
            Search result

        Raises:
            UpstreamServiceError: On transport errors or unexpected responses
        """
        query = build_query(keywords)
        params = {"query": query, "per_page": str(per_page or self.per_page)}

        if self.metrics is None:
            data = await self._fetch(query, params)
        else:
            with self.metrics.track_external_call(SERVICE_NAME):
                data = await self._fetch(query, params)

        result = parse_search_result(query, data)
        logger.info(
            "photos_fetched",
            query=query,
            returned=len(result.photos),
            total_results=result.total_results,
        )
        return result

    async def _fetch(self, query: str, params: Dict[str, str]) -> Dict[str, Any]:
        headers = {"Authorization": self.api_key}
        try:
            async with self.session.get(
                self.base_url, params=params, headers=headers, timeout=self.timeout
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    logger.error(
                        "photo_search_failed",
                        query=query,
                        status=response.status,
                        body=body[:500],
                    )
                    raise UpstreamServiceError(
                        SERVICE_NAME,
                        f"unexpected status {response.status}",
                        status=response.status,
                    )

                data = await response.json()

        except UpstreamServiceError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("photo_search_error", query=query, error=str(e))
            raise UpstreamServiceError(SERVICE_NAME, str(e) or type(e).__name__) from e

        if not isinstance(data, dict):
            raise UpstreamServiceError(SERVICE_NAME, "response body is not an object")
        return data
