# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""TMDB movie-metadata adapter."""

import asyncio
from functools import lru_cache
from typing import Optional

import httpx

from core.config import settings
from core.errors import UpstreamFailure
from core.logger import logger

# Queries shorter than this never reach TMDB
MIN_QUERY_LENGTH = 2

EMPTY_PAGE = {"results": [], "total_pages": 0, "total_results": 0}


def pick_certification(release_dates: dict, region: str) -> Optional[str]:
    """First non-empty certification among the region's release dates."""
    for country in release_dates.get("results") or []:
        if country.get("iso_3166_1") != region:
            continue
        for release in country.get("release_dates") or []:
            if release.get("certification"):
                return release["certification"]
        return None
    return None


class TmdbClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.themoviedb.org/3",
        language: str = "de-DE",
        region: str = "DE",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self.language = language
        self.region = region
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _get(self, client: httpx.AsyncClient, path: str, **params) -> dict:
        resp = await client.get(path, params={"api_key": self._api_key, **params})
        if resp.is_error:
            raise UpstreamFailure("TMDB request failed", f"TMDB API error: {resp.status_code}")
        return resp.json()

    async def _call(self, *requests):
        """Run one or more ``(path, params)`` lookups concurrently; all must succeed."""
        try:
            async with self._client() as client:
                return await asyncio.gather(
                    *(self._get(client, path, **params) for path, params in requests)
                )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("TMDB request failed: %s", exc)
            raise UpstreamFailure("TMDB request failed", str(exc)) from exc

    async def search(self, query: str, page: int = 1, include_adult: bool = False) -> dict:
        if not query or len(query) < MIN_QUERY_LENGTH:
            return dict(EMPTY_PAGE)
        (data,) = await self._call((
            "/search/movie",
            {
                "query": query,
                "language": self.language,
                "include_adult": str(include_adult).lower(),
                "page": page,
            },
        ))
        return data

    async def trending(self) -> dict:
        (data,) = await self._call(("/trending/movie/day", {"language": self.language}))
        return data

    async def details(self, movie_id: int) -> dict:
        """
        Movie details merged with the region's watch providers, the credits
        and the region's age certification.
        """
        movie, providers, credits, release_dates = await self._call(
            (f"/movie/{movie_id}", {"language": self.language}),
            (f"/movie/{movie_id}/watch/providers", {}),
            (f"/movie/{movie_id}/credits", {"language": self.language}),
            (f"/movie/{movie_id}/release_dates", {}),
        )
        return {
            **movie,
            "watch_providers": (providers.get("results") or {}).get(self.region, {}),
            "credits": credits,
            "certification": pick_certification(release_dates, self.region),
        }


@lru_cache
def get_tmdb_client() -> TmdbClient:
    """FastAPI dependency – one client per process."""
    return TmdbClient(
        settings.tmdb_api_key,
        base_url=settings.tmdb_base_url,
        language=settings.tmdb_language,
        region=settings.tmdb_region,
        timeout=settings.http_timeout_seconds,
    )
