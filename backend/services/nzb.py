# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
NZB catalogue adapter – lists the downloadable versions of a movie and hands
out the job file (NZB) of one version.

The catalogue uses bearer tokens obtained from ``POST /user/login``.  The
token lives in a :class:`TokenCache` owned by the client instance and is
fetched again lazily once it has expired.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import httpx

from core.config import settings
from core.errors import UpstreamFailure
from core.logger import logger

# The catalogue issues 60-minute tokens; refresh a little early.
TOKEN_LIFETIME = timedelta(minutes=55)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TokenCache:
    token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def valid(self, now: datetime) -> bool:
        return bool(self.token) and self.expires_at is not None and now < self.expires_at


class NzbClient:
    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._timeout = timeout
        self._transport = transport
        self.token_cache = TokenCache()
        # Concurrent requests after expiry share one login call
        self._login_lock = asyncio.Lock()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def get_token(self) -> str:
        if self.token_cache.valid(_now()):
            return self.token_cache.token

        async with self._login_lock:
            if self.token_cache.valid(_now()):
                return self.token_cache.token
            try:
                async with self._client() as client:
                    resp = await client.post(
                        f"{self._base_url}/user/login",
                        json={"username": self._username, "password": self._password},
                        headers={"Accept": "application/json"},
                    )
                    if resp.is_error:
                        raise UpstreamFailure(
                            "Failed to get NZB token",
                            f"{resp.status_code} {resp.text}",
                        )
                    token = resp.json()["token"]
            except (httpx.HTTPError, ValueError, KeyError) as exc:
                logger.error("NZB catalogue login failed: %s", exc)
                raise UpstreamFailure("Failed to get NZB token", str(exc)) from exc

            self.token_cache = TokenCache(token=token, expires_at=_now() + TOKEN_LIFETIME)
            logger.info("NZB catalogue token refreshed")
            return token

    async def _get_json(self, path: str, error: str):
        token = await self.get_token()
        try:
            async with self._client() as client:
                resp = await client.get(
                    f"{self._base_url}{path}",
                    headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
                )
                if resp.is_error:
                    raise UpstreamFailure(error, f"NZB API error: {resp.status_code}")
                return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("NZB catalogue GET %s failed: %s", path, exc)
            raise UpstreamFailure(error, str(exc)) from exc

    async def fetch_movie_versions(self, tmdb_id: int):
        """Every known version (resolution, size, hash …) of one movie."""
        return await self._get_json(f"/movies/{tmdb_id}", "Failed to fetch NZB data")

    async def fetch_version_job(self, hash_: str) -> dict:
        """Job descriptor of one version; the NZB itself is under ``nzbFile``."""
        return await self._get_json(f"/movies/version/{hash_}", "Failed to fetch NZB file")


@lru_cache
def get_nzb_client() -> NzbClient:
    """FastAPI dependency – one client (and one token cache) per process."""
    return NzbClient(
        settings.nzb_api_url,
        settings.nzb_username,
        settings.nzb_password,
        timeout=settings.http_timeout_seconds,
    )
