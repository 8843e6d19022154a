# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
SABnzbd download-queue adapter.

The only link between a queue entry and a movie version is the content hash:
jobs are submitted with the display name ``"<hash>--[[<tmdb_id>]]"`` so that
later queue / history scans can recover the hash by substring match.
"""

import asyncio
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import httpx

from core.config import settings
from core.errors import QueueCheckFailed, UpstreamFailure
from core.logger import logger
from downloads.status import DownloadState

# Number of most recent history entries scanned per check
HISTORY_LIMIT = 10

_ACTIVE_STATES = {DownloadState.RUNNING, DownloadState.EXTRACTING, DownloadState.QUEUED}
_FINISHED_STATES = {DownloadState.FAILED, DownloadState.COMPLETED}


@dataclass(frozen=True)
class QueueStatus:
    is_in_queue: bool = False
    is_processing: bool = False
    status: Optional[DownloadState] = None


def _slots(payload: dict, section: str) -> list:
    body = payload.get(section) if isinstance(payload, dict) else None
    slots = body.get("slots") if isinstance(body, dict) else None
    return slots if isinstance(slots, list) else []


def parse_queue_status(hash_: str, queue_data: dict, history_data: dict) -> QueueStatus:
    """
    Fold one queue listing and one history listing into a QueueStatus.

    History is scanned in provider order; the first entry for the hash with a
    recognised status wins, entries with any other status are skipped.
    """
    is_in_queue = any(
        isinstance(slot, dict) and hash_ in (slot.get("filename") or "")
        for slot in _slots(queue_data, "queue")
    )

    for slot in _slots(history_data, "history"):
        if not isinstance(slot, dict) or hash_ not in (slot.get("name") or ""):
            continue
        state = DownloadState.from_upstream(slot.get("status"))
        if state in _ACTIVE_STATES:
            return QueueStatus(is_in_queue=is_in_queue, is_processing=True, status=state)
        if state in _FINISHED_STATES:
            return QueueStatus(is_in_queue=is_in_queue, is_processing=False, status=state)

    return QueueStatus(is_in_queue=is_in_queue)


class SabnzbdClient:
    """Thin async wrapper around the SABnzbd ``/api`` endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_url = f"{base_url.rstrip('/')}/api"
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def check_queue(self, hash_: str) -> QueueStatus:
        """
        Poll queue and recent history concurrently and report where *hash_*
        stands.  Both calls must succeed; any failure raises QueueCheckFailed.
        """
        base = {"output": "json", "apikey": self._api_key}
        try:
            async with self._client() as client:
                queue_resp, history_resp = await asyncio.gather(
                    client.get(self._api_url, params={**base, "mode": "queue"}),
                    client.get(self._api_url, params={**base, "mode": "history", "limit": HISTORY_LIMIT}),
                )
                if queue_resp.is_error or history_resp.is_error:
                    raise QueueCheckFailed(
                        "Failed to check queue status",
                        f"SABnzbd API error: {queue_resp.status_code} / {history_resp.status_code}",
                    )
                queue_data, history_data = queue_resp.json(), history_resp.json()
                if not isinstance(queue_data, dict) or not isinstance(history_data, dict):
                    raise QueueCheckFailed(
                        "Failed to check queue status",
                        "SABnzbd API returned an unexpected response",
                    )
                return parse_queue_status(hash_, queue_data, history_data)
        except httpx.HTTPError as exc:
            logger.error("SABnzbd queue check for %s failed: %s", hash_, exc)
            raise QueueCheckFailed("Failed to check queue status", str(exc)) from exc
        except ValueError as exc:
            # Body was not JSON
            logger.error("SABnzbd returned an unreadable response for %s: %s", hash_, exc)
            raise QueueCheckFailed("Failed to check queue status", str(exc)) from exc

    async def submit_job(self, job_content: str, hash_: str, tmdb_id: int) -> dict:
        """Upload an NZB job file; the display name embeds hash and TMDB id."""
        files = {"name": (f"{hash_}.nzb", job_content.encode("utf-8"), "application/x-nzb")}
        data = {
            "mode": "addfile",
            "nzbname": f"{hash_}--[[{tmdb_id}]]",
            "cat": "movies",
            "apikey": self._api_key,
            "output": "json",
        }
        try:
            async with self._client() as client:
                resp = await client.post(self._api_url, data=data, files=files)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            logger.error("SABnzbd rejected job for %s: %s", hash_, exc)
            raise UpstreamFailure("Failed to send NZB to SABnzbd", str(exc)) from exc


@lru_cache
def get_sabnzbd_client() -> SabnzbdClient:
    """FastAPI dependency – one client per process."""
    return SabnzbdClient(
        settings.sabnzbd_api_url,
        settings.sabnzbd_api_key,
        timeout=settings.http_timeout_seconds,
    )
