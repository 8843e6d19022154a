# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Download acquisition – checks the live queue, guards against duplicate
submissions and keeps the persisted status in step with what happened.

Submission order (each step only runs if the previous one succeeded)
--------------------------------------------------------------------
1. live queue check – refuse if queued, being processed, or failed
2. persisted status  → processing
3. fetch the version's NZB from the catalogue
4. hand the NZB to SABnzbd
5. persisted status  → downloading

Once step 2 has been written, any error flips the persisted status to
``failed`` before it propagates, so a row never stays in ``processing``
after a failure was observed.  Steps 4 and 5 are not atomic: a crash in
between leaves the row at ``processing`` while SABnzbd already has the job.
"""

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from core.errors import MissingJobFile, SubmissionConflict
from core.logger import logger
from database import get_db
from downloads.status import DownloadState
from downloads.store import DownloadStatusStore
from services.nzb import NzbClient, get_nzb_client
from services.sabnzbd import QueueStatus, SabnzbdClient, get_sabnzbd_client


class HashLocks:
    """In-process mutexes keyed by content hash, dropped once nobody holds them."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, key: str):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def conflict_reason(queue: QueueStatus) -> str:
    if queue.is_processing:
        return "Movie is being extracted"
    if queue.status == DownloadState.FAILED:
        return "Download failed"
    return "Movie is already downloading"


class DownloadService:
    def __init__(
        self,
        queue: SabnzbdClient,
        catalog: NzbClient,
        store: DownloadStatusStore,
        locks: HashLocks,
    ):
        self._queue = queue
        self._catalog = catalog
        self._store = store
        self._locks = locks

    async def check_queue(self, hash_: str) -> QueueStatus:
        return await self._queue.check_queue(hash_)

    def get_persisted_status(self, hash_: str) -> DownloadState:
        return self._store.get(hash_)

    def get_persisted_record(self, hash_: str):
        return self._store.get_record(hash_)

    async def _persist(self, hash_: str, state: DownloadState) -> None:
        # Session I/O is blocking; keep it off the event loop
        await run_in_threadpool(self._store.set, hash_, state)

    async def submit(self, hash_: str, tmdb_id: int) -> dict:
        async with self._locks.hold(hash_):
            queue = await self._queue.check_queue(hash_)
            if queue.is_in_queue or queue.is_processing or queue.status == DownloadState.FAILED:
                logger.info("Refusing download of %s: %s", hash_, queue)
                raise SubmissionConflict(conflict_reason(queue))

            await self._persist(hash_, DownloadState.PROCESSING)
            try:
                job = await self._catalog.fetch_version_job(hash_)
                nzb_file = (job or {}).get("nzbFile")
                if not nzb_file:
                    raise MissingJobFile("No NZB file content found in response")

                await self._queue.submit_job(nzb_file, hash_, tmdb_id)
                await self._persist(hash_, DownloadState.DOWNLOADING)
            except Exception:
                logger.exception("Download of %s failed, marking as failed", hash_)
                await self._persist(hash_, DownloadState.FAILED)
                raise

        logger.info("Download of %s (tmdb %s) handed to SABnzbd", hash_, tmdb_id)
        return {"status": DownloadState.DOWNLOADING.value}


@lru_cache
def get_hash_locks() -> HashLocks:
    return HashLocks()


def get_download_service(
    db: Session = Depends(get_db),
    queue: SabnzbdClient = Depends(get_sabnzbd_client),
    catalog: NzbClient = Depends(get_nzb_client),
    locks: HashLocks = Depends(get_hash_locks),
) -> DownloadService:
    """FastAPI dependency – a service bound to the request's DB session."""
    return DownloadService(queue, catalog, DownloadStatusStore(db), locks)
