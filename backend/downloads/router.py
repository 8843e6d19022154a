# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Download endpoints – movie versions from the NZB catalogue, live queue
state, submission, and the persisted per-hash status.

Every endpoint requires a signed-in, approved user.  Upstream failures are
raised as ``core.errors`` exceptions and rendered by the handler in
``main.py``.
"""

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from core.security import get_current_user
from downloads.schemas import (
    DownloadRequest,
    DownloadStartedResponse,
    DownloadStateResponse,
    DownloadStatusRow,
    QueueStatusResponse,
)
from downloads.service import DownloadService, get_download_service
from downloads.status import DownloadState, reconcile
from services.nzb import NzbClient, get_nzb_client
from services.s3 import S3Storage, get_storage

router = APIRouter(prefix="/api", tags=["downloads"], dependencies=[Depends(get_current_user)])


# ---------------------------------------------------------------------------
# GET /api/nzb/movies/version/{hash}  – job descriptor of one version
# ---------------------------------------------------------------------------
# Declared before /nzb/movies/{tmdb_id} so "version" is never read as an id.


@router.get("/nzb/movies/version/{hash}")
async def get_version(hash: str, catalog: NzbClient = Depends(get_nzb_client)):
    return await catalog.fetch_version_job(hash)


# ---------------------------------------------------------------------------
# GET /api/nzb/movies/{tmdb_id}  – every version of a movie
# ---------------------------------------------------------------------------


@router.get("/nzb/movies/{tmdb_id}")
async def list_versions(tmdb_id: int, catalog: NzbClient = Depends(get_nzb_client)):
    return await catalog.fetch_movie_versions(tmdb_id)


# ---------------------------------------------------------------------------
# GET /api/nzb/check-queue/{hash}  – live SABnzbd queue / history state
# ---------------------------------------------------------------------------


@router.get(
    "/nzb/check-queue/{hash}",
    response_model=QueueStatusResponse,
    response_model_exclude_none=True,
)
async def check_queue(hash: str, service: DownloadService = Depends(get_download_service)):
    queue = await service.check_queue(hash)
    return QueueStatusResponse(
        is_in_queue=queue.is_in_queue,
        is_processing=queue.is_processing,
        status=queue.status.value if queue.status else None,
    )


# ---------------------------------------------------------------------------
# POST /api/nzb/download  – hand a version to SABnzbd
# ---------------------------------------------------------------------------


@router.post("/nzb/download", response_model=DownloadStartedResponse)
async def start_download(
    body: DownloadRequest,
    service: DownloadService = Depends(get_download_service),
):
    """
    409 when the version is already queued, being extracted, or its last
    download failed; otherwise the job is submitted and ``downloading``
    returned.
    """
    return await service.submit(body.hash, body.tmdb_id)


# ---------------------------------------------------------------------------
# GET /api/nzb/download-state/{hash}  – reconciled button state
# ---------------------------------------------------------------------------


@router.get("/nzb/download-state/{hash}", response_model=DownloadStateResponse)
async def download_state(
    hash: str,
    service: DownloadService = Depends(get_download_service),
    storage: S3Storage = Depends(get_storage),
):
    """Live queue, persisted status and storage presence folded into one answer."""
    queue = await service.check_queue(hash)
    persisted = await run_in_threadpool(service.get_persisted_status, hash)
    in_storage = await run_in_threadpool(storage.exists, hash)
    action = reconcile(queue, persisted, in_storage)

    return DownloadStateResponse(
        hash=hash,
        in_storage=in_storage,
        is_in_queue=queue.is_in_queue,
        is_processing=queue.is_processing,
        status=queue.status.value if queue.status else None,
        persisted_status=persisted.value,
        enabled=action.enabled,
        label=action.label,
        variant=action.variant,
        tooltip=action.tooltip,
    )


# ---------------------------------------------------------------------------
# GET /api/download-status/{hash}  – last status this service wrote
# ---------------------------------------------------------------------------


@router.get("/download-status/{hash}", response_model=DownloadStatusRow, response_model_exclude_none=True)
def get_download_status(hash: str, service: DownloadService = Depends(get_download_service)):
    record = service.get_persisted_record(hash)
    if not record:
        return DownloadStatusRow(status=DownloadState.UNKNOWN.value)
    return DownloadStatusRow(
        hash=record.hash,
        status=DownloadState.parse(record.status).value,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
