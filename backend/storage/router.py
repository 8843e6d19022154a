# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Object-storage endpoints – availability check and signed download links."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.errors import ValidationFailure
from core.logger import logger
from core.security import get_current_user
from services.s3 import S3Storage, get_storage

router = APIRouter(prefix="/api/s3", tags=["storage"], dependencies=[Depends(get_current_user)])


# ---------------------------------------------------------------------------
# GET /api/s3/status/{hash}
# ---------------------------------------------------------------------------


@router.get("/status/{hash}")
def file_status(hash: str, storage: S3Storage = Depends(get_storage)):
    """``{"exists": bool}`` – whether the version already sits in storage."""
    exists = storage.exists(hash)
    logger.info("Storage check for %s: exists=%s", hash, exists)
    return {"exists": exists}


# ---------------------------------------------------------------------------
# GET /api/s3/download/{hash}?title=&year=
# ---------------------------------------------------------------------------


@router.get("/download/{hash}")
def download_url(
    hash: str,
    title: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    storage: S3Storage = Depends(get_storage),
):
    """
    Return a 15-minute signed URL.  ``title`` and ``year`` only shape the
    file name the browser saves the download under.
    """
    if not title or not year:
        raise ValidationFailure("Movie title and year are required")
    return {"url": storage.presign_download(hash, title, year)}
