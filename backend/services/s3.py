# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Object-storage adapter (S3-compatible, path-style addressing).

Finished downloads land under ``<movies_prefix><hash>…``; a version counts as
available as soon as one object matches that prefix.
"""

import os
import re
from functools import lru_cache

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from core.config import settings
from core.errors import NotFound, UpstreamFailure
from core.logger import logger

# Signed download links are valid for 15 minutes
PRESIGN_EXPIRES_SECONDS = 900


def download_filename(title: str, year: str, key: str) -> str:
    """``"Das Boot", "1981", ".../abc.mkv"`` → ``"Das_Boot_1981.mkv"``"""
    clean_title = re.sub(r"[^a-zA-Z0-9]", "_", title)
    extension = os.path.splitext(key)[1]
    return f"{clean_title}_{year}{extension}"


class S3Storage:
    def __init__(self, client, bucket: str, prefix: str):
        self._client = client
        self._bucket = bucket
        self._prefix = prefix

    def _first_key(self, hash_: str):
        try:
            resp = self._client.list_objects_v2(
                Bucket=self._bucket,
                Prefix=f"{self._prefix}{hash_}",
                MaxKeys=1,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 listing for %s failed: %s", hash_, exc)
            raise UpstreamFailure("Failed to check file status", str(exc)) from exc

        contents = resp.get("Contents") or []
        return contents[0].get("Key") if contents else None

    def exists(self, hash_: str) -> bool:
        return self._first_key(hash_) is not None

    def presign_download(self, hash_: str, title: str, year: str) -> str:
        """
        Time-limited GET URL for the version's file, served under a readable
        file name.  Raises NotFound when nothing matches the hash.
        """
        key = self._first_key(hash_)
        if not key:
            raise NotFound("File not found in storage")

        filename = download_filename(title, year, key)
        try:
            url = self._client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": key,
                    "ResponseContentDisposition": f'attachment; filename="{filename}"',
                },
                ExpiresIn=PRESIGN_EXPIRES_SECONDS,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Signing download URL for %s failed: %s", hash_, exc)
            raise UpstreamFailure("Failed to generate download URL", str(exc)) from exc

        logger.info("Generated signed URL for %s as %s", hash_, filename)
        return url


@lru_cache
def get_storage() -> S3Storage:
    """FastAPI dependency – one boto3 client per process."""
    client = boto3.client(
        "s3",
        region_name=settings.s3_region,
        endpoint_url=f"https://{settings.s3_endpoint}",
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=Config(s3={"addressing_style": "path"}),
    )
    return S3Storage(client, settings.s3_bucket, settings.s3_movies_prefix)
