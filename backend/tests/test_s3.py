from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from core.errors import NotFound, UpstreamFailure
from services.s3 import PRESIGN_EXPIRES_SECONDS, S3Storage, download_filename


def storage_with(keys=()):
    client = MagicMock()
    client.list_objects_v2.return_value = {"Contents": [{"Key": k} for k in keys]} if keys else {"KeyCount": 0}
    client.generate_presigned_url.return_value = "https://s3.test/signed"
    return S3Storage(client, "media-storage01", "Media/Movies/"), client


def test_exists_lists_by_hash_prefix():
    storage, client = storage_with(["Media/Movies/abc123/Matrix.mkv"])

    assert storage.exists("abc123")
    client.list_objects_v2.assert_called_once_with(
        Bucket="media-storage01", Prefix="Media/Movies/abc123", MaxKeys=1,
    )


def test_missing_hash():
    storage, _ = storage_with()
    assert not storage.exists("abc123")


def test_presign_missing_file_never_signs():
    storage, client = storage_with()

    with pytest.raises(NotFound):
        storage.presign_download("abc123", "Matrix", "1999")

    client.generate_presigned_url.assert_not_called()


def test_presign_uses_readable_filename():
    storage, client = storage_with(["Media/Movies/abc123/release.mkv"])

    url = storage.presign_download("abc123", "Das Boot: Director's Cut", "1981")

    assert url == "https://s3.test/signed"
    client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={
            "Bucket": "media-storage01",
            "Key": "Media/Movies/abc123/release.mkv",
            "ResponseContentDisposition": 'attachment; filename="Das_Boot__Director_s_Cut_1981.mkv"',
        },
        ExpiresIn=PRESIGN_EXPIRES_SECONDS,
    )
    assert PRESIGN_EXPIRES_SECONDS == 900


def test_storage_error_is_upstream_failure():
    storage, client = storage_with()
    client.list_objects_v2.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "ListObjectsV2",
    )

    with pytest.raises(UpstreamFailure):
        storage.exists("abc123")


def test_download_filename_without_extension():
    assert download_filename("Up", "2009", "Media/Movies/abc123") == "Up_2009"
