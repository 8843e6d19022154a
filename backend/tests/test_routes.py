"""
HTTP-level tests for the download, storage and movie endpoints.  Upstream
clients are replaced through ``app.dependency_overrides``.
"""

import httpx
import pytest

from core.errors import QueueCheckFailed
from downloads.status import DownloadState
from downloads.store import DownloadStatusStore
from main import app
from services.nzb import get_nzb_client
from services.s3 import get_storage
from services.sabnzbd import QueueStatus, get_sabnzbd_client
from services.tmdb import TmdbClient, get_tmdb_client


@pytest.fixture
def upstream(fake_queue, fake_catalog, fake_storage):
    app.dependency_overrides[get_sabnzbd_client] = lambda: fake_queue
    app.dependency_overrides[get_nzb_client] = lambda: fake_catalog
    app.dependency_overrides[get_storage] = lambda: fake_storage
    return fake_queue, fake_catalog, fake_storage


@pytest.mark.parametrize("path", [
    "/api/nzb/movies/603",
    "/api/nzb/check-queue/abc123",
    "/api/download-status/abc123",
    "/api/s3/status/abc123",
    "/api/movies/trending",
])
def test_everything_needs_a_session(client, upstream, path):
    assert client.get(path).status_code == 401


class TestDownloadEndpoints:
    def test_start_download(self, user_client, upstream, db):
        queue, _, _ = upstream

        resp = user_client.post("/api/nzb/download", json={"hash": "abc123", "tmdbId": 603})

        assert resp.status_code == 200
        assert resp.json() == {"status": "downloading"}
        assert queue.submitted == [("<nzb/>", "abc123", 603)]
        assert DownloadStatusStore(db).get("abc123") == DownloadState.DOWNLOADING

    def test_already_downloading_is_409(self, user_client, upstream):
        queue, _, _ = upstream
        queue.status = QueueStatus(is_in_queue=True)

        resp = user_client.post("/api/nzb/download", json={"hash": "abc123", "tmdbId": 603})

        assert resp.status_code == 409
        assert resp.json() == {"error": "Movie is already downloading"}

    def test_missing_nzb_file_is_502_and_failed(self, user_client, upstream, db):
        _, catalog, _ = upstream
        catalog.job = {}

        resp = user_client.post("/api/nzb/download", json={"hash": "abc123", "tmdbId": 603})

        assert resp.status_code == 502
        assert resp.json()["error"] == "No NZB file content found in response"
        assert DownloadStatusStore(db).get("abc123") == DownloadState.FAILED

    def test_bad_body_is_400(self, user_client, upstream):
        resp = user_client.post("/api/nzb/download", json={"hash": "", "tmdbId": 603})
        assert resp.status_code == 400

    def test_check_queue_shape(self, user_client, upstream):
        queue, _, _ = upstream
        queue.status = QueueStatus(is_processing=True, status=DownloadState.EXTRACTING)

        resp = user_client.get("/api/nzb/check-queue/abc123")

        assert resp.json() == {"isInQueue": False, "isProcessing": True, "status": "extracting"}

    def test_check_queue_omits_missing_status(self, user_client, upstream):
        resp = user_client.get("/api/nzb/check-queue/abc123")
        assert resp.json() == {"isInQueue": False, "isProcessing": False}

    def test_check_queue_failure_is_502(self, user_client, upstream):
        queue, _, _ = upstream
        queue.check_error = QueueCheckFailed("Failed to check queue status", "SABnzbd API error: 500 / 500")

        resp = user_client.get("/api/nzb/check-queue/abc123")

        assert resp.status_code == 502
        assert resp.json() == {
            "error": "Failed to check queue status",
            "details": "SABnzbd API error: 500 / 500",
        }

    def test_versions_and_single_version(self, user_client, upstream):
        _, catalog, _ = upstream
        catalog.versions = [{"hash": "abc123", "resolution": "2160p"}]

        assert user_client.get("/api/nzb/movies/603").json() == catalog.versions
        assert user_client.get("/api/nzb/movies/version/abc123").json() == {"nzbFile": "<nzb/>"}

    def test_download_status_unknown(self, user_client, upstream):
        assert user_client.get("/api/download-status/never-seen").json() == {"status": "unknown"}

    def test_download_status_row(self, user_client, upstream, db):
        DownloadStatusStore(db).set("abc123", DownloadState.DOWNLOADING)

        body = user_client.get("/api/download-status/abc123").json()

        assert body["hash"] == "abc123"
        assert body["status"] == "downloading"
        assert "updated_at" in body

    def test_download_state_prefers_storage(self, user_client, upstream, db):
        queue, _, storage = upstream
        queue.status = QueueStatus(status=DownloadState.FAILED)
        storage.present.add("abc123")
        DownloadStatusStore(db).set("abc123", DownloadState.FAILED)

        body = user_client.get("/api/nzb/download-state/abc123").json()

        assert body["inStorage"] is True
        assert body["persistedStatus"] == "failed"
        assert body["enabled"] is True
        assert body["label"] == "Download from storage"

    def test_download_state_after_submission(self, user_client, upstream):
        user_client.post("/api/nzb/download", json={"hash": "abc123", "tmdbId": 603})

        body = user_client.get("/api/nzb/download-state/abc123").json()

        assert body["isInQueue"] is True
        assert body["enabled"] is False
        assert body["label"] == "Downloading"
        assert body["variant"] == "active"


class TestStorageEndpoints:
    def test_status(self, user_client, upstream):
        _, _, storage = upstream
        storage.present.add("abc123")

        assert user_client.get("/api/s3/status/abc123").json() == {"exists": True}
        assert user_client.get("/api/s3/status/def456").json() == {"exists": False}

    def test_download_needs_title_and_year(self, user_client, upstream):
        resp = user_client.get("/api/s3/download/abc123", params={"title": "Matrix"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Movie title and year are required"}

    def test_download_missing_file_is_404(self, user_client, upstream):
        resp = user_client.get("/api/s3/download/abc123", params={"title": "Matrix", "year": "1999"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "File not found in storage"}

    def test_download_url(self, user_client, upstream):
        _, _, storage = upstream
        storage.present.add("abc123")

        resp = user_client.get("/api/s3/download/abc123", params={"title": "Matrix", "year": "1999"})

        assert resp.status_code == 200
        assert resp.json()["url"].startswith("https://s3.test/abc123")


class TestMovieEndpoints:
    @pytest.fixture
    def tmdb_requests(self):
        seen = []

        def handler(request: httpx.Request):
            seen.append(request)
            return httpx.Response(200, json={"results": [{"id": 603, "title": "Matrix"}], "total_pages": 1})

        client = TmdbClient("tmdb-key", transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_tmdb_client] = lambda: client
        return seen

    def test_search(self, user_client, tmdb_requests):
        resp = user_client.get("/api/movies/search", params={"query": "matrix"})

        assert resp.status_code == 200
        assert resp.json()["results"][0]["id"] == 603
        assert tmdb_requests[0].url.path == "/3/search/movie"

    def test_short_search_is_empty(self, user_client, tmdb_requests):
        resp = user_client.get("/api/movies/search", params={"query": "m"})

        assert resp.json()["results"] == []
        assert tmdb_requests == []

    def test_trending_is_not_a_movie_id(self, user_client, tmdb_requests):
        assert user_client.get("/api/movies/trending").status_code == 200
        assert tmdb_requests[0].url.path == "/3/trending/movie/day"
