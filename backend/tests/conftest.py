"""
Test configuration for cinequeue.

The environment is filled in *before* any application module is imported:
``core.config.settings`` is built at import time and refuses to start without
the upstream credentials.  Every test gets a fresh SQLite schema.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="cinequeue-tests-")

os.environ.update({
    "DATABASE_URL": f"sqlite:///{_DB_DIR}/test.db",
    "SESSION_SECRET": "test-session-secret",
    "PASSWORD_HASH_ROUNDS": "1000",
    "TMDB_API_KEY": "tmdb-test-key",
    "NZB_API_URL": "https://nzb.test/api/",
    "NZB_USERNAME": "nzb-user",
    "NZB_PASSWORD": "nzb-pass",
    "SABNZBD_API_URL": "http://sabnzbd.test",
    "SABNZBD_API_KEY": "sab-key",
    "S3_REGION": "fsn1",
    "S3_ENDPOINT": "s3.test",
    "S3_ACCESS_KEY": "access",
    "S3_SECRET_KEY": "secret",
    "LOG_FILE": f"{_DB_DIR}/app.log",
})

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from core.security import hash_password  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.user import User  # noqa: E402
from services.sabnzbd import QueueStatus  # noqa: E402


@pytest.fixture(autouse=True)
def _schema():
    """Create all tables for the test, drop them afterwards."""
    Base.metadata.create_all(engine)
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """Factory: insert a user row and return it."""

    def _make(username="alice", password="secret1", role="user", is_active=True, is_approved=True):
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
            is_approved=is_approved,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def client():
    return TestClient(app)


class AuthActions:
    def __init__(self, client):
        self._client = client

    def login(self, username="alice", password="secret1"):
        return self._client.post("/api/login", json={"username": username, "password": password})

    def logout(self):
        return self._client.post("/api/logout")


@pytest.fixture
def auth(client):
    return AuthActions(client)


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def user_client(client, auth, user):
    """A TestClient holding a session for the plain user ``alice``."""
    assert auth.login().status_code == 200
    return client


@pytest.fixture
def admin(make_user):
    return make_user(username="admin", password="adminpass", role="admin")


@pytest.fixture
def admin_client(client, auth, admin):
    """A TestClient holding a session for ``admin``."""
    assert auth.login("admin", "adminpass").status_code == 200
    return client


# ---------------------------------------------------------------------------
# Upstream fakes
# ---------------------------------------------------------------------------


class FakeQueue:
    """
    Stands in for SabnzbdClient.  Once a job was submitted for a hash the
    queue reports that hash as queued, like SABnzbd would.
    """

    def __init__(self, status=None, check_error=None, submit_error=None):
        self.status = status or QueueStatus()
        self.check_error = check_error
        self.submit_error = submit_error
        self.checks = []
        self.submitted = []

    async def check_queue(self, hash_):
        self.checks.append(hash_)
        if self.check_error:
            raise self.check_error
        if any(job[1] == hash_ for job in self.submitted):
            return QueueStatus(is_in_queue=True)
        return self.status

    async def submit_job(self, job_content, hash_, tmdb_id):
        if self.submit_error:
            raise self.submit_error
        self.submitted.append((job_content, hash_, tmdb_id))
        return {"status": True}


class FakeCatalog:
    """Stands in for NzbClient."""

    def __init__(self, job=None, versions=None, on_fetch=None):
        self.job = {"nzbFile": "<nzb/>"} if job is None else job
        self.versions = versions if versions is not None else []
        self.on_fetch = on_fetch
        self.fetched = []

    async def fetch_version_job(self, hash_):
        self.fetched.append(hash_)
        if self.on_fetch:
            self.on_fetch(hash_)
        return self.job

    async def fetch_movie_versions(self, tmdb_id):
        return self.versions


class FakeStorage:
    """Stands in for S3Storage."""

    def __init__(self, present=()):
        self.present = set(present)

    def exists(self, hash_):
        return hash_ in self.present

    def presign_download(self, hash_, title, year):
        from core.errors import NotFound

        if hash_ not in self.present:
            raise NotFound("File not found in storage")
        return f"https://s3.test/{hash_}?title={title}&year={year}"


@pytest.fixture
def fake_queue():
    return FakeQueue()


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def fake_storage():
    return FakeStorage()
