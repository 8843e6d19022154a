# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Persisted download status, one row per content hash."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from downloads.status import DownloadState
from models.download_status import DownloadStatus


class DownloadStatusStore:
    def __init__(self, db: Session):
        self._db = db

    def get_record(self, hash_: str) -> Optional[DownloadStatus]:
        return self._db.query(DownloadStatus).filter(DownloadStatus.hash == hash_).first()

    def get(self, hash_: str) -> DownloadState:
        """Last persisted state, ``UNKNOWN`` when the hash was never seen."""
        record = self.get_record(hash_)
        return DownloadState.parse(record.status) if record else DownloadState.UNKNOWN

    def set(self, hash_: str, state: DownloadState) -> DownloadStatus:
        """
        Upsert by hash and commit immediately; last writer wins.  A failed
        commit is rolled back so the session stays usable for the next write.
        """
        now = datetime.now(timezone.utc)
        record = self.get_record(hash_)
        if record:
            record.status = state.value
            record.updated_at = now
        else:
            record = DownloadStatus(hash=hash_, status=state.value, created_at=now, updated_at=now)
            self._db.add(record)
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise
        return record
