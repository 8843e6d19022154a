# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""DownloadStatus ORM model – last status this service wrote per hash."""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from database import Base


class DownloadStatus(Base):
    __tablename__ = "download_status"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Not owned by any user: every user asking for the same version sees it.
    hash = Column(String(255), unique=True, nullable=False, index=True)
    # Plain string column; read back through downloads.status.DownloadState
    status = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
