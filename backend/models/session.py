# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Server-side login session ORM model."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class UserSession(Base):
    __tablename__ = "sessions"

    # Opaque random id; the ``sid`` cookie carries it in signed form.
    id = Column(String(64), primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # Pushed forward on every authenticated request (sliding expiry)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
