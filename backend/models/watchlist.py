# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""WatchlistMovie ORM model."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from database import Base


class WatchlistMovie(Base):
    __tablename__ = "watchlist_movies"
    __table_args__ = (
        UniqueConstraint("user_id", "movie_id", name="uq_watchlist_user_movie"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Cascade delete: removing a user removes their watchlist.
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    movie_id = Column(Integer, nullable=False)  # TMDB id
    movie_title = Column(String(512), nullable=False)
    poster_path = Column(String(512), nullable=True)
    added_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
