# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Watchlist endpoints.

Every query is filtered by ``current_user.id``; a user can never read or
remove another user's entries.  A movie appears at most once per user:
adding it again returns the existing entry.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.security import get_current_user
from database import get_db
from models.user import User
from models.watchlist import WatchlistMovie
from watchlist.schemas import WatchlistAddRequest, WatchlistMovieRow

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])


def _find(db: Session, user_id: int, movie_id: int):
    return (
        db.query(WatchlistMovie)
        .filter(WatchlistMovie.user_id == user_id, WatchlistMovie.movie_id == movie_id)
        .first()
    )


# ---------------------------------------------------------------------------
# GET /api/watchlist  – newest first
# ---------------------------------------------------------------------------


@router.get("", response_model=List[WatchlistMovieRow])
def list_watchlist(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return (
        db.query(WatchlistMovie)
        .filter(WatchlistMovie.user_id == current_user.id)
        .order_by(WatchlistMovie.added_at.desc(), WatchlistMovie.id.desc())
        .all()
    )


# ---------------------------------------------------------------------------
# POST /api/watchlist
# ---------------------------------------------------------------------------


@router.post("", response_model=WatchlistMovieRow)
def add_to_watchlist(
    body: WatchlistAddRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    existing = _find(db, current_user.id, body.movie_id)
    if existing:
        return existing

    entry = WatchlistMovie(
        user_id=current_user.id,
        movie_id=body.movie_id,
        movie_title=body.movie_title,
        poster_path=body.poster_path,
    )
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent add of the same movie
        db.rollback()
        return _find(db, current_user.id, body.movie_id)
    db.refresh(entry)
    return entry


# ---------------------------------------------------------------------------
# DELETE /api/watchlist/{movie_id}
# ---------------------------------------------------------------------------


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_watchlist(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    db.query(WatchlistMovie).filter(
        WatchlistMovie.movie_id == movie_id,
        WatchlistMovie.user_id == current_user.id,
    ).delete(synchronize_session=False)
    db.commit()
