# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Movie endpoints – search, trending and details straight from TMDB."""

from fastapi import APIRouter, Depends, Query

from core.security import get_current_user
from services.tmdb import TmdbClient, get_tmdb_client

router = APIRouter(prefix="/api/movies", tags=["movies"], dependencies=[Depends(get_current_user)])


@router.get("/search")
async def search(
    query: str = Query(""),
    page: int = Query(1, ge=1),
    tmdb: TmdbClient = Depends(get_tmdb_client),
):
    """Paged TMDB search; queries under two characters return an empty page."""
    return await tmdb.search(query, page=page)


@router.get("/trending")
async def trending(tmdb: TmdbClient = Depends(get_tmdb_client)):
    return await tmdb.trending()


# Declared last so /search and /trending are not captured as a movie id
@router.get("/{movie_id}")
async def details(movie_id: int, tmdb: TmdbClient = Depends(get_tmdb_client)):
    return await tmdb.details(movie_id)
