# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the watchlist endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WatchlistAddRequest(BaseModel):
    movie_id: int
    movie_title: str = Field(min_length=1)
    poster_path: Optional[str] = None


class WatchlistMovieRow(BaseModel):
    id: int
    user_id: int
    movie_id: int
    movie_title: str
    poster_path: Optional[str] = None
    added_at: datetime

    model_config = {"from_attributes": True}
