# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the download endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# -- Requests --------------------------------------------------------------


class DownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hash: str = Field(min_length=1)
    tmdb_id: int = Field(alias="tmdbId")


# -- Responses -------------------------------------------------------------
# The browser client expects camelCase for the queue fields.


class QueueStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_in_queue: bool = Field(alias="isInQueue")
    is_processing: bool = Field(alias="isProcessing")
    status: Optional[str] = None  # omitted when history has nothing for the hash


class DownloadStartedResponse(BaseModel):
    status: str  # always "downloading"


class DownloadStatusRow(BaseModel):
    hash: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DownloadStateResponse(BaseModel):
    """Everything the client needs to draw one version's download button."""

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    in_storage: bool = Field(alias="inStorage")
    is_in_queue: bool = Field(alias="isInQueue")
    is_processing: bool = Field(alias="isProcessing")
    status: Optional[str] = None
    persisted_status: str = Field(alias="persistedStatus")
    enabled: bool
    label: str
    variant: str
    tooltip: Optional[str] = None
