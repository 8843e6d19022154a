# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Download states and the rule that turns them into a download-button state.

Two signals describe a movie version's download:

* the *persisted* status – the last state this service wrote for the hash
  (``download_status`` table), and
* the *live* queue status – a point-in-time poll of SABnzbd's queue and
  history (``services.sabnzbd.QueueStatus``).

:func:`reconcile` combines both, plus object-storage presence, into the
label / enabled-ness the client renders.
"""

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from core.logger import logger

if TYPE_CHECKING:
    from services.sabnzbd import QueueStatus


class DownloadState(str, enum.Enum):
    PROCESSING = "processing"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    FAILED = "failed"
    COMPLETED = "completed"
    QUEUED = "queued"
    RUNNING = "running"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DownloadState":
        """Read a stored status; values outside the enum become UNKNOWN."""
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(value.lower())
        except ValueError:
            logger.warning("Unrecognised download status %r treated as unknown", value)
            return cls.UNKNOWN

    @classmethod
    def from_upstream(cls, value: Optional[str]) -> Optional["DownloadState"]:
        """Map a SABnzbd status string (any case); None when it is not one of ours."""
        try:
            return cls((value or "").lower())
        except ValueError:
            return None


# Persisted values allowed to override what the live poll says
OVERRIDING_STATES = frozenset({
    DownloadState.PROCESSING,
    DownloadState.DOWNLOADING,
    DownloadState.EXTRACTING,
    DownloadState.FAILED,
    DownloadState.QUEUED,
    DownloadState.RUNNING,
})


@dataclass(frozen=True)
class ActionState:
    enabled: bool
    label: str
    variant: str  # success | destructive | active | ghost
    tooltip: Optional[str] = None


_LABELS = {
    DownloadState.EXTRACTING: "Being extracted",
    DownloadState.QUEUED: "Queued",
    DownloadState.RUNNING: "Downloading",
    DownloadState.DOWNLOADING: "Downloading",
    DownloadState.PROCESSING: "Preparing download",
}

_TOOLTIPS = {
    DownloadState.EXTRACTING: "The movie is being processed by the download server",
    DownloadState.QUEUED: "The movie is waiting in the download queue",
    DownloadState.RUNNING: "The movie is being downloaded",
    DownloadState.DOWNLOADING: "The movie is already in the download queue",
    DownloadState.PROCESSING: "The download is being prepared",
}

_FAILED_TOOLTIP = "The last download failed. Please try again later."


def reconcile(
    queue: "QueueStatus",
    persisted: DownloadState,
    in_storage: bool,
    submitting: bool = False,
) -> ActionState:
    """
    Decide how the download button for one version looks.

    * A file already in object storage is always downloadable, whatever the
      queue says.
    * Live flags decide enabled-ness; any overriding persisted value, or a
      failure from either side, also disables the button.
    * The persisted value wins for label and tooltip, live flags fill in
      when nothing was persisted.
    """
    if in_storage:
        return ActionState(enabled=True, label="Download from storage", variant="success")

    effective = persisted if persisted in OVERRIDING_STATES else None
    failed = queue.status == DownloadState.FAILED or effective == DownloadState.FAILED

    enabled = not (
        submitting
        or queue.is_in_queue
        or queue.is_processing
        or failed
        or effective is not None
    )

    active = queue.is_in_queue or effective in (
        DownloadState.DOWNLOADING, DownloadState.QUEUED, DownloadState.RUNNING,
    )
    variant = "active" if active else "ghost"

    # An in-flight submission outranks a previous failure
    if submitting:
        return ActionState(enabled=False, label="Preparing…", variant=variant)

    if failed:
        return ActionState(enabled=False, label="Download failed", variant="destructive", tooltip=_FAILED_TOOLTIP)

    if effective is not None:
        return ActionState(enabled=enabled, label=_LABELS[effective], variant=variant, tooltip=_TOOLTIPS[effective])
    if queue.is_processing:
        return ActionState(
            enabled=enabled,
            label=_LABELS[DownloadState.EXTRACTING],
            variant=variant,
            tooltip=_TOOLTIPS[DownloadState.EXTRACTING],
        )
    if queue.is_in_queue:
        return ActionState(
            enabled=enabled,
            label=_LABELS[DownloadState.DOWNLOADING],
            variant=variant,
            tooltip=_TOOLTIPS[DownloadState.DOWNLOADING],
        )
    return ActionState(enabled=enabled, label="Download", variant=variant)
