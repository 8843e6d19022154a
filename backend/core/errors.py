# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Domain error taxonomy.

Service-layer code (upstream adapters, the download core) raises these
instead of ``HTTPException`` so it stays usable outside a request.  The
exception handler registered in ``main.py`` turns every ``AppError`` into a
JSON ``{"error": ...}`` body with the matching ``status_code``.
"""

from typing import Optional

from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT


class ValidationFailure(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamFailure(AppError):
    """An external service answered with a non-success status or not at all."""

    status_code = status.HTTP_502_BAD_GATEWAY


# -- Download pipeline ------------------------------------------------------


class QueueCheckFailed(UpstreamFailure):
    pass


class MissingJobFile(UpstreamFailure):
    pass


class SubmissionConflict(Conflict):
    """A download for the hash is already queued, running, or failed."""
