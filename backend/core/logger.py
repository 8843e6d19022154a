# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Logging bootstrap.

Handlers and formats are declared in etc/logging.conf; the file location and
the level of the ``cinequeue`` logger come from settings (LOG_FILE,
LOG_LEVEL) so they can be changed per deployment without touching the conf.

    from core.logger import logger
"""

import configparser
import logging
import logging.config
from pathlib import Path

from core.config import settings

# backend/core/logger.py  →  ../../  →  cinequeue/
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"


def _log_file_path() -> Path:
    path = Path(settings.log_file)
    return path if path.is_absolute() else _PROJECT_ROOT / path


def configure_logging() -> logging.Logger:
    """
    Apply etc/logging.conf with the log file substituted in and return the
    application logger.  Safe to call more than once.
    """
    log_file = _log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Raw parser: %(asctime)s and friends must reach logging untouched, only
    # the %(log_file)s placeholder is filled in here.
    parser = configparser.RawConfigParser()
    parser.read_string(
        _LOGGING_CONF.read_text(encoding="utf-8").replace("%(log_file)s", str(log_file))
    )
    logging.config.fileConfig(parser, disable_existing_loggers=False)

    app_logger = logging.getLogger("cinequeue")
    app_logger.setLevel(settings.log_level.upper())
    return app_logger


logger = configure_logging()
