# updategen/logger.py
# updategen: Builds update and installation packages from a git working tree.
# Copyright (C) 2025 Dank A. Saurus

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY;
# without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
The 'updategen' logger shared by every module.

Messages go to stderr and to a rotating file under the data directory. The
enable_logging setting only controls informational messages: configure()
raises the threshold to WARNING when it is off, so failed copies, failed
cleanups and git errors are always reported.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from . import config

LOGGER_NAME = "updategen"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 5


def _file_handler(formatter: logging.Formatter) -> RotatingFileHandler | None:
    """Returns the rotating file handler, or None if the log directory is unusable."""
    log_dir = config.ROTATING_LOG_FILE.parent
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            config.ROTATING_LOG_FILE,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        # Nothing is configured yet, so report straight to stderr.
        print(f"CRITICAL: Could not open log file in {log_dir}: {e}", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    return handler


def setup_logger() -> logging.Logger:
    """Builds the 'updategen' logger once; later calls return it unchanged."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    file_handler = _file_handler(formatter)
    if file_handler is not None:
        logger.addHandler(file_handler)
    return logger


def configure(enable_logging: bool) -> None:
    """Applies the enable_logging setting to the shared logger."""
    log.setLevel(logging.INFO if enable_logging else logging.WARNING)


log = setup_logger()
