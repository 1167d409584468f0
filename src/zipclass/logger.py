"""Logging setup shared by every zipclass module."""

import logging
from typing import Any, Dict, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "zipclass"
CONTEXT_FIELDS = ("dataset", "split")

_logging_initialized = False


def init_logging(level: int = logging.INFO):
    """Install the root handler on first use and set the zipclass log level.

    Later calls only change the level, so the CLI can switch to DEBUG after
    modules have already fetched their loggers.
    """
    global _logging_initialized
    if not _logging_initialized:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _logging_initialized = True
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    if not _logging_initialized:
        init_logging()
    return logging.getLogger(name)


class ContextLogger(logging.LoggerAdapter):
    """Prefixes messages with the dataset and split they concern, e.g. [PETS][TRAIN]."""

    def __init__(self, logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg, kwargs):
        tags = [
            f"[{str(self.extra[name]).upper()}]"
            for name in CONTEXT_FIELDS
            if self.extra.get(name)
        ]
        if not tags:
            return msg, kwargs
        return f"{''.join(tags)} {msg}", kwargs
