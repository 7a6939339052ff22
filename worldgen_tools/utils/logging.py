"""Logging helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=level)
    # urllib3 logs every connection at DEBUG, which drowns out cache decisions.
    if level <= logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.INFO)
