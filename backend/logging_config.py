from __future__ import annotations

import logging
import os
import sys


def setup_logging(log_level: str | None = None) -> None:
    """Send application logs to stdout with a timestamped format."""
    level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Avoid duplicate lines when the app is reloaded
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # httpx logs every request line at INFO, including the upstream URL
    logging.getLogger("httpx").setLevel(logging.WARNING)
