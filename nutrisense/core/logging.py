"""
Logging utilities for the FastAPI application and helper scripts.

Provides a consistent logging format and configuration.
"""

import logging
import sys

_NOISY_LOGGERS = ("httpx", "httpcore", "google")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and quiet the HTTP/SDK client loggers."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # Request URLs may carry API keys as query parameters.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]
