"""Root logger setup for the API and the integration script."""

from __future__ import annotations

import logging

from stylefinder.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# HTTP client libraries log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(settings: Settings | None = None) -> None:
    """Set the root level from ``LOG_LEVEL`` and keep client libraries at WARNING."""

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
