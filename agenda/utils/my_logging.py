# agenda/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from agenda.config.settings import get_settings

# Third-party loggers kept at WARNING unless running verbose
QUIET_LOGGERS = ("sqlalchemy", "uvicorn.access", "httpx", "multipart")


def setup_logging(verbose=True):
    """Configure root logging once; the agenda package follows LOG_LEVEL"""
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.getLogger("agenda").setLevel(level)

    if not (verbose and settings.DEBUG):
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
