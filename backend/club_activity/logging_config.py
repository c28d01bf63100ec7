import logging
import sys

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Install a single stream handler on the package logger.

    Calling it twice does not duplicate output.
    """
    logger = logging.getLogger("club_activity")
    logger.setLevel((level or LOG_LEVEL).upper())
    if any(getattr(h, "_club_activity", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._club_activity = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
