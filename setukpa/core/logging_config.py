# setukpa/core/logging_config.py
import logging
import sys

from setukpa.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once for the API process and RQ workers."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_setukpa", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._setukpa = True
        root.addHandler(handler)

    # SQL echo is too noisy outside debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
