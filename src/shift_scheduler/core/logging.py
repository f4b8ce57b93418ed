import logging

from shift_scheduler.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HANDLER_NAME = "shift_scheduler"


def configure_logging(level: str | None = None) -> None:
    """Attach a single stream handler to the package logger."""

    logger = logging.getLogger("shift_scheduler")
    logger.setLevel(level or get_settings().log_level)
    if not any(handler.get_name() == HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
