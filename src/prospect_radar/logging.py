import datetime
import logging
import os
import sys
from pathlib import Path

from loguru import logger

from prospect_radar.core.paths import LOGS_DIR


# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = set(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


class _InterceptHandler(logging.Handler):
    """Forward stdlib log records (used by library modules) into loguru, keeping ``extra`` fields."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        logger.bind(logger_name=record.name, **extras).opt(exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: str = "INFO") -> None:
    # Rotating logs (1 per day) plus stderr for interactive runs
    log_dir = Path(os.getenv("PROSPECT_LOG_DIR", str(LOGS_DIR)))
    log_dir.mkdir(parents=True, exist_ok=True)
    date_str = datetime.date.today().isoformat()
    log_path = log_dir / f"prospect_radar_{date_str}.log"

    logger.remove()  # remove default
    logger.add(
        log_path,
        rotation="1 day",
        retention="14 days",
        compression="zip",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message} | {extra}",
    )
    logger.add(sys.stderr, level="WARNING", format="{level: <8} | {message} | {extra}")
    logging.basicConfig(handlers=[_InterceptHandler()], level=logging.getLevelName(level), force=True)


def get_logger():
    return logger
