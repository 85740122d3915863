"""
Order Query Service Logging Module
==================================
One JSON object per line. Context passed through ``extra=`` (strategy,
query name, query count, correlation id) becomes top-level keys so store
round trips can be filtered and counted from the log stream.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, List, Optional

SERVICE_NAME = "order_query_service"

# Attributes every LogRecord carries; anything else came from ``extra=``
_STANDARD_ATTRIBUTES = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
}


class OrderQueryJSONFormatter(logging.Formatter):
    def __init__(self, exclude_fields: Optional[Iterable[str]] = None):
        super().__init__()
        self.exclude_fields = frozenset(exclude_fields or ())

    def _context(self, record: logging.LogRecord) -> dict:
        return {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRIBUTES and key not in self.exclude_fields
        }

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
            **self._context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def _rotating_file_handler(
    path: Path, level: int, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setLevel(level)
    return handler


def setup_order_query_logging(
    service_name: str = SERVICE_NAME,
    log_level: str = "INFO",
    enable_file_logging: bool = False,
    log_dir: Optional[str] = None,
    max_file_size: int = 100 * 1024 * 1024,  # 100MB
    backup_count: int = 5,
    exclude_fields: Optional[List[str]] = None,
) -> logging.Logger:
    """
    Configure the service logger and return it.

    Child loggers from ``get_logger`` propagate here, so the handlers are
    attached once. Calling again replaces them.

    Args:
        service_name: Logger name and log file prefix
        log_level: Level name such as ``DEBUG`` (store round trips) or ``INFO``
        enable_file_logging: Also write ``<service>.log`` and ``<service>_errors.log``
        log_dir: Directory for log files, ``app/logs`` when omitted
        max_file_size: Rotation threshold in bytes
        backup_count: Rotated files kept per log
        exclude_fields: ``extra`` keys never written
    """
    level = logging.getLevelName(log_level.upper())
    formatter = OrderQueryJSONFormatter(exclude_fields=exclude_fields)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    handlers[0].setLevel(level)

    if enable_file_logging:
        directory = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _rotating_file_handler(
                directory / f"{service_name}.log", level, max_file_size, backup_count
            )
        )
        handlers.append(
            _rotating_file_handler(
                directory / f"{service_name}_errors.log",
                logging.ERROR,
                max_file_size,
                backup_count,
            )
        )

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(
        "Logging configured",
        extra={
            "log_level": log_level,
            "file_logging": enable_file_logging,
            "handlers": len(handlers),
        },
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger of the service logger, e.g. ``order_query_service.store``"""
    return logging.getLogger(f"{SERVICE_NAME}.{name}")
