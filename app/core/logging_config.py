# ===================================
# app/core/logging_config.py
# ===================================
import json
import logging
from logging.config import dictConfig

from app.core.config import settings


class JsonFormatter(logging.Formatter):
    """One JSON object per log line"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = None, fmt: str = None) -> None:
    """Configure the root logger from the settings"""
    level = (level or settings.log_level).upper()
    fmt = fmt or settings.log_format

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            },
            "json": {
                "()": JsonFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": fmt,
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        "loggers": {
            # SQL echo is driven by the engine, keep the logger quiet otherwise
            "sqlalchemy.engine": {"level": "INFO" if settings.debug else "WARNING"},
            "apscheduler": {"level": "WARNING"},
        },
    })
