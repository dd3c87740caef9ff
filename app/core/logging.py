import logging.config
from pathlib import Path
from typing import Any, Dict

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 10 * 1024 * 1024


def _rotating_handler(filename: str, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(Path(settings.LOG_DIR) / filename),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": 5,
        "encoding": "utf-8",
    }


def build_logging_config(level: str) -> Dict[str, Any]:
    handlers = ["console", "file", "error_file"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"detailed": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed",
                "stream": "ext://sys.stdout",
            },
            "file": _rotating_handler("app.log", level),
            "error_file": _rotating_handler("error.log", "ERROR"),
        },
        "root": {"level": level, "handlers": handlers},
        "loggers": {
            "app": {"level": level, "handlers": handlers, "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING"},
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging():
    Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings.LOG_LEVEL.upper()))
