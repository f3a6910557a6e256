import logging
from logging.config import dictConfig
from typing import Literal

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
LogFormat = Literal["text", "json"]


def configure_logging(level: LogLevel = "INFO", fmt: LogFormat = "text", access_log: bool = True) -> None:
    """Send pg_dumper, child-process stderr and uvicorn records to stderr.

    Third-party libraries stay at WARNING; ``level`` applies to pg_dumper.
    The captured stderr of pg_dump/psql/pg_restore is only emitted at DEBUG.
    """
    level = level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {
                    "format": "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                },
                "json": {
                    "()": "pythonjsonlogger.json.JsonFormatter",
                    "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    "rename_fields": {"levelname": "level", "name": "logger"},
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": fmt,
                }
            },
            "loggers": {
                "pg_dumper": {"level": level},
                "uvicorn": {"level": level, "handlers": [], "propagate": True},
                "uvicorn.error": {"level": level, "handlers": [], "propagate": True},
                "uvicorn.access": {
                    "level": "INFO" if access_log else "WARNING",
                    "handlers": [],
                    "propagate": True,
                },
            },
            "root": {"handlers": ["console"], "level": "WARNING"},
        }
    )
    logging.captureWarnings(True)
