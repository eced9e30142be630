"""Structured logging for the service.

Everything goes through the stdlib root logger and is rendered by one
structlog ProcessorFormatter, so application events, uvicorn and SQLAlchemy
output share a format. Fields bound with structlog.contextvars (request_id
from the middleware) are merged into every event.

Environment:
    LOG_LEVEL   root level, default INFO
    LOG_FORMAT  json (default) or console
    DB_ECHO     log SQL statements at INFO
"""

import logging
import logging.config
import sys
from datetime import UTC, datetime
from typing import Any, Literal

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger
from structlog.typing import EventDict, Processor


class LoggingSettings(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(default="json", alias="LOG_FORMAT")
    db_echo: bool = Field(default=False, alias="DB_ECHO")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def _utc_timestamp(_logger: object, _method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _drop_color_message(_logger: object, _method_name: str, event_dict: EventDict) -> EventDict:
    # uvicorn duplicates its message with ANSI codes under this key
    event_dict.pop("color_message", None)
    return event_dict


def _pre_chain() -> list[Processor]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _utc_timestamp,
        _drop_color_message,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _library_levels(settings: LoggingSettings) -> dict[str, dict[str, str]]:
    return {
        # RequestIDMiddleware writes one line per request already
        "uvicorn.access": {"level": "WARNING"},
        "sqlalchemy.engine": {"level": "INFO" if settings.db_echo else "WARNING"},
    }


def configure_logging(settings: LoggingSettings) -> None:
    """Wire structlog into stdlib logging. Runs once, at import of this module."""
    pre_chain = _pre_chain()
    renderer: Processor = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": pre_chain,
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "structlog",
                    "stream": sys.stdout,
                },
            },
            "root": {"handlers": ["stdout"], "level": settings.log_level},
            "loggers": _library_levels(settings),
        }
    )


configure_logging(LoggingSettings())


def get_logger(name: str) -> BoundLogger:
    """Structured logger bound to ``name`` (normally ``__name__``).

        logger = get_logger(__name__)
        logger.info("stock_reserved", product_id=7, quantity=3)
        # {"event": "stock_reserved", "product_id": 7, "quantity": 3, "level": "info", ...}
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
