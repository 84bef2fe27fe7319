"""Logging setup for the extractor and its driver script.

Engine modules only call ``structlog.get_logger("gradlesentinel.engine")``;
nothing is configured until :func:`setup_logging` runs, so library callers
keep control of their own logging.
"""

from __future__ import annotations

import logging.config
import os

import structlog

LEVEL_ENV = "GRADLESENTINEL_LOG_LEVEL"
FORMAT_ENV = "GRADLESENTINEL_LOG_FORMAT"


def _pre_chain() -> list[structlog.types.Processor]:
    # Shared by structlog events and records from plain stdlib loggers.
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Route structlog through stdlib logging to stderr.

    Arguments override the environment:
        GRADLESENTINEL_LOG_LEVEL  — level of the ``gradlesentinel`` loggers (default: INFO)
        GRADLESENTINEL_LOG_FORMAT — console | json (default: console)

    Other libraries stay at WARNING. stdout is left alone for results.
    """
    level = (level or os.environ.get(LEVEL_ENV, "INFO")).upper()
    log_format = (log_format or os.environ.get(FORMAT_ENV, "console")).lower()
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "gradlesentinel": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "gradlesentinel",
                },
            },
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": {"gradlesentinel": {"level": level}},
        }
    )
