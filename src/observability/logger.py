"""
Structured logging for movie-etl-pipeline

Every module gets its logger from get_logger(). Output is JSON by default
(python-json-logger) or plain text for local runs (LOG_FORMAT=text).
Records emitted inside run_context() carry the run id and source id.
"""
import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "movie-etl-pipeline"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)
_source_id: ContextVar[str | None] = ContextVar("source_id", default=None)


@contextmanager
def run_context(source_id: str, run_id: str | None = None) -> Iterator[str]:
    """
    Tag every log record emitted in the block with a run and source id

    Args:
        source_id: Label of the input being processed
        run_id: Identifier of the run (a new uuid4 hex when None)

    Yields:
        The run id
    """
    run_id = run_id or uuid.uuid4().hex
    run_token = _run_id.set(run_id)
    source_token = _source_id.set(source_id)
    try:
        yield run_id
    finally:
        _source_id.reset(source_token)
        _run_id.reset(run_token)


class RunContextFilter(logging.Filter):
    """Copies the active run context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id.get()
        if not hasattr(record, "source_id"):
            record.source_id = _source_id.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding timestamp, level, logger, module and run fields
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = (log_record.get("level") or record.levelname).upper()
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName

        # Outside a run there is nothing to correlate
        for field in ("run_id", "source_id"):
            if getattr(record, field, None) is None:
                log_record.pop(field, None)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Setup and configure a logger

    Args:
        name: Logger name
        level: Log level (defaults to env var LOG_LEVEL, then INFO)
        format_type: "json" or "text" (defaults to env var LOG_FORMAT, then json)

    Returns:
        Configured logger instance
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = LOG_LEVELS.get(level_name, logging.INFO)
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    # Reconfiguring replaces the handler
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(RunContextFilter())

    if format_type == "json":
        handler.setFormatter(CustomJsonFormatter(
            fmt="%(timestamp)s %(level)s %(logger)s %(run_id)s %(source_id)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        ))
    else:
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(run_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance, configuring it on first use

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger


class log_operation:
    """
    Context manager logging the start, end and duration of an operation

    Usage:
        with log_operation("load", logger=logger, table="movie"):
            store.upsert(records)

    The elapsed time is kept in ``duration`` after the block exits.
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time: float | None = None
        self.duration: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(
            f"Starting: {self.operation_name}",
            extra={"operation": self.operation_name, **self.extra_fields}
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        fields = {
            "operation": self.operation_name,
            "duration_seconds": round(self.duration, 3),
            **self.extra_fields,
        }

        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name}", extra={**fields, "status": "success"})
        else:
            self.logger.error(
                f"Failed: {self.operation_name}: {exc_val}",
                extra={**fields, "status": "error", "error_type": exc_type.__name__},
            )
        return False
