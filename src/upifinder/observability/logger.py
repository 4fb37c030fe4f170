"""
Structured logging for upifinder

Reports are written to stdout, so every log line goes to stderr. The JSON
format (python-json-logger) suits log shippers; the text format is meant
for a terminal. Each line carries the command being run and the thread
that emitted it, since scanner workers log from their own threads.
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER = "upifinder"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMATS = ("json", "text")

JSON_FIELDS = "%(timestamp)s %(level)s %(logger)s %(command)s %(message)s"
TEXT_FIELDS = "%(asctime)s %(levelname)-7s [%(command)s] %(name)s: %(message)s"


class CommandFilter(logging.Filter):
    """Stamps every record with the CLI command that produced it."""

    def __init__(self, command: str = "-"):
        super().__init__()
        self.command = command

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "command"):
            record.command = self.command
        return True


class ArchiveJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter for scan logs

    Adds timestamp, upper-case level, logger name and thread name.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = (log_record.get("level") or record.levelname).upper()
        log_record["logger"] = record.name
        log_record["thread"] = record.threadName


def _make_formatter(format_type: str) -> logging.Formatter:
    if format_type == "json":
        return ArchiveJsonFormatter(fmt=JSON_FIELDS, datefmt="%Y-%m-%dT%H:%M:%S")
    return logging.Formatter(fmt=TEXT_FIELDS, datefmt="%H:%M:%S")


def setup_logger(
    name: str = DEFAULT_LOGGER,
    level: str | None = None,
    format_type: str | None = None,
    command: str = "-",
) -> logging.Logger:
    """
    Setup and configure a logger

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        command: Command name stamped on every line

    Returns:
        Configured logger instance
    """
    log_level = LOG_LEVELS.get((level or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.addFilter(CommandFilter(command))
    handler.setFormatter(_make_formatter(format_type))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def configure_logging(settings, level: str | None = None, format_type: str | None = None,
                      command: str = "-") -> logging.Logger:
    """Configure the package logger from LoggingSettings, flags taking precedence."""
    return setup_logger(
        level=level or settings.level,
        format_type=format_type or settings.format,
        command=command,
    )


def get_logger(name: str = DEFAULT_LOGGER) -> logging.Logger:
    """
    Get a logger instance

    Module loggers (`upifinder.*`) are children of the package logger and
    share its handler, so configuring `upifinder` once configures them all.
    """
    if name == DEFAULT_LOGGER or name.startswith(DEFAULT_LOGGER + "."):
        if not logging.getLogger(DEFAULT_LOGGER).handlers:
            setup_logger(DEFAULT_LOGGER)
        return logging.getLogger(name)

    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger


class log_scan:
    """
    Context manager timing one scan of the archive

    The caller stores the number of records consumed in `records`. A
    failure is logged at warning level and re-raised: the CLI still
    renders what was gathered before deciding the exit code.

    Usage:
        with log_scan("walk", logger=logger, roots=len(paths)) as scan:
            scan.records = aggregator.update_all(scanner.scan(paths))
    """

    def __init__(self, command: str, logger: logging.Logger | None = None, roots: int = 0):
        self.command = command
        self.logger = logger or get_logger()
        self.roots = roots
        self.records = 0
        self.duration = 0.0
        self._started = 0.0

    def __enter__(self):
        self._started = time.monotonic()
        self.logger.info(
            f"Scanning {self.roots} root(s)",
            extra={"command": self.command, "roots": self.roots},
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.monotonic() - self._started
        fields = {
            "command": self.command,
            "roots": self.roots,
            "records": self.records,
            "duration_seconds": round(self.duration, 3),
        }
        if exc_type is None:
            self.logger.info(f"Scanned {self.records} records in {self.duration:.2f}s", extra=fields)
        else:
            self.logger.warning(
                f"Scan stopped after {self.duration:.2f}s: {exc_val}",
                extra={**fields, "error_type": exc_type.__name__},
            )
        return False
