import sys
from pathlib import Path
from typing import TextIO

import structlog

from vela_installer.models.app_config import AppConfig

LOG_FILE_NAME = "installer.log"

# Map string level to integer
LEVEL_MAP = {
    "INFO": 20,
    "DEBUG": 10,
    "TRACE": 5,
}

_log_stream: TextIO | None = None


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ]


def configure_startup_logging() -> None:
    """Send warnings and errors to stderr until the log file is configured."""
    structlog.configure(
        processors=_processors(),
        wrapper_class=structlog.make_filtering_bound_logger(30),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_logging(config: AppConfig) -> Path | None:
    """Configure structlog to write JSON lines into the installer log file.

    Args:
        config: Application configuration

    Returns:
        Path of the log file, or None when no logs directory is configured
    """
    global _log_stream

    log_level = LEVEL_MAP.get(config.advanced.log_level, 20)
    log_file: Path | None = None

    log_dir = config.paths.logs_dir
    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / LOG_FILE_NAME
        if _log_stream is not None:
            _log_stream.close()
        _log_stream = open(log_file, "a", encoding="utf-8")  # noqa: SIM115
        logger_factory = structlog.WriteLoggerFactory(file=_log_stream)
    else:
        logger_factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=_processors(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,  # Allow reconfiguration between runs
    )
    return log_file


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name

    Returns:
        Logger bound to the current structlog configuration
    """
    return structlog.get_logger(name)
