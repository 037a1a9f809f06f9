"""
Logging Module for EasyNote AI.

Architecture:
- Structured logging (JSON format for production)
- Console handler with colour coding for development
- Optional rotating file handler, one file per service logger
- Environment-aware configuration (LOG_LEVEL, ENVIRONMENT, LOG_TO_FILE, LOG_DIR)

Usage:
    logger = get_logger("ai-orchestrator")
    logger.info("Task submitted", extra={"task_kind": "translate"})
"""

import copy
import logging
import sys
import json
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone
from typing import Optional
import os


PROJECT_ROOT = Path(__file__).parent.parent

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def _logs_dir() -> Path:
    return Path(os.getenv("LOG_DIR", str(PROJECT_ROOT / "logs")))


def _extra_fields(record: logging.LogRecord) -> dict:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs logs in JSON format for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "service": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = _extra_fields(record)
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Colored console formatter for development.
    Appends ``extra`` context as key=value pairs.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Copy so other handlers still see the plain level name
        record = copy.copy(record)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname:8}{self.RESET}"
        line = super().format(record)
        extra = _extra_fields(record)
        if extra:
            line += " | " + " ".join(f"{k}={v}" for k, v in extra.items())
        return line


def get_logger(
    service_name: str,
    log_level: Optional[str] = None,
    enable_console: bool = True,
    enable_file: Optional[bool] = None,
    enable_json: Optional[bool] = None,
) -> logging.Logger:
    """
    Get a configured logger for a service.

    Args:
        service_name: Name of the service (e.g., 'ai-orchestrator', 'ai-gateway')
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Enable console output
        enable_file: Enable file output with rotation (default: LOG_TO_FILE env)
        enable_json: Use JSON format (default: on when ENVIRONMENT=production)

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level.upper(), logging.INFO)

    environment = os.getenv("ENVIRONMENT", "development").lower()
    is_production = environment == "production"

    if enable_json is None:
        enable_json = is_production
    if enable_file is None:
        enable_file = os.getenv("LOG_TO_FILE", "false").lower() in ("1", "true", "yes")

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()  # Clear existing handlers to avoid duplicates

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if enable_json:
            console_formatter = StructuredFormatter()
        else:
            console_formatter = ColoredConsoleFormatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if enable_file:
        logs_dir = _logs_dir()
        logs_dir.mkdir(parents=True, exist_ok=True)

        # Rotating file handler: 10MB per file, keep 5 backups
        file_handler = RotatingFileHandler(
            logs_dir / f"{service_name}.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)

        if enable_json:
            file_formatter = StructuredFormatter()
        else:
            file_formatter = logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | %(module)s:%(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def set_level(level: str, *service_names: str) -> None:
    """Change the level of already-created service loggers and their handlers."""
    resolved = getattr(logging, level.upper(), logging.INFO)
    for name in service_names:
        logger = logging.getLogger(name)
        logger.setLevel(resolved)
        for handler in logger.handlers:
            handler.setLevel(resolved)


def log_execution_time(logger: logging.Logger):
    """
    Decorator to log function execution time.

    Usage:
        @log_execution_time(logger)
        def my_function():
            pass
    """
    import functools
    import time

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                execution_time = time.time() - start_time
                logger.info(
                    f"{func.__name__} executed successfully",
                    extra={"execution_time_seconds": round(execution_time, 3)},
                )
                return result
            except Exception:
                execution_time = time.time() - start_time
                logger.error(
                    f"{func.__name__} failed after {execution_time:.2f}s",
                    exc_info=True,
                    extra={"execution_time_seconds": round(execution_time, 3)},
                )
                raise

        return wrapper

    return decorator
