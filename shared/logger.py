import json
import logging
import threading

from shared.config import Config

logger = logging.getLogger()
# Config.validate reports a bad LOG_LEVEL; importing must not fail on one
logger.setLevel(Config.LOG_LEVEL if Config.LOG_LEVEL in Config.LOG_LEVELS else logging.INFO)


def _emit(level: int, level_name: str, message: str, **kwargs) -> None:
    log_data = {
        "level": level_name,
        "message": message,
        "thread": threading.current_thread().name,
        **kwargs,
    }
    # datetimes and enums from boto3 responses are not JSON native
    logger.log(level, json.dumps(log_data, default=str))


class StructuredLogger:
    """Structured logging for CloudWatch JSON parsing."""

    @staticmethod
    def info(message: str, **kwargs) -> None:
        """Log info level with structured data."""
        _emit(logging.INFO, "INFO", message, **kwargs)

    @staticmethod
    def error(message: str, exception: Exception = None, **kwargs) -> None:
        """Log error level with exception details."""
        if exception:
            kwargs["exception"] = str(exception)
            kwargs["exception_type"] = type(exception).__name__
        _emit(logging.ERROR, "ERROR", message, **kwargs)

    @staticmethod
    def warning(message: str, **kwargs) -> None:
        """Log warning level with structured data."""
        _emit(logging.WARNING, "WARNING", message, **kwargs)

    @staticmethod
    def debug(message: str, **kwargs) -> None:
        _emit(logging.DEBUG, "DEBUG", message, **kwargs)
