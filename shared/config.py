"""Configuration management."""

import os
from typing import List, Optional

from shared.errors import ConfigurationError


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    return int(value) if value else None


class Config:
    """Centralized configuration from environment variables."""

    # AWS Configuration
    AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
    AWS_PROFILE = os.environ.get("AWS_PROFILE")
    AWS_MAX_ATTEMPTS = _optional_int("AWS_MAX_ATTEMPTS")
    AWS_RETRY_MODE = os.environ.get("AWS_RETRY_MODE")

    # Default invalidation targets and paths
    CLOUDFRONT_DISTRIBUTION_IDS = _split(os.environ.get("CLOUDFRONT_DISTRIBUTION_IDS", ""))
    INVALIDATION_PATHS = _split(os.environ.get("INVALIDATION_PATHS", "/*"))

    # Wait phase
    INVALIDATION_TIMEOUT = float(os.environ.get("INVALIDATION_TIMEOUT", "600"))  # seconds
    INVALIDATION_POLL_INTERVAL = float(os.environ.get("INVALIDATION_POLL_INTERVAL", "20"))  # seconds

    # Fan-out
    INVALIDATION_MAX_WORKERS = int(os.environ.get("INVALIDATION_MAX_WORKERS", "10"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    RETRY_MODES = ("legacy", "standard", "adaptive")
    LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration values are usable."""
        problems = []
        if cls.INVALIDATION_TIMEOUT <= 0:
            problems.append("INVALIDATION_TIMEOUT must be positive")
        if cls.INVALIDATION_POLL_INTERVAL <= 0:
            problems.append("INVALIDATION_POLL_INTERVAL must be positive")
        if cls.INVALIDATION_MAX_WORKERS < 1:
            problems.append("INVALIDATION_MAX_WORKERS must be at least 1")
        if cls.AWS_MAX_ATTEMPTS is not None and cls.AWS_MAX_ATTEMPTS < 1:
            problems.append("AWS_MAX_ATTEMPTS must be at least 1")
        if cls.AWS_RETRY_MODE and cls.AWS_RETRY_MODE not in cls.RETRY_MODES:
            problems.append(f"AWS_RETRY_MODE must be one of: {', '.join(cls.RETRY_MODES)}")
        if cls.LOG_LEVEL not in cls.LOG_LEVELS:
            problems.append(f"LOG_LEVEL must be one of: {', '.join(cls.LOG_LEVELS)}")
        if any(not path.startswith("/") for path in cls.INVALIDATION_PATHS):
            problems.append("INVALIDATION_PATHS entries must start with '/'")

        if problems:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(problems)}")

        return True
