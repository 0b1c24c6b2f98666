"""
Configuration Management for K3s Suite
Centralizes all environment-based configuration and settings
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


# Endpoints the dashboard polls on a timer; successful hits are not worth logging
POLLED_PATHS = (
    '/health',
    '/api/system/minikube/status',
)


class HealthCheckFilter(logging.Filter):
    """Filter out health check and routine polling requests to reduce log noise"""
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()

        # For uvicorn access logs, the message format is:
        # 'IP:PORT - "METHOD /path HTTP/1.1" STATUS'
        if '200 OK' in message or '200' in str(getattr(record, 'args', '')):
            for path in POLLED_PATHS:
                if f'{path} HTTP' in message:
                    return False
        return True


def setup_logging(level: Optional[str] = None):
    """Configure application logging with rotation"""
    from .paths import LOG_DIR, ensure_data_dirs

    ensure_data_dirs()

    root_logger = logging.getLogger()

    # Close and clear any existing handlers to prevent file descriptor leaks
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    log_level = getattr(logging, (level or AppConfig.LOG_LEVEL).upper(), logging.INFO)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)

    # Max 10MB per file, keep 14 backups
    file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, 'k3s-suite.log'),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=14,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(console_formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # aiohttp logs every connection reset at INFO otherwise
    logging.getLogger('aiohttp').setLevel(logging.WARNING)

    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.addFilter(HealthCheckFilter())


def get_cors_origins() -> Optional[str]:
    """
    Get CORS origins from environment or return None to allow all.

    Returns:
        - Comma-separated string of specific origins if K3S_SUITE_CORS_ORIGINS is set
        - None to use regex pattern (allow all) if empty
    """
    custom_origins = os.getenv('K3S_SUITE_CORS_ORIGINS')
    if custom_origins:
        return custom_origins
    return None


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class AppConfig:
    """Main application configuration"""

    # Server settings
    HOST = os.getenv('K3S_SUITE_HOST', '0.0.0.0')
    PORT = int(os.getenv('K3S_SUITE_PORT', 3001))

    # Security settings
    CORS_ORIGINS = get_cors_origins()

    # Logging
    LOG_LEVEL = os.getenv('K3S_SUITE_LOG_LEVEL', 'INFO')

    # Initial registry configuration (replaced at runtime via POST /api/config/registry)
    REGISTRY_URL = os.getenv('K3S_SUITE_REGISTRY_URL', '')
    REGISTRY_USERNAME = os.getenv('K3S_SUITE_REGISTRY_USERNAME', '')
    REGISTRY_PASSWORD = os.getenv('K3S_SUITE_REGISTRY_PASSWORD', '')
    REGISTRY_SECURE = _env_bool('K3S_SUITE_REGISTRY_SECURE', False)
    REGISTRY_TIMEZONE = os.getenv('K3S_SUITE_REGISTRY_TIMEZONE', 'UTC')

    # Registry fan-out
    REGISTRY_TIMEOUT = float(os.getenv('K3S_SUITE_REGISTRY_TIMEOUT', 30))  # seconds per upstream call
    TAG_BATCH_SIZE = int(os.getenv('K3S_SUITE_TAG_BATCH_SIZE', 5))

    # Local cluster control
    MINIKUBE_TIMEOUT = int(os.getenv('K3S_SUITE_MINIKUBE_TIMEOUT', 600))

    @classmethod
    def validate(cls):
        """Validate configuration"""
        if cls.PORT < 1 or cls.PORT > 65535:
            raise ValueError(f"Invalid port: {cls.PORT}")

        if cls.TAG_BATCH_SIZE < 1:
            raise ValueError(f"Tag batch size must be at least 1: {cls.TAG_BATCH_SIZE}")

        if cls.REGISTRY_TIMEOUT <= 0:
            raise ValueError(f"Registry timeout must be positive: {cls.REGISTRY_TIMEOUT}")

        if cls.MINIKUBE_TIMEOUT <= 0:
            raise ValueError(f"Minikube timeout must be positive: {cls.MINIKUBE_TIMEOUT}")

        return True
