"""
Shared logging configuration for the workforce services.
Provides clean, concise logging with essential information only.
"""
import logging
import sys
import warnings
from typing import Optional


NOISY_LOGGERS = [
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "watchfiles.main",
    "passlib.handlers.bcrypt",  # bcrypt version probing
    "httpx",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.dialects",
    "aiosqlite",
]


def setup_service_logging(
    service_name: str,
    log_level: str = "INFO",
    suppress_warnings: bool = True,
) -> logging.Logger:
    """
    Set up standardized logging for a service.

    Args:
        service_name: Name of the service (e.g., "workforce")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        suppress_warnings: Whether to suppress non-essential library warnings

    Returns:
        Configured logger instance
    """
    if suppress_warnings:
        warnings.filterwarnings("ignore", ".*error reading bcrypt version.*")
        warnings.filterwarnings("ignore", ".*watchfiles.*")
        warnings.filterwarnings("ignore", ".*reloader.*")

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True  # Override existing configuration
    )

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    return logging.getLogger(service_name)


def log_service_startup(logger: logging.Logger, service_name: str, port: int, version: str = "1.0.0"):
    logger.info(f"🚀 {service_name.title()} Service v{version} - Port {port}")


def log_service_ready(logger: logging.Logger, service_name: str, additional_info: Optional[str] = None):
    base_message = f"✅ {service_name.title()} Service Ready"
    if additional_info:
        logger.info(f"{base_message} ({additional_info})")
    else:
        logger.info(base_message)


def log_dependency_status(logger: logging.Logger, dependency: str, status: str):
    """Log dependency status concisely"""
    status_emoji = "✅" if status == "ok" else "⚠️"
    logger.info(f"{status_emoji} {dependency}: {status}")


def log_service_shutdown(logger: logging.Logger, service_name: str):
    logger.info(f"🛑 {service_name.title()} Service Shutting Down")
