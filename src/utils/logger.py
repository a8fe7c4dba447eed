"""Logging configuration using loguru."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from src.utils.config import Settings, get_settings


def setup_logger(settings: Optional[Settings] = None):
    """Configure application logging using loguru.

    Sets up both file and console logging based on configuration.
    """
    settings = settings or get_settings()
    level = settings.effective_log_level

    # Remove default handler
    logger.remove()

    # Console handler
    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )

    logger.configure(extra={"component": "smarta"})

    logger.add(
        sys.stdout,
        format=console_format,
        level=level,
        colorize=True,
    )

    # File handler
    log_path = Path(settings.log_file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if settings.log_format == "json":
        logger.add(
            log_path,
            format="{message}",
            level=level,
            rotation=f"{settings.log_max_size_mb} MB",
            retention=settings.log_backup_count,
            serialize=True,  # JSON output
        )
    else:
        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | "
            "{name}:{function}:{line} - {message}"
        )
        logger.add(
            log_path,
            format=file_format,
            level=level,
            rotation=f"{settings.log_max_size_mb} MB",
            retention=settings.log_backup_count,
        )

    logger.info(f"Logger initialized with level: {level}")
    logger.info(f"Logging to file: {log_path}")

    return logger


def get_logger(component: Optional[str] = None):
    """Get the configured logger instance, optionally bound to a component name."""
    if component:
        return logger.bind(component=component)
    return logger
