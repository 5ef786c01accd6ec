"""Centralized logging configuration for Event Reminder Service.

Rotating log files under logs/ plus console output, one format everywhere.
"""

import logging
from logging.handlers import RotatingFileHandler
import os

# Create logs directory
LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
os.makedirs(LOG_DIR, exist_ok=True)

LOG_FORMAT = '[%(asctime)s] %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str = 'service.log') -> logging.Logger:
    """Setup logger with rotation.

    Args:
        name: Logger name (usually __name__)
        log_file: Log file name (e.g., 'mcp.log', 'api.log')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # File handler - 10MB max, keep 5 backups
    file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, log_file),
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def configure_root_logger():
    """Reduce third-party library noise."""
    for noisy in ('uvicorn', 'uvicorn.access', 'fastapi', 'sqlalchemy', 'httpx', 'httpcore', 'mcp'):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# Auto-configure on import
configure_root_logger()
