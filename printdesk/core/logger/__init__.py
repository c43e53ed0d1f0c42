"""
printdesk logger: console + optional rotating JSON file.

Usage:
    from printdesk.core.logger import configure, get_logger, LoggerConfig

    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/printdesk"))
    # or from env: LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES, LOG_BACKUP_COUNT
    configure()

    logger = get_logger(__name__)
"""
from printdesk.core.logger.config import LoggerConfig
from printdesk.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from printdesk.core.logger.setup import configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
]
