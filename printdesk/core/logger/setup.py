"""
Attach handlers to the printdesk root logger according to LoggerConfig.
"""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from printdesk.core.logger.config import LoggerConfig
from printdesk.core.logger.formatters import JsonFormatter, PlainConsoleFormatter

_active: Optional[LoggerConfig] = None


def _handlers(config: LoggerConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if config.console:
        console = logging.StreamHandler()
        console.setFormatter(PlainConsoleFormatter())
        handlers.append(console)
    if config.file_rotating and config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            log_dir / f"{config.log_file_basename}.log",
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        rotating.setFormatter(JsonFormatter())
        handlers.append(rotating)
    return handlers


def configure(config: Optional[LoggerConfig] = None) -> LoggerConfig:
    """
    (Re)configure the ``root_name`` logger. Defaults to LoggerConfig.from_env().

    Existing handlers are closed and replaced, so calling this again (app
    restarts in tests, the admin CLI) never duplicates output. Records do
    not propagate to the Python root logger.
    """
    global _active
    config = config or LoggerConfig.from_env()
    root = logging.getLogger(config.root_name)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    file_error: Optional[OSError] = None
    try:
        new_handlers = _handlers(config)
    except OSError as exc:
        file_error = exc
        new_handlers = _handlers(LoggerConfig(level=config.level, console=config.console, file_rotating=False))
    for handler in new_handlers:
        root.addHandler(handler)
    root.setLevel(config.level.upper())
    if file_error is not None:
        root.warning("log file disabled, %s is not writable: %s", config.log_dir, file_error)
    root.propagate = False
    _active = config
    return config


def get_logger(name: str) -> logging.Logger:
    """``logging.getLogger(name)``, configuring from env first if nobody has yet."""
    if _active is None:
        configure()
    return logging.getLogger(name)
