"""
printdesk exception system.

Usage:
    from printdesk.core.exceptions import ProjectError, PersistenceError, exception_factory

    raise PersistenceError("Failed to save order", cause=exc)

    # Add new type on demand
    QuotaError = exception_factory("QuotaError", code="QUOTA_EXCEEDED", http_status=429)
"""
from printdesk.core.exceptions.base import ProjectError, exception_factory
from printdesk.core.exceptions.errors import (
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    UploadError,
    UploadLimitError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "exception_factory",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "UploadError",
    "UploadLimitError",
]
