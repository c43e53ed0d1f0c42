"""Concrete printdesk errors, one per kind of failure the API reports."""
from __future__ import annotations

from printdesk.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """A required request parameter is missing or malformed."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Requested order or file not found."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class PersistenceError(ProjectError):
    """Reading or writing the order file, key-value storage, database or uploads dir failed."""

    default_code = "PERSISTENCE_ERROR"
    default_http_status = 500


class UploadError(ProjectError):
    """Upload payload missing or larger than the configured ceiling."""

    default_code = "UPLOAD_ERROR"
    default_http_status = 400


class UploadLimitError(UploadError):
    """Upload larger than the configured ceiling; reported as a failed upload."""

    default_code = "UPLOAD_TOO_LARGE"
    default_http_status = 500
