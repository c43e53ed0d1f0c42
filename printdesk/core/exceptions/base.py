"""
Root of the printdesk error hierarchy.

Every error knows the HTTP status and machine code it maps to, so the API
layer needs one handler and services can raise without importing FastAPI.
"""
from __future__ import annotations

import traceback
from typing import Any, Dict, Optional, Type


class ProjectError(Exception):
    """
    Base for every error printdesk raises on purpose.

    ``code`` and ``http_status`` fall back to the class-level defaults, so a
    subclass usually only sets those two attributes. ``cause`` is kept for
    logs and never sent to clients.
    """

    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or type(self).default_code
        self.http_status = http_status or type(self).default_http_status
        self.details: Dict[str, Any] = dict(details or {})
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, http_status={self.http_status})"

    def to_response(self) -> Dict[str, Any]:
        """JSON body for HTTP clients: ``{"error", "code"[, "details"]}``."""
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body

    def to_dict(self) -> Dict[str, Any]:
        """Everything in ``to_response`` plus status and cause, for log records."""
        data = self.to_response()
        data["http_status"] = self.http_status
        if self.cause is not None:
            data["cause"] = repr(self.cause)
            data["cause_traceback"] = "".join(traceback.format_exception(self.cause)).strip()
        return data


def exception_factory(
    name: str,
    *,
    code: Optional[str] = None,
    http_status: int = 500,
    base: Type[ProjectError] = ProjectError,
) -> Type[ProjectError]:
    """
    Build a ProjectError subclass at runtime.

        PrinterOffline = exception_factory("PrinterOffline", http_status=503)
        raise PrinterOffline("Printer 2 is not responding")

    Without ``code`` the class name is upper-cased.
    """
    attrs = {"default_code": code or name.upper(), "default_http_status": http_status}
    return type(name, (base,), attrs)
