"""Client-facing errors raised by the HTS handlers.

Each error knows its HTTP status and renders itself as the service's failure
envelope, ``{"success": false, "error": ...}``.
"""

from __future__ import annotations

from typing import Any, Dict


class HTSError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_envelope(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message, **self.extra}


class BadRequestError(HTSError):
    status_code = 400


class UnauthorizedError(HTSError):
    status_code = 401

    def to_envelope(self) -> Dict[str, Any]:
        envelope = super().to_envelope()
        envelope["message"] = self.message
        return envelope


class NotFoundError(HTSError):
    status_code = 404


class MethodNotAllowedError(HTSError):
    status_code = 405

    def __init__(self, method: str) -> None:
        super().__init__(f"Method {method} not allowed")
        self.method = method
