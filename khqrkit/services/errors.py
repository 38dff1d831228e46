"""Shared service error definitions."""
from __future__ import annotations

from dataclasses import dataclass

from ..errors import KHQRError


@dataclass(slots=True)
class ServiceError(Exception):
    code: str
    message: str
    status_code: int = 400

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


def err_khqr_invalid(cause: KHQRError | None = None) -> ServiceError:
    message = str(cause) if cause is not None else "KHQR payload failed verification"
    return ServiceError(code="ERR_KHQR_INVALID", message=message, status_code=422)


def err_bad_payload(message: str | None = None) -> ServiceError:
    return ServiceError(code="ERR_BAD_PAYLOAD", message=message or "Invalid request payload", status_code=400)
