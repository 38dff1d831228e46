"""KHQR codec error taxonomy."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class KHQRError(Exception):
    code: str
    message: str
    tag: str | None = None
    status_code: int = 400

    def __str__(self) -> str:  # noqa: D401 override
        if self.tag:
            return f"{self.code} [tag {self.tag}]: {self.message}"
        return f"{self.code}: {self.message}"


class FieldValidationError(KHQRError):
    """A single field violates its length, charset or format rule."""


class RequiredFieldMissing(KHQRError):
    """A mandatory tag was not present in the payload."""


class ChecksumMismatch(KHQRError):
    """The trailing CRC does not match the payload body."""


class MalformedTlv(KHQRError):
    """Truncated or over-long TLV stream."""


class CurrencyConflict(KHQRError):
    """A UnionPay merchant account was combined with a USD amount."""


def err_field_invalid(tag: str, reason: str) -> FieldValidationError:
    return FieldValidationError(code="ERR_FIELD_INVALID", message=reason, tag=tag)


def err_required_missing(tag: str, message: str | None = None) -> RequiredFieldMissing:
    return RequiredFieldMissing(code="ERR_REQUIRED_MISSING", message=message or "Required tag is missing", tag=tag)


def err_checksum_mismatch(message: str | None = None) -> ChecksumMismatch:
    return ChecksumMismatch(code="ERR_CRC_MISMATCH", message=message or "CRC does not match payload", tag="63")


def err_malformed_tlv(message: str | None = None) -> MalformedTlv:
    return MalformedTlv(code="ERR_MALFORMED_TLV", message=message or "Malformed TLV stream")


def err_currency_conflict(message: str | None = None) -> CurrencyConflict:
    return CurrencyConflict(
        code="ERR_CURRENCY_CONFLICT",
        message=message or "UnionPay merchant account cannot be used with USD",
        tag="15",
    )
