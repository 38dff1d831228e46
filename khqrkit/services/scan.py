"""Scanned payload handling services."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import settings
from ..khqr_decoder import FieldMap, check_payload, decode, try_decode_strict
from ..monitoring import record_codec_operation
from .errors import err_khqr_invalid

logger = logging.getLogger("khqrkit.service")


@dataclass(slots=True)
class ScanResult:
    fields: FieldMap
    strict: bool


class ScanService:
    def __init__(self, *, max_segments: int | None = None):
        self.max_segments = max_segments or settings.max_tlv_segments

    def inspect(self, payload: str) -> ScanResult:
        """Lenient decode; framing errors propagate to the caller."""

        fields = decode(payload, max_segments=self.max_segments)
        record_codec_operation("decode", "ok")
        return ScanResult(fields=fields, strict=False)

    def validate(self, payload: str) -> ScanResult:
        outcome = try_decode_strict(payload, max_segments=self.max_segments)
        if not outcome.ok:
            record_codec_operation("decode_strict", "rejected")
            logger.info("strict decode rejected", extra={"code": outcome.error.code, "tag": outcome.error.tag})
            raise err_khqr_invalid(outcome.error)
        record_codec_operation("decode_strict", "ok")
        return ScanResult(fields=outcome.fields, strict=True)

    def verify(self, payload: str) -> bool:
        outcome = check_payload(payload, max_segments=self.max_segments)
        record_codec_operation("verify", "ok" if outcome.ok else "rejected")
        if not outcome.ok:
            logger.info("verification failed", extra={"code": outcome.error.code, "tag": outcome.error.tag})
        return outcome.ok
