"""KHQR generation and QR building services."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from ..config import settings
from ..errors import KHQRError
from ..khqr_encoder import EncodedKHQR, generate
from ..monitoring import record_codec_operation
from ..renderer import choose_display_name, render_qr_payload
from ..schemas import IndividualInfo, MerchantInfo, resolve_info
from .errors import err_bad_payload

logger = logging.getLogger("khqrkit.service")


@dataclass(slots=True)
class GenerateResult:
    info: IndividualInfo | MerchantInfo
    encoded: EncodedKHQR
    qr_png_base64: str | None = None


class KHQRGenerator:
    def __init__(self, *, width: int | None = None, clock: Callable[[], datetime] | None = None):
        self.width = width or settings.qr_width
        self.clock = clock

    def create(self, info: IndividualInfo | MerchantInfo, *, render: bool = False) -> GenerateResult:
        now = self.clock() if self.clock else None
        try:
            encoded = generate(info, now=now)
        except KHQRError as exc:
            record_codec_operation("encode", "rejected")
            logger.info(
                "khqr rejected",
                extra={"code": exc.code, "tag": exc.tag, "merchant_type": type(info).__name__},
            )
            raise
        record_codec_operation("encode", "ok")
        logger.info(
            "khqr generated",
            extra={"md5": encoded.md5, "merchant_type": type(info).__name__, "currency": info.currency},
        )

        qr_png_base64 = None
        if render:
            rendered = render_qr_payload(
                encoded.payload,
                display_name=choose_display_name(store_label=info.store_label, merchant_name=info.merchant_name),
                amount=info.amount,
                currency=info.currency,
                width=self.width,
            )
            qr_png_base64 = rendered["png_base64"]

        return GenerateResult(info=info, encoded=encoded, qr_png_base64=qr_png_base64)

    def create_from_mapping(self, data: Mapping[str, Any], *, render: bool = False) -> GenerateResult:
        try:
            info = resolve_info(data)
        except ValidationError as exc:
            raise err_bad_payload(f"{exc.error_count()} invalid field(s) in description") from exc
        return self.create(info, render=render)
