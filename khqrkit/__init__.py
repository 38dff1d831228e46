"""Encode, decode and verify KHQR payment payloads."""
from __future__ import annotations

from .emv import Currency, MerchantType
from .errors import (
    ChecksumMismatch,
    CurrencyConflict,
    FieldValidationError,
    KHQRError,
    MalformedTlv,
    RequiredFieldMissing,
)
from .khqr_decoder import DecodeOutcome, check_payload, decode, decode_strict, try_decode_strict, verify
from .khqr_encoder import EncodedKHQR, generate, generate_individual, generate_merchant
from .schemas import IndividualInfo, MerchantInfo, resolve_info

__all__ = [
    "ChecksumMismatch",
    "Currency",
    "CurrencyConflict",
    "DecodeOutcome",
    "EncodedKHQR",
    "FieldValidationError",
    "IndividualInfo",
    "KHQRError",
    "MalformedTlv",
    "MerchantInfo",
    "MerchantType",
    "RequiredFieldMissing",
    "check_payload",
    "decode",
    "decode_strict",
    "generate",
    "generate_individual",
    "generate_merchant",
    "resolve_info",
    "try_decode_strict",
    "verify",
]
