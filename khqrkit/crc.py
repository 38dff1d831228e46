"""CRC16-CCITT implementation and KHQR frame checks."""
from __future__ import annotations

import re

from .emv import CRC_PATTERN, INVALID_LENGTH_KHQR

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF

_CRC_RE = re.compile(CRC_PATTERN)


def crc16_ccitt(data: str) -> str:
    """Compute CRC16-CCITT (0x1021) for EMV payload strings."""

    checksum = CRC16_INIT
    for ch in data.encode("utf-8"):
        checksum ^= ch << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04X}"


def looks_like_checksummed(payload: str) -> bool:
    """Cheap structural check: trailing ``6304XXXX`` and a plausible frame length."""

    return len(payload) > INVALID_LENGTH_KHQR and _CRC_RE.search(payload) is not None


def split_crc(payload: str) -> tuple[str, str]:
    return payload[:-4], payload[-4:]


def crc_matches(payload: str) -> bool:
    """Recompute the CRC over everything but the last four characters."""

    body, claimed = split_crc(payload)
    return crc16_ccitt(body) == claimed.upper()
