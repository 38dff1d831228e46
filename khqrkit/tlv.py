"""Utility helpers to build and cut KHQR TLV payloads.

Lengths on the wire count UTF-8 bytes, so a value carrying Khmer text is
framed by its encoded size rather than its character count.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .emv import MAX_SEGMENTS, MAX_VALUE_LENGTH
from .errors import err_malformed_tlv


def byte_length(value: str) -> int:
    return len(value.encode("utf-8"))


@dataclass(frozen=True, slots=True)
class TLVItem:
    tag: str
    value: str

    def serialize(self) -> str:
        length = f"{byte_length(self.value):02d}"
        return f"{self.tag}{length}{self.value}"


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def _cut_bytes(raw: bytes) -> tuple[TLVItem, bytes]:
    if len(raw) < 4:
        raise err_malformed_tlv(f"Segment header truncated: {len(raw)} byte(s) left")
    header = raw[:4]
    length_digits = header[2:4]
    if not length_digits.isdigit():
        raise err_malformed_tlv(f"Length field is not decimal: {length_digits!r}")
    length = int(length_digits)
    value_end = 4 + length
    if value_end > len(raw):
        raise err_malformed_tlv(f"Declared length {length} exceeds remaining {len(raw) - 4} byte(s)")
    try:
        tag = header[:2].decode("utf-8")
        value = raw[4:value_end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise err_malformed_tlv("Segment boundary splits a multi-byte character") from exc
    return TLVItem(tag=tag, value=value), raw[value_end:]


def cut(payload: str) -> tuple[TLVItem, str]:
    """Split one ``tag + length + value`` segment off the front of ``payload``.

    Returns the item and the untouched remainder. Raises ``MalformedTlv`` when
    the input is shorter than the header plus its declared length.
    """

    item, rest = _cut_bytes(payload.encode("utf-8"))
    return item, rest.decode("utf-8")


def iter_segments(payload: str, max_segments: int = MAX_SEGMENTS) -> Iterator[TLVItem]:
    """Walk every segment of ``payload`` with a hard cap on the segment count."""

    raw = payload.encode("utf-8")
    count = 0
    while raw:
        count += 1
        if count > max_segments:
            raise err_malformed_tlv(f"More than {max_segments} TLV segments")
        item, raw = _cut_bytes(raw)
        yield item


def parse_tlv(payload: str, max_segments: int = MAX_SEGMENTS) -> list[TLVItem]:
    return list(iter_segments(payload, max_segments))


def fits_length(value: str) -> bool:
    return byte_length(value) <= MAX_VALUE_LENGTH
