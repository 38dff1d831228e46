"""KHQR payload decoding and verification."""
from __future__ import annotations

from dataclasses import dataclass, field

from . import emv
from .crc import crc_matches, looks_like_checksummed
from .emv import MerchantType
from .errors import KHQRError, MalformedTlv, err_checksum_mismatch, err_malformed_tlv, err_required_missing
from .fields import check_amount_for_currency, parse_composite, validate_field
from .registry import REQUIRED_TAGS, TAGS_BY_CODE, field_skeleton, normalize_tag
from .tlv import iter_segments

FieldMap = dict[str, str | None]


@dataclass(frozen=True, slots=True)
class _Segment:
    wire_tag: str
    tag: str
    value: str
    merchant_type: MerchantType | None


@dataclass(slots=True)
class _Walk:
    segments: list[_Segment] = field(default_factory=list)
    merchant_type: MerchantType | None = None
    error: KHQRError | None = None


@dataclass(frozen=True)
class DecodeOutcome:
    fields: FieldMap | None = None
    error: KHQRError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _walk(payload: str, *, strict: bool, max_segments: int) -> _Walk:
    """Cut every top-level segment, keeping known tags in wire order."""

    walk = _Walk()
    last_tag = None
    try:
        for item in iter_segments(payload, max_segments):
            tag, variant = normalize_tag(item.tag)
            if tag == last_tag:
                if strict:
                    walk.error = err_malformed_tlv(f"Tag {tag} repeated in succession")
                break
            last_tag = tag
            if variant is not None:
                walk.merchant_type = variant
            if tag in TAGS_BY_CODE:
                walk.segments.append(_Segment(item.tag, tag, item.value, variant))
    except MalformedTlv as exc:
        walk.error = exc
    return walk


def decode(payload: str, *, max_segments: int = emv.MAX_SEGMENTS) -> FieldMap:
    """Best-effort decode for display and inspection.

    Field contents are not validated and unknown tags are skipped. Only a
    broken top-level frame (truncated segment, segment cap) raises
    ``MalformedTlv``.
    """

    walk = _walk(payload, strict=False, max_segments=max_segments)
    if walk.error is not None:
        raise walk.error

    fields = field_skeleton()
    fields["merchant_type"] = walk.merchant_type.value if walk.merchant_type else None
    for segment in walk.segments:
        definition = TAGS_BY_CODE[segment.tag]
        if definition.has_subtags:
            fields.update(parse_composite(segment.tag, segment.value, segment.merchant_type).value)
        else:
            fields[definition.field_name] = segment.value
    return fields


def try_decode_strict(payload: str, *, max_segments: int = emv.MAX_SEGMENTS) -> DecodeOutcome:
    """Validating decode that reports the first violation instead of raising."""

    walk = _walk(payload, strict=True, max_segments=max_segments)
    if walk.error is not None:
        return DecodeOutcome(error=walk.error)

    seen = {segment.tag for segment in walk.segments}
    for tag in REQUIRED_TAGS:
        if tag not in seen:
            return DecodeOutcome(error=err_required_missing(tag))

    fields = field_skeleton()
    fields["merchant_type"] = (walk.merchant_type or MerchantType.INDIVIDUAL).value
    for segment in walk.segments:
        definition = TAGS_BY_CODE[segment.tag]
        if definition.has_subtags:
            parsed = parse_composite(segment.tag, segment.value, segment.merchant_type)
            if not parsed.ok:
                return DecodeOutcome(error=parsed.error)
            checked = validate_field(segment.wire_tag, definition.kind, parsed.value)
            if not checked.ok:
                return DecodeOutcome(error=checked.error)
            fields.update(checked.value)
        else:
            checked = validate_field(segment.wire_tag, definition.kind, segment.value)
            if not checked.ok:
                return DecodeOutcome(error=checked.error)
            fields[definition.field_name] = checked.value

    amount = check_amount_for_currency(
        emv.TRANSACTION_AMOUNT, fields["transaction_amount"], fields["transaction_currency"]
    )
    if not amount.ok:
        return DecodeOutcome(error=amount.error)
    return DecodeOutcome(fields=fields)


def decode_strict(payload: str, *, max_segments: int = emv.MAX_SEGMENTS) -> FieldMap:
    outcome = try_decode_strict(payload, max_segments=max_segments)
    if outcome.error is not None:
        raise outcome.error
    return outcome.fields


def check_payload(payload: str, *, max_segments: int = emv.MAX_SEGMENTS) -> DecodeOutcome:
    """Full acceptance check: frame shape, CRC, minimum length, strict decode."""

    if not looks_like_checksummed(payload):
        return DecodeOutcome(error=err_malformed_tlv("Payload does not end with a CRC field"))
    if not crc_matches(payload):
        return DecodeOutcome(error=err_checksum_mismatch())
    if len(payload) < emv.INVALID_LENGTH_KHQR:
        return DecodeOutcome(error=err_malformed_tlv("Payload is shorter than a KHQR frame"))
    return try_decode_strict(payload, max_segments=max_segments)


def verify(payload: str, *, max_segments: int = emv.MAX_SEGMENTS) -> bool:
    return check_payload(payload, max_segments=max_segments).ok
