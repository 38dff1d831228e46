"""KHQR payload encoder."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from . import emv
from .crc import crc16_ccitt
from .emv import Currency
from .errors import err_currency_conflict
from .fields import format_amount, is_blank, serialize_field
from .registry import FieldKind
from .schemas import IndividualInfo, MerchantInfo
from .tlv import TLVItem


@dataclass(frozen=True)
class EncodedKHQR:
    payload: str
    md5: str
    crc: str


def timestamp_value(now: datetime) -> str:
    """Nested timestamp value: subtag 00 carrying epoch milliseconds."""

    millis = int(now.timestamp() * 1000)
    return TLVItem(tag=emv.TIMESTAMP_MILLISECONDS, value=str(millis)).serialize()


def append_crc(payload_no_crc: str) -> tuple[str, str]:
    """Append the ``6304`` placeholder and the CRC computed over it."""

    crc_input = f"{payload_no_crc}{emv.CRC}{emv.CRC_LENGTH}"
    crc = crc16_ccitt(crc_input)
    return f"{crc_input}{crc}", crc


def _fragment(tag: str, kind: FieldKind, value: Any) -> str:
    return serialize_field(tag, kind, value).unwrap()


def build_khqr(info: IndividualInfo | MerchantInfo, *, now: datetime | None = None) -> str:
    """Assemble the canonical payload.

    Fragments are emitted in wire order and the first invalid field raises,
    so nothing is returned for a description that fails any rule.
    """

    is_merchant = isinstance(info, MerchantInfo)
    fragments = [
        _fragment(emv.PAYLOAD_FORMAT_INDICATOR, FieldKind.PAYLOAD_FORMAT_INDICATOR, emv.DEFAULT_PAYLOAD_FORMAT_INDICATOR),
        _fragment(
            emv.POINT_OF_INITIATION_METHOD,
            FieldKind.POINT_OF_INITIATION_METHOD,
            emv.DYNAMIC_QR if info.amount else emv.STATIC_QR,
        ),
    ]

    if not is_blank(info.upi_merchant_account):
        if info.currency == Currency.USD.value:
            raise err_currency_conflict()
        fragments.append(_fragment(emv.UNIONPAY_MERCHANT_ACCOUNT, FieldKind.UNIONPAY_MERCHANT, info.upi_merchant_account))

    account_tag = (
        emv.MERCHANT_ACCOUNT_INFORMATION_MERCHANT if is_merchant else emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL
    )
    fragments += [
        _fragment(account_tag, FieldKind.MERCHANT_ACCOUNT, info.merchant_account()),
        _fragment(emv.MERCHANT_CATEGORY_CODE, FieldKind.MERCHANT_CATEGORY_CODE, emv.DEFAULT_MERCHANT_CATEGORY_CODE),
        _fragment(emv.TRANSACTION_CURRENCY, FieldKind.TRANSACTION_CURRENCY, info.currency),
    ]

    amount = format_amount(info.amount, info.currency).unwrap()
    if amount is not None:
        fragments.append(_fragment(emv.TRANSACTION_AMOUNT, FieldKind.TRANSACTION_AMOUNT, amount))

    fragments += [
        _fragment(emv.COUNTRY_CODE, FieldKind.COUNTRY_CODE, emv.DEFAULT_COUNTRY_CODE),
        _fragment(emv.MERCHANT_NAME, FieldKind.MERCHANT_NAME, info.merchant_name),
        _fragment(emv.MERCHANT_CITY, FieldKind.MERCHANT_CITY, info.merchant_city),
    ]

    additional = info.additional_data()
    if any(not is_blank(v) for v in additional.values()):
        fragments.append(_fragment(emv.ADDITIONAL_DATA_TAG, FieldKind.ADDITIONAL_DATA, additional))

    language = info.language_template()
    if any(not is_blank(v) for v in language.values()):
        fragments.append(_fragment(emv.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE, FieldKind.LANGUAGE_TEMPLATE, language))

    issued_at = now or datetime.now(timezone.utc)
    fragments.append(_fragment(emv.TIMESTAMP_TAG, FieldKind.TIMESTAMP, timestamp_value(issued_at)))

    payload, _ = append_crc("".join(fragments))
    return payload


def generate(info: IndividualInfo | MerchantInfo, *, now: datetime | None = None) -> EncodedKHQR:
    """Encode ``info`` and attach the MD5 digest used as a lookup key."""

    payload = build_khqr(info, now=now)
    return EncodedKHQR(payload=payload, md5=hashlib.md5(payload.encode("utf-8")).hexdigest(), crc=payload[-4:])


def generate_individual(info: IndividualInfo, *, now: datetime | None = None) -> EncodedKHQR:
    return generate(info, now=now)


def generate_merchant(info: MerchantInfo, *, now: datetime | None = None) -> EncodedKHQR:
    return generate(info, now=now)
