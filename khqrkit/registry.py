"""Tag and subtag registries for KHQR payloads."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from . import emv
from .emv import MerchantType


class FieldKind(str, enum.Enum):
    """Closed set of field kinds; the value is the decoded field name."""

    PAYLOAD_FORMAT_INDICATOR = "payload_format_indicator"
    POINT_OF_INITIATION_METHOD = "point_of_initiation_method"
    UNIONPAY_MERCHANT = "unionpay_merchant"
    MERCHANT_ACCOUNT = "merchant_account"
    MERCHANT_CATEGORY_CODE = "merchant_category_code"
    TRANSACTION_CURRENCY = "transaction_currency"
    TRANSACTION_AMOUNT = "transaction_amount"
    COUNTRY_CODE = "country_code"
    MERCHANT_NAME = "merchant_name"
    MERCHANT_CITY = "merchant_city"
    ADDITIONAL_DATA = "additional_data"
    LANGUAGE_TEMPLATE = "language_template"
    TIMESTAMP = "timestamp"
    CRC = "crc"


@dataclass(frozen=True, slots=True)
class TagDefinition:
    tag: str
    kind: FieldKind
    required: bool
    has_subtags: bool = False

    @property
    def field_name(self) -> str:
        return self.kind.value


@dataclass(frozen=True, slots=True)
class SubtagDefinition:
    parent_tag: str
    subtag: str
    name: str


# Registry order is the canonical field order of an encoded payload.
KHQR_TAGS: tuple[TagDefinition, ...] = (
    TagDefinition(emv.PAYLOAD_FORMAT_INDICATOR, FieldKind.PAYLOAD_FORMAT_INDICATOR, required=True),
    TagDefinition(emv.POINT_OF_INITIATION_METHOD, FieldKind.POINT_OF_INITIATION_METHOD, required=False),
    TagDefinition(emv.UNIONPAY_MERCHANT_ACCOUNT, FieldKind.UNIONPAY_MERCHANT, required=False),
    TagDefinition(
        emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, FieldKind.MERCHANT_ACCOUNT, required=True, has_subtags=True
    ),
    TagDefinition(emv.MERCHANT_CATEGORY_CODE, FieldKind.MERCHANT_CATEGORY_CODE, required=True),
    TagDefinition(emv.TRANSACTION_CURRENCY, FieldKind.TRANSACTION_CURRENCY, required=True),
    TagDefinition(emv.TRANSACTION_AMOUNT, FieldKind.TRANSACTION_AMOUNT, required=False),
    TagDefinition(emv.COUNTRY_CODE, FieldKind.COUNTRY_CODE, required=True),
    TagDefinition(emv.MERCHANT_NAME, FieldKind.MERCHANT_NAME, required=True),
    TagDefinition(emv.MERCHANT_CITY, FieldKind.MERCHANT_CITY, required=True),
    TagDefinition(emv.ADDITIONAL_DATA_TAG, FieldKind.ADDITIONAL_DATA, required=False, has_subtags=True),
    TagDefinition(
        emv.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE, FieldKind.LANGUAGE_TEMPLATE, required=False, has_subtags=True
    ),
    TagDefinition(emv.TIMESTAMP_TAG, FieldKind.TIMESTAMP, required=False),
    TagDefinition(emv.CRC, FieldKind.CRC, required=True),
)

TAGS_BY_CODE: Mapping[str, TagDefinition] = MappingProxyType({d.tag: d for d in KHQR_TAGS})
REQUIRED_TAGS: tuple[str, ...] = tuple(d.tag for d in KHQR_TAGS if d.required)

KHQR_SUBTAGS: tuple[SubtagDefinition, ...] = (
    SubtagDefinition(emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, emv.BAKONG_ACCOUNT_IDENTIFIER, "bakong_account_id"),
    SubtagDefinition(
        emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, emv.INDIVIDUAL_ACCOUNT_INFORMATION, "account_information"
    ),
    SubtagDefinition(
        emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, emv.MERCHANT_ACCOUNT_INFORMATION_ACQUIRING_BANK, "acquiring_bank"
    ),
    SubtagDefinition(emv.ADDITIONAL_DATA_TAG, emv.BILLNUMBER_TAG, "bill_number"),
    SubtagDefinition(emv.ADDITIONAL_DATA_TAG, emv.ADDITIONAL_DATA_FIELD_MOBILE_NUMBER, "mobile_number"),
    SubtagDefinition(emv.ADDITIONAL_DATA_TAG, emv.STORELABEL_TAG, "store_label"),
    SubtagDefinition(emv.ADDITIONAL_DATA_TAG, emv.TERMINAL_TAG, "terminal_label"),
    SubtagDefinition(emv.ADDITIONAL_DATA_TAG, emv.PURPOSE_OF_TRANSACTION, "purpose_of_transaction"),
    SubtagDefinition(emv.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE, emv.LANGUAGE_PREFERENCE, "language_preference"),
    SubtagDefinition(
        emv.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE,
        emv.MERCHANT_NAME_ALTERNATE_LANGUAGE,
        "merchant_name_alternate_language",
    ),
    SubtagDefinition(
        emv.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE,
        emv.MERCHANT_CITY_ALTERNATE_LANGUAGE,
        "merchant_city_alternate_language",
    ),
)

# Subtag 01 of the merchant variant (tag 30) carries the merchant id.
MERCHANT_RELABEL: Mapping[str, str] = MappingProxyType({"account_information": "merchant_id"})

SUBTAG_SKELETONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL: (
            "bakong_account_id",
            "account_information",
            "merchant_id",
            "acquiring_bank",
        ),
        emv.ADDITIONAL_DATA_TAG: (
            "bill_number",
            "mobile_number",
            "store_label",
            "terminal_label",
            "purpose_of_transaction",
        ),
        emv.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE: (
            "language_preference",
            "merchant_name_alternate_language",
            "merchant_city_alternate_language",
        ),
    }
)


def subtag_names(parent_tag: str, merchant_type: MerchantType | None = None) -> dict[str, str]:
    """Return ``subtag code -> field name`` for a composite tag."""

    names = {d.subtag: d.name for d in KHQR_SUBTAGS if d.parent_tag == parent_tag}
    if merchant_type is MerchantType.MERCHANT:
        names = {code: MERCHANT_RELABEL.get(name, name) for code, name in names.items()}
    return names


def subtag_codes(parent_tag: str, merchant_type: MerchantType | None = None) -> dict[str, str]:
    """Return ``field name -> subtag code`` in wire order."""

    return {name: code for code, name in subtag_names(parent_tag, merchant_type).items()}


def field_skeleton() -> dict[str, str | None]:
    """Every known output key, set to ``None``."""

    skeleton: dict[str, str | None] = {"merchant_type": None}
    for definition in KHQR_TAGS:
        if definition.has_subtags:
            for name in SUBTAG_SKELETONS[definition.tag]:
                skeleton[name] = None
        else:
            skeleton[definition.field_name] = None
    return skeleton


def normalize_tag(tag: str) -> tuple[str, MerchantType | None]:
    """Fold the two merchant-account wire variants onto tag 29."""

    if tag == emv.MERCHANT_ACCOUNT_INFORMATION_MERCHANT:
        return emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, MerchantType.MERCHANT
    if tag == emv.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL:
        return tag, MerchantType.INDIVIDUAL
    return tag, None
