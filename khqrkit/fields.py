"""Per-field validators for KHQR tags.

Every tag kind owns one validator ``(tag, value) -> Checked``. The same
function runs when a payload is built and when a scanned payload is decoded
in strict mode, so both directions enforce identical rules. Validators never
raise; callers decide whether to ``unwrap()`` the result.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Mapping

from . import emv
from .emv import Currency, MerchantType
from .errors import KHQRError, MalformedTlv, err_field_invalid, err_required_missing
from .registry import FieldKind, normalize_tag, subtag_codes, subtag_names
from .tlv import TLVItem, byte_length, build_tlv, fits_length, iter_segments


@dataclass(frozen=True, slots=True)
class Checked:
    """Outcome of a validation: a normalized value or the error that rejected it."""

    value: Any = None
    error: KHQRError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


def _ok(value: Any) -> Checked:
    return Checked(value=value)


def _invalid(tag: str, reason: str) -> Checked:
    return Checked(error=err_field_invalid(tag, reason))


def _missing(tag: str, label: str) -> Checked:
    return Checked(error=err_required_missing(tag, f"{label} cannot be null or empty"))


def is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


_TWO_DIGITS = re.compile(r"^\d{2}$")
_MCC = re.compile(r"^\d{4}$")
_AMOUNT = re.compile(r"^\d+(\.\d{1,2})?$")
_COUNTRY = re.compile(r"^[A-Za-z]{2,3}$")
_HEX4 = re.compile(r"^[0-9A-Fa-f]{4}$")
_BAKONG_ID = re.compile(r"^[^@\s]+@[^@\s]+$")


def _text(tag: str, value: Any, *, label: str, limit: int, required: bool) -> Checked:
    if is_blank(value):
        return _missing(tag, label) if required else _ok(None)
    text = str(value)
    if byte_length(text) > limit:
        return _invalid(tag, f"{label} must be at most {limit} bytes")
    return _ok(text)


def check_payload_format_indicator(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _missing(tag, "Payload format indicator")
    if not _TWO_DIGITS.match(str(value)):
        return _invalid(tag, "Payload format indicator must be two digits")
    return _ok(str(value))


def check_point_of_initiation_method(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _ok(None)
    if str(value) not in (emv.STATIC_QR, emv.DYNAMIC_QR):
        return _invalid(tag, "Point of initiation method must be 11 or 12")
    return _ok(str(value))


def check_unionpay_merchant(tag: str, value: Any) -> Checked:
    return _text(tag, value, label="UnionPay merchant account", limit=emv.INVALID_LENGTH_UPI_MERCHANT, required=False)


def check_merchant_account(tag: str, value: Any) -> Checked:
    data: Mapping[str, Any] = value or {}
    _, merchant_type = normalize_tag(tag)

    account = _text(
        tag,
        data.get("bakong_account_id"),
        label="Bakong account ID",
        limit=emv.INVALID_LENGTH_BAKONG_ACCOUNT,
        required=True,
    )
    if not account.ok:
        return account
    if not _BAKONG_ID.match(account.value):
        return _invalid(tag, "Bakong account ID must look like name@bank")

    if merchant_type is MerchantType.MERCHANT:
        merchant_id = _text(
            tag, data.get("merchant_id"), label="Merchant ID", limit=emv.INVALID_LENGTH_MERCHANT_ID, required=True
        )
        bank = _text(
            tag,
            data.get("acquiring_bank"),
            label="Acquiring bank",
            limit=emv.INVALID_LENGTH_ACQUIRING_BANK,
            required=True,
        )
        for result in (merchant_id, bank):
            if not result.ok:
                return result
        return _ok({"bakong_account_id": account.value, "merchant_id": merchant_id.value, "acquiring_bank": bank.value})

    info = _text(
        tag,
        data.get("account_information"),
        label="Account information",
        limit=emv.INVALID_LENGTH_ACCOUNT_INFORMATION,
        required=False,
    )
    bank = _text(
        tag, data.get("acquiring_bank"), label="Acquiring bank", limit=emv.INVALID_LENGTH_ACQUIRING_BANK, required=False
    )
    for result in (info, bank):
        if not result.ok:
            return result
    return _ok({"bakong_account_id": account.value, "account_information": info.value, "acquiring_bank": bank.value})


def check_merchant_category_code(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _missing(tag, "Merchant category code")
    if not _MCC.match(str(value)):
        return _invalid(tag, "Merchant category code must be 4 digits")
    return _ok(str(value))


def check_transaction_currency(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _missing(tag, "Transaction currency")
    text = str(value)
    if len(text) > emv.INVALID_LENGTH_CURRENCY:
        return _invalid(tag, "Transaction currency must be a 3 digit code")
    if text not in emv.SUPPORTED_CURRENCIES:
        return _invalid(tag, f"Unsupported currency {text}")
    return _ok(text)


def check_transaction_amount(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _ok(None)
    text = str(value)
    if len(text) > emv.INVALID_LENGTH_AMOUNT:
        return _invalid(tag, f"Transaction amount must be at most {emv.INVALID_LENGTH_AMOUNT} characters")
    if not _AMOUNT.match(text):
        return _invalid(tag, "Transaction amount must be a positive number with at most 2 decimals")
    return _ok(text)


def check_country_code(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _missing(tag, "Country code")
    if not _COUNTRY.match(str(value)):
        return _invalid(tag, "Country code must be 2 or 3 letters")
    return _ok(str(value))


def check_merchant_name(tag: str, value: Any) -> Checked:
    return _text(tag, value, label="Merchant name", limit=emv.INVALID_LENGTH_MERCHANT_NAME, required=True)


def check_merchant_city(tag: str, value: Any) -> Checked:
    return _text(tag, value, label="Merchant city", limit=emv.INVALID_LENGTH_MERCHANT_CITY, required=True)


_ADDITIONAL_LIMITS = (
    ("bill_number", "Bill number", emv.INVALID_LENGTH_BILL_NUMBER),
    ("mobile_number", "Mobile number", emv.INVALID_LENGTH_MOBILE_NUMBER),
    ("store_label", "Store label", emv.INVALID_LENGTH_STORE_LABEL),
    ("terminal_label", "Terminal label", emv.INVALID_LENGTH_TERMINAL_LABEL),
    ("purpose_of_transaction", "Purpose of transaction", emv.INVALID_LENGTH_PURPOSE_OF_TRANSACTION),
)

_LANGUAGE_LIMITS = (
    ("language_preference", "Language preference", emv.INVALID_LENGTH_LANGUAGE_PREFERENCE),
    ("merchant_name_alternate_language", "Merchant name alternate language", emv.INVALID_LENGTH_MERCHANT_NAME_ALTERNATE_LANGUAGE),
    ("merchant_city_alternate_language", "Merchant city alternate language", emv.INVALID_LENGTH_MERCHANT_CITY_ALTERNATE_LANGUAGE),
)


def _check_optional_group(tag: str, value: Any, limits: tuple[tuple[str, str, int], ...]) -> Checked:
    data: Mapping[str, Any] = value or {}
    normalized: dict[str, str | None] = {}
    for name, label, limit in limits:
        result = _text(tag, data.get(name), label=label, limit=limit, required=False)
        if not result.ok:
            return result
        normalized[name] = result.value
    return _ok(normalized)


def check_additional_data(tag: str, value: Any) -> Checked:
    return _check_optional_group(tag, value, _ADDITIONAL_LIMITS)


def check_language_template(tag: str, value: Any) -> Checked:
    result = _check_optional_group(tag, value, _LANGUAGE_LIMITS)
    if not result.ok:
        return result
    data = result.value
    if data["language_preference"] and not data["merchant_name_alternate_language"]:
        return _invalid(tag, "Merchant name alternate language is required with a language preference")
    if data["merchant_name_alternate_language"] and not data["language_preference"]:
        return _invalid(tag, "Language preference is required with an alternate merchant name")
    return result


def check_timestamp(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _ok(None)
    text = str(value)
    nested = _nested_items(tag, text)
    if not nested.ok:
        return nested
    for item in nested.value:
        if item.tag == emv.TIMESTAMP_MILLISECONDS and not item.value.isdigit():
            return _invalid(tag, "Timestamp must be epoch milliseconds")
    return _ok(text)


def check_crc(tag: str, value: Any) -> Checked:
    if is_blank(value):
        return _missing(tag, "CRC")
    if not _HEX4.match(str(value)):
        return _invalid(tag, "CRC must be 4 hexadecimal digits")
    return _ok(str(value).upper())


VALIDATORS: Mapping[FieldKind, Callable[[str, Any], Checked]] = MappingProxyType(
    {
        FieldKind.PAYLOAD_FORMAT_INDICATOR: check_payload_format_indicator,
        FieldKind.POINT_OF_INITIATION_METHOD: check_point_of_initiation_method,
        FieldKind.UNIONPAY_MERCHANT: check_unionpay_merchant,
        FieldKind.MERCHANT_ACCOUNT: check_merchant_account,
        FieldKind.MERCHANT_CATEGORY_CODE: check_merchant_category_code,
        FieldKind.TRANSACTION_CURRENCY: check_transaction_currency,
        FieldKind.TRANSACTION_AMOUNT: check_transaction_amount,
        FieldKind.COUNTRY_CODE: check_country_code,
        FieldKind.MERCHANT_NAME: check_merchant_name,
        FieldKind.MERCHANT_CITY: check_merchant_city,
        FieldKind.ADDITIONAL_DATA: check_additional_data,
        FieldKind.LANGUAGE_TEMPLATE: check_language_template,
        FieldKind.TIMESTAMP: check_timestamp,
        FieldKind.CRC: check_crc,
    }
)

if set(VALIDATORS) != set(FieldKind):
    raise RuntimeError(f"Missing validators for {sorted(set(FieldKind) - set(VALIDATORS))}")


def validate_field(tag: str, kind: FieldKind, value: Any) -> Checked:
    return VALIDATORS[kind](tag, value)


def serialize_field(tag: str, kind: FieldKind, value: Any) -> Checked:
    """Validate ``value`` and render the ``tag + length + value`` fragment."""

    result = validate_field(tag, kind, value)
    if not result.ok:
        return result
    normalized = result.value
    if isinstance(normalized, dict):
        parent, merchant_type = normalize_tag(tag)
        codes = subtag_codes(parent, merchant_type)
        normalized = build_tlv(
            TLVItem(tag=codes[name], value=sub_value)
            for name, sub_value in normalized.items()
            if not is_blank(sub_value)
        )
    if normalized is None:
        return _ok("")
    if not fits_length(normalized):
        return _invalid(tag, f"Field value exceeds {emv.MAX_VALUE_LENGTH} bytes")
    return _ok(TLVItem(tag=tag, value=normalized).serialize())


def _nested_items(tag: str, value: str) -> Checked:
    items: list[TLVItem] = []
    try:
        for item in iter_segments(value):
            items.append(item)
    except MalformedTlv as exc:
        return Checked(value=items, error=err_field_invalid(tag, f"Nested TLV is malformed: {exc.message}"))
    return _ok(items)


def parse_composite(tag: str, value: str, merchant_type: MerchantType | None = None) -> Checked:
    """Map the nested TLV of a composite tag onto field names.

    On a malformed nested stream the error is set and ``value`` still holds
    the fields parsed before the fault, which lenient decoding keeps.
    """

    names = subtag_names(tag, merchant_type)
    nested = _nested_items(tag, value)
    fields = {names[item.tag]: item.value for item in nested.value if item.tag in names}
    return Checked(value=fields, error=nested.error)


def _amount_precision(tag: str, amount: Decimal, currency: str | None) -> Checked:
    """Currency-dependent precision: KHR is whole, others allow two decimals."""

    if amount == amount.to_integral_value():
        return _ok(amount)
    if currency == Currency.KHR.value:
        return _invalid(tag, "KHR amount must be a whole number")
    if amount.normalize().as_tuple().exponent < -2:
        return _invalid(tag, "Transaction amount allows at most 2 decimal places")
    return _ok(amount)


def check_amount_for_currency(tag: str, amount: Any, currency: Any) -> Checked:
    """Cross-field check of an observed tag 54 value against tag 53."""

    if is_blank(amount):
        return _ok(None)
    shape = check_transaction_amount(tag, amount)
    if not shape.ok:
        return shape
    precision = _amount_precision(tag, Decimal(shape.value), None if is_blank(currency) else str(currency))
    if not precision.ok:
        return precision
    return shape


def format_amount(amount: Decimal | None, currency: str) -> Checked:
    """Render an amount the way KHQR expects for ``currency``.

    KHR amounts must be whole numbers. Other currencies allow two decimals and
    are written without decimals when the value is whole.
    """

    tag = emv.TRANSACTION_AMOUNT
    if amount is None or amount == 0:
        return _ok(None)
    if not amount.is_finite() or amount < 0:
        return _invalid(tag, "Transaction amount must be a positive number")
    precision = _amount_precision(tag, amount, currency)
    if not precision.ok:
        return precision
    if amount == amount.to_integral_value():
        text = str(int(amount))
    else:
        text = f"{amount:.2f}"
    return check_transaction_amount(tag, text)
