"""KHQR wire constants (EMVCo merchant-presented mode, Bakong profile)."""
from __future__ import annotations

import enum
from typing import Final

PAYLOAD_FORMAT_INDICATOR: Final = "00"
DEFAULT_PAYLOAD_FORMAT_INDICATOR: Final = "01"

POINT_OF_INITIATION_METHOD: Final = "01"
STATIC_QR: Final = "11"
DYNAMIC_QR: Final = "12"

UNIONPAY_MERCHANT_ACCOUNT: Final = "15"

MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL: Final = "29"
MERCHANT_ACCOUNT_INFORMATION_MERCHANT: Final = "30"

# Subtags of 29 / 30
BAKONG_ACCOUNT_IDENTIFIER: Final = "00"
MERCHANT_ACCOUNT_INFORMATION_MERCHANT_ID: Final = "01"
INDIVIDUAL_ACCOUNT_INFORMATION: Final = "01"
MERCHANT_ACCOUNT_INFORMATION_ACQUIRING_BANK: Final = "02"

MERCHANT_CATEGORY_CODE: Final = "52"
DEFAULT_MERCHANT_CATEGORY_CODE: Final = "5999"

TRANSACTION_CURRENCY: Final = "53"
TRANSACTION_AMOUNT: Final = "54"

COUNTRY_CODE: Final = "58"
DEFAULT_COUNTRY_CODE: Final = "KH"

MERCHANT_NAME: Final = "59"
MERCHANT_CITY: Final = "60"
DEFAULT_MERCHANT_CITY: Final = "Phnom Penh"

ADDITIONAL_DATA_TAG: Final = "62"
BILLNUMBER_TAG: Final = "01"
ADDITIONAL_DATA_FIELD_MOBILE_NUMBER: Final = "02"
STORELABEL_TAG: Final = "03"
TERMINAL_TAG: Final = "07"
PURPOSE_OF_TRANSACTION: Final = "08"

MERCHANT_INFORMATION_LANGUAGE_TEMPLATE: Final = "64"
LANGUAGE_PREFERENCE: Final = "00"
MERCHANT_NAME_ALTERNATE_LANGUAGE: Final = "01"
MERCHANT_CITY_ALTERNATE_LANGUAGE: Final = "02"

TIMESTAMP_TAG: Final = "99"
TIMESTAMP_MILLISECONDS: Final = "00"

CRC: Final = "63"
CRC_LENGTH: Final = "04"
CRC_PATTERN: Final = r"6304[0-9A-Fa-f]{4}$"

INVALID_LENGTH_KHQR: Final = 12
MAX_SEGMENTS: Final = 64
MAX_VALUE_LENGTH: Final = 99

# Byte-length limits per field
INVALID_LENGTH_BAKONG_ACCOUNT: Final = 32
INVALID_LENGTH_ACCOUNT_INFORMATION: Final = 32
INVALID_LENGTH_MERCHANT_ID: Final = 32
INVALID_LENGTH_ACQUIRING_BANK: Final = 32
INVALID_LENGTH_MERCHANT_NAME: Final = 25
INVALID_LENGTH_MERCHANT_CITY: Final = 15
INVALID_LENGTH_AMOUNT: Final = 13
INVALID_LENGTH_COUNTRY_CODE: Final = 3
INVALID_LENGTH_MERCHANT_CATEGORY_CODE: Final = 4
INVALID_LENGTH_CURRENCY: Final = 3
INVALID_LENGTH_BILL_NUMBER: Final = 25
INVALID_LENGTH_MOBILE_NUMBER: Final = 25
INVALID_LENGTH_STORE_LABEL: Final = 25
INVALID_LENGTH_TERMINAL_LABEL: Final = 25
INVALID_LENGTH_PURPOSE_OF_TRANSACTION: Final = 25
INVALID_LENGTH_LANGUAGE_PREFERENCE: Final = 2
INVALID_LENGTH_MERCHANT_NAME_ALTERNATE_LANGUAGE: Final = 25
INVALID_LENGTH_MERCHANT_CITY_ALTERNATE_LANGUAGE: Final = 15
INVALID_LENGTH_UPI_MERCHANT: Final = 99


class Currency(str, enum.Enum):
    KHR = "116"
    USD = "840"


class MerchantType(str, enum.Enum):
    INDIVIDUAL = "individual"
    MERCHANT = "merchant"


SUPPORTED_CURRENCIES: Final = frozenset(c.value for c in Currency)
