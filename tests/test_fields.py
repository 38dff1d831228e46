from decimal import Decimal

import pytest

from khqrkit.emv import MerchantType
from khqrkit.errors import FieldValidationError, RequiredFieldMissing
from khqrkit.fields import (
    VALIDATORS,
    Checked,
    check_amount_for_currency,
    check_crc,
    check_language_template,
    check_merchant_account,
    check_timestamp,
    check_transaction_amount,
    check_transaction_currency,
    format_amount,
    parse_composite,
    serialize_field,
    validate_field,
)
from khqrkit.registry import FieldKind


class TestChecked:
    def test_unwrap_ok(self):
        assert Checked(value="x").unwrap() == "x"

    def test_unwrap_raises_error(self):
        result = validate_field("59", FieldKind.MERCHANT_NAME, "x" * 26)
        assert not result.ok
        with pytest.raises(FieldValidationError) as exc_info:
            result.unwrap()
        assert exc_info.value.tag == "59"


class TestSimpleValidators:
    def test_all_kinds_have_validators(self):
        assert set(VALIDATORS) == set(FieldKind)

    def test_merchant_name_required(self):
        result = validate_field("59", FieldKind.MERCHANT_NAME, "  ")
        assert isinstance(result.error, RequiredFieldMissing)

    def test_merchant_city_byte_limit(self):
        # 5 Khmer code points = 15 bytes fits, 6 does not
        assert validate_field("60", FieldKind.MERCHANT_CITY, "ភ្នំពេ").ok is False
        assert validate_field("60", FieldKind.MERCHANT_CITY, "ភ្នំព").ok

    def test_currency_supported(self):
        assert check_transaction_currency("53", "116").value == "116"
        assert check_transaction_currency("53", "840").value == "840"

    def test_currency_unsupported(self):
        result = check_transaction_currency("53", "764")
        assert isinstance(result.error, FieldValidationError)
        assert "Unsupported" in result.error.message

    def test_amount_format(self):
        assert check_transaction_amount("54", "1000").ok
        assert check_transaction_amount("54", "1.50").ok
        assert not check_transaction_amount("54", "-1").ok
        assert not check_transaction_amount("54", "1.234").ok
        assert not check_transaction_amount("54", "12345678901234").ok

    def test_merchant_category_code(self):
        assert validate_field("52", FieldKind.MERCHANT_CATEGORY_CODE, "5999").ok
        assert not validate_field("52", FieldKind.MERCHANT_CATEGORY_CODE, "59a9").ok

    def test_point_of_initiation(self):
        assert validate_field("01", FieldKind.POINT_OF_INITIATION_METHOD, "11").ok
        assert not validate_field("01", FieldKind.POINT_OF_INITIATION_METHOD, "13").ok

    def test_crc_normalized_upper(self):
        assert check_crc("63", "a1b2").value == "A1B2"
        assert not check_crc("63", "a1b").ok

    def test_timestamp(self):
        assert check_timestamp("99", "00131704067200000").ok
        assert not check_timestamp("99", "0013170406720000x").ok
        assert not check_timestamp("99", "0020123").ok


class TestMerchantAccount:
    def test_individual(self):
        result = check_merchant_account("29", {"bakong_account_id": "somchai_t@trmb"})
        assert result.value == {
            "bakong_account_id": "somchai_t@trmb",
            "account_information": None,
            "acquiring_bank": None,
        }

    def test_account_id_must_have_bank_part(self):
        result = check_merchant_account("29", {"bakong_account_id": "somchai"})
        assert isinstance(result.error, FieldValidationError)

    def test_account_id_length(self):
        result = check_merchant_account("29", {"bakong_account_id": "a" * 30 + "@bank"})
        assert not result.ok

    def test_merchant_requires_merchant_id(self):
        result = check_merchant_account("30", {"bakong_account_id": "shop@aclb", "acquiring_bank": "ACLEDA"})
        assert isinstance(result.error, RequiredFieldMissing)
        assert result.error.tag == "30"

    def test_merchant_requires_bank(self):
        result = check_merchant_account("30", {"bakong_account_id": "shop@aclb", "merchant_id": "1"})
        assert isinstance(result.error, RequiredFieldMissing)


class TestLanguageTemplate:
    def test_valid(self):
        result = check_language_template(
            "64", {"language_preference": "km", "merchant_name_alternate_language": "សុខា"}
        )
        assert result.ok

    def test_preference_needs_name(self):
        assert not check_language_template("64", {"language_preference": "km"}).ok

    def test_name_needs_preference(self):
        assert not check_language_template("64", {"merchant_name_alternate_language": "សុខា"}).ok

    def test_preference_length(self):
        result = check_language_template(
            "64", {"language_preference": "khm", "merchant_name_alternate_language": "x"}
        )
        assert not result.ok


class TestSerializeField:
    def test_simple(self):
        assert serialize_field("59", FieldKind.MERCHANT_NAME, "Somchai T").unwrap() == "5909Somchai T"

    def test_individual_account(self):
        fragment = serialize_field(
            "29", FieldKind.MERCHANT_ACCOUNT, {"bakong_account_id": "a@b", "acquiring_bank": "Bank"}
        ).unwrap()
        assert fragment == "29150003a@b0204Bank"

    def test_merchant_account_uses_merchant_id_subtag(self):
        fragment = serialize_field(
            "30",
            FieldKind.MERCHANT_ACCOUNT,
            {"bakong_account_id": "a@b", "merchant_id": "M1", "acquiring_bank": "Bank"},
        ).unwrap()
        assert fragment == "30210003a@b0102M10204Bank"

    def test_additional_data_skips_blank(self):
        fragment = serialize_field("62", FieldKind.ADDITIONAL_DATA, {"store_label": "Shop", "bill_number": ""}).unwrap()
        assert fragment == "62080304Shop"

    def test_invalid_returns_error(self):
        result = serialize_field("53", FieldKind.TRANSACTION_CURRENCY, "999")
        assert not result.ok


class TestParseComposite:
    def test_individual(self):
        result = parse_composite("29", "0003a@b0104info")
        assert result.value == {"bakong_account_id": "a@b", "account_information": "info"}

    def test_merchant_relabel(self):
        result = parse_composite("29", "0003a@b0102M1", MerchantType.MERCHANT)
        assert result.value == {"bakong_account_id": "a@b", "merchant_id": "M1"}

    def test_unknown_subtags_ignored(self):
        result = parse_composite("62", "0304Shop0902xx")
        assert result.value == {"store_label": "Shop"}

    def test_malformed_keeps_prefix(self):
        result = parse_composite("62", "0304Shop0150x")
        assert not result.ok
        assert result.value == {"store_label": "Shop"}


class TestFormatAmount:
    def test_none_and_zero(self):
        assert format_amount(None, "116").value is None
        assert format_amount(Decimal("0"), "840").value is None

    def test_khr_integer(self):
        assert format_amount(Decimal("1000"), "116").value == "1000"
        assert format_amount(Decimal("1000.00"), "116").value == "1000"

    def test_khr_fraction_rejected(self):
        result = format_amount(Decimal("100.5"), "116")
        assert isinstance(result.error, FieldValidationError)
        assert result.error.tag == "54"

    def test_usd_whole(self):
        assert format_amount(Decimal("10"), "840").value == "10"
        assert format_amount(Decimal("10.00"), "840").value == "10"

    def test_usd_two_decimals(self):
        assert format_amount(Decimal("1.5"), "840").value == "1.50"
        assert format_amount(Decimal("0.01"), "840").value == "0.01"

    def test_usd_excess_precision(self):
        assert not format_amount(Decimal("1.234"), "840").ok

    def test_negative(self):
        assert not format_amount(Decimal("-1"), "116").ok


class TestAmountForCurrency:
    def test_khr_must_be_whole(self):
        result = check_amount_for_currency("54", "1.50", "116")
        assert isinstance(result.error, FieldValidationError)
        assert result.error.tag == "54"

    def test_khr_whole(self):
        assert check_amount_for_currency("54", "1000", "116").value == "1000"

    def test_usd_two_decimals(self):
        assert check_amount_for_currency("54", "1.50", "840").value == "1.50"

    def test_missing_amount(self):
        assert check_amount_for_currency("54", None, "116").value is None

    def test_bad_shape(self):
        assert not check_amount_for_currency("54", "1.234", "840").ok
