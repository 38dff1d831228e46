from decimal import Decimal

import pytest
from pydantic import ValidationError

from khqrkit.emv import Currency
from khqrkit.schemas import IndividualInfo, MerchantInfo, PayloadRequest, resolve_info


class TestResolveInfo:
    def test_camel_case_merchant(self):
        info = resolve_info(
            {
                "bakongAccountID": "shop@aclb",
                "merchantName": "Shop",
                "merchantCity": "Siem Reap",
                "merchantID": "M-1",
                "acquiringBank": "ACLEDA",
            }
        )
        assert isinstance(info, MerchantInfo)
        assert info.bakong_account_id == "shop@aclb"
        assert info.merchant_city == "Siem Reap"
        assert info.merchant_id == "M-1"
        assert info.acquiring_bank == "ACLEDA"

    def test_short_aliases(self):
        info = resolve_info({"account": "a@b", "name": "A", "city": "PP", "bank": "Dev"})
        assert isinstance(info, IndividualInfo)
        assert info.merchant_name == "A"
        assert info.acquiring_bank == "Dev"

    def test_merchant_id_without_bank_is_individual(self):
        info = resolve_info({"bakong_account_id": "a@b", "merchant_name": "A", "merchant_id": "M-1"})
        assert isinstance(info, IndividualInfo)

    def test_blank_bank_is_individual(self):
        info = resolve_info({"bakong_account_id": "a@b", "merchant_name": "A", "merchantID": "M-1", "bank": " "})
        assert isinstance(info, IndividualInfo)

    def test_additional_and_language_aliases(self):
        info = resolve_info(
            {
                "account": "a@b",
                "name": "A",
                "billNumber": "INV-1",
                "storeLabel": "Shop",
                "purpose": "Lunch",
                "languagePreference": "km",
                "merchant_name_alt": "សុខា",
            }
        )
        assert info.additional_data()["bill_number"] == "INV-1"
        assert info.additional_data()["purpose_of_transaction"] == "Lunch"
        assert info.language_template() == {
            "language_preference": "km",
            "merchant_name_alternate_language": "សុខា",
            "merchant_city_alternate_language": None,
        }

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            resolve_info({"account": "a@b", "name": "A", "colour": "red"})

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError):
            resolve_info({"account": "a@b"})


class TestCurrency:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("KHR", "116"),
            ("usd", "840"),
            (Currency.USD, "840"),
            (116, "116"),
            ("840", "840"),
        ],
    )
    def test_normalized_to_code(self, value, expected):
        info = IndividualInfo(bakong_account_id="a@b", merchant_name="A", currency=value)
        assert info.currency == expected

    def test_default_is_khr(self):
        assert IndividualInfo(bakong_account_id="a@b", merchant_name="A").currency == "116"

    def test_amount_alias_and_decimal(self):
        info = resolve_info({"account": "a@b", "name": "A", "transaction_amount": "1.5"})
        assert info.amount == Decimal("1.5")


class TestFrozen:
    def test_descriptions_are_immutable(self):
        info = IndividualInfo(bakong_account_id="a@b", merchant_name="A")
        with pytest.raises(ValidationError):
            info.merchant_name = "B"


class TestPayloadRequest:
    def test_empty_payload_rejected(self):
        with pytest.raises(ValidationError):
            PayloadRequest(payload="")


class TestResolveInfoVariants:
    def test_merchant_drops_account_information(self):
        info = resolve_info(
            {"account": "a@b", "name": "Shop", "merchantID": "M1", "bank": "Bank", "accountInformation": "x"}
        )
        assert isinstance(info, MerchantInfo)
        assert info.merchant_id == "M1"

    def test_individual_keeps_account_information(self):
        info = resolve_info({"account": "a@b", "name": "Shop", "accountInformation": "x"})
        assert isinstance(info, IndividualInfo)
        assert info.account_information == "x"


class TestStoreLabelAsMerchant:
    @pytest.mark.parametrize(
        "flag", ["embedStoreLabelAsMerchant", "store_label_as_merchant", "embed_store_label_as_merchant"]
    )
    def test_store_label_replaces_name(self, flag):
        info = resolve_info({"account": "a@b", "merchantName": "PCM Coffee", "storeLabel": "Riverside", flag: True})
        assert info.merchant_name == "Riverside"
        assert info.store_label == "Riverside"

    def test_disabled_flag(self):
        info = resolve_info(
            {"account": "a@b", "name": "PCM Coffee", "store_label": "Riverside", "store_label_as_merchant": "false"}
        )
        assert info.merchant_name == "PCM Coffee"

    def test_without_store_label(self):
        info = resolve_info({"account": "a@b", "name": "PCM Coffee", "store_label_as_merchant": True})
        assert info.merchant_name == "PCM Coffee"

    def test_name_optional_when_store_label_used(self):
        info = resolve_info({"account": "a@b", "storeLabel": "Riverside", "embedStoreLabelAsMerchant": 1})
        assert info.merchant_name == "Riverside"


class TestCurrencyBoolean:
    def test_boolean_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            IndividualInfo(bakong_account_id="a@b", merchant_name="A", currency=True)
        assert "boolean" in str(exc_info.value)
