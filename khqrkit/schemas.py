"""Pydantic schemas for KHQR descriptions and API contracts."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .emv import DEFAULT_MERCHANT_CITY, Currency

# Accepted input spellings per field. The first spelling is the canonical name;
# resolution happens once when a description is validated.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "bakong_account_id": ("bakongAccountID", "account", "bakong_account", "merchant_account"),
    "merchant_name": ("merchantName", "name"),
    "merchant_city": ("merchantCity", "city"),
    "merchant_id": ("merchantID",),
    "acquiring_bank": ("acquiringBank", "bank"),
    "account_information": ("accountInformation",),
    "upi_merchant_account": ("upiMerchantAccount", "upi_account", "unionpay_account"),
    "amount": ("transaction_amount",),
    "currency": ("transaction_currency",),
    "bill_number": ("billNumber",),
    "mobile_number": ("mobileNumber",),
    "store_label": ("storeLabel",),
    "terminal_label": ("terminalLabel",),
    "purpose_of_transaction": ("purposeOfTransaction", "purpose"),
    "language_preference": ("languagePreference",),
    "merchant_name_alternate_language": ("merchantNameAlternateLanguage", "merchant_name_alt"),
    "merchant_city_alternate_language": ("merchantCityAlternateLanguage", "merchant_city_alt"),
}


def _aliased(name: str, **kwargs: Any) -> Any:
    return Field(validation_alias=AliasChoices(name, *FIELD_ALIASES.get(name, ())), **kwargs)


class KHQRInfo(BaseModel):
    """Fields shared by individual and merchant descriptions."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bakong_account_id: str = _aliased("bakong_account_id")
    merchant_name: str = _aliased("merchant_name")
    merchant_city: str = _aliased("merchant_city", default=DEFAULT_MERCHANT_CITY)
    acquiring_bank: str | None = _aliased("acquiring_bank", default=None)
    currency: str = _aliased("currency", default=Currency.KHR.value)
    amount: Decimal | None = _aliased("amount", default=None)
    upi_merchant_account: str | None = _aliased("upi_merchant_account", default=None)
    bill_number: str | None = _aliased("bill_number", default=None)
    mobile_number: str | None = _aliased("mobile_number", default=None)
    store_label: str | None = _aliased("store_label", default=None)
    terminal_label: str | None = _aliased("terminal_label", default=None)
    purpose_of_transaction: str | None = _aliased("purpose_of_transaction", default=None)
    language_preference: str | None = _aliased("language_preference", default=None)
    merchant_name_alternate_language: str | None = _aliased("merchant_name_alternate_language", default=None)
    merchant_city_alternate_language: str | None = _aliased("merchant_city_alternate_language", default=None)

    @field_validator("currency", mode="before")
    @classmethod
    def _currency_code(cls, value: Any) -> Any:
        """Accept ``KHR``/``USD`` names, enum members and numeric codes."""

        if isinstance(value, Currency):
            return value.value
        if isinstance(value, bool):
            raise ValueError("currency must be a code or a currency name, not a boolean")
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and value.strip().upper() in Currency.__members__:
            return Currency[value.strip().upper()].value
        return value

    def additional_data(self) -> dict[str, str | None]:
        return {
            "bill_number": self.bill_number,
            "mobile_number": self.mobile_number,
            "store_label": self.store_label,
            "terminal_label": self.terminal_label,
            "purpose_of_transaction": self.purpose_of_transaction,
        }

    def language_template(self) -> dict[str, str | None]:
        return {
            "language_preference": self.language_preference,
            "merchant_name_alternate_language": self.merchant_name_alternate_language,
            "merchant_city_alternate_language": self.merchant_city_alternate_language,
        }


class IndividualInfo(KHQRInfo):
    account_information: str | None = _aliased("account_information", default=None)

    def merchant_account(self) -> dict[str, str | None]:
        return {
            "bakong_account_id": self.bakong_account_id,
            "account_information": self.account_information,
            "acquiring_bank": self.acquiring_bank,
        }


class MerchantInfo(KHQRInfo):
    # Presence is enforced by the tag 30 validator so the error is KHQR-scoped.
    merchant_id: str | None = _aliased("merchant_id", default=None)

    def merchant_account(self) -> dict[str, str | None]:
        return {
            "bakong_account_id": self.bakong_account_id,
            "merchant_id": self.merchant_id,
            "acquiring_bank": self.acquiring_bank,
        }


# Opt-in flag that writes the store label into the payload's merchant name.
STORE_LABEL_AS_MERCHANT_KEYS: tuple[str, ...] = (
    "embedStoreLabelAsMerchant",
    "store_label_as_merchant",
    "embed_store_label_as_merchant",
)

_FALSY_FLAGS = frozenset({"", "0", "false", "no", "off"})


def _keys(name: str) -> tuple[str, ...]:
    return (name, *FIELD_ALIASES.get(name, ()))


def _first(data: Mapping[str, Any], name: str) -> Any:
    for key in _keys(name):
        value = data.get(key)
        if value is not None and str(value).strip() != "":
            return value
    return None


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_FLAGS
    return bool(value)


def _without(data: Mapping[str, Any], *names: str) -> dict[str, Any]:
    dropped = {key for name in names for key in _keys(name)}
    return {k: v for k, v in data.items() if k not in dropped}


def resolve_info(data: Mapping[str, Any]) -> IndividualInfo | MerchantInfo:
    """Build a typed description from a loosely keyed mapping.

    A merchant description is chosen when both a merchant id and an acquiring
    bank are present; anything else is an individual. Keys that only the other
    variant carries are dropped. When one of ``STORE_LABEL_AS_MERCHANT_KEYS``
    is truthy and a store label is given, the store label replaces the
    merchant name.
    """

    embed_store_label = any(_flag(data.get(key)) for key in STORE_LABEL_AS_MERCHANT_KEYS)
    payload = {k: v for k, v in data.items() if k not in STORE_LABEL_AS_MERCHANT_KEYS}

    store_label = _first(payload, "store_label")
    if embed_store_label and store_label is not None:
        payload = _without(payload, "merchant_name")
        payload["merchant_name"] = str(store_label)

    if _first(payload, "merchant_id") is not None and _first(payload, "acquiring_bank") is not None:
        return MerchantInfo.model_validate(_without(payload, "account_information"))
    return IndividualInfo.model_validate(_without(payload, "merchant_id"))


class GenerateKHQRResponse(BaseModel):
    payload: str
    md5: str
    crc: str
    qr_png_base64: str | None = None


class PayloadRequest(BaseModel):
    payload: str = Field(min_length=1, max_length=512)


class DecodeResponse(BaseModel):
    strict: bool
    fields: dict[str, str | None]


class VerifyResponse(BaseModel):
    valid: bool


class RenderRequest(BaseModel):
    payload: str = Field(min_length=1, max_length=512)
    display_name: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
