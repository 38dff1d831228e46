"""Shared fixtures: fixed clock and sample descriptions."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from khqrkit.schemas import IndividualInfo, MerchantInfo

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
FIXED_MILLIS = "1704067200000"


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def individual_info() -> IndividualInfo:
    return IndividualInfo(
        bakong_account_id="somchai_t@trmb",
        merchant_name="Somchai T",
        merchant_city="BANGKOK",
        currency="KHR",
        amount=1000,
    )


@pytest.fixture
def merchant_info() -> MerchantInfo:
    return MerchantInfo(
        bakong_account_id="coffee_shop@aclb",
        merchant_name="PCM Coffee",
        merchant_city="Phnom Penh",
        merchant_id="123456",
        acquiring_bank="ACLEDA Bank",
        currency="USD",
        amount="2.5",
        store_label="Riverside",
        bill_number="INV-001",
    )
