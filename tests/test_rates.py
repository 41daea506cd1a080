from decimal import Decimal

import pytest

from fees.models import CommissionSetting, ListingType
from fees.rates import CommissionRateTable


@pytest.fixture
def table():
    return CommissionRateTable([
        CommissionSetting(ListingType.BUY_IT_NOW, Decimal("5.0")),
        CommissionSetting(ListingType.MAKE_OFFER, Decimal("4.0")),
        CommissionSetting(ListingType.CLASSIFIED, Decimal("3.0"), is_active=False),
    ])


def test_rate_for_known_types(table):
    assert table.rate_for("buy_it_now") == Decimal("5.0")
    assert table.rate_for(ListingType.MAKE_OFFER) == Decimal("4.0")


def test_inactive_setting_falls_back_to_default(table):
    assert table.rate_for("classified") == Decimal("5.0")
    assert table.is_default("classified")


@pytest.mark.parametrize("value", ["auction", "", None, 42, "BUY IT NOW!"])
def test_unknown_listing_type_uses_default(table, value):
    assert table.rate_for(value) == Decimal("5.0")
    assert table.is_default(value)


def test_listing_type_parse_is_lenient_on_case_and_separators():
    assert ListingType.parse(" Make-Offer ") is ListingType.MAKE_OFFER
    assert ListingType.parse("buy it now") is ListingType.BUY_IT_NOW
    assert ListingType.parse("auction") is None


def test_rates_are_deterministic_and_in_range(table):
    for lt in list(ListingType) + ["other"]:
        first = table.rate_for(lt)
        assert first == table.rate_for(lt)
        assert Decimal("0") <= first <= Decimal("100")


def test_duplicate_active_settings_keep_first():
    table = CommissionRateTable([
        CommissionSetting(ListingType.BUY_IT_NOW, Decimal("6.0")),
        CommissionSetting(ListingType.BUY_IT_NOW, Decimal("2.0")),
    ])
    assert table.rate_for("buy_it_now") == Decimal("6.0")


def test_active_settings_in_declaration_order(table):
    types = [s.listing_type for s in table.active_settings()]
    assert types == [ListingType.BUY_IT_NOW, ListingType.MAKE_OFFER]


def test_custom_default_rate():
    table = CommissionRateTable([], default_rate=Decimal("7.5"))
    assert table.rate_for("make_offer") == Decimal("7.5")
