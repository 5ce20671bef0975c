"""Tests for Money and CurrencyConverter."""
from decimal import Decimal

import pytest

from checkout_demo.currency import CurrencyConverter
from checkout_demo.errors import UnsupportedCurrency
from checkout_demo.models import Money


def test_money_coerces_floats_exactly():
    assert Money(3.11).amount == Decimal("3.11")


def test_money_arithmetic():
    a, b = Money("5.00"), Money("1.25")

    assert a.add(b) == Money("6.25")
    assert a.subtract(b) == Money("3.75")
    assert b.multiply(3) == Money("3.75")
    assert b < a and a > b


def test_money_rejects_mixed_currencies():
    with pytest.raises(ValueError, match="different currencies"):
        Money("1", "GBP").add(Money("1", "USD"))


def test_money_str_uses_symbol():
    assert str(Money("3.1")) == "£3.10"
    assert str(Money("2.005", "USD")) == "$2.01"
    assert str(Money("1", "JPY")) == "JPY1.00"


def test_default_rates(converter):
    assert converter.get_rate("GBP", "USD") == Decimal("1.25")
    assert converter.get_rate("EUR", "EUR") == Decimal("1")
    assert converter.supported_currencies() == ["EUR", "GBP", "USD"]


def test_convert_same_currency_returns_input(converter):
    money = Money("3.11")
    assert converter.convert(money, "GBP") is money


def test_unsupported_currencies(converter):
    with pytest.raises(UnsupportedCurrency) as exc_info:
        converter.get_rate("XXX", "GBP")
    assert exc_info.value.code == "XXX"

    with pytest.raises(UnsupportedCurrency):
        converter.convert(Money("1"), "XXX")


def test_inverse_rates_are_filled():
    converter = CurrencyConverter(rates={"GBP": {"CHF": "1.10"}})

    assert converter.get_rate("CHF", "GBP") == Decimal("1") / Decimal("1.10")
    assert converter.get_rate("CHF", "CHF") == Decimal("1")


def test_update_rates_sets_both_directions(converter):
    converter.update_rates({"GBP": {"JPY": 190}})

    assert converter.get_rate("GBP", "JPY") == Decimal("190")
    assert converter.get_rate("JPY", "GBP") == Decimal("1") / Decimal("190")

    with pytest.raises(ValueError):
        converter.update_rates({"GBP": {"JPY": 0}})


def test_round_trip_precision(converter):
    usd = converter.convert(Money("3.11"), "USD")
    back = converter.convert(usd, "GBP")

    assert float(back.amount) == pytest.approx(3.11, abs=0.01)
