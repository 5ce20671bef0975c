from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from checkout_demo.errors import UnsupportedCurrency
from checkout_demo.models import Money, Number, to_decimal

DEFAULT_RATES: Dict[str, Dict[str, str]] = {
    "GBP": {"USD": "1.25", "EUR": "1.15"},
    "USD": {"GBP": "0.80", "EUR": "0.92"},
    "EUR": {"GBP": "0.87", "USD": "1.09"},
}

ONE = Decimal("1")


class CurrencyConverter:
    """Static rate table. Missing inverse rates are derived as ``1 / rate``."""

    def __init__(self, rates: Optional[Mapping[str, Mapping[str, Number]]] = None):
        source = DEFAULT_RATES if rates is None else rates
        self._rates: Dict[str, Dict[str, Decimal]] = {
            src: {dst: to_decimal(rate) for dst, rate in table.items()} for src, table in source.items()
        }
        self._fill_inverse_rates()

    def convert(self, money: Money, target_currency: str) -> Money:
        if money.currency == target_currency:
            return money
        rate = self.get_rate(money.currency, target_currency)
        return Money(money.amount * rate, target_currency)

    def get_rate(self, from_currency: str, to_currency: str) -> Decimal:
        if from_currency == to_currency:
            return ONE
        if from_currency not in self._rates:
            raise UnsupportedCurrency(from_currency, f"Unsupported source currency: {from_currency}")
        if to_currency not in self._rates[from_currency]:
            raise UnsupportedCurrency(to_currency, f"No exchange rate available from {from_currency} to {to_currency}")
        return self._rates[from_currency][to_currency]

    def supported_currencies(self) -> List[str]:
        return sorted(self._rates)

    def update_rates(self, new_rates: Mapping[str, Mapping[str, Number]]) -> None:
        for src, table in new_rates.items():
            for dst, rate in table.items():
                value = to_decimal(rate)
                if value <= 0:
                    raise ValueError(f"Rate {src}->{dst} must be positive, got {rate}")
                self._rates.setdefault(src, {})[dst] = value
                self._rates.setdefault(dst, {})[src] = ONE / value
                self._rates[src][src] = ONE
                self._rates[dst][dst] = ONE

    def _fill_inverse_rates(self) -> None:
        for src, table in list(self._rates.items()):
            for dst, rate in list(table.items()):
                self._rates.setdefault(dst, {}).setdefault(src, ONE / rate)
        for currency, table in self._rates.items():
            table[currency] = ONE
