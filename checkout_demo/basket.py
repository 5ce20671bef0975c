from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from checkout_demo.currency import CurrencyConverter
from checkout_demo.engine import RuleEngine
from checkout_demo.errors import InvalidLifecycleTransition
from checkout_demo.ledger import StockLedger
from checkout_demo.models import Money, Product

logger = logging.getLogger(__name__)


class Basket:
    """
    Корзина: упорядоченный список позиций в порядке сканирования.

    Если передан ledger и session_id, каждая добавленная позиция держит одну
    единицу товара в резерве под этой сессией. Без ledger корзина просто считает цену.
    Цена считается по группам одинаковых кодов, порядок позиций на неё не влияет.
    """

    def __init__(
        self,
        rule_engine: Optional[RuleEngine] = None,
        ledger: Optional[StockLedger] = None,
        session_id: Optional[str] = None,
        currency_converter: Optional[CurrencyConverter] = None,
        base_currency: str = "GBP",
    ):
        self.rule_engine = rule_engine
        self.ledger = ledger
        self.session_id = session_id
        self.currency_converter = currency_converter
        self.base_currency = base_currency

        self._items: List[Product] = []
        self._closed = False

    @property
    def items(self) -> Tuple[Product, ...]:
        return tuple(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def add(self, item: Product) -> None:
        self._ensure_open("add")
        if self._tracks_stock():
            self.ledger.reserve_or_raise(item.code, 1, self.session_id)
        self._items.append(item)

    def remove(self, item: Product) -> bool:
        self._ensure_open("remove")
        try:
            self._items.remove(item)
        except ValueError:
            return False
        if self._tracks_stock():
            self.ledger.release(item.code, 1, self.session_id)
        return True

    def grouped_items(self) -> Dict[str, List[Product]]:
        grouped: Dict[str, List[Product]] = {}
        for item in self._items:
            grouped.setdefault(item.code, []).append(item)
        return grouped

    def subtotal(self) -> Money:
        total = Money.zero(self.base_currency)
        for item in self._items:
            total = total.add(self._in_base_currency(item.price))
        return total

    def discount(self) -> Money:
        if self.rule_engine is None or not self._items:
            return Money.zero(self.base_currency)
        return Money(self.rule_engine.apply_rules(self._grouped_in_base_currency()), self.base_currency)

    def total(self) -> Money:
        if not self._items:
            return Money.zero(self.base_currency)

        total = self.subtotal().subtract(self.discount())
        # скидка из неверно настроенного правила не должна уводить итог в минус
        if total.amount < Decimal("0"):
            return Money.zero(self.base_currency)
        return total.rounded()

    def __len__(self) -> int:
        return len(self._items)

    def _tracks_stock(self) -> bool:
        return self.ledger is not None and self.session_id is not None

    def _grouped_in_base_currency(self) -> Dict[str, List[Product]]:
        # правила считают скидку от цены позиции, поэтому цены заранее приводим к базовой валюте
        grouped: Dict[str, List[Product]] = {}
        for code, items in self.grouped_items().items():
            grouped[code] = [replace(item, price=self._in_base_currency(item.price)) for item in items]
        return grouped

    def _in_base_currency(self, price: Money) -> Money:
        if price.currency == self.base_currency or self.currency_converter is None:
            return price
        return self.currency_converter.convert(price, self.base_currency)

    def _ensure_open(self, op: str) -> None:
        if self._closed:
            raise InvalidLifecycleTransition(op, "finalized")
