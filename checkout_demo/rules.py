from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

from checkout_demo.models import Product, to_decimal

GroupedItems = Mapping[str, Sequence[Product]]

ZERO = Decimal("0")


class Rule(ABC):
    """Discount rule: a pure function of the grouped basket items."""

    product_code: str

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def applicable(self, grouped: GroupedItems) -> bool: ...

    @abstractmethod
    def apply(self, grouped: GroupedItems) -> Decimal: ...


def _group(grouped: GroupedItems, code: str) -> Sequence[Product]:
    return grouped.get(code) or ()


def _unit_price(items: Sequence[Product]) -> Decimal:
    # все позиции группы это один и тот же товар, значит и цена одна
    return items[0].price.amount


@dataclass(frozen=True, slots=True)
class QuantityDiscountRule(Rule):
    """Buy ``buy_quantity``, get ``free_quantity`` free, per complete set."""

    product_code: str
    buy_quantity: int
    free_quantity: int

    def __post_init__(self) -> None:
        if self.buy_quantity < 0 or self.free_quantity < 0 or self.buy_quantity + self.free_quantity <= 0:
            raise ValueError(f"Invalid set size for {self.product_code}: buy={self.buy_quantity} free={self.free_quantity}")

    def applicable(self, grouped: GroupedItems) -> bool:
        return len(_group(grouped, self.product_code)) > 0

    def apply(self, grouped: GroupedItems) -> Decimal:
        items = _group(grouped, self.product_code)
        set_size = self.buy_quantity + self.free_quantity
        if len(items) < set_size:
            return ZERO

        sets = len(items) // set_size
        return sets * self.free_quantity * _unit_price(items)


@dataclass(frozen=True, slots=True)
class BulkFixedPriceRule(Rule):
    """
    Every unit drops to ``fixed_price`` once the group reaches ``min_quantity``.

    ``fixed_price`` must not exceed the product's unit price; that is left to
    whoever configures the rule.
    """

    product_code: str
    min_quantity: int
    fixed_price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "fixed_price", to_decimal(self.fixed_price))

    def applicable(self, grouped: GroupedItems) -> bool:
        return len(_group(grouped, self.product_code)) > 0

    def apply(self, grouped: GroupedItems) -> Decimal:
        items = _group(grouped, self.product_code)
        if not items or len(items) < self.min_quantity:
            return ZERO
        return len(items) * (_unit_price(items) - self.fixed_price)


@dataclass(frozen=True, slots=True)
class BulkPercentageRule(Rule):
    """Every unit gets ``discount_percentage`` off once the group reaches ``min_quantity``."""

    product_code: str
    min_quantity: int
    discount_percentage: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "discount_percentage", to_decimal(self.discount_percentage))

    def applicable(self, grouped: GroupedItems) -> bool:
        return len(_group(grouped, self.product_code)) > 0

    def apply(self, grouped: GroupedItems) -> Decimal:
        items = _group(grouped, self.product_code)
        if not items or len(items) < self.min_quantity:
            return ZERO
        return len(items) * _unit_price(items) * self.discount_percentage / Decimal(100)
