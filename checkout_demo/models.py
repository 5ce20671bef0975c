from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
}


def to_decimal(value: Number) -> Decimal:
    # float -> str -> Decimal, иначе 3.11 превращается в 3.1099999...
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True, slots=True)
class Money:
    amount: Decimal
    currency: str = "GBP"

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))

    @classmethod
    def zero(cls, currency: str = "GBP") -> Money:
        return cls(Decimal("0"), currency)

    def add(self, other: Money) -> Money:
        self._check_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        self._check_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, scalar: Number) -> Money:
        return Money(self.amount * to_decimal(scalar), self.currency)

    def rounded(self) -> Money:
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __gt__(self, other: Money) -> bool:
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __str__(self) -> str:
        symbol = CURRENCY_SYMBOLS.get(self.currency, self.currency)
        return f"{symbol}{self.rounded().amount}"

    def _check_currency(self, other: Money, op: str) -> None:
        if self.currency != other.currency:
            raise ValueError(f"Cannot {op} different currencies: {self.currency} and {other.currency}")


@dataclass(frozen=True, slots=True)
class Product:
    """
    Позиция каталога и одновременно строка корзины.
    Два товара равны, если совпадает код: имя и цена в сравнении не участвуют.
    """

    code: str
    name: str = field(default="", compare=False)
    price: Money = field(default_factory=Money.zero, compare=False)


@dataclass(slots=True)
class ProductStock:
    total: int
    reserved: int = 0
    sold: int = 0

    @property
    def available(self) -> int:
        return self.total - self.reserved - self.sold


@dataclass(frozen=True, slots=True)
class StockLevel:
    total: int = 0
    reserved: int = 0
    sold: int = 0
    available: int = 0


class SessionStatus(Enum):
    OPEN = "open"
    COMMITTED = "committed"
    CANCELLED = "cancelled"
