"""Pytest fixtures for the checkout demo (in-memory ledger, catalog, rules)."""

from decimal import Decimal

import pytest

from checkout_demo.catalog import ProductCatalog
from checkout_demo.currency import CurrencyConverter
from checkout_demo.engine import RuleEngine
from checkout_demo.ledger import StockLedger
from checkout_demo.metrics import MetricsCollector
from checkout_demo.rules import BulkFixedPriceRule, BulkPercentageRule, QuantityDiscountRule
from checkout_demo.session import CheckoutSession

from tests.factories import COFFEE, GREEN_TEA, GREEN_TEA_EUR, GREEN_TEA_USD, STRAWBERRIES


@pytest.fixture
def ledger() -> StockLedger:
    ledger = StockLedger()

    ledger.add_product("GR1", 10)
    ledger.add_product("SR1", 5)
    ledger.add_product("CF1", 3)  # Limited stock
    ledger.add_product("GR2", 10)
    ledger.add_product("GR3", 10)

    return ledger


@pytest.fixture
def catalog() -> ProductCatalog:
    return ProductCatalog([GREEN_TEA, STRAWBERRIES, COFFEE, GREEN_TEA_USD, GREEN_TEA_EUR])


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def engine(metrics) -> RuleEngine:
    return RuleEngine(
        [
            QuantityDiscountRule("GR1", buy_quantity=1, free_quantity=1),
            BulkFixedPriceRule("SR1", min_quantity=3, fixed_price=Decimal("4.50")),
            BulkPercentageRule("CF1", min_quantity=3, discount_percentage=Decimal("33.33")),
        ],
        metrics=metrics,
    )


@pytest.fixture
def converter() -> CurrencyConverter:
    return CurrencyConverter()


@pytest.fixture
def make_session(engine, ledger, catalog, metrics):
    def _make(**kwargs) -> CheckoutSession:
        kwargs.setdefault("catalog", catalog)
        kwargs.setdefault("metrics", metrics)
        return CheckoutSession(engine, ledger, **kwargs)

    return _make
