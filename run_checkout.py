from __future__ import annotations

import argparse
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from checkout_demo.catalog import ProductCatalog
from checkout_demo.currency import CurrencyConverter
from checkout_demo.engine import RuleEngine
from checkout_demo.errors import CheckoutError
from checkout_demo.ledger import StockLedger
from checkout_demo.metrics import MetricsCollector
from checkout_demo.models import Money, Product
from checkout_demo.rules import BulkFixedPriceRule, BulkPercentageRule, QuantityDiscountRule
from checkout_demo.session import CheckoutSession


def seed(ledger: StockLedger, metrics: Optional[MetricsCollector] = None) -> Tuple[ProductCatalog, RuleEngine]:
    catalog = ProductCatalog(
        [
            Product("GR1", "Green tea", Money(Decimal("3.11"))),
            Product("SR1", "Strawberries", Money(Decimal("5.00"))),
            Product("CF1", "Coffee", Money(Decimal("11.23"))),
        ]
    )

    ledger.add_product("GR1", 50)
    ledger.add_product("SR1", 30)
    ledger.add_product("CF1", 20)

    rules = RuleEngine(
        [
            QuantityDiscountRule("GR1", buy_quantity=1, free_quantity=1),
            BulkFixedPriceRule("SR1", min_quantity=3, fixed_price=Decimal("4.50")),
            BulkPercentageRule("CF1", min_quantity=3, discount_percentage=Decimal("33.33")),
        ],
        metrics=metrics,
    )
    return catalog, rules


def _parse_stock(values: List[str]) -> List[Tuple[str, int]]:
    result = []
    for value in values:
        code, _, units = value.partition("=")
        if not code or not units.isdigit():
            raise ValueError(f"expected CODE=UNITS, got {value!r}")
        result.append((code, int(units)))
    return result


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    p = argparse.ArgumentParser(description="Scan a basket through one checkout session and print the result.")
    p.add_argument("--items", type=str, default="GR1,SR1,GR1,GR1,CF1", help="Comma-separated product codes in scan order")
    p.add_argument("--cancel", action="store_true", help="Cancel the session instead of processing it")
    p.add_argument("--currency", type=str, default=None, help="Also show the total in this currency (e.g. USD)")
    p.add_argument("--stock", action="append", default=[], metavar="CODE=UNITS", help="Override stock for a product")
    args = p.parse_args()

    ledger = StockLedger()
    metrics = MetricsCollector()
    catalog, rules = seed(ledger, metrics)
    try:
        overrides = _parse_stock(args.stock)
    except ValueError as e:
        p.error(str(e))
    for code, units in overrides:
        ledger.add_product(code, units)

    session = CheckoutSession(rules, ledger, catalog=catalog, currency_converter=CurrencyConverter(), metrics=metrics)
    for code in filter(None, (c.strip() for c in args.items.split(","))):
        try:
            session.scan(code)
        except CheckoutError as e:
            print(f"scan {code} failed: {e}")

    total = session.total()
    if args.cancel:
        session.cancel()
    else:
        session.process()

    print("\n=== RESULT ===")
    print("status:", session.status.value)
    print("items:", [item.code for item in session.basket.items])
    print("total:", total)
    if args.currency:
        print(f"total ({args.currency}):", session.total_in_currency(args.currency))
    print("stock:", {code: ledger.stock_level(code) for code in ledger.products()})
    print("metrics:", metrics.summary())


if __name__ == "__main__":
    main()
