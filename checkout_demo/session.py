from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional, Union

from checkout_demo.basket import Basket
from checkout_demo.catalog import ProductCatalog
from checkout_demo.currency import CurrencyConverter
from checkout_demo.engine import RuleEngine
from checkout_demo.errors import InvalidLifecycleTransition, UnknownProduct
from checkout_demo.ledger import StockLedger
from checkout_demo.metrics import MetricsCollector
from checkout_demo.models import Money, Product, SessionStatus

logger = logging.getLogger(__name__)


class CheckoutSession:
    """
    Одна касса / одна корзина покупателя.

    OPEN -> COMMITTED (process) или OPEN -> CANCELLED (cancel), ровно один раз.
    Незакрытая сессия держит свои резервы на складе бесконечно: брошенную
    корзину нужно явно отменить через cancel().
    """

    def __init__(
        self,
        rule_engine: RuleEngine,
        ledger: StockLedger,
        catalog: Optional[ProductCatalog] = None,
        currency_converter: Optional[CurrencyConverter] = None,
        base_currency: str = "GBP",
        metrics: Optional[MetricsCollector] = None,
    ):
        self.rule_engine = rule_engine
        self.ledger = ledger
        self.catalog = catalog
        self.currency_converter = currency_converter
        self.base_currency = base_currency
        self.metrics = metrics

        self.session_id = uuid.uuid4().hex
        self.status = SessionStatus.OPEN
        self.basket = Basket(
            rule_engine=rule_engine,
            ledger=ledger,
            session_id=self.session_id,
            currency_converter=currency_converter,
            base_currency=base_currency,
        )

    def scan(self, item: Union[Product, str]) -> Product:
        self._ensure_open("scan")
        try:
            product = self._resolve(item)
            self.basket.add(product)
        except Exception as e:
            self._record_error(type(e).__name__, str(e))
            raise
        self.ledger.log(f"[session={self.session_id}] scanned {product.code}")
        return product

    def remove(self, item: Union[Product, str]) -> bool:
        self._ensure_open("remove")
        product = self._resolve(item)
        removed = self.basket.remove(product)
        if removed:
            self.ledger.log(f"[session={self.session_id}] removed {product.code}")
        return removed

    def total(self) -> Money:
        return self.basket.total()

    def total_in_currency(self, currency: str) -> Money:
        if self.currency_converter is None:
            raise ValueError("Currency converter not available")
        return self.currency_converter.convert(self.basket.total(), currency).rounded()

    def process(self) -> bool:
        self._ensure_open("process")
        # итог считаем до commit: ошибка цены не должна оставить продажу наполовину проведённой
        total = self.basket.total()
        self.ledger.log(f"[session={self.session_id}] COMMIT items={len(self.basket)}")
        self.ledger.commit(self.session_id)
        self._finish(SessionStatus.COMMITTED)
        self._record_checkout(
            {
                "success": True,
                "total_amount": total.amount,
                "items_count": len(self.basket),
                "products": [item.code for item in self.basket.items],
            }
        )
        return True

    def cancel(self) -> bool:
        self._ensure_open("cancel")
        self.ledger.log(f"[session={self.session_id}] CANCEL items={len(self.basket)}")
        self.ledger.cancel(self.session_id)
        self._finish(SessionStatus.CANCELLED)
        self._record_checkout({"success": False, "error_type": "cancelled", "error_message": None})
        return True

    def _resolve(self, item: Union[Product, str]) -> Product:
        if isinstance(item, Product):
            return item
        product = self.catalog.find(item) if self.catalog is not None else None
        if product is None:
            raise UnknownProduct(item)
        return product

    def _finish(self, status: SessionStatus) -> None:
        self.status = status
        self.basket.close()
        self.ledger.log(f"[session={self.session_id}] {status.value.upper()}")

    def _ensure_open(self, op: str) -> None:
        if self.status is not SessionStatus.OPEN:
            raise InvalidLifecycleTransition(op, self.status.value)

    # Метрики это побочный канал, их падение не должно ломать оформление заказа
    def _record_checkout(self, outcome: Dict[str, Any]) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.record_checkout(outcome)
        except Exception as exc:
            logger.warning("metrics: checkout not recorded for session %s: %s", self.session_id, exc)

    def _record_error(self, kind: str, message: str) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.record_error(kind, message)
        except Exception as exc:
            logger.warning("metrics: error not recorded for session %s: %s", self.session_id, exc)
