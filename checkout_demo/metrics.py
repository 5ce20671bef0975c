from __future__ import annotations

import threading
import time
from collections import Counter
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from checkout_demo.models import CENT, to_decimal


class MetricsCollector:
    """
    Счётчики по оформлениям заказов.

    Передаётся явно (в RuleEngine / CheckoutSession), глобального экземпляра нет.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.checkouts = 0
            self.successful_checkouts = 0
            self.total_revenue = Decimal("0")
            self.discount_savings = Decimal("0")
            self.items_sold = 0
            self.rule_applications: Counter[str] = Counter()
            self.error_counts: Counter[str] = Counter()
            self.product_popularity: Counter[str] = Counter()
            self.daily_stats: Dict[str, Dict[str, Any]] = {}
            self.errors: List[Dict[str, Any]] = []
            self._started = time.monotonic()

    def record_checkout(self, outcome: Mapping[str, Any]) -> None:
        with self._lock:
            self.checkouts += 1
            revenue = Decimal("0")
            if outcome.get("success"):
                self.successful_checkouts += 1
                revenue = to_decimal(outcome.get("total_amount", 0))
                self.total_revenue += revenue
                self.items_sold += int(outcome.get("items_count", 0))
                self.product_popularity.update(outcome.get("products", ()))
            else:
                self._error(outcome.get("error_type", "unknown_error"), outcome.get("error_message"))

            day = self.daily_stats.setdefault(
                datetime.now().strftime("%Y-%m-%d"), {"checkouts": 0, "revenue": Decimal("0")}
            )
            day["checkouts"] += 1
            day["revenue"] += revenue

    def record_rule_application(self, rule_type: str, discount: Decimal) -> None:
        with self._lock:
            self.rule_applications[rule_type] += 1
            self.discount_savings += to_decimal(discount)

    def record_error(self, kind: str, message: Optional[str] = None) -> None:
        with self._lock:
            self._error(kind, message)

    def success_rate(self) -> float:
        with self._lock:
            return self._success_rate()

    def summary(self, top: int = 5) -> Dict[str, Any]:
        with self._lock:
            average = (self.total_revenue / self.successful_checkouts).quantize(CENT) if self.successful_checkouts else Decimal("0.00")
            return {
                "uptime_seconds": time.monotonic() - self._started,
                "total_checkouts": self.checkouts,
                "success_rate": self._success_rate(),
                "total_revenue": self.total_revenue,
                "total_savings": self.discount_savings,
                "average_order_value": average,
                "top_products": dict(self.product_popularity.most_common(top)),
                "most_used_rules": dict(self.rule_applications.most_common(top)),
                "errors": {
                    "total": sum(self.error_counts.values()),
                    "by_type": dict(self.error_counts),
                },
            }

    # Вызывать только под self._lock
    def _error(self, kind: str, message: Optional[str]) -> None:
        self.error_counts[kind] += 1
        self.errors.append({"type": kind, "message": message, "at": datetime.now()})

    def _success_rate(self) -> float:
        if self.checkouts == 0:
            return 100.0
        return round(self.successful_checkouts / self.checkouts * 100, 2)
