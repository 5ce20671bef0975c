from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from checkout_demo.metrics import MetricsCollector
from checkout_demo.rules import ZERO, GroupedItems, Rule

logger = logging.getLogger(__name__)


class RuleEngine:
    """
    Суммирует скидки всех применимых правил.

    Правила независимы: ни одно не видит результата другого, поэтому порядок не важен.
    Два правила на один и тот же код товара считаем ошибкой конфигурации, такое не принимаем.
    """

    def __init__(self, rules: Iterable[Rule] = (), metrics: Optional[MetricsCollector] = None):
        self._rules: List[Rule] = list(rules)
        self.metrics = metrics
        self.validate()

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: Rule) -> None:
        if any(existing.product_code == rule.product_code for existing in self._rules):
            raise ValueError(f"Product {rule.product_code} already has a pricing rule")
        self._rules.append(rule)

    def validate(self) -> None:
        seen = set()
        for rule in self._rules:
            if rule.product_code in seen:
                raise ValueError(f"Product {rule.product_code} already has a pricing rule")
            seen.add(rule.product_code)

    def apply_rules(self, grouped: GroupedItems) -> Decimal:
        total_discount = ZERO
        for rule in self._rules:
            if not rule.applicable(grouped):
                continue
            discount = rule.apply(grouped)
            total_discount += discount
            if discount > 0:
                self._record(rule, discount)
        return total_discount

    def _record(self, rule: Rule, discount: Decimal) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.record_rule_application(rule.name, discount)
        except Exception as exc:
            logger.warning("metrics: rule application not recorded for %s: %s", rule.name, exc)
