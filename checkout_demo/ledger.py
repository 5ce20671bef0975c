from __future__ import annotations

import logging
import threading
from typing import Dict, List

from checkout_demo.errors import StockShortage
from checkout_demo.models import ProductStock, StockLevel

logger = logging.getLogger(__name__)


class StockLedger:
    """
    Складской учёт в памяти, общий для всех открытых корзин.

    Для каждого товара храним три счётчика (total/reserved/sold),
    а для каждой сессии: сколько единиц какого товара она держит в резерве.
    Инвариант: reserved товара == сумма резервов всех открытых сессий по нему,
    и reserved + sold <= total.

    Все изменения идут под одним локом: проверка наличия и резерв
    должны быть атомарны, иначе две корзины продадут одну и ту же единицу.
    """

    def __init__(self) -> None:
        self._products: Dict[str, ProductStock] = {}
        self._reservations: Dict[str, Dict[str, int]] = {}
        self._lock = threading.Lock()

        self.logs: List[str] = []

    def log(self, message: str) -> None:
        self.logs.append(message)
        logger.info(message)

    def add_product(self, code: str, total_units: int) -> None:
        if total_units < 0:
            raise ValueError(f"total_units must be >= 0, got {total_units}")
        with self._lock:
            self._products[code] = ProductStock(total=total_units)
            # повторная регистрация обнуляет счётчики, поэтому старые резервы по коду тоже сбрасываем
            for session_id in list(self._reservations):
                held = self._reservations[session_id]
                held.pop(code, None)
                if not held:
                    del self._reservations[session_id]
            self.log(f"stock registered: {code} total={total_units}")

    def stock_level(self, code: str) -> StockLevel:
        with self._lock:
            return self._level(code)

    def is_available(self, code: str, quantity: int) -> bool:
        # неположительное количество "доступно" всегда, даже для неизвестного кода
        if quantity <= 0:
            return True
        with self._lock:
            stock = self._products.get(code)
            return stock is not None and stock.available >= quantity

    def reserve(self, code: str, quantity: int, session_id: str) -> bool:
        try:
            self.reserve_or_raise(code, quantity, session_id)
        except StockShortage:
            return False
        return True

    def reserve_or_raise(self, code: str, quantity: int, session_id: str) -> None:
        if quantity <= 0:
            return
        with self._lock:
            stock = self._products.get(code)
            if stock is None or stock.available < quantity:
                # available фиксируем под локом, иначе параллельный release исказит ошибку
                available = stock.available if stock else 0
                self.log(f"[session={session_id}] reserve rejected: {code} qty={quantity} (available={available})")
                raise StockShortage(code, requested=quantity, available=available)

            stock.reserved += quantity
            held = self._reservations.setdefault(session_id, {})
            held[code] = held.get(code, 0) + quantity
            self.log(f"[session={session_id}] reserved: {code} qty={quantity} (available={stock.available})")

    def release(self, code: str, quantity: int, session_id: str) -> bool:
        if quantity <= 0:
            return True
        with self._lock:
            self._release(code, quantity, session_id)
            return True

    def commit(self, session_id: str) -> bool:
        with self._lock:
            held = self._reservations.pop(session_id, {})
            for code, quantity in held.items():
                stock = self._products[code]
                stock.reserved -= quantity
                stock.sold += quantity
                self.log(f"[session={session_id}] sold: {code} qty={quantity} (sold={stock.sold})")
            return True

    def cancel(self, session_id: str) -> bool:
        with self._lock:
            held = dict(self._reservations.get(session_id, {}))
            for code, quantity in held.items():
                self._release(code, quantity, session_id)
            return True

    def reservations(self, session_id: str) -> Dict[str, int]:
        with self._lock:
            return dict(self._reservations.get(session_id, {}))

    def open_sessions(self) -> List[str]:
        with self._lock:
            return list(self._reservations)

    def products(self) -> List[str]:
        with self._lock:
            return list(self._products)

    # Вызывать только под self._lock
    def _level(self, code: str) -> StockLevel:
        stock = self._products.get(code)
        if stock is None:
            return StockLevel()
        return StockLevel(total=stock.total, reserved=stock.reserved, sold=stock.sold, available=stock.available)

    def _release(self, code: str, quantity: int, session_id: str) -> None:
        stock = self._products.get(code)
        held = self._reservations.get(session_id)
        if stock is None or not held or code not in held:
            return

        # лишнее молча обрезаем до того, что сессия реально держит
        released = min(quantity, held[code])
        stock.reserved -= released
        held[code] -= released
        if held[code] == 0:
            del held[code]
        if not held:
            del self._reservations[session_id]
        self.log(f"[session={session_id}] released: {code} qty={released} (available={stock.available})")
