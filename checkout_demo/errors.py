from __future__ import annotations


class CheckoutError(Exception):
    pass


class StockShortage(CheckoutError):
    def __init__(self, product_code: str, requested: int, available: int):
        self.product_code = product_code
        self.requested = requested
        self.available = available
        shortage = requested - available
        super().__init__(
            f"Insufficient stock for {product_code}: requested={requested}, available={available}, shortage={shortage}"
        )


class UnknownProduct(CheckoutError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Product {code} not found")


class InvalidLifecycleTransition(CheckoutError):
    def __init__(self, attempted_op: str, current_state: str):
        self.attempted_op = attempted_op
        self.current_state = current_state
        super().__init__(f"Cannot {attempted_op}: checkout is already {current_state}")


class UnsupportedCurrency(CheckoutError):
    def __init__(self, code: str, message: str | None = None):
        self.code = code
        super().__init__(message or f"Unsupported currency: {code}")
