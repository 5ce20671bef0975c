from __future__ import annotations

from typing import Dict, Iterable, Optional

from checkout_demo.models import Product


class ProductCatalog:
    def __init__(self, products: Iterable[Product] = ()):
        self._products: Dict[str, Product] = {}
        for product in products:
            self.add(product)

    def add(self, product: Product) -> None:
        self._products[product.code] = product

    def find(self, code: str) -> Optional[Product]:
        return self._products.get(code)

    def __contains__(self, code: object) -> bool:
        return code in self._products

    def __len__(self) -> int:
        return len(self._products)
