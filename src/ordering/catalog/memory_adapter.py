"""In-memory catalog for development and testing."""

from ordering.catalog.port import Catalog, ProductInfo


class InMemoryCatalog(Catalog):
    def __init__(self, products=None) -> None:
        self._products: dict[str, ProductInfo] = {}
        for product in products or []:
            self.add_product(product)

    def add_product(self, product: ProductInfo) -> None:
        self._products[str(product.id)] = product

    def remove_product(self, product_id: str) -> None:
        self._products.pop(str(product_id), None)

    def get_product(self, product_id: str) -> ProductInfo | None:
        return self._products.get(str(product_id))

    def list_products(self) -> list[ProductInfo]:
        return list(self._products.values())
