"""Catalog port: read-only product facts consumed by pricing, carts and invoices."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ProductInfo:
    """Product facts as published by the catalog."""

    id: str
    name: str
    price: float
    category_id: str | None = None
    category_name: str | None = None
    group_name: str | None = None
    hs_code: str | None = None
    origin: str | None = None
    weight: float | None = None
    description: str | None = None
    image_url: str | None = None


class Catalog(ABC):
    """Abstract catalog interface."""

    @abstractmethod
    def get_product(self, product_id: str) -> ProductInfo | None:
        """Return the product, or None when it does not exist."""
        ...

    @abstractmethod
    def list_products(self) -> list[ProductInfo]:
        """Return every product in the catalog."""
        ...
