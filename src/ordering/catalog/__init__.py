"""Catalog adapter factory.

``CATALOG_ADAPTER`` selects the implementation; only ``memory`` ships here,
production deployments plug their own adapter in with ``set_catalog()``.
"""

import os

from ordering.catalog.port import Catalog

_current_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the configured catalog (singleton)."""
    global _current_catalog
    if _current_catalog is None:
        adapter = os.environ.get("CATALOG_ADAPTER", "memory")
        if adapter == "memory":
            from ordering.catalog.memory_adapter import InMemoryCatalog

            _current_catalog = InMemoryCatalog()
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _current_catalog


def set_catalog(catalog: Catalog) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
