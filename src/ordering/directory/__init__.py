"""Customer directory factory, selected by ``CUSTOMER_DIRECTORY``."""

import os

from ordering.directory.port import CustomerDirectory

_current_directory: CustomerDirectory | None = None


def get_customer_directory() -> CustomerDirectory:
    global _current_directory
    if _current_directory is None:
        adapter = os.environ.get("CUSTOMER_DIRECTORY", "memory")
        if adapter == "memory":
            from ordering.directory.memory_adapter import InMemoryCustomerDirectory

            _current_directory = InMemoryCustomerDirectory()
        else:
            raise ValueError(f"Unknown customer directory adapter: {adapter}")
    return _current_directory


def set_customer_directory(directory: CustomerDirectory) -> None:
    global _current_directory
    _current_directory = directory


def reset_customer_directory() -> None:
    global _current_directory
    _current_directory = None
