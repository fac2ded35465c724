"""Customer directory port: company and contact details owned by the identity service."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CustomerProfile:
    """A customer's company record, used for default ship-to and invoices."""

    id: str
    email: str | None = None
    company_name: str | None = None
    trading_name: str | None = None
    company_address: str | None = None
    country_code: str | None = None
    vat_number: str | None = None
    contact_name: str | None = None
    contact_title: str | None = None
    contact_email: str | None = None
    tel_no: str | None = None
    mob_no: str | None = None


class CustomerDirectory(ABC):
    @abstractmethod
    def get_customer(self, customer_id: str) -> CustomerProfile | None:
        """Return the customer's profile, or None when unknown."""
        ...
