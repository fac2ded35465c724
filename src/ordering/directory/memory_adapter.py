"""In-memory customer directory for development and testing."""

from ordering.directory.port import CustomerDirectory, CustomerProfile


class InMemoryCustomerDirectory(CustomerDirectory):
    def __init__(self, profiles=None) -> None:
        self._profiles: dict[str, CustomerProfile] = {}
        for profile in profiles or []:
            self.add_customer(profile)

    def add_customer(self, profile: CustomerProfile) -> None:
        self._profiles[str(profile.id)] = profile

    def get_customer(self, customer_id: str) -> CustomerProfile | None:
        return self._profiles.get(str(customer_id))
