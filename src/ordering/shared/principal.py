"""The acting principal passed explicitly into every ordering operation."""

from dataclasses import dataclass

from ordering.errors import AuthorizationError

ADMIN_LEVEL = 50
SUPER_ADMIN_LEVEL = 99


@dataclass(frozen=True)
class Principal:
    """An authenticated user as supplied by the identity provider.

    ``role_level`` is the coarse numeric role: below ``ADMIN_LEVEL`` is a
    customer, ``SUPER_ADMIN_LEVEL`` is a super-admin.
    """

    id: str
    email: str | None = None
    role_level: int = 0

    @property
    def role(self) -> str:
        if self.role_level >= SUPER_ADMIN_LEVEL:
            return "super-admin"
        if self.role_level >= ADMIN_LEVEL:
            return "admin"
        return "customer"

    @property
    def is_admin(self) -> bool:
        return self.role_level >= ADMIN_LEVEL

    @property
    def label(self) -> str:
        """Value stamped into ``updated_by`` / ``created_by``."""
        return self.email or self.id

    def can_act_for(self, customer_id) -> bool:
        return self.is_admin or str(self.id) == str(customer_id)

    def require_admin(self, action: str) -> None:
        if not self.is_admin:
            raise AuthorizationError(f"Only administrators may {action}")

    def require_owner_or_admin(self, customer_id, action: str) -> None:
        if not self.can_act_for(customer_id):
            raise AuthorizationError(f"Not allowed to {action} for another customer")

    def as_command_fields(self) -> dict:
        return {
            "actor_id": self.id,
            "actor_email": self.email,
            "actor_level": self.role_level,
        }

    @classmethod
    def from_command(cls, command) -> "Principal":
        return cls(
            id=str(command.actor_id),
            email=command.actor_email,
            role_level=command.actor_level or 0,
        )


SYSTEM = Principal(id="system", email="system", role_level=SUPER_ADMIN_LEVEL)
