"""Supplier profile: the seller's details printed as shipper/exporter on invoices."""

import json
from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String, Text, ValueObject
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.shared.principal import Principal

SUPPLIER_PROFILE_ID = "supplier"

_EDITABLE_FIELDS = (
    "company_name",
    "trading_name",
    "business_number",
    "address",
    "tel_no",
    "fax_no",
    "contact_info",
    "logo_url",
)


@ordering.value_object(part_of="SupplierProfile")
class BankDetails:
    bank_name = String(max_length=255)
    account_number = String(max_length=100)
    account_holder = String(max_length=255)
    swift_code = String(max_length=20)


@ordering.value_object(part_of="SupplierProfile")
class ShipmentDetails:
    origin = String(max_length=255)
    shipment = String(max_length=255)
    packing = String(max_length=255)
    validity = String(max_length=255)


@ordering.aggregate
class SupplierProfile:
    company_name = String(max_length=255)
    trading_name = String(max_length=255)
    business_number = String(max_length=100)
    address = String(max_length=1000)
    tel_no = String(max_length=50)
    fax_no = String(max_length=50)
    contact_info = String(max_length=255)
    bank = ValueObject(BankDetails)
    shipping = ValueObject(ShipmentDetails)
    logo_url = String(max_length=2048)
    updated_at = DateTime()
    updated_by = String(max_length=255)


@ordering.command(part_of="SupplierProfile")
class UpdateSupplierProfile:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    profile = Text(required=True)  # JSON: profile fields, with nested "bank" and "shipping"


@ordering.command_handler(part_of=SupplierProfile)
class SupplierProfileHandler:
    @handle(UpdateSupplierProfile)
    def update_supplier_profile(self, command):
        actor = Principal.from_command(command)
        actor.require_admin("edit the supplier profile")

        data = json.loads(command.profile) if isinstance(command.profile, str) else dict(command.profile)
        bank = data.pop("bank", None)
        shipping = data.pop("shipping", None)

        repo = current_domain.repository_for(SupplierProfile)
        try:
            profile = repo.get(SUPPLIER_PROFILE_ID)
        except ObjectNotFoundError:
            profile = SupplierProfile(id=SUPPLIER_PROFILE_ID)

        for name in _EDITABLE_FIELDS:
            if name in data:
                setattr(profile, name, data[name])
        if bank is not None:
            profile.bank = BankDetails(**bank)
        if shipping is not None:
            profile.shipping = ShipmentDetails(**shipping)
        profile.updated_at = datetime.now(UTC)
        profile.updated_by = actor.label

        repo.add(profile)
        return SUPPLIER_PROFILE_ID


def current_supplier_profile() -> SupplierProfile | None:
    try:
        return current_domain.repository_for(SupplierProfile).get(SUPPLIER_PROFILE_ID)
    except ObjectNotFoundError:
        return None
