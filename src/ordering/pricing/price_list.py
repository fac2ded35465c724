"""Customer price list aggregate: negotiated per-customer unit prices.

One price list exists per customer (its id is the customer id) and holds at
most one override per product. Lists are maintained by administrators only.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String

from ordering.domain import ordering
from ordering.pricing.events import (
    CustomerPricesUpdated,
    ProductPriceBackfilled,
    ProductPriceRemoved,
)
from ordering.shared.money import amounts_equal, floor_to_cents


@ordering.entity(part_of="CustomerPriceList")
class PriceOverride:
    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    category_id = Identifier()
    category_name = String(max_length=100)
    unit_price = Float(required=True, min_value=0.0)


@ordering.aggregate
class CustomerPriceList:
    customer_id = Identifier(required=True)
    overrides = HasMany(PriceOverride)
    updated_at = DateTime()
    updated_by = String(max_length=255)

    @invariant.post
    def one_override_per_product(self):
        product_ids = [str(o.product_id) for o in self.overrides]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"overrides": ["A product can have only one override per customer"]})

    @classmethod
    def create(cls, customer_id):
        return cls(id=str(customer_id), customer_id=str(customer_id), updated_at=datetime.now(UTC))

    def override_for(self, product_id):
        return next((o for o in self.overrides if str(o.product_id) == str(product_id)), None)

    def set_prices(self, entries, updated_by):
        """Upsert overrides. Prices are floored to cents; only real changes are recorded.

        Each entry carries ``product_id`` and ``unit_price`` plus optional
        ``product_name``, ``category_id`` and ``category_name``.
        """
        changes = []
        with atomic_change(self):
            for entry in entries:
                new_price = floor_to_cents(float(entry["unit_price"]))
                if new_price < 0:
                    raise ValidationError({"unit_price": ["Price cannot be negative"]})

                existing = self.override_for(entry["product_id"])
                if existing is None:
                    self.add_overrides(
                        PriceOverride(
                            product_id=entry["product_id"],
                            product_name=entry.get("product_name"),
                            category_id=entry.get("category_id"),
                            category_name=entry.get("category_name"),
                            unit_price=new_price,
                        )
                    )
                    previous_price = None
                elif amounts_equal(existing.unit_price, new_price):
                    continue
                else:
                    previous_price = existing.unit_price
                    existing.unit_price = new_price

                changes.append(
                    {
                        "product_id": str(entry["product_id"]),
                        "product_name": entry.get("product_name") or (existing.product_name if existing else None),
                        "previous_price": previous_price,
                        "new_price": new_price,
                    }
                )

        if not changes:
            return []

        now = datetime.now(UTC)
        self.updated_at = now
        self.updated_by = updated_by
        self.raise_(
            CustomerPricesUpdated(
                customer_id=str(self.customer_id),
                changes=json.dumps(changes),
                updated_by=updated_by,
                updated_at=now,
            )
        )
        return changes

    def backfill_product(self, product_id, product_name, category_id, category_name, list_price):
        """Add an identity-priced row for a new product. Existing rows win."""
        if self.override_for(product_id) is not None:
            return False

        self.add_overrides(
            PriceOverride(
                product_id=product_id,
                product_name=product_name,
                category_id=category_id,
                category_name=category_name,
                unit_price=list_price,
            )
        )
        self.raise_(
            ProductPriceBackfilled(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                unit_price=str(list_price),
            )
        )
        return True

    def remove_product(self, product_id):
        override = self.override_for(product_id)
        if override is None:
            return False

        self.remove_overrides(override)
        self.raise_(ProductPriceRemoved(customer_id=str(self.customer_id), product_id=str(product_id)))
        return True
