"""Price list maintenance: commands and handler (administrators only)."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.pricing.price_list import CustomerPriceList
from ordering.shared.principal import Principal

logger = structlog.get_logger(__name__)


@ordering.command(part_of="CustomerPriceList")
class SetCustomerPrices:
    """Upsert negotiated unit prices for one customer."""

    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    customer_id = Identifier(required=True)
    prices = Text(required=True)  # JSON: list of {product_id, unit_price, product_name, category_id, category_name}


@ordering.command(part_of="CustomerPriceList")
class BackfillProductPrices:
    """Give every existing price list an identity-priced row for a new product."""

    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    category_id = Identifier()
    category_name = String(max_length=100)
    list_price = Float(required=True, min_value=0.0)


@ordering.command(part_of="CustomerPriceList")
class RemoveProductPrices:
    """Drop a deleted product from every price list."""

    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=CustomerPriceList)
class PriceListHandler:
    @handle(SetCustomerPrices)
    def set_customer_prices(self, command):
        actor = Principal.from_command(command)
        actor.require_admin("edit customer prices")

        entries = json.loads(command.prices) if isinstance(command.prices, str) else command.prices

        repo = current_domain.repository_for(CustomerPriceList)
        try:
            price_list = repo.get(command.customer_id)
        except ObjectNotFoundError:
            price_list = CustomerPriceList.create(command.customer_id)

        changes = price_list.set_prices(entries, updated_by=actor.label)
        repo.add(price_list)

        logger.info(
            "Customer prices updated",
            customer_id=str(command.customer_id),
            changed=len(changes),
            updated_by=actor.label,
        )
        return changes

    @handle(BackfillProductPrices)
    def backfill_product_prices(self, command):
        Principal.from_command(command).require_admin("introduce products")

        repo = current_domain.repository_for(CustomerPriceList)
        backfilled = 0
        for price_list in repo.all_lists():
            if price_list.backfill_product(
                product_id=command.product_id,
                product_name=command.product_name,
                category_id=command.category_id,
                category_name=command.category_name,
                list_price=command.list_price,
            ):
                repo.add(price_list)
                backfilled += 1

        logger.info("Product backfilled into price lists", product_id=str(command.product_id), lists=backfilled)
        return backfilled

    @handle(RemoveProductPrices)
    def remove_product_prices(self, command):
        Principal.from_command(command).require_admin("delete products")

        repo = current_domain.repository_for(CustomerPriceList)
        removed = 0
        for price_list in repo.all_lists():
            if price_list.remove_product(command.product_id):
                repo.add(price_list)
                removed += 1

        logger.info("Product removed from price lists", product_id=str(command.product_id), lists=removed)
        return removed
