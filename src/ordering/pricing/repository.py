"""Repository for the CustomerPriceList aggregate."""

from protean.core.repository import BaseRepository

from ordering.domain import ordering
from ordering.pricing.price_list import CustomerPriceList


@ordering.repository(part_of=CustomerPriceList)
class CustomerPriceListRepository(BaseRepository):
    def all_lists(self, batch_size: int = 100):
        """Iterate over every price list, one page at a time."""
        offset = 0
        while True:
            batch = self._dao.query.order_by("customer_id").offset(offset).limit(batch_size).all().items
            yield from batch
            if len(batch) < batch_size:
                return
            offset += batch_size
