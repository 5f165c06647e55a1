"""
Price writer: replaces the tier list of each customer group in the rows
"""

from collections import OrderedDict
from typing import Any, Dict, List
from sqlalchemy import delete, select
import logging

from catalog.pricing import to_net
from catalog.writers.base import BaseWriter
from core.exceptions import AdapterError
from models import CustomerGroup, Price, Product, Tax
from schemas.rows import PriceRow

logger = logging.getLogger(__name__)


class PriceWriter(BaseWriter):

    section = "price"

    async def write(self, product_id: int, variant_id: int, rows: List[Dict[str, Any]]):
        """
        Replace the prices of `variant_id` for every customer group present in `rows`.

        Groups flagged tax_input deliver gross prices; they are stored net.
        Groups not mentioned keep their prices.
        """
        if not rows:
            return

        prices = self.validate_all(PriceRow, rows)
        by_group: "OrderedDict[str, List[PriceRow]]" = OrderedDict()
        for price in prices:
            by_group.setdefault(price.price_group, []).append(price)

        tax_rate = await self.db.scalar(
            select(Tax.tax).join(Product, Product.tax_id == Tax.id).where(Product.id == product_id)
        )

        for key, tiers in by_group.items():
            group = await self.db.scalar(select(CustomerGroup).where(CustomerGroup.key == key))
            if group is None:
                raise AdapterError(
                    f"Customer group by key {key} not found",
                    context={"variant_id": variant_id, "price_group": key}
                )

            tiers = sorted(tiers, key=lambda t: t.quantity_from)
            self._check_tiers(key, tiers)

            await self.db.execute(
                delete(Price).where(Price.variant_id == variant_id, Price.customer_group_key == key)
            )
            convert = (lambda v: to_net(v, tax_rate)) if group.tax_input else (lambda v: v)
            for tier in tiers:
                self.db.add(Price(
                    product_id=product_id,
                    variant_id=variant_id,
                    customer_group_key=key,
                    quantity_from=tier.quantity_from,
                    quantity_to=tier.quantity_to,
                    price=convert(tier.price),
                    pseudo_price=convert(tier.pseudo_price),
                    regulation_price=convert(tier.regulation_price),
                ))
            logger.debug(f"Wrote {len(tiers)} price tiers for variant {variant_id}, group {key}")

        await self.db.flush()

    @staticmethod
    def _check_tiers(key: str, tiers: List[PriceRow]):
        if tiers[0].quantity_from != 1:
            raise AdapterError(
                f"Price tiers for group {key} must start at quantity 1",
                context={"price_group": key}
            )
        previous = None
        for tier in tiers:
            if tier.price is None:
                raise AdapterError(
                    f"Price for group {key} from quantity {tier.quantity_from} is missing",
                    context={"price_group": key}
                )
            if tier.quantity_to is not None and tier.quantity_to < tier.quantity_from:
                raise AdapterError(
                    f"Price tier for group {key} ends before it starts ({tier.quantity_from} > {tier.quantity_to})",
                    context={"price_group": key}
                )
            # tiers are sorted by quantity_from; an open ended tier must be the last one
            if previous is not None and (
                tier.quantity_from == previous.quantity_from
                or previous.quantity_to is None
                or tier.quantity_from <= previous.quantity_to
            ):
                raise AdapterError(
                    f"Price tiers for group {key} overlap at quantity {tier.quantity_from}",
                    context={"price_group": key, "quantity_from": tier.quantity_from}
                )
            previous = tier
