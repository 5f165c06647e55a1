"""
Property writer: filter group, options and values of a product
"""

from typing import Any, Dict, List
import logging

from catalog.writers.base import BaseWriter
from core.exceptions import AdapterError
from models import (
    Product,
    ProductPropertyValue,
    PropertyGroup,
    PropertyGroupOption,
    PropertyOption,
    PropertyValue,
)
from schemas.rows import PropertyValueRow

logger = logging.getLogger(__name__)


class PropertyWriter(BaseWriter):

    section = "propertyValue"

    async def write(self, product_id: int, order_number: str, rows: List[Dict[str, Any]]):
        if not rows:
            return

        product = await self.db.get(Product, product_id)
        for row in self.validate_all(PropertyValueRow, rows):
            if row.property_group_name:
                group, _ = await self.get_or_create(PropertyGroup, name=row.property_group_name)
                product.filter_group_id = group.id
            elif product.filter_group_id is None:
                raise AdapterError(
                    f"Property group for {order_number} is required",
                    context={"order_number": order_number}
                )

            value = await self._resolve_value(order_number, row)
            await self.link_once(PropertyGroupOption, group_id=product.filter_group_id, option_id=value.option_id)
            await self.link_once(ProductPropertyValue, product_id=product_id, value_id=value.id)

        await self.db.flush()
        logger.debug(f"Wrote {len(rows)} property values for {order_number}")

    async def _resolve_value(self, order_number: str, row: PropertyValueRow) -> PropertyValue:
        if row.property_value_id is not None:
            value = await self.db.get(PropertyValue, row.property_value_id)
            if value is None:
                raise AdapterError(
                    f"Property value by id {row.property_value_id} not found",
                    context={"order_number": order_number}
                )
            return value

        if not row.property_option_name or not row.property_value_name:
            raise AdapterError(
                f"Property option and value name for {order_number} are required",
                context={"order_number": order_number}
            )

        option, _ = await self.get_or_create(PropertyOption, name=row.property_option_name)
        value, _ = await self.get_or_create(
            PropertyValue,
            defaults={"position": row.property_value_position or 0},
            option_id=option.id,
            value=row.property_value_name
        )
        return value
