"""
Core writer: product and variant master data
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from sqlalchemy import select
import logging

from catalog.collaborators import AttributeSchema
from catalog.writers.base import BaseWriter
from core.exceptions import AdapterError
from models import Product, Supplier, Tax, Unit, Variant
from models.base import VariantKind
from schemas.rows import ProductRow

logger = logging.getLogger(__name__)

# ProductRow field -> Product column
PRODUCT_FIELDS = {
    "name": "name",
    "description": "description",
    "description_long": "description_long",
    "meta_title": "meta_title",
    "keywords": "keywords",
    "pseudo_sales": "pseudo_sales",
    "top_seller": "highlight",
    "price_group_id": "price_group_id",
    "price_group_active": "price_group_active",
    "notification": "notification",
    "template": "template",
    "mode": "mode",
    "available_from": "available_from",
    "available_to": "available_to",
}

VARIANT_FIELDS = [
    "additional_text", "supplier_number", "ean", "active", "in_stock",
    "stock_min", "last_stock", "position", "weight", "width", "height",
    "length", "purchase_steps", "min_purchase", "max_purchase",
    "purchase_unit", "reference_unit", "pack_unit", "release_date",
    "shipping_time", "shipping_free", "purchase_price",
]


@dataclass
class ProductWriterResult:
    """Ids the dependent writers of one record work with"""
    product_id: int
    variant_id: int
    main_variant_id: int
    # processed stand-in row: only the variant was resolved
    processed: bool = False

    @property
    def is_main(self) -> bool:
        return self.variant_id == self.main_variant_id


class ProductWriter(BaseWriter):
    """
    Create or update a product and one of its variants from an article row.

    - Known order number: update the variant and its product
    - New order number with a different main number: new variant below
      the product of that main variant
    - Otherwise: new product with the row as its main variant
    """

    section = "article"

    def __init__(self, db_session, attribute_schema: AttributeSchema):
        super().__init__(db_session)
        self.attribute_schema = attribute_schema

    async def write(self, row: Dict[str, Any], default_values: Optional[Dict[str, Any]] = None) -> ProductWriterResult:
        data = dict(row)
        for key, value in (default_values or {}).items():
            if data.get(key) in (None, ""):
                data[key] = value

        article = self.validate(ProductRow, data)
        variant = await self._find_variant(article.order_number)

        if article.is_processed:
            if variant is None:
                raise AdapterError(
                    f"Variant with number {article.order_number} does not exist",
                    context={"order_number": article.order_number}
                )
            return await self._result(variant, processed=True)

        if variant is not None:
            product = await self.db.get(Product, variant.product_id)
            await self._apply_product(product, article)
            self._apply_variant(variant, article)
            logger.debug(f"Updated variant {article.order_number}")
        elif article.main_number and article.main_number != article.order_number:
            main = await self._find_variant(article.main_number)
            if main is None:
                raise AdapterError(
                    f"Variant with number {article.main_number} does not exist",
                    context={"order_number": article.order_number, "main_number": article.main_number}
                )
            product = await self.db.get(Product, main.product_id)
            await self._apply_product(product, article)
            variant = Variant(product_id=product.id, number=article.order_number, kind=VariantKind.VARIANT.value)
            self._apply_variant(variant, article)
            self.db.add(variant)
            logger.debug(f"Created variant {article.order_number} below {article.main_number}")
        else:
            if not article.name:
                raise AdapterError(
                    f"Product name for {article.order_number} is required",
                    context={"order_number": article.order_number}
                )
            if article.tax is None and article.tax_id is None:
                raise AdapterError(
                    f"Tax for {article.order_number} is required",
                    context={"order_number": article.order_number}
                )
            product = Product(name=article.name)
            await self._apply_product(product, article)
            self.db.add(product)
            await self.db.flush()

            variant = Variant(product_id=product.id, number=article.order_number, kind=VariantKind.MAIN.value)
            self._apply_variant(variant, article)
            self.db.add(variant)
            logger.debug(f"Created product {product.id} with main variant {article.order_number}")

        if article.unit:
            unit, _ = await self.get_or_create(Unit, defaults={"description": article.unit}, unit=article.unit)
            variant.unit_id = unit.id

        await self.db.flush()
        await self._write_attributes(variant, article)
        return await self._result(variant)

    async def _find_variant(self, number: str) -> Optional[Variant]:
        result = await self.db.execute(select(Variant).where(Variant.number == number))
        return result.scalar_one_or_none()

    async def _result(self, variant: Variant, processed: bool = False) -> ProductWriterResult:
        main_id = await self.db.scalar(
            select(Variant.id).where(
                Variant.product_id == variant.product_id,
                Variant.kind == VariantKind.MAIN.value
            )
        )
        return ProductWriterResult(
            product_id=variant.product_id,
            variant_id=variant.id,
            main_variant_id=main_id or variant.id,
            processed=processed
        )

    async def _apply_product(self, product: Product, article: ProductRow):
        provided = article.model_fields_set
        for field, column in PRODUCT_FIELDS.items():
            if field in provided:
                setattr(product, column, getattr(article, field))

        if "supplier_name" in provided:
            supplier, _ = await self.get_or_create(Supplier, name=article.supplier_name)
            product.supplier_id = supplier.id

        if "tax_id" in provided:
            tax = await self.db.get(Tax, article.tax_id)
            if tax is None:
                raise AdapterError(
                    f"Tax by id {article.tax_id} not found",
                    context={"order_number": article.order_number}
                )
            product.tax_id = tax.id
        elif "tax" in provided:
            tax, _ = await self.get_or_create(Tax, defaults={"description": f"{article.tax:g} %"}, tax=article.tax)
            product.tax_id = tax.id

    @staticmethod
    def _apply_variant(variant: Variant, article: ProductRow):
        provided = article.model_fields_set
        for field in VARIANT_FIELDS:
            if field in provided:
                setattr(variant, field, getattr(article, field))

    async def _write_attributes(self, variant: Variant, article: ProductRow):
        table_name = self.attribute_schema.variant_table
        aliases = self.attribute_schema.aliases(table_name)
        values = {}
        for name, value in article.attributes().items():
            if name in aliases:
                values[aliases[name]] = value
            else:
                logger.debug(f"Ignoring unknown attribute column {name}")

        attributes = self.attribute_schema.table_clause(table_name)
        existing = await self.db.scalar(
            select(attributes.c.id).where(attributes.c.variant_id == variant.id)
        )
        if existing is None:
            await self.db.execute(
                attributes.insert().values(variant_id=variant.id, product_id=variant.product_id, **values)
            )
        elif values:
            await self.db.execute(
                attributes.update().where(attributes.c.id == existing).values(**values)
            )
