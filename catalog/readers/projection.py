"""
Wide read projections over variants and their sub-entities.

One query per group. Every query starts at Variant, inner-joins its
Product, left-joins the group's relations and filters to the requested
variant ids. Rows are flat dicts keyed by export column name and carry
`parentIndexElement`, the position of their owning row in the `article`
group, so a projection can be fed straight back into the writer.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
import html
import logging

from catalog.collaborators import AttributeSchema, MediaResolver
from catalog.pricing import round_price, to_gross
from catalog.readers import columns as registry
from catalog.readers.category_paths import CategoryPathResolver
from catalog.readers.translations import TranslationAssembler
from core.exceptions import InvalidArgumentError
from models import (
    Category,
    ConfiguratorGroup,
    ConfiguratorOption,
    ConfiguratorSet,
    CustomerGroup,
    Image,
    Price,
    Product,
    ProductCategory,
    ProductPropertyValue,
    PropertyGroup,
    PropertyOption,
    PropertyValue,
    Supplier,
    Tax,
    Unit,
    Variant,
    VariantConfiguratorOption,
)
from models.base import RelationKind, VariantKind

logger = logging.getLogger(__name__)

DATE_COLUMNS = {"date": "%Y-%m-%d", "releaseDate": "%Y-%m-%d", "changeTime": "%Y-%m-%d %H:%M:%S"}
PRICE_FIELDS = ("price", "pseudoPrice", "regulationPrice")


class ProjectionBuilder:
    """
    Build the export view for a set of variant ids.

    Responsibilities:
    - Column spec validation against the registry
    - One query per group
    - Post-processing (entity decoding, gross prices, media URLs,
      category paths, translations)
    """

    def __init__(
        self,
        db_session: AsyncSession,
        media_resolver: MediaResolver,
        attribute_schema: AttributeSchema
    ):
        self.db = db_session
        self.media_resolver = media_resolver
        self.attribute_schema = attribute_schema

    def default_columns(self) -> Dict[str, List[str]]:
        return registry.get_default_columns(self.attribute_schema)

    async def project(self, ids: List[int], columns: Dict[str, List[str]]) -> Dict[str, List[Dict]]:
        if not ids:
            raise InvalidArgumentError("Can not read articles without ids.")
        if not columns or not columns.get(registry.ARTICLE):
            raise InvalidArgumentError(
                "Can not read articles without column names",
                context={"groups": sorted(columns or {})}
            )

        ids = [int(i) for i in ids]
        defaults = self.default_columns()
        spec = {group: list(columns.get(group) or defaults[group]) for group in registry.SECTIONS}

        result: Dict[str, List[Dict]] = {}
        result[registry.ARTICLE] = await self._read_articles(ids, spec[registry.ARTICLE])
        result[registry.PRICE] = await self._read_prices(ids, spec[registry.PRICE])
        result[registry.IMAGE] = await self._read_images(ids, spec[registry.IMAGE])
        result[registry.PROPERTY_VALUE] = await self._read_property_values(ids, spec[registry.PROPERTY_VALUE])
        result[registry.CONFIGURATOR] = await self._read_configurator(ids, spec[registry.CONFIGURATOR])
        result[registry.SIMILAR] = await self._read_relations(ids, spec[registry.SIMILAR], RelationKind.SIMILAR)
        result[registry.ACCESSORY] = await self._read_relations(ids, spec[registry.ACCESSORY], RelationKind.ACCESSORY)
        result[registry.CATEGORY] = await self._read_categories(ids, spec[registry.CATEGORY])
        result[registry.TRANSLATION] = await self._read_translations(ids, spec[registry.TRANSLATION])

        self._annotate_parent_index(result)

        logger.info(
            f"Projected {len(ids)} ids: "
            + ", ".join(f"{group}={len(rows)}" for group, rows in result.items())
        )
        return result

    # ------------------------------------------------------------------
    # Column handling
    # ------------------------------------------------------------------

    def _select_list(self, group: str, requested: List[str], attr_table=None) -> List:
        available = registry.group_columns(group, self.attribute_schema)
        names = list(registry.PARENT_KEYS[group])
        names += [name for name in requested if name not in names]

        expressions = []
        for name in names:
            if name not in available:
                raise InvalidArgumentError(
                    f"Unknown column '{name}' for section '{group}'",
                    context={"group": group, "column": name}
                )
            expression = available[name]
            if isinstance(expression, str):
                expression = attr_table.c[expression]
            expressions.append(expression.label(name))
        return expressions

    # ------------------------------------------------------------------
    # Group queries
    # ------------------------------------------------------------------

    async def _read_articles(self, ids: List[int], requested: List[str]) -> List[Dict]:
        attr_table = self.attribute_schema.table_clause(self.attribute_schema.variant_table)
        mv = registry.main_variant

        stmt = (
            select(*self._select_list(registry.ARTICLE, requested, attr_table))
            .select_from(Variant)
            .join(Product, Product.id == Variant.product_id)
            .outerjoin(mv, and_(mv.product_id == Product.id, mv.kind == VariantKind.MAIN.value))
            .outerjoin(attr_table, attr_table.c.variant_id == Variant.id)
            .outerjoin(Tax, Tax.id == Product.tax_id)
            .outerjoin(Supplier, Supplier.id == Product.supplier_id)
            .outerjoin(PropertyGroup, PropertyGroup.id == Product.filter_group_id)
            .outerjoin(Unit, Unit.id == Variant.unit_id)
            .where(Variant.id.in_(ids))
            .order_by(Variant.kind, Variant.id)
        )
        rows = await self._fetch(stmt)

        for row in rows:
            self._decode_entities(row)
            self._format_dates(row)
            if "inStock" in row and not row["inStock"]:
                row["inStock"] = "0"
        return rows

    async def _read_prices(self, ids: List[int], requested: List[str]) -> List[Dict]:
        helpers = [expr.label(name) for name, expr in registry.PRICE_HELPER_COLUMNS.items()]

        stmt = (
            select(*self._select_list(registry.PRICE, requested), *helpers)
            .select_from(Variant)
            .join(Product, Product.id == Variant.product_id)
            .outerjoin(Price, Price.variant_id == Variant.id)
            .outerjoin(CustomerGroup, CustomerGroup.key == Price.customer_group_key)
            .outerjoin(Tax, Tax.id == Product.tax_id)
            .where(Variant.id.in_(ids))
            .where(Price.id.isnot(None))
            .order_by(Variant.id, Price.customer_group_key, Price.quantity_from)
        )
        rows = await self._fetch(stmt)

        for row in rows:
            tax_input = row.pop("taxInput")
            tax_rate = row.pop("taxRate")
            for field in PRICE_FIELDS:
                if row.get(field) is None:
                    continue
                row[field] = to_gross(row[field], tax_rate) if tax_input else round_price(row[field])
        return rows

    async def _read_images(self, ids: List[int], requested: List[str]) -> List[Dict]:
        stmt = (
            select(*self._select_list(registry.IMAGE, requested))
            .select_from(Variant)
            .join(Product, Product.id == Variant.product_id)
            .outerjoin(Image, Image.product_id == Product.id)
            .where(Variant.id.in_(ids))
            .where(Variant.kind == VariantKind.MAIN.value)
            .where(Image.id.isnot(None))
            .order_by(Product.id, Image.position, Image.id)
        )
        rows = await self._fetch(stmt)

        for row in rows:
            if row.get("imageUrl"):
                row["imageUrl"] = self.media_resolver.resolve(row["imageUrl"])
            if "main" in row:
                row["main"] = 1 if row["main"] else 2
        return rows

    async def _read_property_values(self, ids: List[int], requested: List[str]) -> List[Dict]:
        stmt = (
            select(*self._select_list(registry.PROPERTY_VALUE, requested))
            .select_from(Variant)
            .join(Product, Product.id == Variant.product_id)
            .outerjoin(PropertyGroup, PropertyGroup.id == Product.filter_group_id)
            .outerjoin(ProductPropertyValue, ProductPropertyValue.product_id == Product.id)
            .outerjoin(PropertyValue, PropertyValue.id == ProductPropertyValue.value_id)
            .outerjoin(PropertyOption, PropertyOption.id == PropertyValue.option_id)
            .where(Variant.id.in_(ids))
            .where(Variant.kind == VariantKind.MAIN.value)
            .where(PropertyValue.id.isnot(None))
            .order_by(Product.id, PropertyValue.position, PropertyValue.id)
        )
        return await self._fetch(stmt)

    async def _read_configurator(self, ids: List[int], requested: List[str]) -> List[Dict]:
        stmt = (
            select(*self._select_list(registry.CONFIGURATOR, requested))
            .select_from(Variant)
            .join(Product, Product.id == Variant.product_id)
            .outerjoin(VariantConfiguratorOption, VariantConfiguratorOption.variant_id == Variant.id)
            .outerjoin(ConfiguratorOption, ConfiguratorOption.id == VariantConfiguratorOption.option_id)
            .outerjoin(ConfiguratorGroup, ConfiguratorGroup.id == ConfiguratorOption.group_id)
            .outerjoin(ConfiguratorSet, ConfiguratorSet.id == Product.configurator_set_id)
            .where(Variant.id.in_(ids))
            .where(ConfiguratorOption.id.isnot(None))
            .where(ConfiguratorGroup.id.isnot(None))
            .where(ConfiguratorSet.id.isnot(None))
            .order_by(Variant.id, ConfiguratorGroup.position, ConfiguratorOption.position)
        )
        return await self._fetch(stmt)

    async def _read_relations(self, ids: List[int], requested: List[str], kind: RelationKind) -> List[Dict]:
        if kind == RelationKind.SIMILAR:
            group, link, target = registry.SIMILAR, registry.similar_link, registry.similar_variant
        else:
            group, link, target = registry.ACCESSORY, registry.accessory_link, registry.accessory_variant

        stmt = (
            select(*self._select_list(group, requested))
            .select_from(Variant)
            .join(Product, Product.id == Variant.product_id)
            .outerjoin(link, and_(link.product_id == Product.id, link.kind == kind.value))
            .outerjoin(
                target,
                and_(target.product_id == link.related_product_id, target.kind == VariantKind.MAIN.value)
            )
            .where(Variant.id.in_(ids))
            .where(Variant.kind == VariantKind.MAIN.value)
            .where(link.id.isnot(None))
            .where(target.id.isnot(None))
            .order_by(Product.id, link.id)
        )
        return await self._fetch(stmt)

    async def _read_categories(self, ids: List[int], requested: List[str]) -> List[Dict]:
        product_ids = (await self.db.execute(
            select(Variant.product_id).where(Variant.id.in_(ids)).group_by(Variant.product_id)
        )).scalars().all()
        if not product_ids:
            return []

        select_list = self._select_list(registry.CATEGORY, requested)
        # Path rendering needs the raw ids even when they are not exported
        wanted = {c.name for c in select_list}
        helpers = [
            expr.label(name) for name, expr in registry.REGISTRY[registry.CATEGORY].items()
            if name in ("categoryId", "categoryPath") and name not in wanted
        ]

        stmt = (
            select(*select_list, *helpers)
            .select_from(Product)
            .outerjoin(ProductCategory, ProductCategory.product_id == Product.id)
            .outerjoin(Category, Category.id == ProductCategory.category_id)
            .where(Product.id.in_(product_ids))
            .where(Category.id.isnot(None))
            .order_by(Product.id, Category.id)
        )
        rows = await self._fetch(stmt)
        await CategoryPathResolver(self.db).apply(rows)

        for row in rows:
            for helper in helpers:
                row.pop(helper.name, None)
        return rows

    async def _read_translations(self, ids: List[int], requested: List[str]) -> List[Dict]:
        rows = await TranslationAssembler(self.db, self.attribute_schema).assemble(ids)

        available = registry.group_columns(registry.TRANSLATION, self.attribute_schema)
        unknown = [name for name in requested if name not in available]
        if unknown:
            raise InvalidArgumentError(
                f"Unknown column '{unknown[0]}' for section '{registry.TRANSLATION}'",
                context={"group": registry.TRANSLATION, "column": unknown[0]}
            )

        keep = set(registry.PARENT_KEYS[registry.TRANSLATION]) | set(registry.TRANSLATION_IDENTITY) | set(requested)
        return [{k: v for k, v in row.items() if k in keep} for row in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fetch(self, stmt) -> List[Dict]:
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    def _decode_entities(row: Dict[str, Any]):
        for key, value in row.items():
            if isinstance(value, str):
                row[key] = html.unescape(value)

    @staticmethod
    def _format_dates(row: Dict[str, Any]):
        for key, fmt in DATE_COLUMNS.items():
            value = row.get(key)
            if isinstance(value, (datetime, date)):
                row[key] = value.strftime(fmt)

    @staticmethod
    def _annotate_parent_index(result: Dict[str, List[Dict]]):
        """Point every sub-row at the article row it belongs to"""
        by_variant: Dict[int, int] = {}
        by_product: Dict[int, int] = {}
        for index, row in enumerate(result[registry.ARTICLE]):
            by_variant[row["variantId"]] = index
            # Main variants sort first, so the first row of a product is its main row
            by_product.setdefault(row["articleId"], index)

        for group, rows in result.items():
            if group == registry.ARTICLE:
                continue
            variant_keyed = "variantId" in registry.PARENT_KEYS[group]
            for row in rows:
                index: Optional[int]
                if variant_keyed:
                    index = by_variant.get(row.get("variantId"))
                else:
                    index = by_product.get(row.get("articleId"))
                row["parentIndexElement"] = index
