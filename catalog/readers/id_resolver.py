"""
Resolve the ordered set of variant ids an export covers.
"""

from typing import Any, List, Mapping, Optional, Set, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from catalog.collaborators import ShopContext, StreamResolver
from core.exceptions import InvalidArgumentError, NotFoundError
from models import Category, Locale, ProductCategory, Variant
from models.base import VariantKind

logger = logging.getLogger(__name__)


class ProductFilter(BaseModel):
    """
    Export filter in the platform's key names.

    variants: export every variant instead of main variants only
    categories: category id; a list selects its first element
    productStreamId: product stream whose matches are exported
    """

    variants: bool = False
    category_id: Optional[int] = Field(None, alias="categories")
    product_stream_id: Optional[int] = Field(None, alias="productStreamId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("category_id", mode="before")
    @classmethod
    def first_category(cls, v):
        if isinstance(v, (list, tuple)):
            return v[0] if v else None
        return v or None

    @field_validator("product_stream_id", mode="before")
    @classmethod
    def empty_stream(cls, v):
        return v or None


class EntityFilterResolver:

    def __init__(self, db_session: AsyncSession, stream_resolver: StreamResolver):
        self.db = db_session
        self.stream_resolver = stream_resolver

    async def resolve_ids(
        self,
        filter: Union[ProductFilter, Mapping[str, Any], None] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[int]:
        """
        Return variant ids ordered by (product id, kind, variant id).

        Raises:
            NotFoundError: the category filter references a missing category
            InvalidArgumentError: the product stream does not exist
        """
        if filter is None:
            filter = ProductFilter()
        elif not isinstance(filter, ProductFilter):
            filter = ProductFilter.model_validate(dict(filter))

        stmt = select(Variant.id).order_by(Variant.product_id, Variant.kind, Variant.id)
        if not filter.variants:
            stmt = stmt.where(Variant.kind == VariantKind.MAIN.value)

        if filter.category_id is not None:
            category_ids = await self._category_tree(filter.category_id)
            assigned = select(ProductCategory.product_id).where(
                ProductCategory.category_id.in_(category_ids)
            )
            stmt = stmt.where(Variant.product_id.in_(assigned))

        if filter.product_stream_id is not None:
            shop_context = await self._shop_context()
            search = await self.stream_resolver.resolve(filter.product_stream_id, shop_context)
            if not search.has_conditions:
                raise InvalidArgumentError(
                    f"Product stream with ID {filter.product_stream_id} not found",
                    context={"product_stream_id": filter.product_stream_id}
                )
            if not search.products:
                logger.info(f"Product stream {filter.product_stream_id} matched no products")
                return []

            if filter.variants:
                stmt = stmt.where(Variant.product_id.in_(list(search.products.values())))
            else:
                stmt = stmt.where(Variant.number.in_(list(search.products.keys())))

        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        ids = list((await self.db.execute(stmt)).scalars().all())
        logger.info(f"Resolved {len(ids)} variant ids (offset={offset}, limit={limit})")
        return ids

    async def _category_tree(self, category_id: int) -> List[int]:
        """The category and all of its descendants, depth first"""
        exists = await self.db.scalar(select(Category.id).where(Category.id == category_id))
        if exists is None:
            raise NotFoundError(
                f"Category by id {category_id} not found",
                context={"category_id": category_id}
            )

        collected: List[int] = []
        seen: Set[int] = set()
        stack = [category_id]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            collected.append(current)
            children = (await self.db.execute(
                select(Category.id).where(Category.parent_id == current).order_by(Category.position.desc(), Category.id.desc())
            )).scalars().all()
            stack.extend(children)
        return collected

    async def _shop_context(self) -> ShopContext:
        default = (await self.db.execute(
            select(Locale.id, Locale.locale).where(Locale.is_default.is_(True)).order_by(Locale.id).limit(1)
        )).first()
        if default is None:
            return ShopContext(shop_id=1)
        return ShopContext(shop_id=default.id, locale=default.locale)
