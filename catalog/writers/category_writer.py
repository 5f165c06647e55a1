"""
Category writer: assigns a product to categories addressed by id or by path
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import select
import logging

from catalog.readers.category_paths import DISPLAY_SEPARATOR, join_path, split_path
from catalog.writers.base import BaseWriter
from core.exceptions import AdapterError
from models import Category, ProductCategory
from schemas.rows import CategoryRow

logger = logging.getLogger(__name__)


class CategoryWriter(BaseWriter):

    section = "category"

    async def write(self, product_id: int, rows: List[Dict[str, Any]]):
        for category in self.validate_all(CategoryRow, rows):
            if category.category_id is not None:
                node = await self.db.get(Category, category.category_id)
                if node is None:
                    raise AdapterError(
                        f"Category by id {category.category_id} not found",
                        context={"product_id": product_id, "category_id": category.category_id}
                    )
            elif category.category_path:
                node = await self.resolve_path(category.category_path)
            else:
                continue

            if await self.link_once(ProductCategory, product_id=product_id, category_id=node.id):
                logger.debug(f"Assigned product {product_id} to category {node.id}")

    async def resolve_path(self, display_path: str) -> Category:
        """
        Walk "Shoes->Men->Boots" from the root, creating missing nodes.

        New nodes get the materialized ancestor chain of their parent.
        """
        names = [part.strip() for part in display_path.split(DISPLAY_SEPARATOR) if part.strip()]
        if not names:
            raise AdapterError(f"Invalid category path '{display_path}'", context={"path": display_path})

        parent: Optional[Category] = None
        for name in names:
            parent_id = parent.id if parent is not None else None
            node = await self.db.scalar(
                select(Category)
                .where(Category.name == name, Category.parent_id.is_(None) if parent_id is None else Category.parent_id == parent_id)
                .order_by(Category.id)
                .limit(1)
            )
            if node is None:
                ancestors = split_path(parent.path) + [parent.id] if parent is not None else []
                node = Category(name=name, parent_id=parent_id, path=join_path(ancestors))
                self.db.add(node)
                await self.db.flush()
                logger.info(f"Created category '{name}' below {parent_id}")
            parent = node
        return parent
