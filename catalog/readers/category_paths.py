"""
Render materialized category paths as readable names.

Category rows carry the stored ancestor chain ("3|7", root first) and
their own id. Names are resolved with one query for all rows, then each
row's chain is rendered root to leaf: "Shoes->Men->Boots".
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from models.category import Category

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "|"
DISPLAY_SEPARATOR = "->"


def split_path(path: Optional[str]) -> List[int]:
    if not path:
        return []
    return [int(part) for part in path.split(PATH_SEPARATOR) if part.strip().isdigit()]


def join_path(ids: Iterable[int]) -> str:
    return PATH_SEPARATOR.join(str(i) for i in ids)


def collect_ids(rows: Iterable[Dict]) -> List[int]:
    """Every distinct category id referenced by the rows, own ids and ancestors"""
    seen = []
    for row in rows:
        candidates = []
        if row.get("categoryId"):
            candidates.append(int(row["categoryId"]))
        candidates.extend(split_path(row.get("categoryPath")))
        for category_id in candidates:
            if category_id not in seen:
                seen.append(category_id)
    return seen


def render(path: Optional[str], own_id: Optional[int], names: Dict[int, str]) -> str:
    """Ancestor names root to leaf, then the category's own name; unknown ids are dropped"""
    parts = [names.get(category_id) for category_id in split_path(path)]
    if own_id:
        parts.append(names.get(int(own_id)))
    return DISPLAY_SEPARATOR.join(p for p in parts if p)


class CategoryPathResolver:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def resolve_names(self, ids: List[int]) -> Dict[int, str]:
        if not ids:
            return {}
        result = await self.db.execute(
            select(Category.id, Category.name).where(Category.id.in_(ids))
        )
        return {row.id: row.name for row in result}

    async def apply(self, rows: List[Dict]) -> List[Dict]:
        """Replace each row's stored categoryPath with its rendered path"""
        names = await self.resolve_names(collect_ids(rows))
        for row in rows:
            row["categoryPath"] = render(row.get("categoryPath"), row.get("categoryId"), names)
        logger.debug(f"Rendered {len(rows)} category paths from {len(names)} names")
        return rows
