"""
Relation writer: accessory and similar links between products
"""

from typing import Any, Dict, List
from sqlalchemy import select
import logging

from catalog.writers.base import BaseWriter
from models import ProductRelation, Variant
from models.base import RelationKind
from schemas.rows import RelationRow

logger = logging.getLogger(__name__)


class RelationWriter(BaseWriter):
    """
    Link a product to the products addressed by order number.

    Targets that do not exist yet are skipped, not treated as errors, and
    returned so the caller can replay them once the target is imported.
    """

    def __init__(self, db_session, kind: RelationKind):
        super().__init__(db_session)
        self.kind = kind
        self.section = kind.value

    async def write(
        self,
        product_id: int,
        main_number: str,
        rows: List[Dict[str, Any]],
        processed: bool = False
    ) -> List[Dict[str, Any]]:
        """Returns the rows whose target could not be resolved"""
        unresolved = []
        for raw, relation in zip(rows, self.validate_all(RelationRow, rows)):
            target_product_id = await self.db.scalar(
                select(Variant.product_id).where(Variant.number == relation.order_number)
            )
            if target_product_id is None:
                logger.info(
                    f"Skipping {self.kind.value} link {main_number} -> {relation.order_number}: target not found"
                )
                unresolved.append(raw)
                continue
            if target_product_id == product_id:
                logger.debug(f"Skipping {self.kind.value} self link of {main_number}")
                continue

            await self.link_once(
                ProductRelation,
                kind=self.kind.value,
                product_id=product_id,
                related_product_id=target_product_id
            )

        if unresolved and processed:
            # A replayed record whose targets are still missing is not replayed again
            logger.warning(
                f"{len(unresolved)} {self.kind.value} targets of {main_number} still unresolved on replay"
            )
            return []
        return unresolved
