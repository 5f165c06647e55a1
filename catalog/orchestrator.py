"""
Batch Writer - writes a grouped batch of rows one root record at a time.

This module provides:
- Partitioning of a flat batch into per-record bundles
- One transaction per root record (commit on success, rollback on failure)
- Partial failure support: adapter errors are recorded, the batch continues
- Strict mode: the first adapter error aborts the batch
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from catalog.collaborators import AttributeSchema, ErrorModeConfig, MediaResolver
from catalog.results import BatchWriteResult, RecordBundle, RecordKey, RecordOutcome
from catalog.writers import (
    CategoryWriter,
    ConfiguratorWriter,
    ImageWriter,
    PriceWriter,
    ProductWriter,
    PropertyWriter,
    RelationWriter,
    TranslationWriter,
)
from core.exceptions import AdapterError, ValidationError
from models.base import RelationKind

logger = logging.getLogger(__name__)

ROOT_GROUP = "article"
PARENT_INDEX = "parentIndexElement"


def partition_batch(batch: Mapping[str, Sequence[Dict[str, Any]]]) -> List[RecordBundle]:
    """
    Split a grouped batch into one bundle per root row.

    Sub-rows are attached to the root row their parentIndexElement points at;
    rows pointing nowhere are dropped with a warning. The batch is not modified.
    """
    articles = list(batch.get(ROOT_GROUP) or [])
    bundles = [
        RecordBundle(key=RecordKey(index=i, order_number=str(row.get("orderNumber") or "")), article=row)
        for i, row in enumerate(articles)
    ]

    for group, rows in batch.items():
        if group == ROOT_GROUP:
            continue
        for row in rows or []:
            index = _parent_index(row)
            if index is None or not 0 <= index < len(bundles):
                logger.warning(
                    f"Dropping {group} row with parentIndexElement={row.get(PARENT_INDEX)!r}: "
                    f"no such {ROOT_GROUP} row"
                )
                continue
            bundles[index].groups.setdefault(group, []).append(row)

    return bundles


def _parent_index(row: Dict[str, Any]) -> Optional[int]:
    value = row.get(PARENT_INDEX)
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _has_category_reference(row: Dict[str, Any]) -> bool:
    return bool(str(row.get("categoryId") or "").strip() or str(row.get("categoryPath") or "").strip())


class BatchWriter:
    """
    Batch orchestrator

    Responsibilities:
    - Validate the batch shape
    - Sequence records and their transactions
    - Aggregate outcomes into a BatchWriteResult
    """

    def __init__(
        self,
        db_session: AsyncSession,
        attribute_schema: AttributeSchema,
        media_resolver: MediaResolver,
        error_mode: Optional[ErrorModeConfig] = None
    ):
        self.db = db_session
        self.error_mode = error_mode or ErrorModeConfig()

        self.product_writer = ProductWriter(db_session, attribute_schema)
        self.price_writer = PriceWriter(db_session)
        self.category_writer = CategoryWriter(db_session)
        self.configurator_writer = ConfiguratorWriter(db_session)
        self.property_writer = PropertyWriter(db_session)
        self.translation_writer = TranslationWriter(db_session, attribute_schema)
        self.relation_writers = {
            RelationKind.ACCESSORY.value: RelationWriter(db_session, RelationKind.ACCESSORY),
            RelationKind.SIMILAR.value: RelationWriter(db_session, RelationKind.SIMILAR),
        }
        self.image_writer = ImageWriter(db_session, media_resolver)

    async def write(
        self,
        batch: Mapping[str, Sequence[Dict[str, Any]]],
        default_values: Optional[Dict[str, Any]] = None
    ) -> BatchWriteResult:
        """
        Write every root record of the batch in its own transaction.

        Returns:
            BatchWriteResult with per-record outcomes, log messages and
            unprocessed relation rows

        Raises:
            ValidationError: the batch has no article rows
            AdapterError: a record failed and strict mode is configured
        """
        if not batch or not batch.get(ROOT_GROUP):
            raise ValidationError(
                "No article rows in the write batch",
                context={"groups": sorted(batch or {})}
            )

        strict = self.error_mode.strict
        result = BatchWriteResult()

        for bundle in partition_batch(batch):
            outcome = await self.apply_record(bundle, default_values)
            if not outcome.ok:
                logger.error(outcome.message)
                if strict:
                    raise outcome.error
            result.add(outcome)

        logger.info(
            f"Batch written: {result.records_written} records ok, "
            f"{result.records_failed} failed (strict={strict})"
        )
        return result

    async def apply_record(
        self,
        bundle: RecordBundle,
        default_values: Optional[Dict[str, Any]] = None
    ) -> RecordOutcome:
        """
        Apply one root record inside its own transaction.

        Steps:
        1. Write the product/variant master data
        2. Unless the row is a processed stand-in: prices, categories,
           configurator, properties, translations
        3. Relations (main variants only) and images
        4. Commit; roll back on AdapterError and report it in the outcome

        Constraint and data errors raised by the database for the record's
        own rows are reported like AdapterError. Any other exception rolls
        back and propagates.
        """
        outcome = RecordOutcome(key=bundle.key)
        try:
            written = await self.product_writer.write(bundle.article, default_values)
            outcome.result = written

            order_number = bundle.key.order_number
            processed = written.processed

            if not processed:
                await self.price_writer.write(written.product_id, written.variant_id, bundle.rows("price"))
                await self.category_writer.write(
                    written.product_id,
                    [row for row in bundle.rows("category") if _has_category_reference(row)]
                )
                await self.configurator_writer.write(written, bundle.rows("configurator"))
                await self.property_writer.write(written.product_id, order_number, bundle.rows("propertyValue"))
                await self.translation_writer.write(
                    written.product_id,
                    written.variant_id,
                    written.main_variant_id,
                    bundle.rows("translation")
                )
                main_number = bundle.article.get("mainNumber") or order_number
            else:
                main_number = order_number
            outcome.main_number = main_number

            if written.is_main:
                for group, writer in self.relation_writers.items():
                    unresolved = await writer.write(written.product_id, main_number, bundle.rows(group), processed)
                    if unresolved:
                        outcome.unresolved[group] = unresolved

            await self.image_writer.write(written.product_id, main_number, bundle.rows("image"))

            await self.db.commit()
            logger.debug(f"Committed record {bundle.key}")

        except AdapterError as e:
            await self.db.rollback()
            outcome.result = None
            outcome.unresolved = {}
            outcome.error = e

        except (IntegrityError, DataError) as e:
            await self.db.rollback()
            outcome.result = None
            outcome.unresolved = {}
            outcome.error = AdapterError(
                f"Database rejected record {bundle.key.order_number}: {e.orig}",
                context={"order_number": bundle.key.order_number},
                original_exception=e
            )

        except Exception:
            await self.db.rollback()
            logger.exception(f"Fatal error while writing record {bundle.key}")
            raise

        return outcome
