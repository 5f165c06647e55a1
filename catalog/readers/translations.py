"""
Assemble per-locale translation rows for a set of variants.

Produces exactly one row per (variant, non-default locale). Variant-level
payloads are used where present; the remaining rows are synthesized with
empty fields and then completed from the product-level payload.
"""

from typing import Dict, List, Set, Tuple
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from catalog.collaborators import AttributeSchema
from catalog.translation_fields import (
    LEGACY_FALLBACK_FIELDS,
    decode_payload,
    translation_fields,
)
from models.base import TranslationObjectType, VariantKind
from models.product import Variant
from models.translation import Locale, Translation

logger = logging.getLogger(__name__)


class TranslationAssembler:

    def __init__(self, db_session: AsyncSession, attribute_schema: AttributeSchema):
        self.db = db_session
        self.attribute_schema = attribute_schema

    async def assemble(self, ids: List[int]) -> List[Dict]:
        """
        Build translation rows for the given variant ids.

        Steps:
        1. Load variant-level payloads, ordered by locale
        2. Map storage keys to export fields (core + translatable attributes)
        3. Index rows by variant and locale, remembering product id and kind
        4. Enumerate non-default locales
        5. Synthesize identity-only rows for missing (variant, locale) pairs
        6. Complete rows from product-level payloads
        """
        if not ids:
            return []

        fields = translation_fields(self.attribute_schema)

        result = await self.db.execute(
            select(
                Variant.product_id,
                Variant.id.label("variant_id"),
                Variant.kind,
                Translation.object_data,
                Translation.locale_id,
            )
            .select_from(Variant)
            .outerjoin(
                Translation,
                and_(
                    Translation.object_key == Variant.id,
                    Translation.object_type == TranslationObjectType.VARIANT.value,
                )
            )
            .where(Variant.id.in_(ids))
            .order_by(Translation.locale_id, Variant.id)
        )

        rows: Dict[int, Dict[int, Dict]] = {}
        helpers: Dict[int, Dict] = {}
        for record in result:
            helpers.setdefault(record.variant_id, {
                "articleId": record.product_id,
                "variantKind": record.kind,
            })
            per_locale = rows.setdefault(record.variant_id, {})
            if record.locale_id is None:
                continue

            row = per_locale.setdefault(record.locale_id, {
                "articleId": record.product_id,
                "variantId": record.variant_id,
                "languageId": record.locale_id,
                "variantKind": record.kind,
            })
            data = decode_payload(record.object_data) or {}
            for key, value in data.items():
                if key in fields:
                    row[fields[key]] = value

        locales = (await self.db.execute(
            select(Locale.id).where(Locale.is_default.is_(False)).order_by(Locale.id)
        )).scalars().all()

        assembled: List[Dict] = []
        explicit: Set[Tuple[int, int]] = set()
        for variant_id, per_locale in rows.items():
            for locale_id in locales:
                if locale_id in per_locale:
                    explicit.add((variant_id, locale_id))
                    assembled.append(per_locale[locale_id])
                else:
                    assembled.append({
                        "articleId": helpers[variant_id]["articleId"],
                        "variantId": variant_id,
                        "languageId": locale_id,
                        "variantKind": helpers[variant_id]["variantKind"],
                    })

        for row in assembled:
            for field in fields.values():
                if row.get(field) is None:
                    row[field] = ""

        product_payloads = await self._product_payloads({h["articleId"] for h in helpers.values()})

        for row in assembled:
            raw = product_payloads.get(row["articleId"], {}).get(row["languageId"])
            if raw is None:
                continue

            if int(row["variantKind"]) == VariantKind.MAIN.value:
                data = decode_payload(raw)
                if data is None:
                    continue
                for key, field in fields.items():
                    if key in data and row[field] == "":
                        row[field] = data[key]
                continue

            if (row["variantId"], row["languageId"]) in explicit:
                continue

            data = decode_payload(raw)
            if data is None:
                continue
            for key, field in LEGACY_FALLBACK_FIELDS.items():
                if key in data:
                    row[field] = data[key]

        logger.info(
            f"Assembled {len(assembled)} translation rows for {len(rows)} variants "
            f"and {len(locales)} locales"
        )
        return assembled

    async def _product_payloads(self, product_ids) -> Dict[int, Dict[int, str]]:
        """product id -> locale id -> raw product-level payload"""
        if not product_ids:
            return {}
        result = await self.db.execute(
            select(Translation.object_key, Translation.locale_id, Translation.object_data).where(
                Translation.object_type == TranslationObjectType.PRODUCT.value,
                Translation.object_key.in_(product_ids),
            )
        )
        mapped: Dict[int, Dict[int, str]] = {}
        for record in result:
            mapped.setdefault(record.object_key, {})[record.locale_id] = record.object_data
        return mapped
