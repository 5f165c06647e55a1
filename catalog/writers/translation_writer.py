"""
Translation writer: merges per-locale payloads of a product and its variant
"""

from typing import Any, Dict, List
from sqlalchemy import select
import logging

from catalog.collaborators import AttributeSchema
from catalog.translation_fields import (
    ATTRIBUTE_STORAGE_PREFIX,
    VARIANT_STORAGE_KEYS,
    decode_payload,
    encode_payload,
    translation_fields,
)
from catalog.writers.base import BaseWriter
from core.exceptions import AdapterError
from models import Locale, Translation
from models.base import TranslationObjectType
from schemas.rows import TranslationRow

logger = logging.getLogger(__name__)


class TranslationWriter(BaseWriter):
    """
    Product level fields are only written through the main variant; variant
    level fields (additional text, pack unit, translatable attributes) are
    written for every variant. Stored payloads are merged, so fields not
    present in a row keep their translation.
    """

    section = "translation"

    def __init__(self, db_session, attribute_schema: AttributeSchema):
        super().__init__(db_session)
        self.attribute_schema = attribute_schema

    async def write(self, product_id: int, variant_id: int, main_variant_id: int, rows: List[Dict[str, Any]]):
        if not rows:
            return

        # export field -> storage key
        storage_keys = {field: key for key, field in translation_fields(self.attribute_schema).items()}

        for translation in self.validate_all(TranslationRow, rows):
            locale = await self.db.get(Locale, translation.language_id)
            if locale is None:
                raise AdapterError(
                    f"Language with id {translation.language_id} not found",
                    context={"variant_id": variant_id, "language_id": translation.language_id}
                )
            if locale.is_default:
                raise AdapterError(
                    f"Language with id {translation.language_id} is the default language and can not be translated",
                    context={"variant_id": variant_id, "language_id": translation.language_id}
                )

            values = translation.model_dump(by_alias=True, exclude_unset=True)
            product_payload: Dict[str, Any] = {}
            variant_payload: Dict[str, Any] = {}
            for field, value in values.items():
                key = storage_keys.get(field)
                if key is None:
                    continue
                if key in VARIANT_STORAGE_KEYS or key.startswith(ATTRIBUTE_STORAGE_PREFIX):
                    variant_payload[key] = value
                else:
                    product_payload[key] = value

            if variant_id == main_variant_id and product_payload:
                await self._merge(TranslationObjectType.PRODUCT, product_id, locale.id, product_payload)
            if variant_payload:
                await self._merge(TranslationObjectType.VARIANT, variant_id, locale.id, variant_payload)

        await self.db.flush()

    async def _merge(self, object_type: TranslationObjectType, object_key: int, locale_id: int, payload: Dict[str, Any]):
        existing = await self.db.scalar(
            select(Translation).where(
                Translation.object_type == object_type.value,
                Translation.object_key == object_key,
                Translation.locale_id == locale_id,
            )
        )
        if existing is None:
            self.db.add(Translation(
                object_type=object_type.value,
                object_key=object_key,
                locale_id=locale_id,
                object_data=encode_payload(payload),
            ))
            return

        data = decode_payload(existing.object_data) or {}
        data.update(payload)
        existing.object_data = encode_payload(data)
        logger.debug(f"Merged {object_type.value} translation {object_key} for locale {locale_id}")
