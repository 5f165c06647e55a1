"""
Mapping between translation storage keys and export field names.

Translation payloads are stored as JSON objects keyed by the platform's
storage names; exports and imports use the readable names.
"""

from typing import Dict, Optional
import json
import logging

from catalog.collaborators import AttributeSchema, to_attribute_column

logger = logging.getLogger(__name__)

ATTRIBUTE_STORAGE_PREFIX = "__attribute_"

# storage key -> export field
CORE_TRANSLATION_FIELDS = {
    "metaTitle": "metaTitle",
    "txtArtikel": "name",
    "txtkeywords": "keywords",
    "txtpackunit": "packUnit",
    "txtzusatztxt": "additionalText",
    "txtshortdescription": "description",
    "txtlangbeschreibung": "descriptionLong",
    "txtshippingtime": "shippingTime",
}

# Fields a plain variant borrows from its product's translation when it has none of its own
LEGACY_FALLBACK_FIELDS = {
    "txtArtikel": "name",
    "txtshortdescription": "description",
    "txtlangbeschreibung": "descriptionLong",
    "metaTitle": "metaTitle",
    "txtkeywords": "keywords",
    "txtshippingtime": "shippingTime",
}

# Fields stored on the variant-level payload; everything else belongs to the product
VARIANT_STORAGE_KEYS = {"txtzusatztxt", "txtpackunit"}


def translation_fields(schema: AttributeSchema) -> Dict[str, str]:
    """All translatable fields, core ones plus translatable attributes"""
    fields = dict(CORE_TRANSLATION_FIELDS)
    for column in schema.translatable_columns(schema.variant_table):
        fields[ATTRIBUTE_STORAGE_PREFIX + column] = to_attribute_column(column)
    return fields


def decode_payload(raw: Optional[str]) -> Optional[dict]:
    """
    Decode a stored translation payload.

    Returns None for empty or undecodable payloads; undecodable ones are
    logged so corrupted rows stay visible.
    """
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Skipping undecodable translation payload: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Skipping translation payload of type {type(data).__name__}")
        return None
    return data


def encode_payload(data: dict) -> str:
    return json.dumps(data, ensure_ascii=False, sort_keys=True)
