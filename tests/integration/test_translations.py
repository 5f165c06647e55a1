"""
Integration tests for translation row assembly
"""

import logging
import pytest

from catalog.readers.translations import TranslationAssembler
from models import Translation

TRANSLATABLE = [
    "name", "description", "descriptionLong", "metaTitle", "keywords",
    "packUnit", "additionalText", "shippingTime", "attributeAttr1",
]


def by_locale(rows, variant_id):
    return {row["languageId"]: row for row in rows if row["variantId"] == variant_id}


@pytest.mark.asyncio
async def test_one_row_per_variant_and_locale(db_session, catalog, attribute_schema):
    variant_id = catalog["boot_variant"]["variant_id"]

    rows = await TranslationAssembler(db_session, attribute_schema).assemble([variant_id])

    assert len(rows) == 2
    locales = by_locale(rows, variant_id)
    assert set(locales) == {2, 3}

    assert locales[2]["additionalText"] == "Large"
    assert locales[2]["attributeAttr1"] == "rouge"
    for field in TRANSLATABLE:
        assert locales[3][field] == ""


@pytest.mark.asyncio
async def test_main_variant_uses_product_payload(db_session, catalog, attribute_schema):
    variant_id = catalog["boot"]["variant_id"]

    rows = await TranslationAssembler(db_session, attribute_schema).assemble([variant_id])

    locales = by_locale(rows, variant_id)
    assert locales[2]["name"] == "Leather boot EN"
    assert locales[2]["description"] == "Short EN"
    assert locales[2]["articleId"] == catalog["boot"]["product_id"]
    assert locales[2]["variantKind"] == 1
    assert locales[3]["name"] == ""


@pytest.mark.asyncio
async def test_plain_variant_falls_back_to_product_payload(db_session, catalog, attribute_schema):
    db_session.add(Translation(
        object_type="article",
        object_key=catalog["boot"]["product_id"],
        locale_id=3,
        object_data='{"txtArtikel": "Botte", "txtzusatztxt": "ignored"}',
    ))
    await db_session.commit()
    variant_id = catalog["boot_variant"]["variant_id"]

    rows = await TranslationAssembler(db_session, attribute_schema).assemble([variant_id])

    locales = by_locale(rows, variant_id)
    assert locales[3]["name"] == "Botte"
    assert locales[3]["additionalText"] == ""
    # An explicit variant translation is never completed from the product
    assert locales[2]["name"] == ""


@pytest.mark.asyncio
async def test_undecodable_product_payload_is_skipped(db_session, catalog, attribute_schema, caplog):
    db_session.add(Translation(
        object_type="article",
        object_key=catalog["sneaker"]["product_id"],
        locale_id=2,
        object_data="{not json",
    ))
    await db_session.commit()
    variant_id = catalog["sneaker"]["variant_id"]

    with caplog.at_level(logging.WARNING):
        rows = await TranslationAssembler(db_session, attribute_schema).assemble([variant_id])

    locales = by_locale(rows, variant_id)
    assert locales[2]["name"] == ""
    assert "undecodable translation payload" in caplog.text


@pytest.mark.asyncio
async def test_no_ids(db_session, catalog, attribute_schema):
    assert await TranslationAssembler(db_session, attribute_schema).assemble([]) == []
