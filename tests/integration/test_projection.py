"""
Integration tests for export projections
"""

import re
import pytest

from catalog.readers.projection import ProjectionBuilder
from core.exceptions import InvalidArgumentError


@pytest.fixture
def builder(db_session, media_resolver, attribute_schema):
    return ProjectionBuilder(db_session, media_resolver, attribute_schema)


@pytest.mark.asyncio
async def test_default_columns_include_attributes(builder):
    columns = builder.default_columns()

    assert "attributeAttr1" in columns["article"]
    assert "attributeAttr2" in columns["article"]
    assert "attributeAttr1" in columns["translation"]
    assert "attributeAttr2" not in columns["translation"]
    assert set(columns) == {
        "article", "price", "image", "propertyValue", "similar",
        "accessory", "configurator", "category", "translation",
    }


@pytest.mark.asyncio
async def test_article_rows(builder, catalog):
    ids = [catalog["boot_variant"]["variant_id"], catalog["boot"]["variant_id"], catalog["polish"]["variant_id"]]

    result = await builder.project(ids, builder.default_columns())
    articles = result["article"]

    # Main variants first
    assert [row["orderNumber"] for row in articles] == ["SW1", "SW3", "SW1.1"]
    boot, polish, variant = articles

    assert polish["name"] == "Shoe Polish & Care"
    assert boot["attributeAttr1"] == "red"
    assert boot["supplierName"] == "Acme"
    assert boot["tax"] == 19.0
    assert variant["mainNumber"] == "SW1"
    assert variant["inStock"] == "0"
    assert boot["inStock"] == 5
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", boot["date"])
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", boot["changeTime"])


@pytest.mark.asyncio
async def test_price_rows_are_gross_for_tax_inclusive_groups(builder, catalog):
    result = await builder.project([catalog["boot"]["variant_id"]], {"article": ["name"]})

    prices = {row["priceGroup"]: row for row in result["price"]}
    assert prices["EK"]["price"] == 11.9
    assert prices["H"]["price"] == 5.56
    assert "taxInput" not in prices["EK"]
    assert "taxRate" not in prices["EK"]
    assert prices["EK"]["parentIndexElement"] == 0


@pytest.mark.asyncio
async def test_image_rows(builder, catalog):
    ids = [catalog["boot"]["variant_id"], catalog["boot_variant"]["variant_id"]]

    result = await builder.project(ids, {"article": ["name"]})

    assert len(result["image"]) == 1
    image = result["image"][0]
    assert image["imageUrl"] == "https://cdn.example.com/media/image/boot.jpg"
    assert image["main"] == 1
    assert image["parentIndexElement"] == 0


@pytest.mark.asyncio
async def test_category_paths(builder, catalog):
    result = await builder.project([catalog["boot"]["variant_id"]], {"article": ["name"]})

    assert result["category"] == [{
        "categoryId": 3,
        "categoryPath": "Shoes->Men->Boots",
        "articleId": catalog["boot"]["product_id"],
        "parentIndexElement": 0,
    }]


@pytest.mark.asyncio
async def test_translation_rows(builder, catalog):
    ids = [catalog["boot"]["variant_id"], catalog["boot_variant"]["variant_id"]]

    result = await builder.project(ids, {"article": ["name"], "translation": ["name", "additionalText"]})

    assert len(result["translation"]) == 4
    row = next(
        r for r in result["translation"]
        if r["variantId"] == catalog["boot_variant"]["variant_id"] and r["languageId"] == 2
    )
    assert row["additionalText"] == "Large"
    assert "description" not in row
    assert row["parentIndexElement"] == 1


@pytest.mark.asyncio
async def test_requested_columns_only(builder, catalog):
    result = await builder.project([catalog["sneaker"]["variant_id"]], {"article": ["name"]})

    assert result["article"] == [{
        "articleId": catalog["sneaker"]["product_id"],
        "variantId": catalog["sneaker"]["variant_id"],
        "orderNumber": "SW2",
        "name": "Sneaker",
    }]


@pytest.mark.asyncio
async def test_unknown_column(builder, catalog):
    with pytest.raises(InvalidArgumentError):
        await builder.project([catalog["boot"]["variant_id"]], {"article": ["doesNotExist"]})


@pytest.mark.asyncio
async def test_empty_arguments(builder, catalog):
    with pytest.raises(InvalidArgumentError):
        await builder.project([], builder.default_columns())
    with pytest.raises(InvalidArgumentError):
        await builder.project([catalog["boot"]["variant_id"]], {})
