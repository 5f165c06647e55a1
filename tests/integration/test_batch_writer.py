"""
Integration tests for the per-record transactional batch writer
"""

import json
import pytest
from unittest.mock import patch
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from catalog.orchestrator import BatchWriter
from catalog.results import ERROR_MODE_TRIGGERED
from catalog.writers.price_writer import PriceWriter
from core.exceptions import AdapterError, ValidationError
from models import (
    Category,
    ConfiguratorGroup,
    ConfiguratorOption,
    Image,
    Price,
    Product,
    ProductCategory,
    ProductPropertyValue,
    ProductRelation,
    PropertyValue,
    Translation,
    Variant,
    VariantConfiguratorOption,
)
from models.base import VariantKind


@pytest.fixture
def writer(db_session, attribute_schema, media_resolver, lenient_mode):
    return BatchWriter(db_session, attribute_schema, media_resolver, lenient_mode)


async def variant_by_number(session, number):
    result = await session.execute(select(Variant).where(Variant.number == number))
    return result.scalar_one_or_none()


async def count(session, model, *criteria):
    return await session.scalar(select(func.count()).select_from(model).where(*criteria))


def full_batch():
    return {
        "article": [{
            "orderNumber": "SW100",
            "mainNumber": "SW100",
            "name": "Hiking Boot",
            "tax": 19,
            "supplierName": "Trail Co",
            "inStock": "3",
            "unit": "pcs",
            "attributeAttr1": "green",
        }],
        "price": [
            {"priceGroup": "EK", "price": 11.90, "from": 1, "to": "beliebig", "parentIndexElement": 0},
        ],
        "category": [
            {"categoryPath": "Shoes->Outdoor", "parentIndexElement": 0},
            {"categoryId": 3, "parentIndexElement": 0},
            {"categoryId": "", "categoryPath": "", "parentIndexElement": 0},
        ],
        "configurator": [
            {"configSetName": "Boot sizes", "configGroupName": "Size", "configOptionName": "42", "parentIndexElement": 0},
        ],
        "propertyValue": [
            {"propertyGroupName": "Shoes", "propertyOptionName": "Material", "propertyValueName": "Leather", "parentIndexElement": 0},
        ],
        "translation": [
            {"languageId": 2, "name": "Hiking boot", "additionalText": "Size 42", "attributeAttr1": "vert", "parentIndexElement": 0},
        ],
        "similar": [
            {"ordernumber": "SW2", "parentIndexElement": 0},
        ],
        "accessory": [
            {"ordernumber": "SW3", "parentIndexElement": 0},
            {"ordernumber": "SW999", "parentIndexElement": 0},
        ],
        "image": [
            {"imageUrl": "https://cdn.example.com/media/image/hiking.png", "main": 1, "parentIndexElement": 0},
        ],
    }


@pytest.mark.asyncio
async def test_write_new_product_with_all_groups(writer, db_session, catalog):
    result = await writer.write(full_batch())

    assert result.records_written == 1
    assert result.log_messages == []
    assert result.log_state is None

    variant = await variant_by_number(db_session, "SW100")
    assert variant.kind == VariantKind.MAIN.value
    assert variant.in_stock == 3
    product_id = variant.product_id

    price = await db_session.scalar(select(Price).where(Price.variant_id == variant.id))
    assert price.customer_group_key == "EK"
    assert price.price == pytest.approx(10.0)
    assert price.quantity_to is None

    outdoor = await db_session.scalar(select(Category).where(Category.name == "Outdoor"))
    assert outdoor.parent_id == 1
    assert outdoor.path == "1"
    assert await count(db_session, ProductCategory, ProductCategory.product_id == product_id) == 2

    option = await db_session.scalar(
        select(ConfiguratorOption).join(ConfiguratorGroup).where(ConfiguratorGroup.name == "Size")
    )
    assert option.name == "42"
    assert await count(db_session, VariantConfiguratorOption, VariantConfiguratorOption.variant_id == variant.id) == 1

    value = await db_session.scalar(select(PropertyValue).where(PropertyValue.value == "Leather"))
    assert await count(db_session, ProductPropertyValue, ProductPropertyValue.value_id == value.id) == 1

    product_translation = await db_session.scalar(
        select(Translation.object_data).where(Translation.object_type == "article", Translation.object_key == product_id)
    )
    variant_translation = await db_session.scalar(
        select(Translation.object_data).where(Translation.object_type == "variant", Translation.object_key == variant.id)
    )
    assert json.loads(product_translation) == {"txtArtikel": "Hiking boot"}
    assert json.loads(variant_translation) == {"txtzusatztxt": "Size 42", "__attribute_attr1": "vert"}

    relations = (await db_session.execute(
        select(ProductRelation.kind, ProductRelation.related_product_id).where(ProductRelation.product_id == product_id)
    )).all()
    assert sorted(relations) == sorted([
        ("similar", catalog["sneaker"]["product_id"]),
        ("accessory", catalog["polish"]["product_id"]),
    ])

    image = await db_session.scalar(select(Image).where(Image.product_id == product_id))
    assert (image.path, image.extension, image.main) == ("hiking", "png", True)


@pytest.mark.asyncio
async def test_unresolved_relations_are_reported(writer, catalog):
    result = await writer.write(full_batch())

    unprocessed = result.unprocessed["articles"]
    assert unprocessed["article"] == [{"orderNumber": "SW100", "mainNumber": "SW100", "processed": 1}]
    assert unprocessed["accessory"] == [{"ordernumber": "SW999", "parentIndexElement": 0}]


@pytest.mark.asyncio
async def test_writing_twice_is_idempotent(writer, db_session, catalog):
    await writer.write(full_batch())
    variant = await variant_by_number(db_session, "SW100")
    product_id = variant.product_id

    async def snapshot():
        return {
            "variants": await count(db_session, Variant, Variant.product_id == product_id),
            "prices": await count(db_session, Price, Price.product_id == product_id),
            "categories": await count(db_session, ProductCategory, ProductCategory.product_id == product_id),
            "category_nodes": await count(db_session, Category),
            "images": await count(db_session, Image, Image.product_id == product_id),
            "relations": await count(db_session, ProductRelation, ProductRelation.product_id == product_id),
            "translations": await count(db_session, Translation),
            "properties": await count(db_session, ProductPropertyValue, ProductPropertyValue.product_id == product_id),
            "options": await count(db_session, VariantConfiguratorOption),
        }

    first = await snapshot()
    await writer.write(full_batch())
    second = await snapshot()

    assert first == second
    assert first["prices"] == 1
    assert first["images"] == 1


@pytest.mark.asyncio
async def test_partial_failure_keeps_other_records(writer, db_session, catalog):
    batch = {
        "article": [
            {"orderNumber": "SW300", "name": "First", "tax": 19},
            {"orderNumber": "SW301", "name": "Broken", "tax": 19},
            {"orderNumber": "SW302", "name": "Third", "tax": 19},
        ],
        "price": [
            {"priceGroup": "NOPE", "price": 1, "parentIndexElement": 1},
            {"priceGroup": "EK", "price": 2.38, "parentIndexElement": 2},
        ],
    }

    result = await writer.write(batch)

    assert result.records_written == 2
    assert result.records_failed == 1
    assert len(result.log_messages) == 1
    assert "Customer group by key NOPE not found" in result.log_messages[0]
    assert result.log_state == ERROR_MODE_TRIGGERED

    assert await variant_by_number(db_session, "SW300") is not None
    assert await variant_by_number(db_session, "SW301") is None
    third = await variant_by_number(db_session, "SW302")
    price = await db_session.scalar(select(Price.price).where(Price.variant_id == third.id))
    assert price == pytest.approx(2.0)
    assert await count(db_session, Product, Product.name == "Broken") == 0


@pytest.mark.asyncio
async def test_malformed_root_row_is_recoverable(writer, db_session, catalog):
    batch = {
        "article": [
            {"orderNumber": "SW310", "name": "Fine", "tax": 19},
            {"name": "No number"},
            {"orderNumber": "SW312", "name": "Fine too", "tax": 19},
        ],
    }

    result = await writer.write(batch)

    assert result.records_written == 2
    assert len(result.log_messages) == 1
    assert "orderNumber" in result.log_messages[0]


@pytest.mark.asyncio
async def test_strict_mode_raises(db_session, attribute_schema, media_resolver, strict_mode, catalog):
    writer = BatchWriter(db_session, attribute_schema, media_resolver, strict_mode)
    batch = {
        "article": [
            {"orderNumber": "SW300", "name": "First", "tax": 19},
            {"orderNumber": "SW301", "name": "Broken", "tax": 19},
            {"orderNumber": "SW302", "name": "Third", "tax": 19},
        ],
        "price": [{"priceGroup": "NOPE", "price": 1, "parentIndexElement": 1}],
    }

    with pytest.raises(AdapterError):
        await writer.write(batch)

    assert await variant_by_number(db_session, "SW300") is not None
    assert await variant_by_number(db_session, "SW301") is None
    assert await variant_by_number(db_session, "SW302") is None


@pytest.mark.asyncio
async def test_empty_batch(writer, catalog):
    with pytest.raises(ValidationError):
        await writer.write({"price": [{"price": 1, "parentIndexElement": 0}]})
    with pytest.raises(ValidationError):
        await writer.write({"article": []})


@pytest.mark.asyncio
async def test_fatal_errors_propagate(writer, db_session, catalog):
    batch = {
        "article": [{"orderNumber": "SW400", "name": "Doomed", "tax": 19}],
        "price": [{"price": 1, "parentIndexElement": 0}],
    }

    with patch.object(PriceWriter, "write", side_effect=RuntimeError("connection lost")):
        with pytest.raises(RuntimeError):
            await writer.write(batch)

    assert await variant_by_number(db_session, "SW400") is None


@pytest.mark.asyncio
async def test_new_variant_below_main_number(writer, db_session, catalog):
    result = await writer.write({
        "article": [
            {"orderNumber": "SW1.2", "mainNumber": "SW1", "additionalText": "XL"},
            {"orderNumber": "SW9.1", "mainNumber": "SW9"},
        ],
    })

    variant = await variant_by_number(db_session, "SW1.2")
    assert variant.product_id == catalog["boot"]["product_id"]
    assert variant.kind == VariantKind.VARIANT.value
    assert variant.additional_text == "XL"

    assert result.records_failed == 1
    assert "Variant with number SW9 does not exist" in result.log_messages[0]


@pytest.mark.asyncio
async def test_processed_row_only_writes_relations_and_images(writer, db_session, catalog):
    sneaker = catalog["sneaker"]
    result = await writer.write({
        "article": [{"orderNumber": "SW2", "processed": 1}],
        "price": [{"priceGroup": "EK", "price": 99, "parentIndexElement": 0}],
        "similar": [{"ordernumber": "SW3", "parentIndexElement": 0}],
    })

    assert result.records_written == 1
    assert await count(db_session, Price, Price.variant_id == sneaker["variant_id"]) == 0
    assert await count(
        db_session, ProductRelation,
        ProductRelation.product_id == sneaker["product_id"],
        ProductRelation.related_product_id == catalog["polish"]["product_id"],
    ) == 1


@pytest.mark.asyncio
async def test_relations_only_for_main_variants(writer, db_session, catalog):
    await writer.write({
        "article": [{"orderNumber": "SW1.1"}],
        "similar": [{"ordernumber": "SW2", "parentIndexElement": 0}],
    })

    assert await count(db_session, ProductRelation, ProductRelation.product_id == catalog["boot"]["product_id"]) == 0


@pytest.mark.asyncio
async def test_new_product_needs_name_and_tax(writer, catalog):
    result = await writer.write({
        "article": [
            {"orderNumber": "SW600", "tax": 19},
            {"orderNumber": "SW601", "name": "No tax"},
        ],
    })

    assert result.records_failed == 2
    assert "Product name for SW600 is required" in result.log_messages[0]
    assert "Tax for SW601 is required" in result.log_messages[1]


@pytest.mark.asyncio
async def test_duplicate_price_tiers_fail_only_their_record(writer, db_session, catalog):
    batch = {
        "article": [
            {"orderNumber": "SW300", "name": "First", "tax": 19},
            {"orderNumber": "SW301", "name": "Twice from one", "tax": 19},
            {"orderNumber": "SW302", "name": "Third", "tax": 19},
        ],
        "price": [
            {"priceGroup": "EK", "price": 5, "from": 1, "parentIndexElement": 1},
            {"priceGroup": "EK", "price": 4, "from": 1, "parentIndexElement": 1},
            {"priceGroup": "EK", "price": 2.38, "parentIndexElement": 2},
        ],
    }

    result = await writer.write(batch)

    assert result.records_written == 2
    assert len(result.log_messages) == 1
    assert "overlap at quantity 1" in result.log_messages[0]
    assert await variant_by_number(db_session, "SW300") is not None
    assert await variant_by_number(db_session, "SW301") is None
    assert await variant_by_number(db_session, "SW302") is not None


@pytest.mark.asyncio
async def test_database_constraint_errors_fail_only_their_record(writer, db_session, catalog):
    batch = {
        "article": [
            {"orderNumber": "SW300", "name": "First", "tax": 19},
            {"orderNumber": "SW301", "name": "Rejected", "tax": 19},
        ],
        "price": [{"priceGroup": "EK", "price": 1, "parentIndexElement": 1}],
    }
    rejected = IntegrityError("INSERT INTO prices", {}, Exception("UNIQUE constraint failed: prices"))

    with patch.object(PriceWriter, "write", side_effect=rejected):
        result = await writer.write(batch)

    assert result.records_written == 1
    assert result.records_failed == 1
    assert "Database rejected record SW301" in result.log_messages[0]
    assert "UNIQUE constraint failed" in result.log_messages[0]
    assert await variant_by_number(db_session, "SW300") is not None
    assert await variant_by_number(db_session, "SW301") is None


@pytest.mark.asyncio
async def test_database_constraint_errors_raise_in_strict_mode(
    db_session, attribute_schema, media_resolver, strict_mode, catalog
):
    writer = BatchWriter(db_session, attribute_schema, media_resolver, strict_mode)
    rejected = IntegrityError("INSERT INTO prices", {}, Exception("UNIQUE constraint failed: prices"))

    with patch.object(PriceWriter, "write", side_effect=rejected):
        with pytest.raises(AdapterError, match="Database rejected record SW300"):
            await writer.write({
                "article": [{"orderNumber": "SW300", "name": "First", "tax": 19}],
                "price": [{"priceGroup": "EK", "price": 1, "parentIndexElement": 0}],
            })

    assert await variant_by_number(db_session, "SW300") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", [True, 1.0, "1"])
async def test_processed_flag_variants_skip_dependent_groups(writer, db_session, catalog, flag):
    sneaker = catalog["sneaker"]
    result = await writer.write({
        "article": [{"orderNumber": "SW2", "processed": flag, "name": "Renamed"}],
        "price": [{"priceGroup": "EK", "price": 99, "parentIndexElement": 0}],
    })

    assert result.records_written == 1
    assert result.outcomes[0].result.processed is True
    assert await count(db_session, Price, Price.variant_id == sneaker["variant_id"]) == 0
    product = await db_session.get(Product, sneaker["product_id"])
    assert product.name == "Sneaker"
