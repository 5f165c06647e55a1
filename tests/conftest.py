"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator
from unittest.mock import AsyncMock

from catalog.collaborators import AttributeSchema, BaseUrlMediaResolver, ErrorModeConfig, StreamResolver
from core.database import build_engine, build_session_maker, init_models
from models import (
    AttributeConfiguration,
    Category,
    CustomerGroup,
    Image,
    Locale,
    Price,
    Product,
    ProductCategory,
    Supplier,
    Tax,
    Translation,
    Variant,
    VariantAttribute,
)
from models.base import VariantKind

MEDIA_BASE_URL = "https://cdn.example.com/"


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File backed SQLite database, created from the model metadata"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}", echo=False)
    await init_models(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine):
    return build_session_maker(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def catalog(db_session):
    """
    Seeded catalog:

    Locales: 1 default (de), 2 en, 3 fr
    Categories: Shoes(1) > Men(2) > Boots(3), Shoes > Women(4), Hats(5)
    Products:
        SW1 Leather Boot (main) + SW1.1 (variant) in Boots
        SW2 Sneaker in Men
        SW3 Shoe Polish in Shoes
        SW4 Cap in Hats
    """
    session = db_session

    session.add_all([
        Locale(id=1, name="Deutsch", locale="de_DE", is_default=True),
        Locale(id=2, name="English", locale="en_GB", is_default=False),
        Locale(id=3, name="Francais", locale="fr_FR", is_default=False),
        CustomerGroup(key="EK", name="Shop customers", tax_input=True),
        CustomerGroup(key="H", name="Dealers", tax_input=False),
        AttributeConfiguration(table_name="variant_attributes", column_name="attr1", label="Colour", translatable=True),
        AttributeConfiguration(table_name="variant_attributes", column_name="attr2", label="Material", translatable=False),
    ])

    tax = Tax(tax=19.0, description="19 %")
    supplier = Supplier(name="Acme")
    session.add_all([tax, supplier])
    await session.flush()

    shoes = Category(id=1, name="Shoes", path="")
    men = Category(id=2, name="Men", parent_id=1, path="1")
    boots = Category(id=3, name="Boots", parent_id=2, path="1|2")
    women = Category(id=4, name="Women", parent_id=1, path="1")
    hats = Category(id=5, name="Hats", path="")
    session.add_all([shoes, men, boots, women, hats])
    await session.flush()

    ids = {}
    for key, name, number, category_id in [
        ("boot", "Leather Boot", "SW1", 3),
        ("sneaker", "Sneaker", "SW2", 2),
        ("polish", "Shoe Polish &amp; Care", "SW3", 1),
        ("cap", "Cap", "SW4", 5),
    ]:
        product = Product(name=name, tax_id=tax.id, supplier_id=supplier.id, description=f"{name} description")
        session.add(product)
        await session.flush()

        main = Variant(product_id=product.id, number=number, kind=VariantKind.MAIN.value, in_stock=5)
        session.add(main)
        session.add(ProductCategory(product_id=product.id, category_id=category_id))
        await session.flush()

        ids[key] = {"product_id": product.id, "variant_id": main.id}

    plain = Variant(
        product_id=ids["boot"]["product_id"],
        number="SW1.1",
        kind=VariantKind.VARIANT.value,
        in_stock=None
    )
    session.add(plain)
    await session.flush()
    ids["boot_variant"] = {"product_id": ids["boot"]["product_id"], "variant_id": plain.id}

    session.add_all([
        Price(
            product_id=ids["boot"]["product_id"],
            variant_id=ids["boot"]["variant_id"],
            customer_group_key="EK",
            quantity_from=1,
            price=10.0,
        ),
        Price(
            product_id=ids["boot"]["product_id"],
            variant_id=ids["boot"]["variant_id"],
            customer_group_key="H",
            quantity_from=1,
            price=5.555,
        ),
        Image(product_id=ids["boot"]["product_id"], path="boot", extension="jpg", main=True, position=1),
        VariantAttribute(variant_id=ids["boot"]["variant_id"], product_id=ids["boot"]["product_id"], attr1="red", attr2="leather"),
        Translation(
            object_type="article",
            object_key=ids["boot"]["product_id"],
            locale_id=2,
            object_data='{"txtArtikel": "Leather boot EN", "txtshortdescription": "Short EN"}',
        ),
        Translation(
            object_type="variant",
            object_key=ids["boot_variant"]["variant_id"],
            locale_id=2,
            object_data='{"txtzusatztxt": "Large", "__attribute_attr1": "rouge"}',
        ),
    ])
    await session.commit()
    return ids


@pytest_asyncio.fixture(scope="function")
async def attribute_schema(db_session, catalog) -> AttributeSchema:
    schema = AttributeSchema()
    await schema.refresh(db_session)
    return schema


@pytest.fixture
def media_resolver():
    return BaseUrlMediaResolver(MEDIA_BASE_URL)


@pytest.fixture
def stream_resolver():
    resolver = AsyncMock(spec=StreamResolver)
    return resolver


@pytest.fixture
def lenient_mode():
    return ErrorModeConfig(overrides={"IMPORT_ERROR_MODE": True})


@pytest.fixture
def strict_mode():
    return ErrorModeConfig(overrides={"IMPORT_ERROR_MODE": False})
