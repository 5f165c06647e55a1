"""
SQLAlchemy ORM models for the catalog schema.

Models:
    base: Base declarative class and shared enums (VariantKind, RelationKind, ...)
    product: Product (root entity), Variant, Supplier, Tax, Unit
    pricing: CustomerGroup, Price
    media: Image
    category: Category tree and product assignments
    property: Property groups, options, values and product assignments
    configurator: Configurator sets, groups, options and variant assignments
    relation: Accessory / similar product links
    translation: Locale and per-locale Translation payloads
    attribute: Variant custom fields and their configuration

Usage:
    from models import Product, Variant, Price
    from models.base import VariantKind

Relationships:
    - Product → Variant (one-to-many, exactly one kind=MAIN)
    - Product → Price / Image / ProductCategory / ProductPropertyValue / ProductRelation
    - Variant → VariantConfiguratorOption / VariantAttribute
    - Translation → Product or Variant by (object_type, object_key)
"""

from models.base import (
    Base,
    VariantKind,
    RelationKind,
    TranslationObjectType,
    ConfiguratorSetType,
)
from models.product import Supplier, Tax, Unit, Product, Variant
from models.pricing import CustomerGroup, Price
from models.media import Image
from models.category import Category, ProductCategory
from models.property import (
    PropertyGroup,
    PropertyOption,
    PropertyGroupOption,
    PropertyValue,
    ProductPropertyValue,
)
from models.configurator import (
    ConfiguratorSet,
    ConfiguratorGroup,
    ConfiguratorOption,
    ConfiguratorSetGroup,
    ConfiguratorSetOption,
    VariantConfiguratorOption,
)
from models.relation import ProductRelation
from models.translation import Locale, Translation
from models.attribute import VariantAttribute, AttributeConfiguration

__all__ = [
    "Base",
    "VariantKind",
    "RelationKind",
    "TranslationObjectType",
    "ConfiguratorSetType",
    "Supplier",
    "Tax",
    "Unit",
    "Product",
    "Variant",
    "CustomerGroup",
    "Price",
    "Image",
    "Category",
    "ProductCategory",
    "PropertyGroup",
    "PropertyOption",
    "PropertyGroupOption",
    "PropertyValue",
    "ProductPropertyValue",
    "ConfiguratorSet",
    "ConfiguratorGroup",
    "ConfiguratorOption",
    "ConfiguratorSetGroup",
    "ConfiguratorSetOption",
    "VariantConfiguratorOption",
    "ProductRelation",
    "Locale",
    "Translation",
    "VariantAttribute",
    "AttributeConfiguration",
]
