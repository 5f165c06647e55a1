"""
Sub-writers applied to one root record inside its transaction.

Writers:
    product_writer: product / variant master data (ProductWriter, ProductWriterResult)
    price_writer: price tiers per customer group
    category_writer: category assignments by id or path
    configurator_writer: configurator set, groups, options
    property_writer: filter group, options, values
    translation_writer: per-locale translation payloads
    relation_writer: accessory / similar links
    image_writer: product images
"""

from catalog.writers.base import BaseWriter
from catalog.writers.product_writer import ProductWriter, ProductWriterResult
from catalog.writers.price_writer import PriceWriter
from catalog.writers.category_writer import CategoryWriter
from catalog.writers.configurator_writer import ConfiguratorWriter
from catalog.writers.property_writer import PropertyWriter
from catalog.writers.translation_writer import TranslationWriter
from catalog.writers.relation_writer import RelationWriter
from catalog.writers.image_writer import ImageWriter

__all__ = [
    "BaseWriter",
    "ProductWriter",
    "ProductWriterResult",
    "PriceWriter",
    "CategoryWriter",
    "ConfiguratorWriter",
    "PropertyWriter",
    "TranslationWriter",
    "RelationWriter",
    "ImageWriter",
]
