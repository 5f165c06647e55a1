"""
Read side: id resolution and export projections.
"""

from catalog.readers.id_resolver import EntityFilterResolver, ProductFilter
from catalog.readers.projection import ProjectionBuilder
from catalog.readers.translations import TranslationAssembler
from catalog.readers.category_paths import CategoryPathResolver

__all__ = [
    "EntityFilterResolver",
    "ProductFilter",
    "ProjectionBuilder",
    "TranslationAssembler",
    "CategoryPathResolver",
]
