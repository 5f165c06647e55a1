"""
Pydantic schemas for rows entering the write pipeline.
"""

from schemas.rows import (
    BaseRow,
    ProductRow,
    PriceRow,
    CategoryRow,
    ConfiguratorRow,
    PropertyValueRow,
    TranslationRow,
    RelationRow,
    ImageRow,
)

__all__ = [
    "BaseRow",
    "ProductRow",
    "PriceRow",
    "CategoryRow",
    "ConfiguratorRow",
    "PropertyValueRow",
    "TranslationRow",
    "RelationRow",
    "ImageRow",
]
