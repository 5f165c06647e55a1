"""
Catalog transfer: export projections and transactional batch writes.

Modules:
    adapter: ProductsDbAdapter facade used by the import/export driver
    collaborators: media, product stream, attribute schema, error mode
    readers: id resolution, projections, category paths, translations
    orchestrator: per-record transactional batch writer
    writers: sub-writers for every row group
    results: RecordKey, RecordOutcome, BatchWriteResult
"""

from catalog.adapter import ProductsDbAdapter
from catalog.collaborators import (
    AttributeSchema,
    BaseUrlMediaResolver,
    ErrorModeConfig,
    HttpStreamResolver,
    ShopContext,
    StreamSearchResult,
)
from catalog.results import BatchWriteResult, RecordKey

__all__ = [
    "ProductsDbAdapter",
    "AttributeSchema",
    "BaseUrlMediaResolver",
    "ErrorModeConfig",
    "HttpStreamResolver",
    "ShopContext",
    "StreamSearchResult",
    "BatchWriteResult",
    "RecordKey",
]
