"""
Products adapter - the surface the external import/export driver talks to.

Export:
    ids = await adapter.read_record_ids(offset, limit, filter)
    rows = await adapter.read(ids, adapter.get_default_columns())

Import:
    await adapter.write(rows)
    adapter.get_log_messages(), adapter.get_log_state(), adapter.get_unprocessed_data()
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from catalog.collaborators import (
    AttributeSchema,
    BaseUrlMediaResolver,
    ErrorModeConfig,
    HttpStreamResolver,
    MediaResolver,
    StreamResolver,
)
from catalog.orchestrator import BatchWriter
from catalog.readers import columns as registry
from catalog.readers.id_resolver import EntityFilterResolver, ProductFilter
from catalog.readers.projection import ProjectionBuilder
from catalog.results import BatchWriteResult
from core.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class ProductsDbAdapter:
    """
    Facade over the readers and the batch writer for one session.

    The attribute schema must have been refreshed before use. The last
    write result is kept only to answer the log accessors for that batch;
    every `write` call starts from a fresh result.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        attribute_schema: AttributeSchema,
        media_resolver: Optional[MediaResolver] = None,
        stream_resolver: Optional[StreamResolver] = None,
        error_mode: Optional[ErrorModeConfig] = None
    ):
        self.db = db_session
        self.attribute_schema = attribute_schema
        self.media_resolver = media_resolver or BaseUrlMediaResolver()
        self.stream_resolver = stream_resolver or HttpStreamResolver()
        self.error_mode = error_mode or ErrorModeConfig()

        self.default_values: Dict[str, Any] = {}
        self.last_result: Optional[BatchWriteResult] = None

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def read_record_ids(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        filter: Optional[Mapping[str, Any]] = None
    ) -> List[int]:
        resolver = EntityFilterResolver(self.db, self.stream_resolver)
        return await resolver.resolve_ids(filter or ProductFilter(), offset, limit)

    async def read(self, ids: List[int], columns: Dict[str, List[str]]) -> Dict[str, List[Dict]]:
        builder = ProjectionBuilder(self.db, self.media_resolver, self.attribute_schema)
        return await builder.project(ids, columns)

    def get_default_columns(self) -> Dict[str, List[str]]:
        return registry.get_default_columns(self.attribute_schema)

    def get_sections(self) -> List[Dict[str, str]]:
        return [{"id": section, "name": section} for section in registry.SECTIONS]

    def get_columns(self, section: str) -> List[str]:
        if section not in registry.SECTIONS:
            raise InvalidArgumentError(f"Unknown section '{section}'", context={"section": section})
        return list(registry.group_columns(section, self.attribute_schema))

    def get_parent_keys(self, section: str) -> List[str]:
        if section not in registry.PARENT_KEYS:
            raise InvalidArgumentError(f"Unknown section '{section}'", context={"section": section})
        return list(registry.PARENT_KEYS[section])

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def set_default_values(self, values: Optional[Dict[str, Any]]):
        """Values used for article columns missing from the rows of the next `write`"""
        self.default_values = dict(values or {})

    async def write(self, records: Mapping[str, Sequence[Dict[str, Any]]]) -> BatchWriteResult:
        self.last_result = None
        writer = BatchWriter(self.db, self.attribute_schema, self.media_resolver, self.error_mode)
        try:
            self.last_result = await writer.write(records, self.default_values)
        finally:
            self.default_values = {}
        return self.last_result

    def get_log_messages(self) -> List[str]:
        return self.last_result.log_messages if self.last_result else []

    def get_log_state(self) -> Optional[str]:
        return self.last_result.log_state if self.last_result else None

    def get_unprocessed_data(self) -> Dict[str, Dict[str, List[Dict[str, Any]]]]:
        return self.last_result.unprocessed if self.last_result else {}
