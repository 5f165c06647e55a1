"""
Base class for the sub-writers with row validation and lookup helpers
"""

from typing import Any, Dict, List, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.exceptions import AdapterError

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=BaseModel)


class BaseWriter:
    """
    Shared behaviour of all sub-writers.

    Responsibilities:
    - Validate incoming rows against their pydantic schema
    - Turn validation failures into AdapterError for the current record
    - Get-or-create for lookup entities

    Writers never commit; the orchestrator owns the transaction of the
    record being written.
    """

    section: str = ""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    def validate(self, schema: Type[RowT], row: Dict[str, Any]) -> RowT:
        try:
            return schema.model_validate(row)
        except PydanticValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            field = ".".join(str(part) for part in first.get("loc", ()))
            raise AdapterError(
                f"Invalid {self.section or schema.__name__} row: {field} {first.get('msg', str(e))}".strip(),
                context={"section": self.section, "field": field},
                original_exception=e
            )

    def validate_all(self, schema: Type[RowT], rows: List[Dict[str, Any]]) -> List[RowT]:
        return [self.validate(schema, row) for row in rows]

    async def get_or_create(self, model, defaults: Optional[Dict[str, Any]] = None, **lookup):
        """
        Return the entity matching `lookup`, creating it with `defaults` when missing.

        The new entity is flushed so its id is available immediately.
        """
        result = await self.db.execute(select(model).filter_by(**lookup))
        entity = result.scalars().first()
        if entity is not None:
            return entity, False

        entity = model(**lookup, **(defaults or {}))
        self.db.add(entity)
        await self.db.flush()
        logger.debug(f"Created {model.__name__} {lookup}")
        return entity, True

    async def link_once(self, model, **keys):
        """Insert a linking row unless the same link exists"""
        _, created = await self.get_or_create(model, **keys)
        return created
