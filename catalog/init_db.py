"""
Create the catalog schema and report the discovered attribute columns.

    python -m catalog.init_db [DATABASE_URL]
"""

from typing import Optional
import asyncio
import logging
import sys

from catalog.collaborators import AttributeSchema
from core.database import build_engine, build_session_maker, init_models
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def init_database(url: Optional[str] = None) -> AttributeSchema:
    setup_logging()
    logger.info("Connecting to database...")
    engine = build_engine(url)
    try:
        await init_models(engine)
        async with build_session_maker(engine)() as session:
            schema = await AttributeSchema().refresh(session)
    finally:
        await engine.dispose()
    return schema


if __name__ == "__main__":
    asyncio.run(init_database(sys.argv[1] if len(sys.argv) > 1 else None))
