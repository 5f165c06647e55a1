"""
Integration tests for schema initialisation
"""

import pytest
from unittest.mock import patch
from sqlalchemy import inspect

from catalog.init_db import init_database
from core.database import build_engine


@pytest.mark.asyncio
async def test_init_database_configures_logging_and_creates_tables(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}"

    with patch("catalog.init_db.setup_logging") as setup_logging:
        schema = await init_database(url)

    setup_logging.assert_called_once()
    assert schema.version == 1
    assert schema.list_columns(schema.variant_table)

    engine = build_engine(url, echo=False)
    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    await engine.dispose()

    assert "variants" in tables
    assert "prices" in tables


@pytest.mark.asyncio
async def test_init_database_is_repeatable(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}"

    with patch("catalog.init_db.setup_logging"):
        await init_database(url)
        schema = await init_database(url)

    assert schema.version == 1
