"""
Interfaces the pipeline needs from the surrounding platform, with the
default implementations used in production.

- MediaResolver: stored media path -> delivery URL
- StreamResolver: product stream id -> matched products
- AttributeSchema: versioned snapshot of the attribute tables
- ErrorModeConfig: strict / lenient write error policy
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from sqlalchemy import column, inspect, select, table
from sqlalchemy.sql.expression import TableClause
from sqlalchemy.ext.asyncio import AsyncSession
import httpx
import logging

from core.config import Settings, settings as default_settings
from core.exceptions import InvalidArgumentError
from models.attribute import AttributeConfiguration, VariantAttribute

logger = logging.getLogger(__name__)

ATTRIBUTE_PREFIX = "attribute"


# ============================================================================
# Media
# ============================================================================

class MediaResolver(ABC):

    @abstractmethod
    def resolve(self, stored_path: str) -> str:
        """Return the absolute delivery URL of a stored media path"""
        pass

    @abstractmethod
    def normalize(self, url: str) -> str:
        """Return the stored media path for a delivery URL or a stored path"""
        pass


class BaseUrlMediaResolver(MediaResolver):
    """Serve media below a fixed base URL"""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or default_settings.MEDIA_BASE_URL).rstrip("/") + "/"

    def resolve(self, stored_path: str) -> str:
        if not stored_path:
            return stored_path
        if stored_path.startswith(("http://", "https://")):
            return stored_path
        return self.base_url + stored_path.lstrip("/")

    def normalize(self, url: str) -> str:
        if url.startswith(self.base_url):
            return url[len(self.base_url):]
        return url


# ============================================================================
# Product streams
# ============================================================================

@dataclass
class ShopContext:
    """Shop the stream criteria are evaluated for"""
    shop_id: int
    locale: Optional[str] = None


@dataclass
class StreamSearchResult:
    """
    Outcome of resolving a product stream.

    has_conditions: False when the stream id produced no base condition,
        i.e. the stream does not exist
    products: matched products keyed by main order number -> product id
    """
    has_conditions: bool
    products: Dict[str, int] = field(default_factory=dict)


class StreamResolver(ABC):

    @abstractmethod
    async def resolve(self, stream_id: int, shop_context: ShopContext) -> StreamSearchResult:
        pass


class HttpStreamResolver(StreamResolver):
    """
    Resolve product streams against the search backend over HTTP.

    Expected response body:
        {"conditions": [...], "products": [{"number": "SW1", "id": 1}, ...]}
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = base_url or default_settings.SEARCH_API_URL
        self.api_key = api_key or default_settings.SEARCH_API_KEY
        self.timeout = timeout or default_settings.SEARCH_TIMEOUT

    async def resolve(self, stream_id: int, shop_context: ShopContext) -> StreamSearchResult:
        if not self.base_url:
            raise InvalidArgumentError(
                "No search backend configured for product streams",
                context={"stream_id": stream_id}
            )

        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.base_url.rstrip('/')}/product-streams/{stream_id}/products"
        logger.info(f"Resolving product stream {stream_id} for shop {shop_context.shop_id}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                url,
                params={"shopId": shop_context.shop_id},
                headers=headers
            )
            if response.status_code == 404:
                return StreamSearchResult(has_conditions=False)
            response.raise_for_status()
            payload = response.json()

        products = {
            str(item["number"]): int(item["id"])
            for item in payload.get("products", [])
        }
        return StreamSearchResult(
            has_conditions=bool(payload.get("conditions")),
            products=products
        )


# ============================================================================
# Attribute schema
# ============================================================================

def to_attribute_column(field_name: str) -> str:
    """attr_one_two -> attributeAttrOneTwo"""
    camel = "".join(part[:1].upper() + part[1:] for part in field_name.split("_") if part)
    return f"{ATTRIBUTE_PREFIX}{camel}"


class AttributeSchema:
    """
    Snapshot of the attribute tables and their translatable columns.

    Built once at startup with `refresh()` and refreshed explicitly after
    schema changes; readers and writers never introspect per call.
    `version` increases with each refresh.
    """

    IGNORED_COLUMNS = {"id", "variant_id", "product_id"}

    def __init__(self):
        self.version = 0
        self._columns: Dict[str, List[str]] = {}
        self._translatable: Dict[str, set] = {}

    @property
    def variant_table(self) -> str:
        return VariantAttribute.__tablename__

    async def refresh(self, session: AsyncSession) -> "AttributeSchema":
        table_name = self.variant_table

        def _columns(sync_session) -> List[str]:
            inspector = inspect(sync_session.connection())
            return [c["name"] for c in inspector.get_columns(table_name)]

        columns = await session.run_sync(_columns)
        self._columns[table_name] = [c for c in columns if c not in self.IGNORED_COLUMNS]

        result = await session.execute(
            select(AttributeConfiguration.column_name).where(
                AttributeConfiguration.table_name == table_name,
                AttributeConfiguration.translatable.is_(True)
            )
        )
        self._translatable[table_name] = {
            name for name in result.scalars().all() if name in self._columns[table_name]
        }

        self.version += 1
        logger.info(
            f"Attribute schema v{self.version}: {len(self._columns[table_name])} columns, "
            f"{len(self._translatable[table_name])} translatable"
        )
        return self

    def list_columns(self, table_name: str) -> List[str]:
        return list(self._columns.get(table_name, []))

    def is_translatable(self, table_name: str, field_name: str) -> bool:
        return field_name in self._translatable.get(table_name, set())

    def translatable_columns(self, table_name: str) -> List[str]:
        return [c for c in self.list_columns(table_name) if self.is_translatable(table_name, c)]

    def table_clause(self, table_name: str) -> TableClause:
        """Lightweight table covering the key columns and every discovered attribute"""
        keys = [column(name) for name in sorted(self.IGNORED_COLUMNS)]
        return table(table_name, *keys, *[column(c) for c in self.list_columns(table_name)])

    def aliases(self, table_name: str) -> Dict[str, str]:
        """Export column name -> storage column name"""
        return {to_attribute_column(c): c for c in self.list_columns(table_name)}


# ============================================================================
# Error mode
# ============================================================================

class ErrorModeConfig:
    """Configuration accessor for the write error policy"""

    ERROR_MODE_KEY = "IMPORT_ERROR_MODE"

    def __init__(self, config: Optional[Settings] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config = config or default_settings
        self.overrides = overrides or {}

    def get(self, key: str) -> Any:
        if key in self.overrides:
            return self.overrides[key]
        return getattr(self.config, key)

    @property
    def strict(self) -> bool:
        return self.get(self.ERROR_MODE_KEY) is False
