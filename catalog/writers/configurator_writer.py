"""
Configurator writer: variant options grouped into the product's configurator set
"""

from typing import Any, Dict, List
import logging

from catalog.writers.base import BaseWriter
from catalog.writers.product_writer import ProductWriterResult
from core.exceptions import AdapterError
from models import (
    ConfiguratorGroup,
    ConfiguratorOption,
    ConfiguratorSet,
    ConfiguratorSetGroup,
    ConfiguratorSetOption,
    Product,
    VariantConfiguratorOption,
)
from models.base import ConfiguratorSetType
from schemas.rows import ConfiguratorRow

logger = logging.getLogger(__name__)


class ConfiguratorWriter(BaseWriter):

    section = "configurator"

    async def write(self, result: ProductWriterResult, rows: List[Dict[str, Any]]):
        if not rows:
            return

        product = await self.db.get(Product, result.product_id)
        for row in self.validate_all(ConfiguratorRow, rows):
            config_set = await self._resolve_set(product, row)
            group = await self._resolve_group(row)
            option = await self._resolve_option(group, row)

            product.configurator_set_id = config_set.id
            await self.link_once(ConfiguratorSetGroup, set_id=config_set.id, group_id=group.id)
            await self.link_once(ConfiguratorSetOption, set_id=config_set.id, option_id=option.id)
            await self.link_once(VariantConfiguratorOption, variant_id=result.variant_id, option_id=option.id)

        await self.db.flush()
        logger.debug(f"Wrote {len(rows)} configurator options for variant {result.variant_id}")

    async def _resolve_set(self, product: Product, row: ConfiguratorRow) -> ConfiguratorSet:
        if row.config_set_id is not None:
            config_set = await self.db.get(ConfiguratorSet, row.config_set_id)
            if config_set is None:
                raise AdapterError(f"Configurator set by id {row.config_set_id} not found")
        elif product.configurator_set_id is not None:
            config_set = await self.db.get(ConfiguratorSet, product.configurator_set_id)
        else:
            name = row.config_set_name or f"Set-{product.id}"
            config_set, _ = await self.get_or_create(
                ConfiguratorSet,
                defaults={"type": ConfiguratorSetType.STANDARD.value, "public": False},
                name=name
            )

        if row.config_set_type is not None:
            config_set.type = row.config_set_type
        return config_set

    async def _resolve_group(self, row: ConfiguratorRow) -> ConfiguratorGroup:
        if row.config_group_id is not None:
            group = await self.db.get(ConfiguratorGroup, row.config_group_id)
            if group is None:
                raise AdapterError(f"Configurator group by id {row.config_group_id} not found")
            return group
        if not row.config_group_name:
            raise AdapterError("Configurator group name or id is required")

        group, _ = await self.get_or_create(
            ConfiguratorGroup,
            defaults={"description": row.config_group_description},
            name=row.config_group_name
        )
        return group

    async def _resolve_option(self, group: ConfiguratorGroup, row: ConfiguratorRow) -> ConfiguratorOption:
        if row.config_option_id is not None:
            option = await self.db.get(ConfiguratorOption, row.config_option_id)
            if option is None:
                raise AdapterError(f"Configurator option by id {row.config_option_id} not found")
            return option
        if not row.config_option_name:
            raise AdapterError("Configurator option name or id is required")

        option, _ = await self.get_or_create(
            ConfiguratorOption,
            defaults={"position": row.config_option_position or 0},
            group_id=group.id,
            name=row.config_option_name
        )
        return option
