from sqlalchemy import Column, String, Integer, Boolean, Text, ForeignKey, Index
from models.base import Base, ConfiguratorSetType


class ConfiguratorSet(Base):
    """Set of groups/options a product's variants are built from"""
    __tablename__ = "configurator_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    public = Column(Boolean, default=False, nullable=False)
    type = Column(Integer, default=ConfiguratorSetType.STANDARD.value, nullable=False)


class ConfiguratorGroup(Base):
    """Configurator dimension (e.g. "Size")"""
    __tablename__ = "configurator_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    position = Column(Integer, default=0, nullable=False)


class ConfiguratorOption(Base):
    """Value of a configurator group (e.g. "XL")"""
    __tablename__ = "configurator_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("configurator_groups.id"), nullable=False)
    name = Column(String(255), nullable=False)
    position = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("idx_configurator_option_group_name", "group_id", "name", unique=True),
    )


class ConfiguratorSetGroup(Base):
    __tablename__ = "configurator_set_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    set_id = Column(Integer, ForeignKey("configurator_sets.id"), nullable=False)
    group_id = Column(Integer, ForeignKey("configurator_groups.id"), nullable=False)

    __table_args__ = (
        Index("idx_configurator_set_group", "set_id", "group_id", unique=True),
    )


class ConfiguratorSetOption(Base):
    __tablename__ = "configurator_set_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    set_id = Column(Integer, ForeignKey("configurator_sets.id"), nullable=False)
    option_id = Column(Integer, ForeignKey("configurator_options.id"), nullable=False)

    __table_args__ = (
        Index("idx_configurator_set_option", "set_id", "option_id", unique=True),
    )


class VariantConfiguratorOption(Base):
    """Options describing one variant"""
    __tablename__ = "variant_configurator_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    variant_id = Column(Integer, ForeignKey("variants.id"), nullable=False)
    option_id = Column(Integer, ForeignKey("configurator_options.id"), nullable=False)

    __table_args__ = (
        Index("idx_variant_configurator_option", "variant_id", "option_id", unique=True),
    )
