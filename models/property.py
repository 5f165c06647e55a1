from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index
from models.base import Base


class PropertyGroup(Base):
    """Filter group assigned to a product (e.g. "Shoes")"""
    __tablename__ = "property_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    position = Column(Integer, default=0, nullable=False)
    comparable = Column(Boolean, default=True, nullable=False)


class PropertyOption(Base):
    """Filter option (e.g. "Color")"""
    __tablename__ = "property_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    filterable = Column(Boolean, default=True, nullable=False)


class PropertyGroupOption(Base):
    """Options available in a group"""
    __tablename__ = "property_group_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("property_groups.id"), nullable=False)
    option_id = Column(Integer, ForeignKey("property_options.id"), nullable=False)

    __table_args__ = (
        Index("idx_property_group_option", "group_id", "option_id", unique=True),
    )


class PropertyValue(Base):
    """Concrete value of an option (e.g. "red")"""
    __tablename__ = "property_values"

    id = Column(Integer, primary_key=True, autoincrement=True)
    option_id = Column(Integer, ForeignKey("property_options.id"), nullable=False)
    value = Column(String(255), nullable=False)
    position = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("idx_property_value_option", "option_id", "value", unique=True),
    )


class ProductPropertyValue(Base):
    """Property values assigned to a product"""
    __tablename__ = "product_property_values"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    value_id = Column(Integer, ForeignKey("property_values.id"), nullable=False)

    __table_args__ = (
        Index("idx_product_property_value", "product_id", "value_id", unique=True),
    )
